"""Dependency extractor -- read declared dependencies from ``package.json``.

Best-effort enrichment: any I/O or parse problem yields an empty manifest
and a warning, never an exception.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from zipreview.schemas import DependencyManifest

logger = logging.getLogger(__name__)


def _section(pkg_json: dict, key: str) -> dict[str, str]:
    """Return one dependency section as ``{name: version}``.

    Anything that is not a JSON object is treated as absent.
    """
    raw: Any = pkg_json.get(key)
    if not isinstance(raw, dict):
        return {}
    return {str(name): str(version) for name, version in raw.items()}


def parse_manifest(content: str) -> DependencyManifest:
    """Parse ``package.json`` text into a manifest (empty on failure)."""
    try:
        pkg_json = json.loads(content)
    except ValueError as exc:
        logger.warning("Unparsable package.json: %s", exc)
        return DependencyManifest.empty()
    if not isinstance(pkg_json, dict):
        logger.warning("package.json is not a JSON object (%s)", type(pkg_json).__name__)
        return DependencyManifest.empty()
    return DependencyManifest(
        dependencies=_section(pkg_json, "dependencies"),
        dev_dependencies=_section(pkg_json, "devDependencies"),
    )


def extract_dependencies(descriptor_path: str | Path) -> DependencyManifest:
    """Read *descriptor_path* and return its declared dependencies."""
    try:
        content = Path(descriptor_path).read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", descriptor_path, exc)
        return DependencyManifest.empty()
    manifest = parse_manifest(content)
    logger.info(
        "Dependencies: %d runtime, %d dev",
        len(manifest.dependencies),
        len(manifest.dev_dependencies),
    )
    return manifest
