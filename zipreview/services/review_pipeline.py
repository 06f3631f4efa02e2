"""Review pipeline -- per-request orchestration from archive to result.

    extract -> locate root -> dependencies -> walk -> env files
            -> heuristic scan -> report

Each call owns a private extraction directory that is removed when the
call returns or raises.  Structural failures (bad archive, unreadable
root, no descriptor) propagate as ``ReviewError`` subclasses; everything
heuristic degrades to empty values inside the individual services.

``analyze_archive`` is blocking and meant to run in a worker thread;
``review_archive`` awaits the text generator once per file.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from zipreview.clients.archive import (
    create_workspace,
    extract_archive,
    extraction_workspace,
    remove_workspace,
)
from zipreview.clients.llm_client import TextGenerator
from zipreview.config import Settings
from zipreview.errors import DescriptorNotFoundError
from zipreview.schemas import QualityReport, ReviewResponse
from zipreview.services.ai_review import REVIEW_EXTENSIONS, review_files
from zipreview.services.dependency_extractor import extract_dependencies
from zipreview.services.env_detector import ENV_FILE_PREFIX, detect_env_files
from zipreview.services.heuristic_scanner import CODE_EXTENSIONS, scan
from zipreview.services.project_locator import DESCRIPTOR_FILENAME, locate_descriptor
from zipreview.services.report_generator import generate_report
from zipreview.services.tree_walker import exclusion_set, walk_filtered

logger = logging.getLogger(__name__)

# Code files plus descriptor/config files; the scanner narrows this down
# to CODE_EXTENSIONS itself.
COLLECT_EXTENSIONS: frozenset[str] = CODE_EXTENSIONS | {".json"}


def analyze_archive(
    archive_path: str | Path,
    settings: Settings,
    description: str | None = None,
) -> QualityReport:
    """Run the heuristic pipeline over one uploaded archive.

    Raises
    ------
    DescriptorNotFoundError
        The archive holds no ``package.json``.
    ArchiveExtractionError, FilesystemError
        Structural failures that abort the request.
    """
    exclude = exclusion_set(settings.EXTRA_EXCLUDED_DIRS)

    with extraction_workspace(settings.EXTRACT_DIR) as workdir:
        extract_archive(archive_path, workdir)

        descriptor = locate_descriptor(workdir, exclude)
        if descriptor is None:
            raise DescriptorNotFoundError(DESCRIPTOR_FILENAME)
        project_root = descriptor.parent

        manifest = extract_dependencies(descriptor)
        files = walk_filtered(
            project_root,
            project_root,
            exclude,
            extensions=COLLECT_EXTENSIONS,
            name_prefix=ENV_FILE_PREFIX,
        )
        env_files = detect_env_files(files)
        result = scan(
            project_root,
            files,
            sample_limit=settings.SAMPLE_LIMIT,
            long_line_threshold=settings.LONG_LINE_THRESHOLD,
        )

        report = generate_report(
            manifest,
            result.identifiers,
            result.readability,
            env_files,
            result.analyzed_files,
            files=files,
            description=description,
        )

    logger.info(
        "[Review] Report ready: %d file(s), %d improvement(s), rating %s",
        len(files), len(report.improvements), report.rating,
    )
    return report


def _collect_for_review(workdir: Path, settings: Settings) -> tuple[Path, list[str]]:
    """Pick the review root and the files under it (blocking)."""
    exclude = exclusion_set(settings.EXTRA_EXCLUDED_DIRS)
    descriptor = locate_descriptor(workdir, exclude)
    root = descriptor.parent if descriptor is not None else workdir
    files = walk_filtered(root, root, exclude, extensions=REVIEW_EXTENSIONS)
    return root, files


async def review_archive(
    archive_path: str | Path,
    settings: Settings,
    generator: TextGenerator,
    prompt: str | None = None,
) -> ReviewResponse:
    """Extract an archive and collect LLM review text for its files.

    A descriptor is not required here: without one the whole extraction
    directory is reviewed.
    """
    workdir = await asyncio.to_thread(create_workspace, settings.EXTRACT_DIR)
    try:
        await asyncio.to_thread(extract_archive, archive_path, workdir)
        root, files = await asyncio.to_thread(_collect_for_review, workdir, settings)
        summary = await review_files(
            root,
            files,
            generator,
            focus=prompt,
            max_files=settings.REVIEW_MAX_FILES,
        )
    finally:
        await asyncio.to_thread(remove_workspace, workdir)
    return ReviewResponse(summary=summary)
