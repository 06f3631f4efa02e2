"""Project root locator -- find the ``package.json`` inside an extracted archive.

Archives are often zipped with an enclosing folder (``my-app/package.json``)
or several levels deep, so the descriptor is searched for depth-first.

The first match in traversal order wins.  When an archive holds more than
one descriptor (e.g. nested example projects) the result depends on
directory enumeration order; ``descriptor_candidates`` lists all of them
sorted by depth for callers that need a deterministic choice.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Collection

from zipreview.errors import FilesystemError
from zipreview.services.tree_walker import DEFAULT_EXCLUDED_DIRS, list_dir

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAME = "package.json"


def _search(
    directory: Path,
    exclude: Collection[str],
    filename: str,
    *,
    strict: bool = False,
) -> Path | None:
    try:
        entries = list_dir(directory)
    except FilesystemError as exc:
        if strict:
            raise
        logger.warning("Skipping unreadable directory while locating %s: %s", filename, exc.details)
        return None

    subdirs: list[Path] = []
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            if entry.name not in exclude:
                subdirs.append(Path(entry.path))
        elif entry.name == filename:
            return Path(entry.path)

    for sub in subdirs:
        found = _search(sub, exclude, filename)
        if found is not None:
            return found
    return None


def locate_descriptor(
    root: str | Path,
    exclude: Collection[str] = DEFAULT_EXCLUDED_DIRS,
    filename: str = DESCRIPTOR_FILENAME,
) -> Path | None:
    """Return the first *filename* found under *root*, or ``None``.

    ``None`` means the archive holds no descriptor; that is an expected,
    user-facing outcome and not an error.  Only an unreadable *root*
    raises ``FilesystemError``.
    """
    root = Path(root)
    found = _search(root, exclude, filename, strict=True)
    if found is None:
        logger.info("No %s found under %s", filename, root)
    else:
        logger.info("Located project descriptor at %s", found)
    return found


def descriptor_candidates(
    root: str | Path,
    exclude: Collection[str] = DEFAULT_EXCLUDED_DIRS,
    filename: str = DESCRIPTOR_FILENAME,
) -> list[Path]:
    """Return every *filename* under *root*, shallowest first.

    Ties at the same depth are broken by path so the order is stable.
    """
    root = Path(root)
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in exclude]
        if filename in filenames:
            found.append(Path(dirpath) / filename)
    return sorted(found, key=lambda p: (len(p.relative_to(root).parts), p.as_posix()))
