"""Tree walker -- recursive file enumeration under an extracted archive.

Both walkers recurse with ``os.scandir`` and return paths relative to a
base directory in POSIX form.  Order is filesystem-enumeration order;
callers that need a stable order sort the result themselves.

Excluded directory names are checked at every depth, so nothing below a
``node_modules`` (or any other excluded name) is ever yielded.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Collection, Iterable

from zipreview.errors import FilesystemError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exclusion policy
# ---------------------------------------------------------------------------

DEFAULT_EXCLUDED_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        ".svn",
        ".hg",
        "dist",
        "build",
        "coverage",
        ".next",
        ".nuxt",
        ".cache",
        ".turbo",
        "out",
        "__MACOSX",
        ".idea",
        ".vscode",
    }
)


def exclusion_set(extra: Iterable[str] = ()) -> frozenset[str]:
    """Return the default exclusions extended with *extra* names."""
    return DEFAULT_EXCLUDED_DIRS | frozenset(e for e in extra if e)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def list_dir(directory: Path) -> list[os.DirEntry]:
    """List *directory*, converting OS failures to ``FilesystemError``."""
    try:
        with os.scandir(directory) as it:
            return list(it)
    except OSError as exc:
        raise FilesystemError(str(directory), exc.strerror or str(exc)) from exc


def _relative(path: str, base_dir: Path) -> str:
    return Path(os.path.relpath(path, base_dir)).as_posix()


def _walk(
    directory: Path,
    base_dir: Path,
    exclude: Collection[str],
    out: list[str],
    keep=None,
) -> None:
    for entry in list_dir(directory):
        if entry.is_dir(follow_symlinks=False):
            if entry.name in exclude:
                continue
            _walk(Path(entry.path), base_dir, exclude, out, keep)
        elif keep is None or keep(entry.name):
            out.append(_relative(entry.path, base_dir))


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def walk(
    root: str | Path,
    base_dir: str | Path,
    exclude: Collection[str] = DEFAULT_EXCLUDED_DIRS,
) -> list[str]:
    """Return every file under *root* as a path relative to *base_dir*.

    Raises
    ------
    FilesystemError
        If any directory on the way cannot be read.
    """
    out: list[str] = []
    _walk(Path(root), Path(base_dir), exclude, out)
    return out


def walk_filtered(
    root: str | Path,
    base_dir: str | Path,
    exclude: Collection[str] = DEFAULT_EXCLUDED_DIRS,
    *,
    extensions: Collection[str] = (),
    name_prefix: str | None = None,
) -> list[str]:
    """Like :func:`walk`, but keep only matching leaves.

    A file is kept when its extension (lower-cased, with the dot) is in
    *extensions*, or when its basename starts with *name_prefix*.  The
    prefix exists for environment files such as ``.env.local`` whose names
    carry no conventional extension.
    """
    wanted = {e.lower() for e in extensions}

    def keep(name: str) -> bool:
        if name_prefix and name.startswith(name_prefix):
            return True
        return os.path.splitext(name)[1].lower() in wanted

    out: list[str] = []
    _walk(Path(root), Path(base_dir), exclude, out, keep)
    logger.debug("Collected %d file(s) under %s", len(out), root)
    return out
