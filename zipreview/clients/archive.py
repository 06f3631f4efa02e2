"""Archive client -- request-scoped storage and zip extraction.

Each request gets its own extraction directory under ``EXTRACT_DIR`` named
after a nanosecond timestamp plus a random suffix, so concurrent requests
never share (or clean up) each other's files.
"""

from __future__ import annotations

import logging
import secrets
import shutil
import time
import zipfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from zipreview.errors import ArchiveExtractionError

logger = logging.getLogger(__name__)


def _unique_name() -> str:
    return f"{time.time_ns()}-{secrets.token_hex(4)}"


def remove_path(path: str | Path) -> None:
    """Delete a file or directory tree; missing paths are ignored."""
    path = Path(path)
    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink(missing_ok=True)
    except OSError as exc:
        logger.warning("[Cleanup] Could not remove %s: %s", path, exc)


def create_workspace(parent: str | Path) -> Path:
    """Create a fresh, uniquely named extraction directory under *parent*."""
    workdir = Path(parent) / _unique_name()
    workdir.mkdir(parents=True, exist_ok=False)
    logger.debug("[Review] Created extraction directory %s", workdir)
    return workdir


def remove_workspace(workdir: Path) -> None:
    remove_path(workdir)
    logger.info("[Cleanup] Removed extraction directory %s", workdir.name)


@contextmanager
def extraction_workspace(parent: str | Path) -> Iterator[Path]:
    """Create an isolated extraction directory and remove it on exit.

    Removal happens on both the success and the failure path.
    """
    workdir = create_workspace(parent)
    try:
        yield workdir
    finally:
        remove_workspace(workdir)


def save_upload(data: bytes, upload_dir: str | Path, suffix: str = ".zip") -> Path:
    """Write uploaded bytes to a uniquely named file under *upload_dir*."""
    directory = Path(upload_dir)
    directory.mkdir(parents=True, exist_ok=True)
    target = directory / f"{_unique_name()}{suffix}"
    target.write_bytes(data)
    return target


def extract_archive(archive_path: str | Path, dest: str | Path) -> int:
    """Extract every entry of the zip at *archive_path* into *dest*.

    Entries that would land outside *dest* (absolute paths, ``..``
    segments) abort the extraction.

    Returns
    -------
    int
        Number of entries extracted.

    Raises
    ------
    ArchiveExtractionError
        If the file is not a readable zip archive or contains unsafe paths.
    """
    dest = Path(dest).resolve()
    try:
        with zipfile.ZipFile(archive_path) as zf:
            members = zf.infolist()
            for member in members:
                target = (dest / member.filename).resolve()
                if target != dest and dest not in target.parents:
                    raise ArchiveExtractionError(
                        f"Unsafe path in archive: {member.filename}"
                    )
            zf.extractall(dest)
    except zipfile.BadZipFile as exc:
        raise ArchiveExtractionError(f"Invalid zip archive: {exc}") from exc
    except (OSError, RuntimeError, EOFError) as exc:
        # RuntimeError: encrypted entries; EOFError: truncated archives
        raise ArchiveExtractionError(f"{type(exc).__name__}: {exc}") from exc

    logger.info("[Review] Extracted %d entries from %s", len(members), Path(archive_path).name)
    return len(members)
