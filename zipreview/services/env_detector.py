"""Environment-file detection over a collected file list."""

from __future__ import annotations

import posixpath
from typing import Iterable

ENV_FILE_PREFIX = ".env"


def is_env_file(path: str) -> bool:
    """True for ``.env``, ``.env.example``, ``.env.local`` and friends."""
    return posixpath.basename(path).startswith(ENV_FILE_PREFIX)


def detect_env_files(files: Iterable[str]) -> list[str]:
    """Return the environment files in *files*, preserving order."""
    return [f for f in files if is_env_file(f)]
