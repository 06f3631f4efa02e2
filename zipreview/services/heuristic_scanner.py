"""Heuristic scanner -- naming and line-length checks over a bounded sample.

Reads a small, shallow-first sample of source files and folds two cheap
signals into one result:

  - suspicious identifiers found in declaration-like syntax
  - total / over-threshold line counts

Both checks are regex and string heuristics, not parsing.  The scan is a
read-only pass over the tree.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable

from zipreview.schemas import ReadabilityStats, ScanResult

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

CODE_EXTENSIONS: frozenset[str] = frozenset(
    {".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs"}
)

DEFAULT_SAMPLE_LIMIT = 20
DEFAULT_LONG_LINE_THRESHOLD = 120

# Conventional loop counters are fine as single characters.
SHORT_NAME_WHITELIST: frozenset[str] = frozenset({"i", "j", "k"})

# function foo / function* gen / function *gen / const|let|var name / class Name
# The capture stops at quotes and sentence punctuation so prose in comments
# and strings ("a const value.") is not read as a declaration.
_DECLARATION_RE = re.compile(
    r"\b(?:function(?:\s*\*\s*|\s+)|(?:const|let|var|class)\s+)"
    r"""([^\s=(){}\[\];,:<>*.'"`!?]+)"""
)
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# ---------------------------------------------------------------------------
# Per-file heuristics
# ---------------------------------------------------------------------------


def is_suspicious_identifier(name: str) -> bool:
    """Return True when *name* looks like a poor or malformed identifier."""
    if not name:
        return False
    if set(name) == {"_"}:
        return True
    if len(name) == 1 and name not in SHORT_NAME_WHITELIST:
        return True
    return _IDENTIFIER_RE.match(name) is None


def find_suspicious_identifiers(code: str) -> set[str]:
    """Return the suspicious names declared in *code*."""
    return {
        m.group(1)
        for m in _DECLARATION_RE.finditer(code)
        if is_suspicious_identifier(m.group(1))
    }


def count_lines(code: str, threshold: int = DEFAULT_LONG_LINE_THRESHOLD) -> tuple[int, int]:
    """Return ``(total_lines, lines_longer_than_threshold)``."""
    lines = code.splitlines()
    return len(lines), sum(1 for line in lines if len(line) > threshold)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------


def _depth(path: str) -> int:
    return path.count("/")


def select_sample(
    candidates: Iterable[str],
    limit: int = DEFAULT_SAMPLE_LIMIT,
) -> list[str]:
    """Pick at most *limit* code files, shallowest paths first.

    The sort is stable, so files at the same depth keep their walk order.
    """
    code_files = [
        c for c in candidates
        if os.path.splitext(c)[1].lower() in CODE_EXTENSIONS
    ]
    code_files.sort(key=_depth)
    return code_files[:limit]


# ---------------------------------------------------------------------------
# Scan
# ---------------------------------------------------------------------------


def scan(
    base_dir: str | Path,
    candidates: Iterable[str],
    *,
    sample_limit: int = DEFAULT_SAMPLE_LIMIT,
    long_line_threshold: int = DEFAULT_LONG_LINE_THRESHOLD,
) -> ScanResult:
    """Run the naming and readability heuristics over a bounded sample.

    Parameters
    ----------
    base_dir : directory the candidate paths are relative to
    candidates : relative file paths collected by the tree walk
    sample_limit : maximum number of files read
    long_line_threshold : line length above which a line counts as long

    Returns
    -------
    ScanResult
        Files that could not be read are left out of ``analyzed_files``.
    """
    base = Path(base_dir)
    identifiers: set[str] = set()
    total_lines = 0
    long_lines = 0
    analyzed: list[str] = []

    for rel in select_sample(candidates, sample_limit):
        try:
            code = (base / rel).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("Skipping unreadable file %s: %s", rel, exc)
            continue

        identifiers |= find_suspicious_identifiers(code)
        total, long_ = count_lines(code, long_line_threshold)
        total_lines += total
        long_lines += long_
        analyzed.append(rel)

    logger.info(
        "Scanned %d file(s): %d suspicious identifier(s), %d/%d long line(s)",
        len(analyzed), len(identifiers), long_lines, total_lines,
    )
    return ScanResult(
        identifiers=frozenset(identifiers),
        readability=ReadabilityStats(total_lines=total_lines, long_lines=long_lines),
        analyzed_files=analyzed,
    )
