"""AI review -- per-file review text from the text-generation service.

Files are reviewed one at a time, in a fixed order (``package.json``
first, then likely entry points).  A failed generation leaves the
provider's error sentinel in that file's ``feedback``; it never aborts
the review of the remaining files.
"""

from __future__ import annotations

import logging
import posixpath
import re
from pathlib import Path
from typing import Iterable

from zipreview.clients.llm_client import TextGenerator
from zipreview.schemas import FileReview

logger = logging.getLogger(__name__)

DEFAULT_REVIEW_PROMPT = "You are a senior backend reviewer."

REVIEW_EXTENSIONS: frozenset[str] = frozenset(
    {".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".json"}
)

_FUNCTION_NAME_RE = re.compile(
    r"function\s+(\w+)|const\s+(\w+)\s*=\s*(?:async\s*)?\(.*?\)\s*=>"
)

_REVIEW_TEMPLATE = """
{focus}
Analyze the following file as a code reviewer:

Filename: {filename}

---
{content}
---

Respond with:
1. Structure issues
2. Logical mistakes
3. Naming issues
4. Design pattern (MVC or not)
5. Suggestions for improvements
6. Unused variables or packages
7. List of function names in the file
"""


def extract_function_names(code: str) -> list[str]:
    """Return named functions and arrow-function constants, in source order."""
    return [m.group(1) or m.group(2) for m in _FUNCTION_NAME_RE.finditer(code)]


def _priority(path: str) -> int:
    name = posixpath.basename(path)
    if name == "package.json":
        return 0
    if "index" in path or "main" in path:
        return 1
    return 2


def order_for_review(files: Iterable[str]) -> list[str]:
    """Descriptor files first, then entry points, then the rest (stable)."""
    return sorted(files, key=_priority)


def build_review_prompt(focus: str, filename: str, content: str) -> str:
    return _REVIEW_TEMPLATE.format(focus=focus, filename=filename, content=content)


async def review_files(
    base_dir: str | Path,
    files: Iterable[str],
    generator: TextGenerator,
    *,
    focus: str | None = None,
    max_files: int = 20,
) -> list[FileReview]:
    """Ask *generator* for a review of each file, sequentially.

    Parameters
    ----------
    base_dir : directory the relative *files* are resolved against
    files : relative paths collected by the tree walk
    generator : configured text generator
    focus : reviewer instructions prepended to every prompt
    max_files : cap on the number of generation calls
    """
    base = Path(base_dir)
    focus = focus or DEFAULT_REVIEW_PROMPT
    results: list[FileReview] = []

    for rel in order_for_review(files)[:max_files]:
        logger.info("[Review] Analyzing file: %s", rel)
        try:
            content = (base / rel).read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            logger.warning("[Review] Skipping unreadable file %s: %s", rel, exc)
            continue

        feedback = await generator.generate(build_review_prompt(focus, rel, content))
        results.append(FileReview(
            file=rel,
            functions=extract_function_names(content),
            feedback=feedback,
        ))

    logger.info("[Review] All %d file(s) analyzed.", len(results))
    return results
