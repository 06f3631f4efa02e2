"""Report generator -- fold scan results into a QualityReport.

Pure function: no IO, no randomness.  Identical inputs always produce an
identical report, rating included.

Rules are applied in a fixed order, each adding at most one improvement:

  1. suspicious identifiers        -> medium
  2. more than 10 long lines       -> medium
  3. no environment file           -> low
  4. routes without controllers    -> high

Rating = 10 - improvements - min(2, long_lines // 20), clamped to [6, 9].
"""

from __future__ import annotations

from typing import Iterable

from zipreview.schemas import (
    DependencyManifest,
    Improvement,
    QualityReport,
    ReadabilityStats,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

LONG_LINE_LIMIT = 10
LONG_LINE_PENALTY_STEP = 20
MAX_LONG_LINE_PENALTY = 2
RATING_BASE = 10
RATING_MIN = 6
RATING_MAX = 9

POSITIVES: tuple[str, ...] = (
    "Project structure is easy to navigate.",
    "Dependencies are declared in package.json.",
    "Code is split across multiple files rather than one large script.",
    "Naming is mostly consistent across the codebase.",
)

SENIOR_NOTES = (
    "Overall the project is in reasonable shape; addressing the suggestions "
    "above will make it easier for other developers to read and extend."
)


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def _identifier_rule(identifiers: list[str]) -> Improvement | None:
    if not identifiers:
        return None
    return Improvement(
        priority="medium",
        suggestion=f"Rename unclear identifiers such as {', '.join(identifiers[:3])}.",
        reason=(
            "Descriptive names make the code easier to read and lower the "
            "cost of collaboration."
        ),
    )


def _long_line_rule(readability: ReadabilityStats) -> Improvement | None:
    if readability.long_lines <= LONG_LINE_LIMIT:
        return None
    return Improvement(
        priority="medium",
        suggestion=f"Break up long lines ({readability.long_lines} exceed the length limit).",
        reason="Long lines are hard to scan and produce noisy diffs.",
    )


def _env_rule(env_files: list[str]) -> Improvement | None:
    if env_files:
        return None
    return Improvement(
        priority="low",
        suggestion="Add a .env.example file documenting the required environment variables.",
        reason="New contributors can configure the project without reading the source.",
    )


def _layering_rule(analyzed_files: list[str]) -> Improvement | None:
    lowered = [f.lower() for f in analyzed_files]
    has_routes = any("route" in f for f in lowered)
    has_controllers = any("controller" in f for f in lowered)
    if not has_routes or has_controllers:
        return None
    return Improvement(
        priority="high",
        suggestion="Separate routing from controller logic.",
        reason=(
            "Route handlers that contain business logic are hard to test "
            "and to reuse."
        ),
    )


# ---------------------------------------------------------------------------
# Rating
# ---------------------------------------------------------------------------


def compute_rating(improvement_count: int, long_lines: int) -> float:
    """Return the clamped numeric rating, rounded to one decimal."""
    penalty = min(MAX_LONG_LINE_PENALTY, long_lines // LONG_LINE_PENALTY_STEP)
    raw = RATING_BASE - improvement_count - penalty
    return round(float(max(RATING_MIN, min(RATING_MAX, raw))), 1)


def format_rating(value: float) -> str:
    return f"{value:.1f}/10"


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def generate_report(
    manifest: DependencyManifest,
    identifiers: Iterable[str],
    readability: ReadabilityStats,
    env_files: list[str],
    analyzed_files: list[str],
    *,
    files: list[str] | None = None,
    description: str | None = None,
) -> QualityReport:
    """Combine the pipeline's findings into the final report.

    *identifiers* is sorted before use so that the names quoted in the
    suggestion do not depend on set iteration order.
    """
    names = sorted(identifiers)
    improvements = [
        imp
        for imp in (
            _identifier_rule(names),
            _long_line_rule(readability),
            _env_rule(env_files),
            _layering_rule(analyzed_files),
        )
        if imp is not None
    ]
    rating = compute_rating(len(improvements), readability.long_lines)

    return QualityReport(
        project_description=description,
        files=list(files) if files is not None else list(analyzed_files),
        analyzed_files=list(analyzed_files),
        env_files=list(env_files),
        dependencies=dict(manifest.dependencies),
        dev_dependencies=dict(manifest.dev_dependencies),
        suspicious_identifiers=names,
        readability=readability,
        positives=list(POSITIVES),
        improvements=improvements,
        senior_notes=SENIOR_NOTES,
        rating=format_rating(rating),
    )
