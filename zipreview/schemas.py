"""Response and intermediate models shared by the services and routers.

Every model is frozen: once the scan phase finishes nothing is mutated,
the report is built by one pure aggregation step.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


Priority = Literal["high", "medium", "low"]


class DependencyManifest(BaseModel):
    """Declared runtime and development dependencies (name -> version spec).

    ``DependencyManifest.empty()`` is the value used whenever the descriptor
    is missing or unparsable.
    """

    model_config = ConfigDict(frozen=True)

    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)

    @classmethod
    def empty(cls) -> DependencyManifest:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.dependencies and not self.dev_dependencies


class ReadabilityStats(BaseModel):
    """Line counts summed across every sampled file."""

    model_config = ConfigDict(frozen=True)

    total_lines: int = Field(0, ge=0)
    long_lines: int = Field(0, ge=0)


class ScanResult(BaseModel):
    """Output of the heuristic scan over the bounded sample."""

    model_config = ConfigDict(frozen=True)

    identifiers: frozenset[str] = Field(default_factory=frozenset)
    readability: ReadabilityStats = Field(default_factory=ReadabilityStats)
    analyzed_files: list[str] = Field(default_factory=list)


class Improvement(BaseModel):
    """One prioritised improvement suggestion."""

    model_config = ConfigDict(frozen=True)

    priority: Priority
    suggestion: str
    reason: str


class QualityReport(BaseModel):
    """Terminal artifact of ``POST /analyze``.

    ``rating`` is always produced by ``report_generator.compute_rating``;
    callers never set it themselves.
    """

    model_config = ConfigDict(frozen=True)

    project_description: str | None = None
    files: list[str] = Field(default_factory=list)
    analyzed_files: list[str] = Field(default_factory=list)
    env_files: list[str] = Field(default_factory=list)
    dependencies: dict[str, str] = Field(default_factory=dict)
    dev_dependencies: dict[str, str] = Field(default_factory=dict)
    suspicious_identifiers: list[str] = Field(default_factory=list)
    readability: ReadabilityStats = Field(default_factory=ReadabilityStats)
    positives: list[str] = Field(default_factory=list)
    improvements: list[Improvement] = Field(default_factory=list)
    senior_notes: str = ""
    rating: str


class FileReview(BaseModel):
    """LLM-generated review text for a single file."""

    model_config = ConfigDict(frozen=True)

    file: str
    functions: list[str] = Field(default_factory=list)
    feedback: str


class ReviewResponse(BaseModel):
    """Body of ``POST /review``."""

    model_config = ConfigDict(frozen=True)

    message: str = "Code Review Completed"
    summary: list[FileReview] = Field(default_factory=list)
