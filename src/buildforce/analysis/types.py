"""Shared data types and the error taxonomy of the analysis pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AnalysisErrorKind(str, enum.Enum):
    """Classification of analysis failures."""

    FILE_READ_ERROR = "FILE_READ_ERROR"
    CHUNK_CREATION_ERROR = "CHUNK_CREATION_ERROR"
    ANALYSIS_ERROR = "ANALYSIS_ERROR"
    MERGE_ERROR = "MERGE_ERROR"


class AnalysisSystemError(Exception):
    """Raised when project analysis fails.

    ``kind`` tells callers which stage failed; ``details`` carries the
    underlying exception (also chained as ``__cause__`` where available).
    """

    def __init__(
        self,
        kind: AnalysisErrorKind,
        message: str,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.details = details

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisConfig:
    """Tuning constants for chunk creation and prioritization."""

    max_chunk_size: int = 10000
    min_relevance: float = 0.5
    max_dependencies: int = 5
    partition: bool = False


# ---------------------------------------------------------------------------
# Chunks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SourceFile:
    """One file of a chunk, keyed by its project-relative path."""

    path: str
    text: str


@dataclass(frozen=True)
class Chunk:
    """A group of files analyzed together.

    ``content`` is the framed text of all files; ``sources`` holds the same
    files as structured records, which is what extraction reads.
    """

    id: str
    files: tuple[str, ...]
    content: str
    dependencies: tuple[str, ...] = ()
    relevance: float = 0.0
    sources: tuple[SourceFile, ...] = ()


# ---------------------------------------------------------------------------
# Analysis results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Architecture:
    tech_stack: tuple[str, ...] = ()
    project_structure: str = ""
    patterns: tuple[str, ...] = ()

    def has_signal(self) -> bool:
        return bool(self.tech_stack or self.project_structure or self.patterns)


@dataclass(frozen=True)
class Specification:
    goals: tuple[str, ...] = ()
    components: tuple[str, ...] = ()
    requirements: tuple[str, ...] = ()

    def has_signal(self) -> bool:
        return bool(self.goals or self.components or self.requirements)


@dataclass(frozen=True)
class ProjectAnalysis:
    """Accumulated architecture and specification signals of a project."""

    architecture: Architecture = field(default_factory=Architecture)
    specification: Specification = field(default_factory=Specification)

    def has_signal(self) -> bool:
        return self.architecture.has_signal() or self.specification.has_signal()

    def to_dict(self) -> dict[str, Any]:
        return {
            "architecture": {
                "techStack": list(self.architecture.tech_stack),
                "projectStructure": self.architecture.project_structure,
                "patterns": list(self.architecture.patterns),
            },
            "specification": {
                "goals": list(self.specification.goals),
                "components": list(self.specification.components),
                "requirements": list(self.specification.requirements),
            },
        }


@dataclass
class ChunkAnalysisResult:
    """Possibly partial extraction result of a single chunk.

    ``architecture`` and ``specification`` are mappings keyed by the
    :class:`Architecture` / :class:`Specification` field names; a missing
    key contributes nothing when merged.
    """

    chunk_id: str
    architecture: dict[str, Any] | None = None
    specification: dict[str, Any] | None = None
    errors: list[str] = field(default_factory=list)
