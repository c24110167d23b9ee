"""Fold chunk results into a project analysis."""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING, Any

from buildforce.analysis.types import (
    AnalysisErrorKind,
    AnalysisSystemError,
    ProjectAnalysis,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from buildforce.analysis.types import ChunkAnalysisResult


def union(existing: Iterable[str], incoming: Iterable[str] | None) -> tuple[str, ...]:
    """Ordered union without duplicates (first occurrence wins)."""
    merged: dict[str, None] = dict.fromkeys(existing)
    for item in incoming or ():
        merged.setdefault(item, None)
    return tuple(merged)


def _field(partial: dict[str, Any], name: str) -> Any:
    value = partial.get(name)
    if isinstance(value, str):
        # A bare string is one item, not a sequence of characters.
        return [value]
    return value


def merge_analysis(
    accumulator: ProjectAnalysis,
    partial: ChunkAnalysisResult,
) -> ProjectAnalysis:
    """Return a new analysis combining *accumulator* with *partial*.

    List fields are unioned; ``project_structure`` is replaced only by a
    non-empty value.  Absent fields leave the accumulator untouched.

    Raises
    ------
    AnalysisSystemError
        ``MERGE_ERROR`` on any unexpected failure.
    """
    try:
        architecture = accumulator.architecture
        if partial.architecture:
            arch = partial.architecture
            structure = arch.get("project_structure") or architecture.project_structure
            architecture = replace(
                architecture,
                tech_stack=union(architecture.tech_stack, _field(arch, "tech_stack")),
                project_structure=str(structure),
                patterns=union(architecture.patterns, _field(arch, "patterns")),
            )

        specification = accumulator.specification
        if partial.specification:
            spec = partial.specification
            specification = replace(
                specification,
                goals=union(specification.goals, _field(spec, "goals")),
                components=union(specification.components, _field(spec, "components")),
                requirements=union(specification.requirements, _field(spec, "requirements")),
            )
    except Exception as exc:
        msg = "Failed to merge chunk analysis results"
        raise AnalysisSystemError(AnalysisErrorKind.MERGE_ERROR, msg, exc) from exc

    return ProjectAnalysis(architecture=architecture, specification=specification)
