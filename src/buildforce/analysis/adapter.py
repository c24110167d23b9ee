"""Map the internal analysis onto the external :class:`ProjectAnalysis` record."""

from __future__ import annotations

from typing import TYPE_CHECKING

from buildforce.project import ProjectAnalysis, ProjectStructure

if TYPE_CHECKING:
    from buildforce.analysis.types import ProjectAnalysis as InternalAnalysis


def to_core_analysis(analysis: InternalAnalysis, project_name: str) -> ProjectAnalysis:
    """Adapt *analysis* for documentation generators.

    Structure, build tools and test frameworks are left empty for the caller
    to fill in.  The project type is always ``"node"``.
    """
    return ProjectAnalysis(
        name=project_name,
        description=", ".join(analysis.specification.goals),
        dependencies=list(analysis.architecture.tech_stack),
        structure=ProjectStructure(),
        type="node",
        frameworks=list(analysis.architecture.patterns),
        build_tools=[],
        test_frameworks=[],
    )
