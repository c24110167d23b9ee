"""External project analysis record consumed by documentation generators."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

ProjectType = Literal["node", "python", "java", "other"]

# Optional fields, in schema order: (attribute, JSON key).
_OPTIONAL_FIELDS: tuple[tuple[str, str], ...] = (
    ("runtime", "runtime"),
    ("language", "language"),
    ("architecture", "architecture"),
    ("features", "features"),
    ("integration_points", "integrationPoints"),
    ("considerations", "considerations"),
    ("future_expansions", "futureExpansions"),
    ("integration_capabilities", "integrationCapabilities"),
)


@dataclass
class ProjectStructure:
    files: list[str] = field(default_factory=list)
    directories: list[str] = field(default_factory=list)


@dataclass
class ProjectAnalysis:
    """Stable analysis schema handed to ``architecture.md`` / ``specification.md``.

    Field names of :meth:`to_dict` are a contract with downstream templates.
    """

    name: str
    description: str = ""
    dependencies: list[str] = field(default_factory=list)
    structure: ProjectStructure = field(default_factory=ProjectStructure)
    type: ProjectType = "other"
    frameworks: list[str] = field(default_factory=list)
    build_tools: list[str] = field(default_factory=list)
    test_frameworks: list[str] = field(default_factory=list)
    runtime: str | None = None
    language: str | None = None
    architecture: str | None = None
    features: list[str] | None = None
    integration_points: list[str] | None = None
    considerations: list[str] | None = None
    future_expansions: list[str] | None = None
    integration_capabilities: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "dependencies": list(self.dependencies),
            "structure": {
                "files": list(self.structure.files),
                "directories": list(self.structure.directories),
            },
            "type": self.type,
            "frameworks": list(self.frameworks),
            "buildTools": list(self.build_tools),
            "testFrameworks": list(self.test_frameworks),
        }
        for attr, key in _OPTIONAL_FIELDS:
            value = getattr(self, attr)
            if value is not None:
                data[key] = list(value) if isinstance(value, list) else value
        return data


def empty_analysis(name: str) -> ProjectAnalysis:
    """Placeholder analysis used when analysis is skipped."""
    return ProjectAnalysis(name=name, type="other")
