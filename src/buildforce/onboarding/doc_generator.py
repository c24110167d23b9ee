"""Memory documents (``architecture.md`` / ``specification.md``) from a project analysis."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from buildforce.analysis.types import AnalysisSystemError
from buildforce.config import BUILDFORCE_DIR
from buildforce.project import empty_analysis
from buildforce.tools.files import FileOperationError

if TYPE_CHECKING:
    from pathlib import Path

    from buildforce.analysis.analyzer import ProjectAnalyzer
    from buildforce.project import ProjectAnalysis
    from buildforce.tools.files import FileTools

logger = logging.getLogger(__name__)

ARCHITECTURE_DOC = f"{BUILDFORCE_DIR}/memory/architecture.md"
SPECIFICATION_DOC = f"{BUILDFORCE_DIR}/memory/specification.md"

# Every generated document carries this marker; files without it were edited.
GENERATED_MARKER = "> Generated by `buildforce init`."


def _bullets(items: list[str], empty: str = "(none)") -> str:
    if not items:
        return empty
    return "\n".join(f"- {item}" for item in items)


def _inline(items: list[str]) -> str:
    return ", ".join(items) if items else "(none)"


# ------------------------------------------------------------------
# Render functions
# ------------------------------------------------------------------


def render_architecture(analysis: ProjectAnalysis) -> str:
    """Render ``architecture.md`` content."""
    parts = [
        f"# {analysis.name} Architecture\n",
        f"{GENERATED_MARKER} Re-run with `--force` to regenerate.\n",
        f"## Project Overview\n\n{analysis.description or '(no description)'}\n",
        "## Project Structure\n\n"
        f"- Type: {analysis.type}\n"
        f"- Frameworks: {_inline(analysis.frameworks)}\n"
        f"- Build Tools: {_inline(analysis.build_tools)}\n"
        f"- Test Frameworks: {_inline(analysis.test_frameworks)}\n",
    ]
    if analysis.runtime or analysis.language:
        parts.append(
            "## Runtime\n\n"
            f"- Runtime: {analysis.runtime or '(unknown)'}\n"
            f"- Language: {analysis.language or '(unknown)'}\n"
        )
    if analysis.architecture:
        parts.append(f"## Architecture\n\n{analysis.architecture}\n")
    parts.extend(
        [
            f"## Dependencies\n\n{_bullets(analysis.dependencies)}\n",
            f"## Directory Structure\n\n{_bullets(analysis.structure.directories)}\n",
        ]
    )
    return "\n".join(parts)


def render_specification(analysis: ProjectAnalysis) -> str:
    """Render ``specification.md`` content."""
    parts = [
        f"# {analysis.name} Specification\n",
        f"{GENERATED_MARKER} Re-run with `--force` to regenerate.\n",
        "## Project Details\n\n"
        f"- Name: {analysis.name}\n"
        f"- Type: {analysis.type}\n"
        f"- Description: {analysis.description or '(no description)'}\n",
        "## Technical Stack\n\n"
        f"- Frameworks: {_inline(analysis.frameworks)}\n"
        f"- Build Tools: {_inline(analysis.build_tools)}\n"
        f"- Test Frameworks: {_inline(analysis.test_frameworks)}\n",
        f"## Dependencies\n\n{_bullets(analysis.dependencies)}\n",
    ]
    optional_sections = (
        ("Features", analysis.features),
        ("Integration Points", analysis.integration_points),
        ("Considerations", analysis.considerations),
        ("Future Expansions", analysis.future_expansions),
        ("Integration Capabilities", analysis.integration_capabilities),
    )
    for title, items in optional_sections:
        if items:
            parts.append(f"## {title}\n\n{_bullets(items)}\n")
    parts.append(f"## Project Structure\n\n{_bullets(analysis.structure.files)}\n")
    return "\n".join(parts)


# ------------------------------------------------------------------
# Init workflow
# ------------------------------------------------------------------


@dataclass(frozen=True)
class InitConfig:
    project_name: str
    root_dir: Path
    skip_analysis: bool = False
    force: bool = False


@dataclass
class InitResult:
    """Outcome of :meth:`InitWorkflow.execute`."""

    success: bool
    architecture: str = ""
    specification: str = ""
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


class InitWorkflow:
    """Analyze the project and write its memory documents."""

    def __init__(
        self,
        config: InitConfig,
        analyzer: ProjectAnalyzer,
        file_tools: FileTools,
    ) -> None:
        self.config = config
        self.analyzer = analyzer
        self.file_tools = file_tools
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def execute(self) -> InitResult:
        try:
            analysis = self._analyze()
            architecture = render_architecture(analysis)
            specification = render_specification(analysis)
            self._write(ARCHITECTURE_DOC, architecture)
            self._write(SPECIFICATION_DOC, specification)
        except (AnalysisSystemError, FileOperationError) as exc:
            self.errors.append(str(exc))
            return InitResult(success=False, warnings=self.warnings, errors=self.errors)

        if not self._validate():
            return InitResult(success=False, warnings=self.warnings, errors=self.errors)

        return InitResult(
            success=True,
            architecture=self.file_tools.read_file(ARCHITECTURE_DOC),
            specification=self.file_tools.read_file(SPECIFICATION_DOC),
            warnings=self.warnings,
            errors=self.errors,
        )

    def _analyze(self) -> ProjectAnalysis:
        if self.config.skip_analysis:
            self.warnings.append("Project analysis skipped as per configuration")
            return empty_analysis(self.config.project_name)
        analysis = self.analyzer.analyze_project(self.config.root_dir)
        analysis.name = self.config.project_name
        return analysis

    def _write(self, path: str, content: str) -> None:
        if self.file_tools.exists(path) and not self.config.force:
            existing = self.file_tools.read_file(path)
            if GENERATED_MARKER not in existing:
                self.warnings.append(f"{path} was edited by hand; kept (use --force to overwrite)")
                return
        self.file_tools.write_file(path, content)
        logger.info("Wrote %s", path)

    def _validate(self) -> bool:
        missing = [p for p in (ARCHITECTURE_DOC, SPECIFICATION_DOC) if not self.file_tools.exists(p)]
        if missing:
            self.errors.append("Documentation files were not generated successfully")
            return False
        return True
