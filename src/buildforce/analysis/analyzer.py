"""Project analysis: discover files, extract signals, merge and adapt."""

from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from typing import TYPE_CHECKING

from buildforce.analysis.adapter import to_core_analysis
from buildforce.analysis.chunk import unframe
from buildforce.analysis.extract import analyze_chunk, load_manifest
from buildforce.analysis.merge import merge_analysis
from buildforce.analysis.rules import BUILD_TOOLS, TEST_FRAMEWORKS, detect_known
from buildforce.analysis.types import (
    AnalysisErrorKind,
    AnalysisSystemError,
    ProjectAnalysis,
)
from buildforce.tools.files import FileOperationError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from buildforce.analysis.chunk import ChunkManager
    from buildforce.analysis.types import Chunk
    from buildforce.project import ProjectAnalysis as CoreAnalysis
    from buildforce.tools.files import FileReader

logger = logging.getLogger(__name__)

# Directories never worth analyzing (dependencies, VCS data, build output).
EXCLUDED_DIRS = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "out",
        "coverage",
        "target",
        ".next",
        ".venv",
        "venv",
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
    }
)

_MANIFEST = "package.json"


def is_excluded(path: str) -> bool:
    """Check whether *path* lies inside an excluded directory."""
    return any(part in EXCLUDED_DIRS for part in path.split("/")[:-1])


def parent_directories(files: Sequence[str]) -> list[str]:
    """Unique parent directories of *files*, in first-seen order."""
    dirs: dict[str, None] = {}
    for path in files:
        parent = posixpath.dirname(path)
        if parent:
            dirs.setdefault(parent, None)
    return list(dirs)


class ProjectAnalyzer:
    """Drive analysis of the project that *file_tools* is rooted at."""

    def __init__(self, chunk_manager: ChunkManager, file_tools: FileReader) -> None:
        self.chunk_manager = chunk_manager
        self.file_tools = file_tools

    # -- public API ----------------------------------------------------------

    def analyze_project(self, root_dir: Path | str) -> CoreAnalysis:
        """Analyze the project and return the external analysis record.

        Raises
        ------
        AnalysisSystemError
            ``FILE_READ_ERROR`` when no files are found, ``MERGE_ERROR`` on
            merge failure, or the first chunk error when nothing was found.
        """
        files = self.discover_files()
        analysis = self.analyze_files(files)
        build_tools, test_frameworks = self._detect_dev_tooling()

        result = to_core_analysis(analysis, project_name(root_dir))
        result.structure.files = list(files)
        result.structure.directories = parent_directories(files)
        result.build_tools = build_tools
        result.test_frameworks = test_frameworks
        return result

    def analyze(self) -> ProjectAnalysis:
        """Return the internal architecture/specification analysis."""
        return self.analyze_files(self.discover_files())

    def discover_files(self) -> list[str]:
        """List analyzable project files.

        Raises
        ------
        AnalysisSystemError
            ``FILE_READ_ERROR`` if enumeration fails or finds no files.
        """
        try:
            paths = self.file_tools.search_files("**/*")
        except FileOperationError as exc:
            msg = "Failed to enumerate project files"
            raise AnalysisSystemError(AnalysisErrorKind.FILE_READ_ERROR, msg, exc) from exc

        files = [p for p in paths if not is_excluded(p) and self._probe(p)]
        logger.debug("Discovered %d files (%d paths scanned)", len(files), len(paths))

        if not files:
            msg = "No files found in the project"
            raise AnalysisSystemError(AnalysisErrorKind.FILE_READ_ERROR, msg)
        return files

    def analyze_files(self, files: Sequence[str]) -> ProjectAnalysis:
        """Chunk *files*, extract from each chunk and merge the results."""
        analysis = ProjectAnalysis()
        errors: list[AnalysisSystemError] = []

        for chunk in self._build_chunks(files, errors):
            logger.debug("Analyzing chunk %s (relevance %.2f)", chunk.id, chunk.relevance)
            try:
                partial = analyze_chunk(chunk)
            except AnalysisSystemError as exc:
                errors.append(exc)
                logger.warning("Failed to analyze chunk %s: %s", chunk.id, exc)
                continue
            except Exception as exc:
                msg = f"Failed to analyze chunk {chunk.id}"
                errors.append(
                    AnalysisSystemError(AnalysisErrorKind.ANALYSIS_ERROR, msg, exc)
                )
                logger.warning("%s: %s", msg, exc)
                continue
            analysis = merge_analysis(analysis, partial)

        logger.debug(
            "Analysis finished: architecture=%s specification=%s errors=%d",
            analysis.architecture.has_signal(),
            analysis.specification.has_signal(),
            len(errors),
        )

        if not analysis.has_signal() and errors:
            raise errors[0]
        return analysis

    # -- helpers -------------------------------------------------------------

    def _probe(self, path: str) -> bool:
        try:
            return self.file_tools.exists(path) and self.file_tools.is_file(path)
        except Exception as exc:
            logger.warning("Could not check path %s: %s", path, exc)
            return False

    def _build_chunks(
        self,
        files: Sequence[str],
        errors: list[AnalysisSystemError],
    ) -> list[Chunk]:
        partitioned = self.chunk_manager.config.partition
        groups = self.chunk_manager.partition(files) if partitioned else [list(files)]

        chunks: list[Chunk] = []
        for group in groups:
            try:
                chunks.append(self.chunk_manager.create_chunk(group))
            except AnalysisSystemError as exc:
                errors.append(exc)
                logger.warning("Skipping chunk of %d files: %s", len(group), exc.details or exc)

        if not partitioned:
            return chunks

        prioritized = self.chunk_manager.prioritize_chunks(chunks)
        if not prioritized and chunks:
            logger.info("No chunk reached the relevance threshold; analyzing all chunks")
            return sorted(chunks, key=lambda c: (-c.relevance, len(c.dependencies)))
        return prioritized

    def _detect_dev_tooling(self) -> tuple[list[str], list[str]]:
        """Build tools and test frameworks from root ``package.json`` devDependencies."""
        if not self.file_tools.exists(_MANIFEST):
            return [], []
        try:
            text = self.file_tools.read_file(_MANIFEST)
        except FileOperationError as exc:
            logger.warning("Could not read %s: %s", _MANIFEST, exc)
            return [], []

        dev_deps = load_manifest(unframe(_MANIFEST, text), _MANIFEST).get("devDependencies")
        if not isinstance(dev_deps, dict):
            return [], []
        return detect_known(dev_deps, BUILD_TOOLS), detect_known(dev_deps, TEST_FRAMEWORKS)


def project_name(root_dir: Path | str) -> str:
    """Project name from the last component of *root_dir*."""
    name = Path(root_dir).name
    if not name or name in (".", ".."):
        name = Path(root_dir).resolve().name
    return name or "unknown"
