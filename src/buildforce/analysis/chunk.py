"""Chunk creation, scoring and prioritization."""

from __future__ import annotations

import logging
import posixpath
import re
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

from buildforce.analysis.types import (
    AnalysisConfig,
    AnalysisErrorKind,
    AnalysisSystemError,
    Chunk,
    SourceFile,
)
from buildforce.tools.files import FileOperationError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from buildforce.tools.files import FileReader

logger = logging.getLogger(__name__)

# Files that conventionally carry project metadata.
_METADATA_FILES = frozenset({"package.json", "tsconfig.json", "readme.md"})

_EXTENSION_WEIGHTS: dict[str, float] = {
    ".ts": 0.8,
    ".js": 0.8,
    ".md": 0.6,
}
_METADATA_WEIGHT = 1.0
_DEFAULT_WEIGHT = 0.2

_TYPE_FACTOR = 0.7
_CONTENT_FACTOR = 0.3

_IMPORT_RE = re.compile(r"""import\s+.*?from\s+['"]([^'"]+)['"]""")
_REQUIRE_RE = re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)""")

_MAX_READ_WORKERS = 8
_CHUNK_SEPARATOR = "\n\n"


def frame(path: str, text: str) -> str:
    """Wrap *text* in the ``=== path ===`` / ``=== end path ===`` markers."""
    return f"=== {path} ===\n{text}\n=== end {path} ==="


def unframe(path: str, raw: str) -> str:
    """Strip this file's own markers from *raw*, if it is already framed."""
    header = f"=== {path} ===\n"
    footer = f"\n=== end {path} ==="
    if (
        len(raw) >= len(header) + len(footer)
        and raw.startswith(header)
        and raw.endswith(footer)
    ):
        return raw[len(header) : len(raw) - len(footer)]
    return raw


def chunk_id(files: Iterable[str]) -> str:
    """Derive a stable id from an ordered file list."""
    return "_".join(re.sub(r"[^a-zA-Z0-9]", "_", f) for f in files)


def file_weight(path: str) -> float:
    """Relevance weight of a single file, by basename or extension."""
    basename = posixpath.basename(path).lower()
    if basename in _METADATA_FILES:
        return _METADATA_WEIGHT
    _, ext = posixpath.splitext(basename)
    return _EXTENSION_WEIGHTS.get(ext, _DEFAULT_WEIGHT)


def find_dependencies(content: str) -> list[str]:
    """Return relative import paths, then relative require paths, each in source order."""
    found: list[str] = []
    for regex in (_IMPORT_RE, _REQUIRE_RE):
        for match in regex.finditer(content):
            target = match.group(1)
            if target.startswith(("./", "../")):
                found.append(target)
    return found


class ChunkManager:
    """Build scored, dependency-annotated chunks from project files."""

    def __init__(self, file_tools: FileReader, config: AnalysisConfig | None = None) -> None:
        self.file_tools = file_tools
        self.config = config or AnalysisConfig()

    def create_chunk(self, files: Sequence[str]) -> Chunk:
        """Read *files* and assemble them into one :class:`Chunk`.

        Raises
        ------
        AnalysisSystemError
            ``CHUNK_CREATION_ERROR`` when any file cannot be read.
        """
        files = tuple(files)
        try:
            sources = self._read_sources(files)
        except Exception as exc:
            msg = "Failed to create analysis chunk"
            raise AnalysisSystemError(
                AnalysisErrorKind.CHUNK_CREATION_ERROR, msg, exc
            ) from exc

        content = _CHUNK_SEPARATOR.join(frame(src.path, src.text) for src in sources)
        dependencies = find_dependencies(content)[: self.config.max_dependencies]

        return Chunk(
            id=chunk_id(files),
            files=files,
            content=content,
            dependencies=tuple(dependencies),
            relevance=self.calculate_relevance(files, content),
            sources=sources,
        )

    def prioritize_chunks(self, chunks: Iterable[Chunk]) -> list[Chunk]:
        """Drop low-relevance chunks; most relevant and self-contained first."""
        kept = [c for c in chunks if c.relevance >= self.config.min_relevance]
        return sorted(kept, key=lambda c: (-c.relevance, len(c.dependencies)))

    def calculate_relevance(self, files: Sequence[str], content: str) -> float:
        """Score a chunk in ``[0, 1]`` from its file types and content size."""
        weights = [file_weight(f) for f in files]
        type_relevance = sum(weights) / max(len(weights), 1)
        content_relevance = min(len(content) / max(self.config.max_chunk_size, 1), 1.0)
        relevance = type_relevance * _TYPE_FACTOR + content_relevance * _CONTENT_FACTOR
        return min(max(relevance, 0.0), 1.0)

    def partition(self, files: Sequence[str]) -> list[list[str]]:
        """Group files by top-level directory, then split groups by size.

        Root-level files come first.  A group whose framed size would exceed
        ``max_chunk_size`` is cut into consecutive runs of at least one file.
        """
        groups: dict[str, list[str]] = {}
        for path in files:
            head, sep, _ = path.partition("/")
            key = head if sep else ""
            groups.setdefault(key, []).append(path)
        runs: list[list[str]] = []
        for key in sorted(groups):
            runs.extend(self._split_by_size(groups[key]))
        return runs

    def _split_by_size(self, files: list[str]) -> list[list[str]]:
        runs: list[list[str]] = []
        current: list[str] = []
        size = 0
        for path in files:
            estimate = self._estimate_size(path)
            if current and size + estimate > self.config.max_chunk_size:
                runs.append(current)
                current, size = [], 0
            current.append(path)
            size += estimate
        if current:
            runs.append(current)
        return runs

    def _estimate_size(self, path: str) -> int:
        """Framed length of *path* plus its separator; 0 if it cannot be read."""
        try:
            text = self.file_tools.read_file(path)
        except FileOperationError as exc:
            logger.debug("Cannot size %s: %s", path, exc)
            return 0
        return len(frame(path, unframe(path, text))) + len(_CHUNK_SEPARATOR)

    def _read_sources(self, files: tuple[str, ...]) -> tuple[SourceFile, ...]:
        if not files:
            return ()
        workers = min(_MAX_READ_WORKERS, len(files))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            texts = list(pool.map(self.file_tools.read_file, files))
        logger.debug("Read %d files for chunk", len(files))
        return tuple(
            SourceFile(path, unframe(path, text)) for path, text in zip(files, texts)
        )
