"""Extract architecture and specification signals from a chunk."""

from __future__ import annotations

import json
import logging
import posixpath
from typing import TYPE_CHECKING, Any

from buildforce.analysis.rules import SCRIPT_EXTENSIONS, detect_components, detect_patterns
from buildforce.analysis.types import (
    AnalysisErrorKind,
    AnalysisSystemError,
    Architecture,
    ChunkAnalysisResult,
    Specification,
)

if TYPE_CHECKING:
    from buildforce.analysis.types import Chunk, SourceFile

logger = logging.getLogger(__name__)

_STRUCTURE_HEADING = "Project Structure"
_GOALS_HEADING = "Goals"
_REQUIREMENTS_HEADING = "Requirements"


# ---------------------------------------------------------------------------
# Source lookup
# ---------------------------------------------------------------------------


def _root_source(chunk: Chunk, name: str) -> SourceFile | None:
    """Return the project-root file called *name* (case-insensitive)."""
    for src in chunk.sources:
        if posixpath.normpath(src.path).lower() == name:
            return src
    return None


def _script_sources(chunk: Chunk) -> list[SourceFile]:
    return [src for src in chunk.sources if src.path.endswith(SCRIPT_EXTENSIONS)]


# ---------------------------------------------------------------------------
# Manifest
# ---------------------------------------------------------------------------


def load_manifest(text: str, path: str = "package.json") -> dict[str, Any]:
    """Parse a ``package.json`` text, returning ``{}`` when it is malformed."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: top-level value is not an object", path)
        return {}
    return data


def _dependency_table(manifest: dict[str, Any], key: str) -> dict[str, Any]:
    table = manifest.get(key)
    return table if isinstance(table, dict) else {}


def _tech_stack(chunk: Chunk) -> list[str]:
    src = _root_source(chunk, "package.json")
    if src is None:
        return []
    manifest = load_manifest(src.text.strip(), src.path)
    names: dict[str, None] = {}
    for key in ("dependencies", "devDependencies"):
        for name in _dependency_table(manifest, key):
            names.setdefault(name, None)
    return list(names)


# ---------------------------------------------------------------------------
# README sections
# ---------------------------------------------------------------------------


def _section_lines(text: str, heading: str) -> list[str] | None:
    """Lines between ``## heading`` and the next ``##`` line, or *None*."""
    lines = text.splitlines()
    target = f"## {heading}"
    for idx, line in enumerate(lines):
        if line.strip() == target:
            body: list[str] = []
            for following in lines[idx + 1 :]:
                if following.startswith("##"):
                    break
                body.append(following)
            return body
    return None


def _bullets(text: str, heading: str) -> list[str]:
    body = _section_lines(text, heading)
    if body is None:
        return []
    items: list[str] = []
    for line in body:
        stripped = line.strip()
        if stripped.startswith("-"):
            item = stripped[1:].strip()
            if item:
                items.append(item)
    return items


def _project_structure(text: str) -> str:
    """Body of the fenced block directly under ``## Project Structure``."""
    body = _section_lines(text, _STRUCTURE_HEADING)
    if body is None:
        return ""
    remaining = iter(body)
    for line in remaining:
        if not line.strip():
            continue
        if not line.strip().startswith("```"):
            return ""
        break
    else:
        return ""

    block: list[str] = []
    for line in remaining:
        if line.strip().startswith("```"):
            return "\n".join(block).strip()
        block.append(line)
    return ""


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_architecture(chunk: Chunk) -> Architecture:
    """Tech stack from ``package.json``, structure from README, code patterns."""
    readme = _root_source(chunk, "readme.md")
    structure = _project_structure(readme.text) if readme is not None else ""

    patterns: dict[str, None] = {}
    for src in _script_sources(chunk):
        for tag in detect_patterns(src.text):
            patterns.setdefault(tag, None)

    return Architecture(
        tech_stack=tuple(_tech_stack(chunk)),
        project_structure=structure,
        patterns=tuple(patterns),
    )


def extract_specification(chunk: Chunk) -> Specification:
    """Goals and requirements from README, components from script declarations."""
    readme = _root_source(chunk, "readme.md")
    goals: list[str] = []
    requirements: list[str] = []
    if readme is not None:
        goals = _bullets(readme.text, _GOALS_HEADING)
        requirements = _bullets(readme.text, _REQUIREMENTS_HEADING)

    components: dict[str, None] = {}
    for src in _script_sources(chunk):
        for name in detect_components(src.text):
            components.setdefault(name, None)

    return Specification(
        goals=tuple(goals),
        components=tuple(components),
        requirements=tuple(requirements),
    )


def analyze_chunk(chunk: Chunk) -> ChunkAnalysisResult:
    """Run both extractions over *chunk*.

    Raises
    ------
    AnalysisSystemError
        ``ANALYSIS_ERROR`` when neither extraction finds anything.
    """
    architecture = extract_architecture(chunk)
    specification = extract_specification(chunk)

    if not architecture.has_signal() and not specification.has_signal():
        msg = "No meaningful information extracted from chunk"
        raise AnalysisSystemError(AnalysisErrorKind.ANALYSIS_ERROR, msg)

    return ChunkAnalysisResult(
        chunk_id=chunk.id,
        architecture={
            "tech_stack": list(architecture.tech_stack),
            "project_structure": architecture.project_structure,
            "patterns": list(architecture.patterns),
        },
        specification={
            "goals": list(specification.goals),
            "components": list(specification.components),
            "requirements": list(specification.requirements),
        },
    )
