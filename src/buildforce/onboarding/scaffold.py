"""Scaffold the ``buildforce/`` folder and AI tool rule files."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from buildforce.config import BUILDFORCE_DIR

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

_RULES_MD = """\
# Buildforce Rules

Buildforce keeps the memory of this project in the `buildforce/` folder.
Read it before starting any work.

## Memory

- `buildforce/memory/architecture.md` - tech stack, structure and patterns
- `buildforce/memory/specification.md` - goals, components and requirements

## Sessions

1. Every unit of work is a session: `buildforce/sessions/planned/session-NNN/`.
2. Plan a session with `buildforce plan` before writing code.
3. A session folder holds the plan, its tasks and `.chat-history.md`.
4. When a session is done, move it to `buildforce/sessions/completed/` and
   update the memory documents with what changed.

## Conventions

- Keep memory documents short and factual.
- Record decisions together with their reason in the session plan.
"""

_ARCHITECTURE_MD = """\
# Architecture

> Generated by `buildforce init`. Re-run with `--force` to regenerate.
"""

_SPECIFICATION_MD = """\
# Specification

> Generated by `buildforce init`. Re-run with `--force` to regenerate.
"""

_CONFIG_YML = """\
# Buildforce configuration.
analysis:
  max_chunk_size: 10000
  min_relevance: 0.5
  max_dependencies: 5
  partition: false

# Planning agent (OpenRouter). The API key is read from .env.
# llm:
#   model: anthropic/claude-3.7-sonnet:thinking
#   temperature: 0.3
#   max_tokens: 4096
"""

# Relative path (inside buildforce/) -> content.  ``None`` marks a directory.
TEMPLATE_TREE: dict[str, str | None] = {
    "rules.md": _RULES_MD,
    "config.yml": _CONFIG_YML,
    "memory/architecture.md": _ARCHITECTURE_MD,
    "memory/specification.md": _SPECIFICATION_MD,
    "sessions/planned": None,
    "sessions/completed": None,
}

# Pointer written into AI tool rule files.
_TOOL_RULES = """\
# Buildforce
Read buildforce/rules.md and the documents in buildforce/memory/ before
starting any work on this project. Follow the session workflow described there.
"""

_CURSOR_RULES = """\
---
description: Buildforce project memory and session workflow
globs:
alwaysApply: true
---
""" + _TOOL_RULES

_RULES_MARKER = "buildforce/rules.md"

# Tool name -> rule file path (relative to project root).
AI_TOOL_RULES: dict[str, str] = {
    "cursor": ".cursor/rules/buildforce.mdc",
    "cline": ".clinerules",
    "windsurf": ".windsurfrules",
}


def is_initialized(project_root: Path) -> bool:
    """Check whether the ``buildforce/`` folder exists."""
    return (project_root / BUILDFORCE_DIR).is_dir()


def copy_template(project_root: Path, *, force: bool = False) -> list[Path]:
    """Write the template tree into ``<project_root>/buildforce``.

    Existing files are kept unless *force* is set.  Returns created files.
    """
    base = project_root / BUILDFORCE_DIR
    created: list[Path] = []
    for rel_path, content in TEMPLATE_TREE.items():
        target = base / rel_path
        if content is None:
            target.mkdir(parents=True, exist_ok=True)
            continue
        if target.exists() and not force:
            logger.debug("Skipping existing file: %s", target)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        logger.info("Created: %s", target)
        created.append(target)
    return created


def _has_buildforce_rules(path: Path) -> bool:
    try:
        return _RULES_MARKER in path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return False


def setup_ai_tool_rules(project_root: Path, tools: Iterable[str]) -> list[str]:
    """Create or extend the rule files of the selected AI coding tools.

    Cursor gets its own ``.mdc`` file; ``.clinerules`` and ``.windsurfrules``
    are appended to when they already exist, once.  Returns touched paths.

    Raises
    ------
    ValueError
        If a tool name is unknown.
    """
    touched: list[str] = []
    for tool in tools:
        rel_path = AI_TOOL_RULES.get(tool)
        if rel_path is None:
            msg = f"Unknown AI tool: {tool!r}. Use one of: {', '.join(AI_TOOL_RULES)}."
            raise ValueError(msg)

        target = project_root / rel_path
        if tool == "cursor":
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(_CURSOR_RULES, encoding="utf-8")
        elif not target.exists():
            target.write_text(_TOOL_RULES, encoding="utf-8")
        elif _has_buildforce_rules(target):
            logger.debug("%s already references buildforce", target)
            continue
        else:
            existing = target.read_text(encoding="utf-8")
            target.write_text(existing.rstrip() + "\n\n" + _TOOL_RULES, encoding="utf-8")
            logger.info("Appended buildforce rules to %s", target)
        touched.append(rel_path)
    return touched
