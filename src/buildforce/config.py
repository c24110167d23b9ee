"""Project configuration: ``buildforce/config.yml`` and OpenRouter environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import yaml
from dotenv import load_dotenv, set_key

from buildforce.analysis.types import AnalysisConfig

if TYPE_CHECKING:
    from pathlib import Path

BUILDFORCE_DIR = "buildforce"
CONFIG_FILE = "config.yml"
ENV_FILE = ".env"

API_KEY_ENV = "OPENROUTER_API_KEY"
MODEL_ENV = "OPENROUTER_MODEL"
DEFAULT_MODEL = "anthropic/claude-3.7-sonnet:thinking"


# ---------------------------------------------------------------------------
# config.yml
# ---------------------------------------------------------------------------


def config_path(project_root: Path) -> Path:
    return project_root / BUILDFORCE_DIR / CONFIG_FILE


def load_config(project_root: Path) -> dict[str, Any]:
    """Read ``buildforce/config.yml``; missing or empty file gives ``{}``.

    Raises
    ------
    ValueError
        If the file does not contain a mapping.
    """
    path = config_path(project_root)
    if not path.is_file():
        return {}
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"{path}: expected a mapping at the top level."
        raise ValueError(msg)
    return data


def parse_analysis_config(raw: dict[str, Any] | None) -> AnalysisConfig:
    """Build an :class:`AnalysisConfig` from the ``analysis`` section.

    Raises
    ------
    ValueError
        If a value is out of range or of the wrong type.
    """
    raw = raw or {}
    defaults = AnalysisConfig()
    try:
        max_chunk_size = int(raw.get("max_chunk_size", defaults.max_chunk_size))
        min_relevance = float(raw.get("min_relevance", defaults.min_relevance))
        max_dependencies = int(raw.get("max_dependencies", defaults.max_dependencies))
    except (TypeError, ValueError) as exc:
        msg = f"Invalid analysis config: {exc}"
        raise ValueError(msg) from exc
    partition = bool(raw.get("partition", defaults.partition))

    if max_chunk_size <= 0:
        msg = "analysis.max_chunk_size must be positive."
        raise ValueError(msg)
    if not 0.0 <= min_relevance <= 1.0:
        msg = "analysis.min_relevance must be between 0 and 1."
        raise ValueError(msg)
    if max_dependencies < 0:
        msg = "analysis.max_dependencies must not be negative."
        raise ValueError(msg)

    return AnalysisConfig(
        max_chunk_size=max_chunk_size,
        min_relevance=min_relevance,
        max_dependencies=max_dependencies,
        partition=partition,
    )


def load_analysis_config(project_root: Path) -> AnalysisConfig:
    return parse_analysis_config(load_config(project_root).get("analysis"))


# ---------------------------------------------------------------------------
# OpenRouter environment
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OpenRouterConfig:
    api_key: str
    model: str


def load_env(project_root: Path) -> bool:
    """Load ``.env`` from *project_root* without overriding the environment."""
    return load_dotenv(project_root / ENV_FILE, override=False)


def has_openrouter_config() -> bool:
    return bool(os.environ.get(API_KEY_ENV) and os.environ.get(MODEL_ENV))


def get_openrouter_config() -> OpenRouterConfig:
    """Current settings from the environment, with the default model."""
    return OpenRouterConfig(
        api_key=os.environ.get(API_KEY_ENV, ""),
        model=os.environ.get(MODEL_ENV) or DEFAULT_MODEL,
    )


def update_env_file(project_root: Path, api_key: str, model: str) -> Path:
    """Add or replace the OpenRouter keys in ``.env``; returns its path."""
    env_path = project_root / ENV_FILE
    env_path.touch(exist_ok=True)
    set_key(env_path, API_KEY_ENV, api_key, quote_mode="never")
    set_key(env_path, MODEL_ENV, model, quote_mode="never")
    return env_path
