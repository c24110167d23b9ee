"""Chat-style planning agent backed by an OpenRouter model."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from buildforce.config import API_KEY_ENV, BUILDFORCE_DIR, DEFAULT_MODEL, MODEL_ENV
from buildforce.planning.session import append_chat_history, read_chat_history

if TYPE_CHECKING:
    from pathlib import Path

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

_GREETING_PROMPT = "Greet me and ask what I am planning to work on next."

_SYSTEM_TEMPLATE = """\
You are a planning agent that follows the Buildforce workflow rules.

# Buildforce Rules
{rules}

# Project Architecture
{architecture}

# Project Specification
{specification}

# Session Chat History
{history}

Your goal is to brainstorm with the user about the session they are about to \
start and, once all the needed information is in place, to construct a detailed \
plan and describe the session files as defined in the Buildforce rules. Be \
friendly and engaging, and refer back to previous messages in the conversation \
to keep context.

When starting a new conversation, ask the user what they are planning to work \
on next."""


@dataclass(frozen=True)
class LLMConfig:
    """OpenRouter model configuration."""

    model: str = DEFAULT_MODEL
    api_key_env: str = API_KEY_ENV
    base_url: str = OPENROUTER_BASE_URL
    temperature: float = 0.3
    max_tokens: int = 4096
    api_key: str | None = None  # explicit override, wins over api_key_env


class LLMError(Exception):
    """Raised when an LLM API call fails."""


def parse_llm_config(raw: dict[str, Any] | None, **overrides: Any) -> LLMConfig:
    """Build an :class:`LLMConfig` from the ``llm`` config section.

    Keyword *overrides* with a non-empty value replace config values.

    Raises
    ------
    ValueError
        If a numeric field is invalid.
    """
    values: dict[str, Any] = dict(raw or {})
    values.update({k: v for k, v in overrides.items() if v})

    model = values.get("model") or os.environ.get(MODEL_ENV) or DEFAULT_MODEL
    try:
        temperature = float(values.get("temperature", 0.3))
        max_tokens = int(values.get("max_tokens", 4096))
    except (TypeError, ValueError) as exc:
        msg = f"Invalid LLM config: {exc}"
        raise ValueError(msg) from exc

    return LLMConfig(
        model=str(model),
        api_key_env=str(values.get("api_key_env") or API_KEY_ENV),
        base_url=str(values.get("base_url") or OPENROUTER_BASE_URL).rstrip("/"),
        temperature=temperature,
        max_tokens=max_tokens,
        api_key=values.get("api_key"),
    )


def _get_api_key(config: LLMConfig) -> str:
    """Resolve the API key.

    Raises
    ------
    LLMError
        If neither an override nor the environment variable is set.
    """
    key = config.api_key or os.environ.get(config.api_key_env, "")
    if not key:
        msg = f"OpenRouter API key not found. Set {config.api_key_env} in your .env file."
        raise LLMError(msg)
    return key


def call_llm(config: LLMConfig, messages: list[dict[str, str]]) -> str:
    """Send a chat-completions request and return the reply text.

    Raises
    ------
    LLMError
        On API errors, transport failures or a missing API key.
    """
    api_key = _get_api_key(config)
    try:
        response = httpx.post(
            f"{config.base_url}/chat/completions",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            json={
                "model": config.model,
                "temperature": config.temperature,
                "max_tokens": config.max_tokens,
                "messages": messages,
            },
            timeout=120.0,
        )
    except httpx.HTTPError as exc:
        msg = f"OpenRouter request failed: {exc}"
        raise LLMError(msg) from exc

    if response.status_code != 200:
        msg = f"OpenRouter API error {response.status_code}: {response.text}"
        raise LLMError(msg)

    data = response.json()
    choices = data.get("choices", [])
    if not choices:
        msg = "OpenRouter API returned empty response."
        raise LLMError(msg)

    return str(choices[0].get("message", {}).get("content", ""))


def _read_context(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError:
        return ""


def build_system_prompt(project_root: Path) -> str:
    """System prompt from rules, memory documents and the session history."""
    base = project_root / BUILDFORCE_DIR
    return _SYSTEM_TEMPLATE.format(
        rules=_read_context(base / "rules.md"),
        architecture=_read_context(base / "memory" / "architecture.md"),
        specification=_read_context(base / "memory" / "specification.md"),
        history=read_chat_history(project_root),
    )


@dataclass
class PlanningAgent:
    """One planning conversation.

    The active session's chat history is the conversation memory: each
    request carries it in the system prompt, followed by the new message.
    """

    project_root: Path
    config: LLMConfig
    turns: int = field(default=0, init=False)

    def start(self) -> str:
        """Open the conversation with a greeting from the model."""
        return self._exchange(_GREETING_PROMPT, record_user=False)

    def ask(self, text: str) -> str:
        return self._exchange(text, record_user=True)

    def _exchange(self, text: str, *, record_user: bool) -> str:
        messages = [
            {"role": "system", "content": build_system_prompt(self.project_root)},
            {"role": "user", "content": text},
        ]
        answer = call_llm(self.config, messages)

        if record_user:
            append_chat_history(self.project_root, "User", text)
        append_chat_history(self.project_root, "Assistant", answer)
        self.turns += 1
        return answer
