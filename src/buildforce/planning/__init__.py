"""Planning domain: sessions and the chat agent."""

from buildforce.planning.agent import (
    LLMConfig,
    LLMError,
    PlanningAgent,
    build_system_prompt,
    call_llm,
    parse_llm_config,
)
from buildforce.planning.session import (
    active_session_path,
    append_chat_history,
    create_session,
    next_session_number,
    read_chat_history,
)

__all__ = [
    "LLMConfig",
    "LLMError",
    "PlanningAgent",
    "active_session_path",
    "append_chat_history",
    "build_system_prompt",
    "call_llm",
    "create_session",
    "next_session_number",
    "parse_llm_config",
    "read_chat_history",
]
