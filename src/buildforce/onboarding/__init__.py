"""Onboarding domain: scaffolding, AI tool rules and memory documents."""

from buildforce.onboarding.doc_generator import (
    InitConfig,
    InitResult,
    InitWorkflow,
    render_architecture,
    render_specification,
)
from buildforce.onboarding.scaffold import (
    AI_TOOL_RULES,
    copy_template,
    is_initialized,
    setup_ai_tool_rules,
)

__all__ = [
    "AI_TOOL_RULES",
    "InitConfig",
    "InitResult",
    "InitWorkflow",
    "copy_template",
    "is_initialized",
    "render_architecture",
    "render_specification",
    "setup_ai_tool_rules",
]
