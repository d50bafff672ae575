"""
OpenAI Assistants integration for domain analysis.

Usage:
    from cyclescope.services.openai import (
        AssistantOrchestrator,
        create_openai_client,
        recover_analysis_json,
    )
"""

from cyclescope.services.openai.assistant import AssistantOrchestrator
from cyclescope.services.openai.client import check_assistant, create_openai_client
from cyclescope.services.openai.config import (
    DEFAULT_MAX_POLL_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    OpenAISettings,
    get_settings,
)
from cyclescope.services.openai.parsing import (
    extract_json_object,
    recover_analysis_json,
    strip_code_fence,
)
from cyclescope.services.openai.prompts import (
    build_domain_instructions,
    build_message_content,
)


__all__ = [
    "AssistantOrchestrator",
    "DEFAULT_MAX_POLL_ATTEMPTS",
    "DEFAULT_POLL_INTERVAL",
    "OpenAISettings",
    "build_domain_instructions",
    "build_message_content",
    "check_assistant",
    "create_openai_client",
    "extract_json_object",
    "get_settings",
    "recover_analysis_json",
    "strip_code_fence",
]
