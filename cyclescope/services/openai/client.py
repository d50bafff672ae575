"""
OpenAI async client construction.

The client is built once by the composition root and handed to the
orchestrator; nothing here keeps a module-level instance.
"""

from __future__ import annotations

import httpx
from openai import AsyncOpenAI

from cyclescope.core.logging import get_logger
from cyclescope.services.openai.config import OpenAISettings, get_settings


logger = get_logger("openai.client")


def create_openai_client(settings: OpenAISettings | None = None) -> AsyncOpenAI | None:
    """
    Create an AsyncOpenAI client over a pooled httpx client.

    Returns None if the API key is not configured.
    """
    settings = settings or get_settings()
    if not settings.api_key:
        logger.warning("OpenAI API key not configured")
        return None

    http_client = httpx.AsyncClient(
        limits=httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=max(1, settings.max_connections // 2),
        ),
        timeout=httpx.Timeout(settings.request_timeout, connect=10.0),
    )

    client = AsyncOpenAI(api_key=settings.api_key, http_client=http_client)
    logger.debug("Created new OpenAI client")
    return client


async def check_assistant(client: AsyncOpenAI | None, assistant_id: str) -> tuple[bool, str | None]:
    """
    Verify the API key and that the configured assistant exists.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if client is None:
        return False, "API key not configured"
    if not assistant_id:
        return False, "Assistant ID not configured"

    try:
        assistant = await client.beta.assistants.retrieve(assistant_id)
        logger.info(f"Assistant {assistant_id} available (model={assistant.model})")
        return True, None
    except Exception as e:
        logger.warning(f"Assistant verification failed: {e}")
        return False, str(e)
