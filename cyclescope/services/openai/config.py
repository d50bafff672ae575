"""
OpenAI Assistants configuration.

Centralized configuration for the assistant integration with environment
variable support.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


# Run statuses reported by the Assistants API
RUN_COMPLETED = "completed"
RUN_FAILURE_STATES = frozenset({"failed", "cancelled", "expired", "incomplete"})

# Run-completion polling: 5s x 60 attempts, roughly five minutes
DEFAULT_POLL_INTERVAL = 5.0
DEFAULT_MAX_POLL_ATTEMPTS = 60


class OpenAISettings(BaseSettings):
    """OpenAI client configuration from environment variables."""

    api_key: str = Field(default="", alias="OPENAI_API_KEY")
    assistant_id: str = Field(default="", alias="OPENAI_ASSISTANT_ID")

    # Run polling
    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL, gt=0, alias="OPENAI_POLL_INTERVAL"
    )
    max_poll_attempts: int = Field(
        default=DEFAULT_MAX_POLL_ATTEMPTS, ge=1, alias="OPENAI_MAX_POLL_ATTEMPTS"
    )

    # Retry configuration for transient transport errors
    max_retries: int = Field(default=3, ge=1, alias="OPENAI_MAX_RETRIES")
    retry_delay: float = Field(default=1.0, alias="OPENAI_RETRY_DELAY")
    retry_max_delay: float = Field(default=30.0, alias="OPENAI_RETRY_MAX_DELAY")

    # Connection configuration
    max_connections: int = Field(default=20, alias="OPENAI_MAX_CONNECTIONS")
    request_timeout: float = Field(default=60.0, alias="OPENAI_REQUEST_TIMEOUT")

    model_config = {"env_file": ".env", "extra": "ignore", "populate_by_name": True}

    @property
    def is_configured(self) -> bool:
        """True when both the API key and the assistant ID are set."""
        return bool(self.api_key and self.assistant_id)


@lru_cache(maxsize=1)
def get_settings() -> OpenAISettings:
    """Get cached OpenAI settings instance."""
    return OpenAISettings()
