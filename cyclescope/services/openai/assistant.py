"""
Domain analysis via the OpenAI Assistants API.

One analysis is one conversation with the configured assistant:

1. create a thread
2. post one user message: instruction text + the domain's chart images
3. start a run of the assistant on the thread
4. poll the run until it reaches a terminal state or the attempt ceiling
5. read the first assistant message and recover the JSON payload from it

Usage:
    orchestrator = AssistantOrchestrator(client, assistant_id="asst_...")
    analysis = await orchestrator.request_analysis("macro", date(2025, 1, 19))
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date
from typing import Any, TypeVar

import openai
from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from cyclescope.core.exceptions import UpstreamFailureError, UpstreamTimeoutError
from cyclescope.core.logging import get_logger
from cyclescope.domain.catalog import chart_urls, require_domain
from cyclescope.services.openai.config import (
    RUN_COMPLETED,
    RUN_FAILURE_STATES,
    OpenAISettings,
    get_settings,
)
from cyclescope.services.openai.parsing import recover_analysis_json
from cyclescope.services.openai.prompts import (
    build_domain_instructions,
    build_message_content,
)


logger = get_logger("openai.assistant")

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]

# Transport-level errors worth retrying; everything else surfaces immediately
TRANSIENT_ERRORS: tuple[type[Exception], ...] = (
    openai.APIConnectionError,
    openai.RateLimitError,
    openai.InternalServerError,
)

# A 429 means the request was rejected, so even non-idempotent calls may retry it
REJECTED_ERRORS: tuple[type[Exception], ...] = (openai.RateLimitError,)


class AssistantOrchestrator:
    """
    Drives the assistant through its thread/run lifecycle for one domain.

    The sleep function is injectable so that tests can walk through many
    polling iterations without waiting.
    """

    def __init__(
        self,
        client: AsyncOpenAI,
        assistant_id: str,
        *,
        poll_interval: float | None = None,
        max_poll_attempts: int | None = None,
        sleep: SleepFunc = asyncio.sleep,
        settings: OpenAISettings | None = None,
    ):
        self._settings = settings or get_settings()
        self._client = client
        self.assistant_id = assistant_id
        self.poll_interval = (
            poll_interval if poll_interval is not None else self._settings.poll_interval
        )
        self.max_poll_attempts = (
            max_poll_attempts
            if max_poll_attempts is not None
            else self._settings.max_poll_attempts
        )
        self._sleep = sleep

    @property
    def client(self) -> AsyncOpenAI:
        return self._client

    async def request_analysis(self, domain_code: str, as_of_date: date) -> dict[str, Any]:
        """
        Run one domain analysis and return the recovered JSON payload.

        Raises:
            InvalidDomainError: unknown domain code
            UpstreamFailureError: run failed/cancelled/expired, API error,
                or no assistant answer
            UpstreamTimeoutError: run not finished within the attempt ceiling
            MalformedResponseError: answer is not usable JSON
        """
        domain = require_domain(domain_code)
        images = chart_urls(domain)
        instructions = build_domain_instructions(domain, as_of_date)

        logger.info(
            f"[{domain.code}] Requesting analysis for {as_of_date.isoformat()} "
            f"({len(domain.indicators)} indicators, {len(images)} charts)"
        )

        try:
            thread_id = await self.create_thread()
            await self.post_message(thread_id, build_message_content(instructions, images))
            run_id = await self.start_run(thread_id)
            await self.wait_for_run(thread_id, run_id)
            text = await self.fetch_assistant_text(thread_id)
        except openai.APIError as e:
            logger.error(f"[{domain.code}] OpenAI API error: {e}")
            raise UpstreamFailureError(f"OpenAI API error: {e}") from e

        result = recover_analysis_json(text)

        returned_code = str(result.get("dimension_code", "")).lower()
        if returned_code != domain.code:
            logger.warning(
                f"[{domain.code}] Assistant answered with dimension_code={returned_code!r}, "
                f"storing under {domain.code!r}"
            )

        logger.info(
            f"[{domain.code}] Analysis complete: "
            f"{len(result.get('indicators') or [])} indicators analyzed"
        )
        return result

    # -------------------------------------------------------------------------
    # Protocol steps
    # -------------------------------------------------------------------------

    async def create_thread(self) -> str:
        thread = await self._call(self._client.beta.threads.create)
        logger.debug(f"Created thread {thread.id}")
        return thread.id

    async def post_message(self, thread_id: str, content: list[dict[str, Any]]) -> None:
        await self._call(
            self._client.beta.threads.messages.create,
            thread_id,
            role="user",
            content=content,
            idempotent=False,
        )

    async def start_run(self, thread_id: str) -> str:
        run = await self._call(
            self._client.beta.threads.runs.create,
            thread_id,
            assistant_id=self.assistant_id,
            idempotent=False,
        )
        logger.debug(f"Started run {run.id} on thread {thread_id}")
        return run.id

    async def wait_for_run(self, thread_id: str, run_id: str) -> Any:
        """
        Poll a run until it completes.

        Each attempt waits `poll_interval` seconds and then fetches the run
        status. Exactly `max_poll_attempts` status fetches are made before
        giving up.
        """
        status = "unknown"
        for attempt in range(1, self.max_poll_attempts + 1):
            await self._sleep(self.poll_interval)
            run = await self._call(
                self._client.beta.threads.runs.retrieve,
                run_id,
                thread_id=thread_id,
            )
            status = run.status

            if status == RUN_COMPLETED:
                logger.debug(f"Run {run_id} completed after {attempt} polls")
                return run

            if status in RUN_FAILURE_STATES:
                last_error = getattr(run, "last_error", None)
                reason = getattr(last_error, "message", None) or "no error message"
                logger.warning(f"Run {run_id} ended with status={status}: {reason}")
                raise UpstreamFailureError(
                    f"Assistant run {status}: {reason}",
                    details={"run_id": run_id, "thread_id": thread_id, "status": status},
                )

            logger.debug(f"Run {run_id} status={status} (attempt {attempt}/{self.max_poll_attempts})")

        timeout_seconds = self.poll_interval * self.max_poll_attempts
        raise UpstreamTimeoutError(
            f"Assistant run did not complete within {timeout_seconds:.0f}s "
            f"({self.max_poll_attempts} polls, last status={status})",
            details={"run_id": run_id, "thread_id": thread_id, "status": status},
        )

    async def fetch_assistant_text(self, thread_id: str) -> str:
        """Text of the first assistant-authored message in the thread."""
        page = await self._call(self._client.beta.threads.messages.list, thread_id)

        for message in page.data:
            if message.role != "assistant":
                continue
            text = "\n".join(
                block.text.value
                for block in message.content
                if getattr(block, "type", None) == "text"
            )
            if not text.strip():
                raise UpstreamFailureError("Assistant message contains no text")
            return text

        raise UpstreamFailureError(
            "No assistant response found in thread",
            details={"thread_id": thread_id},
        )

    # -------------------------------------------------------------------------
    # Retry wrapper
    # -------------------------------------------------------------------------

    async def _call(
        self,
        func: Callable[..., Awaitable[T]],
        *args: Any,
        idempotent: bool = True,
        **kwargs: Any,
    ) -> T:
        """
        Call the API, retrying transient errors with backoff.

        Calls that create a message or a run are not idempotent: a dropped
        connection or a 5xx may arrive after the server applied them, so only
        rejected (rate limited) attempts are retried.
        """
        retryable = TRANSIENT_ERRORS if idempotent else REJECTED_ERRORS
        result: Any = None
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(self._settings.max_retries),
            wait=wait_exponential_jitter(
                initial=self._settings.retry_delay,
                max=self._settings.retry_max_delay,
                jitter=1.0,
            ),
            retry=retry_if_exception_type(retryable),
            sleep=self._sleep,
            reraise=True,
        ):
            with attempt:
                result = await func(*args, **kwargs)
        return result
