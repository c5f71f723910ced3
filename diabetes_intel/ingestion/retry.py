"""Shared retry policy for feed fetches and external API calls."""

from typing import Awaitable, Callable, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from ..config.settings import settings

logger = structlog.get_logger()

T = TypeVar("T")


def _log_retry(operation: str):
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "retry_scheduled",
            operation=operation,
            attempt=retry_state.attempt_number,
            wait_seconds=retry_state.next_action.sleep if retry_state.next_action else 0,
            error=str(error),
        )
    return before_sleep


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    name: str = "operation",
    attempts: int = None,
    base_delay: float = None,
) -> T:
    """Run operation with exponential backoff; re-raise the last error.

    Waits base_delay, then 2 * base_delay, ... between attempts, capped at
    settings.retry_max_delay_seconds.
    """
    attempts = attempts or settings.fetch_max_retries
    if base_delay is None:
        base_delay = settings.retry_base_delay_seconds

    retrying = AsyncRetrying(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(
            multiplier=base_delay, min=base_delay, max=settings.retry_max_delay_seconds
        ),
        before_sleep=_log_retry(name),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await operation()
