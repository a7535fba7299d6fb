"""Retry utilities for asynchronous operations using Tenacity."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.stop import stop_base

from ..errors.internal import TransportError

T = TypeVar("T")

RETRYABLE_EXCEPTIONS: tuple[type[BaseException], ...] = (
    TransportError,
    OSError,
    ConnectionError,
    TimeoutError,
)


class RetryExhaustedError(Exception):
    """Exception raised when all retry attempts have been exhausted."""

    def __init__(self, message: str, attempts: int, final_exception: BaseException | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.final_exception = final_exception


class _StopRequested(Exception):
    """Raised from the backoff sleep when the stop event fires."""


class stop_when(stop_base):  # noqa: N801 (tenacity naming)
    """Stop retrying as soon as ``predicate()`` turns true (external cancellation)."""

    def __init__(self, predicate: Callable[[], bool]) -> None:
        self.predicate = predicate

    def __call__(self, retry_state) -> bool:  # type: ignore[no-untyped-def]
        return bool(self.predicate())


def interruptible_sleep(stop_event: asyncio.Event) -> Callable[[float], Awaitable[None]]:
    """Backoff sleep that ends early, and aborts the retry, once ``stop_event`` is set."""

    async def _sleep(delay: float) -> None:
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=delay)
        except TimeoutError:
            return
        raise _StopRequested()

    return _sleep


async def retry_async(
    operation: Callable[[int], Awaitable[T]],
    *,
    context: str,
    max_attempts: int = 6,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    stop_event: asyncio.Event | None = None,
) -> T:
    """Retry an asynchronous operation with exponential backoff using Tenacity.

    Only transport-level failures are retried; anything else propagates
    unchanged on the first occurrence.

    Args:
        operation: Async callable receiving the 1-based attempt number.
        context: Short description used in retry log lines.
        max_attempts: Maximum number of attempts.
        base_delay: Exponential backoff multiplier in seconds.
        max_delay: Ceiling for a single backoff wait.
        stop_event: Optional event; once set no further attempt is made and
            a pending backoff wait returns immediately.

    Returns:
        The result from operation if successful.

    Raises:
        RetryExhaustedError: If attempts run out or ``stop_event`` fires.
    """
    attempt_count = 0
    last_exception: BaseException | None = None

    def before_attempt(retry_state):
        nonlocal attempt_count
        attempt_count = retry_state.attempt_number

    def before_sleep(retry_state):
        nonlocal last_exception
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        last_exception = exc
        wait = retry_state.next_action.sleep if retry_state.next_action else 0
        logging.warning(
            f"🔁 Retrying {context} in {round(wait, 2)}s (attempt {retry_state.attempt_number}/{max_attempts}) error={type(exc).__name__}: {exc}"
        )

    async def wrapped_operation() -> T:
        return await operation(attempt_count)

    stop = stop_after_attempt(max_attempts)
    extra: dict = {}
    if stop_event is not None:
        stop = stop | stop_when(stop_event.is_set)
        extra["sleep"] = interruptible_sleep(stop_event)

    retrying = AsyncRetrying(
        stop=stop,
        wait=wait_exponential(multiplier=base_delay, max=max_delay),
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        before=before_attempt,
        before_sleep=before_sleep,
        **extra,
    )

    try:
        return await retrying(wrapped_operation)
    except RetryError as e:
        final = e.last_attempt.exception() if e.last_attempt else None
        raise RetryExhaustedError(
            f"{context} failed after {attempt_count} attempt(s)",
            attempts=attempt_count,
            final_exception=final,
        ) from final
    except _StopRequested:
        logging.info(f"🔻 Retry of {context} cancelled by stop request")
        raise RetryExhaustedError(
            f"{context} stopped after {attempt_count} attempt(s)",
            attempts=attempt_count,
            final_exception=last_exception,
        ) from last_exception
