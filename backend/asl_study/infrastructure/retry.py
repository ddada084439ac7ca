"""Retry policy for store calls that may hit a flaky network."""

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_INITIAL_WAIT = 0.5  # seconds
DEFAULT_MAX_WAIT = 5.0  # seconds
DEFAULT_JITTER = 0.5  # seconds

# Substrings of store error messages that mean "try again later".
# Permission, constraint and not-found errors are never retried.
TRANSIENT_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "reset by peer",
    "unavailable",
    "temporar",
    "network",
    "http 502",
    "http 503",
    "http 504",
)


class TransientError(Exception):
    """Raised by callers that already know a failure is temporary."""


def is_transient_error(error: BaseException) -> bool:
    """Check whether a failed store call is worth repeating.

    Follows the ``__cause__`` chain so a StoreError wrapping an
    httpx transport error still counts as transient.
    """
    current: BaseException | None = error
    while current is not None:
        if isinstance(current, (TransientError, ConnectionError, TimeoutError, httpx.TransportError)):
            return True
        message = str(current).lower()
        if any(marker in message for marker in TRANSIENT_MARKERS):
            return True
        current = current.__cause__
    return False


def _log_before_sleep(description: str) -> Callable[[RetryCallState], None]:
    def _log(state: RetryCallState) -> None:
        error = state.outcome.exception() if state.outcome else None
        logger.info(
            f"Retrying {description} after attempt {state.attempt_number}: {error}",
            extra={
                "attempt": state.attempt_number,
                "wait_seconds": state.next_action.sleep if state.next_action else None,
            },
        )

    return _log


async def retry_store_call(
    operation: Callable[[], Awaitable[T]],
    description: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    initial_wait: float = DEFAULT_INITIAL_WAIT,
    max_wait: float = DEFAULT_MAX_WAIT,
) -> T:
    """Run a store call, repeating it while it fails transiently.

    Wait between attempts: min(initial * 2^n + random(0, jitter), max).

    Args:
        operation: Zero-argument coroutine function doing the call
        description: Short label for log lines, e.g. "add_star c12"
        max_attempts: Total attempts including the first
        initial_wait: First backoff in seconds
        max_wait: Backoff ceiling in seconds

    Raises:
        Exception: The first non-transient error, or the last transient
            one once attempts are exhausted
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential_jitter(initial=initial_wait, max=max_wait, jitter=DEFAULT_JITTER),
        retry=retry_if_exception(is_transient_error),
        before_sleep=_log_before_sleep(description),
        reraise=True,
    )
    return await retrying(operation)
