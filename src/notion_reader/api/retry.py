"""Retry logic with exponential backoff for Notion API calls.

Rate limits (429), server errors (5xx) and transient network conditions are
retried with delays of ``base_delay * 2**attempt`` capped at ``max_delay``.
Every other error fails fast.
"""

import asyncio
import errno
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx
from notion_client.errors import RequestTimeoutError

from .errors import RetryExhaustedError
from .models import RetryConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

RETRYABLE_ERROR_CODES = {
    "rate_limited",
    "internal_server_error",
    "service_unavailable",
    "ECONNRESET",
    "ECONNREFUSED",
    "ETIMEDOUT",
}

RETRYABLE_ERRNOS = {errno.ECONNRESET, errno.ECONNREFUSED, errno.ETIMEDOUT}

RETRYABLE_EXCEPTIONS = (
    ConnectionResetError,
    ConnectionRefusedError,
    TimeoutError,
    httpx.TimeoutException,
    httpx.NetworkError,
    RequestTimeoutError,
)


def _status_of(error: Exception) -> Optional[int]:
    for attribute in ("status", "status_code"):
        value = getattr(error, attribute, None)
        if isinstance(value, int):
            return value

    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    if isinstance(value, int):
        return value

    # Some transports report the HTTP status through ``code``.
    value = getattr(error, "code", None)
    if isinstance(value, int):
        return value
    return None


def is_retryable_error(error: Exception) -> bool:
    """Check whether re-attempting the failed call is expected to help.

    Args:
        error: The exception raised by the remote call

    Returns:
        True for rate limiting, server-side errors and transient network
        conditions, False otherwise
    """
    status = _status_of(error)
    if status is not None and (status == 429 or 500 <= status < 600):
        return True

    # notion_client reports APIErrorCode enum members here.
    code = getattr(error, "code", None)
    code = getattr(code, "value", code)
    if isinstance(code, str) and code in RETRYABLE_ERROR_CODES:
        return True

    if isinstance(error, OSError) and error.errno in RETRYABLE_ERRNOS:
        return True

    return isinstance(error, RETRYABLE_EXCEPTIONS)


class RetryExecutor:
    """Runs a single remote call under a RetryConfig."""

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.config = config or RetryConfig()
        self._sleep = sleep

    def compute_delay(self, attempt: int) -> int:
        """Backoff in milliseconds after the zero-indexed ``attempt`` failed."""
        return min(self.config.base_delay * 2**attempt, self.config.max_delay)

    async def execute(self, operation: Callable[[], Awaitable[T]], label: str) -> T:
        """Await ``operation`` until it succeeds or the policy gives up.

        Args:
            operation: Zero-argument coroutine function performing the call
            label: Name of the operation, used in logs and errors

        Returns:
            The result of the first successful attempt

        Raises:
            RetryExhaustedError: If a retryable error persists on the final attempt
            Other exceptions: Re-raised immediately when not retryable
        """
        max_retries = self.config.max_retries

        for attempt in range(max_retries + 1):
            try:
                return await operation()
            except Exception as e:
                if not is_retryable_error(e):
                    raise

                if attempt == max_retries:
                    logger.error(f"{label} gave up after {attempt + 1} attempts: {e}")
                    raise RetryExhaustedError(label, attempt + 1, e) from e

                delay = self.compute_delay(attempt)
                logger.warning(
                    f"{label} retry {attempt + 1}/{max_retries} in {delay}ms: {e}"
                )
                await self._sleep(delay / 1000)

        # range() always yields at least once, so the loop returns or raises.
        raise AssertionError("unreachable")
