"""
Retry Utilities - Exponential Backoff for HTTP Requests

One retry loop shared by every outbound call (page fetches and the
assessment submission). The request itself is passed in as a zero-argument
coroutine factory so the loop knows nothing about URLs or payloads.

Usage:
    from utils.retry import request_with_retry

    body = await request_with_retry(
        lambda: client.get("/patients", params={"page": 1}),
        description="GET /patients",
        max_attempts=5,
        initial_delay=1.0,
    )

Delay before retry n is initial_delay * 2 ** (n - 1): 1s, 2s, 4s, 8s.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx
import orjson
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from utils.errors import (
    MalformedResponseError,
    NonRetryableHTTPError,
    RetriesExhaustedError,
    RetryableStatusError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 503})

# Failures that spend one attempt of the budget instead of aborting the request
RETRYABLE_EXCEPTIONS = (RetryableStatusError, MalformedResponseError, httpx.TransportError)


def is_retryable_status(status_code: int) -> bool:
    return status_code in RETRYABLE_STATUS_CODES


def parse_json_body(response: httpx.Response, description: str = "") -> Any:
    """Decode a successful response body with orjson.

    Raises:
        MalformedResponseError: If the body is empty or not valid JSON
    """
    if not response.content:
        raise MalformedResponseError(f"Empty body from {description}", description)
    try:
        return orjson.loads(response.content)
    except orjson.JSONDecodeError as e:
        raise MalformedResponseError(f"Invalid JSON body from {description}: {e}", description) from e


def _log_retry(description: str) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Attempt %d for %s failed (%s), retrying in %.2fs",
            retry_state.attempt_number,
            description,
            error,
            retry_state.next_action.sleep if retry_state.next_action else 0.0,
            extra={"attempt": retry_state.attempt_number, "request": description},
        )

    return before_sleep


async def request_with_retry(
    operation: Callable[[], Awaitable[httpx.Response]],
    *,
    description: str,
    max_attempts: int = 5,
    initial_delay: float = 1.0,
    is_retryable_status: Callable[[int], bool] = is_retryable_status,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> Any:
    """
    Run an HTTP request with exponential backoff and return its decoded JSON body.

    Args:
        operation: Zero-argument callable returning an awaitable httpx.Response
        description: Human-readable request name used in logs and errors
        max_attempts: Total number of attempts, first one included
        initial_delay: Delay in seconds after the first failed attempt
        is_retryable_status: Predicate deciding which HTTP statuses are retried
        sleep: Awaitable sleep function (injected by tests)

    Returns:
        Parsed JSON body of the first successful response

    Raises:
        NonRetryableHTTPError: On a non-success status outside the retryable set
        RetriesExhaustedError: When every attempt failed with a retryable error
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(RETRYABLE_EXCEPTIONS),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=initial_delay, exp_base=2),
        before_sleep=_log_retry(description),
        sleep=sleep,
    )

    try:
        async for attempt in retrying:
            with attempt:
                response = await operation()

                if response.is_success:
                    return parse_json_body(response, description)

                if is_retryable_status(response.status_code):
                    raise RetryableStatusError(response.status_code, response.text)

                raise NonRetryableHTTPError(response.status_code, response.text, description)

    except RetryError as e:
        last_error = e.last_attempt.exception()
        logger.error(
            "Giving up on %s after %d attempts: %s",
            description,
            max_attempts,
            last_error,
            extra={"request": description, "attempts": max_attempts},
        )
        raise RetriesExhaustedError(description, max_attempts, last_error) from last_error

    # AsyncRetrying either returns from inside the loop or raises
    raise RetriesExhaustedError(description, max_attempts, None)
