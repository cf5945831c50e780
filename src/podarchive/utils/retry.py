"""Retry utilities for network calls.

Implements exponential backoff with jitter for transient HTTP failures
(timeouts, dropped connections, rate limits, 5xx responses).
"""

import logging
from collections.abc import Callable
from functools import wraps

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

logger = logging.getLogger(__name__)


# Error classification: Which errors should trigger retries?

class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class RateLimitError(RetryableError):
    """Server asked us to slow down (HTTP 429)."""

    pass


class NetworkTimeoutError(RetryableError):
    """Request timeout."""

    pass


class NetworkConnectionError(RetryableError):
    """Network connection error."""

    pass


class ServerError(RetryableError):
    """Server-side error (5xx)."""

    pass


class NonRetryableError(Exception):
    """Base class for errors that should NOT trigger retries."""

    pass


class InvalidRequestError(NonRetryableError):
    """Client error (4xx other than 408/429)."""

    pass


# Retry configuration

class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 30,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


# Default retry configuration
DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=30,
    min_wait_seconds=1,
    jitter=True,
)

# Fast configuration for testing (no delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0,
    min_wait_seconds=0,
    jitter=False,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        attempt_number = retry_state.attempt_number

        logger.warning(
            f"Retry attempt {attempt_number} failed: {type(exception).__name__}: {exception}"
        )


def _retry_kwargs(config: RetryConfig, retry_on: tuple[type[Exception], ...]) -> dict:
    return {
        "stop": stop_after_attempt(config.max_attempts),
        "wait": wait_exponential_jitter(
            initial=config.min_wait_seconds,
            max=config.max_wait_seconds,
            jitter=config.max_wait_seconds if config.jitter else 0,
        ),
        "retry": retry_if_exception_type(retry_on),
        "before_sleep": log_retry_attempt,
        "reraise": True,
    }


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> Callable:
    """Decorator adding exponential-backoff retries to a coroutine function.

    When ``config`` is None, ``DEFAULT_RETRY_CONFIG`` is looked up at call time.

    Usage:
        @with_retry()
        async def fetch():
            ...

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types to retry on (all RetryableError subclasses if None)

    Returns:
        Decorated coroutine function with retry logic
    """
    if retry_on is None:
        retry_on = (RetryableError,)

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            effective = config or DEFAULT_RETRY_CONFIG
            try:
                async for attempt in AsyncRetrying(**_retry_kwargs(effective, retry_on)):
                    with attempt:
                        return await func(*args, **kwargs)
            except retry_on as e:
                logger.error(
                    f"{func.__name__} failed after {effective.max_attempts} attempts: "
                    f"{type(e).__name__}: {e}"
                )
                raise

        return wrapper

    return decorator


def with_network_retry(config: RetryConfig | None = None) -> Callable:
    """Retry decorator for HTTP calls (timeouts, connection errors, 429, 5xx)."""
    return with_retry(
        config=config,
        retry_on=(NetworkTimeoutError, NetworkConnectionError, RateLimitError, ServerError),
    )


# Error classification helpers

def classify_http_error(status_code: int, error_message: str = "") -> Exception:
    """Classify HTTP error status into retryable or non-retryable.

    Args:
        status_code: HTTP status code
        error_message: Context for the error message (usually the URL)

    Returns:
        Appropriate exception instance
    """
    if status_code == 429:
        return RateLimitError(f"Rate limit exceeded: {error_message}")

    if 500 <= status_code < 600:
        return ServerError(f"Server error (HTTP {status_code}): {error_message}")

    if status_code == 408:
        return NetworkTimeoutError(f"Request timeout: {error_message}")

    if 400 <= status_code < 500:
        return InvalidRequestError(f"Invalid request (HTTP {status_code}): {error_message}")

    return NonRetryableError(f"HTTP error {status_code}: {error_message}")


def classify_httpx_error(exception: httpx.HTTPError) -> Exception:
    """Map an httpx exception onto the retry taxonomy.

    Example:
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            raise classify_httpx_error(e) from e
    """
    if isinstance(exception, httpx.HTTPStatusError):
        return classify_http_error(exception.response.status_code, str(exception.request.url))

    if isinstance(exception, httpx.TimeoutException):
        return NetworkTimeoutError(str(exception) or type(exception).__name__)

    if isinstance(exception, httpx.TransportError):
        return NetworkConnectionError(str(exception) or type(exception).__name__)

    return NonRetryableError(str(exception))
