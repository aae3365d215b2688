"""
Retry utilities with exponential backoff.

Classifies failures from the Sonar API and other network calls into
transient and permanent ones and retries only the former.
"""

import asyncio
import functools
import random
import time
import structlog
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Tuple, Type

import aiohttp


logger = structlog.get_logger(__name__)


class ErrorCategory(Enum):
    """Error category classification"""
    RETRYABLE = "retryable"
    NON_RETRYABLE = "non_retryable"
    RATE_LIMITED = "rate_limited"


@dataclass
class RetryConfig:
    """Configuration for retry behavior"""
    max_attempts: int = 3
    initial_delay: float = 0.5  # seconds
    max_delay: float = 10.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    jitter_range: float = 0.2  # +/- 20%
    rate_limit_multiplier: float = 4.0


@dataclass
class RetryMetrics:
    """Counters for retried operations"""
    total_attempts: int = 0
    successful_attempts: int = 0
    failed_attempts: int = 0
    retry_count: int = 0
    total_retry_duration_ms: float = 0.0
    last_error: Optional[str] = None
    last_error_timestamp: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "total_attempts": self.total_attempts,
            "successful_attempts": self.successful_attempts,
            "failed_attempts": self.failed_attempts,
            "retry_count": self.retry_count,
            "total_retry_duration_ms": self.total_retry_duration_ms,
            "last_error": self.last_error,
        }


RETRYABLE_STATUS_CODES = frozenset({408, 500, 502, 503, 504})

RETRYABLE_EXCEPTIONS = (
    ConnectionError,
    TimeoutError,
    asyncio.TimeoutError,
    aiohttp.ClientConnectionError,
    aiohttp.ServerTimeoutError,
)

NON_RETRYABLE_EXCEPTIONS = (
    ValueError,
    TypeError,
    KeyError,
    AttributeError,
)


def classify_error(exception: Exception) -> ErrorCategory:
    """
    Classify an exception as retryable, rate limited or permanent.

    HTTP status codes take precedence (read from ``status``, as set by
    aiohttp.ClientResponseError and SonarAPIError), then the exception
    type, then common transient phrases in the message.

    Args:
        exception: The exception to classify

    Returns:
        ErrorCategory indicating retry behavior
    """
    status_code = getattr(exception, "status", None)
    if isinstance(status_code, int):
        if status_code == 429:
            return ErrorCategory.RATE_LIMITED
        if status_code in RETRYABLE_STATUS_CODES:
            return ErrorCategory.RETRYABLE
        if 400 <= status_code < 500:
            return ErrorCategory.NON_RETRYABLE

    if isinstance(exception, RETRYABLE_EXCEPTIONS):
        return ErrorCategory.RETRYABLE

    if isinstance(exception, NON_RETRYABLE_EXCEPTIONS):
        return ErrorCategory.NON_RETRYABLE

    error_msg = str(exception).lower()
    retryable_patterns = [
        "connection",
        "timeout",
        "unavailable",
        "temporary",
        "transient"
    ]

    if any(pattern in error_msg for pattern in retryable_patterns):
        return ErrorCategory.RETRYABLE

    return ErrorCategory.NON_RETRYABLE


def calculate_delay(
    attempt: int,
    config: RetryConfig,
    category: ErrorCategory = ErrorCategory.RETRYABLE
) -> float:
    """
    Calculate delay for retry attempt with exponential backoff and jitter.

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration
        category: Error category; rate limited calls wait longer

    Returns:
        Delay in seconds
    """
    delay = config.initial_delay * (config.exponential_base ** attempt)
    if category == ErrorCategory.RATE_LIMITED:
        delay *= config.rate_limit_multiplier

    delay = min(delay, config.max_delay)

    if config.jitter:
        jitter = random.uniform(-config.jitter_range, config.jitter_range)
        delay = delay * (1 + jitter)

    return max(0, delay)


def retry_with_backoff(
    config: Optional[RetryConfig] = None,
    retryable_exceptions: Optional[Tuple[Type[Exception], ...]] = None,
    on_retry: Optional[Callable] = None,
    metrics: Optional[RetryMetrics] = None
):
    """
    Decorator for retrying operations with exponential backoff.

    Args:
        config: Retry configuration (uses defaults if None)
        retryable_exceptions: Extra exception types that are always retried
        on_retry: Optional callback called as ``on_retry(attempt, error, delay)``
        metrics: Optional metrics object to track retry stats

    Returns:
        Decorated function (sync or async) with retry logic

    Example:
        @retry_with_backoff(RetryConfig(max_attempts=5))
        async def ask_sonar(payload):
            return await client.post(payload)
    """
    if config is None:
        config = RetryConfig()

    if metrics is None:
        metrics = RetryMetrics()

    def next_delay(func, attempt: int, error: Exception) -> float:
        """Record a failed attempt; re-raise it or return the backoff delay."""
        if retryable_exceptions and isinstance(error, retryable_exceptions):
            error_category = ErrorCategory.RETRYABLE
        else:
            error_category = classify_error(error)

        metrics.last_error = str(error)
        metrics.last_error_timestamp = datetime.now(timezone.utc)

        if error_category == ErrorCategory.NON_RETRYABLE:
            logger.error(
                "non_retryable_error",
                function=func.__name__,
                attempt=attempt + 1,
                error_type=type(error).__name__,
                error=str(error)
            )
            metrics.failed_attempts += 1
            raise error

        if attempt == config.max_attempts - 1:
            logger.error(
                "max_retries_exhausted",
                function=func.__name__,
                max_attempts=config.max_attempts,
                total_retry_duration_ms=metrics.total_retry_duration_ms,
                error_type=type(error).__name__,
                error=str(error)
            )
            metrics.failed_attempts += 1
            raise error

        delay = calculate_delay(attempt, config, error_category)
        metrics.retry_count += 1
        metrics.total_retry_duration_ms += delay * 1000

        logger.warning(
            "retrying_after_error",
            function=func.__name__,
            attempt=attempt + 1,
            max_attempts=config.max_attempts,
            delay_seconds=round(delay, 3),
            error_type=type(error).__name__,
            error_category=error_category.value
        )

        if on_retry:
            on_retry(attempt, error, delay)
        return delay

    def decorator(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                metrics.total_attempts += 1
                try:
                    result = await func(*args, **kwargs)
                except Exception as e:
                    delay = next_delay(func, attempt, e)
                else:
                    metrics.successful_attempts += 1
                    return result
                await asyncio.sleep(delay)

        @functools.wraps(func)
        def sync_wrapper(*args, **kwargs):
            for attempt in range(config.max_attempts):
                metrics.total_attempts += 1
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    delay = next_delay(func, attempt, e)
                else:
                    metrics.successful_attempts += 1
                    return result
                time.sleep(delay)

        if asyncio.iscoroutinefunction(func):
            return async_wrapper
        return sync_wrapper

    return decorator
