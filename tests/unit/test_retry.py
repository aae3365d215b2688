"""
Unit tests for exponential backoff retry logic.

Tests the retry decorator and backoff strategy used for transient failures
when calling the Sonar API:
- Error classification (status codes, exception types, messages)
- Delay calculation (exponential growth, cap, rate limit multiplier, jitter)
- Async and sync decorated functions
- Retry metrics and the on_retry callback
"""

import asyncio

import aiohttp
import pytest

from learnsphere.src.services.sonar_client import SonarAPIError
from learnsphere.src.utils.retry import (
    ErrorCategory,
    RetryConfig,
    RetryMetrics,
    calculate_delay,
    classify_error,
    retry_with_backoff,
)


@pytest.fixture
def retry_config():
    """Retry configuration for tests (no jitter, tiny delays)."""
    return RetryConfig(max_attempts=3, initial_delay=0.001, max_delay=0.01, jitter=False)


class TestClassifyError:
    """Test error classification."""

    @pytest.mark.parametrize("status,expected", [
        (429, ErrorCategory.RATE_LIMITED),
        (408, ErrorCategory.RETRYABLE),
        (500, ErrorCategory.RETRYABLE),
        (503, ErrorCategory.RETRYABLE),
        (400, ErrorCategory.NON_RETRYABLE),
        (401, ErrorCategory.NON_RETRYABLE),
        (404, ErrorCategory.NON_RETRYABLE),
    ])
    def test_status_codes(self, status, expected):
        assert classify_error(SonarAPIError(status, "boom")) == expected

    def test_connection_errors_are_retryable(self):
        assert classify_error(ConnectionError("reset")) == ErrorCategory.RETRYABLE
        assert classify_error(asyncio.TimeoutError()) == ErrorCategory.RETRYABLE
        assert classify_error(aiohttp.ClientConnectionError("refused")) == ErrorCategory.RETRYABLE

    def test_programming_errors_are_not_retryable(self):
        assert classify_error(ValueError("connection")) == ErrorCategory.NON_RETRYABLE
        assert classify_error(KeyError("text")) == ErrorCategory.NON_RETRYABLE

    def test_message_patterns(self):
        assert classify_error(RuntimeError("Service temporarily unavailable")) == ErrorCategory.RETRYABLE
        assert classify_error(RuntimeError("something odd")) == ErrorCategory.NON_RETRYABLE


class TestCalculateDelay:
    """Test backoff delay calculation."""

    def test_exponential_growth(self):
        config = RetryConfig(initial_delay=1.0, exponential_base=2.0, max_delay=100.0, jitter=False)

        assert [calculate_delay(n, config) for n in range(4)] == [1.0, 2.0, 4.0, 8.0]

    def test_capped_at_max_delay(self):
        config = RetryConfig(initial_delay=1.0, max_delay=5.0, jitter=False)

        assert calculate_delay(10, config) == 5.0

    def test_rate_limited_waits_longer(self):
        config = RetryConfig(initial_delay=1.0, max_delay=100.0, jitter=False, rate_limit_multiplier=4.0)

        assert calculate_delay(1, config, ErrorCategory.RATE_LIMITED) == 8.0

    def test_jitter_stays_in_range(self):
        config = RetryConfig(initial_delay=1.0, max_delay=100.0, jitter=True, jitter_range=0.2)

        for _ in range(50):
            assert 0.8 <= calculate_delay(0, config) <= 1.2


class TestAsyncRetry:
    """Test retry decorator on coroutines."""

    async def test_success_without_retry(self, retry_config):
        metrics = RetryMetrics()
        calls = 0

        @retry_with_backoff(retry_config, metrics=metrics)
        async def operation():
            nonlocal calls
            calls += 1
            return "ok"

        assert await operation() == "ok"
        assert calls == 1
        assert metrics.successful_attempts == 1
        assert metrics.retry_count == 0

    async def test_transient_failures_are_retried(self, retry_config):
        metrics = RetryMetrics()
        retries = []
        calls = 0

        @retry_with_backoff(
            retry_config,
            metrics=metrics,
            on_retry=lambda attempt, error, delay: retries.append(attempt)
        )
        async def operation():
            nonlocal calls
            calls += 1
            if calls < 3:
                raise SonarAPIError(503, "unavailable")
            return "ok"

        assert await operation() == "ok"
        assert calls == 3
        assert retries == [0, 1]
        assert metrics.retry_count == 2
        assert metrics.total_attempts == 3

    async def test_non_retryable_raises_immediately(self, retry_config):
        calls = 0

        @retry_with_backoff(retry_config)
        async def operation():
            nonlocal calls
            calls += 1
            raise SonarAPIError(401, "bad key")

        with pytest.raises(SonarAPIError) as exc_info:
            await operation()

        assert exc_info.value.status == 401
        assert calls == 1

    async def test_gives_up_after_max_attempts(self, retry_config):
        metrics = RetryMetrics()
        calls = 0

        @retry_with_backoff(retry_config, metrics=metrics)
        async def operation():
            nonlocal calls
            calls += 1
            raise aiohttp.ClientConnectionError("refused")

        with pytest.raises(aiohttp.ClientConnectionError):
            await operation()

        assert calls == 3
        assert metrics.failed_attempts == 1
        assert metrics.last_error == "refused"

    async def test_extra_retryable_exceptions(self, retry_config):
        class FlakyError(Exception):
            pass

        calls = 0

        @retry_with_backoff(retry_config, retryable_exceptions=(FlakyError,))
        async def operation():
            nonlocal calls
            calls += 1
            if calls == 1:
                raise FlakyError("odd")
            return calls

        assert await operation() == 2


class TestSyncRetry:
    """Test retry decorator on plain functions."""

    def test_sync_function_is_retried(self, retry_config):
        calls = 0

        @retry_with_backoff(retry_config)
        def operation():
            nonlocal calls
            calls += 1
            if calls < 2:
                raise ConnectionError("reset")
            return "ok"

        assert operation() == "ok"
        assert calls == 2

    def test_sync_wrapper_keeps_name(self, retry_config):
        @retry_with_backoff(retry_config)
        def fetch_answer():
            return 1

        assert fetch_answer.__name__ == "fetch_answer"
        assert not asyncio.iscoroutinefunction(fetch_answer)
