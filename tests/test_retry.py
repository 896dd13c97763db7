"""Tests for the retry executor."""
import asyncio
from unittest.mock import AsyncMock

import pytest

from jobsweep.exceptions import BotDetectedError, NavigationTimeoutError, RetryExhaustedError
from jobsweep.ingest.retry import RetryExecutor, with_retry


@pytest.mark.asyncio
async def test_always_failing_operation_is_tried_three_times(no_sleep):
    operation = AsyncMock(side_effect=ValueError("boom"))

    with pytest.raises(RetryExhaustedError) as exc_info:
        await RetryExecutor(max_attempts=3).run(operation, "Indeed scrape")

    assert operation.await_count == 3
    message = str(exc_info.value)
    assert "Indeed scrape" in message
    assert "3 attempts" in message
    assert "boom" in message
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, ValueError)
    assert exc_info.value.__cause__ is exc_info.value.last_error


@pytest.mark.asyncio
async def test_backoff_grows_between_attempts(no_sleep):
    operation = AsyncMock(side_effect=NavigationTimeoutError("slow", source="indeed"))

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(max_attempts=3, base_delay=1.0, max_delay=10.0).run(operation, "op")

    # No sleep after the final attempt
    assert [call.args[0] for call in no_sleep.await_args_list] == [2.0, 4.0]


def test_backoff_is_capped():
    executor = RetryExecutor(base_delay=1.0, max_delay=10.0)
    assert executor.backoff_delay(1) == 2.0
    assert executor.backoff_delay(3) == 8.0
    assert executor.backoff_delay(5) == 10.0


@pytest.mark.asyncio
async def test_recovers_after_transient_failure(no_sleep):
    operation = AsyncMock(side_effect=[ConnectionError("reset"), ["job"]])

    result = await RetryExecutor(max_attempts=3).run(operation, "op")

    assert result == ["job"]
    assert operation.await_count == 2


@pytest.mark.asyncio
async def test_non_retryable_error_stops_immediately(no_sleep):
    operation = AsyncMock(side_effect=BotDetectedError("captcha", source="glassdoor", retryable=False))

    with pytest.raises(RetryExhaustedError) as exc_info:
        await RetryExecutor(max_attempts=3).run(operation, "Glassdoor scrape")

    assert operation.await_count == 1
    assert exc_info.value.attempts == 1
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_bot_detection_is_retried_by_default(no_sleep):
    operation = AsyncMock(side_effect=BotDetectedError("captcha", source="glassdoor"))

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(max_attempts=2).run(operation, "Glassdoor scrape")

    assert operation.await_count == 2


@pytest.mark.asyncio
async def test_per_call_attempt_override(no_sleep):
    operation = AsyncMock(side_effect=RuntimeError("nope"))

    with pytest.raises(RetryExhaustedError):
        await RetryExecutor(max_attempts=5).run(operation, "op", max_attempts=2)

    assert operation.await_count == 2


@pytest.mark.asyncio
async def test_cancellation_is_not_retried(no_sleep):
    operation = AsyncMock(side_effect=asyncio.CancelledError())

    with pytest.raises(asyncio.CancelledError):
        await RetryExecutor(max_attempts=3).run(operation, "op")

    assert operation.await_count == 1


@pytest.mark.asyncio
async def test_with_retry_helper(no_sleep):
    operation = AsyncMock(return_value=42)
    assert await with_retry(operation, "op") == 42
