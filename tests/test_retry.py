import asyncio

import pytest

from app.core.errors import AppError, ErrorKind
from app.utils.retry import backoff_delay, retry_with_backoff


class FlakyOperation:
    def __init__(self, failures, error=None, result="ok"):
        self.failures = failures
        self.error = error or AppError(ErrorKind.NETWORK, "network down")
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures is None or self.calls <= self.failures:
            raise self.error
        return self.result


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


def test_backoff_delay_doubles():
    assert [backoff_delay(1000, attempt) for attempt in range(4)] == [1000, 2000, 4000, 8000]


def test_succeeds_after_two_retryable_failures():
    operation = FlakyOperation(failures=2)
    sleep = RecordingSleep()
    result = asyncio.run(retry_with_backoff(operation, max_retries=3, initial_delay=100, sleep=sleep))
    assert result == "ok"
    assert operation.calls == 3
    assert sleep.delays == [0.1, 0.2]


def test_non_retryable_error_fails_immediately():
    operation = FlakyOperation(failures=None, error=AppError(ErrorKind.VALIDATION, "bad"))
    sleep = RecordingSleep()
    with pytest.raises(AppError) as exc_info:
        asyncio.run(retry_with_backoff(operation, max_retries=3, sleep=sleep))
    assert exc_info.value.kind is ErrorKind.VALIDATION
    assert operation.calls == 1
    assert sleep.delays == []


def test_exhausted_retries_raise_last_error():
    operation = FlakyOperation(failures=None)
    sleep = RecordingSleep()
    with pytest.raises(AppError) as exc_info:
        asyncio.run(retry_with_backoff(operation, max_retries=2, initial_delay=1000, sleep=sleep))
    assert exc_info.value is operation.error
    assert operation.calls == 3
    assert sleep.delays == [1.0, 2.0]


def test_plain_exceptions_use_generic_check():
    operation = FlakyOperation(failures=1, error=TimeoutError("timed out"))
    sleep = RecordingSleep()
    assert asyncio.run(retry_with_backoff(operation, max_retries=1, sleep=sleep)) == "ok"
    assert operation.calls == 2

    operation = FlakyOperation(failures=1, error=KeyError("missing"))
    with pytest.raises(KeyError):
        asyncio.run(retry_with_backoff(operation, max_retries=3, sleep=sleep))
    assert operation.calls == 1


def test_zero_retries_means_single_attempt():
    operation = FlakyOperation(failures=None)
    with pytest.raises(AppError):
        asyncio.run(retry_with_backoff(operation, max_retries=0, sleep=RecordingSleep()))
    assert operation.calls == 1


def test_retry_logs_use_user_facing_message(caplog):
    operation = FlakyOperation(failures=None, error=AppError(ErrorKind.NETWORK, "network down"))
    with caplog.at_level("WARNING", logger="app.utils.retry"), pytest.raises(AppError):
        asyncio.run(retry_with_backoff(operation, max_retries=1, initial_delay=10, sleep=RecordingSleep()))

    messages = [record.getMessage() for record in caplog.records]
    assert messages == [
        "Retry attempt 1/1 after 10ms: network down",
        "Giving up after 2 attempts: network down",
    ]
