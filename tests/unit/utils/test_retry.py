"""Unit tests for RetryPolicy."""

from unittest.mock import AsyncMock

import pytest

from sqlagent.utils.retry import RetryPolicy, exponential_backoff, never_retry


class Flaky(Exception):
    pass


class Fatal(Exception):
    pass


def test_exponential_backoff_doubles():
    assert [exponential_backoff(n) for n in (1, 2, 3, 4)] == [1.0, 2.0, 4.0, 8.0]


def test_never_retry_rejects_everything():
    assert never_retry(Exception("boom")) is False


@pytest.mark.asyncio
async def test_returns_first_success_without_sleeping(no_sleep):
    policy = RetryPolicy(max_attempts=3, is_retryable=lambda exc: True, sleep=no_sleep)
    operation = AsyncMock(return_value="ok")

    assert await policy.run(operation) == "ok"
    assert operation.await_count == 1
    assert no_sleep.delays == []


@pytest.mark.asyncio
async def test_retries_retryable_errors_with_backoff(no_sleep):
    policy = RetryPolicy(
        max_attempts=3, is_retryable=lambda exc: isinstance(exc, Flaky), sleep=no_sleep
    )
    operation = AsyncMock(side_effect=[Flaky("drop"), Flaky("drop"), "rows"])
    on_retry = AsyncMock()

    result = await policy.run(operation, on_retry=on_retry)

    assert result == "rows"
    assert operation.await_count == 3
    assert no_sleep.delays == [1.0, 2.0]
    assert [call.args[0] for call in on_retry.await_args_list] == [2, 3]


@pytest.mark.asyncio
async def test_reraises_last_error_when_attempts_exhausted(no_sleep):
    policy = RetryPolicy(max_attempts=2, is_retryable=lambda exc: True, sleep=no_sleep)
    operation = AsyncMock(side_effect=[Flaky("first"), Flaky("second")])

    with pytest.raises(Flaky, match="second"):
        await policy.run(operation)

    assert operation.await_count == 2
    assert no_sleep.delays == [1.0]


@pytest.mark.asyncio
async def test_non_retryable_error_raises_immediately(no_sleep):
    policy = RetryPolicy(
        max_attempts=3, is_retryable=lambda exc: isinstance(exc, Flaky), sleep=no_sleep
    )
    operation = AsyncMock(side_effect=Fatal("syntax"))
    on_retry = AsyncMock()

    with pytest.raises(Fatal):
        await policy.run(operation, on_retry=on_retry)

    assert operation.await_count == 1
    on_retry.assert_not_awaited()
    assert no_sleep.delays == []


@pytest.mark.asyncio
async def test_default_policy_does_not_retry(no_sleep):
    policy = RetryPolicy(sleep=no_sleep)
    operation = AsyncMock(side_effect=Flaky("drop"))

    with pytest.raises(Flaky):
        await policy.run(operation)

    assert operation.await_count == 1
