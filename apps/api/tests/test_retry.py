"""Backoff retry helper."""

from __future__ import annotations

import pytest

from skycache_api.upstream.retry import backoff_delay, call_with_retry


class _Flaky:
    def __init__(self, failures: int, exc: Exception) -> None:
        self.failures = failures
        self.exc = exc
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


@pytest.fixture
def sleeps():
    recorded: list[float] = []

    async def _sleep(delay: float) -> None:
        recorded.append(delay)

    _sleep.recorded = recorded
    return _sleep


def test_backoff_doubles_up_to_cap():
    delays = [backoff_delay(n, 0.5, 3.0, jitter=False) for n in range(5)]
    assert delays == [0.5, 1.0, 2.0, 3.0, 3.0]


def test_backoff_jitter_stays_in_band():
    for _ in range(50):
        assert 0.5 <= backoff_delay(1, 1.0, 10.0, jitter=True) <= 3.0


async def test_succeeds_after_transient_failures(sleeps):
    func = _Flaky(2, ConnectionError("reset"))
    result = await call_with_retry(func, max_retries=3, jitter=False, sleep=sleeps)
    assert result == "ok"
    assert func.calls == 3
    assert sleeps.recorded == [0.5, 1.0]


async def test_gives_up_after_max_retries(sleeps):
    func = _Flaky(10, ConnectionError("reset"))
    with pytest.raises(ConnectionError):
        await call_with_retry(func, max_retries=2, sleep=sleeps)
    assert func.calls == 3


async def test_non_retryable_error_is_raised_immediately(sleeps):
    func = _Flaky(1, ValueError("bad"))
    with pytest.raises(ValueError, match="bad"):
        await call_with_retry(
            func,
            retry_if=lambda exc: isinstance(exc, ConnectionError),
            sleep=sleeps,
        )
    assert func.calls == 1
    assert sleeps.recorded == []
