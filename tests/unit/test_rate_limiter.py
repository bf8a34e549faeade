"""Unit tests for the admission-control rate limiter."""

import asyncio

import pytest

from finx.errors import MarketDataError
from finx.utils.rate_limiter import RateLimiter, RateLimitTimeout

from conftest import FakeClock


def make_task(log, value):
    async def task():
        log.append(value)
        return value
    return task


class TestRateLimiter:
    """Test sliding-window admission."""

    @pytest.fixture
    def fake_clock(self):
        return FakeClock()

    @pytest.fixture
    def limiter(self, fake_clock):
        return RateLimiter(5, 25, clock=fake_clock, sleep=fake_clock.sleep)

    @pytest.mark.asyncio
    async def test_admits_up_to_minute_limit_without_delay(self, limiter, fake_clock):
        """Test 5 tasks run immediately under a 5/min limit."""
        log = []

        results = await asyncio.gather(*(limiter.execute(make_task(log, i)) for i in range(5)))

        assert results == [0, 1, 2, 3, 4]
        assert fake_clock.sleeps == []

        stats = limiter.get_stats()
        assert stats.calls_last_minute == 5
        assert stats.calls_last_day == 5
        assert stats.queued == 0

    @pytest.mark.asyncio
    async def test_sixth_call_waits_for_minute_window(self, limiter, fake_clock):
        """Test the 6th task is deferred until the first timestamp leaves the window."""
        start = fake_clock.now
        admitted_at = []

        async def task():
            admitted_at.append(fake_clock.now)

        await asyncio.gather(*(limiter.execute(task) for _ in range(6)))

        assert admitted_at[:5] == [start] * 5
        assert admitted_at[5] - start >= 60
        assert fake_clock.sleeps == [61.0]

    @pytest.mark.asyncio
    async def test_day_limit(self, fake_clock):
        """Test the daily window defers calls once the day budget is spent."""
        limiter = RateLimiter(10, 2, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        await asyncio.gather(*(limiter.execute(make_task(log, i)) for i in range(3)))

        assert log == [0, 1, 2]
        assert fake_clock.sleeps == [24 * 60 * 60 + 1.0]

    @pytest.mark.asyncio
    async def test_fifo_order(self, fake_clock):
        limiter = RateLimiter(2, 25, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        await asyncio.gather(*(limiter.execute(make_task(log, i)) for i in range(5)))

        assert log == [0, 1, 2, 3, 4]

    @pytest.mark.asyncio
    async def test_failure_is_delivered_to_its_caller_only(self, limiter):
        """Test a failing task does not stop the queue and still counts."""
        async def boom():
            raise RuntimeError("vendor down")

        async def ok():
            return "ok"

        results = await asyncio.gather(
            limiter.execute(boom),
            limiter.execute(ok),
            return_exceptions=True
        )

        assert isinstance(results[0], RuntimeError)
        assert results[1] == "ok"
        assert limiter.get_stats().calls_last_minute == 2

    @pytest.mark.asyncio
    async def test_bounded_wait_raises_timeout(self, fake_clock):
        """Test a call needing more than max_wait is rejected, not admitted."""
        limiter = RateLimiter(5, 25, max_wait_seconds=30, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        results = await asyncio.gather(
            *(limiter.execute(make_task(log, i)) for i in range(6)),
            return_exceptions=True
        )

        assert results[:5] == [0, 1, 2, 3, 4]
        assert isinstance(results[5], RateLimitTimeout)
        assert isinstance(results[5], MarketDataError)
        assert results[5].required_wait == 61.0
        assert results[5].max_wait == 30
        assert log == [0, 1, 2, 3, 4]
        assert fake_clock.sleeps == []

    @pytest.mark.asyncio
    async def test_wait_within_bound_is_served(self, fake_clock):
        limiter = RateLimiter(5, 25, max_wait_seconds=120, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        await asyncio.gather(*(limiter.execute(make_task(log, i)) for i in range(6)))

        assert log == [0, 1, 2, 3, 4, 5]
        assert fake_clock.sleeps == [61.0]

    @pytest.mark.asyncio
    async def test_zero_limits_never_admit(self, fake_clock):
        """Test zero limits keep retrying every second until the bound is hit."""
        limiter = RateLimiter(0, 0, max_wait_seconds=5, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        with pytest.raises(RateLimitTimeout):
            await limiter.execute(make_task(log, 1))

        assert log == []
        assert fake_clock.sleeps == [1.0] * 5
        assert limiter.get_stats().calls_last_day == 0

    @pytest.mark.asyncio
    async def test_cancelled_caller_is_skipped(self, fake_clock):
        """Test a call cancelled while queued is never admitted."""
        limiter = RateLimiter(1, 25, clock=fake_clock, sleep=fake_clock.sleep)
        log = []

        first = asyncio.create_task(limiter.execute(make_task(log, "a")))
        second = asyncio.create_task(limiter.execute(make_task(log, "b")))
        third = asyncio.create_task(limiter.execute(make_task(log, "c")))
        await asyncio.sleep(0)

        second.cancel()

        assert await first == "a"
        with pytest.raises(asyncio.CancelledError):
            await second
        assert await third == "c"

        assert log == ["a", "c"]
        assert limiter.get_stats().calls_last_day == 2

    @pytest.mark.asyncio
    async def test_cancelled_task_does_not_stall_queue(self, limiter):
        """Test a task that raises CancelledError is reported to its caller and the queue keeps moving."""
        async def interrupted():
            raise asyncio.CancelledError()

        async def ok():
            return "ok"

        first = asyncio.create_task(limiter.execute(interrupted))
        second = asyncio.create_task(limiter.execute(ok))

        done, pending = await asyncio.wait({first, second}, timeout=1)

        assert not pending
        assert first.cancelled()
        assert second.result() == "ok"
        assert limiter.get_stats().queued == 0
        assert limiter.get_stats().calls_last_minute == 2

    def test_stats_prune_old_timestamps(self, limiter, fake_clock):
        """Test stats never count calls outside their windows."""
        asyncio.run(limiter.execute(make_task([], 1)))

        fake_clock.advance(61)
        stats = limiter.get_stats()
        assert stats.calls_last_minute == 0
        assert stats.calls_last_day == 1

        fake_clock.advance(24 * 60 * 60)
        stats = limiter.get_stats()
        assert stats.calls_last_day == 0

    @pytest.mark.asyncio
    async def test_describe_usage(self, limiter):
        await asyncio.gather(*(limiter.execute(make_task([], i)) for i in range(3)))

        assert limiter.describe_usage() == "API calls: 3/25 today, 3/5 this minute"

    def test_negative_limits_rejected(self):
        with pytest.raises(ValueError):
            RateLimiter(-1, 25)

    def test_limits_exposed(self):
        limiter = RateLimiter(7, 70, max_wait_seconds=15)

        assert limiter.max_calls_per_minute == 7
        assert limiter.max_calls_per_day == 70
        assert limiter.max_wait_seconds == 15
