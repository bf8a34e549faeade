"""
Admission control for quota-limited vendor APIs
Sliding per-minute and per-day windows in front of a FIFO work queue
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Deque, List, Optional

from ..errors import MarketDataError
from .logger import get_logger

logger = get_logger(__name__)

MINUTE_SECONDS = 60.0
DAY_SECONDS = 24 * 60 * 60.0

# Added on top of the computed window wait so the slot is really free
SAFETY_MARGIN_SECONDS = 1.0

# Used when a window is exhausted but holds no timestamps (zero limit)
DEFAULT_RETRY_SECONDS = 1.0

@dataclass
class RateLimiterStats:
    """Point-in-time usage of the two windows"""
    calls_last_minute: int
    calls_last_day: int
    queued: int = 0

@dataclass
class _PendingCall:
    task: Callable[[], Awaitable[Any]]
    future: asyncio.Future
    enqueued_at: float = field(default_factory=time.time)

class RateLimitTimeout(MarketDataError):
    """Raised when a queued call cannot be admitted within the maximum wait"""

    def __init__(self, required_wait: float, max_wait: float):
        self.required_wait = required_wait
        self.max_wait = max_wait
        super().__init__(
            f"Rate limit wait of {required_wait:.1f}s exceeds maximum of {max_wait:.1f}s"
        )

class RateLimiter:
    """
    Serializes calls to a quota-limited API

    Every call goes through a single drain task that admits work in FIFO
    order, one call in flight at a time, only when both the per-minute and
    the per-day sliding windows have room. Timestamps and the queue are only
    mutated by that task, so no lock is needed.
    """

    def __init__(
        self,
        max_calls_per_minute: int = 5,
        max_calls_per_day: int = 25,
        max_wait_seconds: Optional[float] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None
    ):
        if max_calls_per_minute < 0 or max_calls_per_day < 0:
            raise ValueError("Rate limits must not be negative")

        self._max_per_minute = max_calls_per_minute
        self._max_per_day = max_calls_per_day
        self._max_wait = max_wait_seconds
        self._clock = clock or time.time
        self._sleep = sleep or asyncio.sleep

        self._call_timestamps: List[float] = []
        self._queue: Deque[_PendingCall] = deque()
        self._draining = False
        self._drain_task: Optional[asyncio.Task] = None

    @property
    def max_calls_per_minute(self) -> int:
        return self._max_per_minute

    @property
    def max_calls_per_day(self) -> int:
        return self._max_per_day

    @property
    def max_wait_seconds(self) -> Optional[float]:
        return self._max_wait

    async def execute(self, task: Callable[[], Awaitable[Any]]) -> Any:
        """
        Queue a call and wait for its outcome

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            Whatever the task returns; its exception is re-raised here
        """
        loop = asyncio.get_running_loop()
        call = _PendingCall(task=task, future=loop.create_future(), enqueued_at=self._clock())
        self._queue.append(call)

        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())

        return await call.future

    def get_stats(self) -> RateLimiterStats:
        """Current window usage, pruned on read"""
        now = self._clock()
        self._prune(now)
        return RateLimiterStats(
            calls_last_minute=len(self._recent(now, MINUTE_SECONDS)),
            calls_last_day=len(self._call_timestamps),
            queued=len(self._queue)
        )

    def describe_usage(self) -> str:
        """Human readable quota line attached to results"""
        stats = self.get_stats()
        return (
            f"API calls: {stats.calls_last_day}/{self._max_per_day} today, "
            f"{stats.calls_last_minute}/{self._max_per_minute} this minute"
        )

    async def _drain(self):
        try:
            while self._queue:
                call = self._queue[0]

                # Caller was cancelled while queued
                if call.future.done():
                    self._queue.popleft()
                    continue

                wait = self._admission_delay()
                if wait > 0:
                    if self._max_wait is not None and self._clock() + wait > call.enqueued_at + self._max_wait:
                        self._queue.popleft()
                        logger.warning(
                            f"Rejecting queued call: needs {wait:.1f}s, "
                            f"max wait is {self._max_wait:.1f}s"
                        )
                        call.future.set_exception(RateLimitTimeout(wait, self._max_wait))
                        continue

                    logger.info(f"Rate limit reached, waiting {wait:.1f}s ({len(self._queue)} queued)")
                    await self._sleep(wait)
                    continue

                self._queue.popleft()
                self._call_timestamps.append(self._clock())

                try:
                    result = await call.task()
                except asyncio.CancelledError:
                    if not call.future.done():
                        call.future.cancel()
                    # Only a cancellation of the drain task itself ends the loop
                    if asyncio.current_task().cancelling():
                        raise
                except Exception as e:
                    if not call.future.done():
                        call.future.set_exception(e)
                else:
                    if not call.future.done():
                        call.future.set_result(result)
        finally:
            self._draining = False
            self._drain_task = None

    def _admission_delay(self) -> float:
        """Seconds until both windows have room, 0 if a call may start now"""
        now = self._clock()
        self._prune(now)

        delays = []
        recent = self._recent(now, MINUTE_SECONDS)
        if len(recent) >= self._max_per_minute:
            delays.append(self._window_delay(recent, MINUTE_SECONDS, now))
        if len(self._call_timestamps) >= self._max_per_day:
            delays.append(self._window_delay(self._call_timestamps, DAY_SECONDS, now))

        return max(delays) if delays else 0.0

    @staticmethod
    def _window_delay(timestamps: List[float], window: float, now: float) -> float:
        if not timestamps:
            return DEFAULT_RETRY_SECONDS
        return max(min(timestamps) + window - now + SAFETY_MARGIN_SECONDS, DEFAULT_RETRY_SECONDS)

    def _recent(self, now: float, window: float) -> List[float]:
        cutoff = now - window
        return [ts for ts in self._call_timestamps if ts > cutoff]

    def _prune(self, now: float):
        cutoff = now - DAY_SECONDS
        self._call_timestamps = [ts for ts in self._call_timestamps if ts > cutoff]
