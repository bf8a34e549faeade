"""
Request coalescing

When several callers miss the cache for the same key at the same time, only
the first one fetches; the others await its outcome. The entry is dropped as
soon as the fetch settles, so it never acts as a second cache.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict

from ..utils import get_logger

logger = get_logger(__name__)

class RequestCoalescer:
    """Single-flight execution keyed by cache key"""

    def __init__(self):
        self._in_flight: Dict[str, asyncio.Task] = {}
        self._stats = {
            "requests": 0,
            "coalesced": 0,
            "fetches": 0,
        }

    @property
    def stats(self) -> Dict[str, int]:
        return self._stats.copy()

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    async def run(self, key: str, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run fetch unless an identical request is already in flight

        Args:
            key: Identity of the request (the cache key)
            fetch: Zero-argument callable returning an awaitable

        Returns:
            The result of the single shared fetch; its exception is raised
            to every waiting caller

        The fetch runs as its own task, so cancelling any caller, the first
        one included, leaves it running for the others.
        """
        self._stats["requests"] += 1

        task = self._in_flight.get(key)
        if task is not None:
            self._stats["coalesced"] += 1
            logger.debug(f"Joining in-flight request for {key}")
        else:
            task = asyncio.ensure_future(fetch())
            self._in_flight[key] = task
            self._stats["fetches"] += 1
            task.add_done_callback(lambda done, key=key: self._settle(key, done))

        return await asyncio.shield(task)

    def _settle(self, key: str, task: asyncio.Task):
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        # Mark retrieved so a failure nobody awaited is not reported at GC
        if not task.cancelled():
            task.exception()
