"""Sliding-window rate limiting per Riot routing host."""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Callable, Deque, Iterable, Optional, Tuple

from config import settings

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


class SlidingWindowLimiter:
    """
    Admits at most ``max_requests`` calls in any rolling ``window_ms``.

    Callers that cannot be admitted wait in a FIFO queue. A sweep task wakes
    when the oldest timestamp leaves the window (and at least once per
    window), prunes, and releases waiters in arrival order. All state is
    touched only between awaits on the owning event loop, so the fast path
    and the sweep never interleave.
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        *,
        name: str = "default",
        clock: Clock = time.monotonic,
    ) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be >= 1")
        self.name = name
        self.window_ms = window_ms
        self.max_requests = max_requests
        self._window_s = window_ms / 1000.0
        self._clock = clock
        self._times: Deque[float] = deque()
        self._waiters: Deque[asyncio.Future] = deque()
        self._sweeper: Optional[asyncio.Task] = None

    async def acquire(self) -> None:
        now = self._clock()
        self._prune(now)
        if not self._waiters and len(self._times) < self.max_requests:
            self._times.append(now)
            return

        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        logger.debug(f"{self.name}: window full, queued (waiting={len(self._waiters)})")
        self._ensure_sweeper()
        await waiter

    def status(self) -> Tuple[int, int]:
        self._prune(self._clock())
        return len(self._times), self.max_requests

    @property
    def waiting(self) -> int:
        return sum(1 for w in self._waiters if not w.done())

    def close(self) -> None:
        if self._sweeper is not None:
            self._sweeper.cancel()
            self._sweeper = None
        while self._waiters:
            self._waiters.popleft().cancel()

    # ------------------------------------------------------------------ #

    def _prune(self, now: float) -> None:
        cutoff = now - self._window_s
        while self._times and self._times[0] <= cutoff:
            self._times.popleft()

    def _flush(self) -> None:
        now = self._clock()
        self._prune(now)
        while self._waiters and len(self._times) < self.max_requests:
            waiter = self._waiters.popleft()
            if waiter.done():
                # caller was cancelled while queued
                continue
            self._times.append(now)
            waiter.set_result(None)

    def _ensure_sweeper(self) -> None:
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep())

    async def _sweep(self) -> None:
        try:
            while True:
                self._flush()
                if not self._waiters:
                    return
                wait = self._window_s
                if self._times:
                    expires_in = self._times[0] + self._window_s - self._clock()
                    wait = min(wait, max(expires_in, 0.0))
                await asyncio.sleep(wait + 0.001)
        finally:
            if self._sweeper is asyncio.current_task():
                self._sweeper = None


class DualWindowLimiter:
    """Short burst window and long sustained window; callers pass both in order."""

    def __init__(self, short: SlidingWindowLimiter, long: SlidingWindowLimiter) -> None:
        self.short = short
        self.long = long

    async def acquire(self) -> None:
        await self.short.acquire()
        await self.long.acquire()

    def status(self) -> Tuple[int, int, int, int]:
        used_short, max_short = self.short.status()
        used_long, max_long = self.long.status()
        return used_short, max_short, used_long, max_long

    def close(self) -> None:
        self.short.close()
        self.long.close()


class PartitionRateLimiter:
    """One dual-window limiter per routing host; unknown hosts share the default's."""

    def __init__(
        self,
        partitions: Iterable[str],
        *,
        default_partition: str,
        short_window_ms: int,
        short_max_requests: int,
        long_window_ms: int,
        long_max_requests: int,
        clock: Clock = time.monotonic,
    ) -> None:
        self._limiters: dict[str, DualWindowLimiter] = {}
        keys = list(dict.fromkeys([*partitions, default_partition]))
        for key in keys:
            self._limiters[key] = DualWindowLimiter(
                SlidingWindowLimiter(short_window_ms, short_max_requests, name=f"{key}/short", clock=clock),
                SlidingWindowLimiter(long_window_ms, long_max_requests, name=f"{key}/long", clock=clock),
            )
        self.default_partition = default_partition

    @classmethod
    def from_settings(cls, clock: Clock = time.monotonic) -> 'PartitionRateLimiter':
        return cls(
            settings.RATE_LIMIT_PARTITIONS,
            default_partition=settings.DEFAULT_PARTITION,
            short_window_ms=settings.SHORT_WINDOW_MS,
            short_max_requests=settings.SHORT_WINDOW_REQUESTS,
            long_window_ms=settings.LONG_WINDOW_MS,
            long_max_requests=settings.LONG_WINDOW_REQUESTS,
            clock=clock,
        )

    @property
    def partitions(self) -> list[str]:
        return list(self._limiters)

    def _limiter(self, partition: str) -> DualWindowLimiter:
        return self._limiters.get(partition) or self._limiters[self.default_partition]

    async def acquire(self, partition: str) -> None:
        await self._limiter(partition).acquire()

    def status(self, partition: str) -> Tuple[int, int, int, int]:
        return self._limiter(partition).status()

    def close(self) -> None:
        for limiter in self._limiters.values():
            limiter.close()
