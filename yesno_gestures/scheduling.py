"""
Cancellable single-shot timers on a millisecond clock.

`AsyncioScheduler` runs on the event loop of the capture loop; frame
timestamps must come from `now_ms()` so that timers and frames share a clock.
`ManualScheduler` is a virtual clock for offline replay and tests.
"""
import asyncio
import heapq
import itertools
from typing import Callable, List, Optional, Protocol, Tuple


class TimerHandle:
    """Handle for a scheduled callback."""

    def __init__(self, callback: Callable[[], None]):
        self._callback = callback
        self._cancelled = False
        self._loop_handle: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the callback. Safe to call more than once."""
        self._cancelled = True
        if self._loop_handle is not None:
            self._loop_handle.cancel()

    def _run(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True  # single shot
        self._callback()


class Scheduler(Protocol):
    """Clock plus single-shot timers, in milliseconds."""

    def now_ms(self) -> int:
        """Current time on the scheduler clock."""
        ...

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` once after `delay_ms`."""
        ...


class AsyncioScheduler:
    """Scheduler backed by `loop.call_later` on the monotonic loop clock."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def now_ms(self) -> int:
        return int(self.loop.time() * 1000)

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        handle._loop_handle = self.loop.call_later(delay_ms / 1000.0, handle._run)
        return handle


class ManualScheduler:
    """
    Deterministic scheduler driven by explicit clock advances.

    Callbacks due at the same time run in the order they were scheduled.
    """

    def __init__(self, start_ms: int = 0):
        self._now = start_ms
        self._queue: List[Tuple[int, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now_ms(self) -> int:
        return self._now

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        heapq.heappush(self._queue, (self._now + delay_ms, next(self._seq), handle))
        return handle

    def advance_to(self, t_ms: int) -> None:
        """Move the clock forward to `t_ms`, running every callback due on the way."""
        if t_ms < self._now:
            raise ValueError(f"Clock cannot go backwards: {t_ms} < {self._now}")
        while self._queue and self._queue[0][0] <= t_ms:
            due, _, handle = heapq.heappop(self._queue)
            self._now = due
            handle._run()
        self._now = t_ms

    def advance(self, delta_ms: int) -> None:
        """Move the clock forward by `delta_ms`."""
        self.advance_to(self._now + delta_ms)

    @property
    def pending_count(self) -> int:
        """Number of scheduled callbacks that are still live."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)
