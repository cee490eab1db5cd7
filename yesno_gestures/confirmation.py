"""
Confirmation gate: holds the latest candidate until it stops changing.
"""
import logging
from typing import Callable, Optional

from .scheduling import Scheduler, TimerHandle
from .types import FinalSignal, RawCandidate


logger = logging.getLogger(__name__)


class ConfirmationGate:
    """
    Debounces raw candidates into final signals.

    Features:
    - At most one pending candidate; a new one replaces it (last write wins)
    - One hold timer, restarted on every submit
    - Superseded timers can never finalize (generation check)
    """

    def __init__(self, scheduler: Scheduler, hold_ms: int,
                 on_final: Callable[[FinalSignal], None]):
        """
        Initialize the gate.

        Args:
            scheduler: Timer source
            hold_ms: Time a candidate must stay unchanged before it is final
            on_final: Called once per finalized signal
        """
        self.scheduler = scheduler
        self.hold_ms = hold_ms
        self.on_final = on_final
        self._pending: Optional[RawCandidate] = None
        self._timer: Optional[TimerHandle] = None
        self._generation = 0

    @property
    def pending(self) -> Optional[RawCandidate]:
        return self._pending

    def has_pending(self, gesture_type: Optional[str] = None) -> bool:
        """True if a candidate is held (optionally: for this gesture type)."""
        if self._pending is None:
            return False
        return gesture_type is None or self._pending.gesture_type == gesture_type

    def submit(self, candidate: RawCandidate) -> None:
        """Replace any pending candidate and restart the hold timer."""
        self._cancel_timer()
        if self._pending is not None:
            logger.debug("Replacing pending %s with %s", self._pending.value, candidate.value)
        self._pending = candidate
        self._generation += 1
        generation = self._generation
        self._timer = self.scheduler.call_later(self.hold_ms, lambda: self._finalize(generation))

    def cancel(self) -> None:
        """Drop any pending candidate without emitting."""
        self._cancel_timer()
        self._generation += 1
        if self._pending is not None:
            logger.debug("Cancelled pending %s candidate", self._pending.gesture_type)
        self._pending = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _finalize(self, generation: int) -> None:
        if generation != self._generation or self._pending is None:
            return
        candidate = self._pending
        self._pending = None
        self._timer = None
        signal = FinalSignal(
            value=candidate.value,
            gesture_type=candidate.gesture_type,
            timestamp_ms=candidate.timestamp_ms + self.hold_ms
        )
        self.on_final(signal)
