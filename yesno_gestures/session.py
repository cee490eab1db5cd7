"""
Gesture session controller: one active detector, one confirmation gate.
"""
import logging
from typing import AsyncIterator, Callable, List, Optional

from .calibration import CalibrationBusyError, Calibrator
from .config import Cfg
from .confirmation import ConfirmationGate
from .gestures import GestureDetector, create_detector
from .scheduling import Scheduler
from .types import GESTURE_TYPES, DetectionStatus, FinalSignal, MeasurementFrame, RawCandidate


logger = logging.getLogger(__name__)


class SessionClosedError(RuntimeError):
    """Raised when a closed session is fed frames."""


class GestureSession:
    """
    Routes frames to the active gesture detector and publishes answers.

    The session is a single-owner state machine: call it from one loop only.
    Switching gesture, selecting a new question (`reset`) and recalibrating
    all replace the detector instance and cancel any pending candidate.
    """

    def __init__(self, cfg: Cfg, scheduler: Scheduler, gesture: Optional[str] = None):
        """
        Initialize the session.

        Args:
            cfg: Engine configuration
            scheduler: Timer source for the confirmation gate
            gesture: Initial gesture type (defaults to session.default_gesture)
        """
        self.cfg = cfg
        self.scheduler = scheduler
        self.gate = ConfirmationGate(scheduler, cfg.confirmation.hold_ms, on_final=self._on_final)
        self.calibrator = Calibrator(cfg.calibration)

        self._answer_listeners: List[Callable[[FinalSignal], None]] = []
        self._status_listeners: List[Callable[[DetectionStatus], None]] = []
        self._status: DetectionStatus = "waiting"
        self._error: Optional[str] = None
        self._answered = False
        self._closed = False
        self._last_frame_ms: Optional[int] = None

        gesture = gesture or cfg.session.default_gesture
        self._check_gesture(gesture)
        self.active_gesture = gesture
        self.detector: GestureDetector = self._new_detector()

    @property
    def status(self) -> DetectionStatus:
        return self._status

    @property
    def error(self) -> Optional[str]:
        return self._error

    def subscribe(self, callback: Callable[[FinalSignal], None]) -> Callable[[], None]:
        """Register an answer listener. Returns a function that unsubscribes it."""
        self._answer_listeners.append(callback)
        return lambda: self._remove(self._answer_listeners, callback)

    def on_status(self, callback: Callable[[DetectionStatus], None]) -> Callable[[], None]:
        """Register a status listener. Returns a function that unsubscribes it."""
        self._status_listeners.append(callback)
        return lambda: self._remove(self._status_listeners, callback)

    def set_active_gesture(self, gesture: str) -> None:
        """
        Switch the active gesture and reset all detection state.

        Raises:
            ValueError: If the gesture type is unknown
        """
        self._check_gesture(gesture)
        if gesture != self.active_gesture:
            logger.info("Active gesture: %s -> %s", self.active_gesture, gesture)
        self.active_gesture = gesture
        self._restart()

    def reset(self) -> None:
        """Start over for a new question, keeping the active gesture."""
        if self._error is not None:
            logger.info("Clearing error status: %s", self._error)
        self._error = None
        self._restart()

    def set_error(self, message: str) -> None:
        """Report a fatal upstream failure. Frames are ignored until `reset()`."""
        logger.warning("Upstream error: %s", message)
        self._error = message
        self.gate.cancel()
        self._set_status("error")

    def on_frame(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        """
        Process one frame from the tracker.

        Args:
            frame: Measurement frame

        Returns:
            The raw candidate raised by the detector, if any

        Raises:
            SessionClosedError: If the session was closed
        """
        if self._closed:
            raise SessionClosedError("Session is closed")
        if self._error is not None or self._answered:
            return None

        # Throttle to the detection rate
        if self._last_frame_ms is not None and \
                frame.timestamp_ms - self._last_frame_ms < self.cfg.session.detection_interval_ms:
            return None
        self._last_frame_ms = frame.timestamp_ms

        if not frame.face_detected:
            self._set_status("searching")
            return None

        self._set_status("detected")
        candidate = self.detector.consume(frame)
        if candidate is not None:
            self.gate.submit(candidate)
        return candidate

    async def start_calibration(self) -> AsyncIterator[int]:
        """
        Recalibrate: drop baselines and yield calibration progress 0..100.

        Raises:
            CalibrationBusyError: If a calibration run is already in progress
        """
        if self.calibrator.in_progress:
            raise CalibrationBusyError("Calibration already in progress")
        self._restart()
        steps = self.calibrator.run()
        try:
            async for percent in steps:
                yield percent
        finally:
            await steps.aclose()

    def close(self) -> None:
        """Cancel pending work. Further frames raise SessionClosedError."""
        if self._closed:
            return
        self.gate.cancel()
        self.calibrator.cancel()
        self._closed = True

    def _restart(self) -> None:
        self.gate.cancel()
        self.detector = self._new_detector()
        self._answered = False
        self._last_frame_ms = None
        if self._error is None:
            self._set_status("searching")

    def _new_detector(self) -> GestureDetector:
        return create_detector(self.active_gesture, self.cfg, is_pending=self.gate.has_pending)

    def _on_final(self, signal: FinalSignal) -> None:
        logger.info("Answer: %s (%s) at %d ms", signal.value, signal.gesture_type, signal.timestamp_ms)
        if self.cfg.session.pause_after_answer:
            self._answered = True
            self._set_status("waiting")
        for callback in list(self._answer_listeners):
            callback(signal)

    def _set_status(self, status: DetectionStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for callback in list(self._status_listeners):
            callback(status)

    @staticmethod
    def _check_gesture(gesture: str) -> None:
        if gesture not in GESTURE_TYPES:
            raise ValueError(f"Unknown gesture type: {gesture}")

    @staticmethod
    def _remove(listeners: list, callback) -> None:
        if callback in listeners:
            listeners.remove(callback)
