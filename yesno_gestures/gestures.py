"""
Gesture detectors that convert facial measurements into yes/no candidates.
"""
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Deque, Dict, List, Optional, Tuple, Type

import numpy as np

from .config import Cfg, GestureGuide
from .landmarks import eye_blink_score, face_center, head_pitch, mouth_width
from .types import Answer, GestureType, MeasurementFrame, RawCandidate


logger = logging.getLogger(__name__)

# Asked before raising a candidate: does the confirmation gate already hold
# one for this gesture type?
PendingCheck = Callable[[str], bool]


def _never_pending(gesture_type: str) -> bool:
    return False


@dataclass
class BlinkState:
    """Blink tracking state."""
    is_blinking: bool = False
    blink_start_ms: int = 0
    history: List[int] = field(default_factory=list)  # end times of genuine blinks
    single_check_at_ms: Optional[int] = None


@dataclass
class SmileState:
    """Smile tracking state."""
    neutral_mouth_width: float = 0.0  # 0 = not captured yet
    is_smiling: bool = False
    smile_start_ms: int = 0
    yes_emitted: bool = False


@dataclass
class NodState:
    """Nod tracking state."""
    neutral_head_pitch: float = 0.0  # 0 = not captured yet
    is_nodding: bool = False
    nod_count: int = 0
    last_nod_ms: int = 0


@dataclass
class WaveState:
    """Wave tracking state."""
    positions: Deque[Tuple[float, float]] = field(default_factory=deque)
    is_waving: bool = False
    wave_count: int = 0
    last_wave_ms: int = 0


class GestureDetector:
    """
    Base class for gesture detectors.

    A detector owns one state record and turns a stream of frames into at most
    one RawCandidate per frame. Detectors are never reset in place: the session
    replaces the whole instance, which is what guarantees a clean state.
    """

    gesture_type: GestureType

    def __init__(self, cfg: Cfg, is_pending: PendingCheck = _never_pending):
        """Initialize detector with configuration and the gate's pending check."""
        self.cfg = cfg
        self.is_pending = is_pending

    @property
    def guide(self) -> GestureGuide:
        """User-facing description of this gesture."""
        return getattr(self.cfg.gestures, self.gesture_type).guide

    def consume(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        """
        Process one frame with a detected face.

        Args:
            frame: Measurement frame (face_detected is True)

        Returns:
            RawCandidate if the frame completes a gesture, None otherwise
        """
        raise NotImplementedError

    def _pending(self) -> bool:
        return self.is_pending(self.gesture_type)

    def _candidate(self, value: Answer, t_now: int) -> RawCandidate:
        logger.debug("%s candidate: %s at %d ms", self.gesture_type, value, t_now)
        return RawCandidate(value=value, gesture_type=self.gesture_type, timestamp_ms=t_now)


class BlinkGesture(GestureDetector):
    """
    Single blink means yes, double blink means no.

    Features:
    - Duration band filters tracking noise and deliberate eye closure
    - Rolling history of recent genuine blinks
    - Deferred single-blink check, evaluated on frame time
    """

    gesture_type = "blink"

    def __init__(self, cfg: Cfg, is_pending: PendingCheck = _never_pending):
        super().__init__(cfg, is_pending)
        self.state = BlinkState()

    def consume(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        score = eye_blink_score(frame.blendshapes)
        if score is None:
            return None

        blink = self.cfg.gestures.blink
        state = self.state
        t_now = frame.timestamp_ms

        state.history = [t for t in state.history if t_now - t < blink.history_window_ms]

        if score > blink.threshold and not state.is_blinking:
            state.is_blinking = True
            state.blink_start_ms = t_now
        elif score < blink.threshold and state.is_blinking:
            state.is_blinking = False
            candidate = self._blink_ended(t_now)
            if candidate is not None:
                return candidate

        return self._check_single_blink(t_now)

    def _blink_ended(self, t_now: int) -> Optional[RawCandidate]:
        blink = self.cfg.gestures.blink
        state = self.state

        duration = t_now - state.blink_start_ms
        if not blink.min_duration_ms < duration < blink.max_duration_ms:
            logger.debug("Ignoring eye closure of %d ms", duration)
            return None

        state.history.append(t_now)

        if len(state.history) >= 2:
            gap = state.history[-1] - state.history[-2]
            if gap < blink.double_signal_window_ms:
                state.history.clear()
                state.single_check_at_ms = None
                return self._candidate("no", t_now)

        # Unpaired blink: evaluate it as a fresh single blink
        state.history = [t_now]
        state.single_check_at_ms = t_now + blink.confirmation_delay_ms
        return None

    def _check_single_blink(self, t_now: int) -> Optional[RawCandidate]:
        state = self.state
        if state.single_check_at_ms is None or t_now < state.single_check_at_ms:
            return None

        state.single_check_at_ms = None
        if len(state.history) == 1 and not self._pending():
            state.history.clear()
            return self._candidate("yes", t_now)
        return None


class SmileGesture(GestureDetector):
    """
    Sustained smile means yes; a smile dropped before it counts means no.

    The neutral mouth width is captured from the first valid frame after the
    detector is created, so the threshold is relative to the user's face.
    """

    gesture_type = "smile"

    def __init__(self, cfg: Cfg, is_pending: PendingCheck = _never_pending):
        super().__init__(cfg, is_pending)
        self.state = SmileState()

    def consume(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        width = mouth_width(frame.landmarks)
        if width is None:
            return None

        smile = self.cfg.gestures.smile
        state = self.state
        t_now = frame.timestamp_ms

        if not state.neutral_mouth_width:
            state.neutral_mouth_width = width
            logger.debug("Smile baseline captured: %.4f", width)
            return None

        threshold = state.neutral_mouth_width * smile.threshold_multiplier

        if width > threshold:
            if not state.is_smiling:
                state.is_smiling = True
                state.smile_start_ms = t_now
                state.yes_emitted = False
                return None
            held_ms = t_now - state.smile_start_ms
            if not state.yes_emitted and held_ms >= smile.duration_ms and not self._pending():
                state.yes_emitted = True
                return self._candidate("yes", t_now)
            return None

        retracted = state.is_smiling and not state.yes_emitted and not self._pending()
        state.is_smiling = False
        state.yes_emitted = False
        if retracted:
            return self._candidate("no", t_now)
        return None


class NodGesture(GestureDetector):
    """
    Single nod means yes, two or more nods mean no.

    Uses a hysteresis band below the threshold so that jitter around the
    boundary does not count as extra nods.
    """

    gesture_type = "nod"

    def __init__(self, cfg: Cfg, is_pending: PendingCheck = _never_pending):
        super().__init__(cfg, is_pending)
        self.state = NodState()

    def consume(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        pitch = head_pitch(frame.landmarks)
        if pitch is None:
            return None

        nod = self.cfg.gestures.nod
        state = self.state
        t_now = frame.timestamp_ms

        if not state.neutral_head_pitch:
            state.neutral_head_pitch = pitch
            logger.debug("Nod baseline captured: %.4f", pitch)
            return None

        threshold = state.neutral_head_pitch * nod.threshold_multiplier

        if pitch > threshold and not state.is_nodding:
            state.is_nodding = True
            state.nod_count += 1
            state.last_nod_ms = t_now
        elif pitch <= threshold * nod.release_ratio:
            state.is_nodding = False

        if state.nod_count > 0 and t_now - state.last_nod_ms > nod.cooldown_ms and not self._pending():
            value: Answer = "yes" if state.nod_count == 1 else "no"
            state.nod_count = 0
            return self._candidate(value, t_now)
        return None


class WaveGesture(GestureDetector):
    """
    Single wave means yes, two or more waves mean no.

    There is no hand tracking: movement of the face center between the two
    face edges stands in for the wave.
    """

    gesture_type = "wave"

    def __init__(self, cfg: Cfg, is_pending: PendingCheck = _never_pending):
        super().__init__(cfg, is_pending)
        self.state = WaveState(positions=deque(maxlen=cfg.gestures.wave.history_size))

    def consume(self, frame: MeasurementFrame) -> Optional[RawCandidate]:
        center = face_center(frame.landmarks)
        if center is None:
            return None

        wave = self.cfg.gestures.wave
        state = self.state
        t_now = frame.timestamp_ms

        state.positions.append(center)
        if len(state.positions) < wave.min_history:
            return None

        points = np.asarray(state.positions, dtype=float)
        movement = float(np.linalg.norm(np.diff(points, axis=0), axis=1).sum())

        if movement > wave.threshold and not state.is_waving:
            state.is_waving = True
            state.wave_count += 1
            state.last_wave_ms = t_now
        elif movement < wave.threshold * wave.release_ratio:
            state.is_waving = False

        if state.wave_count > 0 and t_now - state.last_wave_ms > wave.cooldown_ms and not self._pending():
            value: Answer = "yes" if state.wave_count == 1 else "no"
            state.wave_count = 0
            state.positions.clear()
            return self._candidate(value, t_now)
        return None


DETECTORS: Dict[str, Type[GestureDetector]] = {
    "blink": BlinkGesture,
    "smile": SmileGesture,
    "nod": NodGesture,
    "wave": WaveGesture,
}


def create_detector(gesture_type: str, cfg: Cfg,
                    is_pending: PendingCheck = _never_pending) -> GestureDetector:
    """
    Create a fresh detector for a gesture type.

    Raises:
        ValueError: If the gesture type is unknown
    """
    try:
        detector_cls = DETECTORS[gesture_type]
    except KeyError:
        raise ValueError(f"Unknown gesture type: {gesture_type}") from None
    return detector_cls(cfg, is_pending)
