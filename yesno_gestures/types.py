"""
Type definitions for the yes/no gesture interpretation engine.
"""
from dataclasses import dataclass, field
from typing import Literal, Mapping, Protocol, Tuple, runtime_checkable


Answer = Literal["yes", "no"]
GestureType = Literal["blink", "smile", "nod", "wave"]
DetectionStatus = Literal["searching", "detected", "waiting", "error"]

GESTURE_TYPES: Tuple[str, ...] = ("blink", "smile", "nod", "wave")


@dataclass(frozen=True)
class Landmark:
    """Normalized face landmark (x, y in [0..1], z relative depth)."""
    x: float
    y: float
    z: float = 0.0


@dataclass(frozen=True)
class MeasurementFrame:
    """One tick of facial measurements produced by the external tracker."""
    timestamp_ms: int
    face_detected: bool
    blendshapes: Mapping[str, float] = field(default_factory=dict)
    landmarks: Tuple[Landmark, ...] = ()


@dataclass(frozen=True)
class RawCandidate:
    """Tentative answer raised by a detector, not yet confirmed."""
    value: Answer
    gesture_type: GestureType
    timestamp_ms: int


@dataclass(frozen=True)
class FinalSignal:
    """Confirmed answer handed to the question-flow consumer."""
    value: Answer
    gesture_type: GestureType
    timestamp_ms: int


@runtime_checkable
class AnswerSink(Protocol):
    """Abstract protocol for consumers of confirmed answers."""

    def on_answer(self, signal: FinalSignal) -> None:
        """Handle a confirmed yes/no answer."""
        ...
