"""
Yes/No Gesture Engine

Turns a stream of per-frame facial measurements (blendshape scores and face
landmarks) into debounced yes/no answers using blinks, smiles, head nods or a
face-movement wave.
"""

__version__ = "0.1.0"

from .types import (
    Answer,
    AnswerSink,
    DetectionStatus,
    FinalSignal,
    GestureType,
    Landmark,
    MeasurementFrame,
    RawCandidate,
)
from .config import load_config, Cfg
from .answer_mock import MockAnswerSink
from .gestures import BlinkGesture, SmileGesture, NodGesture, WaveGesture, create_detector
from .confirmation import ConfirmationGate
from .calibration import Calibrator, CalibrationBusyError
from .scheduling import AsyncioScheduler, ManualScheduler
from .session import GestureSession, SessionClosedError
from .frames import frame_from_dict, frame_from_result, no_face

__all__ = [
    "Answer",
    "AnswerSink",
    "DetectionStatus",
    "FinalSignal",
    "GestureType",
    "Landmark",
    "MeasurementFrame",
    "RawCandidate",
    "load_config",
    "Cfg",
    "MockAnswerSink",
    "BlinkGesture",
    "SmileGesture",
    "NodGesture",
    "WaveGesture",
    "create_detector",
    "ConfirmationGate",
    "Calibrator",
    "CalibrationBusyError",
    "AsyncioScheduler",
    "ManualScheduler",
    "GestureSession",
    "SessionClosedError",
    "frame_from_dict",
    "frame_from_result",
    "no_face",
]
