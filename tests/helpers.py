"""
Synthetic measurement frames for gesture tests.
"""
from typing import Dict, Iterable, List, Tuple

from yesno_gestures.landmarks import (
    EYE_BLINK_LEFT, EYE_BLINK_RIGHT, FACE_LEFT, FACE_RIGHT, FOREHEAD, MOUTH_LEFT, MOUTH_RIGHT, NOSE_TIP
)
from yesno_gestures.scheduling import ManualScheduler
from yesno_gestures.session import GestureSession
from yesno_gestures.types import Landmark, MeasurementFrame, RawCandidate


MESH_SIZE = 478


def face_mesh(points: Dict[int, Tuple[float, float]]) -> Tuple[Landmark, ...]:
    """Full face mesh at the image center with selected points moved."""
    mesh = [Landmark(0.5, 0.5, 0.0)] * MESH_SIZE
    for index, (x, y) in points.items():
        mesh[index] = Landmark(x, y, 0.0)
    return tuple(mesh)


def blink_frame(t_ms: int, score: float) -> MeasurementFrame:
    """Frame with both eye blink scores set to `score`."""
    return MeasurementFrame(
        timestamp_ms=t_ms,
        face_detected=True,
        blendshapes={EYE_BLINK_LEFT: score, EYE_BLINK_RIGHT: score},
        landmarks=face_mesh({})
    )


def smile_frame(t_ms: int, width: float) -> MeasurementFrame:
    """Frame with the mouth corners `width` apart."""
    return MeasurementFrame(
        timestamp_ms=t_ms,
        face_detected=True,
        landmarks=face_mesh({MOUTH_LEFT: (0.5 - width / 2, 0.7), MOUTH_RIGHT: (0.5 + width / 2, 0.7)})
    )


def nod_frame(t_ms: int, pitch: float) -> MeasurementFrame:
    """Frame with the nose tip `pitch` below the forehead."""
    return MeasurementFrame(
        timestamp_ms=t_ms,
        face_detected=True,
        landmarks=face_mesh({FOREHEAD: (0.5, 0.2), NOSE_TIP: (0.5, 0.2 + pitch)})
    )


def wave_frame(t_ms: int, center_x: float) -> MeasurementFrame:
    """Frame with the face centered horizontally at `center_x`."""
    return MeasurementFrame(
        timestamp_ms=t_ms,
        face_detected=True,
        landmarks=face_mesh({FACE_LEFT: (center_x - 0.2, 0.5), FACE_RIGHT: (center_x + 0.2, 0.5)})
    )


def blink_trace(start_ms: int, closed_ms: int, open_ms: int, step_ms: int = 20,
                closed_score: float = 0.9) -> List[MeasurementFrame]:
    """Eyes closed for `closed_ms` from `start_ms`, then open for `open_ms`."""
    frames = [blink_frame(t, closed_score) for t in range(start_ms, start_ms + closed_ms, step_ms)]
    end = start_ms + closed_ms
    frames += [blink_frame(t, 0.0) for t in range(end, end + open_ms, step_ms)]
    return frames


def drive(session: GestureSession, clock: ManualScheduler,
          frames: Iterable[MeasurementFrame]) -> List[RawCandidate]:
    """Feed frames in order, advancing the clock to each frame's timestamp."""
    candidates = []
    for frame in frames:
        clock.advance_to(frame.timestamp_ms)
        candidate = session.on_frame(frame)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


def feed(detector, frames: Iterable[MeasurementFrame]) -> List[RawCandidate]:
    """Feed frames straight into a detector and collect candidates."""
    candidates = []
    for frame in frames:
        candidate = detector.consume(frame)
        if candidate is not None:
            candidates.append(candidate)
    return candidates
