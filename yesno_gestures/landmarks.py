"""
Face landmark indices and measurement helpers.

Indices refer to the 478-point MediaPipe face mesh. Every helper returns None
when a required landmark or blendshape category is missing, or when the
result is not a finite number, so detectors can skip the frame instead of
failing.
"""
import math
from typing import Mapping, Optional, Sequence, Tuple

from .types import Landmark


# Mouth corners
MOUTH_LEFT = 61
MOUTH_RIGHT = 291

# Head pitch proxy
NOSE_TIP = 1
FOREHEAD = 10

# Face edges (wave proxy)
FACE_LEFT = 234
FACE_RIGHT = 454

EYE_BLINK_LEFT = "eyeBlinkLeft"
EYE_BLINK_RIGHT = "eyeBlinkRight"


def landmark_at(landmarks: Sequence[Landmark], index: int) -> Optional[Landmark]:
    """Return the landmark at `index`, or None if the mesh is too short."""
    if 0 <= index < len(landmarks):
        return landmarks[index]
    return None


def _finite(value: float) -> Optional[float]:
    return value if math.isfinite(value) else None


def distance(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    """Euclidean distance between two (x, y) points."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def eye_blink_score(blendshapes: Mapping[str, float]) -> Optional[float]:
    """
    Average of the left and right eye blink blendshape scores.

    Args:
        blendshapes: Mapping of category name to score

    Returns:
        Average score in [0..1], or None if either category is missing
    """
    left = blendshapes.get(EYE_BLINK_LEFT)
    right = blendshapes.get(EYE_BLINK_RIGHT)
    if left is None or right is None:
        return None
    return _finite((left + right) / 2)


def mouth_width(landmarks: Sequence[Landmark]) -> Optional[float]:
    """Distance between the two mouth corners."""
    left = landmark_at(landmarks, MOUTH_LEFT)
    right = landmark_at(landmarks, MOUTH_RIGHT)
    if left is None or right is None:
        return None
    return _finite(distance((left.x, left.y), (right.x, right.y)))


def head_pitch(landmarks: Sequence[Landmark]) -> Optional[float]:
    """
    Vertical distance between nose tip and forehead.

    A nod stretches this distance as the face tilts towards the camera, so it
    works as a cheap pitch estimate without a head pose model.
    """
    nose = landmark_at(landmarks, NOSE_TIP)
    forehead = landmark_at(landmarks, FOREHEAD)
    if nose is None or forehead is None:
        return None
    return _finite(abs(nose.y - forehead.y))


def face_center(landmarks: Sequence[Landmark]) -> Optional[Tuple[float, float]]:
    """Midpoint between the left and right face edges."""
    left = landmark_at(landmarks, FACE_LEFT)
    right = landmark_at(landmarks, FACE_RIGHT)
    if left is None or right is None:
        return None
    x = (left.x + right.x) / 2
    y = (left.y + right.y) / 2
    if not (math.isfinite(x) and math.isfinite(y)):
        return None
    return (x, y)
