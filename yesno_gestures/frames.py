"""
Builders for MeasurementFrame from tracker output.
"""
from typing import Any, Dict, Mapping

from .types import Landmark, MeasurementFrame


def no_face(timestamp_ms: int) -> MeasurementFrame:
    """Frame for a tick where the tracker found no face."""
    return MeasurementFrame(timestamp_ms=timestamp_ms, face_detected=False)


def frame_from_dict(data: Mapping[str, Any]) -> MeasurementFrame:
    """
    Build a frame from the JSON wire contract.

    Expected keys: timestampMs, faceDetected, and when a face is present,
    blendshapes ({categoryName: score}) and landmarks ([{x, y, z}]). A missing
    or null z reads as 0.0.

    Raises:
        KeyError: If timestampMs or faceDetected is missing, or a landmark
            has no x or y
    """
    timestamp_ms = int(data['timestampMs'])
    if not data['faceDetected']:
        return no_face(timestamp_ms)

    blendshapes: Dict[str, float] = {
        str(name): float(score) for name, score in (data.get('blendshapes') or {}).items()
    }
    landmarks = tuple(
        Landmark(x=float(point['x']), y=float(point['y']), z=float(point.get('z') or 0.0))
        for point in (data.get('landmarks') or [])
    )
    return MeasurementFrame(
        timestamp_ms=timestamp_ms,
        face_detected=True,
        blendshapes=blendshapes,
        landmarks=landmarks
    )


def frame_from_result(result: Any, timestamp_ms: int) -> MeasurementFrame:
    """
    Build a frame from a MediaPipe FaceLandmarkerResult.

    Only the first face is used. A face counts as detected when the result
    carries both landmarks and blendshapes for it.

    Args:
        result: FaceLandmarkerResult (face_landmarks, face_blendshapes)
        timestamp_ms: Timestamp the image was submitted with
    """
    face_landmarks = getattr(result, 'face_landmarks', None)
    face_blendshapes = getattr(result, 'face_blendshapes', None)
    if not face_landmarks or not face_blendshapes:
        return no_face(timestamp_ms)

    blendshapes = {category.category_name: float(category.score) for category in face_blendshapes[0]}
    landmarks = tuple(
        Landmark(x=float(point.x), y=float(point.y), z=float(point.z or 0.0))
        for point in face_landmarks[0]
    )
    return MeasurementFrame(
        timestamp_ms=timestamp_ms,
        face_detected=True,
        blendshapes=blendshapes,
        landmarks=landmarks
    )
