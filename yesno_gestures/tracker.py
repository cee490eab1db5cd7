"""
Face landmark tracking using the MediaPipe FaceLandmarker task.
"""
from pathlib import Path
from typing import Iterable, Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from .frames import frame_from_result
from .types import MeasurementFrame


class FaceTracker:
    """Face landmark and blendshape tracker using MediaPipe FaceLandmarker."""

    def __init__(self, model_path: str, num_faces: int = 1,
                 min_detection_conf: float = 0.5, min_tracking_conf: float = 0.5):
        """
        Initialize the face tracker.

        Args:
            model_path: Path to face_landmarker.task
            num_faces: Maximum number of faces to detect (only the first is used)
            min_detection_conf: Minimum confidence for face detection
            min_tracking_conf: Minimum confidence for face tracking

        Raises:
            FileNotFoundError: If the model file does not exist
        """
        if not Path(model_path).exists():
            raise FileNotFoundError(f"FaceLandmarker model not found: {model_path}")

        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=num_faces,
            min_face_detection_confidence=min_detection_conf,
            min_tracking_confidence=min_tracking_conf,
            output_face_blendshapes=True
        )
        self.landmarker = vision.FaceLandmarker.create_from_options(options)
        self._last_timestamp_ms: Optional[int] = None

    def process(self, frame_bgr: np.ndarray, timestamp_ms: int) -> MeasurementFrame:
        """
        Process a frame and return its facial measurements.

        Args:
            frame_bgr: Input frame in BGR format
            timestamp_ms: Monotonic timestamp of the frame

        Returns:
            MeasurementFrame (face_detected is False if no face was found)
        """
        # VIDEO mode rejects timestamps that do not increase
        if self._last_timestamp_ms is not None and timestamp_ms <= self._last_timestamp_ms:
            timestamp_ms = self._last_timestamp_ms + 1
        self._last_timestamp_ms = timestamp_ms

        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self.landmarker.detect_for_video(image, timestamp_ms)
        return frame_from_result(result, timestamp_ms)

    def draw_landmarks(self, frame: np.ndarray, measurement: MeasurementFrame,
                       indices: Iterable[int]) -> np.ndarray:
        """
        Draw selected face landmarks on the frame.

        Args:
            frame: Input frame
            measurement: Frame measurements with normalized landmarks
            indices: Landmark indices to draw

        Returns:
            Frame with landmarks drawn
        """
        height, width = frame.shape[:2]

        for i in indices:
            if i >= len(measurement.landmarks):
                continue
            point = measurement.landmarks[i]
            px = int(point.x * width)
            py = int(point.y * height)
            cv2.circle(frame, (px, py), 3, (0, 255, 0), -1)
            cv2.putText(frame, str(i), (px + 5, py - 5), cv2.FONT_HERSHEY_SIMPLEX, 0.3, (255, 255, 255), 1)

        return frame

    def close(self) -> None:
        """Release the MediaPipe task."""
        self.landmarker.close()
