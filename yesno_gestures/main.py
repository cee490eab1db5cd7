"""
Main application: answer yes/no questions with facial gestures from a webcam.
"""
import argparse
import asyncio
import logging
import os
from typing import Optional

import cv2
from dotenv import load_dotenv

from .answer_mock import MockAnswerSink
from .calibration import CalibrationBusyError
from .config import load_config
from .landmarks import FACE_LEFT, FACE_RIGHT, FOREHEAD, MOUTH_LEFT, MOUTH_RIGHT, NOSE_TIP
from .scheduling import AsyncioScheduler
from .session import GestureSession
from .tracker import FaceTracker
from .types import FinalSignal, MeasurementFrame


logger = logging.getLogger(__name__)

GESTURE_KEYS = {ord('1'): "blink", ord('2'): "smile", ord('3'): "nod", ord('4'): "wave"}

HIGHLIGHT_LANDMARKS = {
    "blink": (),
    "smile": (MOUTH_LEFT, MOUTH_RIGHT),
    "nod": (NOSE_TIP, FOREHEAD),
    "wave": (FACE_LEFT, FACE_RIGHT),
}

STATUS_COLORS = {
    "searching": (0, 165, 255),
    "detected": (0, 255, 0),
    "waiting": (255, 255, 255),
    "error": (0, 0, 255),
}


class GestureAnswerApp:
    """Main application class driving a gesture session from the camera."""

    def __init__(self, config_path: Optional[str] = None, gesture: Optional[str] = None):
        """Initialize the application with configuration."""
        self.config = load_config(config_path)
        self.scheduler = AsyncioScheduler()
        self.session = GestureSession(self.config, self.scheduler, gesture=gesture)
        self.sink = MockAnswerSink()
        self.session.subscribe(self.sink.on_answer)
        self.session.subscribe(self._show_answer)

        self.last_answer: Optional[FinalSignal] = None
        self.calibration_progress: Optional[int] = None
        self._calibration_task: Optional[asyncio.Task] = None

        model_path = os.getenv("FACE_LANDMARKER_MODEL", self.config.tracker.model_path)
        self.tracker: Optional[FaceTracker] = None
        try:
            self.tracker = FaceTracker(
                model_path=model_path,
                num_faces=self.config.tracker.num_faces,
                min_detection_conf=self.config.tracker.min_detection_confidence,
                min_tracking_conf=self.config.tracker.min_tracking_confidence
            )
        except (FileNotFoundError, RuntimeError) as e:
            self.session.set_error(f"Failed to load face detection model: {e}")

        # Initialize camera
        self.cap = cv2.VideoCapture(self.config.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, self.config.camera.fps)

        if not self.cap.isOpened():
            self.session.set_error(f"Camera {self.config.camera.index} not available")

    def _show_answer(self, signal: FinalSignal) -> None:
        self.last_answer = signal

    async def _calibrate(self) -> None:
        try:
            async for percent in self.session.start_calibration():
                self.calibration_progress = percent
        except CalibrationBusyError:
            print("Calibration already running")
        finally:
            self.calibration_progress = None

    def _handle_key(self, key: int) -> bool:
        """Apply a key binding. Returns False when the app should quit."""
        if key == ord('q'):
            return False
        if key in GESTURE_KEYS:
            self.session.set_active_gesture(GESTURE_KEYS[key])
            self.last_answer = None
            print(f"Gesture: {self.session.detector.guide.name} - {self.session.detector.guide.description}")
        elif key == ord('n'):
            self.session.reset()
            self.last_answer = None
            print("New question - waiting for an answer")
        elif key == ord('c'):
            if self._calibration_task is None or self._calibration_task.done():
                self._calibration_task = asyncio.create_task(self._calibrate())
        return True

    def _draw(self, frame, measurement) -> None:
        guide = self.session.detector.guide
        status = self.session.status
        status_text = f"Status: {status}"
        if self.session.error:
            status_text += f" ({self.session.error})"

        if measurement is not None and measurement.face_detected and self.config.display.show_landmarks:
            self.tracker.draw_landmarks(frame, measurement, HIGHLIGHT_LANDMARKS[self.session.active_gesture])

        cv2.putText(frame, f"{guide.name}: {guide.description}", (10, 30),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 255), 2)
        cv2.putText(frame, status_text, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.6, STATUS_COLORS[status], 2)

        if self.last_answer is not None:
            color = (0, 255, 0) if self.last_answer.value == "yes" else (0, 0, 255)
            cv2.putText(frame, self.last_answer.value.upper(), (10, 120), cv2.FONT_HERSHEY_SIMPLEX, 2.0, color, 4)

        if self.calibration_progress is not None:
            cv2.putText(frame, f"Calibrating... {self.calibration_progress}% - hold still", (10, 160),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, (255, 255, 0), 2)

        # Add instructions
        cv2.putText(frame, "1-4 = Gesture  n = New question  c = Calibrate", (10, frame.shape[0] - 40),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)
        cv2.putText(frame, "Press 'q' to quit", (10, frame.shape[0] - 20), cv2.FONT_HERSHEY_SIMPLEX, 0.5, (255, 255, 255), 1)

    async def run(self):
        """Run the main application loop."""
        print(f"Starting {self.config.display.window_name}")
        print("Gestures:")
        for key, gesture in GESTURE_KEYS.items():
            guide = getattr(self.config.gestures, gesture).guide
            print(f"  {chr(key)}: {guide.name} - YES: {guide.yes_action}, NO: {guide.no_action}")
        print("Press 'q' to quit")

        try:
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    self.session.set_error("Failed to read frame from camera")
                    break

                measurement = self._track(frame)
                self._draw(frame, measurement)
                cv2.imshow(self.config.display.window_name, frame)

                if not self._handle_key(cv2.waitKey(1) & 0xFF):
                    break

                # Let confirmation timers and calibration run
                await asyncio.sleep(0)
        finally:
            self.close()

    def _track(self, frame) -> Optional[MeasurementFrame]:
        """Run the tracker on one frame and feed the session."""
        if self.tracker is None or self.session.status == "error":
            return None
        try:
            measurement = self.tracker.process(frame, self.scheduler.now_ms())
        except (RuntimeError, ValueError) as e:
            logger.exception("Face tracking failed")
            self.session.set_error(f"Face tracking failed: {e}")
            return None
        self.session.on_frame(measurement)
        return measurement

    def close(self) -> None:
        """Cleanup resources."""
        self.session.close()
        if self._calibration_task is not None:
            self._calibration_task.cancel()
        if self.tracker is not None:
            self.tracker.close()
        if self.cap.isOpened():
            self.cap.release()
        cv2.destroyAllWindows()


async def main(argv=None):
    """Entry point for the application."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Answer yes/no questions with facial gestures")
    parser.add_argument("--config", default=os.getenv("YESNO_CONFIG"), help="Path to a YAML config file")
    parser.add_argument("--gesture", choices=sorted(set(GESTURE_KEYS.values())), help="Initial gesture")
    args = parser.parse_args(argv)

    app = GestureAnswerApp(config_path=args.config, gesture=args.gesture)
    await app.run()


def run():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")


if __name__ == "__main__":
    run()
