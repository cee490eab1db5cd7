"""
Test cases for calibration progress and recalibration.
"""
import unittest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from yesno_gestures.calibration import CalibrationBusyError, Calibrator
from yesno_gestures.config import CalibrationConfig, load_config
from yesno_gestures.scheduling import ManualScheduler
from yesno_gestures.session import GestureSession
from tests.helpers import drive, smile_frame


class TestCalibrator(unittest.IsolatedAsyncioTestCase):
    """Test the calibration progress sequence."""

    async def test_progress_sequence(self):
        calibrator = Calibrator(CalibrationConfig(step_percent=20, step_delay_ms=0))

        progress = [percent async for percent in calibrator.run()]

        self.assertEqual(progress, [0, 20, 40, 60, 80, 100])
        self.assertFalse(calibrator.in_progress)
        self.assertEqual(calibrator.progress, 100)

    async def test_uneven_step_still_ends_at_100(self):
        calibrator = Calibrator(CalibrationConfig(step_percent=30, step_delay_ms=0))

        progress = [percent async for percent in calibrator.run()]

        self.assertEqual(progress, [0, 30, 60, 90, 100])

    async def test_repeated_runs_allowed(self):
        calibrator = Calibrator(CalibrationConfig(step_percent=50, step_delay_ms=0))

        first = [percent async for percent in calibrator.run()]
        second = [percent async for percent in calibrator.run()]

        self.assertEqual(first, second)

    async def test_overlapping_run_rejected(self):
        calibrator = Calibrator(CalibrationConfig(step_percent=20, step_delay_ms=10))
        running = calibrator.run()
        self.assertEqual(await running.__anext__(), 0)
        self.assertTrue(calibrator.in_progress)

        with self.assertRaises(CalibrationBusyError):
            await calibrator.run().__anext__()

        await running.aclose()
        self.assertFalse(calibrator.in_progress)
        self.assertEqual(await calibrator.run().__anext__(), 0)

    async def test_cancel_stops_after_current_step(self):
        calibrator = Calibrator(CalibrationConfig(step_percent=20, step_delay_ms=1))
        progress = []

        async for percent in calibrator.run():
            progress.append(percent)
            if percent == 40:
                calibrator.cancel()

        self.assertEqual(progress, [0, 20, 40])
        self.assertFalse(calibrator.in_progress)


class TestSessionCalibration(unittest.IsolatedAsyncioTestCase):
    """Test recalibration through the session."""

    def setUp(self):
        """Set up a smile session with a captured baseline."""
        self.cfg = load_config()
        self.cfg.calibration.step_delay_ms = 0
        self.clock = ManualScheduler()
        self.session = GestureSession(self.cfg, self.clock, gesture="smile")
        drive(self.session, self.clock, [smile_frame(0, 0.40), smile_frame(100, 0.50), smile_frame(200, 0.40)])

    async def test_calibration_drops_baseline_and_pending(self):
        self.assertTrue(self.session.gate.has_pending())

        progress = [percent async for percent in self.session.start_calibration()]

        self.assertEqual(progress, [0, 20, 40, 60, 80, 100])
        self.assertEqual(self.session.detector.state.neutral_mouth_width, 0.0)
        self.assertFalse(self.session.gate.has_pending())

        # Next frame becomes the new baseline
        self.session.on_frame(smile_frame(300, 0.30))
        self.assertAlmostEqual(self.session.detector.state.neutral_mouth_width, 0.30)

    async def test_overlapping_calibration_rejected(self):
        running = self.session.start_calibration()
        self.assertEqual(await running.__anext__(), 0)

        with self.assertRaises(CalibrationBusyError):
            await self.session.start_calibration().__anext__()

        await running.aclose()
        self.assertFalse(self.session.calibrator.in_progress)


if __name__ == '__main__':
    unittest.main()
