"""
Calibration progress sequence shown to the user while they hold still.
"""
import asyncio
import logging
from typing import AsyncIterator

from .config import CalibrationConfig


logger = logging.getLogger(__name__)


class CalibrationBusyError(RuntimeError):
    """Raised when a calibration run is started while another is in progress."""


class Calibrator:
    """
    Drives the fixed-step calibration progress.

    Baselines are not computed here; smile and nod detectors capture theirs
    lazily from the first frame after they are (re)created.
    """

    def __init__(self, cfg: CalibrationConfig):
        self.cfg = cfg
        self.progress = 0
        self._running = False
        self._cancel_requested = False

    @property
    def in_progress(self) -> bool:
        return self._running

    async def run(self) -> AsyncIterator[int]:
        """
        Yield progress percentages 0..100 with a fixed delay after each step.

        Raises:
            CalibrationBusyError: If another run is in progress
        """
        if self._running:
            raise CalibrationBusyError("Calibration already in progress")
        self._running = True
        self._cancel_requested = False
        logger.info("Calibration started")
        try:
            for percent in range(0, 101, self.cfg.step_percent):
                self.progress = percent
                yield percent
                await asyncio.sleep(self.cfg.step_delay_ms / 1000.0)
                if self._cancel_requested:
                    logger.info("Calibration cancelled at %d%%", percent)
                    return
            if self.progress != 100:
                self.progress = 100
                yield 100
            logger.info("Calibration finished")
        finally:
            self._running = False

    def cancel(self) -> None:
        """Stop an in-progress run after its current step."""
        if self._running:
            self._cancel_requested = True
