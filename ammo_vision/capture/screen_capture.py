"""
Live screen capture using mss.

Usage:
    with ScreenCapture(monitor_index=1) as capture:
        screenshot = capture.grab()
"""

import logging
from typing import Tuple

import cv2
import mss
import numpy as np

from ..constants.screen_regions import Screenshot
from ..vision.image_types import RGBImage

logger = logging.getLogger(__name__)


class ScreenCapture:
    """Grabs full-screen screenshots of a monitor."""

    def __init__(self, monitor_index: int = 1):
        """
        Args:
            monitor_index: mss monitor index (0 is every monitor combined,
                1 is the primary monitor)
        """
        self.monitor_index = monitor_index
        self._sct = None

    def __enter__(self) -> "ScreenCapture":
        self._sct = mss.mss()
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def close(self):
        if self._sct is not None:
            self._sct.close()
            self._sct = None

    @property
    def monitor(self) -> dict:
        if self._sct is None:
            raise RuntimeError("ScreenCapture must be used as a context manager")
        monitors = self._sct.monitors
        if not 0 <= self.monitor_index < len(monitors):
            raise ValueError(
                f"Monitor {self.monitor_index} does not exist ({len(monitors) - 1} available)"
            )
        return monitors[self.monitor_index]

    def grab(self, game_resolution: Tuple[int, int] = None) -> Screenshot:
        """
        Capture the monitor as a full-screen screenshot.

        Args:
            game_resolution: (width, height) the game renders at. Defaults to
                the monitor size.
        """
        monitor = self.monitor
        shot = self._sct.grab(monitor)
        bgra = np.array(shot)
        rgb = cv2.cvtColor(bgra, cv2.COLOR_BGRA2RGB)

        logger.debug("Captured %dx%d from monitor %d", rgb.shape[1], rgb.shape[0], self.monitor_index)
        return Screenshot.full_screen(RGBImage.from_uint8(rgb), game_resolution)
