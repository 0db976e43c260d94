"""Vision constants and screenshot region definitions."""

from .screen_regions import Screenshot, ScreenshotRegion
from .vision_constants import (
    CANONICAL_GAME_RESOLUTION_HEIGHT,
    SIGNATURE_COLOR_RANGES,
    DigitFilterConstants,
    MorphologyConstants,
    SignatureConstants,
)

__all__ = [
    "Screenshot",
    "ScreenshotRegion",
    "CANONICAL_GAME_RESOLUTION_HEIGHT",
    "SIGNATURE_COLOR_RANGES",
    "DigitFilterConstants",
    "MorphologyConstants",
    "SignatureConstants",
]
