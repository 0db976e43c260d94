"""
Tunable constants for the ammo counter vision pipeline.

Contains the HSV boxes of the chromatic aberration signature, the
structuring element sizes used to clean the mask, and the geometric
thresholds used to decide which contours are digits.

Pixel-based thresholds assume the screenshot has been resized to
CANONICAL_GAME_RESOLUTION_HEIGHT.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from ..vision.image_types import HSVPixel

# Every pixel threshold below was calibrated against 1080p screenshots
CANONICAL_GAME_RESOLUTION_HEIGHT: float = 1080.0

# HSV boxes for each signature color, (lower, upper) inclusive.
# The OpenCV equivalents (h: [0, 180], s/v: [0, 255]) are noted next to each.
SIGNATURE_COLOR_RANGES: Dict[str, Tuple[Tuple[HSVPixel, HSVPixel], ...]] = {
    "blue": (
        # OpenCV: (90, 34, 190) - (152, 255, 255)
        (HSVPixel(0.5, 0.133333, 0.745098), HSVPixel(0.844444, 1.0, 1.0)),
    ),
    "cyan": (
        # OpenCV: (88, 34, 214) - (136, 255, 255)
        (HSVPixel(0.488888, 0.133333, 0.839215), HSVPixel(0.755555, 1.0, 1.0)),
    ),
    "yellow": (
        # OpenCV: (16, 20, 157) - (56, 195, 255)
        (HSVPixel(0.088888, 0.078843, 0.615686), HSVPixel(0.311111, 0.764705, 1.0)),
    ),
    # Red wraps around hue 0/360 so it needs two boxes
    "red": (
        # OpenCV: (0, 50, 126) - (14, 185, 255)
        (HSVPixel(0.0, 0.196078, 0.494117), HSVPixel(0.077777, 0.725490, 1.0)),
        # OpenCV: (155, 51, 108) - (180, 202, 255)
        (HSVPixel(0.861111, 0.2, 0.423529), HSVPixel(1.0, 0.792156, 1.0)),
    ),
}


@dataclass(frozen=True)
class SignatureConstants:
    """Sliding window used to look for the signature."""
    WINDOW_SIZE: int = 6


@dataclass(frozen=True)
class MorphologyConstants:
    """Structuring elements used to clean the signature mask."""
    # Small cross to knock out stray specks of fringe
    ERODE_KERNEL_SIZE: Tuple[int, int] = (3, 3)
    # Large rectangle to bridge the strokes of a character together
    DILATE_KERNEL_SIZE: Tuple[int, int] = (13, 13)


@dataclass(frozen=True)
class DigitFilterConstants:
    """Geometric heuristics for accepting a contour as a digit."""
    # "1" is the skinniest character (9px wide), other digits are 14px wide
    CHARACTER_MIN_WIDTH: int = 9
    # All of the characters are the same height
    CHARACTER_MIN_HEIGHT: int = 21
    # The widest gap we see is between two "1" characters
    CHARACTER_MAX_SPACING: int = 10
    # Share of active pixels inside a bounding box; characters dilate into
    # solid blocks so sparse boxes are false positives
    BOUNDING_BOX_COVERAGE: float = 0.75
    # 2-3 characters is typical, 4 is possible, 5 is a safe upper bound
    MAX_NUM_AMMO_CHARACTERS: int = 5
