import numpy as np
import pytest

from ammo_vision.constants import Screenshot, ScreenshotRegion
from ammo_vision.vision.color_conversion import hsv_to_rgb
from ammo_vision.vision.image_types import HSVPixel, RGBImage

# One pixel inside each signature box, well away from the box edges
BLUE = HSVPixel(0.8, 0.5, 0.9)
CYAN = HSVPixel(0.495, 0.5, 0.9)
YELLOW = HSVPixel(0.2, 0.5, 0.9)
RED = HSVPixel(0.03, 0.5, 0.9)
RED_WRAPPED = HSVPixel(0.9, 0.5, 0.9)
# Non-zero but outside every box
GRAY = HSVPixel(0.0, 0.0, 0.5)
BLACK = HSVPixel(0.0, 0.0, 0.0)

SIGNATURE_STRIPES = (BLUE, CYAN, YELLOW, RED)


def paint_glyph(rgb_pixels: np.ndarray, x: int, y: int, width: int, height: int, stripe_width: int = 1):
    """Fill a rectangle with vertical signature stripes (blue, cyan, yellow, red, ...)."""
    for offset in range(width):
        hsv_pixel = SIGNATURE_STRIPES[(offset // stripe_width) % len(SIGNATURE_STRIPES)]
        rgb_pixels[y : y + height, x + offset] = hsv_to_rgb(hsv_pixel).to_tuple()


def make_ammo_counter_screenshot(glyphs, width: int = 120, height: int = 60) -> Screenshot:
    """
    Ammo counter screenshot at the canonical resolution (no resizing needed).

    Args:
        glyphs: (x, y, width, height) rectangles to paint
    """
    rgb_pixels = np.zeros((height, width, 3), dtype=np.float32)
    for glyph in glyphs:
        paint_glyph(rgb_pixels, *glyph)
    return Screenshot(
        image=RGBImage(rgb_pixels),
        region=ScreenshotRegion.AMMO_COUNTER,
        pre_crop_width=1920,
        pre_crop_height=1080,
        game_resolution_width=1920,
        game_resolution_height=1080,
    )


# Each 8x20 glyph erodes to 6x18 and dilates to an 18x30 block
TWO_GLYPHS = [(20, 15, 8, 20), (40, 15, 8, 20)]


@pytest.fixture
def two_digit_screenshot() -> Screenshot:
    return make_ammo_counter_screenshot(TWO_GLYPHS)


@pytest.fixture
def empty_screenshot() -> Screenshot:
    rgb_pixels = np.full((60, 120, 3), 0.5, dtype=np.float32)
    return Screenshot(
        image=RGBImage(rgb_pixels),
        region=ScreenshotRegion.AMMO_COUNTER,
        pre_crop_width=1920,
        pre_crop_height=1080,
        game_resolution_width=1920,
        game_resolution_height=1080,
    )
