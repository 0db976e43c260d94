"""
Image resizing with OpenCV, plus normalising screenshots to a canonical
game resolution so pixel thresholds downstream stay meaningful.
"""

import logging
from enum import Enum

import cv2
import numpy as np

from ..constants.screen_regions import Screenshot
from ..constants.vision_constants import CANONICAL_GAME_RESOLUTION_HEIGHT
from .image_types import BinaryImage

logger = logging.getLogger(__name__)


class InterpolationMethod(Enum):
    NEAREST = cv2.INTER_NEAREST
    # Averages every source pixel under the destination pixel
    BOX = cv2.INTER_AREA
    BILINEAR = cv2.INTER_LINEAR


def get_ideal_interpolation_method(image, new_width: int, new_height: int) -> InterpolationMethod:
    """
    Pick an interpolation method for a resize.

    - Nearest neighbor when the image divides evenly into the new size
    - Bilinear when enlarging, which smooths over the detail we have to invent
    - Box sampling when shrinking, so every source pixel contributes
    """
    if image.width % new_width == 0 and image.height % new_height == 0:
        return InterpolationMethod.NEAREST
    if new_width > image.width or new_height > image.height:
        return InterpolationMethod.BILINEAR
    return InterpolationMethod.BOX


def resize_image(image, new_width: int, new_height: int, interpolation_method: InterpolationMethod = None):
    """
    Resize an image of any type to (new_width, new_height).

    Binary images are always resized with nearest neighbor.

    Raises:
        ValueError: If the new size is not positive
    """
    if new_width <= 0 or new_height <= 0:
        raise ValueError(f"Cannot resize {image.width}x{image.height} image to {new_width}x{new_height}")

    if isinstance(image, BinaryImage):
        resized = cv2.resize(
            image.pixels.astype(np.uint8),
            (new_width, new_height),
            interpolation=cv2.INTER_NEAREST,
        )
        return BinaryImage(resized.astype(bool))

    if interpolation_method is None:
        interpolation_method = get_ideal_interpolation_method(image, new_width, new_height)

    resized = cv2.resize(
        image.pixels,
        (new_width, new_height),
        interpolation=interpolation_method.value,
    )
    return type(image)(resized)


def resize_screenshot_to_game_resolution(
    screenshot: Screenshot,
    desired_game_resolution_height: float = CANONICAL_GAME_RESOLUTION_HEIGHT,
) -> Screenshot:
    """
    Scale a screenshot so the game looks like it renders at the desired height.

    The window size is first brought down (or up) to the game's render
    resolution and then to the desired resolution. The image is always box
    sampled, since the signature fringe is only a pixel or two wide and
    nearest neighbor drops it on even downscales. The image and all of the
    geometry metadata are scaled by the combined factor, truncated to int.
    """
    # Scale the window size to match the resolution
    resolution_scale = screenshot.pre_crop_height / screenshot.game_resolution_height
    # Scale to match the desired resolution
    window_scale = desired_game_resolution_height / screenshot.game_resolution_height
    combined_scale = resolution_scale * window_scale

    # Thin crops must not collapse to an empty image
    new_width = max(int(screenshot.image.width * combined_scale), 1)
    new_height = max(int(screenshot.image.height * combined_scale), 1)
    logger.debug(
        "Resizing %dx%d screenshot by %.3f to %dx%d",
        screenshot.image.width,
        screenshot.image.height,
        combined_scale,
        new_width,
        new_height,
    )

    return Screenshot(
        image=resize_image(screenshot.image, new_width, new_height, InterpolationMethod.BOX),
        region=screenshot.region,
        pre_crop_width=int(screenshot.pre_crop_width * combined_scale),
        pre_crop_height=int(screenshot.pre_crop_height * combined_scale),
        game_resolution_width=int(screenshot.game_resolution_width * combined_scale),
        game_resolution_height=int(screenshot.game_resolution_height * combined_scale),
    )
