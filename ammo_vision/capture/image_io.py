"""
Reading and writing RGB images with OpenCV.

OpenCV works in BGR order with 8-bit channels; everything here converts to
and from the normalized float RGBImage used by the vision pipeline.
"""

from pathlib import Path
from typing import Tuple, Union

import cv2

from ..constants.screen_regions import Screenshot, ScreenshotRegion
from ..vision.image_types import RGBImage

PathLike = Union[str, Path]


def load_rgb_image(path: PathLike) -> RGBImage:
    """
    Load an image file as RGB.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If OpenCV cannot decode the file
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Image not found: {path}")

    bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if bgr is None:
        raise ValueError(f"Could not decode image: {path}")

    return RGBImage.from_uint8(cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB))


def save_rgb_image(rgb_image: RGBImage, path: PathLike):
    """
    Write an RGB image to disk; the format comes from the file extension.

    Raises:
        OSError: If OpenCV fails to write the file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    bgr = cv2.cvtColor(rgb_image.to_uint8(), cv2.COLOR_RGB2BGR)
    if not cv2.imwrite(str(path), bgr):
        raise OSError(f"Failed to write image: {path}")


def screenshot_from_file(
    path: PathLike,
    region: ScreenshotRegion = ScreenshotRegion.FULL_SCREEN,
    game_resolution: Tuple[int, int] = None,
) -> Screenshot:
    """
    Load a screenshot from disk.

    Args:
        path: Image file
        region: Region of the game window the file shows
        game_resolution: (width, height) the game renders at. Defaults to
            the image size, as does the pre-crop window size.
    """
    rgb_image = load_rgb_image(path)
    return Screenshot.full_screen(rgb_image, game_resolution).with_image(rgb_image, region)
