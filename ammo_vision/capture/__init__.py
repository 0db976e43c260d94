"""Image codec and screen capture adapters."""

from .image_io import load_rgb_image, save_rgb_image, screenshot_from_file
from .screen_capture import ScreenCapture

__all__ = [
    "load_rgb_image",
    "save_rgb_image",
    "screenshot_from_file",
    "ScreenCapture",
]
