"""Vision primitives: image types, color conversion, signature, morphology, contours."""

from .image_types import (
    BinaryImage,
    BoundingRect,
    GrayscaleImage,
    HSVImage,
    HSVPixel,
    ImagePoint,
    RGBImage,
    RGBPixel,
    StepDirection,
)
from .color_conversion import hsv_to_binary_image, rgb_to_hsv_image
from .contours import Contour, ContourMethod, StartPointNotActiveError, find_contours
from .morphology import MorphologyShape, dilate, erode, get_structuring_element
from .signature_detector import find_signature_text

__all__ = [
    "BinaryImage",
    "BoundingRect",
    "GrayscaleImage",
    "HSVImage",
    "HSVPixel",
    "ImagePoint",
    "RGBImage",
    "RGBPixel",
    "StepDirection",
    "hsv_to_binary_image",
    "rgb_to_hsv_image",
    "Contour",
    "ContourMethod",
    "StartPointNotActiveError",
    "find_contours",
    "MorphologyShape",
    "dilate",
    "erode",
    "get_structuring_element",
    "find_signature_text",
]
