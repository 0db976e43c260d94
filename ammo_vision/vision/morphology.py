"""
Binary morphology: structuring elements, erosion, dilation, opening, closing.

A structuring element is a BinaryImage with odd width and height, anchored
at its center. Erosion treats every footprint cell that falls outside of the
image as a miss, so a band of kernel_height // 2 rows and kernel_width // 2
columns along each edge is always eroded away. Dilation ignores footprint
cells outside of the image.
"""

from enum import Enum
from typing import Iterator, Tuple

import numpy as np

from .image_types import BinaryImage

StructuringElement = BinaryImage


class MorphologyShape(Enum):
    RECTANGLE = "rectangle"
    CROSS = "cross"
    # Reserved, not supported yet
    ELLIPSE = "ellipse"


def _check_odd_size(width: int, height: int):
    if width <= 0 or height <= 0 or width % 2 == 0 or height % 2 == 0:
        raise ValueError(
            f"Structuring element must have odd, positive dimensions, got {width}x{height}"
        )


def get_structuring_element(shape: MorphologyShape, width: int, height: int) -> StructuringElement:
    """
    Build a structuring element.

    Args:
        shape: Kernel shape
        width: Kernel width, odd
        height: Kernel height, odd

    Raises:
        ValueError: If either dimension is even or not positive
        NotImplementedError: For ellipse kernels
    """
    _check_odd_size(width, height)

    if shape is MorphologyShape.RECTANGLE:
        kernel = np.ones((height, width), dtype=bool)
    elif shape is MorphologyShape.CROSS:
        kernel = np.zeros((height, width), dtype=bool)
        kernel[height // 2, :] = True
        kernel[:, width // 2] = True
    elif shape is MorphologyShape.ELLIPSE:
        raise NotImplementedError("Ellipse structuring elements are not supported")
    else:
        raise ValueError(f"Unknown structuring element shape: {shape}")

    return BinaryImage(kernel)


def _active_offsets(kernel: StructuringElement) -> Iterator[Tuple[int, int]]:
    """Yield (dx, dy) of every active kernel cell relative to the center."""
    _check_odd_size(kernel.width, kernel.height)
    anchor_x, anchor_y = kernel.width // 2, kernel.height // 2
    for ky, kx in zip(*np.nonzero(kernel.pixels)):
        yield int(kx) - anchor_x, int(ky) - anchor_y


def _shifted(pixels: np.ndarray, dx: int, dy: int) -> np.ndarray:
    """out[y, x] = pixels[y + dy, x + dx], False where that lands outside."""
    height, width = pixels.shape
    out = np.zeros_like(pixels)
    if abs(dx) >= width or abs(dy) >= height:
        return out

    src_y = slice(max(dy, 0), height + min(dy, 0))
    dst_y = slice(max(-dy, 0), height + min(-dy, 0))
    src_x = slice(max(dx, 0), width + min(dx, 0))
    dst_x = slice(max(-dx, 0), width + min(-dx, 0))
    out[dst_y, dst_x] = pixels[src_y, src_x]
    return out


def erode(binary_image: BinaryImage, kernel: StructuringElement) -> BinaryImage:
    """
    A pixel survives when every active kernel cell lands on an active pixel
    and the whole kernel footprint fits inside the image.

    Raises:
        ValueError: If the kernel has an even side
    """
    pixels = binary_image.pixels
    height, width = pixels.shape

    result = np.ones_like(pixels)
    for dx, dy in _active_offsets(kernel):
        result &= _shifted(pixels, dx, dy)

    margin_x, margin_y = kernel.width // 2, kernel.height // 2
    result[: min(margin_y, height), :] = False
    result[max(height - margin_y, 0) :, :] = False
    result[:, : min(margin_x, width)] = False
    result[:, max(width - margin_x, 0) :] = False

    return BinaryImage(result)


def dilate(binary_image: BinaryImage, kernel: StructuringElement) -> BinaryImage:
    """
    A pixel turns on when any active kernel cell lands on an active pixel.

    Raises:
        ValueError: If the kernel has an even side
    """
    result = np.zeros_like(binary_image.pixels)
    for dx, dy in _active_offsets(kernel):
        result |= _shifted(binary_image.pixels, dx, dy)
    return BinaryImage(result)


def opening(binary_image: BinaryImage, kernel: StructuringElement) -> BinaryImage:
    """Erode then dilate; removes specks smaller than the kernel."""
    return dilate(erode(binary_image, kernel), kernel)


def closing(binary_image: BinaryImage, kernel: StructuringElement) -> BinaryImage:
    """Dilate then erode; fills gaps smaller than the kernel."""
    return erode(dilate(binary_image, kernel), kernel)
