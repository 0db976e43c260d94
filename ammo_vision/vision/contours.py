"""
Contour tracing on binary images.

Square tracing algorithm:
- Scan the image to find a start pixel and the direction it was entered from
- Standing on an active pixel, record it, turn left and step
- Standing on an inactive pixel, turn right and step
- Stop when re-entering the start pixel in the start direction (Jacob's
  stopping criterion)

Square tracing follows the outer boundary of 4-connected regions; it is not
reliable around concave corners of 8-connected shapes.

References:
- https://www.imageprocessingplace.com/downloads_V3/root_downloads/tutorials/contour_tracing_Abeer_George_Ghuneim/square.html
- https://en.wikipedia.org/wiki/Boundary_tracing#Square_tracing_algorithm
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Iterator, List

import numpy as np

from .color_conversion import binary_to_rgb_image
from .image_types import (
    BinaryImage,
    BoundingRect,
    CanvasPoint,
    ImagePoint,
    RGBImage,
    RGBPixel,
    StepDirection,
)

logger = logging.getLogger(__name__)

# Colors cycled through when drawing several contours
CONTOUR_PALETTE = (
    RGBPixel.from_hex(0xFF0000),
    RGBPixel.from_hex(0x00FF00),
    RGBPixel.from_hex(0xFF00FF),
    RGBPixel.from_hex(0xFFFF00),
)


class StartPointNotActiveError(ValueError):
    """Raised when tracing is asked to start on an inactive pixel."""


class ContourMethod(Enum):
    SQUARE = "square"
    MOORE = "moore"


class Contour:
    """Boundary points in the order they were traced, without duplicates."""

    def __init__(self, points: Iterable[ImagePoint] = ()):
        self._points: Dict[ImagePoint, None] = dict.fromkeys(points)

    def add(self, point: ImagePoint):
        self._points[point] = None

    @property
    def points(self) -> List[ImagePoint]:
        return list(self._points)

    def bounding_rect(self) -> BoundingRect:
        return bounding_rect(self._points)

    def __contains__(self, point) -> bool:
        return point in self._points

    def __iter__(self) -> Iterator[ImagePoint]:
        return iter(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Contour):
            return NotImplemented
        return self.points == other.points

    def __repr__(self) -> str:
        return f"Contour({[(p.x, p.y) for p in self._points]})"


def square_contour_tracing(
    binary_image: BinaryImage,
    start_point: ImagePoint,
    start_direction: StepDirection,
) -> Contour:
    """
    Trace the boundary of the region containing `start_point`.

    Args:
        binary_image: Image to trace
        start_point: Active pixel on the boundary
        start_direction: Direction the start pixel was entered from

    Returns:
        The boundary points, starting with `start_point`

    Raises:
        StartPointNotActiveError: If the start pixel is inactive or outside
            the image
    """
    if not binary_image.is_active(start_point.x, start_point.y):
        raise StartPointNotActiveError(
            f"Start point ({start_point.x}, {start_point.y}) must be active but was inactive"
        )

    contour = Contour([start_point])
    start = CanvasPoint.from_image_point(start_point)

    # The first pixel we step onto is treated as inactive, so go left
    current_direction = start_direction.turn_left()
    current_point = start.step(current_direction)

    while not (current_point == start and current_direction == start_direction):
        if binary_image.is_active(current_point.x, current_point.y):
            contour.add(current_point.to_image_point())
            current_direction = current_direction.turn_left()
        else:
            current_direction = current_direction.turn_right()
        current_point = current_point.step(current_direction)

    return contour


def moore_contour_tracing(
    binary_image: BinaryImage,
    start_point: ImagePoint,
    start_direction: StepDirection,
) -> Contour:
    """Moore-neighbor tracing (https://en.wikipedia.org/wiki/Moore_neighborhood)."""
    raise NotImplementedError("Moore contour tracing is not implemented")


def find_contours(
    binary_image: BinaryImage,
    contour_method: ContourMethod = ContourMethod.SQUARE,
) -> List[Contour]:
    """
    Find every contour in a binary image.

    Columns are scanned left to right, each from the bottom row up. A contour
    starts wherever we enter an active region (the pixel below is inactive or
    off the image) on a pixel that no earlier contour went through. This also
    finds holes, as long as the hole does not share a boundary pixel with the
    outer shape where we enter from.

    Returns:
        Contours in the order their start pixels were found
    """
    if contour_method is ContourMethod.SQUARE:
        trace = square_contour_tracing
    elif contour_method is ContourMethod.MOORE:
        trace = moore_contour_tracing
    else:
        raise ValueError(f"Unknown contour method: {contour_method}")

    pixels = binary_image.pixels
    height, width = pixels.shape

    # Active pixels whose lower neighbour is inactive or off the image
    entering = pixels.copy()
    entering[:-1, :] &= ~pixels[1:, :]

    contours: List[Contour] = []
    seen_boundary_points: Dict[ImagePoint, None] = {}

    for x in range(width):
        for y in range(height - 1, -1, -1):
            if not entering[y, x]:
                continue
            start_point = ImagePoint(x, y)
            if start_point in seen_boundary_points:
                continue

            contour = trace(binary_image, start_point, StepDirection.UP)
            contours.append(contour)
            seen_boundary_points.update(dict.fromkeys(contour))

    logger.debug("Found %d contours in %dx%d image", len(contours), width, height)
    return contours


def bounding_rect(points: Iterable[ImagePoint]) -> BoundingRect:
    """
    Smallest rectangle around a set of points.

    Width and height are the max - min spans, so a single point has a 0x0
    rectangle.

    Raises:
        ValueError: If there are no points
    """
    points = list(points)
    if not points:
        raise ValueError("Cannot find bounding rect for empty set of points")

    xs = [point.x for point in points]
    ys = [point.y for point in points]
    min_x, min_y = min(xs), min(ys)
    return BoundingRect(
        x=min_x,
        y=min_y,
        width=max(xs) - min_x,
        height=max(ys) - min_y,
    )


def trace_contours_on_image(
    rgb_image: RGBImage,
    contours: Iterable[Contour],
) -> RGBImage:
    """
    Paint contour points onto a copy of an image, cycling colors per contour.

    Points drawn over a white pixel get the full color, everything else gets
    it at half brightness.
    """
    if isinstance(rgb_image, BinaryImage):
        rgb_image = binary_to_rgb_image(rgb_image)

    pixels = rgb_image.pixels.copy()
    for contour_index, contour in enumerate(contours):
        color = np.array(CONTOUR_PALETTE[contour_index % len(CONTOUR_PALETTE)].to_tuple(), dtype=np.float32)
        for point in contour:
            modifier = 1.0 if pixels[point.y, point.x, 0] == 1.0 else 0.5
            pixels[point.y, point.x] = color * modifier

    return RGBImage(pixels)
