"""
Pixel, image and geometry value types used throughout the vision pipeline.

Images wrap row-major numpy arrays:
- RGB / HSV: (height, width, 3) float32, every channel in [0, 1]
- Grayscale: (height, width) float32 in [0, 1]
- Binary: (height, width) bool

Points come in two flavours. ImagePoint is always a valid (non-negative)
pixel coordinate; CanvasPoint is signed and may wander outside the image
while a boundary walk is in flight.
"""

from dataclasses import dataclass
from typing import ClassVar, Optional, Tuple, Union

import numpy as np


@dataclass(frozen=True)
class RGBPixel:
    """RGB pixel, all channels in [0, 1]."""
    r: float
    g: float
    b: float

    @classmethod
    def from_hex(cls, hex_number: int) -> "RGBPixel":
        """Build a pixel from a 0xRRGGBB number."""
        return cls(
            r=((hex_number >> 16) & 0xFF) / 255.0,
            g=((hex_number >> 8) & 0xFF) / 255.0,
            b=(hex_number & 0xFF) / 255.0,
        )

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.r, self.g, self.b)


@dataclass(frozen=True)
class HSVPixel:
    """HSV pixel, all channels normalized to [0, 1] (hue 1.0 == 360 degrees)."""
    h: float
    s: float
    v: float

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.h, self.s, self.v)


@dataclass(frozen=True)
class GrayscalePixel:
    value: float


@dataclass(frozen=True)
class BinaryPixel:
    active: bool


Pixel = Union[RGBPixel, HSVPixel, GrayscalePixel, BinaryPixel]


@dataclass(frozen=True)
class ImagePoint:
    """A valid pixel coordinate (x, y) with the origin in the top-left corner."""
    x: int
    y: int

    def __post_init__(self):
        if self.x < 0 or self.y < 0:
            raise ValueError(f"ImagePoint cannot be negative: ({self.x}, {self.y})")


@dataclass(frozen=True)
class StepDirection:
    """Unit step in top-left-origin image coordinates."""
    x: int
    y: int

    UP: ClassVar["StepDirection"]
    DOWN: ClassVar["StepDirection"]
    LEFT: ClassVar["StepDirection"]
    RIGHT: ClassVar["StepDirection"]

    def turn_left(self) -> "StepDirection":
        return StepDirection(self.y, -self.x)

    def turn_right(self) -> "StepDirection":
        return StepDirection(-self.y, self.x)


StepDirection.UP = StepDirection(0, -1)
StepDirection.DOWN = StepDirection(0, 1)
StepDirection.LEFT = StepDirection(-1, 0)
StepDirection.RIGHT = StepDirection(1, 0)


@dataclass(frozen=True)
class CanvasPoint:
    """A signed coordinate that may temporarily sit outside the image."""
    x: int
    y: int

    @classmethod
    def from_image_point(cls, point: ImagePoint) -> "CanvasPoint":
        return cls(point.x, point.y)

    def to_image_point(self) -> ImagePoint:
        """
        Convert back to an image coordinate.

        Raises:
            ValueError: If either coordinate is negative
        """
        return ImagePoint(self.x, self.y)

    def step(self, direction: StepDirection) -> "CanvasPoint":
        return CanvasPoint(self.x + direction.x, self.y + direction.y)


@dataclass(frozen=True)
class BoundingRect:
    """Axis-aligned rectangle in pixel coordinates."""
    x: int
    y: int
    width: int
    height: int

    @property
    def left(self) -> int:
        return self.x

    @property
    def top(self) -> int:
        return self.y

    @property
    def right(self) -> int:
        return self.x + self.width

    @property
    def bottom(self) -> int:
        return self.y + self.height

    @property
    def center_x(self) -> int:
        return self.x + self.width // 2

    @property
    def center_y(self) -> int:
        return self.y + self.height // 2

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Return as (x_min, y_min, x_max, y_max) tuple."""
        return (self.left, self.top, self.right, self.bottom)

    def intersection(self, other: "BoundingRect") -> Optional["BoundingRect"]:
        """
        Find the overlapping region between two rectangles.

        Returns:
            The overlap, or None when the rectangles only touch or are apart
        """
        x = max(self.left, other.left)
        y = max(self.top, other.top)
        x_overlap = max(min(self.right, other.right) - x, 0)
        y_overlap = max(min(self.bottom, other.bottom) - y, 0)

        if x_overlap > 0 and y_overlap > 0:
            return BoundingRect(x=x, y=y, width=x_overlap, height=y_overlap)
        return None

    def union(self, other: "BoundingRect") -> "BoundingRect":
        x = min(self.left, other.left)
        y = min(self.top, other.top)
        return BoundingRect(
            x=x,
            y=y,
            width=max(self.right, other.right) - x,
            height=max(self.bottom, other.bottom) - y,
        )


class _Image:
    """Shared behaviour for the concrete image types."""

    CHANNELS: ClassVar[int] = 0
    DTYPE: ClassVar[type] = np.float32

    def __init__(self, pixels: np.ndarray):
        pixels = np.asarray(pixels)
        expected_ndim = 3 if self.CHANNELS else 2
        if pixels.ndim != expected_ndim or (
            self.CHANNELS and pixels.shape[2] != self.CHANNELS
        ):
            raise ValueError(
                f"{type(self).__name__} expects an array of shape "
                f"{'(height, width, 3)' if self.CHANNELS else '(height, width)'}, "
                f"got {pixels.shape}"
            )
        self.pixels = pixels.astype(self.DTYPE, copy=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width), matching numpy ordering."""
        return (self.height, self.width)

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def copy(self):
        return type(self)(self.pixels.copy())

    def __eq__(self, other) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.width}x{self.height})"


class RGBImage(_Image):
    CHANNELS = 3

    def pixel_at(self, point: ImagePoint) -> RGBPixel:
        r, g, b = self.pixels[point.y, point.x]
        return RGBPixel(float(r), float(g), float(b))

    @classmethod
    def from_uint8(cls, pixels: np.ndarray) -> "RGBImage":
        """Build from an 8-bit (height, width, 3) RGB array."""
        return cls(pixels.astype(np.float32) / 255.0)

    def to_uint8(self) -> np.ndarray:
        return np.clip(np.rint(self.pixels * 255.0), 0, 255).astype(np.uint8)


class HSVImage(_Image):
    CHANNELS = 3

    def pixel_at(self, point: ImagePoint) -> HSVPixel:
        h, s, v = self.pixels[point.y, point.x]
        return HSVPixel(float(h), float(s), float(v))


class GrayscaleImage(_Image):
    CHANNELS = 0

    def pixel_at(self, point: ImagePoint) -> GrayscalePixel:
        return GrayscalePixel(float(self.pixels[point.y, point.x]))


class BinaryImage(_Image):
    CHANNELS = 0
    DTYPE = np.bool_

    def pixel_at(self, point: ImagePoint) -> BinaryPixel:
        return BinaryPixel(bool(self.pixels[point.y, point.x]))

    def is_active(self, x: int, y: int) -> bool:
        """Out-of-bounds coordinates are treated as inactive."""
        return self.contains(x, y) and bool(self.pixels[y, x])

    @property
    def active_count(self) -> int:
        return int(np.count_nonzero(self.pixels))

    @classmethod
    def from_rows(cls, rows) -> "BinaryImage":
        """Build from nested 0/1 rows, e.g. [[0, 1], [1, 0]]."""
        return cls(np.array(rows, dtype=bool))
