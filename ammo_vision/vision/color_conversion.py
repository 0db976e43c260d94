"""
Color space conversions between RGB, HSV, grayscale and binary images.

All channels are normalized to [0, 1]. Before hue is scaled it lives in the
range [-1, 5):
- [-1, 1) when the max channel is R
- [1, 3) when the max channel is G
- [3, 5) when the max channel is B
Dividing by 6 brings it into [0, 1) once negative values are wrapped.

The image conversions use these formulas in numpy instead of cv2.cvtColor,
whose float HSV output is in degrees and which uses its own gray threshold,
so every image pixel matches the scalar functions.
"""

import numpy as np

from .image_types import (
    BinaryImage,
    GrayscaleImage,
    HSVImage,
    HSVPixel,
    RGBImage,
    RGBPixel,
)

# Below this, a color is treated as black or as a shade of gray
ACHROMATIC_EPSILON = 0.00001

HUE_RAW_RANGE = 6.0

# Rec. 601 luma weights
GRAYSCALE_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float32)


def rgb_to_hsv(rgb_pixel: RGBPixel) -> HSVPixel:
    """
    Convert a single RGB pixel to HSV.

    Shades of gray (and black) return early with hue and saturation at zero,
    which also avoids dividing by zero when computing saturation.
    """
    r, g, b = rgb_pixel.r, rgb_pixel.g, rgb_pixel.b

    max_value = max(r, g, b)
    min_value = min(r, g, b)
    # Also known as "chroma"
    delta = max_value - min_value

    v = max_value
    if delta < ACHROMATIC_EPSILON or max_value < ACHROMATIC_EPSILON:
        return HSVPixel(h=0.0, s=0.0, v=v)

    s = delta / max_value

    if r >= max_value:
        # between yellow & magenta
        h_raw = 0.0 + (g - b) / delta
    elif g >= max_value:
        # between cyan & yellow
        h_raw = 2.0 + (b - r) / delta
    else:
        # between magenta & cyan
        h_raw = 4.0 + (r - g) / delta

    h = h_raw / HUE_RAW_RANGE
    if h < 0.0:
        h += 1.0

    return HSVPixel(h=h, s=s, v=v)


def hsv_to_rgb(hsv_pixel: HSVPixel) -> RGBPixel:
    """Convert a single HSV pixel back to RGB (standard six-sector formula)."""
    h, s, v = hsv_pixel.h, hsv_pixel.s, hsv_pixel.v
    if s <= 0.0:
        return RGBPixel(r=v, g=v, b=v)

    h_sector = (h % 1.0) * HUE_RAW_RANGE
    sector = int(h_sector)
    fraction = h_sector - sector

    p = v * (1.0 - s)
    q = v * (1.0 - s * fraction)
    t = v * (1.0 - s * (1.0 - fraction))

    if sector == 0:
        return RGBPixel(r=v, g=t, b=p)
    elif sector == 1:
        return RGBPixel(r=q, g=v, b=p)
    elif sector == 2:
        return RGBPixel(r=p, g=v, b=t)
    elif sector == 3:
        return RGBPixel(r=p, g=q, b=v)
    elif sector == 4:
        return RGBPixel(r=t, g=p, b=v)
    else:
        return RGBPixel(r=v, g=p, b=q)


def rgb_to_hsv_image(rgb_image: RGBImage) -> HSVImage:
    """Vectorized `rgb_to_hsv` over a whole image."""
    rgb = rgb_image.pixels
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_value = rgb.max(axis=2)
    min_value = rgb.min(axis=2)
    delta = max_value - min_value

    chromatic = (delta >= ACHROMATIC_EPSILON) & (max_value >= ACHROMATIC_EPSILON)
    safe_delta = np.where(chromatic, delta, 1.0)
    safe_max = np.where(chromatic, max_value, 1.0)

    h_raw = np.where(
        r >= max_value,
        (g - b) / safe_delta,
        np.where(
            g >= max_value,
            2.0 + (b - r) / safe_delta,
            4.0 + (r - g) / safe_delta,
        ),
    )
    h = h_raw / HUE_RAW_RANGE
    h = np.where(h < 0.0, h + 1.0, h)

    hsv = np.empty_like(rgb, dtype=np.float32)
    hsv[..., 0] = np.where(chromatic, h, 0.0)
    hsv[..., 1] = np.where(chromatic, delta / safe_max, 0.0)
    hsv[..., 2] = max_value
    return HSVImage(hsv)


def hsv_to_rgb_image(hsv_image: HSVImage) -> RGBImage:
    """Vectorized `hsv_to_rgb` over a whole image."""
    hsv = hsv_image.pixels
    h, s, v = hsv[..., 0], hsv[..., 1], hsv[..., 2]

    h_sector = np.mod(h, 1.0) * HUE_RAW_RANGE
    sector = np.floor(h_sector).astype(np.int32) % 6
    fraction = h_sector - np.floor(h_sector)

    p = v * (1.0 - s)
    q = v * (1.0 - s * fraction)
    t = v * (1.0 - s * (1.0 - fraction))

    # Channel sources per sector, indexed [sector] -> (r, g, b)
    choices_r = [v, q, p, p, t, v]
    choices_g = [t, v, v, q, p, p]
    choices_b = [p, p, t, v, v, q]

    rgb = np.empty_like(hsv, dtype=np.float32)
    rgb[..., 0] = np.choose(sector, choices_r)
    rgb[..., 1] = np.choose(sector, choices_g)
    rgb[..., 2] = np.choose(sector, choices_b)

    achromatic = s <= 0.0
    for channel in range(3):
        rgb[..., channel] = np.where(achromatic, v, rgb[..., channel])

    return RGBImage(rgb)


def hsv_to_binary_image(hsv_image: HSVImage) -> BinaryImage:
    """Any pixel with a non-zero channel becomes active."""
    return BinaryImage(np.any(hsv_image.pixels != 0.0, axis=2))


def binary_to_rgb_image(binary_image: BinaryImage) -> RGBImage:
    """Active pixels become white, inactive pixels black."""
    values = binary_image.pixels.astype(np.float32)
    return RGBImage(np.repeat(values[..., np.newaxis], 3, axis=2))


def rgb_to_grayscale_image(rgb_image: RGBImage) -> GrayscaleImage:
    return GrayscaleImage(rgb_image.pixels @ GRAYSCALE_WEIGHTS)


def grayscale_to_rgb_image(grayscale_image: GrayscaleImage) -> RGBImage:
    return RGBImage(np.repeat(grayscale_image.pixels[..., np.newaxis], 3, axis=2))


def convert_to_rgb_image(image) -> RGBImage:
    """
    Convert any supported image type to RGB (used for diagnostics).

    Raises:
        TypeError: If the image type is not supported
    """
    if isinstance(image, RGBImage):
        return image.copy()
    if isinstance(image, HSVImage):
        return hsv_to_rgb_image(image)
    if isinstance(image, BinaryImage):
        return binary_to_rgb_image(image)
    if isinstance(image, GrayscaleImage):
        return grayscale_to_rgb_image(image)
    raise TypeError(f"Cannot convert {type(image).__name__} to an RGB image")


def mask_image(rgb_image: RGBImage, mask: BinaryImage) -> RGBImage:
    """Zero out every pixel outside of the mask."""
    if rgb_image.shape != mask.shape:
        raise ValueError(
            f"Mask {mask.width}x{mask.height} does not match image "
            f"{rgb_image.width}x{rgb_image.height}"
        )
    return RGBImage(np.where(mask.pixels[..., np.newaxis], rgb_image.pixels, 0.0))


def crop_image(image, x: int, y: int, width: int, height: int):
    """
    Copy a rectangular region out of an image of any type.

    Raises:
        ValueError: If the region does not fit inside the image
    """
    if x < 0 or y < 0 or width < 0 or height < 0 or (
        x + width > image.width or y + height > image.height
    ):
        raise ValueError(
            f"Crop region ({x}, {y}, {width}x{height}) is outside of the "
            f"{image.width}x{image.height} image"
        )
    return type(image)(image.pixels[y : y + height, x : x + width].copy())


def check_hsv_pixel_in_range(
    hsv_pixel: HSVPixel,
    lower_bound: HSVPixel,
    upper_bound: HSVPixel,
) -> bool:
    """Inclusive per-channel box test in HSV space."""
    return (
        lower_bound.h <= hsv_pixel.h <= upper_bound.h
        and lower_bound.s <= hsv_pixel.s <= upper_bound.s
        and lower_bound.v <= hsv_pixel.v <= upper_bound.v
    )


def hsv_image_in_range(
    hsv_image: HSVImage,
    lower_bound: HSVPixel,
    upper_bound: HSVPixel,
) -> np.ndarray:
    """Vectorized `check_hsv_pixel_in_range`, returns a (height, width) bool mask."""
    lower = np.array(lower_bound.to_tuple(), dtype=np.float64)
    upper = np.array(upper_bound.to_tuple(), dtype=np.float64)
    pixels = hsv_image.pixels
    return np.all((pixels >= lower) & (pixels <= upper), axis=2)
