import numpy as np
import pytest

from ammo_vision.vision.image_types import BinaryImage
from ammo_vision.vision.morphology import (
    MorphologyShape,
    closing,
    dilate,
    erode,
    get_structuring_element,
    opening,
)

SHAPE = BinaryImage.from_rows(
    [
        [0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 1, 1, 1, 0, 0],
        [0, 0, 1, 1, 1, 1, 0, 0],
        [0, 1, 1, 1, 1, 0, 0, 0],
        [0, 1, 1, 1, 0, 0, 0, 0],
        [0, 1, 1, 1, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0, 0, 0],
    ]
)


def reference_erode(image: BinaryImage, kernel: BinaryImage) -> np.ndarray:
    """Footprint-by-footprint erosion; anything outside of the image is a miss."""
    out = np.zeros_like(image.pixels)
    anchor_x, anchor_y = kernel.width // 2, kernel.height // 2
    for y in range(image.height):
        for x in range(image.width):
            fits = True
            for ky in range(kernel.height):
                for kx in range(kernel.width):
                    ix, iy = x + kx - anchor_x, y + ky - anchor_y
                    if not image.contains(ix, iy):
                        fits = False
                    elif kernel.pixels[ky, kx] and not image.pixels[iy, ix]:
                        fits = False
            out[y, x] = fits
    return out


def reference_dilate(image: BinaryImage, kernel: BinaryImage) -> np.ndarray:
    out = np.zeros_like(image.pixels)
    anchor_x, anchor_y = kernel.width // 2, kernel.height // 2
    for y in range(image.height):
        for x in range(image.width):
            for ky in range(kernel.height):
                for kx in range(kernel.width):
                    ix, iy = x + kx - anchor_x, y + ky - anchor_y
                    if kernel.pixels[ky, kx] and image.is_active(ix, iy):
                        out[y, x] = True
    return out


def test_cross_structuring_element():
    kernel = get_structuring_element(MorphologyShape.CROSS, 7, 7)
    expected = np.zeros((7, 7), dtype=bool)
    expected[3, :] = True
    expected[:, 3] = True
    np.testing.assert_array_equal(kernel.pixels, expected)


def test_rectangle_structuring_element():
    kernel = get_structuring_element(MorphologyShape.RECTANGLE, 5, 3)
    assert (kernel.width, kernel.height) == (5, 3)
    assert kernel.pixels.all()


def test_ellipse_structuring_element_not_implemented():
    with pytest.raises(NotImplementedError):
        get_structuring_element(MorphologyShape.ELLIPSE, 3, 3)


@pytest.mark.parametrize("width, height", [(2, 3), (3, 4), (0, 3)])
def test_structuring_element_must_be_odd(width, height):
    with pytest.raises(ValueError):
        get_structuring_element(MorphologyShape.RECTANGLE, width, height)


def test_even_kernel_rejected_by_erode_and_dilate():
    kernel = BinaryImage(np.ones((2, 3), dtype=bool))
    with pytest.raises(ValueError):
        erode(SHAPE, kernel)
    with pytest.raises(ValueError):
        dilate(SHAPE, kernel)


def test_erode_with_cross():
    kernel = get_structuring_element(MorphologyShape.CROSS, 3, 3)
    expected = BinaryImage.from_rows(
        [
            [0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 1, 1, 0, 0, 0],
            [0, 0, 1, 1, 0, 0, 0, 0],
            [0, 0, 1, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
        ]
    )
    assert erode(SHAPE, kernel) == expected


def test_dilate_with_cross():
    kernel = get_structuring_element(MorphologyShape.CROSS, 3, 3)
    expected = BinaryImage.from_rows(
        [
            [0, 0, 0, 1, 1, 1, 0, 0],
            [0, 0, 1, 1, 1, 1, 1, 0],
            [0, 1, 1, 1, 1, 1, 1, 0],
            [1, 1, 1, 1, 1, 1, 0, 0],
            [1, 1, 1, 1, 1, 0, 0, 0],
            [1, 1, 1, 1, 1, 0, 0, 0],
            [0, 1, 1, 1, 0, 0, 0, 0],
            [0, 0, 0, 0, 0, 0, 0, 0],
        ]
    )
    assert dilate(SHAPE, kernel) == expected


def test_erode_treats_outside_as_miss():
    full = BinaryImage(np.ones((5, 5), dtype=bool))
    # Only the center cell of the cross is active, but the footprint still has to fit
    center_only = BinaryImage.from_rows([[0, 0, 0], [0, 1, 0], [0, 0, 0]])

    eroded = erode(full, center_only)

    expected = np.zeros((5, 5), dtype=bool)
    expected[1:4, 1:4] = True
    np.testing.assert_array_equal(eroded.pixels, expected)


def test_dilate_skips_outside():
    corner = BinaryImage(np.zeros((4, 4), dtype=bool))
    corner.pixels[0, 0] = True
    dilated = dilate(corner, get_structuring_element(MorphologyShape.RECTANGLE, 3, 3))

    expected = np.zeros((4, 4), dtype=bool)
    expected[:2, :2] = True
    np.testing.assert_array_equal(dilated.pixels, expected)


def test_operations_do_not_mutate_input():
    before = SHAPE.copy()
    kernel = get_structuring_element(MorphologyShape.CROSS, 3, 3)
    erode(SHAPE, kernel)
    dilate(SHAPE, kernel)
    assert SHAPE == before


def test_kernel_larger_than_image():
    kernel = get_structuring_element(MorphologyShape.RECTANGLE, 13, 13)
    small = BinaryImage(np.ones((4, 5), dtype=bool))
    assert not erode(small, kernel).pixels.any()
    assert dilate(small, kernel).pixels.all()


@pytest.mark.parametrize(
    "shape, width, height",
    [
        (MorphologyShape.CROSS, 3, 3),
        (MorphologyShape.RECTANGLE, 5, 3),
        (MorphologyShape.CROSS, 3, 7),
    ],
)
def test_matches_reference_on_random_images(shape, width, height):
    rng = np.random.default_rng(width * 10 + height)
    image = BinaryImage(rng.random((12, 10)) > 0.3)
    kernel = get_structuring_element(shape, width, height)

    np.testing.assert_array_equal(erode(image, kernel).pixels, reference_erode(image, kernel))
    np.testing.assert_array_equal(dilate(image, kernel).pixels, reference_dilate(image, kernel))


def test_opening_and_closing_compose():
    kernel = get_structuring_element(MorphologyShape.CROSS, 3, 3)
    assert opening(SHAPE, kernel) == dilate(erode(SHAPE, kernel), kernel)
    assert closing(SHAPE, kernel) == erode(dilate(SHAPE, kernel), kernel)


@pytest.mark.parametrize(
    "shape, width, height",
    [
        (MorphologyShape.CROSS, 3, 3),
        (MorphologyShape.RECTANGLE, 3, 3),
        (MorphologyShape.RECTANGLE, 5, 3),
    ],
)
@pytest.mark.parametrize("seed", range(4))
def test_opening_stays_inside_closing(shape, width, height, seed):
    kernel = get_structuring_element(shape, width, height)
    # Erode treats the outside as a miss, so closing shrinks at the image
    # border; a blank margin as wide as the kernel keeps the shape clear of it
    margin_x, margin_y = width, height
    rng = np.random.default_rng(seed)
    pixels = np.zeros((16 + 2 * margin_y, 16 + 2 * margin_x), dtype=bool)
    pixels[margin_y:-margin_y, margin_x:-margin_x] = rng.random((16, 16)) > 0.35
    image = BinaryImage(pixels)

    opened = opening(image, kernel).pixels
    closed = closing(image, kernel).pixels

    assert not (opened & ~closed).any()
    assert not (opened & ~image.pixels).any()
    assert not (image.pixels & ~closed).any()
