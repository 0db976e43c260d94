import numpy as np
import pytest

from ammo_vision.constants import DigitFilterConstants, Screenshot, ScreenshotRegion
from ammo_vision.ocr.diagnostics import IsolateDiagnostics
from ammo_vision.ocr.digit_isolation import (
    IsolationConfig,
    ScreenshotRegionError,
    calculate_coverage_in_bounding_box,
    crop_to_ammo_counter_region,
    filter_digit_bounding_boxes,
    find_ammo_digits,
    isolate_ammo_digits,
)
from ammo_vision.vision.contours import find_contours
from ammo_vision.vision.image_resizing import (
    InterpolationMethod,
    get_ideal_interpolation_method,
    resize_image,
    resize_screenshot_to_game_resolution,
)
from ammo_vision.vision.image_types import BinaryImage, BoundingRect, RGBImage

from conftest import make_ammo_counter_screenshot, paint_glyph


def screenshot_of_size(width, height, region=ScreenshotRegion.FULL_SCREEN):
    image = RGBImage(np.zeros((height, width, 3), dtype=np.float32))
    return Screenshot(
        image=image,
        region=region,
        pre_crop_width=width,
        pre_crop_height=height,
        game_resolution_width=width,
        game_resolution_height=height,
    )


def mask_with_blocks(blocks, width=200, height=60) -> BinaryImage:
    """Solid blocks given as (x, y, width, height) in pixel counts."""
    pixels = np.zeros((height, width), dtype=bool)
    for x, y, block_width, block_height in blocks:
        pixels[y : y + block_height, x : x + block_width] = True
    return BinaryImage(pixels)


def filter_blocks(blocks, **overrides):
    mask = mask_with_blocks(blocks)
    return filter_digit_bounding_boxes(find_contours(mask), mask, DigitFilterConstants(**overrides))


def test_full_screen_is_cropped_to_bottom_right_quadrant():
    screenshot = screenshot_of_size(9, 7)
    cropped = crop_to_ammo_counter_region(screenshot)

    assert cropped.region is ScreenshotRegion.BOTTOM_RIGHT_QUADRANT
    assert (cropped.image.width, cropped.image.height) == (5, 4)
    # Cropping keeps the window geometry
    assert (cropped.pre_crop_width, cropped.pre_crop_height) == (9, 7)


@pytest.mark.parametrize(
    "region",
    [
        ScreenshotRegion.BOTTOM_RIGHT_QUADRANT,
        ScreenshotRegion.BOTTOM_RIGHT_UI,
        ScreenshotRegion.AMMO_COUNTER,
    ],
)
def test_specific_regions_pass_through(region):
    screenshot = screenshot_of_size(9, 7, region)
    assert crop_to_ammo_counter_region(screenshot) is screenshot


def test_center_region_is_rejected():
    screenshot = screenshot_of_size(9, 7, ScreenshotRegion.CENTER)
    with pytest.raises(ScreenshotRegionError):
        crop_to_ammo_counter_region(screenshot)
    with pytest.raises(ValueError):
        isolate_ammo_digits(screenshot)


def test_resize_screenshot_scales_image_and_geometry():
    # Window matches a 540p render, so everything doubles to reach 1080p
    screenshot = screenshot_of_size(40, 20, ScreenshotRegion.AMMO_COUNTER)
    screenshot.pre_crop_width, screenshot.pre_crop_height = 960, 540
    screenshot.game_resolution_width, screenshot.game_resolution_height = 960, 540

    resized = resize_screenshot_to_game_resolution(screenshot, 1080)

    assert (resized.image.width, resized.image.height) == (80, 40)
    assert (resized.pre_crop_width, resized.pre_crop_height) == (1920, 1080)
    assert (resized.game_resolution_width, resized.game_resolution_height) == (1920, 1080)
    assert resized.region is ScreenshotRegion.AMMO_COUNTER


def test_4k_screenshot_is_box_sampled():
    # 2:1 downscale, where nearest neighbor would skip every other pixel
    screenshot = screenshot_of_size(80, 40, ScreenshotRegion.AMMO_COUNTER)
    screenshot.image = RGBImage(np.random.default_rng(7).random((40, 80, 3)).astype(np.float32))
    screenshot.pre_crop_width, screenshot.pre_crop_height = 3840, 2160
    screenshot.game_resolution_width, screenshot.game_resolution_height = 3840, 2160

    resized = resize_screenshot_to_game_resolution(screenshot, 1080)

    box = resize_image(screenshot.image, 40, 20, InterpolationMethod.BOX)
    nearest = resize_image(screenshot.image, 40, 20, InterpolationMethod.NEAREST)
    np.testing.assert_array_equal(resized.image.pixels, box.pixels)
    assert not np.array_equal(resized.image.pixels, nearest.pixels)
    assert (resized.pre_crop_width, resized.pre_crop_height) == (1920, 1080)


def test_thin_crop_keeps_at_least_one_pixel():
    screenshot = screenshot_of_size(3, 3, ScreenshotRegion.AMMO_COUNTER)
    # Quarter scale: half from the window, half from the game resolution
    screenshot.pre_crop_width, screenshot.pre_crop_height = 1920, 1080
    screenshot.game_resolution_width, screenshot.game_resolution_height = 3840, 2160

    resized = resize_screenshot_to_game_resolution(screenshot, 1080)

    assert (resized.image.width, resized.image.height) == (1, 1)


def test_interpolation_method_choice():
    image = RGBImage(np.zeros((10, 20, 3)))
    assert get_ideal_interpolation_method(image, 10, 5) is InterpolationMethod.NEAREST
    assert get_ideal_interpolation_method(image, 30, 15) is InterpolationMethod.BILINEAR
    assert get_ideal_interpolation_method(image, 15, 7) is InterpolationMethod.BOX


def test_resize_binary_image_stays_binary():
    binary = BinaryImage.from_rows([[1, 0], [0, 1]])
    resized = resize_image(binary, 4, 4)
    assert isinstance(resized, BinaryImage)
    assert resized.pixels[:2, :2].all()
    assert not resized.pixels[:2, 2:].any()


def test_resize_rejects_empty_size():
    with pytest.raises(ValueError):
        resize_image(RGBImage(np.zeros((4, 4, 3))), 0, 2)


def test_coverage_counts_width_by_height_cells():
    mask = mask_with_blocks([(0, 0, 4, 4)], width=8, height=8)
    assert calculate_coverage_in_bounding_box(mask, BoundingRect(0, 0, 4, 4)) == 1.0
    assert calculate_coverage_in_bounding_box(mask, BoundingRect(2, 0, 4, 4)) == 0.5
    assert calculate_coverage_in_bounding_box(mask, BoundingRect(0, 0, 0, 4)) == 0.0


def test_filter_accepts_consecutive_characters():
    boxes = filter_blocks([(10, 5, 14, 30), (30, 5, 14, 30)])
    assert boxes == [BoundingRect(10, 5, 13, 29), BoundingRect(30, 5, 13, 29)]


def test_filter_skips_small_contours_before_first_character():
    boxes = filter_blocks([(2, 5, 4, 4), (10, 5, 14, 30)])
    assert boxes == [BoundingRect(10, 5, 13, 29)]


def test_filter_stops_at_small_contour_after_character():
    boxes = filter_blocks([(10, 5, 14, 30), (28, 5, 4, 4), (36, 5, 14, 30)])
    assert boxes == [BoundingRect(10, 5, 13, 29)]


def test_filter_skips_distant_characters_and_keeps_scanning():
    boxes = filter_blocks([(10, 5, 14, 30), (60, 5, 14, 30), (28, 5, 14, 30)])
    # Scan order is by column, so the far block is visited last and rejected
    assert boxes == [BoundingRect(10, 5, 13, 29), BoundingRect(28, 5, 13, 29)]


def test_filter_rejects_sparse_boxes():
    # An L shape is character sized but mostly empty
    mask = mask_with_blocks([(10, 5, 3, 30), (10, 32, 14, 3)])
    assert filter_digit_bounding_boxes(find_contours(mask), mask) == []


def test_filter_caps_number_of_characters():
    blocks = [(5 + index * 20, 5, 14, 30) for index in range(7)]
    boxes = filter_blocks(blocks)
    assert len(boxes) == 5
    assert [box.x for box in boxes] == [5, 25, 45, 65, 85]


def test_filter_thresholds_are_configurable():
    blocks = [(10, 5, 14, 30), (30, 5, 14, 30)]
    assert len(filter_blocks(blocks, MAX_NUM_AMMO_CHARACTERS=1)) == 1
    assert filter_blocks(blocks, CHARACTER_MIN_HEIGHT=40) == []


def test_find_ammo_digits(two_digit_screenshot):
    result = find_ammo_digits(two_digit_screenshot)

    assert result is not None
    assert result.digit_bounding_boxes == [
        BoundingRect(15, 10, 17, 29),
        BoundingRect(35, 10, 17, 29),
    ]
    assert result.ammo_counter_bounding_box == BoundingRect(15, 10, 37, 29)
    assert [(image.width, image.height) for image in result.digit_images] == [(17, 29), (17, 29)]
    np.testing.assert_array_equal(
        result.digit_images[0].pixels,
        two_digit_screenshot.image.pixels[10:39, 15:32],
    )


def test_isolate_ammo_digits_returns_crops(two_digit_screenshot):
    digit_images = isolate_ammo_digits(two_digit_screenshot)
    assert len(digit_images) == 2
    assert all(isinstance(image, RGBImage) for image in digit_images)


def test_no_signature_means_no_digits(empty_screenshot):
    assert find_ammo_digits(empty_screenshot) is None
    assert isolate_ammo_digits(empty_screenshot) == []


def test_single_glyph_too_small_for_a_character():
    screenshot = make_ammo_counter_screenshot([(20, 15, 8, 5)])
    assert isolate_ammo_digits(screenshot) == []


def test_config_overrides_filters(two_digit_screenshot):
    config = IsolationConfig(digit_filter=DigitFilterConstants(MAX_NUM_AMMO_CHARACTERS=1))
    assert len(isolate_ammo_digits(two_digit_screenshot, config)) == 1


def test_diagnostics_are_collected(two_digit_screenshot):
    diagnostics = IsolateDiagnostics()
    isolate_ammo_digits(two_digit_screenshot, diagnostics=diagnostics)

    assert diagnostics.labels == [
        "cropped_screenshot",
        "resized_rgb_image",
        "signature_hsv_image",
        "cleaned_mask_rgb_image",
        "contour_traced_rgb_image",
    ]
    assert all(isinstance(image, RGBImage) for _, image in diagnostics.items())


def test_find_ammo_digits_in_half_size_full_screen():
    # 960x540 capture of a game rendering at 1080p: the bottom-right quadrant
    # is cropped, then halved by the resize
    rgb_pixels = np.zeros((540, 960, 3), dtype=np.float32)
    # Stripes two pixels wide on even coordinates stay pure after halving
    paint_glyph(rgb_pixels, 480 + 40, 270 + 30, 16, 40, stripe_width=2)
    paint_glyph(rgb_pixels, 480 + 80, 270 + 30, 16, 40, stripe_width=2)
    screenshot = Screenshot(
        image=RGBImage(rgb_pixels),
        region=ScreenshotRegion.FULL_SCREEN,
        pre_crop_width=960,
        pre_crop_height=540,
        game_resolution_width=1920,
        game_resolution_height=1080,
    )

    result = find_ammo_digits(screenshot)

    assert result is not None
    assert result.digit_bounding_boxes == [
        BoundingRect(15, 10, 17, 29),
        BoundingRect(35, 10, 17, 29),
    ]
    assert result.ammo_counter_bounding_box == BoundingRect(15, 10, 37, 29)
