"""
Isolate the ammo counter digits in a game screenshot.

Pipeline:
1. Crop to the part of the screen that holds the counter
2. Resize to the canonical game resolution
3. Keep only pixels showing the chromatic aberration signature
4. Clean the mask (erode away specks, dilate strokes into solid blocks)
5. Trace contours and keep the ones shaped and spaced like characters
6. Crop each character out of the resized screenshot
"""

import logging
from dataclasses import dataclass, field
from functools import reduce
from typing import List, Optional

from ..constants.screen_regions import Screenshot, ScreenshotRegion
from ..constants.vision_constants import (
    CANONICAL_GAME_RESOLUTION_HEIGHT,
    DigitFilterConstants,
    MorphologyConstants,
    SignatureConstants,
)
from ..vision.color_conversion import (
    crop_image,
    hsv_to_binary_image,
    mask_image,
    rgb_to_hsv_image,
)
from ..vision.contours import (
    Contour,
    ContourMethod,
    find_contours,
    trace_contours_on_image,
)
from ..vision.image_resizing import resize_screenshot_to_game_resolution
from ..vision.image_types import BinaryImage, BoundingRect, RGBImage
from ..vision.morphology import MorphologyShape, dilate, erode, get_structuring_element
from ..vision.signature_detector import find_signature_text
from .diagnostics import IsolateDiagnostics

logger = logging.getLogger(__name__)


class ScreenshotRegionError(ValueError):
    """Raised when a screenshot region cannot contain the ammo counter."""


@dataclass(frozen=True)
class IsolationConfig:
    """Per-call overrides for the isolation pipeline."""
    desired_game_resolution_height: float = CANONICAL_GAME_RESOLUTION_HEIGHT
    signature: SignatureConstants = field(default_factory=SignatureConstants)
    morphology: MorphologyConstants = field(default_factory=MorphologyConstants)
    digit_filter: DigitFilterConstants = field(default_factory=DigitFilterConstants)


@dataclass
class AmmoDigitsResult:
    """Digits found in a screenshot, in resized-screenshot coordinates."""
    digit_images: List[RGBImage]
    digit_bounding_boxes: List[BoundingRect]
    ammo_counter_bounding_box: BoundingRect


def crop_to_ammo_counter_region(screenshot: Screenshot) -> Screenshot:
    """
    Crop a screenshot down to the region that holds the ammo counter.

    Full screen captures are cropped to the bottom-right quadrant; regions
    that are already at least that specific are passed through.

    Raises:
        ScreenshotRegionError: If the region cannot contain the counter
    """
    if screenshot.region is ScreenshotRegion.FULL_SCREEN:
        half_width = screenshot.image.width // 2
        half_height = screenshot.image.height // 2
        cropped_image = crop_image(
            screenshot.image,
            half_width,
            half_height,
            screenshot.image.width - half_width,
            screenshot.image.height - half_height,
        )
        # Only cropping, so the window size and resolution stay the same
        return screenshot.with_image(cropped_image, ScreenshotRegion.BOTTOM_RIGHT_QUADRANT)

    if screenshot.region.contains_ammo_counter:
        return screenshot

    raise ScreenshotRegionError(
        f"Screenshot region '{screenshot.region.value}' does not contain the ammo counter"
    )


def calculate_coverage_in_bounding_box(binary_image: BinaryImage, bounding_box: BoundingRect) -> float:
    """Share of active pixels in the width x height cells starting at (x, y)."""
    area = bounding_box.width * bounding_box.height
    if area == 0:
        return 0.0
    cells = binary_image.pixels[
        bounding_box.top : bounding_box.bottom,
        bounding_box.left : bounding_box.right,
    ]
    return float(cells.sum()) / area


def filter_digit_bounding_boxes(
    contours: List[Contour],
    mask: BinaryImage,
    digit_filter: DigitFilterConstants = None,
) -> List[BoundingRect]:
    """
    Pick the contours that look like consecutive ammo counter characters.

    Contours are visited in scan order (left to right). A contour is accepted
    when it is big enough, close enough to the previously accepted one and
    mostly solid. Since characters are consecutive, a contour that is too
    small after we already found some characters ends the search.

    Returns:
        Accepted bounding boxes, at most MAX_NUM_AMMO_CHARACTERS
    """
    if digit_filter is None:
        digit_filter = DigitFilterConstants()

    accepted: List[BoundingRect] = []
    for contour in contours:
        bounding_box = contour.bounding_rect()

        is_character_sized = (
            bounding_box.width > digit_filter.CHARACTER_MIN_WIDTH
            and bounding_box.height > digit_filter.CHARACTER_MIN_HEIGHT
        )
        if not is_character_sized:
            logger.debug("Rejected %s: too small", bounding_box)
            if accepted:
                break
            continue

        if accepted:
            spacing = abs(bounding_box.x - accepted[-1].right)
            if spacing > digit_filter.CHARACTER_MAX_SPACING:
                logger.debug("Rejected %s: %d px from previous character", bounding_box, spacing)
                continue

        coverage = calculate_coverage_in_bounding_box(mask, bounding_box)
        if coverage <= digit_filter.BOUNDING_BOX_COVERAGE:
            logger.debug("Rejected %s: coverage %.3f", bounding_box, coverage)
            continue

        logger.debug("Accepted %s: coverage %.3f", bounding_box, coverage)
        accepted.append(bounding_box)
        if len(accepted) >= digit_filter.MAX_NUM_AMMO_CHARACTERS:
            break

    return accepted


def find_ammo_digits(
    screenshot: Screenshot,
    config: IsolationConfig = None,
    diagnostics: Optional[IsolateDiagnostics] = None,
) -> Optional[AmmoDigitsResult]:
    """
    Find the ammo counter characters in a screenshot.

    Args:
        screenshot: Capture of the game window (or a crop of it)
        config: Overrides for the pipeline constants
        diagnostics: Filled with the intermediate images when given

    Returns:
        The character crops and their bounding boxes, or None if the counter
        was not found

    Raises:
        ScreenshotRegionError: If the screenshot region cannot contain the
            ammo counter
    """
    if config is None:
        config = IsolationConfig()

    # After this we deal with a quarter of the image or less
    cropped_screenshot = crop_to_ammo_counter_region(screenshot)
    if diagnostics is not None:
        diagnostics.add_image("cropped_screenshot", cropped_screenshot.image)

    # Consistent character size for the filters and the classifier
    resized_screenshot = resize_screenshot_to_game_resolution(
        cropped_screenshot,
        config.desired_game_resolution_height,
    )
    if diagnostics is not None:
        diagnostics.add_image("resized_rgb_image", resized_screenshot.image)

    hsv_image = rgb_to_hsv_image(resized_screenshot.image)
    signature_hsv_image = find_signature_text(hsv_image, config.signature.WINDOW_SIZE)
    if diagnostics is not None:
        diagnostics.add_image("signature_hsv_image", signature_hsv_image)

    signature_mask = hsv_to_binary_image(signature_hsv_image)

    # Erode away the small signature hits that are not text, then dilate to
    # join the strokes of each character into one block
    erode_kernel = get_structuring_element(MorphologyShape.CROSS, *config.morphology.ERODE_KERNEL_SIZE)
    dilate_kernel = get_structuring_element(MorphologyShape.RECTANGLE, *config.morphology.DILATE_KERNEL_SIZE)
    cleaned_mask = dilate(erode(signature_mask, erode_kernel), dilate_kernel)

    contours = find_contours(cleaned_mask, ContourMethod.SQUARE)
    if diagnostics is not None:
        cleaned_mask_rgb_image = mask_image(resized_screenshot.image, cleaned_mask)
        diagnostics.add_image("cleaned_mask_rgb_image", cleaned_mask_rgb_image)
        diagnostics.add_image(
            "contour_traced_rgb_image",
            trace_contours_on_image(cleaned_mask_rgb_image, contours),
        )

    digit_bounding_boxes = filter_digit_bounding_boxes(contours, cleaned_mask, config.digit_filter)
    logger.debug(
        "Kept %d of %d contours as ammo characters",
        len(digit_bounding_boxes),
        len(contours),
    )
    if not digit_bounding_boxes:
        return None

    digit_images = [
        crop_image(resized_screenshot.image, box.x, box.y, box.width, box.height)
        for box in digit_bounding_boxes
    ]

    return AmmoDigitsResult(
        digit_images=digit_images,
        digit_bounding_boxes=digit_bounding_boxes,
        ammo_counter_bounding_box=reduce(BoundingRect.union, digit_bounding_boxes),
    )


def isolate_ammo_digits(
    screenshot: Screenshot,
    config: IsolationConfig = None,
    diagnostics: Optional[IsolateDiagnostics] = None,
) -> List[RGBImage]:
    """
    Crop each ammo counter character out of a screenshot.

    Returns:
        Character images left to right, empty if the counter was not found

    Raises:
        ScreenshotRegionError: If the screenshot region cannot contain the
            ammo counter
    """
    result = find_ammo_digits(screenshot, config, diagnostics)
    if result is None:
        return []
    return result.digit_images
