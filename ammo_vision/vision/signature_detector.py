"""
Chromatic aberration signature detector.

The ammo counter glyphs are rendered with a rainbow fringe along their edges.
Scanning across a stroke we see blue, then cyan, then yellow, then red within
a handful of pixels. Nothing else on screen produces that sequence in order,
so we use it to isolate the counter text.

Detection slides a window of up to WINDOW_SIZE pixels along every row and
then along every column. Whenever the four colors appear in order inside a
window, every pixel of that window is copied to the output.
"""

import logging
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from ..constants.vision_constants import SIGNATURE_COLOR_RANGES, SignatureConstants
from .color_conversion import check_hsv_pixel_in_range, hsv_image_in_range
from .image_types import HSVImage, HSVPixel

logger = logging.getLogger(__name__)


class SignatureCondition(Enum):
    """Signature colors, in the order they must appear."""
    BLUE = "blue"
    CYAN = "cyan"
    YELLOW = "yellow"
    RED = "red"


CONDITION_ORDER: Tuple[SignatureCondition, ...] = tuple(SignatureCondition)
NUM_CONDITIONS = len(CONDITION_ORDER)

# Fixed-size record of which conditions have been met, rebuilt on every step
ConditionState = Tuple[bool, bool, bool, bool]
INITIAL_CONDITION_STATE: ConditionState = (False,) * NUM_CONDITIONS


def check_signature_condition(hsv_pixel: HSVPixel, condition: SignatureCondition) -> bool:
    """Check whether a pixel falls inside any of the HSV boxes of a condition."""
    return any(
        check_hsv_pixel_in_range(hsv_pixel, lower, upper)
        for lower, upper in SIGNATURE_COLOR_RANGES[condition.value]
    )


def find_next_unmet_condition(
    conditions: ConditionState,
) -> Tuple[Optional[SignatureCondition], int]:
    """
    Find the first condition that has not been met yet.

    Returns:
        (next unmet condition, number of conditions left including it), or
        (None, 0) when everything is met
    """
    for index, is_met in enumerate(conditions):
        if not is_met:
            return CONDITION_ORDER[index], NUM_CONDITIONS - index
    return None, 0


def _mark_condition_met(conditions: ConditionState, condition: SignatureCondition) -> ConditionState:
    index = CONDITION_ORDER.index(condition)
    return conditions[:index] + (True,) + conditions[index + 1:]


def check_window_for_signature(hsv_pixels: Sequence[HSVPixel]) -> bool:
    """
    Check for blue, cyan, yellow and red pixels, in that order, in a window.

    Each pixel is only tested against the next unmet condition. We succeed as
    soon as every condition is met and give up as soon as there are fewer
    pixels left than conditions left to meet.

    Args:
        hsv_pixels: Consecutive pixels along a row or column

    Returns:
        True if the window contains the signature
    """
    if len(hsv_pixels) < NUM_CONDITIONS:
        return False

    conditions = INITIAL_CONDITION_STATE
    for pixel_index, hsv_pixel in enumerate(hsv_pixels):
        next_condition, num_conditions_left = find_next_unmet_condition(conditions)

        if next_condition is None:
            return True

        if len(hsv_pixels) - pixel_index < num_conditions_left:
            return False

        if check_signature_condition(hsv_pixel, next_condition):
            conditions = _mark_condition_met(conditions, next_condition)

    return all(conditions)


def _condition_masks(hsv_image: HSVImage) -> np.ndarray:
    """Stack of (num_conditions, height, width) masks, one per condition."""
    masks = np.zeros((NUM_CONDITIONS, hsv_image.height, hsv_image.width), dtype=bool)
    for index, condition in enumerate(CONDITION_ORDER):
        for lower, upper in SIGNATURE_COLOR_RANGES[condition.value]:
            masks[index] |= hsv_image_in_range(hsv_image, lower, upper)
    return masks


def _scan_rows(condition_masks: np.ndarray, window_size: int) -> np.ndarray:
    """
    Run `check_window_for_signature` on the window starting at every pixel,
    for all rows at once.

    Args:
        condition_masks: (num_conditions, height, width) masks
        window_size: Maximum window length

    Returns:
        (height, width) mask of pixels covered by a successful window
    """
    _, height, width = condition_masks.shape
    if width == 0 or height == 0:
        return np.zeros((height, width), dtype=bool)

    # Pad the end of each row so every window can be indexed; the padded
    # cells are never read because of the window length check below.
    padded = np.zeros((NUM_CONDITIONS + 1, height, width + window_size), dtype=bool)
    padded[:NUM_CONDITIONS, :, :width] = condition_masks

    start_x = np.arange(width)
    window_lengths = np.broadcast_to(np.minimum(window_size, width - start_x), (height, width))

    num_met = np.zeros((height, width), dtype=np.int64)
    alive = np.broadcast_to(window_lengths >= NUM_CONDITIONS, (height, width)).copy()
    rows = np.arange(height)[:, np.newaxis]

    for offset in range(window_size):
        in_window = offset < window_lengths
        pending = alive & in_window & (num_met < NUM_CONDITIONS)

        # Not enough pixels left to ever meet the remaining conditions
        exhausted = pending & ((window_lengths - offset) < (NUM_CONDITIONS - num_met))
        alive &= ~exhausted
        pending &= ~exhausted

        # Test each pixel only against its window's next unmet condition
        passes = padded[num_met, rows, start_x[np.newaxis, :] + offset]
        num_met = num_met + (pending & passes)

    found = alive & (num_met == NUM_CONDITIONS)

    covered = np.zeros((height, width + window_size), dtype=bool)
    for offset in range(window_size):
        covered[:, offset : offset + width] |= found & (offset < window_lengths)
    return covered[:, :width]


def find_signature_text(hsv_image: HSVImage, window_size: int = None) -> HSVImage:
    """
    Keep only the pixels that belong to a chromatic aberration window.

    Rows are scanned first, then columns; a pixel may be covered by several
    windows but always receives its original value.

    Args:
        hsv_image: Image to scan
        window_size: Sliding window length (defaults to SignatureConstants)

    Returns:
        HSV image of the same size, zero everywhere except signature windows
    """
    if window_size is None:
        window_size = SignatureConstants().WINDOW_SIZE

    condition_masks = _condition_masks(hsv_image)

    row_hits = _scan_rows(condition_masks, window_size)
    column_hits = _scan_rows(condition_masks.transpose(0, 2, 1), window_size).T
    keep = row_hits | column_hits

    logger.debug(
        "Signature scan on %dx%d image kept %d pixels",
        hsv_image.width,
        hsv_image.height,
        int(np.count_nonzero(keep)),
    )

    return HSVImage(np.where(keep[..., np.newaxis], hsv_image.pixels, 0.0))
