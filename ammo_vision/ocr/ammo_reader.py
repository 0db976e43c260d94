"""
Read the ammo counter value from a screenshot.

Isolates the counter characters, classifies each one and assembles the
digits into an integer.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from ..constants.screen_regions import Screenshot
from ..constants.vision_constants import DigitFilterConstants
from ..vision.image_types import BoundingRect
from .diagnostics import IsolateDiagnostics
from .digit_classifier import DigitClassifier, DigitLabel, DigitPrediction
from .digit_isolation import IsolationConfig, find_ammo_digits

logger = logging.getLogger(__name__)

EXPECTED_CHARACTERS = set("0123456789%")


class UnknownDigitError(ValueError):
    """Raised when a character that is not a digit shows up before the last position."""

    def __init__(self, debug_string: str):
        self.debug_string = debug_string
        super().__init__(f"Unknown character in the middle of the ammo counter ({debug_string})")


@dataclass
class ParsedAmmoResult:
    ammo_value: int
    ammo_counter_bounding_box: BoundingRect
    # One per digit, unknown characters excluded
    confidence_levels: List[float]


def debug_string_from_predictions(predictions: Sequence[DigitPrediction]) -> str:
    """e.g. ["3", "4", unknown] -> "34?"."""
    return "".join(prediction.label.character for prediction in predictions)


class AmmoCounterReader:
    """
    Reads the ammo counter with a digit classifier.

    Usage:
        reader = AmmoCounterReader(DigitClassifier("model.pth"))
        result = reader.read(screenshot)
        if result is not None:
            print(result.ammo_value)
    """

    def __init__(self, classifier: DigitClassifier, config: IsolationConfig = None):
        self.classifier = classifier
        self.config = config or IsolationConfig()

    def read(
        self,
        screenshot: Screenshot,
        diagnostics: Optional[IsolateDiagnostics] = None,
    ) -> Optional[ParsedAmmoResult]:
        """
        Read the ammo count.

        Returns:
            The parsed counter, or None if no characters were found

        Raises:
            UnknownDigitError: If an unknown character appears anywhere but
                last (e.g. "34%" is fine, "3%4" is not), or if no character
                is a digit
            ScreenshotRegionError: If the screenshot cannot contain the
                ammo counter
        """
        find_result = find_ammo_digits(screenshot, self.config, diagnostics)
        if find_result is None:
            return None

        predictions = self.classifier.classify_batch(find_result.digit_images)
        return parse_predictions(predictions, find_result.ammo_counter_bounding_box)

    def __repr__(self) -> str:
        return f"AmmoCounterReader({self.classifier!r})"


def parse_predictions(
    predictions: Sequence[DigitPrediction],
    ammo_counter_bounding_box: BoundingRect,
) -> ParsedAmmoResult:
    """
    Assemble classified characters (left to right) into the ammo value.

    Raises:
        UnknownDigitError: See AmmoCounterReader.read
    """
    digits: List[str] = []
    confidence_levels: List[float] = []
    last_index = len(predictions) - 1

    for index, prediction in enumerate(predictions):
        if prediction.label is DigitLabel.UNKNOWN:
            if index != last_index:
                debug_string = debug_string_from_predictions(predictions)
                logger.error("Unknown character in the middle of the ammo counter (%s)", debug_string)
                raise UnknownDigitError(debug_string)
            continue

        digits.append(prediction.label.value)
        confidence_levels.append(prediction.confidence)

    if not digits:
        raise UnknownDigitError(debug_string_from_predictions(predictions))

    ammo_value = int("".join(digits))
    logger.debug("Parsed ammo counter %s as %d", debug_string_from_predictions(predictions), ammo_value)

    return ParsedAmmoResult(
        ammo_value=ammo_value,
        ammo_counter_bounding_box=ammo_counter_bounding_box,
        confidence_levels=confidence_levels,
    )


def expected_characters_from_file_name(file_name: str) -> str:
    """
    Extract the expected ammo counter characters from a labelled screenshot name.

    Examples:
        "26 - streets.png" -> "26"
        "163.png" -> "163"
        "32% - cliffhanger stalker.png" -> "32%"
        "_ - breaker ghost.png" -> "" (control image, no counter)

    Raises:
        ValueError: For unexpected characters, names without a terminator,
            or more characters than the counter can show
    """
    file_name = Path(file_name).name
    max_characters = DigitFilterConstants().MAX_NUM_AMMO_CHARACTERS

    characters: List[str] = []
    for index, character in enumerate(file_name):
        # Leading underscore marks a control image
        if character == "_" and index == 0:
            return ""
        # A space or the file extension ends the characters
        if character in (" ", ".") and index > 0:
            return "".join(characters)

        if character not in EXPECTED_CHARACTERS:
            raise ValueError(f"Unexpected character {character!r} in file name {file_name!r}")

        characters.append(character)
        if len(characters) > max_characters:
            raise ValueError(
                f"File name {file_name!r} has more than {max_characters} ammo characters"
            )

    raise ValueError(f"Invalid labelled screenshot file name: {file_name!r}")
