"""Ammo counter isolation and character recognition."""

from .ammo_reader import (
    AmmoCounterReader,
    ParsedAmmoResult,
    UnknownDigitError,
    expected_characters_from_file_name,
)
from .diagnostics import IsolateDiagnostics
from .digit_classifier import DigitClassifier, DigitLabel, DigitPrediction
from .digit_isolation import (
    AmmoDigitsResult,
    IsolationConfig,
    ScreenshotRegionError,
    find_ammo_digits,
    isolate_ammo_digits,
)

__all__ = [
    "AmmoCounterReader",
    "ParsedAmmoResult",
    "UnknownDigitError",
    "expected_characters_from_file_name",
    "IsolateDiagnostics",
    "DigitClassifier",
    "DigitLabel",
    "DigitPrediction",
    "AmmoDigitsResult",
    "IsolationConfig",
    "ScreenshotRegionError",
    "find_ammo_digits",
    "isolate_ammo_digits",
]
