#!/usr/bin/env python3
"""
Read the ammo counter from a screenshot file or from live screen captures.

Without a classifier checkpoint only the character isolation runs and the
bounding boxes are printed.

Usage:
    python read_ammo.py screenshot "screenshots/36 - argyle.png"
    python read_ammo.py screenshot shot.png --checkpoint data/models/ammo_digits_resnet18.pth
    python read_ammo.py screenshot shot.png --debug-dir debug/
    python read_ammo.py live --interval 0.5 --checkpoint data/models/ammo_digits_resnet18.pth
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from ammo_vision.capture import ScreenCapture, screenshot_from_file
from ammo_vision.constants import ScreenshotRegion
from ammo_vision.ocr import (
    AmmoCounterReader,
    DigitClassifier,
    IsolateDiagnostics,
    ScreenshotRegionError,
    UnknownDigitError,
    expected_characters_from_file_name,
    find_ammo_digits,
)

DEFAULT_CHECKPOINT = Path("data/models/ammo_digits_resnet18.pth")


def parse_resolution(value: str):
    """Parse "1920x1080" into (1920, 1080)."""
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected WIDTHxHEIGHT, got {value!r}")
    return width, height


def build_reader(checkpoint: Path):
    if not checkpoint.exists():
        print(f"No classifier checkpoint at {checkpoint}, only isolating characters")
        return None
    return AmmoCounterReader(DigitClassifier(checkpoint))


def report(screenshot, reader, diagnostics=None):
    """Print the ammo counter (or the isolated boxes) for one screenshot."""
    if reader is None:
        result = find_ammo_digits(screenshot, diagnostics=diagnostics)
        if result is None:
            print("Ammo counter not found")
            return None
        boxes = ", ".join(
            f"({box.x}, {box.y}, {box.width}x{box.height})" for box in result.digit_bounding_boxes
        )
        print(f"Found {len(result.digit_images)} characters: {boxes}")
        return None

    try:
        parsed = reader.read(screenshot, diagnostics)
    except UnknownDigitError as e:
        print(f"Could not read ammo counter: {e}")
        return None

    if parsed is None:
        print("Ammo counter not found")
        return None

    confidences = ", ".join(f"{confidence:.2f}" for confidence in parsed.confidence_levels)
    print(f"Ammo: {parsed.ammo_value} (confidence: {confidences})")
    return parsed.ammo_value


def run_screenshot(args) -> int:
    path = Path(args.path)
    if not path.exists():
        print(f"Error: Screenshot not found: {path}")
        return 1

    screenshot = screenshot_from_file(
        path,
        region=ScreenshotRegion(args.region),
        game_resolution=args.game_resolution,
    )
    reader = build_reader(Path(args.checkpoint))
    diagnostics = IsolateDiagnostics() if args.debug_dir else None

    try:
        ammo_value = report(screenshot, reader, diagnostics)
    except ScreenshotRegionError as e:
        print(f"Error: {e}")
        return 1

    if diagnostics is not None:
        saved = diagnostics.save(args.debug_dir, prefix=f"{path.stem}_")
        print(f"Saved {len(saved)} debug images to {args.debug_dir}/")

    # Labelled screenshots ("36 - argyle.png") double as a quick check
    try:
        expected = expected_characters_from_file_name(path.name)
    except ValueError:
        expected = None
    if expected is not None and ammo_value is not None:
        digits = expected.rstrip("%")
        status = "OK" if digits and int(digits) == ammo_value else "MISMATCH"
        print(f"Expected: {expected or '(none)'} -> {status}")

    return 0


def run_live(args) -> int:
    reader = build_reader(Path(args.checkpoint))

    print(f"Capturing monitor {args.monitor} every {args.interval:.2f}s (Ctrl+C to stop)")
    frame_count = 0
    with ScreenCapture(monitor_index=args.monitor) as capture:
        try:
            while args.max_frames is None or frame_count < args.max_frames:
                start = time.time()
                screenshot = capture.grab(game_resolution=args.game_resolution)
                report(screenshot, reader)
                frame_count += 1

                elapsed = time.time() - start
                time.sleep(max(args.interval - elapsed, 0.0))
        except KeyboardInterrupt:
            print(f"\nStopped after {frame_count} frames")

    return 0


def main():
    parser = argparse.ArgumentParser(description="Read the ammo counter from game screenshots")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log pipeline details")
    parser.add_argument(
        "--checkpoint",
        default=str(DEFAULT_CHECKPOINT),
        help=f"Digit classifier checkpoint (default: {DEFAULT_CHECKPOINT})",
    )
    parser.add_argument(
        "--game-resolution",
        type=parse_resolution,
        default=None,
        help="Resolution the game renders at, e.g. 1920x1080 (default: capture size)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    screenshot_parser = subparsers.add_parser("screenshot", help="Read a screenshot file")
    screenshot_parser.add_argument("path", help="Path to the screenshot")
    screenshot_parser.add_argument(
        "--region",
        choices=[region.value for region in ScreenshotRegion],
        default=ScreenshotRegion.FULL_SCREEN.value,
        help="Region of the game window the screenshot shows (default: full_screen)",
    )
    screenshot_parser.add_argument(
        "--debug-dir",
        default=None,
        help="Save the intermediate pipeline images to this directory",
    )

    live_parser = subparsers.add_parser("live", help="Read live screen captures")
    live_parser.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Seconds between captures (default: 1.0)",
    )
    live_parser.add_argument("--monitor", type=int, default=1, help="mss monitor index (default: 1)")
    live_parser.add_argument(
        "--max-frames",
        type=int,
        default=None,
        help="Stop after this many captures (default: run until interrupted)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "screenshot":
        sys.exit(run_screenshot(args))
    sys.exit(run_live(args))


if __name__ == "__main__":
    main()
