"""
Screenshot regions and the screenshot value handed to the pipeline.

A screenshot remembers which part of the game window it shows (the stage of
cropping it is at) along with the geometry needed to normalise its scale:
- the size of the whole game window before any cropping
- the resolution the game renders at
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Tuple

from ..vision.image_types import RGBImage


class ScreenshotRegion(Enum):
    """Region of the game window a screenshot was captured from."""
    FULL_SCREEN = "full_screen"
    # Cropped bottom-right quadrant of the screen
    BOTTOM_RIGHT_QUADRANT = "bottom_right_quadrant"
    # Bounding box around the UI in the bottom-right
    BOTTOM_RIGHT_UI = "bottom_right_ui"
    # Bounding box specifically around the ammo counter
    AMMO_COUNTER = "ammo_counter"
    # UI in the center of the screen around the reticle
    CENTER = "center"

    @property
    def contains_ammo_counter(self) -> bool:
        return self is not ScreenshotRegion.CENTER


@dataclass
class Screenshot:
    """Screenshot of the game (or a portion of it)."""
    image: RGBImage
    region: ScreenshotRegion
    # Size of the entire game window
    pre_crop_width: int
    pre_crop_height: int
    # Resolution the game is rendering at
    game_resolution_width: int
    game_resolution_height: int

    @classmethod
    def full_screen(
        cls,
        image: RGBImage,
        game_resolution: Tuple[int, int] = None,
    ) -> "Screenshot":
        """
        Wrap an uncropped capture of the game window.

        Args:
            image: The captured window
            game_resolution: (width, height) the game renders at. Defaults to
                the image size (1:1 screenshots).
        """
        game_width, game_height = game_resolution or (image.width, image.height)
        return cls(
            image=image,
            region=ScreenshotRegion.FULL_SCREEN,
            pre_crop_width=image.width,
            pre_crop_height=image.height,
            game_resolution_width=game_width,
            game_resolution_height=game_height,
        )

    def with_image(self, image: RGBImage, region: ScreenshotRegion = None) -> "Screenshot":
        """Copy of this screenshot holding a different image (and region)."""
        return replace(self, image=image, region=region or self.region)

    def __repr__(self) -> str:
        return (
            f"Screenshot({self.region.value}, {self.image.width}x{self.image.height}, "
            f"window={self.pre_crop_width}x{self.pre_crop_height}, "
            f"game={self.game_resolution_width}x{self.game_resolution_height})"
        )
