"""
Intermediate images collected while isolating the ammo counter.

Every image is converted to RGB on the way in so the whole set can be
viewed or written out the same way.
"""

from collections import OrderedDict
from pathlib import Path
from typing import Iterator, List, Tuple, Union

from ..capture.image_io import save_rgb_image
from ..vision.color_conversion import convert_to_rgb_image
from ..vision.image_types import RGBImage


class IsolateDiagnostics:
    """Ordered label -> RGB image collection."""

    def __init__(self):
        self.images: "OrderedDict[str, RGBImage]" = OrderedDict()

    def add_image(self, label: str, image):
        """Store an image of any type under a label, replacing an existing one."""
        self.images[label] = convert_to_rgb_image(image)

    @property
    def labels(self) -> List[str]:
        return list(self.images)

    def items(self) -> Iterator[Tuple[str, RGBImage]]:
        return iter(self.images.items())

    def __getitem__(self, label: str) -> RGBImage:
        return self.images[label]

    def __contains__(self, label: str) -> bool:
        return label in self.images

    def __len__(self) -> int:
        return len(self.images)

    def save(self, directory: Union[str, Path], prefix: str = "") -> List[Path]:
        """
        Write every image as a numbered PNG, e.g. "02_resized_rgb_image.png".

        Returns:
            Paths written, in order
        """
        directory = Path(directory)
        paths = []
        for index, (label, image) in enumerate(self.images.items()):
            name = f"{prefix}{index:02d}_{label}.png"
            path = directory / name
            save_rgb_image(image, path)
            paths.append(path)
        return paths
