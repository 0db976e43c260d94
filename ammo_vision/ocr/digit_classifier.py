"""
Digit classifier for isolated ammo counter characters.

A ResNet-18 with one output per character class, trained on the crops the
isolation pipeline produces. Checkpoints are either a bare state dict or a
training checkpoint dict with "model_state_dict" and "class_to_idx".

Usage:
    classifier = DigitClassifier("data/models/ammo_digits_resnet18.pth")
    prediction = classifier.classify(digit_image)
    print(prediction.label, prediction.confidence)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union, cast

import torch
import torch.nn as nn
import torch.nn.functional as F
import torchvision
from PIL import Image
from torchvision import transforms

from ..vision.image_types import RGBImage

logger = logging.getLogger(__name__)

# Must match the training transform
transform = transforms.Compose(
    [
        transforms.Resize((224, 224)),
        transforms.ToTensor(),
        transforms.Normalize(mean=[0.485, 0.456, 0.406], std=[0.229, 0.224, 0.225]),
    ]
)


class DigitLabel(Enum):
    ZERO = "0"
    ONE = "1"
    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    # Anything that is not a digit (e.g. a trailing "%")
    UNKNOWN = "unknown"

    @classmethod
    def from_class_name(cls, class_name: str) -> "DigitLabel":
        try:
            return cls(class_name)
        except ValueError:
            return cls.UNKNOWN

    @property
    def digit(self) -> Optional[int]:
        if self is DigitLabel.UNKNOWN:
            return None
        return int(self.value)

    @property
    def character(self) -> str:
        return "?" if self is DigitLabel.UNKNOWN else self.value


@dataclass
class DigitPrediction:
    label: DigitLabel
    # Softmax probability of the predicted class, in [0, 1]
    confidence: float


DEFAULT_CLASS_NAMES = [str(digit) for digit in range(10)]


def get_default_device() -> torch.device:
    if torch.backends.mps.is_available():
        return torch.device("mps")
    if torch.cuda.is_available():
        return torch.device("cuda")
    return torch.device("cpu")


class DigitClassifier:
    """
    Classifies single character images.

    The model is built and its weights loaded on first use.
    """

    def __init__(
        self,
        checkpoint_path: Union[str, Path, None] = None,
        class_names: Optional[Sequence[str]] = None,
        model: Optional[nn.Module] = None,
        device: Optional[torch.device] = None,
    ):
        """
        Args:
            checkpoint_path: Weights for the ResNet-18 model
            class_names: Class name for each model output. Defaults to the
                checkpoint's class_to_idx, or the digits 0-9.
            model: Use this model instead of loading a checkpoint
            device: Defaults to mps, then cuda, then cpu
        """
        if checkpoint_path is None and model is None:
            raise ValueError("DigitClassifier needs a checkpoint_path or a model")

        self.checkpoint_path = Path(checkpoint_path) if checkpoint_path is not None else None
        self.class_names: Optional[List[str]] = list(class_names) if class_names is not None else None
        self.device = device or get_default_device()
        self._model = model

        if self._model is not None:
            self._model.to(self.device)
            self._model.eval()
            if self.class_names is None:
                self.class_names = list(DEFAULT_CLASS_NAMES)

    @property
    def model(self) -> nn.Module:
        """Lazy-load the model."""
        if self._model is None:
            self._model = self._load_model()
        return self._model

    def _load_model(self) -> nn.Module:
        logger.info("Loading digit classifier from %s on %s", self.checkpoint_path, self.device)
        checkpoint = torch.load(self.checkpoint_path, map_location=self.device)

        if isinstance(checkpoint, dict) and "model_state_dict" in checkpoint:
            state_dict = checkpoint["model_state_dict"]
            if self.class_names is None and "class_to_idx" in checkpoint:
                self.class_names = _class_names_from_class_to_idx(checkpoint["class_to_idx"])
        else:
            state_dict = checkpoint

        if self.class_names is None:
            self.class_names = list(DEFAULT_CLASS_NAMES)

        # No pretrained weights, just the trained ones
        model = torchvision.models.resnet18(weights=None)
        model.fc = nn.Linear(model.fc.in_features, len(self.class_names))
        model.load_state_dict(state_dict)
        model.to(self.device)
        model.eval()
        return model

    def classify(self, rgb_image: RGBImage) -> DigitPrediction:
        return self.classify_batch([rgb_image])[0]

    def classify_batch(self, rgb_images: Sequence[RGBImage]) -> List[DigitPrediction]:
        """Classify several character images in one forward pass."""
        if not rgb_images:
            return []

        model = self.model
        image_tensors = [
            cast(torch.Tensor, transform(Image.fromarray(rgb_image.to_uint8())))
            for rgb_image in rgb_images
        ]
        image_batch = torch.stack(image_tensors).to(self.device)

        with torch.no_grad():
            output = model(image_batch)
            probs = F.softmax(output, dim=1)
            confidences, pred_indices = probs.max(dim=1)

        predictions = []
        for confidence, pred_idx in zip(confidences.tolist(), pred_indices.tolist()):
            class_name = self.class_names[pred_idx]
            predictions.append(
                DigitPrediction(
                    label=DigitLabel.from_class_name(class_name),
                    confidence=float(confidence),
                )
            )
        return predictions

    def __repr__(self) -> str:
        return (
            f"DigitClassifier(checkpoint={self.checkpoint_path}, "
            f"classes={self.class_names}, device={self.device})"
        )


def _class_names_from_class_to_idx(class_to_idx: Dict[str, int]) -> List[str]:
    return [name for name, _ in sorted(class_to_idx.items(), key=lambda item: item[1])]
