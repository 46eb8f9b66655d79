from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

import numpy as np

from .errors import InvalidFilterError

CATEGORIES: Tuple[str, ...] = ("head", "eyes", "lips", "face", "frame", "all")


@dataclass(frozen=True)
class FilterDefinition:
    identifier: str
    label: str
    image_ref: str
    category: str = "eyes"

    def validate(self) -> None:
        if not self.identifier:
            raise InvalidFilterError("filter identifier is required")
        if not self.image_ref:
            raise InvalidFilterError(f"filter {self.identifier!r} has no image")
        if self.category not in CATEGORIES:
            raise InvalidFilterError(f"unknown category {self.category!r}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FilterDefinition":
        """Build a definition from the registration form shape.

        Accepts either the form keys (value, label, image, category) or the
        attribute names. Category falls back to "eyes" like the form does.
        """
        return cls(
            identifier=str(data.get("value", data.get("identifier")) or ""),
            label=str(data.get("label") or ""),
            image_ref=str(data.get("image", data.get("image_ref")) or ""),
            category=str(data.get("category") or "eyes"),
        )


@dataclass(frozen=True)
class CarouselEntry:
    instance_id: str
    definition: FilterDefinition


@dataclass
class FaceKeypoints:
    # Pixel coordinates (x, y) in video space, shape (N, 2)
    points: np.ndarray

    def __len__(self) -> int:
        return int(self.points.shape[0]) if self.points.ndim == 2 else 0


@dataclass
class OverlayPlacement:
    layer: str
    x: float
    y: float
    width: float
    height: float
    rotation_deg: float
    image_ref: str
    face_index: int = 0
    # Rotation pivot, in CSS transform-origin terms
    origin: str = "center"


@dataclass(frozen=True)
class Viewport:
    width: int = 640
    height: int = 480


@dataclass
class LoopStats:
    ticks: int = 0
    skipped: int = 0
    detections: int = 0
    failures: int = 0
    last_detect_ms: float = 0.0
