"""Overlay placement from facial keypoints.

Geometry is anchored on the two outer eye corners:
  - eyes layer: box 1.8x the inter-corner distance wide, half as tall,
    centred horizontally on the corners and raised by a third of its height
  - head layer: 1.6x the eyes width, 0.8 aspect, shifted left and stacked
    above the eyes box
  - frame layer: the whole viewport, independent of the face
Both face-anchored layers are rotated by the roll of the eye line.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import numpy as np

from .errors import MalformedKeypointsError
from .keypoints import eye_corners
from .types import FaceKeypoints, FilterDefinition, OverlayPlacement, Viewport

logger = logging.getLogger(__name__)

EYES_WIDTH_SCALE = 1.8
EYES_ASPECT = 0.5
EYES_LIFT = 1.0 / 3.0
HEAD_WIDTH_SCALE = 1.6
HEAD_ASPECT = 0.8
HEAD_LEFT_SHIFT = 0.28
HEAD_LIFT = 0.8

LAYER_ORDER: Tuple[str, ...] = ("head", "eyes", "frame")


def eye_line(face: FaceKeypoints) -> Tuple[np.ndarray, np.ndarray, float, float]:
    """Return (left, right, rotation_deg, distance) for the eye-corner line."""
    left, right = eye_corners(face)
    dx, dy = right - left
    rotation = float(np.degrees(np.arctan2(dy, dx)))
    distance = float(np.hypot(dx, dy))
    return left, right, rotation, distance


def _eyes_box(left: np.ndarray, right: np.ndarray, distance: float) -> Tuple[float, float, float, float]:
    w = distance * EYES_WIDTH_SCALE
    h = w * EYES_ASPECT
    x = float(left[0] + (right[0] - left[0]) / 2.0 - w / 2.0)
    y = float(left[1] - h * EYES_LIFT)
    return x, y, w, h


def _head_box(eyes: Tuple[float, float, float, float]) -> Tuple[float, float, float, float]:
    ex, ey, ew, _ = eyes
    w = ew * HEAD_WIDTH_SCALE
    h = w * HEAD_ASPECT
    return ex - ew * HEAD_LEFT_SHIFT, ey - h * HEAD_LIFT, w, h


def _layers_for(category: str) -> Tuple[str, ...]:
    if category == "all":
        return LAYER_ORDER
    # lips/face carry no geometry and therefore produce nothing
    return (category,) if category in LAYER_ORDER else ()


def _place_face(
    face: FaceKeypoints,
    face_index: int,
    layers: Tuple[str, ...],
    image_ref: str,
    viewport: Viewport,
) -> List[OverlayPlacement]:
    left, right, rotation, distance = eye_line(face)
    eyes = _eyes_box(left, right, distance)

    builders: Dict[str, Callable[[], OverlayPlacement]] = {
        "head": lambda: OverlayPlacement("head", *_head_box(eyes), rotation, image_ref, face_index, "bottom center"),
        "eyes": lambda: OverlayPlacement("eyes", *eyes, rotation, image_ref, face_index, "center"),
        "frame": lambda: OverlayPlacement(
            "frame", 0.0, 0.0, float(viewport.width), float(viewport.height), 0.0, image_ref, face_index, "top left"
        ),
    }
    return [builders[layer]() for layer in layers]


def compute_placements(
    faces: Iterable[FaceKeypoints],
    active: Optional[FilterDefinition],
    viewport: Optional[Viewport] = None,
) -> List[OverlayPlacement]:
    """Placements for every usable face under the active filter.

    Faces with too few keypoints are skipped; the rest are unaffected.
    Only layers matching the active category are computed.
    """
    if active is None:
        return []
    layers = _layers_for(active.category)
    if not layers:
        return []
    viewport = viewport or Viewport()

    out: List[OverlayPlacement] = []
    for idx, face in enumerate(faces):
        try:
            out.extend(_place_face(face, idx, layers, active.image_ref, viewport))
        except MalformedKeypointsError as e:
            logger.debug("Skipping face %d: %s", idx, e)
    return out


__all__ = ["LAYER_ORDER", "eye_line", "compute_placements"]
