from __future__ import annotations

from typing import Dict, Tuple

import numpy as np

from .errors import MalformedKeypointsError
from .types import FaceKeypoints


# MediaPipe FaceMesh landmark indices used for overlay anchoring
ANCHOR_LANDMARKS: Dict[str, int] = {
    "left_eye_outer": 33,
    "right_eye_outer": 263,
}

# A face must reach the highest anchor index to be usable
MIN_KEYPOINTS: int = max(ANCHOR_LANDMARKS.values()) + 1


def eye_corners(face: FaceKeypoints) -> Tuple[np.ndarray, np.ndarray]:
    """Return (left, right) outer eye corners as float64 [x, y] arrays.

    Raises MalformedKeypointsError when the face has fewer than MIN_KEYPOINTS
    landmarks.
    """
    pts = np.asarray(face.points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] < 2:
        raise MalformedKeypointsError(f"keypoints must have shape (N, 2), got {pts.shape}")
    if pts.shape[0] < MIN_KEYPOINTS:
        raise MalformedKeypointsError(
            f"face has {pts.shape[0]} keypoints, need at least {MIN_KEYPOINTS}"
        )
    left = pts[ANCHOR_LANDMARKS["left_eye_outer"], :2]
    right = pts[ANCHOR_LANDMARKS["right_eye_outer"], :2]
    return left, right


__all__ = [
    "ANCHOR_LANDMARKS",
    "MIN_KEYPOINTS",
    "eye_corners",
]
