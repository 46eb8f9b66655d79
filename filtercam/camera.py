from __future__ import annotations

import logging
from typing import Optional

import cv2
import numpy as np

from .types import Viewport

logger = logging.getLogger(__name__)


class CameraSource:
    """OpenCV webcam wrapper exposing a ready flag and the latest frame.

    `grab()` is driven by the caller's display loop; the detection loop only
    reads `ready` and `current_frame()`.

    Usage:
        with CameraSource(0, 640, 480) as cam:
            cam.grab()
    """

    def __init__(self, index: int = 0, width: int = 640, height: int = 480):
        self.index = int(index)
        self.viewport = Viewport(int(width), int(height))
        self._cap: Optional[cv2.VideoCapture] = None
        self._frame: Optional[np.ndarray] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()

    def open(self) -> bool:
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            logger.error("Could not open camera %d", self.index)
            cap.release()
            return False
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.viewport.width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.viewport.height)
        self._cap = cap
        return True

    def release(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
        self._frame = None

    def grab(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return self._frame
        h, w = frame.shape[:2]
        if (w, h) != (self.viewport.width, self.viewport.height):
            # Placements are computed in viewport pixels
            frame = cv2.resize(frame, (self.viewport.width, self.viewport.height))
        self._frame = frame
        return frame

    @property
    def opened(self) -> bool:
        return self._cap is not None

    @property
    def ready(self) -> bool:
        return self._frame is not None and self._frame.size > 0

    def current_frame(self) -> Optional[np.ndarray]:
        return self._frame


__all__ = ["CameraSource"]
