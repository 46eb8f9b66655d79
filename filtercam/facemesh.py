from __future__ import annotations

import asyncio
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

try:
    import cv2
    import mediapipe as mp
except Exception as e:  # pragma: no cover - environment import guard
    cv2 = None  # type: ignore
    mp = None  # type: ignore

from .errors import DetectionError, DetectorInitError
from .types import FaceKeypoints

logger = logging.getLogger(__name__)


@dataclass
class FaceMeshConfig:
    max_faces: int = 10
    refine_landmarks: bool = False
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5

    @classmethod
    def from_cfg(cls, cfg: Optional[dict]) -> "FaceMeshConfig":
        det = (cfg or {}).get("detector", {}) or {}
        return cls(
            max_faces=int(det.get("max_faces", 10)),
            refine_landmarks=bool(det.get("refine_landmarks", False)),
            min_detection_confidence=float(det.get("min_detection_confidence", 0.5)),
            min_tracking_confidence=float(det.get("min_tracking_confidence", 0.5)),
        )


def _landmarks_to_pixels(lms, width: int, height: int) -> np.ndarray:
    xs = [pt.x for pt in lms.landmark]
    ys = [pt.y for pt in lms.landmark]
    normalized = np.stack([xs, ys], axis=1).astype(np.float64)
    # Overlays are placed with sub-pixel precision, so no rounding here
    return normalized * np.array([width, height], dtype=np.float64)


class FaceMeshDetector:
    """Streaming wrapper around MediaPipe FaceMesh.

    Usage:
        detector = await create_detector(cfg)
        faces = await detector.estimate_faces(frame_bgr)
    """

    def __init__(self, cfg: Optional[FaceMeshConfig] = None):
        if mp is None or cv2 is None:
            raise ImportError("mediapipe and opencv-python must be installed to use FaceMeshDetector")
        self.cfg = cfg or FaceMeshConfig()
        self._mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=False,
            refine_landmarks=self.cfg.refine_landmarks,
            max_num_faces=self.cfg.max_faces,
            min_detection_confidence=self.cfg.min_detection_confidence,
            min_tracking_confidence=self.cfg.min_tracking_confidence,
        )
        # Serializes process() in the worker thread against close()
        self._lock = threading.Lock()

    def close(self) -> None:
        with self._lock:
            if self._mesh is not None:
                self._mesh.close()
                self._mesh = None

    def _process(self, frame_bgr: np.ndarray) -> List[FaceKeypoints]:
        height, width = frame_bgr.shape[:2]
        # Convert BGR -> RGB as required by MediaPipe
        img_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)
        with self._lock:
            if self._mesh is None:
                raise DetectionError("detector is closed")
            results = self._mesh.process(img_rgb)
        if not results or not results.multi_face_landmarks:
            return []
        return [FaceKeypoints(points=_landmarks_to_pixels(flm, width, height)) for flm in results.multi_face_landmarks]

    async def estimate_faces(self, frame_bgr: np.ndarray) -> List[FaceKeypoints]:
        try:
            return await asyncio.to_thread(self._process, frame_bgr)
        except DetectionError:
            raise
        except Exception as e:
            raise DetectionError(f"face mesh processing failed: {e}") from e


def _close_when_built(building: asyncio.Future) -> None:
    if building.cancelled() or building.exception() is not None:
        return
    building.result().close()
    logger.debug("Closed FaceMesh detector that finished building after cancellation")


async def create_detector(cfg: Optional[dict] = None) -> FaceMeshDetector:
    """Build a FaceMeshDetector off the event loop; model load can take a while.

    The worker thread cannot be interrupted. If the caller is cancelled while
    it runs, the detector it eventually builds is closed instead of leaked.
    """
    fm_cfg = FaceMeshConfig.from_cfg(cfg)
    building = asyncio.ensure_future(asyncio.to_thread(FaceMeshDetector, fm_cfg))
    try:
        detector = await asyncio.shield(building)
    except asyncio.CancelledError:
        building.add_done_callback(_close_when_built)
        raise
    except Exception as e:
        raise DetectorInitError(f"could not create face mesh detector: {e}") from e
    logger.info("FaceMesh detector ready (max_faces=%d)", fm_cfg.max_faces)
    return detector


__all__ = ["FaceMeshDetector", "FaceMeshConfig", "create_detector"]
