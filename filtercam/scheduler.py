"""Detection loop.

A single asyncio task that, once per frame signal, asks the landmark
detector for the faces in the current video frame. A new request is only
issued after the previous one has completed, so at most one detection is
ever in flight. Teardown goes through an explicit cancellation token: once
`stop()` returns, no further ticks run and `on_result` is never called.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, List, Optional, Protocol

from .types import FaceKeypoints, LoopStats

logger = logging.getLogger(__name__)


class VideoSource(Protocol):
    @property
    def ready(self) -> bool: ...

    def current_frame(self) -> Any: ...


class LandmarkDetector(Protocol):
    async def estimate_faces(self, frame: Any) -> List[FaceKeypoints]: ...


class DetectionLoop:
    def __init__(
        self,
        video: VideoSource,
        on_result: Callable[[List[FaceKeypoints]], None],
        frame_signal: Optional[Callable[[], Awaitable[Any]]] = None,
        frame_interval: float = 1.0 / 60.0,
    ):
        self.video = video
        self.on_result = on_result
        self.frame_interval = float(frame_interval)
        self._frame_signal = frame_signal or self._sleep_one_frame
        self.detector: Optional[LandmarkDetector] = None
        self.stats = LoopStats()
        self._stopped = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _sleep_one_frame(self) -> None:
        await asyncio.sleep(self.frame_interval)

    # ---- lifecycle ----
    def start(self) -> asyncio.Task:
        if self.running:
            assert self._task is not None
            return self._task
        self._stopped = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run(), name="detection-loop")
        return self._task

    async def stop(self) -> None:
        self._stopped.set()
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    # ---- loop body ----
    async def _run(self) -> None:
        logger.debug("Detection loop started")
        while not self._stopped.is_set():
            await self._frame_signal()
            if self._stopped.is_set():
                break
            await self.tick()
        logger.debug("Detection loop stopped")

    async def tick(self) -> bool:
        """Run one detection cycle. Returns True when a result was delivered."""
        self.stats.ticks += 1
        detector = self.detector
        if detector is None or not self.video.ready:
            self.stats.skipped += 1
            return False

        frame = self.video.current_frame()
        t0 = time.perf_counter()
        try:
            faces = await detector.estimate_faces(frame)
        except Exception:
            self.stats.failures += 1
            logger.exception("Error detecting faces")
            return False
        finally:
            self.stats.last_detect_ms = (time.perf_counter() - t0) * 1000.0

        if self._stopped.is_set():
            return False
        self.stats.detections += 1
        try:
            self.on_result(list(faces or []))
        except Exception:
            self.stats.failures += 1
            logger.exception("Error handling detection result")
            return False
        return True


__all__ = ["VideoSource", "LandmarkDetector", "DetectionLoop"]
