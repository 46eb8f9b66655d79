"""Mounted filter view.

Ties the pieces together for the lifetime of one view:
catalog -> carousel -> selection, progress + detector init, and the
detection loop whose results feed overlay placement.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from .carousel import DEFAULT_REPETITIONS, CarouselLayout, ScrollStrip, materialize
from .catalog import FilterCatalog, FilterLike
from .errors import DetectorInitError
from .facemesh import create_detector
from .overlay import compute_placements
from .progress import LoadingProgress
from .scheduler import DetectionLoop, LandmarkDetector, VideoSource
from .selection import CarouselSelection
from .types import CarouselEntry, FaceKeypoints, FilterDefinition, OverlayPlacement, Viewport

logger = logging.getLogger(__name__)

DetectorFactory = Callable[[Dict[str, Any]], Awaitable[LandmarkDetector]]


class FilterSession:
    def __init__(
        self,
        cfg: Dict[str, Any],
        video: VideoSource,
        detector_factory: DetectorFactory = create_detector,
        catalog: Optional[FilterCatalog] = None,
        frame_signal: Optional[Callable[[], Awaitable[Any]]] = None,
        on_progress: Optional[Callable[[int], None]] = None,
        rng=None,
    ):
        self.cfg = cfg
        self.video = video
        self.detector_factory = detector_factory
        self.catalog = catalog or FilterCatalog()

        vid = cfg.get("video", {})
        car = cfg.get("carousel", {})
        load = cfg.get("loading", {})
        run = cfg.get("runtime", {})

        self.viewport = Viewport(int(vid.get("width", 640)), int(vid.get("height", 480)))
        self.repetitions = int(car.get("repetitions", DEFAULT_REPETITIONS))
        self.layout = CarouselLayout(
            item_width=float(car.get("item_width", 70)),
            item_margin=float(car.get("item_margin", 10)),
            viewport_width=float(self.viewport.width),
        )
        self.strip = ScrollStrip(self.layout)
        self.selection = CarouselSelection(
            self.layout, self.strip, debounce_s=float(car.get("debounce_ms", 150)) / 1000.0
        )
        self.progress = LoadingProgress(
            interval=float(load.get("interval_ms", 200)) / 1000.0,
            max_step=float(load.get("max_step", 20.0)),
            rng=rng,
            on_update=on_progress,
        )
        self.loop = DetectionLoop(
            video,
            self._on_faces,
            frame_signal=frame_signal,
            frame_interval=float(run.get("frame_interval_ms", 16)) / 1000.0,
        )

        self.faces: List[FaceKeypoints] = []
        self.entries: List[CarouselEntry] = []
        self.detector: Optional[LandmarkDetector] = None
        self.detector_failed = False
        self.mounted = False
        self._config_registered = False
        self._init_task: Optional[asyncio.Task] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # ---- read side ----
    @property
    def active_filter(self) -> Optional[FilterDefinition]:
        return self.selection.active_filter

    @property
    def detector_ready(self) -> bool:
        return self.detector is not None

    def placements(self) -> List[OverlayPlacement]:
        return compute_placements(self.faces, self.active_filter, self.viewport)

    # ---- catalog ----
    def register_filter(self, definition: FilterLike) -> bool:
        return self.catalog.register_filter(definition)

    def _rebuild(self, filters: List[FilterDefinition]) -> None:
        self.entries = materialize(filters, self.repetitions)
        self.selection.regenerate(self.entries)

    # ---- lifecycle ----
    async def mount(self) -> None:
        if self.mounted:
            return
        if not self._config_registered:
            # Config filters join the catalog once; later mounts reuse it
            accepted = self.catalog.register_many(self.cfg.get("filters", None) or [])
            self._config_registered = True
            if accepted:
                logger.info("Registered %d filter(s) from config", accepted)
        self.detector_failed = False
        self.entries = materialize(self.catalog.all_filters(), self.repetitions)
        self.selection.mount(self.entries)
        self._unsubscribe = self.catalog.subscribe(self._rebuild)

        self._init_task = asyncio.get_running_loop().create_task(self._init_detector(), name="detector-init")
        self.loop.start()
        self.mounted = True
        logger.info("Session mounted with %d carousel entries", len(self.entries))

    async def _init_detector(self) -> None:
        try:
            detector = await self.progress.track(self.detector_factory(self.cfg))
        except DetectorInitError as e:
            self.detector_failed = True
            logger.error("Error loading model: %s", e)
            return
        except Exception:
            self.detector_failed = True
            logger.exception("Error loading model")
            return
        if not self.mounted:
            # Unmounted while the detector was still loading
            self._close_detector(detector)
            return
        self.detector = detector
        self.loop.detector = detector

    def _on_faces(self, faces: List[FaceKeypoints]) -> None:
        if self.mounted:
            self.faces = faces

    async def unmount(self) -> None:
        if not self.mounted:
            return
        self.mounted = False
        await self.loop.stop()
        if self._init_task is not None and not self._init_task.done():
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass
        self._init_task = None
        self.progress.stop()
        self.selection.unmount()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self.detector is not None:
            self._close_detector(self.detector)
        self.detector = None
        self.loop.detector = None
        self.faces = []
        logger.info("Session unmounted")

    @staticmethod
    def _close_detector(detector: Any) -> None:
        close = getattr(detector, "close", None)
        if callable(close):
            close()

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.unmount()


__all__ = ["FilterSession"]
