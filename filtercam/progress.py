"""Cosmetic progress while the landmark model loads.

The value creeps up by a random step on a fixed interval and is clamped at
100. It jumps to 100 when loading finishes and simply freezes when loading
fails. Nothing waits on it.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LoadingProgress:
    def __init__(
        self,
        interval: float = 0.2,
        max_step: float = 20.0,
        rng: Optional[random.Random] = None,
        on_update: Optional[Callable[[int], None]] = None,
    ):
        self.interval = float(interval)
        self.max_step = float(max_step)
        self._random = rng.random if rng is not None else random.random
        self.on_update = on_update
        self._progress = 0.0
        self.value = 0
        self.done = False
        self.failed = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _set(self, progress: float) -> None:
        self._progress = min(100.0, max(0.0, progress))
        value = int(round(self._progress))
        if value != self.value:
            self.value = value
            if self.on_update is not None:
                self.on_update(value)

    def step(self) -> int:
        self._set(self._progress + self._random() * self.max_step)
        return self.value

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self.step()

    def start(self) -> None:
        if self.running:
            return
        self._progress = 0.0
        self.value = 0
        self.done = self.failed = False
        self._task = asyncio.get_running_loop().create_task(self._run(), name="loading-progress")

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is not None:
            task.cancel()

    def complete(self) -> None:
        self.stop()
        self.done = True
        self._set(100.0)

    def fail(self) -> None:
        self.stop()
        self.failed = True

    async def track(self, loading: Awaitable[T]) -> T:
        """Run progress alongside `loading`; errors from `loading` propagate.

        A cancelled load only stops the ticker; it is not a failure.
        """
        self.start()
        try:
            result = await loading
        except asyncio.CancelledError:
            self.stop()
            raise
        except Exception:
            self.fail()
            raise
        self.complete()
        return result


__all__ = ["LoadingProgress"]
