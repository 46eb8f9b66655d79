from __future__ import annotations

import asyncio
from typing import Callable, Optional


class DebounceTimer:
    """Single-slot timer: arming again cancels whatever is still pending."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def arm(self, duration: float, action: Callable[[], None]) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()

        def _fire() -> None:
            self._handle = None
            action()

        self._handle = loop.call_later(max(0.0, float(duration)), _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


__all__ = ["DebounceTimer"]
