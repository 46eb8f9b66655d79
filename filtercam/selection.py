"""Carousel selection state.

One steady state, Idle(selected_id), changed through two channels:
  - tap: selects immediately and re-centers the tapped entry
  - scroll: every event re-arms a debounce timer; when it fires the entry
    nearest the viewport center becomes selected and is re-centered
Mounting or regenerating the entry list selects the middle entry.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from .carousel import CarouselLayout, ScrollStrip
from .debounce import DebounceTimer
from .types import CarouselEntry, FilterDefinition

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_S = 0.15

SelectionListener = Callable[[CarouselEntry], None]


class CarouselSelection:
    def __init__(
        self,
        layout: CarouselLayout,
        strip: Optional[ScrollStrip] = None,
        debounce_s: float = DEFAULT_DEBOUNCE_S,
        timer: Optional[DebounceTimer] = None,
    ):
        self.layout = layout
        self.strip = strip or ScrollStrip(layout)
        self.debounce_s = float(debounce_s)
        self._timer = timer or DebounceTimer()
        self._entries: List[CarouselEntry] = []
        self._index_of: Dict[str, int] = {}
        self._selected_id: Optional[str] = None
        self._listeners: List[SelectionListener] = []

    # ---- read side ----
    @property
    def entries(self) -> List[CarouselEntry]:
        return list(self._entries)

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_index(self) -> Optional[int]:
        if self._selected_id is None:
            return None
        return self._index_of.get(self._selected_id)

    @property
    def selected_entry(self) -> Optional[CarouselEntry]:
        idx = self.selected_index
        return None if idx is None else self._entries[idx]

    @property
    def active_filter(self) -> Optional[FilterDefinition]:
        entry = self.selected_entry
        return entry.definition if entry is not None else None

    def subscribe(self, listener: SelectionListener) -> None:
        self._listeners.append(listener)

    # ---- lifecycle ----
    def mount(self, entries: Sequence[CarouselEntry]) -> None:
        # A settle armed against the old list must not fire on the new one
        self._timer.cancel()
        self._entries = list(entries)
        self._index_of = {e.instance_id: i for i, e in enumerate(self._entries)}
        self.strip.count = len(self._entries)
        self._selected_id = None
        if not self._entries:
            return
        middle = len(self._entries) // 2
        self._select(middle)
        self._center(middle)

    # Regeneration re-centers exactly like the first mount
    regenerate = mount

    def unmount(self) -> None:
        self._timer.cancel()

    # ---- mutation channels ----
    def tap(self, instance_id: str) -> bool:
        idx = self._index_of.get(instance_id)
        if idx is None:
            logger.warning("Tap on unknown carousel entry %s", instance_id)
            return False
        self._select(idx)
        self._center(idx)
        return True

    def on_scroll(self) -> None:
        self._timer.arm(self.debounce_s, self.settle)

    def settle(self) -> None:
        if not self._entries:
            return
        idx = self.layout.closest_to_center(self.strip.scroll_left, len(self._entries))
        self._select(idx)
        self._center(idx)

    # ---- helpers ----
    def _select(self, index: int) -> None:
        entry = self._entries[index]
        if entry.instance_id == self._selected_id:
            return
        self._selected_id = entry.instance_id
        logger.debug("Selected %s (index %d)", entry.instance_id, index)
        for listener in list(self._listeners):
            listener(entry)

    def _center(self, index: int) -> None:
        self.strip.scroll_to(self.layout.centered_scroll(index), smooth=True)


__all__ = ["DEFAULT_DEBOUNCE_S", "CarouselSelection"]
