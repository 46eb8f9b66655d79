"""Carousel materialization and strip geometry.

The catalog is repeated many times so the strip can scroll "forever" in
both directions without wraparound logic; the initial selection sits in the
middle repetition.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .types import CarouselEntry, FilterDefinition

logger = logging.getLogger(__name__)

DEFAULT_REPETITIONS = 20


def materialize(catalog: Sequence[FilterDefinition], repetitions: int = DEFAULT_REPETITIONS) -> List[CarouselEntry]:
    """Repeat `catalog` `repetitions` times, one entry per position.

    Instance ids are `<identifier>-<position>`; positions are unique so ids
    are unique even when identifiers repeat.
    """
    if repetitions < 0:
        raise ValueError("repetitions must be >= 0")
    k = len(catalog)
    entries = [
        CarouselEntry(instance_id=f"{catalog[i % k].identifier}-{i}", definition=catalog[i % k])
        for i in range(k * repetitions)
    ]
    logger.debug("Materialized %d carousel entries from %d filters", len(entries), k)
    return entries


@dataclass(frozen=True)
class CarouselLayout:
    """Horizontal strip of fixed-size items with equal margins on each side."""

    item_width: float = 70.0
    item_margin: float = 10.0
    viewport_width: float = 640.0

    @property
    def pitch(self) -> float:
        return self.item_width + 2.0 * self.item_margin

    def offset_left(self, index: int) -> float:
        return self.item_margin + index * self.pitch

    def center_of(self, index: int) -> float:
        return self.offset_left(index) + self.item_width / 2.0

    def content_width(self, count: int) -> float:
        return count * self.pitch

    def centered_scroll(self, index: int) -> float:
        """Scroll offset that puts item `index` in the middle of the viewport."""
        return self.offset_left(index) - (self.viewport_width - self.item_width) / 2.0

    def closest_to_center(self, scroll_left: float, count: int) -> int:
        """Index whose center is nearest the viewport center (ties -> lowest)."""
        if count <= 0:
            raise ValueError("empty carousel")
        center_x = scroll_left + self.viewport_width / 2.0
        centers = self.item_margin + self.item_width / 2.0 + np.arange(count) * self.pitch
        # argmin returns the first occurrence, which gives the lowest index on ties
        return int(np.argmin(np.abs(centers - center_x)))


class ScrollStrip:
    """Scroll position of the carousel viewport.

    Smooth scrolls are not animated here; the most recent target simply
    becomes the position, so competing scrolls resolve as last-issued-wins.
    """

    def __init__(self, layout: CarouselLayout, count: int = 0):
        self.layout = layout
        self.count = count
        self.scroll_left = 0.0
        self.last_target: float | None = None

    @property
    def max_scroll(self) -> float:
        return max(0.0, self.layout.content_width(self.count) - self.layout.viewport_width)

    def scroll_to(self, left: float, smooth: bool = True) -> float:
        self.last_target = float(left)
        self.scroll_left = float(min(max(left, 0.0), self.max_scroll))
        return self.scroll_left

    def scroll_by(self, dx: float) -> float:
        return self.scroll_to(self.scroll_left + dx, smooth=False)


__all__ = ["DEFAULT_REPETITIONS", "materialize", "CarouselLayout", "ScrollStrip"]
