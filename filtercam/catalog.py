"""Filter catalog.

Holds the built-in overlay definitions plus filters registered at runtime.
The catalog is append-only; subscribers are told about every accepted
registration so the carousel can be rebuilt.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from .errors import InvalidFilterError
from .types import FilterDefinition

logger = logging.getLogger(__name__)

BUILTIN_FILTERS: List[FilterDefinition] = [
    FilterDefinition("all", "All", "assets/all-filter.png", "all"),
    FilterDefinition("hat", "Hat Only", "assets/hat.png", "head"),
    FilterDefinition("shades", "Shades Only", "assets/shades.png", "eyes"),
    FilterDefinition("shades2", "Shades 2 Only", "assets/shades2.png", "eyes"),
    FilterDefinition("eyes", "Eye Color", "assets/eye-color.png", "eyes"),
    FilterDefinition("border", "Border Only", "assets/border.png", "frame"),
]

FilterLike = Union[FilterDefinition, Mapping[str, Any]]
CatalogListener = Callable[[List[FilterDefinition]], None]


class FilterCatalog:
    def __init__(self, builtins: Optional[Iterable[FilterDefinition]] = None):
        self._builtins: List[FilterDefinition] = list(BUILTIN_FILTERS if builtins is None else builtins)
        self._custom: List[FilterDefinition] = []
        self._listeners: List[CatalogListener] = []

    def __len__(self) -> int:
        return len(self._builtins) + len(self._custom)

    def all_filters(self) -> List[FilterDefinition]:
        return [*self._builtins, *self._custom]

    @property
    def custom_filters(self) -> List[FilterDefinition]:
        return list(self._custom)

    def subscribe(self, listener: CatalogListener) -> Callable[[], None]:
        """Register a catalog-changed listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def register_filter(self, definition: FilterLike) -> bool:
        """Append a custom filter.

        Invalid definitions (empty identifier or image, unknown category) are
        dropped without touching the catalog. Returns whether it was added.
        """
        try:
            defn = definition if isinstance(definition, FilterDefinition) else FilterDefinition.from_mapping(definition)
            defn.validate()
        except InvalidFilterError as e:
            logger.debug("Rejected filter registration: %s", e)
            return False

        self._custom.append(defn)
        logger.info("Registered filter %s (%s)", defn.identifier, defn.category)
        snapshot = self.all_filters()
        for listener in list(self._listeners):
            listener(snapshot)
        return True

    def register_many(self, definitions: Iterable[FilterLike]) -> int:
        return sum(1 for d in definitions if self.register_filter(d))


__all__ = ["BUILTIN_FILTERS", "FilterCatalog"]
