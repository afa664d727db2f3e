from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Protocol, TypeVar

from .palette import PaletteEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SurfaceAdapter(Protocol):
    def locate(self) -> Optional[Any]:
        ...

    def select(self, entry: PaletteEntry) -> None:
        ...

    def emit_pointer_sequence(self, handle: Any, x: int, y: int) -> None:
        ...


class PaletteDiscovery(Protocol):
    def scan(self) -> List[PaletteEntry]:
        ...


def first_match(strategies: Iterable[Callable[[], Optional[T]]]) -> Optional[T]:
    """Run lookup strategies in priority order and return the first hit."""
    for strategy in strategies:
        found = strategy()
        if found is not None:
            logger.debug("Lookup succeeded with %s", getattr(strategy, "__name__", strategy))
            return found
    return None
