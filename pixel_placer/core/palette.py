from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Optional, Tuple

from .colors import RGB, parse_color, to_hex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaletteEntry:
    """A selectable color on the external surface.

    ``handle`` is opaque to the matcher; only the surface adapter knows how to
    act on it (a screen point, a page element, ...).
    """

    rgb: RGB
    handle: Any = field(default=None, compare=False)

    @property
    def color(self) -> str:
        return to_hex(self.rgb)

    @classmethod
    def from_color(cls, color: str, handle: Any = None) -> "PaletteEntry":
        rgb = parse_color(color)
        if rgb is None:
            raise ValueError(f"Unrecognised palette color: {color!r}")
        return cls(rgb=rgb, handle=handle)


def color_distance(a: RGB, b: RGB) -> float:
    return math.sqrt((a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2)


class PaletteMatcher:
    def __init__(self, entries: Iterable[PaletteEntry] = ()) -> None:
        self._entries: Tuple[PaletteEntry, ...] = tuple(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[PaletteEntry]:
        return iter(self._entries)

    @property
    def entries(self) -> List[PaletteEntry]:
        return list(self._entries)

    def register_discovered(self, entries: Iterable[PaletteEntry]) -> None:
        self._entries = tuple(entries)
        logger.info("Palette registered with %d colors", len(self._entries))

    def refresh(self, discovery) -> int:
        """Replace the palette with whatever ``discovery.scan()`` reports."""
        self.register_discovered(discovery.scan())
        return len(self._entries)

    def find_nearest(self, target: str) -> Optional[PaletteEntry]:
        entries = self._entries
        if not entries:
            return None

        rgb = parse_color(target)
        if rgb is None:
            logger.debug("Cannot match unparseable color %r", target)
            return None

        best: Optional[PaletteEntry] = None
        best_distance = float("inf")
        for entry in entries:
            distance = color_distance(rgb, entry.rgb)
            if distance < best_distance:
                best_distance = distance
                best = entry
        return best
