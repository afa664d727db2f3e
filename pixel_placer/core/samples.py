"""Small built-in drawings described as symbol grids plus a symbol->color map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Mapping, Tuple

from .cells import PixelCell

DEFAULT_COLOR = "#ffffff"


@dataclass(frozen=True)
class SymbolGrid:
    rows: Tuple[str, ...]
    colors: Mapping[str, str]

    @property
    def width(self) -> int:
        return max((len(row) for row in self.rows), default=0)

    @property
    def height(self) -> int:
        return len(self.rows)

    def cells(self) -> List[PixelCell]:
        """Row-major cells; symbols missing from the map fall back to white."""
        return [
            PixelCell(x, y, self.colors.get(symbol, DEFAULT_COLOR))
            for y, row in enumerate(self.rows)
            for x, symbol in enumerate(row)
        ]


SAMPLES: Dict[str, SymbolGrid] = {
    "heart": SymbolGrid(
        rows=(
            ".RR.RR.",
            "RRRRRRR",
            "RRRRRRR",
            "RRRRRRR",
            ".RRRRR.",
            "..RRR..",
            "...R...",
        ),
        colors={"R": "#ff0000", ".": "#ffffff"},
    ),
    "smiley": SymbolGrid(
        rows=(
            "..YYY..",
            ".YYYYY.",
            "YYKYKYY",
            "YYYYYYY",
            "YKYYYKY",
            ".YKKKY.",
            "..YYY..",
        ),
        colors={"Y": "#ffff00", "K": "#000000", ".": "#ffffff"},
    ),
}


def sample_cells(name: str) -> List[PixelCell]:
    try:
        grid = SAMPLES[name.lower()]
    except KeyError:
        raise KeyError(f"Unknown sample {name!r}; choose from {sorted(SAMPLES)}") from None
    return grid.cells()
