from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, List, Mapping, Tuple

from .cells import PixelCell


class InputShapeError(ValueError):
    """A manually supplied pixel batch does not have the expected shape."""


@dataclass(frozen=True)
class BatchReport:
    cells: Tuple[PixelCell, ...]
    width: int
    height: int
    color_count: int

    def summary(self) -> dict:
        return {
            "pixels": len(self.cells),
            "width": self.width,
            "height": self.height,
            "colors": self.color_count,
        }


def _coordinate(value: Any) -> int | None:
    # bool is a Real subclass but not a coordinate.
    if isinstance(value, bool) or not isinstance(value, Real):
        return None
    if not math.isfinite(value) or value < 0 or int(value) != value:
        return None
    return int(value)


def _cell_from(item: Any) -> PixelCell | None:
    if not isinstance(item, Mapping):
        return None
    x = _coordinate(item.get("x"))
    y = _coordinate(item.get("y"))
    color = item.get("color")
    if x is None or y is None or not isinstance(color, str):
        return None
    return PixelCell(x, y, color)


def validate(batch: Any) -> BatchReport:
    """Check a list of ``{"x", "y", "color"}`` objects and convert it to cells.

    The batch is accepted or rejected as a whole; input order is preserved.
    """

    if not isinstance(batch, (list, tuple)):
        raise InputShapeError(
            f"Pixel data must be a list of {{x, y, color}} objects, got {type(batch).__name__}"
        )

    cells: List[PixelCell] = []
    for index, item in enumerate(batch):
        cell = _cell_from(item)
        if cell is None:
            raise InputShapeError(
                f"Invalid pixel at index {index}: expected numeric x, y and a string color"
            )
        cells.append(cell)

    width = max((cell.x for cell in cells), default=-1) + 1
    height = max((cell.y for cell in cells), default=-1) + 1
    colors = {cell.color for cell in cells}
    return BatchReport(tuple(cells), width, height, len(colors))
