from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, Union


@dataclass(frozen=True)
class PixelCell:
    """One placement: a local offset from the drawing origin plus its color."""

    x: int
    y: int
    color: str

    def as_dict(self) -> Dict[str, Union[int, str]]:
        return asdict(self)
