from __future__ import annotations

import math
from typing import List, Tuple

from PIL import Image

from .cells import PixelCell
from .colors import to_hex

ALPHA_OPAQUE_THRESHOLD = 128


def grid_size(width: int, height: int, max_width: int, max_height: int) -> Tuple[int, int]:
    """Destination grid for a ``width`` x ``height`` source fitted into the bounds.

    A single scale factor is used for both axes so the aspect ratio is kept.
    Sources smaller than the bounds are scaled up by the same rule.
    """

    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Bounds must be positive, got {max_width}x{max_height}")
    if width <= 0 or height <= 0:
        return 0, 0
    scale = min(max_width / width, max_height / height)
    return math.floor(width * scale), math.floor(height * scale)


def quantize(
    img: Image.Image,
    max_width: int,
    max_height: int,
    alpha_threshold: int = ALPHA_OPAQUE_THRESHOLD,
) -> List[PixelCell]:
    """Resample ``img`` into the bounds and list its opaque cells row by row.

    Resampling is nearest-neighbour so every cell carries a color taken
    verbatim from the source; pixels with alpha below ``alpha_threshold`` are
    left out entirely.
    """

    out_w, out_h = grid_size(img.width, img.height, max_width, max_height)
    if out_w == 0 or out_h == 0:
        return []

    rgba = img.convert("RGBA").resize((out_w, out_h), Image.NEAREST)
    pixels = rgba.load()

    cells: List[PixelCell] = []
    for y in range(out_h):
        for x in range(out_w):
            r, g, b, a = pixels[x, y]
            if a < alpha_threshold:
                continue
            cells.append(PixelCell(x, y, to_hex((r, g, b))))
    return cells
