from __future__ import annotations

import re
from typing import Optional, Tuple

RGB = Tuple[int, int, int]

_HEX_RE = re.compile(r"^#?([0-9a-f]{3}|[0-9a-f]{6})$", re.IGNORECASE)
_CSS_RGB_RE = re.compile(
    r"^rgba?\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*(?:,\s*[\d.]+\s*)?\)$",
    re.IGNORECASE,
)


def to_hex(rgb: RGB) -> str:
    """RGB tuple to the canonical lower-case ``#rrggbb`` form."""
    r, g, b = rgb
    return f"#{r:02x}{g:02x}{b:02x}"


def parse_color(value: str) -> Optional[RGB]:
    """Parse ``#rrggbb``, ``#rgb`` or a CSS ``rgb()``/``rgba()`` string.

    Returns ``None`` when the string is not a recognisable color or a channel
    falls outside 0-255.
    """

    text = value.strip()
    match = _HEX_RE.match(text)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    match = _CSS_RGB_RE.match(text)
    if match:
        channels = tuple(int(group) for group in match.groups())
        if all(0 <= channel <= 255 for channel in channels):
            return channels  # type: ignore[return-value]
    return None


def canonical(value: str) -> Optional[str]:
    rgb = parse_color(value)
    return to_hex(rgb) if rgb is not None else None
