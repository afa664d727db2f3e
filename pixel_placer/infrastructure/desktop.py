from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..config import SETTINGS, BotSettings
from ..core.palette import PaletteEntry

logger = logging.getLogger(__name__)

Point = Tuple[int, int]

_ENTRY_RE = re.compile(r"^\s*(\S+?)\s*@\s*(-?\d+)\s*,\s*(-?\d+)\s*$")


def parse_palette_spec(spec: str) -> List[PaletteEntry]:
    """Parse ``"#ff0000@10,900; #000000@40,900"`` into palette entries.

    Each entry's handle is the screen point that selects that color.
    """

    entries: List[PaletteEntry] = []
    for chunk in re.split(r"[;\n]", spec):
        if not chunk.strip():
            continue
        match = _ENTRY_RE.match(chunk)
        if not match:
            raise ValueError(f"Palette entry must look like '#rrggbb@x,y', got {chunk.strip()!r}")
        color, x, y = match.groups()
        entries.append(PaletteEntry.from_color(color, handle=(int(x), int(y))))
    return entries


class ConfiguredPalette:
    """Palette discovery backed by the ``PALETTE`` setting."""

    def __init__(self, settings: BotSettings = SETTINGS) -> None:
        self._settings = settings

    def scan(self) -> List[PaletteEntry]:
        entries = parse_palette_spec(self._settings.palette)
        logger.info("Found %d colors in configured palette", len(entries))
        return entries


@dataclass
class PointerOptions:
    move_duration_s: float = 0.0
    mouse_down_s: float = 0.02


class DesktopSurface:
    """Drives the real mouse with pyautogui.

    The surface handle is the screen position of the canvas' top-left corner;
    placement coordinates are relative to it.
    """

    def __init__(
        self,
        settings: BotSettings = SETTINGS,
        options: Optional[PointerOptions] = None,
        driver=None,
    ) -> None:
        self._settings = settings
        self._options = options or PointerOptions()
        self._driver = driver

    @property
    def driver(self):
        if self._driver is None:
            # pyautogui needs a display at import time.
            import pyautogui

            pyautogui.FAILSAFE = True
            self._driver = pyautogui
        return self._driver

    def locate(self) -> Optional[Point]:
        try:
            width, height = self.driver.size()
        except Exception:
            logger.exception("No screen available for pointer input")
            return None
        left, top = self._settings.surface_left, self._settings.surface_top
        if not (0 <= left < width and 0 <= top < height):
            logger.error("Surface origin (%d, %d) is outside the %dx%d screen", left, top, width, height)
            return None
        return left, top

    def _tap(self, x: int, y: int) -> None:
        driver = self.driver
        driver.moveTo(x, y, duration=max(0.0, self._options.move_duration_s))
        driver.mouseDown(button="left")
        time.sleep(max(0.0, self._options.mouse_down_s))
        driver.mouseUp(button="left")

    def select(self, entry: PaletteEntry) -> None:
        if entry.handle is None:
            return
        x, y = entry.handle
        self._tap(x, y)
        logger.debug("Color selected: %s", entry.color)

    def emit_pointer_sequence(self, handle: Point, x: int, y: int) -> None:
        left, top = handle
        self._tap(left + x, top + y)
        logger.debug("Clicked at (%d, %d)", x, y)
