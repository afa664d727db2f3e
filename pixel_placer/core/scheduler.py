from __future__ import annotations

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable, Optional, Sequence, Tuple

from .cells import PixelCell
from .palette import PaletteMatcher
from .surface import SurfaceAdapter

logger = logging.getLogger(__name__)

Sleeper = Callable[[float], None]

DEFAULT_SETTLE_DELAY_MS = 200
DEFAULT_INTER_PIXEL_DELAY_MS = 1000


@dataclass
class SchedulerState:
    running: bool = False
    cursor: int = 0
    origin_x: int = 0
    origin_y: int = 0
    inter_pixel_delay_ms: int = DEFAULT_INTER_PIXEL_DELAY_MS


@dataclass
class RunReport:
    cursor: int = 0
    total: int = 0
    placed: int = 0
    missed: int = 0
    unavailable: int = 0
    failed: int = 0
    stopped: bool = False

    def as_dict(self) -> dict:
        return asdict(self)


class PlacementScheduler:
    """Replays a queue of cells onto a surface, one at a time.

    ``start()`` runs the loop on the calling thread. ``stop()`` only clears the
    running flag; the loop notices it after the current suspension ends, so at
    most one settle delay plus one inter-pixel delay elapse before it exits.
    """

    def __init__(
        self,
        matcher: PaletteMatcher,
        surface: SurfaceAdapter,
        *,
        state: Optional[SchedulerState] = None,
        settle_delay_ms: int = DEFAULT_SETTLE_DELAY_MS,
        sleep: Sleeper = time.sleep,
    ) -> None:
        self.matcher = matcher
        self.surface = surface
        self.state = state or SchedulerState()
        self.settle_delay_ms = settle_delay_ms
        self._sleep = sleep
        self._queue: Tuple[PixelCell, ...] = ()
        self.last_report = RunReport()

    @property
    def queue(self) -> Tuple[PixelCell, ...]:
        return self._queue

    @property
    def running(self) -> bool:
        return self.state.running

    def load(self, cells: Sequence[PixelCell]) -> bool:
        if self.state.running:
            logger.warning("Cannot load %d cells while a run is in progress", len(cells))
            return False
        self._queue = tuple(cells)
        self.state.cursor = 0
        logger.info("Loaded %d cells", len(self._queue))
        return True

    def set_origin(self, x: int, y: int) -> None:
        self.state.origin_x = int(x)
        self.state.origin_y = int(y)
        logger.info("Origin set to (%d, %d)", self.state.origin_x, self.state.origin_y)

    def set_inter_pixel_delay(self, ms: int) -> None:
        if ms < 0:
            raise ValueError(f"Delay must be >= 0 ms, got {ms}")
        self.state.inter_pixel_delay_ms = int(ms)
        logger.info("Inter-pixel delay set to %d ms", self.state.inter_pixel_delay_ms)

    def stop(self) -> None:
        if self.state.running:
            logger.info("Stop requested at cell %d/%d", self.state.cursor, len(self._queue))
        self.state.running = False

    def start(self) -> Optional[RunReport]:
        report = self.arm()
        if report is None:
            return None
        return self.run(report)

    def arm(self) -> Optional[RunReport]:
        """Mark a run as started without processing any cell yet.

        A ``stop()`` issued after ``arm()`` and before ``run()`` cancels the
        run, so callers can hand ``run`` to another thread safely.
        """

        state = self.state
        if state.running:
            logger.info("Placement already running; ignoring start")
            return None
        if not self._queue:
            logger.warning("Nothing to place; load cells first")
            return None

        state.running = True
        state.cursor = 0
        report = RunReport(total=len(self._queue))
        self.last_report = report
        logger.info("Placement started: %d cells", len(self._queue))
        return report

    def run(self, report: RunReport) -> RunReport:
        state = self.state
        queue = self._queue

        handle = self._locate() if state.running else None
        if handle is None and state.running:
            logger.warning("Drawing surface not found; cells will not be placed")

        while state.running and state.cursor < len(queue):
            cell = queue[state.cursor]
            if not self._place(cell, handle, report):
                break
            state.cursor += 1
            report.cursor = state.cursor
            if state.running:
                self._pause(state.inter_pixel_delay_ms)

        report.stopped = state.cursor < len(queue)
        state.running = False
        logger.info(
            "Placement %s: %d placed, %d without palette match, %d of %d processed",
            "stopped" if report.stopped else "finished",
            report.placed,
            report.missed,
            report.cursor,
            report.total,
        )
        return report

    def _locate(self) -> Optional[Any]:
        try:
            return self.surface.locate()
        except Exception:
            logger.exception("Surface lookup failed")
            return None

    def _place(self, cell: PixelCell, handle: Any, report: RunReport) -> bool:
        """Handle one cell. Returns False if a stop arrived before placement."""
        state = self.state
        x = state.origin_x + cell.x
        y = state.origin_y + cell.y

        entry = self.matcher.find_nearest(cell.color)
        if entry is None:
            report.missed += 1
            logger.debug("No palette match for %s at (%d, %d)", cell.color, x, y)
            return True
        if handle is None:
            report.unavailable += 1
            return True

        try:
            self.surface.select(entry)
            self._pause(self.settle_delay_ms)
            if not state.running:
                return False
            self.surface.emit_pointer_sequence(handle, x, y)
        except Exception:
            report.failed += 1
            logger.exception("Placing %s at (%d, %d) failed", cell.color, x, y)
            return True

        report.placed += 1
        logger.debug(
            "Pixel %d/%d placed at (%d, %d) with %s",
            state.cursor + 1,
            len(self._queue),
            x,
            y,
            entry.color,
        )
        return True

    def _pause(self, ms: int) -> None:
        if ms > 0:
            self._sleep(ms / 1000.0)
