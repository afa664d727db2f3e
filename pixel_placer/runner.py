from __future__ import annotations

import logging
import threading
from typing import Any, Dict, Optional, Sequence

from .config import SETTINGS, BotSettings
from .core.cells import PixelCell
from .core.palette import PaletteMatcher
from .core.quantize import quantize
from .core.samples import sample_cells
from .core.scheduler import PlacementScheduler, SchedulerState
from .core.surface import PaletteDiscovery
from .core.validate import BatchReport, InputShapeError, validate
from .infrastructure.desktop import ConfiguredPalette, DesktopSurface
from .infrastructure.network import FETCHER, ImageFetcher

logger = logging.getLogger(__name__)


class BotRunner:
    """Loads drawings into a scheduler and runs it on a worker thread."""

    def __init__(
        self,
        scheduler: PlacementScheduler,
        *,
        fetcher: ImageFetcher = FETCHER,
        discovery: Optional[PaletteDiscovery] = None,
        settings: BotSettings = SETTINGS,
    ) -> None:
        self.scheduler = scheduler
        self.fetcher = fetcher
        self.discovery = discovery
        self.settings = settings
        self.last_error: Optional[str] = None
        self.last_batch: Optional[BatchReport] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def matcher(self) -> PaletteMatcher:
        return self.scheduler.matcher

    def _install(self, cells: Sequence[PixelCell], name: str) -> bool:
        if self.busy:
            self.last_error = "Cannot load while placement is running"
            logger.warning("%s not loaded: placement is running", name)
            return False
        self.scheduler.load(cells)
        self.last_error = None
        logger.info("%s loaded: %d pixels", name, len(cells))
        return True

    def load_pixels(self, batch: Any, name: str = "Custom image") -> bool:
        try:
            report = validate(batch)
        except InputShapeError as exc:
            self.last_error = str(exc)
            logger.error("%s rejected: %s", name, exc)
            return False
        if not self._install(report.cells, name):
            return False
        self.last_batch = report
        logger.info("Dimensions: %dx%d pixels, %d unique colors", report.width, report.height, report.color_count)
        return True

    def load_image(self, url: str, max_width: Optional[int] = None, max_height: Optional[int] = None) -> int:
        """Fetch, quantize and load an image. Raises ``DecodeFailure`` on bad input."""
        img = self.fetcher.fetch(url)
        cells = quantize(
            img,
            max_width or self.settings.max_width,
            max_height or self.settings.max_height,
            alpha_threshold=self.settings.alpha_threshold,
        )
        if not self._install(cells, "Image from URL"):
            return 0
        self.last_batch = None
        return len(cells)

    def load_sample(self, name: str) -> int:
        cells = sample_cells(name)
        if not self._install(cells, f"Sample {name}"):
            return 0
        self.last_batch = None
        return len(cells)

    def refresh_palette(self) -> int:
        if self.discovery is None:
            return len(self.matcher)
        return self.matcher.refresh(self.discovery)

    @property
    def busy(self) -> bool:
        thread = self._thread
        return self.scheduler.running or (thread is not None and thread.is_alive())

    def start_background(self) -> bool:
        with self._lock:
            if self.busy:
                logger.info("Placement already running")
                return False
            if not self.scheduler.queue:
                self.last_error = "Load an image first"
                logger.warning("Nothing to place; load an image first")
                return False
            # Armed here so a stop arriving before the worker runs is not lost.
            report = self.scheduler.arm()
            if report is None:
                return False
            self._thread = threading.Thread(
                target=self.scheduler.run, args=(report,), name="pixel-placer", daemon=True
            )
            self._thread.start()
            return True

    def stop(self) -> None:
        self.scheduler.stop()

    def join(self, timeout: Optional[float] = None) -> None:
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def status(self) -> Dict[str, Any]:
        state = self.scheduler.state
        return {
            "running": self.busy,
            "cursor": state.cursor,
            "queued": len(self.scheduler.queue),
            "origin": [state.origin_x, state.origin_y],
            "delay_ms": state.inter_pixel_delay_ms,
            "palette_size": len(self.matcher),
            "last_run": self.scheduler.last_report.as_dict(),
            "last_batch": self.last_batch.summary() if self.last_batch else None,
            "error": self.last_error,
        }


def create_runner(settings: BotSettings = SETTINGS) -> BotRunner:
    state = SchedulerState(
        origin_x=settings.origin_x,
        origin_y=settings.origin_y,
        inter_pixel_delay_ms=settings.inter_pixel_delay_ms,
    )
    scheduler = PlacementScheduler(
        PaletteMatcher(),
        DesktopSurface(settings),
        state=state,
        settle_delay_ms=settings.settle_delay_ms,
    )
    runner = BotRunner(
        scheduler,
        fetcher=ImageFetcher(settings=settings),
        discovery=ConfiguredPalette(settings),
        settings=settings,
    )
    try:
        runner.refresh_palette()
    except ValueError as exc:
        logger.error("Configured palette ignored: %s", exc)
    return runner
