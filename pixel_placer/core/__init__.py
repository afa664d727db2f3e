"""Quantizing, matching and placement components for the pixel placer."""

from .cells import PixelCell
from .colors import canonical, parse_color, to_hex
from .palette import PaletteEntry, PaletteMatcher, color_distance
from .quantize import grid_size, quantize
from .samples import SAMPLES, sample_cells
from .scheduler import PlacementScheduler, RunReport, SchedulerState
from .surface import PaletteDiscovery, SurfaceAdapter, first_match
from .validate import BatchReport, InputShapeError, validate

__all__ = [
    "PixelCell",
    "canonical",
    "parse_color",
    "to_hex",
    "PaletteEntry",
    "PaletteMatcher",
    "color_distance",
    "grid_size",
    "quantize",
    "SAMPLES",
    "sample_cells",
    "PlacementScheduler",
    "RunReport",
    "SchedulerState",
    "PaletteDiscovery",
    "SurfaceAdapter",
    "first_match",
    "BatchReport",
    "InputShapeError",
    "validate",
]
