"""Infrastructure helpers for image fetching and pointer input."""

from .desktop import ConfiguredPalette, DesktopSurface, PointerOptions, parse_palette_spec
from .network import FETCHER, DecodeFailure, ImageFetcher, decode_image

__all__ = [
    "ConfiguredPalette",
    "DesktopSurface",
    "PointerOptions",
    "parse_palette_spec",
    "FETCHER",
    "DecodeFailure",
    "ImageFetcher",
    "decode_image",
]
