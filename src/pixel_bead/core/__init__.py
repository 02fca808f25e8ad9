"""Core data structures for bead boards."""

from pixel_bead.core.color import Rgb, color_distance, hex_to_rgb, normalize_hex, rgb_to_hex
from pixel_bead.core.grid import Edge, Grid, GridSettings
from pixel_bead.core.palette import Palette, PaletteEntry

__all__ = [
    "Rgb",
    "color_distance",
    "hex_to_rgb",
    "normalize_hex",
    "rgb_to_hex",
    "Edge",
    "Grid",
    "GridSettings",
    "Palette",
    "PaletteEntry",
]
