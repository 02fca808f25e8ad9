"""
pixel-bead: turn images into bead board patterns

Quantize a picture onto a bead palette, edit the board with undo/redo,
and save it as a project file or a printable PNG.

Quick Start:
    >>> import pixel_bead as bead
    >>> board = bead.BoardEngine()
    >>> board.load_image("cat.png", width=30)
    >>> board.flood_fill(0, 0, "#FFFFFF")
    >>> bead.save_png(board.grid, "cat-pattern.png")

Features:
    - Nearest-color quantization onto a bounded bead palette
    - Paint, global color fill, resize, edge insert/remove, color merge
    - 30-step linear undo/redo over full board snapshots
    - Color statistics and rare-color merging
    - JSON project files and 20px-per-bead PNG export
"""

__version__ = "0.1.0"

# Core types
from pixel_bead.core.color import color_distance, hex_to_rgb, normalize_hex
from pixel_bead.core.grid import Edge, Grid, GridSettings
from pixel_bead.core.palette import Palette, PaletteEntry

# Quantization and sampling
from pixel_bead.quantize.quantizer import Quantizer, nearest_color
from pixel_bead.sample.sampler import SourceImage, open_image, quantize_image

# Board state
from pixel_bead.config import BoardConfig
from pixel_bead.edit.engine import BoardEngine
from pixel_bead.edit.history import HistoryLog, HistorySnapshot

# Analysis
from pixel_bead.analyze.stats import compute_stats, merge_rare, plan_merge

# I/O
from pixel_bead.io.project import Project, load_project, save_project
from pixel_bead.io.image_export import render_png, save_png

__all__ = [
    # Version
    "__version__",
    # Core types
    "color_distance",
    "hex_to_rgb",
    "normalize_hex",
    "Edge",
    "Grid",
    "GridSettings",
    "Palette",
    "PaletteEntry",
    # Quantization
    "Quantizer",
    "nearest_color",
    "SourceImage",
    "open_image",
    "quantize_image",
    # Board state
    "BoardConfig",
    "BoardEngine",
    "HistoryLog",
    "HistorySnapshot",
    # Analysis
    "compute_stats",
    "merge_rare",
    "plan_merge",
    # I/O
    "Project",
    "load_project",
    "save_project",
    "render_png",
    "save_png",
]
