"""Export a board as a PNG pattern image.

Each bead becomes one solid square of ``cell_size`` pixels. No grid
lines and no anti-aliasing are drawn, whatever the on-screen display
settings are.
"""

from __future__ import annotations

import io
from pathlib import Path

from loguru import logger
from PIL import Image, ImageDraw

from pixel_bead.core.color import hex_to_rgb
from pixel_bead.core.constants import EXPORT_CELL_SIZE
from pixel_bead.core.grid import Grid
from pixel_bead.errors import ExportError

WHITE_RGB = (255, 255, 255)


def render_image(grid: Grid, cell_size: int = EXPORT_CELL_SIZE) -> Image.Image:
    """Rasterize the grid into an RGB Pillow image."""
    if cell_size < 1:
        raise ValueError(f"cell_size must be positive, got {cell_size}")

    img = Image.new("RGB", (grid.width * cell_size, grid.height * cell_size), WHITE_RGB)
    draw = ImageDraw.Draw(img)
    for x, y, color in grid.cells():
        rgb = hex_to_rgb(color)
        if rgb is None:
            # Undecodable beads stay white, like the background
            continue
        left = x * cell_size
        top = y * cell_size
        draw.rectangle(
            (left, top, left + cell_size - 1, top + cell_size - 1),
            fill=(rgb.r, rgb.g, rgb.b),
        )
    return img


def render_png(grid: Grid, cell_size: int = EXPORT_CELL_SIZE) -> bytes:
    """
    Encode the grid as PNG bytes.

    Raises:
        ExportError: If encoding fails
    """
    buffer = io.BytesIO()
    try:
        render_image(grid, cell_size).save(buffer, format="PNG")
    except (OSError, ValueError) as exc:
        raise ExportError(f"Export failed: {exc}") from exc
    return buffer.getvalue()


def save_png(grid: Grid, path: str | Path, cell_size: int = EXPORT_CELL_SIZE) -> None:
    """Write the grid to a PNG file."""
    path = Path(path)
    data = render_png(grid, cell_size)
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise ExportError(f"Export failed: {exc}") from exc
    logger.info("Exported {}x{} board to {}", grid.width, grid.height, path)
