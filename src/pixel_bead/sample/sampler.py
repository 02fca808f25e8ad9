"""Sample raster images down to one color per bead.

The image is flattened onto an opaque white canvas first, so
transparent pixels become white beads rather than black ones. It is
then resized to exactly the board size and read back cell by cell.

Example:
    from pixel_bead.sample.sampler import open_image, quantize_image

    source = open_image("cat.png")
    grid = quantize_image(source, 30, 30, palette)
"""

from __future__ import annotations

import io
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

from loguru import logger
from PIL import Image, UnidentifiedImageError

from pixel_bead.core.color import rgb_to_hex
from pixel_bead.core.constants import clamp_dimension
from pixel_bead.core.grid import Grid
from pixel_bead.core.palette import PaletteEntry
from pixel_bead.errors import ImageDecodeError
from pixel_bead.quantize.quantizer import Quantizer

ImageInput = Union[str, Path, bytes, Image.Image, "SourceImage"]

# Filters accepted by the PIXEL_BEAD_RESAMPLE setting
RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "box": Image.Resampling.BOX,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}
DEFAULT_RESAMPLE = "box"


@dataclass(frozen=True, eq=False)
class SourceImage:
    """
    A decoded image bound to a board.

    Immutable once created and shared by reference between history
    snapshots; identity is the only meaningful equality.
    """
    image: Image.Image
    path: Path | None = None

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def aspect(self) -> float:
        """Height over width."""
        return self.image.height / self.image.width

    def __repr__(self) -> str:
        return f"SourceImage({self.width}x{self.height}, path={self.path})"


def open_image(source: ImageInput) -> SourceImage:
    """
    Decode an image from a path, raw bytes or an existing Pillow image.

    Raises:
        ImageDecodeError: If the data cannot be read or decoded
    """
    if isinstance(source, SourceImage):
        return source

    path: Path | None = None
    try:
        if isinstance(source, Image.Image):
            img = source.copy()
        elif isinstance(source, bytes):
            img = Image.open(io.BytesIO(source))
        else:
            path = Path(source)
            img = Image.open(path)
        # Force full decode now so later sampling cannot fail
        img.load()
    except (OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError) as exc:
        raise ImageDecodeError(f"Cannot decode image: {exc}") from exc

    if img.width == 0 or img.height == 0:
        raise ImageDecodeError("Image has no pixels")

    logger.debug("Decoded image {}x{} mode={} from {}", img.width, img.height, img.mode, path or "memory")
    return SourceImage(img, path)


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite an image over opaque white and return it as RGB."""
    rgba = image.convert("RGBA")
    canvas = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
    canvas.alpha_composite(rgba)
    return canvas.convert("RGB")


def sample(
    source: SourceImage,
    width: int,
    height: int,
    resample: str = DEFAULT_RESAMPLE,
) -> Grid:
    """
    Produce one raw (unquantized) color per cell.

    Args:
        source: Decoded image
        width: Target columns
        height: Target rows
        resample: Name of the Pillow filter to use (see RESAMPLE_FILTERS)

    Returns:
        Grid of ``width`` x ``height`` unquantized colors
    """
    try:
        resample_filter = RESAMPLE_FILTERS[resample]
    except KeyError:
        raise ValueError(f"Unknown resample filter: {resample!r}") from None

    img = flatten_on_white(source.image).resize((width, height), resample_filter)
    pixels = img.load()

    rows = []
    for y in range(height):
        rows.append(tuple(rgb_to_hex(*pixels[x, y]) for x in range(width)))
    return Grid(tuple(rows))


def quantize_image(
    source: SourceImage,
    width: int,
    height: int,
    palette: Iterable[PaletteEntry | str],
    resample: str = DEFAULT_RESAMPLE,
) -> Grid:
    """Sample an image at the board size and map every cell onto the palette."""
    raw = sample(source, width, height, resample)
    grid = Quantizer(palette).quantize_rows(raw.rows)
    logger.debug("Quantized {} to {}x{}", source, width, height)
    return grid


def derive_height(source: SourceImage, width: int) -> int:
    """Height that keeps the image aspect ratio at ``width``, clamped to bounds."""
    # Half-up rounding, not banker's rounding
    return clamp_dimension(math.floor(width * source.aspect + 0.5))
