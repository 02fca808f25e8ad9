"""Map arbitrary colors onto a bead palette by nearest squared distance."""

from __future__ import annotations

from typing import Iterable

from pixel_bead.core.color import Rgb, hex_to_rgb
from pixel_bead.core.grid import Grid
from pixel_bead.core.palette import PaletteEntry


def _decoded(palette: Iterable[PaletteEntry | str]) -> list[tuple[str, Rgb]]:
    """Decode palette colors once, skipping entries that fail to decode."""
    decoded: list[tuple[str, Rgb]] = []
    for item in palette:
        color = item.color if isinstance(item, PaletteEntry) else item
        rgb = hex_to_rgb(color)
        if rgb is not None:
            decoded.append((color, rgb))
    return decoded


def _scan(target: Rgb, candidates: list[tuple[str, Rgb]]) -> str | None:
    best: str | None = None
    best_distance = -1
    for color, rgb in candidates:
        distance = target.distance(rgb)
        # Strict improvement only: ties keep the earliest entry
        if best is None or distance < best_distance:
            best = color
            best_distance = distance
    return best


def nearest_color(target: str, palette: Iterable[PaletteEntry | str]) -> str:
    """
    Return the palette color closest to ``target``.

    Falls back to ``target`` unchanged when the palette is empty, when
    the target is not a decodable color, or when no palette entry
    decodes. Never raises for string input.

    Args:
        target: Color to match, ``#RRGGBB``
        palette: PaletteEntry objects or bare hex strings, in priority order

    Returns:
        The matching palette color as stored in the palette
    """
    rgb = hex_to_rgb(target)
    if rgb is None:
        return target
    return _scan(rgb, _decoded(palette)) or target


class Quantizer:
    """
    Nearest-color lookup bound to one palette.

    Decodes the palette once and memoizes results per input color, so
    quantizing a whole image costs one scan per distinct color.
    """

    def __init__(self, palette: Iterable[PaletteEntry | str]) -> None:
        self._candidates = _decoded(palette)
        self._cache: dict[str, str] = {}

    def __len__(self) -> int:
        return len(self._candidates)

    def nearest(self, target: str) -> str:
        cached = self._cache.get(target)
        if cached is not None:
            return cached
        rgb = hex_to_rgb(target)
        result = target if rgb is None else (_scan(rgb, self._candidates) or target)
        self._cache[target] = result
        return result

    def quantize_rows(self, rows: Iterable[Iterable[str]]) -> Grid:
        """Quantize every cell of a raw color matrix into a Grid."""
        return Grid(tuple(tuple(self.nearest(c) for c in row) for row in rows))


def quantize_rows(rows: Iterable[Iterable[str]], palette: Iterable[PaletteEntry | str]) -> Grid:
    """Quantize a raw color matrix against a palette."""
    return Quantizer(palette).quantize_rows(rows)
