"""Render a bead board as true-color ANSI text for terminal preview."""

from __future__ import annotations

from pixel_bead.core.color import Rgb, hex_to_rgb
from pixel_bead.core.grid import Grid

# FG = top bead, BG = bottom bead
UPPER_HALF = "▀"
FULL_BLOCK = "█"

WHITE_RGB = Rgb(255, 255, 255)


class TerminalRenderer:
    """
    Render a Grid with 24-bit SGR codes.

    In half-block mode each terminal line shows two bead rows, which
    keeps beads roughly square in most terminal fonts. Otherwise each
    bead is two full-block characters wide. SGR codes are only emitted
    when a color changes.
    """

    def __init__(self, half_blocks: bool = True, reset_at_end: bool = True) -> None:
        self.half_blocks = half_blocks
        self.reset_at_end = reset_at_end

    def render(self, grid: Grid) -> str:
        lines = self._half_block_lines(grid) if self.half_blocks else self._full_block_lines(grid)
        result = "\n".join(lines)
        if self.reset_at_end:
            result += "\x1b[0m"
        return result

    @staticmethod
    def _rgb(color: str) -> Rgb:
        return hex_to_rgb(color) or WHITE_RGB

    def _half_block_lines(self, grid: Grid) -> list[str]:
        lines: list[str] = []
        for y in range(0, grid.height, 2):
            top = grid.rows[y]
            bottom = grid.rows[y + 1] if y + 1 < grid.height else None
            parts: list[str] = []
            last_fg: Rgb | None = None
            last_bg: Rgb | None = None

            for x, color in enumerate(top):
                fg = self._rgb(color)
                if fg != last_fg:
                    parts.append(f"\x1b[38;2;{fg.r};{fg.g};{fg.b}m")
                    last_fg = fg
                if bottom is not None:
                    bg = self._rgb(bottom[x])
                    if bg != last_bg:
                        parts.append(f"\x1b[48;2;{bg.r};{bg.g};{bg.b}m")
                        last_bg = bg
                parts.append(UPPER_HALF)

            # Reset at end of each line to prevent color bleeding
            parts.append("\x1b[0m")
            lines.append("".join(parts))
        return lines

    def _full_block_lines(self, grid: Grid) -> list[str]:
        lines: list[str] = []
        for row in grid.rows:
            parts: list[str] = []
            last: Rgb | None = None
            for color in row:
                rgb = self._rgb(color)
                if rgb != last:
                    parts.append(f"\x1b[38;2;{rgb.r};{rgb.g};{rgb.b}m")
                    last = rgb
                parts.append(FULL_BLOCK * 2)
            parts.append("\x1b[0m")
            lines.append("".join(parts))
        return lines
