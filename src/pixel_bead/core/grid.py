"""Grid - 2D matrix of bead colors.

A Grid is an immutable value: rows are tuples, and every transform
returns a new Grid that shares the rows it did not touch. History
snapshots can therefore hold a Grid directly, and no later edit can
reach back into them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, Mapping, Sequence

from pixel_bead.core.color import normalize_hex
from pixel_bead.core.constants import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    MAX_GRID_SIZE,
    MIN_GRID_SIZE,
    WHITE,
)

Row = tuple[str, ...]


class Edge(Enum):
    """Grid boundary for row/column insertion and removal."""
    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"

    @property
    def is_vertical(self) -> bool:
        """True when the edge adds or removes a row (changes height)."""
        return self in (Edge.TOP, Edge.BOTTOM)


@dataclass(frozen=True, slots=True)
class GridSettings:
    """
    Board dimensions plus the aspect-ratio lock.

    ``lock_aspect_ratio`` only matters while a source image is bound:
    changing the width then derives the height from the image.
    """
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    lock_aspect_ratio: bool = True

    def with_size(self, width: int, height: int) -> GridSettings:
        return replace(self, width=width, height=height)

    def to_dict(self) -> dict[str, int | bool]:
        return {
            "width": self.width,
            "height": self.height,
            "lockAspectRatio": self.lock_aspect_ratio,
        }


def size_in_range(width: int, height: int) -> bool:
    """Check both dimensions against [MIN_GRID_SIZE, MAX_GRID_SIZE]."""
    return (
        MIN_GRID_SIZE <= width <= MAX_GRID_SIZE
        and MIN_GRID_SIZE <= height <= MAX_GRID_SIZE
    )


def canonical_cell(color: str) -> str:
    """Canonical form of a cell color; undecodable values are kept as-is."""
    return normalize_hex(color) or color


@dataclass(frozen=True, slots=True)
class Grid:
    """
    Rectangular bead board, ``height`` rows of ``width`` colors.

    Cells are addressed as ``(x, y)`` with x the column and y the row,
    matching ``grid[x, y]``.
    """
    rows: tuple[Row, ...]

    def __post_init__(self) -> None:
        if not self.rows or not self.rows[0]:
            raise ValueError("Grid must have at least one row and one column")
        width = len(self.rows[0])
        for y, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {y} has {len(row)} cells, expected {width}")

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def blank(cls, width: int, height: int, fill: str = WHITE) -> Grid:
        """Create a grid filled with one color (white by default)."""
        row = (fill,) * width
        return cls(tuple(row for _ in range(height)))

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[str]]) -> Grid:
        """Build a grid from nested sequences, normalizing every color."""
        return cls(tuple(tuple(canonical_cell(c) for c in row) for row in rows))

    # -------------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------------

    @property
    def width(self) -> int:
        return len(self.rows[0])

    @property
    def height(self) -> int:
        return len(self.rows)

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def total_cells(self) -> int:
        return self.width * self.height

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> str:
        """Get the color at (x, y)."""
        if not self.in_bounds(x, y):
            raise IndexError(f"({x}, {y}) out of bounds ({self.width}x{self.height})")
        return self.rows[y][x]

    def __getitem__(self, pos: tuple[int, int]) -> str:
        x, y = pos
        return self.get(x, y)

    def cells(self) -> Iterator[tuple[int, int, str]]:
        """Iterate over all cells as (x, y, color), row-major."""
        for y, row in enumerate(self.rows):
            for x, color in enumerate(row):
                yield x, y, color

    def colors(self) -> Iterator[str]:
        for row in self.rows:
            yield from row

    def to_lists(self) -> list[list[str]]:
        return [list(row) for row in self.rows]

    # -------------------------------------------------------------------------
    # Transforms (each returns a new Grid)
    # -------------------------------------------------------------------------

    def with_cell(self, x: int, y: int, color: str) -> Grid:
        """Replace exactly one cell. Out-of-bounds returns self unchanged."""
        if not self.in_bounds(x, y):
            return self
        row = self.rows[y]
        new_row = row[:x] + (color,) + row[x + 1:]
        return Grid(self.rows[:y] + (new_row,) + self.rows[y + 1:])

    def replace_colors(self, mapping: Mapping[str, str]) -> Grid:
        """Substitute colors per mapping in one pass; unmapped colors stay."""
        if not mapping:
            return self
        rows = []
        for row in self.rows:
            if any(c in mapping for c in row):
                rows.append(tuple(mapping.get(c, c) for c in row))
            else:
                rows.append(row)
        return Grid(tuple(rows))

    def crop_or_pad(self, width: int, height: int, fill: str = WHITE) -> Grid:
        """Resize in place, anchored at the top-left corner.

        Cells inside the old bounds keep their color; new cells on the
        right and bottom are filled.
        """
        rows = []
        for y in range(height):
            if y < self.height:
                old = self.rows[y]
                if width <= len(old):
                    rows.append(old[:width])
                else:
                    rows.append(old + (fill,) * (width - len(old)))
            else:
                rows.append((fill,) * width)
        return Grid(tuple(rows))

    def insert_edge(self, edge: Edge, fill: str = WHITE) -> Grid:
        """Add one row or column of ``fill`` at the given edge."""
        if edge is Edge.TOP:
            return Grid(((fill,) * self.width,) + self.rows)
        if edge is Edge.BOTTOM:
            return Grid(self.rows + ((fill,) * self.width,))
        if edge is Edge.LEFT:
            return Grid(tuple((fill,) + row for row in self.rows))
        return Grid(tuple(row + (fill,) for row in self.rows))

    def remove_edge(self, edge: Edge) -> Grid:
        """Drop the row or column at the given edge."""
        if edge is Edge.TOP:
            return Grid(self.rows[1:])
        if edge is Edge.BOTTOM:
            return Grid(self.rows[:-1])
        if edge is Edge.LEFT:
            return Grid(tuple(row[1:] for row in self.rows))
        return Grid(tuple(row[:-1] for row in self.rows))


def grid_from_beads(
    width: int,
    height: int,
    beads: Sequence[Mapping[str, object]],
    fill: str = WHITE,
) -> Grid:
    """Rebuild a grid from a flat ``{x, y, hex}`` list.

    Cells not referenced stay ``fill``; out-of-range entries are ignored.
    """
    cells = [[fill] * width for _ in range(height)]
    for bead in beads:
        if not isinstance(bead, Mapping):
            continue
        x, y, color = bead.get("x"), bead.get("y"), bead.get("hex")
        if not isinstance(x, int) or not isinstance(y, int) or not isinstance(color, str):
            continue
        if 0 <= x < width and 0 <= y < height:
            cells[y][x] = color
    return Grid.from_rows(cells)
