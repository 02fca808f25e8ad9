"""Color statistics and rare-color merging.

``compute_stats`` counts beads per color. ``plan_merge`` splits the
colors into common and rare around a share threshold and maps every
rare color to its nearest common one, using the common colors as a
reduced palette.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from pixel_bead.core.constants import MERGE_THRESHOLD
from pixel_bead.core.grid import Grid
from pixel_bead.core.palette import Palette, PaletteEntry
from pixel_bead.quantize.quantizer import nearest_color

NOTHING_TO_MERGE = "No suitable colors to merge."


@dataclass(frozen=True, slots=True)
class ColorStat:
    """Population of one color on the board."""
    color: str
    count: int
    percentage: float
    name: str


@dataclass(frozen=True, slots=True)
class GridStats:
    total: int
    colors: tuple[ColorStat, ...]

    def __len__(self) -> int:
        return len(self.colors)

    def get(self, color: str) -> ColorStat | None:
        for stat in self.colors:
            if stat.color == color:
                return stat
        return None

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "colors": [
                {"hex": s.color, "name": s.name, "count": s.count, "percentage": s.percentage}
                for s in self.colors
            ],
        }


@dataclass(frozen=True)
class MergePlan:
    """
    Result of partitioning a board's colors for merging.

    An empty ``mapping`` means there is nothing to do; ``message``
    then carries the user-facing reason.
    """
    threshold: float
    common: tuple[ColorStat, ...] = ()
    rare: tuple[ColorStat, ...] = ()
    mapping: dict[str, str] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.mapping

    @property
    def message(self) -> str:
        if self.is_empty:
            return NOTHING_TO_MERGE
        return f"Merged {len(self.rare)} rare colors (<{self.threshold * 100:g}%)"


def _percentage(count: int, total: int) -> float:
    """Share of the board in percent, one decimal, ties rounded up."""
    if not total:
        return 0.0
    # Exact decimal value of the float, so 0.25 rounds to 0.3 not 0.2
    share = Decimal(count / total * 100)
    return float(share.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def compute_stats(grid: Grid, palette: Palette | None = None) -> GridStats:
    """
    Count beads per color.

    Colors are ordered by descending count; ties keep the order in
    which the colors first appear (row-major). Percentages are rounded
    to one decimal.
    """
    # Counter preserves first-insertion order and sorted() is stable
    counts = Counter(grid.colors())
    total = grid.total_cells
    ordered = sorted(counts.items(), key=lambda item: -item[1])

    stats = []
    for color, count in ordered:
        entry = palette.find(color) if palette is not None else None
        stats.append(ColorStat(
            color=color,
            count=count,
            percentage=_percentage(count, total),
            name=entry.label if entry else color,
        ))
    return GridStats(total=total, colors=tuple(stats))


def plan_merge(
    grid: Grid,
    palette: Palette | None = None,
    threshold: float = MERGE_THRESHOLD,
) -> MergePlan:
    """Work out which rare colors collapse into which common ones."""
    stats = compute_stats(grid, palette)
    if stats.total == 0:
        return MergePlan(threshold)

    # Compare raw shares, not the rounded percentages
    common = tuple(s for s in stats.colors if s.count / stats.total >= threshold)
    rare = tuple(s for s in stats.colors if s.count / stats.total < threshold)
    if not common or not rare:
        return MergePlan(threshold, common, rare)

    reduced = [PaletteEntry(id=s.color, color=s.color, name=s.name) for s in common]
    mapping = {}
    for stat in rare:
        target = nearest_color(stat.color, reduced)
        # Undecodable colors resolve to themselves; nothing to substitute
        if target != stat.color:
            mapping[stat.color] = target
    return MergePlan(threshold, common, rare, mapping)


def merge_rare(
    grid: Grid,
    palette: Palette | None = None,
    threshold: float = MERGE_THRESHOLD,
) -> tuple[Grid, MergePlan]:
    """Apply ``plan_merge`` in a single substitution pass."""
    plan = plan_merge(grid, palette, threshold)
    if plan.is_empty:
        return grid, plan
    return grid.replace_colors(plan.mapping), plan
