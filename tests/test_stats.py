"""Tests for color statistics and merge planning."""

import pytest

from pixel_bead.analyze.stats import NOTHING_TO_MERGE, MergePlan, compute_stats, merge_rare, plan_merge
from pixel_bead.core.grid import Grid
from pixel_bead.core.palette import Palette, PaletteEntry

RED = "#FF0000"
DARK_RED = "#EE0000"
BLUE = "#0000FF"
NAVY = "#000080"
WHITE = "#FFFFFF"


def board(counts: dict[str, int], width: int = 10) -> Grid:
    """Lay out colors row-major in the given order and amounts."""
    flat = [color for color, count in counts.items() for _ in range(count)]
    return Grid.from_rows([flat[i:i + width] for i in range(0, len(flat), width)])


class TestComputeStats:
    """Tests for compute_stats."""

    def test_counts_and_order(self) -> None:
        stats = compute_stats(board({BLUE: 20, RED: 70, WHITE: 10}))
        assert stats.total == 100
        assert [s.color for s in stats.colors] == [RED, BLUE, WHITE]
        assert [s.count for s in stats.colors] == [70, 20, 10]
        assert sum(s.count for s in stats.colors) == stats.total

    def test_percentage_rounded(self) -> None:
        grid = board({RED: 1, BLUE: 2}, width=3)
        stats = compute_stats(Grid.from_rows(grid.rows * 5))
        assert stats.get(RED).percentage == 33.3
        assert stats.get(BLUE).percentage == 66.7

    def test_percentage_ties_round_up(self) -> None:
        grid = board({"#000000": 1, RED: 5, WHITE: 394}, width=20)
        stats = compute_stats(grid)
        assert stats.total == 400
        assert stats.get("#000000").percentage == 0.3
        assert stats.get(RED).percentage == 1.3

    def test_ties_keep_first_seen(self) -> None:
        stats = compute_stats(board({WHITE: 5, RED: 5}, width=5))
        assert [s.color for s in stats.colors] == [WHITE, RED]

    def test_names_from_palette(self) -> None:
        palette = Palette([PaletteEntry("r", RED, "Cherry")])
        stats = compute_stats(board({RED: 5, BLUE: 5}, width=5), palette)
        assert stats.get(RED).name == "Cherry"
        assert stats.get(BLUE).name == BLUE

    def test_to_dict(self) -> None:
        data = compute_stats(board({RED: 5}, width=5)).to_dict()
        assert data == {
            "total": 5,
            "colors": [{"hex": RED, "name": RED, "count": 5, "percentage": 100.0}],
        }

    def test_len_and_missing(self) -> None:
        stats = compute_stats(board({RED: 5}, width=5))
        assert len(stats) == 1
        assert stats.get(BLUE) is None


class TestPlanMerge:
    """Tests for plan_merge and merge_rare."""

    def test_rare_maps_to_nearest_common(self) -> None:
        grid = board({RED: 48, BLUE: 48, DARK_RED: 2, NAVY: 2})
        plan = plan_merge(grid, threshold=0.03)
        assert plan.mapping == {DARK_RED: RED, NAVY: BLUE}
        assert [s.color for s in plan.common] == [RED, BLUE]
        assert plan.message == "Merged 2 rare colors (<3%)"

    def test_threshold_is_inclusive_for_common(self) -> None:
        grid = board({RED: 97, DARK_RED: 3})
        assert plan_merge(grid, threshold=0.03).is_empty
        assert not plan_merge(grid, threshold=0.031).is_empty

    def test_everything_rare(self) -> None:
        grid = board({RED: 1, BLUE: 1, WHITE: 1, DARK_RED: 1, NAVY: 1}, width=5)
        plan = plan_merge(grid, threshold=0.5)
        assert plan.is_empty
        assert plan.message == NOTHING_TO_MERGE
        assert len(plan.rare) == 5

    def test_merge_rare_single_pass(self) -> None:
        grid = board({RED: 96, DARK_RED: 4})
        merged, plan = merge_rare(grid, threshold=0.05)
        assert set(merged.colors()) == {RED}
        assert compute_stats(merged).total == compute_stats(grid).total
        assert plan.mapping == {DARK_RED: RED}

    def test_merge_rare_noop_returns_same_grid(self) -> None:
        grid = board({RED: 96, DARK_RED: 4})
        merged, plan = merge_rare(grid, threshold=0.03)
        assert merged is grid
        assert plan.is_empty

    def test_undecodable_rare_color_left_alone(self) -> None:
        grid = Grid(((RED,) * 10,) * 9 + (("oops",) + (RED,) * 9,))
        merged, plan = merge_rare(grid, threshold=0.05)
        assert plan.is_empty
        assert merged[0, 9] == "oops"

    @pytest.mark.parametrize("threshold", [0.01, 0.03, 0.1])
    def test_empty_plan_message(self, threshold: float) -> None:
        assert MergePlan(threshold).message == NOTHING_TO_MERGE
