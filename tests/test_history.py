"""Tests for the bounded undo/redo log."""

import pytest
from PIL import Image

from pixel_bead.core.grid import Grid, GridSettings
from pixel_bead.edit.history import HistoryLog, HistorySnapshot
from pixel_bead.sample.sampler import SourceImage


def snapshot(width: int) -> HistorySnapshot:
    return HistorySnapshot(Grid.blank(width, 5), GridSettings(width, 5))


class TestHistoryLog:
    """Tests for HistoryLog."""

    def test_empty(self) -> None:
        log = HistoryLog()
        assert len(log) == 0
        assert log.position == -1
        assert log.current is None
        assert not log.can_undo and not log.can_redo

    def test_push_moves_cursor(self) -> None:
        log = HistoryLog()
        log.push(snapshot(5))
        log.push(snapshot(6))
        assert len(log) == 2
        assert log.position == 1
        assert log.current.settings.width == 6

    def test_undo_redo(self) -> None:
        log = HistoryLog()
        for width in (5, 6, 7):
            log.push(snapshot(width))
        assert log.undo().settings.width == 6
        assert log.undo().settings.width == 5
        assert log.undo() is None
        assert log.redo().settings.width == 6
        assert log.redo().settings.width == 7
        assert log.redo() is None

    def test_push_truncates_redo_branch(self) -> None:
        log = HistoryLog()
        for width in (5, 6, 7):
            log.push(snapshot(width))
        log.undo()
        log.undo()
        log.push(snapshot(9))
        assert [s.settings.width for s in log.entries] == [5, 9]
        assert not log.can_redo

    def test_limit_evicts_oldest(self) -> None:
        log = HistoryLog(limit=30)
        for width in range(5, 40):
            log.push(snapshot(width))
        assert len(log) == 30
        assert log.position == 29
        assert log.entries[0].settings.width == 10
        assert log.current.settings.width == 39

    def test_limit_applies_after_undo(self) -> None:
        log = HistoryLog(limit=3)
        for width in (5, 6, 7):
            log.push(snapshot(width))
        log.undo()
        log.push(snapshot(8))
        assert [s.settings.width for s in log.entries] == [5, 6, 8]
        assert log.position == 2

    def test_clear(self) -> None:
        log = HistoryLog()
        log.push(snapshot(5))
        log.clear()
        assert len(log) == 0 and log.position == -1

    def test_invalid_limit(self) -> None:
        with pytest.raises(ValueError):
            HistoryLog(limit=0)


class TestHistorySnapshot:
    """Tests for snapshot comparison."""

    def test_same_state(self) -> None:
        assert snapshot(5).same_state(snapshot(5))
        assert not snapshot(5).same_state(snapshot(6))

    def test_source_compared_by_identity(self, split_image: Image.Image) -> None:
        a = HistorySnapshot(Grid.blank(5, 5), GridSettings(5, 5), SourceImage(split_image))
        b = HistorySnapshot(Grid.blank(5, 5), GridSettings(5, 5), SourceImage(split_image))
        assert not a.same_state(b)
        assert a.same_state(HistorySnapshot(a.grid, a.settings, a.source))
