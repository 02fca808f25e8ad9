"""Bounded linear undo/redo over full board snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pixel_bead.core.constants import HISTORY_LIMIT
from pixel_bead.core.grid import Grid, GridSettings

if TYPE_CHECKING:
    from pixel_bead.sample.sampler import SourceImage


@dataclass(frozen=True, slots=True)
class HistorySnapshot:
    """
    Board state at one point in time.

    Grid and GridSettings are immutable values, so holding them is
    enough to keep the snapshot independent of later edits. The source
    image is shared by reference.
    """
    grid: Grid
    settings: GridSettings
    source: SourceImage | None = None

    def same_state(self, other: HistorySnapshot) -> bool:
        """Equal grid and settings, and the very same source image."""
        return (
            self.grid == other.grid
            and self.settings == other.settings
            and self.source is other.source
        )


@dataclass
class HistoryLog:
    """
    Snapshots plus a cursor.

    Pushing while the cursor is not at the tail discards the snapshots
    after it. Once the log exceeds ``limit`` the oldest entry is evicted;
    the cursor always ends on the snapshot just pushed.
    """
    limit: int = HISTORY_LIMIT
    _entries: list[HistorySnapshot] = field(default_factory=list)
    _cursor: int = -1

    def __post_init__(self) -> None:
        if self.limit < 1:
            raise ValueError(f"History limit must be at least 1, got {self.limit}")

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def position(self) -> int:
        """Cursor index, -1 while the log is empty."""
        return self._cursor

    @property
    def entries(self) -> tuple[HistorySnapshot, ...]:
        return tuple(self._entries)

    @property
    def current(self) -> HistorySnapshot | None:
        if not self._entries:
            return None
        return self._entries[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._entries) - 1

    def push(self, snapshot: HistorySnapshot) -> None:
        """Append a snapshot after the cursor, truncating any redo branch."""
        del self._entries[self._cursor + 1:]
        self._entries.append(snapshot)
        self._cursor = len(self._entries) - 1
        if len(self._entries) > self.limit:
            self._entries.pop(0)
            self._cursor -= 1

    def undo(self) -> HistorySnapshot | None:
        """Step back; None when already at the oldest snapshot."""
        if not self.can_undo:
            return None
        self._cursor -= 1
        return self._entries[self._cursor]

    def redo(self) -> HistorySnapshot | None:
        """Step forward; None when already at the newest snapshot."""
        if not self.can_redo:
            return None
        self._cursor += 1
        return self._entries[self._cursor]

    def clear(self) -> None:
        self._entries.clear()
        self._cursor = -1
