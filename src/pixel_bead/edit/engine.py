"""BoardEngine - the single writer of bead board state.

The engine owns the current grid, its settings, the optional bound
source image, the active palette and the undo/redo log. Every edit goes
through it; every edit that changes state pushes exactly one history
snapshot, and edits that turn out to be no-ops push nothing.

Example:
    engine = BoardEngine()
    engine.load_image("cat.png", width=30)
    engine.set_cell(3, 4, "#EE4256")
    engine.undo()
    Path("cat.json").write_bytes(engine.export_project())
"""

from __future__ import annotations

import functools
import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Iterable, Mapping, TypeVar

from loguru import logger

from pixel_bead.analyze.stats import GridStats, MergePlan, compute_stats, plan_merge
from pixel_bead.config import BoardConfig
from pixel_bead.core.color import normalize_hex
from pixel_bead.core.constants import MAX_GRID_SIZE, MIN_GRID_SIZE, clamp_dimension
from pixel_bead.core.grid import Edge, Grid, GridSettings, canonical_cell, size_in_range
from pixel_bead.core.palette import Palette, PaletteEntry
from pixel_bead.edit.history import HistoryLog, HistorySnapshot
from pixel_bead.edit.worker import SampleResult, SamplingWorker
from pixel_bead.errors import GridSizeError, InvalidColorError
from pixel_bead.io.image_export import render_png
from pixel_bead.io.project import Project, dumps, load_project, loads
from pixel_bead.sample.sampler import ImageInput, SourceImage, derive_height, open_image, quantize_image

T = TypeVar("T")


def _serialized(method: Callable[..., T]) -> Callable[..., T]:
    """Run a method under the engine lock so edits never interleave."""
    @functools.wraps(method)
    def wrapper(self: BoardEngine, *args, **kwargs) -> T:
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class BoardEngine:
    """
    Mutable bead board with linear undo/redo.

    Out-of-bounds cell edits and no-op fills are silently ignored
    (methods return False). Invalid colors raise InvalidColorError.
    Grid size violations on edge edits raise GridSizeError when
    ``strict`` is set; removal is strict by default, insertion is not.
    """

    def __init__(
        self,
        palette: Iterable[PaletteEntry] | None = None,
        settings: GridSettings | None = None,
        config: BoardConfig | None = None,
    ) -> None:
        self.config = config or BoardConfig()
        if settings is None:
            settings = GridSettings(self.config.default_width, self.config.default_height)
        if not size_in_range(settings.width, settings.height):
            raise GridSizeError(
                f"Board size must be within {MIN_GRID_SIZE}-{MAX_GRID_SIZE}",
                settings.width,
                settings.height,
            )

        self._lock = threading.RLock()
        self._palette = Palette(list(palette)) if palette is not None else Palette.default()
        self._grid = Grid.blank(settings.width, settings.height)
        self._settings = settings
        self._source: SourceImage | None = None
        self._history = HistoryLog(limit=self.config.history_limit)
        self._worker = SamplingWorker(self.config.resample)
        self._history.push(self._snapshot())

    @classmethod
    def from_project(cls, project: Project, config: BoardConfig | None = None) -> BoardEngine:
        """Start a session from a parsed project file."""
        engine = cls(project.palette, project.settings, config)
        engine._grid = project.grid
        engine._history.clear()
        engine._history.push(engine._snapshot())
        return engine

    @classmethod
    def open(cls, path: str | Path, config: BoardConfig | None = None) -> BoardEngine:
        return cls.from_project(load_project(path), config)

    # -------------------------------------------------------------------------
    # Context management
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Stop the background sampling thread."""
        self._worker.shutdown()

    def __enter__(self) -> BoardEngine:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def grid(self) -> Grid:
        return self._grid

    @property
    def settings(self) -> GridSettings:
        return self._settings

    @property
    def width(self) -> int:
        return self._grid.width

    @property
    def height(self) -> int:
        return self._grid.height

    @property
    def source_image(self) -> SourceImage | None:
        return self._source

    @property
    def palette(self) -> Palette:
        """A copy of the active palette; change it through the palette methods."""
        return self._palette.copy()

    @property
    def history(self) -> HistoryLog:
        return self._history

    @property
    def history_position(self) -> int:
        return self._history.position

    @property
    def history_length(self) -> int:
        return len(self._history)

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    @property
    def processing(self) -> bool:
        """True while a background sampling request is in flight."""
        return self._worker.processing

    # -------------------------------------------------------------------------
    # Internal state handling
    # -------------------------------------------------------------------------

    def _snapshot(self) -> HistorySnapshot:
        return HistorySnapshot(self._grid, self._settings, self._source)

    def _commit(
        self,
        action: str,
        grid: Grid,
        settings: GridSettings,
        source: SourceImage | None,
        force: bool = False,
    ) -> bool:
        """Install new state and push it; skip if nothing changed unless forced."""
        snapshot = HistorySnapshot(grid, settings, source)
        if not force and snapshot.same_state(self._snapshot()):
            logger.debug("{}: no change", action)
            return False
        self._grid, self._settings, self._source = grid, settings, source
        self._history.push(snapshot)
        logger.debug(
            "{}: {}x{} (history {}/{})",
            action, grid.width, grid.height, self._history.position + 1, len(self._history),
        )
        return True

    def _restore(self, snapshot: HistorySnapshot) -> None:
        self._grid = snapshot.grid
        self._settings = snapshot.settings
        self._source = snapshot.source

    @staticmethod
    def _color(color: str) -> str:
        canonical = normalize_hex(color)
        if canonical is None:
            raise InvalidColorError(f"Not a #RRGGBB color: {color!r}")
        return canonical

    def _quantize(self, source: SourceImage, width: int, height: int) -> Grid:
        return quantize_image(source, width, height, self._palette, self.config.resample)

    # -------------------------------------------------------------------------
    # Cell edits
    # -------------------------------------------------------------------------

    @_serialized
    def set_cell(self, x: int, y: int, color: str) -> bool:
        """Paint one bead. Out of bounds or unchanged color is a no-op."""
        color = self._color(color)
        if not self._grid.in_bounds(x, y):
            return False
        return self._commit("set_cell", self._grid.with_cell(x, y, color), self._settings, self._source)

    @_serialized
    def recolor_matching(self, x: int, y: int, color: str) -> bool:
        """Replace every bead sharing the color at (x, y) with ``color``.

        This is a board-wide color swap triggered by picking a cell, not
        a contiguous flood fill: matching beads anywhere change, whether
        or not they touch (x, y).
        """
        color = self._color(color)
        if not self._grid.in_bounds(x, y):
            return False
        target = self._grid.get(x, y)
        if target == color:
            return False
        return self._commit(
            "recolor_matching",
            self._grid.replace_colors({target: color}),
            self._settings,
            self._source,
        )

    # The bucket tool; kept under its UI name
    flood_fill = recolor_matching

    @_serialized
    def replace_colors(self, mapping: Mapping[str, str]) -> bool:
        """Apply a color substitution across the whole board in one step."""
        normalized = {canonical_cell(old): self._color(new) for old, new in mapping.items()}
        return self._commit(
            "replace_colors",
            self._grid.replace_colors(normalized),
            self._settings,
            self._source,
        )

    @_serialized
    def clear(self) -> bool:
        """Reset every bead to white at the current size."""
        blank = Grid.blank(self._settings.width, self._settings.height)
        return self._commit("clear", blank, self._settings, self._source)

    # -------------------------------------------------------------------------
    # Resizing
    # -------------------------------------------------------------------------

    @_serialized
    def resize(self, width: int, height: int) -> bool:
        """
        Change the board size.

        With a bound source image the board is re-sampled from the image
        at the new size. Without one the grid is cropped or padded with
        white, anchored at the top-left corner.

        Args:
            width: New width, clamped to the allowed range
            height: New height, clamped to the allowed range
        """
        width, height = clamp_dimension(width), clamp_dimension(height)
        settings = self._settings.with_size(width, height)
        if self._source is not None:
            grid = self._quantize(self._source, width, height)
        else:
            grid = self._grid.crop_or_pad(width, height)
        return self._commit("resize", grid, settings, self._source)

    @_serialized
    def set_width(self, width: int) -> bool:
        """Width slider: derives the height from the image when the aspect lock applies."""
        width = clamp_dimension(width)
        height = self._settings.height
        if self._settings.lock_aspect_ratio and self._source is not None:
            height = derive_height(self._source, width)
        return self.resize(width, height)

    @_serialized
    def set_height(self, height: int) -> bool:
        """Height slider: ignored while the aspect lock applies."""
        if self._settings.lock_aspect_ratio and self._source is not None:
            logger.debug("set_height ignored: aspect ratio locked to source image")
            return False
        return self.resize(self._settings.width, height)

    @_serialized
    def set_lock_aspect_ratio(self, locked: bool) -> None:
        """Toggle the aspect lock. Not an undoable edit."""
        self._settings = GridSettings(self._settings.width, self._settings.height, bool(locked))

    # -------------------------------------------------------------------------
    # Edge edits
    # -------------------------------------------------------------------------

    def _edge_size(self, edge: Edge, delta: int) -> tuple[int, int]:
        width, height = self._grid.width, self._grid.height
        if edge.is_vertical:
            return width, height + delta
        return width + delta, height

    @_serialized
    def insert_edge(self, edge: Edge | str, strict: bool = False) -> bool:
        """
        Add a white row or column at ``edge``.

        Detaches the source image. Growing past the maximum size is
        silently ignored unless ``strict``, which raises GridSizeError.
        """
        edge = Edge(edge)
        width, height = self._edge_size(edge, +1)
        if width > MAX_GRID_SIZE or height > MAX_GRID_SIZE:
            error = GridSizeError(
                f"Cannot expand grid larger than {MAX_GRID_SIZE}x{MAX_GRID_SIZE}", width, height
            )
            if strict:
                raise error
            logger.debug("insert_edge {} ignored: {}", edge.value, error)
            return False
        return self._commit(
            f"insert_edge {edge.value}",
            self._grid.insert_edge(edge),
            self._settings.with_size(width, height),
            None,
        )

    @_serialized
    def remove_edge(self, edge: Edge | str, strict: bool = True) -> bool:
        """
        Drop the row or column at ``edge``.

        Detaches the source image. Shrinking below the minimum size
        raises GridSizeError (or returns False when not ``strict``).
        """
        edge = Edge(edge)
        width, height = self._edge_size(edge, -1)
        if width < MIN_GRID_SIZE or height < MIN_GRID_SIZE:
            error = GridSizeError(
                f"Cannot reduce grid smaller than {MIN_GRID_SIZE}x{MIN_GRID_SIZE}", width, height
            )
            if strict:
                raise error
            logger.debug("remove_edge {} ignored: {}", edge.value, error)
            return False
        return self._commit(
            f"remove_edge {edge.value}",
            self._grid.remove_edge(edge),
            self._settings.with_size(width, height),
            None,
        )

    def modify_edge(self, edge: Edge | str, action: str) -> bool:
        """Dispatch an ``"add"`` or ``"remove"`` edge intent."""
        if action == "add":
            return self.insert_edge(edge)
        if action == "remove":
            return self.remove_edge(edge)
        raise ValueError(f"Unknown edge action: {action!r}")

    # -------------------------------------------------------------------------
    # Source images
    # -------------------------------------------------------------------------

    def _image_size(self, source: SourceImage, width: int | None) -> tuple[int, int]:
        width = clamp_dimension(width if width is not None else self._settings.width)
        if self._settings.lock_aspect_ratio:
            return width, derive_height(source, width)
        return width, self._settings.height

    @_serialized
    def load_image(self, image: ImageInput, width: int | None = None) -> SourceImage:
        """
        Bind a new source image and quantize it onto the board.

        Args:
            image: Path, bytes, Pillow image or SourceImage
            width: Board width (defaults to the current width); the height
                follows the image aspect when the lock is on

        Raises:
            ImageDecodeError: If the image cannot be decoded
        """
        source = open_image(image)
        width, height = self._image_size(source, width)
        grid = self._quantize(source, width, height)
        self._commit("load_image", grid, self._settings.with_size(width, height), source, force=True)
        return source

    @_serialized
    def reprocess(self) -> bool:
        """Re-quantize the bound image at the current size with the current palette."""
        if self._source is None:
            return False
        grid = self._quantize(self._source, self._settings.width, self._settings.height)
        return self._commit("reprocess", grid, self._settings, self._source)

    def request_image(self, image: ImageInput, width: int | None = None) -> Future[SampleResult | None]:
        """Background variant of ``load_image``; the latest request wins."""
        source = open_image(image)
        with self._lock:
            width, height = self._image_size(source, width)
            return self._worker.submit(source, width, height, self._palette, self._apply_sample)

    def request_resample(self, width: int, height: int) -> Future[SampleResult | None] | None:
        """
        Background variant of ``resize``.

        Without a bound image there is nothing to sample: the crop/pad
        resize runs immediately and None is returned.
        """
        with self._lock:
            source = self._source
            if source is None:
                self.resize(width, height)
                return None
            width, height = clamp_dimension(width), clamp_dimension(height)
            return self._worker.submit(source, width, height, self._palette, self._apply_sample)

    @_serialized
    def _apply_sample(self, result: SampleResult) -> None:
        if not self._worker.is_latest(result.request_id):
            logger.debug("Dropping stale sampling result {}", result.request_id)
            return
        settings = self._settings.with_size(result.width, result.height)
        self._commit(
            f"sample #{result.request_id}",
            result.grid,
            settings,
            result.source,
            force=result.source is not self._source,
        )

    # -------------------------------------------------------------------------
    # Palette
    # -------------------------------------------------------------------------

    @_serialized
    def set_palette(self, entries: Iterable[PaletteEntry]) -> None:
        """Replace the palette wholesale. Existing beads are not re-quantized."""
        self._palette = Palette(list(entries))

    @_serialized
    def add_palette_color(self, color: str, name: str = "Custom") -> PaletteEntry | None:
        return self._palette.add(color, name)

    @_serialized
    def remove_palette_color(self, entry_id: str) -> PaletteEntry | None:
        return self._palette.remove(entry_id)

    @_serialized
    def reset_palette(self) -> None:
        self._palette.reset()

    # -------------------------------------------------------------------------
    # History
    # -------------------------------------------------------------------------

    @_serialized
    def undo(self) -> bool:
        snapshot = self._history.undo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    @_serialized
    def redo(self) -> bool:
        snapshot = self._history.redo()
        if snapshot is None:
            return False
        self._restore(snapshot)
        return True

    # -------------------------------------------------------------------------
    # Statistics
    # -------------------------------------------------------------------------

    def stats(self) -> GridStats:
        return compute_stats(self._grid, self._palette)

    @_serialized
    def merge_rare_colors(self, threshold: float | None = None) -> MergePlan:
        """
        Fold rare colors into their nearest common color.

        All substitutions land as a single history entry. When there is
        nothing to merge the returned plan is empty and carries the
        reason in ``plan.message``.
        """
        if threshold is None:
            threshold = self.config.merge_threshold
        plan = plan_merge(self._grid, self._palette, threshold)
        if plan.is_empty:
            logger.info(plan.message)
            return plan
        self._commit("merge_rare_colors", self._grid.replace_colors(plan.mapping), self._settings, self._source)
        return plan

    # -------------------------------------------------------------------------
    # Import / export
    # -------------------------------------------------------------------------

    def to_project(self) -> Project:
        return Project(grid=self._grid, settings=self._settings, palette=self._palette.copy())

    @_serialized
    def import_project(self, data: str | bytes | Project) -> Project:
        """
        Replace the board and palette from project JSON.

        Parsing happens before anything changes, so a bad file leaves the
        board untouched. Success always pushes one history entry and
        detaches the source image.

        Raises:
            ProjectReadError: If the data is not valid JSON
            ProjectFormatError: If required sections are missing
        """
        project = data if isinstance(data, Project) else loads(data)
        self._palette = project.palette.copy()
        self._commit("import_project", project.grid, project.settings, None, force=True)
        return project

    def export_project(self) -> bytes:
        return dumps(self.to_project()).encode("utf-8")

    def export_image(self, cell_size: int | None = None) -> bytes:
        """Board as PNG bytes, one solid square per bead."""
        return render_png(self._grid, cell_size or self.config.export_cell_size)

    def __repr__(self) -> str:
        return (
            f"BoardEngine("
            f"size={self.width}x{self.height}, "
            f"source={self._source!r}, "
            f"history={self._history.position + 1}/{len(self._history)})"
        )
