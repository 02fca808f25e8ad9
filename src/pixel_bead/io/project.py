"""Project files - JSON save/load of a board with its palette.

Current format (version 1.1), one bead per cell in row-major order:
{
  "version": "1.1",
  "timestamp": "2024-05-01T12:00:00+00:00",
  "settings": {"width": 15, "height": 15, "lockAspectRatio": true},
  "palette": [{"id": "red1", "hex": "#EE4256", "name": "1"}],
  "beads": [{"x": 0, "y": 0, "hex": "#FFFFFF"}, ...]
}

Older files carry a "grid" matrix instead of "beads"; the matrix is
taken as-is and its own shape wins over "settings".
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from loguru import logger

from pixel_bead.core.constants import MAX_GRID_SIZE, MIN_GRID_SIZE, PROJECT_VERSION, WHITE
from pixel_bead.core.grid import Grid, GridSettings, canonical_cell, grid_from_beads, size_in_range
from pixel_bead.core.palette import Palette
from pixel_bead.errors import ExportError, ProjectFormatError, ProjectReadError


@dataclass
class Project:
    """Everything a project file stores."""
    grid: Grid
    settings: GridSettings
    palette: Palette = field(default_factory=Palette.default)
    version: str = PROJECT_VERSION
    timestamp: str | None = None


class ProjectWriter:
    """Serialize a Project to the current JSON format."""

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def render(self, project: Project) -> str:
        return json.dumps(self.to_dict(project), indent=self.indent, ensure_ascii=False)

    def to_dict(self, project: Project) -> dict[str, Any]:
        timestamp = project.timestamp or datetime.now(timezone.utc).isoformat()
        return {
            "version": PROJECT_VERSION,
            "timestamp": timestamp,
            "settings": project.settings.to_dict(),
            "palette": project.palette.to_dicts(),
            "beads": [
                {"x": x, "y": y, "hex": color}
                for x, y, color in project.grid.cells()
            ],
        }


class ProjectParser:
    """
    Parse project JSON back into a Project.

    Accepts the ``beads`` list form and the legacy ``grid`` matrix.
    A file without ``settings`` and ``palette`` is rejected.
    """

    def parse(self, data: str | bytes) -> Project:
        try:
            payload = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ProjectReadError(f"Failed to parse JSON file: {exc}") from exc
        return self.from_dict(payload)

    def from_dict(self, data: Any) -> Project:
        if not isinstance(data, dict):
            raise ProjectReadError("Failed to parse JSON file: top level is not an object")
        if not data.get("settings") or "palette" not in data:
            raise ProjectFormatError("Invalid project file format.")

        settings_data = data["settings"]
        palette_data = data["palette"]
        if not isinstance(settings_data, dict) or not isinstance(palette_data, list):
            raise ProjectFormatError("Invalid project file format.")

        palette = Palette.from_dicts(p for p in palette_data if isinstance(p, dict))
        settings = self._parse_settings(settings_data)

        beads = data.get("beads")
        legacy = data.get("grid")
        if isinstance(beads, list):
            grid = grid_from_beads(settings.width, settings.height, beads)
        elif isinstance(legacy, list):
            grid = self._parse_legacy_grid(legacy)
            settings = settings.with_size(grid.width, grid.height)
        else:
            grid = Grid.blank(settings.width, settings.height)

        return Project(
            grid=grid,
            settings=settings,
            palette=palette,
            version=str(data.get("version", PROJECT_VERSION)),
            timestamp=data.get("timestamp"),
        )

    def _parse_settings(self, data: dict[str, Any]) -> GridSettings:
        width = data.get("width")
        height = data.get("height")
        if not isinstance(width, int) or not isinstance(height, int):
            raise ProjectFormatError("Invalid project file format: settings need integer width and height.")
        if not size_in_range(width, height):
            raise ProjectFormatError(
                f"Board size {width}x{height} is outside {MIN_GRID_SIZE}-{MAX_GRID_SIZE}."
            )
        return GridSettings(width, height, bool(data.get("lockAspectRatio", True)))

    def _parse_legacy_grid(self, matrix: list[Any]) -> Grid:
        rows = [row for row in matrix if isinstance(row, list)]
        if not rows or not any(rows):
            raise ProjectFormatError("Invalid project file format: empty grid.")
        # Ragged rows are padded to the widest one
        width = max(len(row) for row in rows)
        if not size_in_range(width, len(rows)):
            raise ProjectFormatError(
                f"Board size {width}x{len(rows)} is outside {MIN_GRID_SIZE}-{MAX_GRID_SIZE}."
            )
        cells = [
            [canonical_cell(c) if isinstance(c, str) else WHITE for c in row] + [WHITE] * (width - len(row))
            for row in rows
        ]
        return Grid.from_rows(cells)


def dumps(project: Project, indent: int | None = 2) -> str:
    return ProjectWriter(indent).render(project)


def loads(data: str | bytes) -> Project:
    return ProjectParser().parse(data)


def save_project(project: Project, path: str | Path) -> None:
    """
    Write a project file.

    Raises:
        ExportError: If the file cannot be written
    """
    path = Path(path)
    try:
        path.write_text(dumps(project), encoding="utf-8")
    except OSError as exc:
        raise ExportError(f"Export failed: {exc}") from exc
    logger.info("Saved project {}x{} to {}", project.grid.width, project.grid.height, path)


def load_project(path: str | Path) -> Project:
    """
    Read a project file.

    Raises:
        ProjectReadError: If the file cannot be read or is not JSON
        ProjectFormatError: If required sections are missing
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ProjectReadError(f"Cannot read {path}: {exc}") from exc
    project = loads(data)
    logger.info("Loaded project {}x{} from {}", project.grid.width, project.grid.height, path)
    return project
