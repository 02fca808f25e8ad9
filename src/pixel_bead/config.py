"""Runtime configuration.

Defaults come from ``pixel_bead.core.constants``; each field can be
overridden with a ``PIXEL_BEAD_*`` environment variable, e.g.
``PIXEL_BEAD_HISTORY_LIMIT=50`` or ``PIXEL_BEAD_RESAMPLE=lanczos``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Mapping

from pixel_bead.core.constants import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    EXPORT_CELL_SIZE,
    HISTORY_LIMIT,
    MAX_GRID_SIZE,
    MERGE_THRESHOLD,
    MIN_GRID_SIZE,
)
from pixel_bead.sample.sampler import DEFAULT_RESAMPLE, RESAMPLE_FILTERS

ENV_PREFIX = "PIXEL_BEAD_"
LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class BoardConfig:
    """Tunable defaults for a board session."""
    default_width: int = DEFAULT_WIDTH
    default_height: int = DEFAULT_HEIGHT
    history_limit: int = HISTORY_LIMIT
    export_cell_size: int = EXPORT_CELL_SIZE
    merge_threshold: float = MERGE_THRESHOLD
    resample: str = DEFAULT_RESAMPLE
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        for name in ("default_width", "default_height"):
            value = getattr(self, name)
            if not MIN_GRID_SIZE <= value <= MAX_GRID_SIZE:
                raise ValueError(f"{name} must be within {MIN_GRID_SIZE}-{MAX_GRID_SIZE}, got {value}")
        if self.history_limit < 1:
            raise ValueError(f"history_limit must be at least 1, got {self.history_limit}")
        if self.export_cell_size < 1:
            raise ValueError(f"export_cell_size must be at least 1, got {self.export_cell_size}")
        if not 0 < self.merge_threshold < 1:
            raise ValueError(f"merge_threshold must be between 0 and 1, got {self.merge_threshold}")
        if self.resample not in RESAMPLE_FILTERS:
            raise ValueError(f"resample must be one of {sorted(RESAMPLE_FILTERS)}, got {self.resample!r}")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> BoardConfig:
        """Build a config from ``PIXEL_BEAD_*`` variables."""
        env = os.environ if environ is None else environ
        values: dict[str, object] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            default = f.default
            try:
                if isinstance(default, int):
                    values[f.name] = int(raw)
                elif isinstance(default, float):
                    values[f.name] = float(raw)
                else:
                    values[f.name] = raw.strip().lower() if f.name == "resample" else raw.strip().upper()
            except ValueError:
                raise ValueError(f"Invalid value for {ENV_PREFIX}{f.name.upper()}: {raw!r}") from None
        return cls(**values)
