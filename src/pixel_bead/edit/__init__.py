"""Edit module - board state, history and background sampling."""

from pixel_bead.edit.history import HistoryLog, HistorySnapshot
from pixel_bead.edit.worker import SampleResult, SamplingWorker
from pixel_bead.edit.engine import BoardEngine

__all__ = [
    "HistoryLog",
    "HistorySnapshot",
    "SampleResult",
    "SamplingWorker",
    "BoardEngine",
]
