"""Background image sampling with last-request-wins supersession.

Sampling is the only board work allowed off the caller's thread. Each
request gets a monotonically increasing id; when a job finishes its
result is handed to the callback only if no newer request has been
submitted since. Older results are dropped without touching the board.
"""

from __future__ import annotations

import itertools
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable

from loguru import logger

from pixel_bead.core.grid import Grid
from pixel_bead.core.palette import PaletteEntry
from pixel_bead.sample.sampler import DEFAULT_RESAMPLE, SourceImage, quantize_image


@dataclass(frozen=True, slots=True)
class SampleResult:
    """A finished sampling job."""
    request_id: int
    source: SourceImage
    width: int
    height: int
    grid: Grid


class SamplingWorker:
    """
    Single-thread executor for sampling jobs.

    ``processing`` is true while the most recent request is still
    running. There is no cancellation: a superseded job runs to
    completion and its result is discarded.
    """

    def __init__(self, resample: str = DEFAULT_RESAMPLE) -> None:
        self._resample = resample
        self._executor: ThreadPoolExecutor | None = None
        self._ids = itertools.count(1)
        self._latest = 0
        self._latest_future: Future[SampleResult | None] | None = None
        self._lock = threading.Lock()

    @property
    def latest_request(self) -> int:
        return self._latest

    @property
    def processing(self) -> bool:
        with self._lock:
            return self._latest_future is not None and not self._latest_future.done()

    def is_latest(self, request_id: int) -> bool:
        with self._lock:
            return request_id == self._latest

    def submit(
        self,
        source: SourceImage,
        width: int,
        height: int,
        palette: Iterable[PaletteEntry | str],
        on_result: Callable[[SampleResult], None],
    ) -> Future[SampleResult | None]:
        """
        Queue a sampling job.

        Args:
            source: Image to sample
            width: Target columns
            height: Target rows
            palette: Palette snapshot to quantize against
            on_result: Called on the worker thread with the result, only
                if this is still the latest request when it completes

        Returns:
            Future resolving to the result, or None if it was superseded
        """
        entries = list(palette)
        with self._lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pixel-bead-sample")
            request_id = next(self._ids)
            self._latest = request_id
            future = self._executor.submit(self._run, request_id, source, width, height, entries, on_result)
            self._latest_future = future
        logger.debug("Sampling request {} queued ({}x{})", request_id, width, height)
        return future

    def _run(
        self,
        request_id: int,
        source: SourceImage,
        width: int,
        height: int,
        palette: list[PaletteEntry | str],
        on_result: Callable[[SampleResult], None],
    ) -> SampleResult | None:
        grid = quantize_image(source, width, height, palette, self._resample)
        result = SampleResult(request_id, source, width, height, grid)
        if not self.is_latest(request_id):
            logger.debug("Sampling request {} superseded by {}, discarding", request_id, self._latest)
            return None
        on_result(result)
        return result

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
