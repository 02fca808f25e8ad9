"""Tests for background sampling and last-request-wins supersession."""

import threading

import pytest
from PIL import Image

import pixel_bead.edit.worker as worker_module
from pixel_bead.edit.engine import BoardEngine
from pixel_bead.edit.worker import SampleResult, SamplingWorker
from pixel_bead.sample.sampler import SourceImage

RED = "#FF0000"
BLUE = "#0000FF"

TIMEOUT = 10


@pytest.fixture
def gate(monkeypatch: pytest.MonkeyPatch) -> threading.Event:
    """Hold every background sampling job until the event is set."""
    event = threading.Event()
    real = worker_module.quantize_image

    def gated(*args, **kwargs):
        event.wait(TIMEOUT)
        return real(*args, **kwargs)

    monkeypatch.setattr(worker_module, "quantize_image", gated)
    yield event
    event.set()


class TestSamplingWorker:
    """Tests for SamplingWorker on its own."""

    def test_result_delivered(self, split_image: Image.Image) -> None:
        received: list[SampleResult] = []
        worker = SamplingWorker()
        try:
            future = worker.submit(SourceImage(split_image), 10, 5, [RED, BLUE], received.append)
            result = future.result(TIMEOUT)
        finally:
            worker.shutdown()
        assert result is not None
        assert received == [result]
        assert result.grid.rows[0] == (RED,) * 5 + (BLUE,) * 5
        assert (result.width, result.height) == (10, 5)

    def test_ids_increase(self, split_image: Image.Image) -> None:
        worker = SamplingWorker()
        source = SourceImage(split_image)
        try:
            first = worker.submit(source, 5, 5, [RED], lambda r: None)
            second = worker.submit(source, 6, 6, [RED], lambda r: None)
            second.result(TIMEOUT)
            first.result(TIMEOUT)
        finally:
            worker.shutdown()
        assert worker.latest_request == 2
        assert worker.is_latest(2)
        assert not worker.is_latest(1)
        assert not worker.processing

    def test_superseded_result_dropped(self, split_image: Image.Image, gate: threading.Event) -> None:
        received: list[SampleResult] = []
        worker = SamplingWorker()
        source = SourceImage(split_image)
        try:
            first = worker.submit(source, 5, 5, [RED, BLUE], received.append)
            second = worker.submit(source, 8, 8, [RED, BLUE], received.append)
            assert worker.processing
            gate.set()
            assert first.result(TIMEOUT) is None
            assert second.result(TIMEOUT) is not None
        finally:
            worker.shutdown()
        assert [r.request_id for r in received] == [2]


class TestEngineRequests:
    """Tests for the engine's background entry points."""

    def test_request_image(self, engine: BoardEngine, split_image: Image.Image) -> None:
        future = engine.request_image(split_image, width=10)
        result = future.result(TIMEOUT)
        assert result is not None
        assert (engine.width, engine.height) == (10, 5)
        assert engine.source_image is result.source
        assert engine.history_length == 2
        assert not engine.processing

    def test_request_resample_without_source(self, engine: BoardEngine) -> None:
        assert engine.request_resample(8, 6) is None
        assert (engine.width, engine.height) == (8, 6)
        assert engine.history_length == 2

    def test_request_resample(self, engine: BoardEngine, split_image: Image.Image) -> None:
        engine.load_image(split_image, width=10)
        engine.request_resample(20, 10).result(TIMEOUT)
        assert (engine.width, engine.height) == (20, 10)
        assert engine.grid.rows[0] == (RED,) * 10 + (BLUE,) * 10
        assert engine.history_length == 3

    def test_latest_request_wins(
        self, engine: BoardEngine, split_image: Image.Image, gate: threading.Event
    ) -> None:
        engine.load_image(split_image, width=10)
        first = engine.request_resample(20, 10)
        second = engine.request_resample(12, 6)
        assert engine.processing
        assert (engine.width, engine.height) == (10, 5)

        gate.set()
        assert first.result(TIMEOUT) is None
        assert second.result(TIMEOUT) is not None
        assert (engine.width, engine.height) == (12, 6)
        assert engine.history_length == 3
        assert not engine.processing

    def test_edits_while_processing(
        self, engine: BoardEngine, split_image: Image.Image, gate: threading.Event
    ) -> None:
        engine.load_image(split_image, width=10)
        future = engine.request_resample(20, 10)
        engine.set_cell(0, 0, BLUE)
        assert engine.grid[0, 0] == BLUE
        gate.set()
        future.result(TIMEOUT)
        assert (engine.width, engine.height) == (20, 10)
        assert engine.grid[0, 0] == RED
        assert engine.history_length == 4
