"""
Tests for the model gateway lifecycle.
"""

import asyncio

import numpy as np
import pytest

from inference.backend import Detection as BackendDetection
from inference.gateway import ModelGateway
from models.errors import InferenceError, ModelLoadError, ModelNotReadyError
from models.state import ModelState


class MockBackend:
    """Backend returning canned corner-box detections."""

    def __init__(self, detections=None, error=None):
        self.detections = detections or []
        self.error = error
        self.frames = []

    def detect(self, frame):
        self.frames.append(frame)
        if self.error is not None:
            raise self.error
        return list(self.detections)


class CountingFactory:
    def __init__(self, backend=None, error=None):
        self.backend = backend or MockBackend()
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.backend


@pytest.fixture
def frame():
    return np.zeros((48, 64, 3), dtype=np.uint8)


class TestLoad:
    def test_initial_state(self):
        gateway = ModelGateway(CountingFactory())
        assert gateway.state is ModelState.UNLOADED
        assert not gateway.is_ready
        assert gateway.error is None

    def test_load_success(self):
        factory = CountingFactory()
        gateway = ModelGateway(factory)
        assert asyncio.run(gateway.load()) is ModelState.READY
        assert gateway.is_ready
        assert factory.calls == 1

    def test_load_failure_is_terminal(self):
        factory = CountingFactory(error=RuntimeError("weights not found"))
        gateway = ModelGateway(factory)

        async def scenario():
            first = await gateway.load()
            second = await gateway.load()
            return first, second

        first, second = asyncio.run(scenario())
        assert first is second is ModelState.FAILED
        assert factory.calls == 1
        assert isinstance(gateway.error, ModelLoadError)
        assert "weights not found" in str(gateway.error)

    def test_concurrent_loads_share_one_call(self):
        factory = CountingFactory()
        gateway = ModelGateway(factory)

        async def scenario():
            return await asyncio.gather(gateway.load(), gateway.load(), gateway.load())

        states = asyncio.run(scenario())
        assert states == [ModelState.READY] * 3
        assert factory.calls == 1

    def test_loading_state_visible_during_load(self):
        gateway = ModelGateway(CountingFactory())
        seen = []

        async def scenario():
            task = asyncio.ensure_future(gateway.load())
            await asyncio.sleep(0)
            seen.append(gateway.state)
            await task

        asyncio.run(scenario())
        assert seen == [ModelState.LOADING]
        assert gateway.state is ModelState.READY

    def test_reload_after_ready_is_noop(self):
        factory = CountingFactory()
        gateway = ModelGateway(factory)

        async def scenario():
            await gateway.load()
            return await gateway.load()

        assert asyncio.run(scenario()) is ModelState.READY
        assert factory.calls == 1


class TestDetect:
    def test_detect_before_load_raises(self, frame):
        gateway = ModelGateway(CountingFactory())
        with pytest.raises(ModelNotReadyError):
            asyncio.run(gateway.detect(frame))

    def test_detect_after_failed_load_raises(self, frame):
        gateway = ModelGateway(CountingFactory(error=RuntimeError("boom")))

        async def scenario():
            await gateway.load()
            await gateway.detect(frame)

        with pytest.raises(ModelNotReadyError):
            asyncio.run(scenario())

    def test_detect_converts_boxes(self, frame):
        backend = MockBackend([
            BackendDetection(x1=10, y1=20, x2=30, y2=60, confidence=0.88, class_id=15, class_name="cat"),
            BackendDetection(x1=0, y1=0, x2=5, y2=5, confidence=0.4, class_id=16, class_name="dog"),
        ])
        gateway = ModelGateway(CountingFactory(backend))

        async def scenario():
            await gateway.load()
            return await gateway.detect(frame)

        detections = asyncio.run(scenario())
        assert [d.class_name for d in detections] == ["cat", "dog"]
        assert detections[0].bbox.as_tuple() == (10, 20, 20, 40)
        assert detections[0].confidence == pytest.approx(0.88)
        assert detections[0].captured_at is not None
        assert backend.frames[0] is frame

    def test_empty_result(self, frame):
        gateway = ModelGateway(CountingFactory())

        async def scenario():
            await gateway.load()
            return await gateway.detect(frame)

        assert asyncio.run(scenario()) == []

    def test_backend_error_becomes_inference_error(self, frame):
        backend = MockBackend(error=ValueError("bad tensor"))
        gateway = ModelGateway(CountingFactory(backend))

        async def scenario():
            await gateway.load()
            with pytest.raises(InferenceError):
                await gateway.detect(frame)
            # The gateway stays usable for the next frame.
            backend.error = None
            return await gateway.detect(frame)

        assert asyncio.run(scenario()) == []
        assert gateway.is_ready
