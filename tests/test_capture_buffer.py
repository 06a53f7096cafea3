"""
Tests for the capture buffer and export.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from capture.buffer import DEFAULT_CAPACITY, CaptureBuffer
from rendering.renderer import RenderSurface


class FakeClock:
    def __init__(self, now=1700000000.0):
        self.now = now

    def __call__(self):
        self.now += 1.0
        return self.now


@pytest.fixture
def buffer():
    return CaptureBuffer(clock=FakeClock())


class TestCaptureBuffer:
    def test_default_capacity(self, buffer):
        assert buffer.capacity == DEFAULT_CAPACITY == 10
        assert len(buffer) == 0
        assert buffer.entries() == []

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            CaptureBuffer(capacity=0)

    def test_newest_first(self, buffer):
        for i in range(3):
            buffer.add(f"img{i}".encode())
        assert [e.sequence_index for e in buffer.entries()] == [3, 2, 1]
        assert buffer.entries()[0].data == b"img2"

    def test_eleventh_capture_evicts_oldest(self, buffer):
        for i in range(11):
            buffer.add(f"img{i}".encode())

        entries = buffer.entries()
        assert len(buffer) == 10
        assert [e.sequence_index for e in entries] == list(range(11, 1, -1))
        assert buffer.get(1) is None
        assert buffer.get(2).data == b"img1"

    def test_length_never_exceeds_capacity(self):
        buffer = CaptureBuffer(capacity=3)
        for i in range(20):
            buffer.add(b"x")
            assert len(buffer) == min(i + 1, 3)

    def test_capture_encodes_surface_png(self, buffer):
        surface = RenderSurface(16, 8)
        image = buffer.capture(surface)
        assert image.data.startswith(b"\x89PNG")
        assert image.sequence_index == 1
        assert image.captured_at == 1700000001.0

    def test_clear(self, buffer):
        buffer.add(b"a")
        buffer.clear()
        assert len(buffer) == 0


class TestExport:
    def test_export_one(self, buffer, tmp_path):
        image = buffer.add(b"png-bytes")
        path = buffer.export_one(image, tmp_path / "captures")
        assert path.parent == tmp_path / "captures"
        assert path.name == "detection_capture_1700000001000_1.png"
        assert path.read_bytes() == b"png-bytes"

    def test_export_all_newest_first(self, buffer, tmp_path):
        for i in range(3):
            buffer.add(f"img{i}".encode())

        paths = asyncio.run(buffer.export_all(tmp_path, stagger=0))

        assert [p.name.rsplit("_", 1)[1] for p in paths] == ["3.png", "2.png", "1.png"]
        assert all(p.exists() for p in paths)

    def test_export_all_staggers_between_files(self, buffer, tmp_path):
        for i in range(3):
            buffer.add(b"x")

        async def scenario():
            with patch("capture.buffer.asyncio.sleep", new_callable=AsyncMock) as sleep:
                paths = await buffer.export_all(tmp_path, stagger=0.1)
            return paths, sleep

        paths, sleep = asyncio.run(scenario())

        assert len(paths) == 3
        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.1)

    def test_export_all_empty(self, buffer, tmp_path):
        assert asyncio.run(buffer.export_all(tmp_path)) == []
