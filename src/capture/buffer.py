"""
Bounded history of captured snapshots.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from collections import deque
from pathlib import Path
from typing import Callable, Deque, List, Optional, Union

from models.capture import CapturedImage
from rendering.renderer import RenderSurface


DEFAULT_CAPACITY = 10


class CaptureBuffer:
    """
    Newest-first buffer of at most `capacity` captured images.

    Capturing at capacity evicts the oldest entry. Sequence indices keep
    increasing across evictions, so they identify a capture for its lifetime.

    Example:
        buffer = CaptureBuffer()
        image = buffer.capture(surface)
        buffer.export_one(image, "output/captures")
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, clock: Optional[Callable[[], float]] = None):
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._clock = clock or time.time
        self._entries: Deque[CapturedImage] = deque(maxlen=capacity)
        self._next_index = 1

    def __len__(self) -> int:
        return len(self._entries)

    def entries(self) -> List[CapturedImage]:
        """Entries newest first."""
        return list(self._entries)

    def get(self, sequence_index: int) -> Optional[CapturedImage]:
        for image in self._entries:
            if image.sequence_index == sequence_index:
                return image
        return None

    def clear(self) -> None:
        self._entries.clear()

    def capture(self, surface: RenderSurface) -> CapturedImage:
        """Encode the surface as PNG and prepend it to the buffer."""
        data = surface.encode(".png")
        return self.add(data)

    def add(self, data: bytes) -> CapturedImage:
        image = CapturedImage(
            data=data,
            sequence_index=self._next_index,
            captured_at=self._clock(),
        )
        self._next_index += 1
        if len(self._entries) == self.capacity:
            evicted = self._entries[-1]
            logging.debug(f"Capture buffer full, evicting capture #{evicted.sequence_index}")
        self._entries.appendleft(image)
        logging.info(f"Captured image #{image.sequence_index} ({image.size_bytes} bytes)")
        return image

    def export_one(self, image: CapturedImage, directory: Union[str, Path]) -> Path:
        """Write one capture to directory under its timestamped file name."""
        directory = Path(directory)
        if not directory.exists():
            os.makedirs(directory)
        path = directory / image.filename
        path.write_bytes(image.data)
        logging.info(f"Exported capture #{image.sequence_index} to {path}")
        return path

    async def export_all(self, directory: Union[str, Path], stagger: float = 0.1) -> List[Path]:
        """
        Export every capture in display order, newest first.

        Exports are spaced by `stagger` seconds. The entries are snapshotted
        up front, so captures taken meanwhile are not included.
        """
        images = self.entries()
        paths: List[Path] = []
        for i, image in enumerate(images):
            if i > 0 and stagger > 0:
                await asyncio.sleep(stagger)
            paths.append(self.export_one(image, directory))
        if len(images) > 1:
            logging.info(f"Exported {len(images)} captures to {directory}")
        return paths
