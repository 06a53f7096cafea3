"""
Static image frame source.

Holds one decoded still image. read() returns the same frame every time, so
the scheduler can treat it like any other source for a one-shot pass.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

import cv2
import numpy as np

from models.errors import ImageDecodeError
from models.frame import FrameData
from .base import ObservationConfig, ObservationSource, SourceKind


class StaticImageSource(ObservationSource):
    """Immutable after construction; open/close only toggle availability."""

    kind = SourceKind.STATIC_IMAGE

    def __init__(self, image: np.ndarray, config: Optional[ObservationConfig] = None):
        super().__init__(config or ObservationConfig(source_id="upload"))
        if image is None or image.ndim not in (2, 3) or image.size == 0:
            raise ImageDecodeError("Image must be a non-empty 2D or 3D array")
        if image.ndim == 2:
            image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
        image = image.copy()
        image.setflags(write=False)
        self._frame_data = FrameData.from_numpy(image, frame_index=1, source=self.source_id)

    @classmethod
    def from_bytes(cls, data: bytes, source_id: str = "upload") -> "StaticImageSource":
        """
        Decode an encoded image buffer (PNG, JPEG, ...).

        Raises:
            ImageDecodeError: If the buffer is empty or not a decodable image.
        """
        if not data:
            raise ImageDecodeError("Empty image buffer")
        buf = np.frombuffer(data, dtype=np.uint8)
        image = cv2.imdecode(buf, cv2.IMREAD_COLOR)
        if image is None:
            raise ImageDecodeError("Unsupported or malformed image data")
        logging.info(f"Decoded static image: {image.shape[1]}x{image.shape[0]} ({len(data)} bytes)")
        return cls(image, ObservationConfig(source_id=source_id))

    @property
    def size(self) -> Tuple[int, int]:
        return self._frame_data.size

    def open(self) -> None:
        self._is_open = True
        self._frame_index = 1

    def read(self) -> Optional[FrameData]:
        if not self._is_open:
            return None
        return self._frame_data

    def close(self) -> None:
        self._is_open = False
