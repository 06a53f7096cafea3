"""
OpenCV-based camera source.

Supports:
- USB webcams (device_id as int, e.g., 0)
- RTSP/IP cameras (device_id as str URL)
- Video files (device_id as file path), mostly useful for testing

A reader thread keeps only the most recently decoded frame, so read() never
blocks the scheduler and returns None until the first frame is decoded.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import cv2

from models.config import CameraConfig
from models.errors import CameraError
from models.frame import FrameData
from .base import ObservationConfig, ObservationSource, SourceKind
from .rtsp_utils import sanitize_url


@dataclass
class CameraSourceConfig(ObservationConfig):
    """
    Configuration for the camera source.

    Attributes:
        device_id: Camera index (int), RTSP URL (str), or file path (str).
        facing_mode: Preferred camera facing ("user" or "environment"). OpenCV
            cannot select by facing, so this is recorded as a hint only.
        fps: Requested capture rate, or None for the device default.
        buffer_size: OpenCV capture buffer size (reduces latency for live feeds).
        max_read_failures: Consecutive read failures before the stream is
            considered lost.
    """
    device_id: Union[int, str] = 0
    facing_mode: str = "user"
    fps: Optional[int] = None
    buffer_size: int = 1
    max_read_failures: int = 30

    @classmethod
    def from_camera_config(cls, camera_cfg: CameraConfig, source_id: str = "camera") -> "CameraSourceConfig":
        """Adapter: Create CameraSourceConfig from the typed camera config."""
        resolution = tuple(camera_cfg.resolution) if camera_cfg.resolution else None
        return cls(
            source_id=source_id,
            resolution=resolution,
            metadata={"facing_mode": camera_cfg.facing_mode},
            device_id=camera_cfg.device_id,
            facing_mode=camera_cfg.facing_mode,
            fps=camera_cfg.fps,
            buffer_size=camera_cfg.buffer_size,
        )


class CameraSource(ObservationSource):
    """
    Live camera frame source.

    Owns the cv2.VideoCapture handle from open() until close(). The handle is
    released on every close path, including after the stream is lost.

    Example:
        source = CameraSource(CameraSourceConfig(device_id=0, resolution=(640, 480)))
        source.open()
        frame_data = source.read()   # None until the first frame is decoded
        source.close()
    """

    kind = SourceKind.CAMERA

    def __init__(self, config: CameraSourceConfig):
        super().__init__(config)
        self._camera_config = config
        self._cap: Optional[cv2.VideoCapture] = None
        self._lock = threading.Lock()
        self._latest: Optional[FrameData] = None
        self._stop = threading.Event()
        self._lost = threading.Event()
        self._reader: Optional[threading.Thread] = None
        self._size: Optional[Tuple[int, int]] = None

    @property
    def device_id(self) -> Union[int, str]:
        return self._camera_config.device_id

    @property
    def is_open(self) -> bool:
        return self._is_open and not self._lost.is_set()

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        return self._size

    def open(self) -> None:
        """
        Acquire the camera and start the reader thread.

        Raises:
            CameraError: If the device cannot be opened. The source stays closed.
        """
        if self._is_open:
            return

        cap = cv2.VideoCapture(self.device_id)
        if not cap.isOpened():
            cap.release()
            raise CameraError(f"Failed to open camera {sanitize_url(self.device_id)}")

        if isinstance(self.device_id, int):
            if self._camera_config.resolution:
                w, h = self._camera_config.resolution
                cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
                cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
            if self._camera_config.fps:
                cap.set(cv2.CAP_PROP_FPS, self._camera_config.fps)
            cap.set(cv2.CAP_PROP_BUFFERSIZE, self._camera_config.buffer_size)

        self._size = (
            int(cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
        )
        self._cap = cap
        self._latest = None
        self._frame_index = 0
        self._stop.clear()
        self._lost.clear()
        self._is_open = True

        self._reader = threading.Thread(
            target=self._read_loop, name=f"camera-{self.source_id}", daemon=True
        )
        self._reader.start()

        logging.info(
            f"CameraSource opened: source_id={self.source_id}, "
            f"device={sanitize_url(self.device_id)}, size={self._size}, "
            f"facing_mode={self._camera_config.facing_mode}"
        )

    def _read_loop(self) -> None:
        failures = 0
        cap = self._cap
        while not self._stop.is_set() and cap is not None:
            ret, frame = cap.read()
            if not ret or frame is None:
                failures += 1
                if failures >= self._camera_config.max_read_failures:
                    logging.error(
                        f"Camera {self.source_id} lost after {failures} consecutive read failures"
                    )
                    self._lost.set()
                    return
                time.sleep(0.01)
                continue

            failures = 0
            with self._lock:
                self._frame_index += 1
                self._latest = FrameData.from_numpy(
                    frame, frame_index=self._frame_index, source=self.source_id
                )
                self._size = self._latest.size

    def read(self) -> Optional[FrameData]:
        """Return the most recently decoded frame, or None if none is ready."""
        if not self.is_open:
            return None
        with self._lock:
            return self._latest

    def close(self) -> None:
        """Stop the reader and release the camera. Idempotent."""
        self._stop.set()
        if self._reader is not None:
            self._reader.join(timeout=2.0)
            self._reader = None
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logging.info(f"CameraSource closed: source_id={self.source_id}")
        self._is_open = False
        with self._lock:
            self._latest = None
