"""
ObservationSource interface for the frame source variants.

Two variants exist:
- CameraSource: a live camera stream that owns a hardware handle.
- StaticImageSource: a single decoded still image.

Exactly one of them is active at a time; FrameSourceManager enforces that.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from models.frame import FrameData


class SourceKind(str, Enum):
    CAMERA = "camera"
    STATIC_IMAGE = "static_image"


@dataclass
class ObservationConfig:
    """
    Base configuration for observation sources.

    Attributes:
        source_id: Identifier for this source (e.g., "camera", "upload").
        resolution: Preferred resolution as (width, height). None = source default.
        metadata: Additional source-specific configuration.
    """
    source_id: str = "default"
    resolution: Optional[Tuple[int, int]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class ObservationSource(ABC):
    """
    Abstract base class for frame sources.

    Lifecycle:
        1. Create instance with config
        2. Call open() to acquire the underlying resource
        3. Call read() to get the current frame (None while not ready)
        4. Call close() to release resources

    Can also be used as a context manager.
    """

    kind: SourceKind

    def __init__(self, config: ObservationConfig):
        self._config = config
        self._is_open = False
        self._frame_index = 0

    @property
    def source_id(self) -> str:
        """Unique identifier for this source."""
        return self._config.source_id

    @property
    def is_open(self) -> bool:
        """Whether the source is currently open and may deliver frames."""
        return self._is_open

    @property
    def frame_index(self) -> int:
        """Number of frames decoded since open."""
        return self._frame_index

    @property
    @abstractmethod
    def size(self) -> Optional[Tuple[int, int]]:
        """Native (width, height) of the frames, or None if not known yet."""

    @abstractmethod
    def open(self) -> None:
        """
        Acquire the source.

        Raises:
            CameraError / ImageDecodeError: If the source cannot be opened.
        """

    @abstractmethod
    def read(self) -> Optional[FrameData]:
        """
        Return the current frame.

        Returns None when no decoded frame is ready yet or the source is closed.
        """

    @abstractmethod
    def close(self) -> None:
        """
        Release the source. Safe to call multiple times.
        """

    def __enter__(self) -> "ObservationSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
