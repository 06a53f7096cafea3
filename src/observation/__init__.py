"""
Observation layer: the frame source variants.

A frame source is either a live camera (CameraSource) or a single decoded
still image (StaticImageSource). FrameSourceManager keeps exactly one of them
active and releases the previous one on every switch.
"""

from .base import ObservationSource, ObservationConfig, SourceKind
from .camera_source import CameraSource, CameraSourceConfig
from .image_source import StaticImageSource
from .manager import FrameSourceManager

__all__ = [
    "ObservationSource",
    "ObservationConfig",
    "SourceKind",
    "CameraSource",
    "CameraSourceConfig",
    "StaticImageSource",
    "FrameSourceManager",
]
