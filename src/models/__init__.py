"""
Typed models for the detection monitor.

Plain dataclasses and enums shared by the gateway, frame sources, scheduler,
renderer, aggregator and capture buffer.
"""

from .frame import FrameData
from .detection import Detection, BoundingBox
from .state import ModelState, RunState, SchedulerState
from .stats import ClassStat, StatsSnapshot
from .capture import CapturedImage
from .errors import (
    DetectionMonitorError,
    ModelLoadError,
    ModelNotReadyError,
    InferenceError,
    CameraError,
    ImageDecodeError,
    SchedulerError,
    NothingToCaptureError,
)
from .config import (
    Config,
    CameraConfig,
    DetectionConfig,
    YoloConfig,
    DisplayConfig,
    CaptureConfig,
    WebConfig,
)

__all__ = [
    # Frame
    "FrameData",
    # Detection
    "Detection",
    "BoundingBox",
    # State
    "ModelState",
    "RunState",
    "SchedulerState",
    # Stats
    "ClassStat",
    "StatsSnapshot",
    # Capture
    "CapturedImage",
    # Errors
    "DetectionMonitorError",
    "ModelLoadError",
    "ModelNotReadyError",
    "InferenceError",
    "CameraError",
    "ImageDecodeError",
    "SchedulerError",
    "NothingToCaptureError",
    # Config
    "Config",
    "CameraConfig",
    "DetectionConfig",
    "YoloConfig",
    "DisplayConfig",
    "CaptureConfig",
    "WebConfig",
]
