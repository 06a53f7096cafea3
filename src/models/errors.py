"""
Exception types raised by the detection core.
"""

from __future__ import annotations


class DetectionMonitorError(Exception):
    """Base class for all errors raised by the detection core."""


class ModelLoadError(DetectionMonitorError):
    """The detection model could not be loaded. Terminal for the session."""


class ModelNotReadyError(DetectionMonitorError):
    """An inference was requested before the model reached READY."""


class InferenceError(DetectionMonitorError):
    """A single detect call failed. Transient; the loop keeps running."""


class CameraError(DetectionMonitorError):
    """The camera could not be opened or stopped delivering frames."""


class ImageDecodeError(DetectionMonitorError):
    """An uploaded image buffer could not be decoded."""


class SchedulerError(DetectionMonitorError):
    """The scheduler was asked to start without its preconditions met."""


class NothingToCaptureError(DetectionMonitorError):
    """A capture was requested before anything was rendered."""
