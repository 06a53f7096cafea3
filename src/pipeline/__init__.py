"""
Pipeline module: the detection scheduler and its FPS counter.

The scheduler orchestrates the per-frame flow:
- Frame acquisition from the active frame source
- One detect call at a time through the model gateway
- Drawing onto the render surface
- Publishing detections and FPS to registered callbacks
"""

from .fps import FpsCounter
from .scheduler import (
    CycleResult,
    DetectionScheduler,
    SchedulerConfig,
    SchedulerStats,
)

__all__ = [
    "FpsCounter",
    "CycleResult",
    "DetectionScheduler",
    "SchedulerConfig",
    "SchedulerStats",
]
