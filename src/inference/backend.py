"""
Inference backend interface.

Backends return pixel-space detections as corner boxes in the coordinate
system of the frame they were given. The gateway converts them into
models.Detection.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Protocol

import numpy as np


@dataclass(frozen=True)
class Detection:
    x1: float
    y1: float
    x2: float
    y2: float
    confidence: float = 1.0
    class_id: Optional[int] = None
    class_name: Optional[str] = None


class InferenceBackend(Protocol):
    def detect(self, frame: np.ndarray) -> List[Detection]:
        ...


# Builds a ready backend; may block (weights download, model init).
BackendFactory = Callable[[], InferenceBackend]
