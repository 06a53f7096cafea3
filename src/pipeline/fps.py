"""
Windowed FPS counter.
"""

from __future__ import annotations

import time
from typing import Callable, Optional


class FpsCounter:
    """
    Counts completed cycles per closed one-second window.

    The published value only changes when a cycle completes at or after the
    window end; it is a whole number of cycles, not an instantaneous rate.
    """

    def __init__(self, window: float = 1.0, clock: Optional[Callable[[], float]] = None):
        self.window = window
        self._clock = clock or time.monotonic
        self._count = 0
        self._window_start = self._clock()
        self.fps = 0

    def reset(self) -> None:
        self._count = 0
        self._window_start = self._clock()
        self.fps = 0

    def tick(self) -> int:
        """Record one completed cycle and return the published FPS."""
        self._count += 1
        now = self._clock()
        if now - self._window_start >= self.window:
            self.fps = self._count
            self._count = 0
            self._window_start = now
        return self.fps
