"""
Capture buffer: bounded newest-first history of render snapshots.
"""

from .buffer import CaptureBuffer, DEFAULT_CAPACITY

__all__ = ["CaptureBuffer", "DEFAULT_CAPACITY"]
