"""
CapturedImage model for snapshots of the render surface.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CapturedImage:
    """
    An encoded snapshot held by the capture buffer.

    Attributes:
        data: Encoded image bytes (PNG).
        sequence_index: Monotonic capture number, starting at 1.
        captured_at: Unix timestamp of the capture.
        content_type: MIME type of data.
    """
    data: bytes
    sequence_index: int
    captured_at: float
    content_type: str = "image/png"

    @property
    def filename(self) -> str:
        """Export file name built from the capture timestamp and index."""
        millis = int(self.captured_at * 1000)
        return f"detection_capture_{millis}_{self.sequence_index}.png"

    @property
    def size_bytes(self) -> int:
        return len(self.data)
