"""
Detection models for object detection results.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    A bounding box in pixel coordinates of the render surface.

    Attributes:
        x: Left edge x coordinate.
        y: Top edge y coordinate.
        width: Box width in pixels.
        height: Box height in pixels.
    """
    x: float
    y: float
    width: float
    height: float

    def as_tuple(self) -> Tuple[float, float, float, float]:
        """Return as (x, y, width, height) tuple."""
        return (self.x, self.y, self.width, self.height)

    def as_int_tuple(self) -> Tuple[int, int, int, int]:
        """Return as integer (x, y, width, height) tuple, rounded."""
        return (
            int(round(self.x)),
            int(round(self.y)),
            int(round(self.width)),
            int(round(self.height)),
        )

    @classmethod
    def from_xyxy(cls, x1: float, y1: float, x2: float, y2: float) -> "BoundingBox":
        """Create from corner (x1, y1, x2, y2) format."""
        return cls(x=x1, y=y1, width=x2 - x1, height=y2 - y1)


@dataclass(frozen=True)
class Detection:
    """
    A single detection produced by the model gateway.

    Attributes:
        bbox: Bounding box in pixel coordinates of the render surface.
        class_name: Human-readable class label.
        confidence: Detection confidence score (0-1).
        captured_at: Unix timestamp of the inference that produced it.
    """
    bbox: BoundingBox
    class_name: str
    confidence: float
    captured_at: Optional[float] = None

    @property
    def percent(self) -> int:
        """Confidence as a percentage rounded to the nearest integer."""
        return int(round(self.confidence * 100))

    @property
    def label(self) -> str:
        return f"{self.class_name} {self.percent}%"

    @classmethod
    def from_backend_detection(cls, det, captured_at: Optional[float] = None) -> "Detection":
        """
        Adapter: Convert from inference.backend.Detection (corner box) to models.Detection.

        Args:
            det: A backend detection with x1, y1, x2, y2, confidence, class_id, class_name.
            captured_at: Timestamp to stamp on the detection.
        """
        class_name = getattr(det, "class_name", None)
        if not class_name:
            class_id = getattr(det, "class_id", None)
            class_name = str(class_id) if class_id is not None else "unknown"
        return cls(
            bbox=BoundingBox.from_xyxy(det.x1, det.y1, det.x2, det.y2),
            class_name=class_name,
            confidence=float(getattr(det, "confidence", 1.0)),
            captured_at=captured_at,
        )

    def to_dict(self) -> dict:
        return {
            "bbox": list(self.bbox.as_tuple()),
            "class_name": self.class_name,
            "confidence": self.confidence,
            "captured_at": self.captured_at,
        }


def detections_to_dicts(detections: List[Detection]) -> List[dict]:
    """Serialize a detection list for the web layer."""
    return [d.to_dict() for d in detections]
