"""
Aggregated per-class statistics for a single detection cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class ClassStat:
    """
    Per-class summary of one detection list.

    Attributes:
        class_name: Class label.
        count: Number of detections with this label.
        max_confidence: Highest confidence seen for this label.
    """
    class_name: str
    count: int
    max_confidence: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "class_name": self.class_name,
            "count": self.count,
            "max_confidence": self.max_confidence,
        }


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Result of aggregating one detection list.

    per_class keeps encounter order so that display ordering can break count
    ties stably.
    """
    per_class: Dict[str, ClassStat] = field(default_factory=dict)
    total: int = 0
    unique_classes: int = 0
    avg_confidence: float = 0.0

    def rows(self) -> List[ClassStat]:
        """Per-class rows ordered by count descending, ties in encounter order."""
        return sorted(self.per_class.values(), key=lambda s: s.count, reverse=True)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "unique_classes": self.unique_classes,
            "avg_confidence": self.avg_confidence,
            "rows": [s.to_dict() for s in self.rows()],
        }
