"""
Per-class statistics for one detection list.

Everything here is a pure function of its input; nothing is remembered
between cycles.
"""

from __future__ import annotations

from typing import Dict, Iterable, List

from models.detection import Detection
from models.stats import ClassStat, StatsSnapshot


def aggregate(detections: Iterable[Detection]) -> StatsSnapshot:
    """
    Reduce a detection list to per-class counts and confidence extremes.

    avg_confidence is the mean of all confidences, 0.0 for an empty list.
    per_class keeps the order in which labels were first seen.
    """
    counts: Dict[str, int] = {}
    maxima: Dict[str, float] = {}
    total = 0
    confidence_sum = 0.0

    for det in detections:
        total += 1
        confidence_sum += det.confidence
        name = det.class_name
        if name not in counts:
            counts[name] = 0
            maxima[name] = det.confidence
        counts[name] += 1
        maxima[name] = max(maxima[name], det.confidence)

    per_class = {
        name: ClassStat(class_name=name, count=counts[name], max_confidence=maxima[name])
        for name in counts
    }
    return StatsSnapshot(
        per_class=per_class,
        total=total,
        unique_classes=len(per_class),
        avg_confidence=confidence_sum / total if total else 0.0,
    )


def sorted_class_stats(snapshot: StatsSnapshot) -> List[ClassStat]:
    """Display rows: count descending, ties left in encounter order."""
    return snapshot.rows()


def format_class_name(class_name: str) -> str:
    # "traffic_light" -> "traffic light"
    return class_name.replace("_", " ")
