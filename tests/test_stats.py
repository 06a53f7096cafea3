"""
Tests for per-class detection statistics.
"""

import pytest

from analytics.stats import aggregate, format_class_name, sorted_class_stats
from models.detection import BoundingBox, Detection


def _det(class_name, confidence):
    return Detection(BoundingBox(0, 0, 10, 10), class_name=class_name, confidence=confidence)


class TestAggregate:
    def test_empty_list(self):
        snapshot = aggregate([])
        assert snapshot.total == 0
        assert snapshot.unique_classes == 0
        assert snapshot.avg_confidence == 0.0
        assert snapshot.rows() == []

    def test_count_orders_before_confidence(self):
        snapshot = aggregate([_det("cat", 0.82), _det("cat", 0.55), _det("dog", 0.91)])

        assert snapshot.total == 3
        assert snapshot.unique_classes == 2
        assert snapshot.avg_confidence == pytest.approx(0.76)

        # cat comes first on count even though dog has the higher max.
        rows = snapshot.rows()
        assert [r.class_name for r in rows] == ["cat", "dog"]
        assert rows[0].count == 2
        assert rows[0].max_confidence == pytest.approx(0.82)
        assert rows[1].count == 1
        assert rows[1].max_confidence == pytest.approx(0.91)

    def test_counts_sum_to_total(self):
        dets = [_det(name, 0.6) for name in ["person", "car", "person", "bus", "car", "person"]]
        snapshot = aggregate(dets)
        assert sum(s.count for s in snapshot.per_class.values()) == snapshot.total == len(dets)
        assert snapshot.unique_classes == len(snapshot.per_class) == 3

    def test_max_confidence_not_first_seen(self):
        snapshot = aggregate([_det("car", 0.4), _det("car", 0.95), _det("car", 0.7)])
        assert snapshot.per_class["car"].max_confidence == pytest.approx(0.95)

    def test_ties_keep_encounter_order(self):
        snapshot = aggregate([_det("dog", 0.6), _det("cat", 0.9), _det("bird", 0.8), _det("cat", 0.7)])
        assert [r.class_name for r in sorted_class_stats(snapshot)] == ["cat", "dog", "bird"]

    def test_no_state_between_calls(self):
        aggregate([_det("cat", 0.9)] * 5)
        snapshot = aggregate([_det("dog", 0.5)])
        assert list(snapshot.per_class) == ["dog"]
        assert snapshot.total == 1

    def test_accepts_generator(self):
        snapshot = aggregate(_det("cat", c) for c in (0.5, 0.7))
        assert snapshot.total == 2
        assert snapshot.avg_confidence == pytest.approx(0.6)


def test_format_class_name():
    assert format_class_name("traffic_light") == "traffic light"
    assert format_class_name("cat") == "cat"
