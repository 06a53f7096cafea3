"""
Tests for the typed models.
"""

import numpy as np

from inference.backend import Detection as BackendDetection
from models.capture import CapturedImage
from models.detection import BoundingBox, Detection, detections_to_dicts
from models.frame import FrameData
from models.stats import ClassStat, StatsSnapshot


class TestBoundingBox:
    def test_from_xyxy(self):
        bbox = BoundingBox.from_xyxy(10, 20, 110, 70)
        assert bbox.as_tuple() == (10, 20, 100, 50)

    def test_as_int_tuple_rounds(self):
        bbox = BoundingBox(x=10.6, y=20.4, width=29.5, height=40.49)
        assert bbox.as_int_tuple() == (11, 20, 30, 40)


class TestDetection:
    def test_label_rounds_percent(self):
        det = Detection(BoundingBox(0, 0, 10, 10), class_name="cat", confidence=0.876)
        assert det.percent == 88
        assert det.label == "cat 88%"

    def test_from_backend_detection(self):
        raw = BackendDetection(x1=5, y1=10, x2=55, y2=40, confidence=0.9, class_id=15, class_name="cat")
        det = Detection.from_backend_detection(raw, captured_at=123.0)
        assert det.bbox.as_tuple() == (5, 10, 50, 30)
        assert det.class_name == "cat"
        assert det.confidence == 0.9
        assert det.captured_at == 123.0

    def test_from_backend_detection_without_name(self):
        raw = BackendDetection(x1=0, y1=0, x2=1, y2=1, class_id=3)
        assert Detection.from_backend_detection(raw).class_name == "3"

        raw = BackendDetection(x1=0, y1=0, x2=1, y2=1)
        assert Detection.from_backend_detection(raw).class_name == "unknown"

    def test_to_dict(self):
        det = Detection(BoundingBox(1, 2, 3, 4), class_name="dog", confidence=0.5, captured_at=9.0)
        assert detections_to_dicts([det]) == [{
            "bbox": [1, 2, 3, 4],
            "class_name": "dog",
            "confidence": 0.5,
            "captured_at": 9.0,
        }]


class TestStatsSnapshot:
    def test_empty(self):
        snapshot = StatsSnapshot()
        assert snapshot.rows() == []
        assert snapshot.to_dict() == {
            "total": 0,
            "unique_classes": 0,
            "avg_confidence": 0.0,
            "rows": [],
        }

    def test_rows_sorted_by_count(self):
        snapshot = StatsSnapshot(
            per_class={
                "dog": ClassStat("dog", 1, 0.6),
                "cat": ClassStat("cat", 2, 0.9),
            },
            total=3,
            unique_classes=2,
        )
        assert [r.class_name for r in snapshot.rows()] == ["cat", "dog"]


class TestCapturedImage:
    def test_filename_uses_timestamp_and_index(self):
        image = CapturedImage(data=b"abc", sequence_index=4, captured_at=1700000000.1234)
        assert image.filename == "detection_capture_1700000000123_4.png"
        assert image.size_bytes == 3
        assert image.content_type == "image/png"


class TestFrameData:
    def test_from_numpy(self):
        frame = np.zeros((480, 640, 3), dtype=np.uint8)
        fd = FrameData.from_numpy(frame, timestamp=1.0, frame_index=7, source="camera")
        assert fd.size == (640, 480)
        assert fd.timestamp == 1.0
        assert fd.frame_index == 7
        assert fd.source == "camera"

    def test_from_numpy_defaults_timestamp(self):
        fd = FrameData.from_numpy(np.zeros((2, 3), dtype=np.uint8))
        assert fd.size == (3, 2)
        assert fd.timestamp > 0
