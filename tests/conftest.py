"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import cv2
import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
camera:
  device_id: 0
  resolution: [640, 480]
  facing_mode: "user"

detection:
  backend: "yolo"
  yolo:
    model: "yolov8n.pt"
    conf_threshold: 0.25

display:
  display_fps: 60

capture:
  capacity: 10
  export_dir: "output/captures"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "camera": {
            "device_id": 0,
            "resolution": [640, 480],
            "facing_mode": "user",
        },
        "detection": {
            "backend": "yolo",
            "yolo": {"model": "yolov8n.pt", "conf_threshold": 0.25, "iou_threshold": 0.45},
        },
        "display": {"display_fps": 60},
        "capture": {"capacity": 10, "export_dir": "output/captures", "export_stagger": 0.1},
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def frame():
    """A 320x240 BGR test frame with a bright square in it."""
    img = np.zeros((240, 320, 3), dtype=np.uint8)
    img[60:180, 100:220] = (200, 120, 40)
    return img


@pytest.fixture
def png_bytes(frame):
    ok, buf = cv2.imencode(".png", frame)
    assert ok
    return buf.tobytes()
