"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union


@dataclass
class CameraConfig:
    """Camera configuration."""
    device_id: Union[int, str] = 0
    resolution: List[int] = field(default_factory=lambda: [640, 480])
    facing_mode: str = "user"
    fps: Optional[int] = None
    buffer_size: int = 1
    open_timeout: float = 5.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CameraConfig":
        """Adapter: Create from config dictionary."""
        return cls(
            device_id=d.get("device_id", 0),
            resolution=list(d.get("resolution", [640, 480])),
            facing_mode=d.get("facing_mode", "user"),
            fps=d.get("fps"),
            buffer_size=d.get("buffer_size", 1),
            open_timeout=float(d.get("open_timeout", 5.0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_id": self.device_id,
            "resolution": self.resolution,
            "facing_mode": self.facing_mode,
            "fps": self.fps,
            "buffer_size": self.buffer_size,
            "open_timeout": self.open_timeout,
        }


@dataclass
class YoloConfig:
    """YOLO detector configuration."""
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    classes: Optional[Sequence[int]] = None
    class_name_overrides: Optional[Dict[int, str]] = None

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "YoloConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=float(d.get("conf_threshold", 0.25)),
            iou_threshold=float(d.get("iou_threshold", 0.45)),
            classes=d.get("classes"),
            class_name_overrides=d.get("class_name_overrides"),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
        }
        if self.classes is not None:
            d["classes"] = list(self.classes)
        if self.class_name_overrides is not None:
            d["class_name_overrides"] = self.class_name_overrides
        return d


@dataclass
class DetectionConfig:
    """Detection configuration."""
    backend: str = "yolo"
    yolo: YoloConfig = field(default_factory=YoloConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            backend=d.get("backend", "yolo"),
            yolo=YoloConfig.from_dict(d.get("yolo") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"backend": self.backend, "yolo": self.yolo.to_dict()}


@dataclass
class DisplayConfig:
    """Scheduler tick cadence and render surface defaults."""
    display_fps: float = 60.0
    line_width: int = 3
    font_scale: float = 0.5

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.display_fps

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DisplayConfig":
        return cls(
            display_fps=float(d.get("display_fps", 60.0)),
            line_width=int(d.get("line_width", 3)),
            font_scale=float(d.get("font_scale", 0.5)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "display_fps": self.display_fps,
            "line_width": self.line_width,
            "font_scale": self.font_scale,
        }


@dataclass
class CaptureConfig:
    """Capture buffer and export settings."""
    capacity: int = 10
    export_dir: str = "output/captures"
    export_stagger: float = 0.1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CaptureConfig":
        return cls(
            capacity=int(d.get("capacity", 10)),
            export_dir=d.get("export_dir", "output/captures"),
            export_stagger=float(d.get("export_stagger", 0.1)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "export_dir": self.export_dir,
            "export_stagger": self.export_stagger,
        }


@dataclass
class WebConfig:
    """Web server settings."""
    host: str = "0.0.0.0"
    port: int = 5000

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "WebConfig":
        return cls(host=d.get("host", "0.0.0.0"), port=int(d.get("port", 5000)))

    def to_dict(self) -> Dict[str, Any]:
        return {"host": self.host, "port": self.port}


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    camera: CameraConfig = field(default_factory=CameraConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    capture: CaptureConfig = field(default_factory=CaptureConfig)
    web: WebConfig = field(default_factory=WebConfig)
    log_path: str = "logs/detection_monitor.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            camera=CameraConfig.from_dict(d.get("camera") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            display=DisplayConfig.from_dict(d.get("display") or {}),
            capture=CaptureConfig.from_dict(d.get("capture") or {}),
            web=WebConfig.from_dict(d.get("web") or {}),
            log_path=d.get("log_path", "logs/detection_monitor.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary."""
        return {
            "camera": self.camera.to_dict(),
            "detection": self.detection.to_dict(),
            "display": self.display.to_dict(),
            "capture": self.capture.to_dict(),
            "web": self.web.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
