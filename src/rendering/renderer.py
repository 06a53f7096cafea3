"""
Renderer for the annotated detection view.

Draws the current frame and its detections onto a RenderSurface with OpenCV.
Box and label colors come from a three-tier confidence policy.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

import cv2
import numpy as np

from models.detection import Detection


class ConfidenceTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# Colors (BGR)
TIER_COLORS = {
    ConfidenceTier.HIGH: (20, 235, 20),     # Green
    ConfidenceTier.MEDIUM: (0, 212, 255),   # Yellow
    ConfidenceTier.LOW: (92, 92, 240),      # Red
}
COLOR_LABEL_TEXT = (23, 18, 15)             # Near-black


def confidence_tier(confidence: float) -> ConfidenceTier:
    """
    Bucket a score: > 0.7 high, > 0.5 medium, otherwise low.

    Boundaries are strict, so exactly 0.7 is medium and exactly 0.5 is low.
    """
    if confidence > 0.7:
        return ConfidenceTier.HIGH
    if confidence > 0.5:
        return ConfidenceTier.MEDIUM
    return ConfidenceTier.LOW


def tier_color(confidence: float) -> Tuple[int, int, int]:
    return TIER_COLORS[confidence_tier(confidence)]


class RenderSurface:
    """
    A BGR canvas sized to the active frame source.

    The detection loop draws on a back buffer and commit()s it here once the
    detections are drawn, so a capture always sees a completed render. The
    lock serializes the swap with snapshot and encode.
    """

    def __init__(self, width: int = 640, height: int = 480):
        self._lock = threading.RLock()
        self._canvas = np.zeros((height, width, 3), dtype=np.uint8)
        self.has_content = False

    @property
    def width(self) -> int:
        return self._canvas.shape[1]

    @property
    def height(self) -> int:
        return self._canvas.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @property
    def canvas(self) -> np.ndarray:
        return self._canvas

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def resize(self, width: int, height: int) -> None:
        """Match the surface to a source's native resolution. Clears it."""
        with self._lock:
            if (width, height) != self.size:
                self._canvas = np.zeros((height, width, 3), dtype=np.uint8)
            else:
                self._canvas[:] = 0
            self.has_content = False

    def snapshot(self) -> np.ndarray:
        with self._lock:
            return self._canvas.copy()

    def commit(self, rendered: "RenderSurface") -> None:
        """
        Publish a completed render drawn on a back buffer.

        The two canvases are swapped, so this surface only ever holds whole
        renders and the back buffer gets a scratch canvas to draw the next one.
        """
        with self._lock, rendered.lock:
            self._canvas, rendered._canvas = rendered._canvas, self._canvas
            self.has_content = rendered.has_content
            rendered.has_content = False

    def encode(self, ext: str = ".png") -> bytes:
        """Encode the current contents (".png" or ".jpg")."""
        with self._lock:
            ok, buf = cv2.imencode(ext, self._canvas)
        if not ok:
            raise RuntimeError(f"Failed to encode surface as {ext}")
        return buf.tobytes()


@dataclass
class RendererConfig:
    line_width: int = 3
    font_scale: float = 0.5
    font_thickness: int = 1
    label_padding: int = 6


class Renderer:
    """
    Draws frames and detections onto a surface.

    Example:
        renderer = Renderer()
        renderer.render(surface, frame_data.frame, detections)
    """

    def __init__(self, config: Optional[RendererConfig] = None):
        self.config = config or RendererConfig()
        self._font = cv2.FONT_HERSHEY_SIMPLEX

    def render(self, surface: RenderSurface, frame: np.ndarray, detections: Iterable[Detection]) -> None:
        with surface.lock:
            self.draw_frame(surface, frame)
            self.draw_detections(surface, detections)

    def draw_frame(self, surface: RenderSurface, frame: np.ndarray) -> None:
        """Clear the surface and draw frame stretched to its full size."""
        with surface.lock:
            canvas = surface.canvas
            h, w = frame.shape[:2]
            if frame.ndim == 2:
                frame = cv2.cvtColor(frame, cv2.COLOR_GRAY2BGR)
            if (w, h) != surface.size:
                frame = cv2.resize(frame, surface.size, interpolation=cv2.INTER_LINEAR)
            canvas[:] = frame
            surface.has_content = True

    def draw_detections(self, surface: RenderSurface, detections: Iterable[Detection]) -> None:
        with surface.lock:
            for detection in detections:
                self._draw_detection(surface, detection)

    def _draw_detection(self, surface: RenderSurface, detection: Detection) -> None:
        cfg = self.config
        canvas = surface.canvas
        color = tier_color(detection.confidence)
        x, y, w, h = detection.bbox.as_int_tuple()

        cv2.rectangle(canvas, (x, y), (x + w, y + h), color, cfg.line_width)

        label = detection.label
        (tw, th), baseline = cv2.getTextSize(label, self._font, cfg.font_scale, cfg.font_thickness)
        box_w = tw + 2 * cfg.label_padding
        box_h = th + baseline + cfg.label_padding
        lx, ly = self.label_origin(surface.size, (x, y), (box_w, box_h))

        cv2.rectangle(canvas, (lx, ly), (lx + box_w, ly + box_h), color, -1)
        cv2.putText(
            canvas,
            label,
            (lx + cfg.label_padding, ly + box_h - baseline - cfg.label_padding // 2),
            self._font,
            cfg.font_scale,
            COLOR_LABEL_TEXT,
            cfg.font_thickness,
            cv2.LINE_AA,
        )

    @staticmethod
    def label_origin(
        surface_size: Tuple[int, int],
        box_origin: Tuple[int, int],
        label_size: Tuple[int, int],
    ) -> Tuple[int, int]:
        """
        Top-left corner of a label placed directly above a box.

        The label is clamped to the surface: when there is no room above the
        box it moves inside the box top, and it shifts left rather than run
        past the right edge.
        """
        surface_w, surface_h = surface_size
        x, y = box_origin
        label_w, label_h = label_size

        lx = min(max(x, 0), max(surface_w - label_w, 0))
        ly = y - label_h
        if ly < 0:
            ly = max(y, 0)
        ly = min(ly, max(surface_h - label_h, 0))
        return lx, ly
