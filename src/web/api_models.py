from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class StatusResponse(BaseModel):
    model_state: str = Field(..., description="unloaded|loading|ready|failed")
    run_state: str = Field(..., description="idle|active")
    scheduler_state: str = Field(..., description="stopped|running")
    source: Optional[str] = Field(None, description="camera|static_image, or null")
    fps: int
    detections: int
    captures: int
    error: Optional[str] = None
    message: str
    last_update: Optional[float] = None


class DetectionModel(BaseModel):
    bbox: List[float] = Field(..., description="[x, y, width, height] in surface pixels")
    class_name: str
    confidence: float
    captured_at: Optional[float] = None


class DetectionsResponse(BaseModel):
    detections: List[DetectionModel]
    fps: int


class ClassStatModel(BaseModel):
    class_name: str
    count: int
    max_confidence: float


class StatsResponse(BaseModel):
    total: int
    unique_classes: int
    avg_confidence: float
    rows: List[ClassStatModel] = Field(
        default_factory=list,
        description="Per-class rows, count descending",
    )


class CaptureInfo(BaseModel):
    sequence_index: int
    captured_at: float
    filename: str
    size_bytes: int


class CaptureListResponse(BaseModel):
    captures: List[CaptureInfo]
    capacity: int


class ExportResponse(BaseModel):
    paths: List[str]
