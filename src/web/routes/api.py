from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import Response

from models.capture import CapturedImage
from models.detection import detections_to_dicts
from models.errors import (
    ImageDecodeError,
    InferenceError,
    ModelNotReadyError,
    NothingToCaptureError,
)
from models.state import RunState
from runtime.session import DetectionSession
from ..api_models import (
    CaptureInfo,
    CaptureListResponse,
    DetectionsResponse,
    ExportResponse,
    StatsResponse,
    StatusResponse,
)

router = APIRouter()


def get_session(request: Request) -> DetectionSession:
    return request.app.state.session


def _capture_info(image: CapturedImage) -> CaptureInfo:
    return CaptureInfo(
        sequence_index=image.sequence_index,
        captured_at=image.captured_at,
        filename=image.filename,
        size_bytes=image.size_bytes,
    )


@router.get("/status", response_model=StatusResponse)
def status(session: DetectionSession = Depends(get_session)):
    return session.status()


@router.post("/toggle", response_model=StatusResponse)
async def toggle(session: DetectionSession = Depends(get_session)):
    """
    Start/stop toggle.

    409 when the model is not ready (starting is a no-op in that state). A
    camera failure is not an HTTP error: it shows up in status.error.
    """
    if session.run_state is RunState.IDLE and not session.gateway.is_ready:
        raise HTTPException(
            status_code=409,
            detail=f"Model is {session.model_state.value}; detection unavailable",
        )
    await session.toggle()
    return session.status()


@router.post("/upload", response_model=DetectionsResponse)
async def upload(file: UploadFile = File(...), session: DetectionSession = Depends(get_session)):
    data = await file.read()
    try:
        result = await session.load_image(data)
    except ModelNotReadyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ImageDecodeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InferenceError as e:
        raise HTTPException(status_code=502, detail=str(e))
    logging.info(f"Processed upload {file.filename!r}: {len(result.detections)} detections")
    return {"detections": detections_to_dicts(result.detections), "fps": result.fps}


@router.get("/detections", response_model=DetectionsResponse)
def detections(session: DetectionSession = Depends(get_session)):
    return {"detections": detections_to_dicts(session.detections), "fps": session.fps}


@router.get("/stats", response_model=StatsResponse)
def stats(session: DetectionSession = Depends(get_session)):
    return session.stats.to_dict()


@router.get("/frame.jpg")
def frame(session: DetectionSession = Depends(get_session)):
    if not session.surface.has_content:
        raise HTTPException(status_code=404, detail="Nothing rendered yet")
    return Response(content=session.surface.encode(".jpg"), media_type="image/jpeg")


@router.post("/captures", response_model=CaptureInfo)
def capture(session: DetectionSession = Depends(get_session)):
    try:
        image = session.capture()
    except NothingToCaptureError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _capture_info(image)


@router.get("/captures", response_model=CaptureListResponse)
def list_captures(session: DetectionSession = Depends(get_session)):
    return CaptureListResponse(
        captures=[_capture_info(image) for image in session.captures.entries()],
        capacity=session.captures.capacity,
    )


@router.post("/captures/export", response_model=ExportResponse)
async def export_captures(session: DetectionSession = Depends(get_session)):
    paths = await session.export_all()
    return {"paths": [str(p) for p in paths]}


@router.get("/captures/{sequence_index}")
def download_capture(sequence_index: int, session: DetectionSession = Depends(get_session)):
    image = session.captures.get(sequence_index)
    if image is None:
        raise HTTPException(status_code=404, detail=f"Capture #{sequence_index} not found")
    return Response(
        content=image.data,
        media_type=image.content_type,
        headers={"Content-Disposition": f'attachment; filename="{image.filename}"'},
    )
