"""
FastAPI application factory for the detection monitor.

Routes:
- /api/* -> REST API (status, toggle, upload, detections, stats, captures)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from runtime.session import DetectionSession
from .routes import api


def create_app(session: DetectionSession, load_model: bool = True) -> FastAPI:
    """
    Create the FastAPI app around a session.

    With load_model, the model starts loading in the background at startup so
    the API answers status requests while it loads.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        load_task = None
        if load_model:
            load_task = asyncio.create_task(session.load_model())
        try:
            yield
        finally:
            if load_task is not None and not load_task.done():
                load_task.cancel()
            await session.close()
            logging.info("Web app shut down")

    app = FastAPI(
        title="Object Detection Monitor",
        version="0.1.0",
        description="Real-time object detection with annotated rendering and capture history",
        lifespan=lifespan,
    )
    app.state.session = session

    app.include_router(api.router, prefix="/api")

    return app
