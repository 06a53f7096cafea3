"""
Detection session: the composition root of the detection core.

The session owns the model gateway, the frame source manager, the render
surface, the scheduler and the capture buffer, and wires them together with
direct references. The web layer and the CLI only ever talk to a session.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from analytics.stats import aggregate
from capture.buffer import CaptureBuffer
from inference.cpu_backend import CpuYoloConfig, UltralyticsCpuBackend
from inference.gateway import ModelGateway
from models.capture import CapturedImage
from models.config import Config, DetectionConfig
from models.detection import Detection
from models.errors import (
    CameraError,
    InferenceError,
    ModelNotReadyError,
    NothingToCaptureError,
)
from models.state import ModelState, RunState
from models.stats import StatsSnapshot
from observation.base import ObservationSource, SourceKind
from observation.camera_source import CameraSource, CameraSourceConfig
from observation.manager import FrameSourceManager
from pipeline.scheduler import CycleResult, DetectionScheduler, SchedulerConfig
from rendering.renderer import RenderSurface, Renderer, RendererConfig


CameraFactory = Callable[[], ObservationSource]


class DetectionSession:
    """
    Holds runtime state and component references; avoids global singletons.

    UI-facing triggers: toggle(), load_image(), capture(), export_all().
    UI-facing outputs: detections, fps, stats, captures, status().

    Example:
        session = create_session_from_config(config)
        await session.load_model()
        await session.toggle()          # start camera detection
        image = session.capture()
        await session.close()
    """

    def __init__(
        self,
        gateway: ModelGateway,
        config: Optional[Config] = None,
        camera_factory: Optional[CameraFactory] = None,
    ):
        self.config = config or Config()
        self.gateway = gateway

        width, height = self.config.camera.resolution
        self.surface = RenderSurface(width, height)
        self.renderer = Renderer(
            RendererConfig(
                line_width=self.config.display.line_width,
                font_scale=self.config.display.font_scale,
            )
        )
        self.sources = FrameSourceManager()
        self.scheduler = DetectionScheduler(
            gateway,
            self.renderer,
            self.surface,
            SchedulerConfig(tick_interval=self.config.display.tick_interval),
        )
        self.scheduler.add_callback(self._on_result)
        self.scheduler.add_stop_callback(self._on_scheduler_ended)
        self.captures = CaptureBuffer(capacity=self.config.capture.capacity)

        self._camera_factory = camera_factory or self._default_camera
        self.run_state = RunState.IDLE
        self.detections: List[Detection] = []
        self.fps = 0
        self.stats = StatsSnapshot()
        self.error: Optional[str] = None
        self.status_message = "Model not loaded"
        self.last_update: Optional[float] = None

    def _default_camera(self) -> CameraSource:
        return CameraSource(CameraSourceConfig.from_camera_config(self.config.camera))

    @property
    def model_state(self) -> ModelState:
        return self.gateway.state

    @property
    def source_kind(self) -> Optional[SourceKind]:
        return self.sources.kind

    # -- model -------------------------------------------------------------

    async def load_model(self) -> ModelState:
        """Load the model once. A failure disables detection for the session."""
        self.status_message = "Loading AI model..."
        state = await self.gateway.load()
        if state is ModelState.READY:
            self.status_message = "AI model loaded successfully"
        else:
            self.error = str(self.gateway.error) if self.gateway.error else "Failed to load AI model"
            self.status_message = "Detection unavailable"
        return state

    # -- run state ---------------------------------------------------------

    async def toggle(self) -> RunState:
        if self.run_state is RunState.ACTIVE:
            await self.stop()
        else:
            await self.start()
        return self.run_state

    async def start(self) -> RunState:
        """
        Switch to ACTIVE: open the camera and start the scheduler.

        A no-op unless the model is READY. A camera failure is reported via
        `error` and leaves the session IDLE; retrying needs another start().
        """
        if not self.gateway.is_ready:
            logging.info(f"Start ignored: model is {self.gateway.state.value}")
            return self.run_state
        if self.run_state is RunState.ACTIVE:
            return self.run_state

        await self.scheduler.wait_stopped()
        self.run_state = RunState.ACTIVE
        self.error = None
        self.detections = []
        self.fps = 0
        self.stats = StatsSnapshot()

        try:
            source = self._camera_factory()
            await asyncio.to_thread(self.sources.activate_camera, source)
        except CameraError as e:
            logging.error(f"Camera activation failed: {e}")
            self.error = f"Failed to access camera: {e}"
            self.status_message = "Camera unavailable"
            self.run_state = RunState.IDLE
            return self.run_state

        if self.run_state is not RunState.ACTIVE:
            # Stopped while the camera was opening.
            self.sources.deactivate()
            return self.run_state

        if source.size and all(source.size):
            self.surface.resize(*source.size)
        self.scheduler.start(source)
        self.status_message = "Camera connected successfully"
        return self.run_state

    async def stop(self) -> RunState:
        """Switch to IDLE: stop scheduling and release the camera."""
        self.run_state = RunState.IDLE
        self.scheduler.stop()
        if self.sources.kind is SourceKind.CAMERA:
            self.sources.deactivate()
        self.status_message = "Detection stopped"
        return self.run_state

    def _on_scheduler_ended(self) -> None:
        self.run_state = RunState.IDLE
        self.sources.deactivate()
        failure = self.scheduler.last_failure
        if failure is not None:
            self.error = f"Detection loop failed: {failure}"
            self.status_message = "Detection stopped after an internal error"
        else:
            self.error = "Camera stream lost"
            self.status_message = "Camera unavailable"

    # -- static image ------------------------------------------------------

    async def load_image(self, data: bytes) -> CycleResult:
        """
        Replace the frame source with an uploaded image and detect once.

        Raises:
            ModelNotReadyError: If the model is not READY.
            ImageDecodeError: If data is not a decodable image.
            InferenceError: If the detect call fails.
        """
        if not self.gateway.is_ready:
            raise ModelNotReadyError(f"Model is {self.gateway.state.value}, not ready")

        if self.run_state is RunState.ACTIVE:
            await self.stop()
        await self.scheduler.wait_stopped()

        source = await asyncio.to_thread(self.sources.load_static_image, data)
        self.surface.resize(*source.size)

        try:
            result = await self.scheduler.run_once(source)
        except InferenceError as e:
            logging.warning(f"Static image detection failed: {e}")
            self.error = str(e)
            raise

        self.error = None
        self.status_message = f"Detected {len(result.detections)} objects in image"
        return result

    # -- capture -----------------------------------------------------------

    def capture(self) -> CapturedImage:
        """Snapshot the render surface into the capture buffer."""
        if not self.surface.has_content:
            raise NothingToCaptureError("Nothing has been rendered yet")
        return self.captures.capture(self.surface)

    def export_one(self, sequence_index: int, directory: Optional[Union[str, Path]] = None) -> Path:
        image = self.captures.get(sequence_index)
        if image is None:
            raise KeyError(sequence_index)
        return self.captures.export_one(image, directory or self.config.capture.export_dir)

    async def export_all(self, directory: Optional[Union[str, Path]] = None) -> List[Path]:
        return await self.captures.export_all(
            directory or self.config.capture.export_dir,
            stagger=self.config.capture.export_stagger,
        )

    # -- outputs -----------------------------------------------------------

    def _on_result(self, result: CycleResult) -> None:
        self.detections = result.detections
        self.fps = result.fps
        self.stats = aggregate(result.detections)
        self.last_update = time.time()

    def status(self) -> Dict[str, Any]:
        kind = self.source_kind
        return {
            "model_state": self.gateway.state.value,
            "run_state": self.run_state.value,
            "scheduler_state": self.scheduler.state.value,
            "source": kind.value if kind is not None else None,
            "fps": self.fps,
            "detections": len(self.detections),
            "captures": len(self.captures),
            "error": self.error,
            "message": self.status_message,
            "last_update": self.last_update,
        }

    async def close(self) -> None:
        """Tear down: stop the loop, wait for a pending detect, release sources."""
        self.run_state = RunState.IDLE
        self.scheduler.stop()
        self.sources.deactivate()
        await self.scheduler.wait_stopped()
        logging.info("Detection session closed")


def create_backend_factory(detection_cfg: DetectionConfig):
    """Return a zero-argument callable that builds the configured backend."""
    if detection_cfg.backend != "yolo":
        raise ValueError(f"Unsupported detection backend: {detection_cfg.backend}")
    yolo_cfg = CpuYoloConfig.from_yolo_config(detection_cfg.yolo)
    return lambda: UltralyticsCpuBackend(yolo_cfg)


def create_session_from_config(config: Config) -> DetectionSession:
    """
    Factory function to create a DetectionSession from the typed config.

    The model is not loaded here; call load_model() on the running loop.
    """
    factory = create_backend_factory(config.detection)
    gateway = ModelGateway(factory, name=config.detection.yolo.model)
    return DetectionSession(gateway, config)
