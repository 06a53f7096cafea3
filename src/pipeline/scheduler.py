"""
Detection scheduler.

Drives the detect loop for a live source on the asyncio event loop:

    read frame -> draw frame -> await detect -> draw detections -> commit -> publish -> next tick

At most one detect call is in flight per loop. When inference is slower than
the tick interval the effective detection rate drops instead of queuing calls.
Drawing happens on a back buffer; the shared surface only changes on commit,
so a capture taken while detect is pending sees the previous whole render.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from inference.gateway import ModelGateway
from models.detection import Detection
from models.errors import SchedulerError
from models.frame import FrameData
from models.state import SchedulerState
from observation.base import ObservationSource, SourceKind
from rendering.renderer import RenderSurface, Renderer
from .fps import FpsCounter


@dataclass
class SchedulerConfig:
    """
    Configuration for the detection scheduler.

    Attributes:
        tick_interval: Seconds between ticks (the display refresh cadence).
        stats_log_interval: Seconds between status log messages.
    """
    tick_interval: float = 1.0 / 60
    stats_log_interval: float = 60.0


@dataclass
class CycleResult:
    """What one completed cycle publishes to the UI boundary."""
    detections: List[Detection]
    fps: int
    frame: FrameData


@dataclass
class SchedulerStats:
    """Runtime statistics for the scheduler."""
    cycles: int = 0
    skipped_ticks: int = 0
    inference_errors: int = 0
    discarded_results: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)


ResultCallback = Callable[[CycleResult], None]


class DetectionScheduler:
    """
    Single-inference-in-flight detection loop.

    States: STOPPED, RUNNING. start() requires a READY model and an open
    camera source. stop() prevents any further tick: a pending detect call is
    left to resolve and its result is discarded.

    Example:
        scheduler = DetectionScheduler(gateway, renderer, surface)
        scheduler.add_callback(lambda result: print(result.fps))
        scheduler.start(camera_source)
        ...
        scheduler.stop()
        await scheduler.wait_stopped()
    """

    def __init__(
        self,
        gateway: ModelGateway,
        renderer: Renderer,
        surface: RenderSurface,
        config: Optional[SchedulerConfig] = None,
        fps_counter: Optional[FpsCounter] = None,
    ):
        self.gateway = gateway
        self.renderer = renderer
        self.surface = surface
        self.config = config or SchedulerConfig()
        self.fps_counter = fps_counter or FpsCounter()
        self.stats = SchedulerStats()
        # Back buffer: each cycle renders here and is committed to surface whole.
        self._back = RenderSurface(*surface.size)
        self.last_failure: Optional[BaseException] = None
        self._callbacks: List[ResultCallback] = []
        self._stop_callbacks: List[Callable[[], None]] = []
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self._running = False
        self._in_flight = 0

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.RUNNING if self._running else SchedulerState.STOPPED

    @property
    def in_flight(self) -> int:
        """Number of detect calls currently awaited by the loop."""
        return self._in_flight

    @property
    def fps(self) -> int:
        return self.fps_counter.fps

    def add_callback(self, callback: ResultCallback) -> None:
        """
        Add a callback called with each CycleResult.

        Args:
            callback: Function taking a CycleResult.
        """
        self._callbacks.append(callback)

    def add_stop_callback(self, callback: Callable[[], None]) -> None:
        """
        Add a callback called when the loop ends on its own.

        That is a lost source, or an unexpected error recorded in last_failure.
        """
        self._stop_callbacks.append(callback)

    def start(self, source: ObservationSource) -> None:
        """
        Start the loop on the running event loop.

        Raises:
            SchedulerError: If already running, the model is not ready, or the
                source is not an open camera.
        """
        if self._running:
            raise SchedulerError("Scheduler is already running")
        if not self.gateway.is_ready:
            raise SchedulerError(f"Model is {self.gateway.state.value}, not ready")
        if source.kind is not SourceKind.CAMERA:
            raise SchedulerError("Continuous detection requires a camera source")
        if not source.is_open:
            raise SchedulerError("Frame source is not open")

        self._generation += 1
        self._running = True
        self.stats = SchedulerStats()
        self.last_failure = None
        self.fps_counter.reset()
        self._task = asyncio.get_running_loop().create_task(
            self._run(source, self._generation),
            name=f"detection-scheduler-{self._generation}",
        )
        logging.info(f"Detection scheduler started: source={source.source_id}")

    def stop(self) -> None:
        """
        Stop scheduling further ticks.

        A tick that is only waiting is cancelled. A tick awaiting detect keeps
        running until the call resolves, then exits without publishing.
        """
        if not self._running:
            return
        self._running = False
        self._generation += 1
        if self._task is not None and self.in_flight == 0:
            self._task.cancel()
        logging.info("Detection scheduler stopping")

    async def wait_stopped(self) -> None:
        """Wait until the loop task has exited, including a pending detect."""
        task = self._task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
        if self._task is task:
            self._task = None

    async def run_once(self, source: ObservationSource) -> CycleResult:
        """
        One-shot pass for a still image: draw, detect once, draw, publish.

        FPS is reported as 0. No loop is created.

        Raises:
            SchedulerError: If the loop is running or the model is not ready.
            InferenceError: If the detect call fails.
        """
        if self._running:
            raise SchedulerError("Cannot run a one-shot pass while the loop is running")
        if not self.gateway.is_ready:
            raise SchedulerError(f"Model is {self.gateway.state.value}, not ready")

        frame_data = source.read()
        if frame_data is None:
            raise SchedulerError("Frame source has no frame")

        self._prepare_back_buffer(frame_data)
        self.renderer.draw_frame(self._back, frame_data.frame)
        detections = await self.gateway.detect(frame_data.frame)
        self.renderer.draw_detections(self._back, detections)
        self.surface.commit(self._back)

        self.fps_counter.reset()
        result = CycleResult(detections=detections, fps=0, frame=frame_data)
        self._publish(result)
        return result

    def _is_current(self, generation: int) -> bool:
        return self._running and self._generation == generation

    async def _run(self, source: ObservationSource, generation: int) -> None:
        interval = self.config.tick_interval
        try:
            while self._is_current(generation):
                frame_data = source.read()

                if frame_data is None:
                    if not source.is_open:
                        logging.warning(f"Frame source {source.source_id} unavailable, stopping")
                        break
                    # Frame not decoded yet: skip inference, keep ticking.
                    self.stats.skipped_ticks += 1
                    await asyncio.sleep(interval)
                    continue

                await self._cycle(frame_data, generation)
                self._handle_periodic_tasks()

                if not self._is_current(generation):
                    break
                await asyncio.sleep(interval)
        except asyncio.CancelledError:
            logging.debug("Detection scheduler tick cancelled")
        except Exception as e:
            self.last_failure = e
            logging.exception(f"Detection loop failed: {e}")
        finally:
            ended_on_its_own = self._generation == generation and self._running
            if self._generation == generation:
                self._running = False
            if self._task is asyncio.current_task():
                self._task = None
            logging.info(
                f"Detection scheduler stopped: cycles={self.stats.cycles}, "
                f"errors={self.stats.inference_errors}"
            )
            if ended_on_its_own:
                for callback in self._stop_callbacks:
                    try:
                        callback()
                    except Exception as e:
                        logging.warning(f"Stop callback error: {e}")

    async def _cycle(self, frame_data: FrameData, generation: int) -> None:
        self._prepare_back_buffer(frame_data)
        self.renderer.draw_frame(self._back, frame_data.frame)

        self._in_flight += 1
        try:
            detections = await self.gateway.detect(frame_data.frame)
        except Exception as e:
            self.stats.inference_errors += 1
            logging.warning(f"Detection error (frame {frame_data.frame_index}): {e}")
            return
        finally:
            self._in_flight -= 1

        if not self._is_current(generation):
            self.stats.discarded_results += 1
            logging.debug("Discarding detections resolved after stop")
            return

        self.renderer.draw_detections(self._back, detections)
        self.surface.commit(self._back)
        fps = self.fps_counter.tick()
        self.stats.cycles += 1
        self._publish(CycleResult(detections=detections, fps=fps, frame=frame_data))

    def _prepare_back_buffer(self, frame_data: FrameData) -> None:
        if self._back.size != frame_data.size:
            self._back.resize(frame_data.width, frame_data.height)

    def _publish(self, result: CycleResult) -> None:
        for callback in self._callbacks:
            try:
                callback(result)
            except Exception as e:
                logging.warning(f"Callback error: {e}")

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Scheduler stats: cycles={self.stats.cycles}, fps={self.fps}, "
                f"skipped_ticks={self.stats.skipped_ticks}, "
                f"errors={self.stats.inference_errors}"
            )
            self.stats.last_stats_log_time = now
