"""
Detection model gateway.

Owns the lifecycle of an inference backend: a single asynchronous load,
followed by any number of independent detect calls. The backend itself is
blocking, so both operations run in a worker thread and the event loop only
awaits them.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import List, Optional

import numpy as np

from models.detection import Detection
from models.errors import InferenceError, ModelLoadError, ModelNotReadyError
from models.state import ModelState
from .backend import BackendFactory, InferenceBackend


class ModelGateway:
    """
    Explicit handle on the detection model.

    Lifecycle:
        UNLOADED -> LOADING -> READY | FAILED

    load() runs at most once. A failed load is terminal: later calls return
    FAILED without retrying, and detect() raises ModelNotReadyError.

    Example:
        gateway = ModelGateway(lambda: UltralyticsCpuBackend(cfg))
        await gateway.load()
        detections = await gateway.detect(frame)
    """

    def __init__(self, factory: BackendFactory, name: str = "model"):
        self._factory = factory
        self.name = name
        self._state = ModelState.UNLOADED
        self._backend: Optional[InferenceBackend] = None
        self._error: Optional[BaseException] = None
        self._load_task: Optional[asyncio.Future] = None

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is ModelState.READY

    @property
    def error(self) -> Optional[BaseException]:
        """The load failure, if the model is FAILED."""
        return self._error

    async def load(self) -> ModelState:
        """
        Load the backend once.

        Concurrent callers share the same load; callers after completion get
        the final state back without reloading.
        """
        if self._state in (ModelState.READY, ModelState.FAILED):
            return self._state
        if self._load_task is None:
            self._state = ModelState.LOADING
            self._load_task = asyncio.ensure_future(self._do_load())
        return await asyncio.shield(self._load_task)

    async def _do_load(self) -> ModelState:
        logging.info(f"Loading detection model: {self.name}")
        started = time.monotonic()
        try:
            backend = await asyncio.to_thread(self._factory)
        except Exception as e:
            self._error = ModelLoadError(f"Failed to load detection model: {e}")
            self._state = ModelState.FAILED
            logging.error(f"Detection model failed to load: {e}")
            return self._state

        self._backend = backend
        self._state = ModelState.READY
        logging.info(
            f"Detection model ready: {self.name} "
            f"({time.monotonic() - started:.2f}s)"
        )
        return self._state

    async def detect(self, frame: np.ndarray) -> List[Detection]:
        """
        Run one inference on a frame.

        Raises:
            ModelNotReadyError: If the model is not READY.
            InferenceError: If the backend raised for this frame.
        """
        if not self.is_ready or self._backend is None:
            raise ModelNotReadyError(f"Model is {self._state.value}, not ready")

        captured_at = time.time()
        try:
            raw = await asyncio.to_thread(self._backend.detect, frame)
        except Exception as e:
            raise InferenceError(f"Detection failed: {e}") from e

        return [Detection.from_backend_detection(d, captured_at=captured_at) for d in raw or []]
