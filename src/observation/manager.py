"""
Holder for the single active frame source.
"""

from __future__ import annotations

import logging
from typing import Optional

from .base import ObservationSource, SourceKind
from .camera_source import CameraSource
from .image_source import StaticImageSource


class FrameSourceManager:
    """
    Keeps exactly one frame source active.

    Activating a new source always closes the previous one first, so a camera
    handle is never held past the moment another source replaces it.
    """

    def __init__(self) -> None:
        self._active: Optional[ObservationSource] = None

    @property
    def active(self) -> Optional[ObservationSource]:
        return self._active

    @property
    def kind(self) -> Optional[SourceKind]:
        return self._active.kind if self._active is not None else None

    def activate(self, source: ObservationSource) -> ObservationSource:
        """
        Replace the active source with source and open it.

        If open() raises, the manager is left with no active source.
        """
        self.deactivate()
        source.open()
        self._active = source
        logging.info(f"Frame source active: {source.kind.value} ({source.source_id})")
        return source

    def activate_camera(self, source: CameraSource) -> CameraSource:
        return self.activate(source)

    def load_static_image(self, data: bytes, source_id: str = "upload") -> StaticImageSource:
        """Decode data and make it the active source."""
        source = StaticImageSource.from_bytes(data, source_id=source_id)
        self.activate(source)
        return source

    def deactivate(self) -> None:
        """Close the active source, if any. Idempotent."""
        if self._active is None:
            return
        source, self._active = self._active, None
        try:
            source.close()
        except Exception as e:
            logging.warning(f"Error closing source {source.source_id}: {e}")
