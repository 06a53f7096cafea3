"""
Runtime composition of the detection core.
"""

from .session import DetectionSession, create_backend_factory, create_session_from_config

__all__ = ["DetectionSession", "create_backend_factory", "create_session_from_config"]
