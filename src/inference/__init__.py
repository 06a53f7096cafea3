"""
Inference layer: the model gateway and the backends it wraps.
"""

from .backend import BackendFactory, Detection, InferenceBackend
from .gateway import ModelGateway

__all__ = [
    "BackendFactory",
    "Detection",
    "InferenceBackend",
    "ModelGateway",
]
