"""
Lifecycle states shared by the gateway, the scheduler and the session.
"""

from __future__ import annotations

from enum import Enum


class ModelState(str, Enum):
    """
    Detection model lifecycle.

    Transitions only UNLOADED -> LOADING -> READY | FAILED. FAILED is terminal
    for the session.
    """
    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class RunState(str, Enum):
    """User-controlled start/stop toggle."""
    IDLE = "idle"
    ACTIVE = "active"


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
