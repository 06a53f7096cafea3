"""
Rendering of frames and detections onto the shared surface.
"""

from .renderer import (
    ConfidenceTier,
    RenderSurface,
    Renderer,
    RendererConfig,
    TIER_COLORS,
    confidence_tier,
    tier_color,
)

__all__ = [
    "ConfidenceTier",
    "RenderSurface",
    "Renderer",
    "RendererConfig",
    "TIER_COLORS",
    "confidence_tier",
    "tier_color",
]
