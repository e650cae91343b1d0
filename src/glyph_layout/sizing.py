"""
Canvas sizing per aspect-ratio policy.

Sizes are derived at scale 1 (preview pixels) and truncated to whole pixels
before the pass scale is applied, so an export surface is always exactly
``scale`` times the preview surface.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .config import LayoutConfig
from .metrics import LayoutMetrics
from .segmenter import TextDocument, measure_lines

VIEWPORT_FRACTION = 0.8
AUTO_MIN_WIDTH = 400
BLANK_FRAME = (800, 600)

POLICY_CAPS = {
    "square": 1067,
    "wide": 1200,
    "ultrawide": 1400,
    "portrait": 1067,
}


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    def bounds(self, fraction: float = VIEWPORT_FRACTION) -> Tuple[float, float]:
        return self.width * fraction, self.height * fraction


@dataclass(frozen=True)
class CanvasTarget:
    width: int
    height: int
    scale_factor: int = 1

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


def _fixed_policy_size(policy: str, max_width: float, max_height: float) -> Tuple[float, float]:
    cap = POLICY_CAPS[policy]
    if policy == "square":
        width = min(max_width, max_height, cap)
        return width, width
    if policy == "wide":
        width = min(max_width, cap)
        return width, width * 9 / 16
    if policy == "ultrawide":
        width = min(max_width, cap)
        return width, width * 9 / 21
    if policy == "portrait":
        height = min(max_height, cap)
        return height * 9 / 16, height
    raise ValueError(f"No fixed size for aspect ratio {policy!r}")


def _auto_size(document: TextDocument, metrics: LayoutMetrics) -> Tuple[float, float]:
    line_metrics = measure_lines(document, metrics)
    width = max(line_metrics.max_line_width + metrics.padding * 2, AUTO_MIN_WIDTH)
    height = document.line_count * metrics.line_height + metrics.padding * 2 - metrics.line_spacing
    return width, height


def logical_canvas_size(
    config: LayoutConfig,
    viewport: Viewport,
    document: TextDocument | None = None,
) -> Tuple[int, int]:
    """Return the canvas size in preview pixels, before any pass scale."""
    max_width, max_height = viewport.bounds()
    if config.aspect_ratio == "auto":
        if document is None or document.is_blank:
            width = min(max_width, BLANK_FRAME[0])
            height = min(max_height, BLANK_FRAME[1])
        else:
            width, height = _auto_size(document, LayoutMetrics.for_scale(config, 1))
    else:
        width, height = _fixed_policy_size(config.aspect_ratio, max_width, max_height)
    return max(int(math.floor(width)), 1), max(int(math.floor(height)), 1)


def size_canvas(
    config: LayoutConfig,
    viewport: Viewport,
    scale: int = 1,
    document: TextDocument | None = None,
) -> CanvasTarget:
    width, height = logical_canvas_size(config, viewport, document)
    return CanvasTarget(width=width * scale, height=height * scale, scale_factor=scale)
