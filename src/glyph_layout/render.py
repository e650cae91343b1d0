"""
Render pipeline shared by the on-screen preview and the exported PNG.

Both passes run the same code; the export pass only multiplies every linear
measurement by ``EXPORT_SCALE``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from PIL import Image

from .compositor import FontSet, new_surface, paint_layout, paint_placeholder
from .config import DEFAULT_EXPORT_FILENAME, LayoutConfig
from .glyphs import GlyphAsset
from .layout import Layout, compute_layout
from .metrics import LayoutMetrics
from .segmenter import LineMetrics, TextDocument, measure_lines
from .sizing import CanvasTarget, Viewport, size_canvas

logger = logging.getLogger(__name__)

PREVIEW_SCALE = 1
EXPORT_SCALE = 5


@dataclass(frozen=True)
class RenderPlan:
    document: TextDocument
    config: LayoutConfig
    metrics: LayoutMetrics
    canvas: CanvasTarget
    line_metrics: Optional[LineMetrics]
    layout: Optional[Layout]

    @property
    def is_placeholder(self) -> bool:
        return self.layout is None


@dataclass(frozen=True)
class RenderResult:
    image: Image.Image
    plan: RenderPlan
    painted: int = 0


def plan_render(
    text: str,
    config: LayoutConfig,
    viewport: Viewport,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    scale: int = PREVIEW_SCALE,
) -> RenderPlan:
    document = TextDocument.from_text(text)
    metrics = LayoutMetrics.for_scale(config, scale)
    canvas = size_canvas(config, viewport, scale, document)
    if document.is_blank:
        return RenderPlan(document, config, metrics, canvas, line_metrics=None, layout=None)

    line_metrics = measure_lines(document, metrics)
    layout = compute_layout(document, line_metrics, metrics, canvas, glyphs, config.alignment)
    return RenderPlan(document, config, metrics, canvas, line_metrics=line_metrics, layout=layout)


def render(
    text: str,
    config: LayoutConfig,
    viewport: Viewport,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    scale: int = PREVIEW_SCALE,
    fonts: FontSet | None = None,
) -> RenderResult:
    plan = plan_render(text, config, viewport, glyphs, scale)
    fonts = fonts or FontSet()
    surface = new_surface(plan.canvas, config.background_rgb)
    if plan.layout is None:
        paint_placeholder(surface, plan.metrics, fonts)
        return RenderResult(image=surface, plan=plan)

    painted = paint_layout(surface, plan.layout, glyphs, fonts)
    logger.debug(
        "Rendered %d glyphs on %dx%d canvas (scale %s)",
        painted,
        plan.canvas.width,
        plan.canvas.height,
        scale,
    )
    return RenderResult(image=surface, plan=plan, painted=painted)


def render_preview(
    text: str,
    config: LayoutConfig,
    viewport: Viewport,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    fonts: FontSet | None = None,
) -> RenderResult:
    return render(text, config, viewport, glyphs, PREVIEW_SCALE, fonts)


def render_export(
    text: str,
    config: LayoutConfig,
    viewport: Viewport,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    fonts: FontSet | None = None,
) -> RenderResult:
    return render(text, config, viewport, glyphs, EXPORT_SCALE, fonts)


def export_png(
    text: str,
    config: LayoutConfig,
    viewport: Viewport,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    output_path: Path = Path(DEFAULT_EXPORT_FILENAME),
    fonts: FontSet | None = None,
) -> RenderResult:
    result = render_export(text, config, viewport, glyphs, fonts)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    result.image.save(output_path, format="PNG")
    logger.info("Exported %dx%d image to %s", result.image.width, result.image.height, output_path)
    return result
