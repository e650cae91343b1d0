"""Lay out text as justified lines of glyph pictures and export it as a PNG."""

from .compositor import FontSet
from .config import LayoutConfig, Settings
from .glyphs import (
    BundleGlyphSource,
    DirectoryGlyphSource,
    GlyphAsset,
    GlyphCache,
    HttpGlyphSource,
    build_glyph_source,
)
from .layout import GlyphPlacement, Layout, compute_layout
from .metrics import LayoutMetrics
from .render import (
    EXPORT_SCALE,
    PREVIEW_SCALE,
    RenderPlan,
    RenderResult,
    export_png,
    plan_render,
    render,
    render_export,
    render_preview,
)
from .segmenter import LineMetrics, TextDocument, classify_char, measure_lines
from .session import RenderSession
from .sizing import CanvasTarget, Viewport, size_canvas

__all__ = [
    "BundleGlyphSource",
    "CanvasTarget",
    "DirectoryGlyphSource",
    "EXPORT_SCALE",
    "FontSet",
    "GlyphAsset",
    "GlyphCache",
    "GlyphPlacement",
    "HttpGlyphSource",
    "Layout",
    "LayoutConfig",
    "LayoutMetrics",
    "LineMetrics",
    "PREVIEW_SCALE",
    "RenderPlan",
    "RenderResult",
    "RenderSession",
    "Settings",
    "TextDocument",
    "Viewport",
    "build_glyph_source",
    "classify_char",
    "compute_layout",
    "export_png",
    "measure_lines",
    "plan_render",
    "render",
    "render_export",
    "render_preview",
    "size_canvas",
]
