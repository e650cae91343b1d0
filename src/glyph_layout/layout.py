"""
Layout engine.

Turns a segmented document into pixel-space glyph placements for one canvas.
Every position is computed here, before anything is painted, and the result
depends only on the arguments (the glyph mapping is a read-only snapshot).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .glyphs import GlyphAsset
from .metrics import LayoutMetrics
from .segmenter import LETTER_OR_DIGIT, SPACE, LineMetrics, TextDocument, classify_char
from .sizing import CanvasTarget

IMAGE = "image"
FALLBACK_GLYPH = "fallbackGlyph"


@dataclass(frozen=True)
class GlyphPlacement:
    char: str
    kind: str
    line_index: int
    # Top-left of the letter_size x letter_size box the glyph occupies.
    box_x: float
    box_y: float
    box_size: float
    # Draw rectangle inside the box (image placements) or the box itself (fallback).
    x: float
    y: float
    draw_width: float
    draw_height: float
    font_size: float = 0.0

    @property
    def is_fallback(self) -> bool:
        return self.kind == FALLBACK_GLYPH

    @property
    def center(self) -> Tuple[float, float]:
        return self.box_x + self.box_size / 2, self.box_y + self.box_size / 2


@dataclass(frozen=True)
class Layout:
    canvas: CanvasTarget
    vertical_offset: float
    line_starts: Tuple[float, ...]
    lines: Tuple[Tuple[GlyphPlacement, ...], ...]

    @property
    def placements(self) -> Tuple[GlyphPlacement, ...]:
        return tuple(placement for line in self.lines for placement in line)


def fit_in_box(aspect_ratio: float, box_size: float) -> Tuple[float, float, float, float]:
    """
    Scale a glyph of the given aspect ratio to fit a square box.

    Returns ``(offset_x, offset_y, width, height)`` relative to the box origin;
    the shorter side is centered.
    """
    width = height = box_size
    if aspect_ratio > 1:
        height = box_size / aspect_ratio
    elif aspect_ratio < 1:
        width = box_size * aspect_ratio
    return (box_size - width) / 2, (box_size - height) / 2, width, height


def vertical_offset(canvas: CanvasTarget, line_count: int, metrics: LayoutMetrics) -> float:
    total_height = line_count * metrics.line_height - metrics.line_spacing
    # Overflowing content is pinned to the top edge instead of going negative.
    return max((canvas.height - total_height) / 2, 0.0)


def line_start(alignment: str, canvas: CanvasTarget, advance_width: float, metrics: LayoutMetrics) -> float:
    if alignment == "center":
        return (canvas.width - advance_width) / 2
    if alignment == "right":
        return canvas.width - advance_width - metrics.padding
    return metrics.padding


def place_glyph(
    char: str,
    line_index: int,
    box_x: float,
    box_y: float,
    metrics: LayoutMetrics,
    asset: Optional[GlyphAsset],
) -> GlyphPlacement:
    size = metrics.letter_size
    if asset is None:
        return GlyphPlacement(
            char=char,
            kind=FALLBACK_GLYPH,
            line_index=line_index,
            box_x=box_x,
            box_y=box_y,
            box_size=size,
            x=box_x,
            y=box_y,
            draw_width=size,
            draw_height=size,
            font_size=metrics.fallback_font_size,
        )
    offset_x, offset_y, width, height = fit_in_box(asset.aspect_ratio, size)
    return GlyphPlacement(
        char=char,
        kind=IMAGE,
        line_index=line_index,
        box_x=box_x,
        box_y=box_y,
        box_size=size,
        x=box_x + offset_x,
        y=box_y + offset_y,
        draw_width=width,
        draw_height=height,
    )


def compute_layout(
    document: TextDocument,
    line_metrics: LineMetrics,
    metrics: LayoutMetrics,
    canvas: CanvasTarget,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    alignment: str,
) -> Layout:
    y = vertical_offset(canvas, document.line_count, metrics)
    top = y
    starts = []
    lines = []
    for line_index, (line, advance_width) in enumerate(zip(document.lines, line_metrics.advance_widths)):
        x = line_start(alignment, canvas, advance_width, metrics)
        starts.append(x)
        placements = []
        for char in line:
            kind = classify_char(char)
            if kind == SPACE:
                x += metrics.space_width
            elif kind == LETTER_OR_DIGIT:
                placements.append(place_glyph(char, line_index, x, y, metrics, glyphs.get(char)))
                x += metrics.glyph_advance
        lines.append(tuple(placements))
        y += metrics.line_height
    return Layout(canvas=canvas, vertical_offset=top, line_starts=tuple(starts), lines=tuple(lines))
