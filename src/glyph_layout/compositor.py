from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from PIL import Image, ImageDraw, ImageFont

from .glyphs import GlyphAsset
from .layout import GlyphPlacement, Layout
from .metrics import LayoutMetrics
from .sizing import CanvasTarget

logger = logging.getLogger(__name__)

FALLBACK_GLYPH_COLOR = "#3b82f6"
PLACEHOLDER_COLOR = "#94a3b8"
PLACEHOLDER_CAPTION = "Start typing to see your text as images"
BOLD_FONT_CANDIDATES = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")
REGULAR_FONT_CANDIDATES = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont


class FontSet:
    """Sized fonts for fallback glyphs (bold) and the placeholder caption (regular)."""

    def __init__(self, bold_font: Path | None = None, regular_font: Path | None = None) -> None:
        self.bold_candidates = ((str(bold_font),) if bold_font else ()) + BOLD_FONT_CANDIDATES
        self.regular_candidates = ((str(regular_font),) if regular_font else ()) + REGULAR_FONT_CANDIDATES
        self._cache: Dict[Tuple[str, float], Font] = {}

    def bold(self, size: float) -> Font:
        return self._load("bold", self.bold_candidates, size)

    def regular(self, size: float) -> Font:
        return self._load("regular", self.regular_candidates, size)

    def _load(self, style: str, candidates: Tuple[str, ...], size: float) -> Font:
        key = (style, size)
        font = self._cache.get(key)
        if font is not None:
            return font
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, size)
                break
            except OSError:
                continue
        else:
            logger.debug("No %s TrueType face found; using Pillow's default font", style)
            font = ImageFont.load_default(size)
        self._cache[key] = font
        return font


def new_surface(canvas: CanvasTarget, background: Tuple[int, int, int]) -> Image.Image:
    return Image.new("RGB", canvas.size, color=background)


def paint_image(surface: Image.Image, placement: GlyphPlacement, asset: GlyphAsset) -> None:
    size = (max(int(round(placement.draw_width)), 1), max(int(round(placement.draw_height)), 1))
    scaled = asset.image.resize(size, Image.Resampling.LANCZOS)
    left = int(round(placement.x))
    top = int(round(placement.y))
    surface.paste(scaled, (left, top), scaled)


def paint_fallback(surface: Image.Image, placement: GlyphPlacement, fonts: FontSet) -> None:
    draw = ImageDraw.Draw(surface)
    font = fonts.bold(placement.font_size)
    draw.text(placement.center, placement.char, fill=FALLBACK_GLYPH_COLOR, font=font, anchor="mm")


def paint_layout(
    surface: Image.Image,
    layout: Layout,
    glyphs: Mapping[str, Optional[GlyphAsset]],
    fonts: FontSet,
) -> int:
    """Paint every placement; a placement that fails is skipped. Returns the number painted."""
    painted = 0
    for placement in layout.placements:
        try:
            asset = glyphs.get(placement.char)
            if placement.is_fallback or asset is None:
                paint_fallback(surface, placement, fonts)
            else:
                paint_image(surface, placement, asset)
        except (OSError, ValueError) as exc:
            logger.warning(
                "Skipping glyph %r at (%.1f, %.1f): %s", placement.char, placement.x, placement.y, exc
            )
            continue
        painted += 1
    return painted


def paint_placeholder(
    surface: Image.Image,
    metrics: LayoutMetrics,
    fonts: FontSet,
    caption: str = PLACEHOLDER_CAPTION,
) -> None:
    draw = ImageDraw.Draw(surface)
    font = fonts.regular(metrics.caption_font_size)
    center = (surface.width / 2, surface.height / 2)
    draw.text(center, caption, fill=PLACEHOLDER_COLOR, font=font, anchor="mm")
