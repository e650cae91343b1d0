from __future__ import annotations

from dataclasses import dataclass

from .config import LayoutConfig

PADDING_PX = 40
SPACE_WIDTH_RATIO = 0.5
FALLBACK_FONT_RATIO = 0.7
CAPTION_FONT_PX = 18


@dataclass(frozen=True)
class LayoutMetrics:
    """Linear measurements for one render pass, already multiplied by its scale."""

    scale: float
    letter_size: float
    line_spacing: float
    padding: float
    spacing: float
    space_width: float
    fallback_font_size: float
    caption_font_size: float

    @property
    def line_height(self) -> float:
        return self.letter_size + self.line_spacing

    @property
    def glyph_advance(self) -> float:
        return self.letter_size + self.spacing

    @classmethod
    def for_scale(cls, config: LayoutConfig, scale: float = 1) -> "LayoutMetrics":
        letter_size = config.letter_size * scale
        return cls(
            scale=scale,
            letter_size=letter_size,
            line_spacing=config.line_spacing * scale,
            padding=PADDING_PX * scale,
            spacing=letter_size * config.tracking,
            space_width=letter_size * SPACE_WIDTH_RATIO,
            fallback_font_size=letter_size * FALLBACK_FONT_RATIO,
            caption_font_size=CAPTION_FONT_PX * scale,
        )
