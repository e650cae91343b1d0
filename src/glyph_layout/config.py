from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple

from dotenv import load_dotenv
from PIL import ImageColor

ALIGNMENTS = ("left", "center", "right")
ASPECT_RATIOS = ("auto", "square", "wide", "ultrawide", "portrait")

LETTER_SIZE_RANGE = (30, 1000)
LINE_SPACING_RANGE = (0, 100)

DEFAULT_EXPORT_FILENAME = "kweensans.png"


@dataclass(frozen=True)
class LayoutConfig:
    letter_size: float = 60
    line_spacing: float = 10
    alignment: str = "center"
    aspect_ratio: str = "square"
    background_color: str = "#ffffff"
    # Inter-glyph gap as a fraction of letter_size; negative values tuck glyphs together.
    tracking: float = -0.1

    def __post_init__(self) -> None:
        low, high = LETTER_SIZE_RANGE
        if not low <= self.letter_size <= high:
            raise ValueError(f"letter_size must be within {low}-{high}px, got {self.letter_size}")
        low, high = LINE_SPACING_RANGE
        if not low <= self.line_spacing <= high:
            raise ValueError(f"line_spacing must be within {low}-{high}px, got {self.line_spacing}")
        if self.alignment not in ALIGNMENTS:
            raise ValueError(f"Unknown alignment {self.alignment!r} (expected one of {', '.join(ALIGNMENTS)})")
        if self.aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(
                f"Unknown aspect ratio {self.aspect_ratio!r} (expected one of {', '.join(ASPECT_RATIOS)})"
            )
        try:
            ImageColor.getrgb(self.background_color)
        except ValueError as exc:
            raise ValueError(f"Invalid background color {self.background_color!r}") from exc

    @property
    def background_rgb(self) -> Tuple[int, int, int]:
        red, green, blue = ImageColor.getrgb(self.background_color)[:3]
        return red, green, blue


def _as_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _as_path(value: str | None) -> Path | None:
    if not value:
        return None
    return Path(value).expanduser()


@dataclass(frozen=True)
class Settings:
    glyph_dir: Path | None = None
    glyph_base_url: str | None = None
    glyph_bundle: Path | None = None
    bold_font: Path | None = None
    viewport_width: int = 1440
    viewport_height: int = 900
    export_filename: str = DEFAULT_EXPORT_FILENAME

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            glyph_dir=_as_path(os.environ.get("GLYPH_DIR")),
            glyph_base_url=os.environ.get("GLYPH_BASE_URL") or None,
            glyph_bundle=_as_path(os.environ.get("GLYPH_BUNDLE")),
            bold_font=_as_path(os.environ.get("GLYPH_BOLD_FONT")),
            viewport_width=_as_int("VIEWPORT_WIDTH", 1440),
            viewport_height=_as_int("VIEWPORT_HEIGHT", 900),
            export_filename=os.environ.get("EXPORT_FILENAME") or DEFAULT_EXPORT_FILENAME,
        )
