from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Tuple

from .metrics import LayoutMetrics

LETTER_OR_DIGIT = "letterOrDigit"
SPACE = "space"
IGNORED = "ignored"

GLYPH_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789")

_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def classify_char(ch: str) -> str:
    if ch in GLYPH_CHARS:
        return LETTER_OR_DIGIT
    if ch == " ":
        return SPACE
    return IGNORED


def char_advance(ch: str, metrics: LayoutMetrics) -> float:
    kind = classify_char(ch)
    if kind == LETTER_OR_DIGIT:
        return metrics.glyph_advance
    if kind == SPACE:
        return metrics.space_width
    return 0.0


@dataclass(frozen=True)
class TextDocument:
    text: str
    lines: Tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> "TextDocument":
        upper = text.upper()
        return cls(text=upper, lines=tuple(_LINE_BREAK_RE.split(upper)))

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()

    @property
    def line_count(self) -> int:
        return len(self.lines)

    def unique_glyph_chars(self) -> Tuple[str, ...]:
        return tuple(sorted({ch for ch in self.text if ch in GLYPH_CHARS}))


@dataclass(frozen=True)
class LineMetrics:
    advance_widths: Tuple[float, ...]
    max_line_width: float


def measure_line(line: str, metrics: LayoutMetrics) -> float:
    # The last glyph on a line carries no trailing gap.
    return sum(char_advance(ch, metrics) for ch in line) - metrics.spacing


def measure_lines(document: TextDocument, metrics: LayoutMetrics) -> LineMetrics:
    widths = tuple(measure_line(line, metrics) for line in document.lines)
    return LineMetrics(advance_widths=widths, max_line_width=max(widths, default=0.0))
