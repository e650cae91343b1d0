from __future__ import annotations

import dataclasses
import logging
from concurrent.futures import Executor
from pathlib import Path
from typing import Any, Optional

from .compositor import FontSet
from .config import LayoutConfig
from .glyphs import GlyphCache
from .render import RenderResult, export_png, render_preview
from .segmenter import TextDocument
from .sizing import Viewport

logger = logging.getLogger(__name__)


class RenderSession:
    """
    Holds the current text, layout settings and viewport, and re-renders on demand.

    Any input change, or a glyph landing in the cache, marks the preview stale;
    the next ``preview()`` call lays everything out again from scratch. With an
    executor, glyphs are fetched in the background and the preview draws
    fallback glyphs until they arrive; without one they are resolved inline.
    """

    def __init__(
        self,
        cache: GlyphCache,
        config: LayoutConfig | None = None,
        viewport: Viewport | None = None,
        text: str = "",
        fonts: FontSet | None = None,
        executor: Executor | None = None,
    ) -> None:
        self.cache = cache
        self.config = config or LayoutConfig()
        self.viewport = viewport or Viewport(1440, 900)
        self.text = text
        self.fonts = fonts or FontSet()
        self.executor = executor
        self.render_count = 0
        self._stale = True
        self._latest: Optional[RenderResult] = None
        self._unsubscribe = cache.subscribe(self._on_glyph_resolved)

    @property
    def stale(self) -> bool:
        return self._stale

    def close(self) -> None:
        self._unsubscribe()

    def update(
        self,
        text: str | None = None,
        viewport: Viewport | None = None,
        **config_changes: Any,
    ) -> None:
        if text is not None:
            self.text = text
        if viewport is not None:
            self.viewport = viewport
        if config_changes:
            self.config = dataclasses.replace(self.config, **config_changes)
        self._stale = True

    def preview(self) -> RenderResult:
        if not self._stale and self._latest is not None:
            return self._latest
        document = TextDocument.from_text(self.text)
        if not document.is_blank:
            chars = document.unique_glyph_chars()
            if self.executor is not None:
                self.cache.prefetch(chars, self.executor)
            else:
                self.cache.resolve_many(chars)
        # Cleared before the snapshot so a glyph landing mid-render re-marks it.
        self._stale = False
        self._latest = render_preview(self.text, self.config, self.viewport, self.cache.snapshot(), self.fonts)
        self.render_count += 1
        return self._latest

    def export(self, output_path: Path) -> RenderResult:
        document = TextDocument.from_text(self.text)
        if not document.is_blank:
            self.cache.resolve_many(document.unique_glyph_chars())
        return export_png(self.text, self.config, self.viewport, self.cache.snapshot(), output_path, self.fonts)

    def _on_glyph_resolved(self, char: str) -> None:
        logger.debug("Glyph %r resolved; preview marked stale", char)
        self._stale = True
