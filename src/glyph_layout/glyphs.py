from __future__ import annotations

import io
import json
import logging
import threading
from concurrent.futures import Executor, Future
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Protocol

import requests
from PIL import Image
from svgpathtools import parse_path

from .config import Settings
from .segmenter import GLYPH_CHARS

logger = logging.getLogger(__name__)

# Height of rasterized vector glyphs; large enough to stay crisp at export scale.
SVG_RASTER_HEIGHT_PX = 1024


@dataclass(frozen=True)
class GlyphAsset:
    char: str
    image: Image.Image
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        if self.height == 0:
            return 1.0
        return self.width / self.height

    @classmethod
    def from_image(cls, char: str, image: Image.Image) -> "GlyphAsset":
        image = image.convert("RGBA")
        return cls(char=char, image=image, width=image.width, height=image.height)


class GlyphSource(Protocol):
    def resolve(self, char: str) -> Optional[GlyphAsset]:
        ...


def decode_png(char: str, payload: bytes) -> GlyphAsset:
    image = Image.open(io.BytesIO(payload))
    image.load()
    return GlyphAsset.from_image(char, image)


def rasterize_svg(char: str, svg: bytes, output_height: int | None = None) -> GlyphAsset:
    # cairosvg binds libcairo at import time; only vector glyphs need it.
    from cairosvg import svg2png

    png_bytes = svg2png(bytestring=svg, output_height=output_height)
    return decode_png(char, png_bytes)


class DirectoryGlyphSource:
    """Glyph pictures stored as ``<root>/<CHAR>.png`` or ``<root>/<CHAR>.svg``."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def resolve(self, char: str) -> Optional[GlyphAsset]:
        png_path = self.root / f"{char}.png"
        svg_path = self.root / f"{char}.svg"
        try:
            if png_path.exists():
                return decode_png(char, png_path.read_bytes())
            if svg_path.exists():
                return rasterize_svg(char, svg_path.read_bytes(), SVG_RASTER_HEIGHT_PX)
        except Exception as exc:
            logger.warning("Failed to load glyph %r from %s: %s", char, self.root, exc)
            return None
        logger.debug("No glyph asset for %r in %s", char, self.root)
        return None


class HttpGlyphSource:
    """Glyph pictures fetched from ``<base_url>/<CHAR>.png``."""

    def __init__(
        self,
        base_url: str,
        session: requests.Session | None = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def resolve(self, char: str) -> Optional[GlyphAsset]:
        url = f"{self.base_url}/{char}.png"
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("Glyph fetch for %r failed: %s", char, exc)
            return None
        if response.status_code != 200:
            logger.debug("Glyph fetch for %r returned HTTP %s", char, response.status_code)
            return None
        try:
            return decode_png(char, response.content)
        except OSError as exc:
            logger.warning("Glyph %r from %s is not a readable image: %s", char, url, exc)
            return None


@dataclass(frozen=True)
class GlyphPath:
    char: str
    path_data: str


def iter_glyph_paths(bundle: dict) -> Iterable[GlyphPath]:
    glyphs = bundle.get("glyphs", {})
    for char, payload in glyphs.items():
        if not isinstance(payload, dict):
            continue
        if payload.get("type", "path") != "path":
            continue
        path_data = payload.get("path")
        if not path_data:
            continue
        yield GlyphPath(char=str(char).upper(), path_data=path_data)


def rasterize_glyph_path(glyph: GlyphPath, output_height: int = SVG_RASTER_HEIGHT_PX) -> GlyphAsset:
    path = parse_path(glyph.path_data)
    xmin, xmax, ymin, ymax = path.bbox()
    width_units = max(xmax - xmin, 1e-6)
    height_units = max(ymax - ymin, 1e-6)

    svg = (
        f'<svg xmlns="http://www.w3.org/2000/svg" '
        f'width="{width_units}" height="{height_units}" '
        f'viewBox="{xmin} {ymin} {width_units} {height_units}">'
        f'<path d="{glyph.path_data}" fill="#000000" />'
        "</svg>"
    )
    return rasterize_svg(glyph.char, svg.encode("utf-8"), output_height)


class BundleGlyphSource:
    """Vector glyphs from a JSON bundle: ``{"glyphs": {"A": {"path": "M0 0 ..."}}}``."""

    def __init__(self, bundle_path: Path) -> None:
        self.bundle_path = Path(bundle_path)
        if not self.bundle_path.exists():
            raise FileNotFoundError(f"missing glyph bundle at {self.bundle_path}")
        bundle = json.loads(self.bundle_path.read_text())
        self.paths: Dict[str, GlyphPath] = {glyph.char: glyph for glyph in iter_glyph_paths(bundle)}

    def resolve(self, char: str) -> Optional[GlyphAsset]:
        glyph = self.paths.get(char)
        if glyph is None:
            return None
        try:
            return rasterize_glyph_path(glyph)
        except Exception as exc:
            logger.warning("Failed to rasterize glyph %r from %s: %s", char, self.bundle_path, exc)
            return None


def build_glyph_source(settings: Settings) -> GlyphSource:
    if settings.glyph_bundle is not None:
        return BundleGlyphSource(settings.glyph_bundle)
    if settings.glyph_base_url:
        return HttpGlyphSource(settings.glyph_base_url)
    return DirectoryGlyphSource(settings.glyph_dir or Path("img"))


GlyphListener = Callable[[str], None]


class GlyphCache:
    """
    Append-only map from character to resolved glyph (or ``None`` when missing).

    Each character is resolved at most once per cache. Characters still being
    fetched are absent from ``snapshot()`` and render with the fallback glyph.
    """

    def __init__(self, source: GlyphSource) -> None:
        self.source = source
        self._entries: Dict[str, Optional[GlyphAsset]] = {}
        self._pending: Dict[str, Future] = {}
        self._listeners: List[GlyphListener] = []
        self._lock = threading.Lock()

    def __contains__(self, char: str) -> bool:
        with self._lock:
            return char in self._entries

    def lookup(self, char: str) -> Optional[GlyphAsset]:
        with self._lock:
            return self._entries.get(char)

    def snapshot(self) -> Mapping[str, Optional[GlyphAsset]]:
        with self._lock:
            return MappingProxyType(dict(self._entries))

    def subscribe(self, listener: GlyphListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def resolve(self, char: str) -> Optional[GlyphAsset]:
        if char not in GLYPH_CHARS:
            return None
        with self._lock:
            if char in self._entries:
                return self._entries[char]
            future = self._pending.get(char)
            owner = future is None
            if owner:
                future = Future()
                self._pending[char] = future
        if owner:
            self._fetch(char, future)
        return future.result()

    def resolve_many(self, chars: Iterable[str]) -> Dict[str, Optional[GlyphAsset]]:
        return {char: self.resolve(char) for char in chars}

    def prefetch(self, chars: Iterable[str], executor: Executor) -> List[Future]:
        """Resolve ``chars`` in the background; listeners fire as each glyph lands."""
        futures: List[Future] = []
        for char in chars:
            if char not in GLYPH_CHARS:
                continue
            with self._lock:
                if char in self._entries or char in self._pending:
                    continue
                future: Future = Future()
                self._pending[char] = future
            try:
                executor.submit(self._fetch, char, future)
            except Exception:
                # release the slot so resolve() fetches inline instead of waiting
                with self._lock:
                    self._pending.pop(char, None)
                future.set_result(None)
                raise
            futures.append(future)
        return futures

    def _fetch(self, char: str, future: Future) -> None:
        try:
            asset = self.source.resolve(char)
        except Exception as exc:
            logger.warning("Glyph source raised while resolving %r: %s", char, exc)
            asset = None
        listeners = self._store(char, asset)
        future.set_result(asset)
        if asset is None:
            logger.debug("Glyph %r unavailable; fallback glyph will be drawn", char)
            return
        logger.debug("Resolved glyph %r (%dx%d)", char, asset.width, asset.height)
        self._notify(char, listeners)

    def _store(self, char: str, asset: Optional[GlyphAsset]) -> List[GlyphListener]:
        with self._lock:
            self._pending.pop(char, None)
            self._entries[char] = asset
            return list(self._listeners)

    def _notify(self, char: str, listeners: List[GlyphListener]) -> None:
        for listener in listeners:
            try:
                listener(char)
            except Exception as exc:
                logger.warning("Glyph listener failed for %r: %s", char, exc)
