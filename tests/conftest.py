import sys
from concurrent.futures import Executor, Future
from pathlib import Path

import pytest
from PIL import Image

# Ensure the src/ package root is on sys.path for direct pytest runs
SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from glyph_layout.glyphs import GlyphAsset


def make_glyph_image(width, height, color=(255, 0, 0, 255)):
    return Image.new("RGBA", (width, height), color)


def make_asset(char, width=100, height=100, color=(255, 0, 0, 255)):
    return GlyphAsset.from_image(char, make_glyph_image(width, height, color))


class CountingSource:
    """Glyph source backed by a dict that records every resolve call."""

    def __init__(self, assets=None):
        self.assets = dict(assets or {})
        self.calls = []

    def resolve(self, char):
        self.calls.append(char)
        return self.assets.get(char)


class ManualExecutor(Executor):
    """Collects submitted work and runs it only when asked."""

    def __init__(self):
        self.jobs = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.jobs.append((fn, args, kwargs, future))
        return future

    def run_all(self):
        jobs, self.jobs = self.jobs, []
        for fn, args, kwargs, future in jobs:
            future.set_result(fn(*args, **kwargs))


@pytest.fixture
def glyph_dir(tmp_path):
    root = tmp_path / "img"
    root.mkdir()
    make_glyph_image(100, 100, (255, 0, 0, 255)).save(root / "A.png")
    make_glyph_image(200, 100, (0, 128, 0, 255)).save(root / "B.png")
    make_glyph_image(80, 80, (0, 0, 0, 255)).save(root / "H.png")
    make_glyph_image(50, 100, (0, 0, 0, 255)).save(root / "I.png")
    return root


@pytest.fixture
def glyphs():
    return {
        "A": make_asset("A"),
        "B": make_asset("B", 200, 100, (0, 128, 0, 255)),
        "H": make_asset("H", 80, 80, (0, 0, 0, 255)),
        "I": make_asset("I", 50, 100, (0, 0, 0, 255)),
    }
