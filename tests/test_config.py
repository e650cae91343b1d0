from pathlib import Path

import pytest

from glyph_layout.config import DEFAULT_EXPORT_FILENAME, LayoutConfig, Settings
from glyph_layout.metrics import LayoutMetrics

SETTINGS_ENV = (
    "GLYPH_DIR",
    "GLYPH_BASE_URL",
    "GLYPH_BUNDLE",
    "GLYPH_BOLD_FONT",
    "VIEWPORT_WIDTH",
    "VIEWPORT_HEIGHT",
    "EXPORT_FILENAME",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
    # keep load_dotenv from picking up a developer's .env
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("glyph_layout.config.load_dotenv", lambda *args, **kwargs: False)
    return monkeypatch


def test_defaults_match_editor_defaults():
    config = LayoutConfig()
    assert (config.letter_size, config.line_spacing) == (60, 10)
    assert (config.alignment, config.aspect_ratio) == ("center", "square")
    assert config.background_rgb == (255, 255, 255)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"letter_size": 29},
        {"letter_size": 1001},
        {"line_spacing": -1},
        {"line_spacing": 101},
        {"alignment": "justify"},
        {"aspect_ratio": "cinema"},
        {"background_color": "not-a-colour"},
    ],
)
def test_invalid_config_is_rejected(kwargs):
    with pytest.raises(ValueError):
        LayoutConfig(**kwargs)


def test_background_rgb_parses_hex():
    assert LayoutConfig(background_color="#1e90ff").background_rgb == (0x1E, 0x90, 0xFF)


def test_metrics_share_one_tracking_formula_across_scales():
    config = LayoutConfig(letter_size=60, line_spacing=10)
    preview = LayoutMetrics.for_scale(config, 1)
    export = LayoutMetrics.for_scale(config, 5)
    assert preview.spacing == pytest.approx(-6)
    assert export.spacing == pytest.approx(preview.spacing * 5)
    assert export.padding == preview.padding * 5
    assert export.line_height == pytest.approx(preview.line_height * 5)
    assert export.fallback_font_size == pytest.approx(preview.fallback_font_size * 5)


def test_settings_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.glyph_dir is None
    assert settings.glyph_base_url is None
    assert (settings.viewport_width, settings.viewport_height) == (1440, 900)
    assert settings.export_filename == DEFAULT_EXPORT_FILENAME


def test_settings_read_environment(clean_env):
    clean_env.setenv("GLYPH_DIR", "/srv/glyphs")
    clean_env.setenv("GLYPH_BASE_URL", "https://cdn.example/img")
    clean_env.setenv("VIEWPORT_WIDTH", "1920")
    clean_env.setenv("VIEWPORT_HEIGHT", "1080")
    clean_env.setenv("EXPORT_FILENAME", "poster.png")
    settings = Settings.from_env()
    assert settings.glyph_dir == Path("/srv/glyphs")
    assert settings.glyph_base_url == "https://cdn.example/img"
    assert (settings.viewport_width, settings.viewport_height) == (1920, 1080)
    assert settings.export_filename == "poster.png"


def test_settings_reject_non_numeric_viewport(clean_env):
    clean_env.setenv("VIEWPORT_HEIGHT", "tall")
    with pytest.raises(ValueError, match="VIEWPORT_HEIGHT"):
        Settings.from_env()
