"""CLI entry point: render text as glyph pictures and write the high-resolution PNG."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .compositor import FontSet
from .config import ALIGNMENTS, ASPECT_RATIOS, LayoutConfig, Settings
from .glyphs import GlyphCache, build_glyph_source
from .render import EXPORT_SCALE, PREVIEW_SCALE, RenderResult
from .session import RenderSession
from .sizing import Viewport


def parse_viewport(value: str) -> Viewport:
    try:
        width, height = value.lower().split("x", 1)
        return Viewport(int(width), int(height))
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"viewport must look like 1440x900, got {value!r}") from exc


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render text as a composition of glyph pictures.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--text", help="Text to render; use \\n in the shell for line breaks.")
    source.add_argument("--text-file", type=Path, help="Read the text to render from this file.")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Where to write the PNG (defaults to EXPORT_FILENAME, kweensans.png).",
    )
    parser.add_argument("--glyph-dir", type=Path, help="Directory holding <CHAR>.png / <CHAR>.svg glyphs.")
    parser.add_argument("--glyph-url", help="Base URL serving <CHAR>.png glyphs.")
    parser.add_argument("--glyph-bundle", type=Path, help="JSON bundle of SVG glyph paths.")
    parser.add_argument("--bold-font", type=Path, help="TrueType face for fallback glyphs.")
    parser.add_argument("--letter-size", type=int, default=60, help="Glyph box size in preview pixels (30-1000).")
    parser.add_argument("--line-spacing", type=int, default=10, help="Gap between lines in preview pixels (0-100).")
    parser.add_argument("--alignment", choices=ALIGNMENTS, default="center")
    parser.add_argument("--aspect-ratio", choices=ASPECT_RATIOS, default="square")
    parser.add_argument("--background", default="#ffffff", help="Background colour as a hex RGB string.")
    parser.add_argument("--viewport", type=parse_viewport, default=None, help="Display size as WIDTHxHEIGHT.")
    parser.add_argument(
        "--preview",
        action="store_true",
        help=f"Write the {PREVIEW_SCALE}x preview instead of the {EXPORT_SCALE}x export.",
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    args = parser.parse_args(argv)

    if args.text is None and args.text_file is None:
        parser.error("one of --text or --text-file is required")
    try:
        args.config = LayoutConfig(
            letter_size=args.letter_size,
            line_spacing=args.line_spacing,
            alignment=args.alignment,
            aspect_ratio=args.aspect_ratio,
            background_color=args.background,
        )
    except ValueError as exc:
        parser.error(str(exc))
    try:
        args.settings = Settings.from_env()
    except ValueError as exc:
        parser.error(str(exc))
    return args


def summarize(result: RenderResult, output_path: Path) -> Dict[str, Any]:
    plan = result.plan
    placements = plan.layout.placements if plan.layout is not None else ()
    return {
        "output": str(output_path),
        "width": result.image.width,
        "height": result.image.height,
        "scale": plan.canvas.scale_factor,
        "lines": plan.document.line_count,
        "glyphs": len(placements),
        "fallbacks": sum(1 for placement in placements if placement.is_fallback),
        "placeholder": plan.is_placeholder,
    }


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    settings = args.settings
    settings = dataclasses.replace(
        settings,
        glyph_dir=args.glyph_dir or settings.glyph_dir,
        glyph_base_url=args.glyph_url or settings.glyph_base_url,
        glyph_bundle=args.glyph_bundle or settings.glyph_bundle,
        bold_font=args.bold_font or settings.bold_font,
    )
    if args.text is not None:
        text = args.text.replace("\\n", "\n")
    else:
        text = args.text_file.read_text(encoding="utf-8")
    viewport = args.viewport or Viewport(settings.viewport_width, settings.viewport_height)
    output_path = (args.output or Path(settings.export_filename)).expanduser().resolve()

    cache = GlyphCache(build_glyph_source(settings))
    fonts = FontSet(bold_font=settings.bold_font)
    session = RenderSession(cache, config=args.config, viewport=viewport, text=text, fonts=fonts)

    if args.preview:
        result = session.preview()
        output_path.parent.mkdir(parents=True, exist_ok=True)
        result.image.save(output_path, format="PNG")
    else:
        result = session.export(output_path)
    session.close()

    json.dump(summarize(result, output_path), sys.stdout)
    sys.stdout.write("\n")


if __name__ == "__main__":
    main()
