#!/usr/bin/env python3
"""
Compose a thumbnail from a style preset and export it as a 1280x720 PNG.

Usage:
    python export_thumbnail.py
    python export_thumbnail.py --preset neon --background data/images/bg.png
    python export_thumbnail.py --background https://example.com/bg.jpg --title "TIPS CEPAT"
    python export_thumbnail.py --output data/output/my_thumb.png --preview data/output/preview.png

Configuration: data/editor_config.json (see thumbnail_editor.config)
"""

import argparse
import asyncio
import sys
from pathlib import Path

from thumbnail_editor.background import ImageLoadError
from thumbnail_editor.config import load_editor_config
from thumbnail_editor.editor import Editor
from thumbnail_editor.elements import TextElement
from thumbnail_editor.presets import PRESETS


def build_editor(preset: str, background: str = None, title: str = None) -> Editor:
    editor = Editor(load_editor_config())
    if background:
        asyncio.run(editor.upload_background(background))
    editor.apply_preset(preset)
    if title:
        for element in editor.scene:
            if isinstance(element, TextElement):
                editor.update(element.id, text=title)
                break
    return editor


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Compose and export a 1280x720 thumbnail"
    )
    parser.add_argument(
        "--preset", "-p",
        choices=list(PRESETS),
        default="clean",
        help="Style preset (default: clean)"
    )
    parser.add_argument(
        "--background", "-b",
        type=str,
        default=None,
        help="Background image path or http(s) URL (default: solid color)"
    )
    parser.add_argument(
        "--title", "-t",
        type=str,
        default=None,
        help="Override the preset headline"
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output path (default: data/output/thumbnail.png)"
    )
    parser.add_argument(
        "--preview",
        type=str,
        default=None,
        help="Also write a half-size preview with guides to this path"
    )

    args = parser.parse_args(argv)

    try:
        editor = build_editor(args.preset, args.background, args.title)
    except ImageLoadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    a = editor.analysis
    print(f"Score: {a.score}/100 ({a.band})")
    print(f"  Words: {a.word_count} | Text area: {a.area_ratio * 100:.1f}% | Contrast: {a.avg_contrast:.2f}:1")
    for s in a.suggestions:
        print(f"  - {s}")

    editor.save(Path(args.output) if args.output else None)
    if args.preview:
        out = Path(args.preview)
        out.parent.mkdir(parents=True, exist_ok=True)
        editor.preview(scale=0.5).convert("RGB").save(str(out), "PNG")
        print(f"  Preview: {out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
