"""
Thumbnail Editor - MCP Server
=============================
Model Context Protocol server exposing one editor session as tools.

Tools:
  - editor_status: Elements (bottom to top), selection, background, analysis
  - add_element: Add text / rect / circle / arrow / badge with optional overrides
  - select_element: Select by id, by canvas point (hit-test) or clear
  - update_element: Edit properties of an element (default: the selection)
  - move_element: Drag end, set x/y
  - transform_element: Transform end, fold scale + rotation into the element
  - arrange_element: Bring the selection to front / send to back
  - remove_element: Delete the selection
  - set_background: Adjust background settings
  - upload_background: Load a background image from a path or URL
  - apply_preset: Apply a style preset
  - apply_swatch: Apply a quick palette color
  - analyze_thumbnail: Effectiveness score + suggestions
  - preview_thumbnail: Render a scaled preview with guides
  - export_thumbnail: Export the final 1280x720 PNG
  - configure_editor: Update editor_config.json settings
"""

import contextlib
import json
import sys
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .background import Background
from .config import load_editor_config, resolve_data_path, save_editor_config
from .editor import Editor
from .elements import FACTORIES, element_to_dict
from .presets import SWATCHES, list_presets
from .transform import NodeTransform

app = Server("thumbnail-editor")

_editor: Optional[Editor] = None


def get_editor() -> Editor:
    """The single editor session of this server process."""
    global _editor
    if _editor is None:
        _editor = Editor(load_editor_config())
    return _editor


def reset_editor(editor: Optional[Editor] = None) -> Editor:
    global _editor
    _editor = editor or Editor(load_editor_config())
    return _editor


def _background_info(bg: Background) -> dict:
    info = {k: v for k, v in vars(bg.settings()).items()}
    info["image"] = f"{bg.image.width}x{bg.image.height}" if bg.image is not None else None
    return info


def _status(editor: Editor) -> dict:
    return {
        "elements": [element_to_dict(e) for e in editor.scene],
        "selected_id": editor.scene.selected_id,
        "background": _background_info(editor.background),
        "analysis": editor.analysis.to_dict(),
    }


def _format_analysis(editor: Editor) -> str:
    a = editor.analysis
    lines = [
        f"Score: {a.score}/100 ({a.band})",
        f"  Words: {a.word_count} | Text area: {a.area_ratio * 100:.1f}% | Contrast: {a.avg_contrast:.2f}:1",
    ]
    if a.suggestions:
        lines.append("Suggestions:")
        lines.extend(f"  - {s}" for s in a.suggestions)
    else:
        lines.append("Looks good! No suggestions.")
    return "\n".join(lines)


@app.list_tools()
async def list_tools() -> list[Tool]:
    return [
        Tool(
            name="editor_status",
            description=(
                "Return the full editor state as JSON: elements in z-order (first = bottom), "
                "the selected id, background settings and the current analysis. "
                "CALL THIS FIRST to see the composition."
            ),
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="add_element",
            description=(
                "Add an element on top of the z-order and select it. Kinds: text, rect, "
                "circle, arrow, badge. 'overrides' replaces default fields "
                "(e.g. {\"text\": \"WOW\", \"font_size\": 140})."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "kind": {"type": "string", "enum": list(FACTORIES)},
                    "overrides": {"type": "object", "description": "Field overrides"},
                },
                "required": ["kind"],
            },
        ),
        Tool(
            name="select_element",
            description=(
                "Select an element by id, or by clicking the canvas point x/y "
                "(topmost hit wins). With neither, clears the selection."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "x": {"type": "number"},
                    "y": {"type": "number"},
                },
                "required": [],
            },
        ),
        Tool(
            name="update_element",
            description=(
                "Edit element properties. Targets 'id' or the selection. "
                "Unknown ids are ignored."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "changes": {"type": "object"},
                },
                "required": ["changes"],
            },
        ),
        Tool(
            name="move_element",
            description="Drag end: move an element to x/y (off-canvas allowed).",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "x": {"type": "number"},
                    "y": {"type": "number"},
                },
                "required": ["id", "x", "y"],
            },
        ),
        Tool(
            name="transform_element",
            description=(
                "Transform end: fold scale_x/scale_y into the element's size "
                "(text/rect width+height, circle radius; ignored for arrow/badge) "
                "and set its rotation."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "scale_x": {"type": "number", "default": 1},
                    "scale_y": {"type": "number", "default": 1},
                    "rotation": {"type": "number"},
                },
                "required": ["id"],
            },
        ),
        Tool(
            name="arrange_element",
            description="Move the selected element to the front (top) or back (bottom).",
            inputSchema={
                "type": "object",
                "properties": {
                    "position": {"type": "string", "enum": ["front", "back"]},
                },
                "required": ["position"],
            },
        ),
        Tool(
            name="remove_element",
            description="Delete the selected element.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="set_background",
            description=(
                "Update background settings: brightness, contrast, saturation, blur, "
                "overlay (hex), overlay_alpha (0-1), bg_color (hex, used without image). "
                "Set clear_image=true to drop the background image."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "settings": {"type": "object"},
                    "clear_image": {"type": "boolean", "default": False},
                },
                "required": [],
            },
        ),
        Tool(
            name="upload_background",
            description="Load a background image from a file path or http(s) URL.",
            inputSchema={
                "type": "object",
                "properties": {"source": {"type": "string"}},
                "required": ["source"],
            },
        ),
        Tool(
            name="apply_preset",
            description="Apply a style preset: " + ", ".join(
                f"{k} ({v})" for k, v in list_presets().items()
            ),
            inputSchema={
                "type": "object",
                "properties": {"name": {"type": "string", "enum": list(list_presets())}},
                "required": ["name"],
            },
        ),
        Tool(
            name="apply_swatch",
            description=(
                "Apply a palette color: fills the selected text, otherwise sets the "
                "background overlay. Palette: " + ", ".join(SWATCHES)
            ),
            inputSchema={
                "type": "object",
                "properties": {"color": {"type": "string"}},
                "required": ["color"],
            },
        ),
        Tool(
            name="analyze_thumbnail",
            description="Effectiveness score (0-100), metrics and improvement suggestions.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        Tool(
            name="preview_thumbnail",
            description="Render a scaled preview PNG with guides (grid, thirds, safe zone).",
            inputSchema={
                "type": "object",
                "properties": {
                    "output_path": {"type": "string", "default": "output/preview.png"},
                    "scale": {"type": "number", "default": 0.5},
                    "guides": {"type": "object"},
                },
                "required": [],
            },
        ),
        Tool(
            name="export_thumbnail",
            description="Export the composition as a 1280x720 PNG (no guides).",
            inputSchema={
                "type": "object",
                "properties": {"output_path": {"type": "string"}},
                "required": [],
            },
        ),
        Tool(
            name="configure_editor",
            description="Deep-merge settings into editor_config.json (fonts, guides, export, images).",
            inputSchema={
                "type": "object",
                "properties": {"config": {"type": "object"}},
                "required": ["config"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    try:
        # stdout carries the protocol stream
        with contextlib.redirect_stdout(sys.stderr):
            result = await _handle_tool(name, arguments or {})
        return [TextContent(type="text", text=result)]
    except Exception as e:
        return [TextContent(type="text", text=f"ERROR: {str(e)}")]


async def _handle_tool(name: str, args: dict[str, Any]) -> str:
    editor = get_editor()

    # ── editor_status ─────────────────────────────────────────────
    if name == "editor_status":
        return json.dumps(_status(editor), ensure_ascii=False, indent=2)

    # ── add_element ───────────────────────────────────────────────
    elif name == "add_element":
        kind = args.get("kind", "")
        if not kind:
            return "ERROR: kind is required"
        element_id = editor.add(kind, args.get("overrides") or None)
        return (
            f"Element added!\n"
            f"  Kind: {kind}\n"
            f"  ID: {element_id} (selected)\n"
            f"  Layer: {len(editor.scene)} of {len(editor.scene)}\n\n"
            f"{_format_analysis(editor)}"
        )

    # ── select_element ────────────────────────────────────────────
    elif name == "select_element":
        if args.get("id"):
            selected = editor.select(args["id"])
        elif "x" in args and "y" in args:
            selected = editor.select_at(args["x"], args["y"])
        else:
            selected = editor.select(None)
        return f"Selected: {selected}" if selected else "Selection cleared"

    # ── update_element ────────────────────────────────────────────
    elif name == "update_element":
        changes = args.get("changes", {})
        if not changes:
            return "ERROR: changes is required"
        updated = editor.update(args.get("id"), **changes)
        if updated is None:
            return "No element updated (unknown id or nothing selected)"
        return (
            f"Element updated: {updated.id}\n"
            f"  Changed: {', '.join(sorted(changes))}\n\n"
            f"{_format_analysis(editor)}"
        )

    # ── move_element ──────────────────────────────────────────────
    elif name == "move_element":
        moved = editor.drag_end(args.get("id"), args["x"], args["y"])
        if moved is None:
            return "No element moved (unknown id)"
        return f"Moved {moved.id} to ({moved.x}, {moved.y})"

    # ── transform_element ─────────────────────────────────────────
    elif name == "transform_element":
        element = editor.scene.get(args.get("id"))
        if element is None:
            return "No element transformed (unknown id)"
        node = NodeTransform(
            x=element.x,
            y=element.y,
            scale_x=args.get("scale_x", 1),
            scale_y=args.get("scale_y", 1),
            rotation=args.get("rotation", element.rotation),
        )
        updated = editor.transform_end(element.id, node)
        return (
            f"Transform applied to {updated.id}\n"
            f"{json.dumps(element_to_dict(updated), ensure_ascii=False)}\n\n"
            f"{_format_analysis(editor)}"
        )

    # ── arrange_element ───────────────────────────────────────────
    elif name == "arrange_element":
        position = args.get("position", "")
        if position == "front":
            changed = editor.bring_to_front()
        elif position == "back":
            changed = editor.send_to_back()
        else:
            return "ERROR: position must be 'front' or 'back'"
        if not changed:
            return "Nothing selected"
        return f"Order (bottom to top): {', '.join(editor.scene.ids())}"

    # ── remove_element ────────────────────────────────────────────
    elif name == "remove_element":
        selected = editor.scene.selected_id
        if not editor.remove_selected():
            return "Nothing selected"
        return f"Removed {selected}\n\n{_format_analysis(editor)}"

    # ── set_background ────────────────────────────────────────────
    elif name == "set_background":
        editor.set_background(clear_image=bool(args.get("clear_image")), **(args.get("settings") or {}))
        return (
            f"Background updated\n"
            f"{json.dumps(_background_info(editor.background), indent=2)}\n\n"
            f"{_format_analysis(editor)}"
        )

    # ── upload_background ─────────────────────────────────────────
    elif name == "upload_background":
        source = args.get("source", "")
        if not source:
            return "ERROR: source is required"
        if not source.startswith(("http://", "https://")):
            source = resolve_data_path(source)
        installed = await editor.upload_background(source)
        if not installed:
            return "Upload superseded by a newer one"
        img = editor.background.image
        return f"Background loaded: {img.width}x{img.height}\n\n{_format_analysis(editor)}"

    # ── apply_preset ──────────────────────────────────────────────
    elif name == "apply_preset":
        added = editor.apply_preset(args.get("name", ""))
        return (
            f"Preset applied!\n"
            f"  Added: {', '.join(added)}\n\n"
            f"{_format_analysis(editor)}"
        )

    # ── apply_swatch ──────────────────────────────────────────────
    elif name == "apply_swatch":
        target = editor.apply_swatch(args.get("color", ""))
        return f"Swatch applied to {target}"

    # ── analyze_thumbnail ─────────────────────────────────────────
    elif name == "analyze_thumbnail":
        return _format_analysis(editor)

    # ── preview_thumbnail ─────────────────────────────────────────
    elif name == "preview_thumbnail":
        out = resolve_data_path(args.get("output_path", "output/preview.png"))
        img = editor.preview(scale=args.get("scale", 0.5), guides=args.get("guides"))
        out.parent.mkdir(parents=True, exist_ok=True)
        img.convert("RGB").save(str(out), "PNG")
        return f"Preview saved: {out} ({img.width}x{img.height})"

    # ── export_thumbnail ──────────────────────────────────────────
    elif name == "export_thumbnail":
        out = args.get("output_path")
        path = editor.save(resolve_data_path(out) if out else None)
        return f"Thumbnail exported: {path} (1280x720)\n\n{_format_analysis(editor)}"

    # ── configure_editor ──────────────────────────────────────────
    elif name == "configure_editor":
        updates = args.get("config", {})
        if not updates:
            return "ERROR: config is required"
        config = save_editor_config(updates)
        editor.config = config
        editor.uploader.timeout = config["images"]["fetch_timeout"]
        return f"Config updated\n{json.dumps(config, indent=2)}"

    else:
        return f"ERROR: Unknown tool '{name}'"


# ─── Main ─────────────────────────────────────────────────────────────

async def main():
    async with stdio_server() as (read_stream, write_stream):
        await app.run(read_stream, write_stream, app.create_initialization_options())
