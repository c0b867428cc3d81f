"""
Entry point and CLI for the load → draw → save cycle.

Packages:
- inkpdf.docs: PDF decoding/encoding (PyMuPDF) and payload helpers
- inkpdf.input: pointer/touch events, coordinate mapping
- inkpdf.render: raster surfaces, freehand strokes
- inkpdf.pipeline: PageRenderer, DocumentSession, ExportPipeline, Controller
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

from inkpdf.config import Settings, configure_logging, load_settings
from inkpdf.docs.model import ExportOptions
from inkpdf.docs.payload import encode_payload
from inkpdf.errors import InkPdfError
from inkpdf.input.events import EventKind, PointerEvent, Rect
from inkpdf.pipeline import Controller, DocumentSession, build_controller

logger = logging.getLogger("inkpdf.cli")

__all__ = [
    "build_controller",
    "replay_strokes",
    "annotate_file",
]


def _parse_format(value: Optional[str]):
    """'a4' stays a paper name, '210x297' becomes a (width, height) pair."""
    if value is None:
        return None
    parts = value.lower().split("x")
    if len(parts) == 2:
        try:
            return float(parts[0]), float(parts[1])
        except ValueError:
            pass
    return value


def _load_strokes(path: str) -> List[Dict[str, Any]]:
    with open(path, "r", encoding="utf-8") as f:
        strokes = json.load(f)
    if not isinstance(strokes, list):
        raise ValueError("Strokes file must contain a JSON list")
    return strokes


def replay_strokes(session: DocumentSession, strokes: List[Dict[str, Any]]) -> int:
    """Feed recorded strokes to the session as synthetic pointer events.

    Each stroke is {"page": n, "points": [[x, y], ...]} with optional
    "display": [left, top, width, height] (defaults to the surface's 1:1
    rect) and "touch": true. Returns the number of strokes replayed.
    """
    replayed = 0
    for stroke in strokes:
        try:
            surface = session.surface(int(stroke["page"]))
        except (KeyError, ValueError, TypeError):
            logger.warning("Skipping stroke for unknown page: %r", stroke.get("page"))
            continue
        points: List[Tuple[float, float]] = [tuple(p) for p in stroke.get("points", [])]
        if not points:
            continue
        display = stroke.get("display")
        if display:
            surface.layout(Rect(*display))
        factory = PointerEvent.touch if stroke.get("touch") else PointerEvent.mouse
        first, *rest = points
        surface.events.dispatch(factory(EventKind.DOWN, *first))
        for point in rest:
            surface.events.dispatch(factory(EventKind.MOVE, *point))
        surface.events.dispatch(factory(EventKind.UP, *points[-1]))
        replayed += 1
    return replayed


async def annotate_file(
    file_path: str,
    out_path: str,
    settings: Settings,
    strokes: Optional[List[Dict[str, Any]]] = None,
    drawing_enabled: bool = True,
    options: Optional[ExportOptions] = None,
) -> Dict[str, Any]:
    """Load a PDF, replay strokes on it and write the re-encoded document."""
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"PDF file not found: {file_path}")
    with open(file_path, "rb") as f:
        data = f.read()

    controller: Controller = build_controller(settings)
    if options is not None:
        controller.export_options = options
    controller.reload_after_save = False
    controller.set_drawing_enabled(drawing_enabled)
    try:
        await controller.set_source(encode_payload(data))
        replayed = replay_strokes(controller.session, strokes or [])
        pages = controller.session.page_count
        out_data = await controller.pipeline.export(controller.export_options)
    finally:
        controller.dispose()

    with open(out_path, "wb") as f:
        f.write(out_data)
    return {"output_path": out_path, "pages": pages, "strokes": replayed}


def _cli() -> None:
    """CLI for annotating a PDF.

    --file / -f: Input PDF
    --out / -o: Output PDF (default: <input>.annotated.pdf)
    --strokes: JSON file with strokes to draw
    --scale: Render scale factor (default from settings, 2.0)
    --page-format / --page-orientation: geometry of pages after the first
    --doc-format / --doc-orientation / --unit: document (first page) geometry
    --image-format: png|jpeg page images
    --no-draw: load and save without applying strokes
    --config: settings JSON (default: config/settings.json)
    """
    import argparse

    parser = argparse.ArgumentParser(description="Draw freehand strokes on a PDF and save it as a new PDF.")
    parser.add_argument("--file", "-f", type=str, required=True, help="Path to input PDF")
    parser.add_argument("--out", "-o", type=str, help="Path to output PDF (default: <input>.annotated.pdf)")
    parser.add_argument("--strokes", type=str, help="JSON file with strokes [{page, points, display?, touch?}]")
    parser.add_argument("--scale", type=float, help="Render scale factor (default: 2.0)")
    parser.add_argument("--page-format", type=str, help="Format of pages after the first, e.g. a4 or 210x297")
    parser.add_argument("--page-orientation", type=str, choices=["portrait", "landscape", "p", "l"])
    parser.add_argument("--doc-format", type=str, help="Document (first page) format, e.g. a4, letter")
    parser.add_argument("--doc-orientation", type=str, choices=["portrait", "landscape", "p", "l"])
    parser.add_argument("--unit", type=str, choices=["pt", "mm", "cm", "in", "px", "pc"])
    parser.add_argument("--image-format", type=str, choices=["png", "jpeg"])
    parser.add_argument("--no-draw", action="store_true", help="Disable drawing; strokes are ignored")
    parser.add_argument("--config", type=str, help="Settings JSON path")
    parser.add_argument("--log-level", type=str, help="Logging level (default from settings: INFO)")

    args = parser.parse_args()

    settings = load_settings(args.config)
    configure_logging(args.log_level or settings.log_level)

    if args.scale is not None:
        if args.scale <= 0:
            print("--scale must be positive")
            raise SystemExit(2)
        settings.render_scale = args.scale
    if args.page_format:
        settings.page_format = _parse_format(args.page_format)
    if args.page_orientation:
        settings.page_orientation = args.page_orientation
    if args.doc_format:
        settings.document_format = _parse_format(args.doc_format)
    if args.doc_orientation:
        settings.document_orientation = args.doc_orientation
    if args.unit:
        settings.document_unit = args.unit
    if args.image_format:
        settings.image_format = args.image_format

    strokes: List[Dict[str, Any]] = []
    if args.strokes:
        try:
            strokes = _load_strokes(args.strokes)
        except (OSError, ValueError) as e:
            print(f"Could not read strokes: {e}")
            raise SystemExit(2)

    out_path = args.out or f"{os.path.splitext(args.file)[0]}.annotated.pdf"
    try:
        result = asyncio.run(
            annotate_file(args.file, out_path, settings, strokes=strokes, drawing_enabled=not args.no_draw)
        )
    except FileNotFoundError as e:
        print(str(e))
        raise SystemExit(2)
    except InkPdfError as e:
        print(f"Failed: {e}")
        raise SystemExit(1)

    print(f"Saved annotated PDF to: {result['output_path']}")
    print(f"Pages: {result['pages']}, strokes replayed: {result['strokes']}")


if __name__ == "__main__":
    _cli()
