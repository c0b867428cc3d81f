from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

import fitz  # PyMuPDF

from inkpdf.errors import EncodeError

from .model import DocumentOptions, PageFormat, PageOptions

logger = logging.getLogger(__name__)

# Points per document unit.
UNIT_SCALE = {
    "pt": 1.0,
    "mm": 72.0 / 25.4,
    "cm": 72.0 / 2.54,
    "in": 72.0,
    "px": 72.0 / 96.0,
    "pc": 12.0,
}

_ORIENTATIONS = {"p": "portrait", "portrait": "portrait", "l": "landscape", "landscape": "landscape"}

Geometry = Tuple[float, float, float, float]


class PdfEncoder(Protocol):
    def create(self, options: DocumentOptions):
        ...

    def add_page(self, handle, options: PageOptions) -> None:
        ...

    def page_size(self, handle) -> Tuple[float, float]:
        ...

    def add_image(self, handle, image: bytes, geometry: Geometry) -> None:
        ...

    def serialize(self, handle) -> bytes:
        ...

    def discard(self, handle) -> None:
        ...


def normalize_orientation(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    key = str(value).strip().lower()
    if key not in _ORIENTATIONS:
        raise EncodeError(f"Unknown page orientation: {value!r}")
    return _ORIENTATIONS[key]


def resolve_page_size(page_format: PageFormat, orientation: Optional[str], unit: str) -> Tuple[float, float]:
    """Return the page size in points for a paper name or (width, height) pair.

    Numeric sizes are expressed in `unit`. Orientation swaps the sides so
    that portrait pages are taller than wide and landscape pages wider.

    Raises:
        EncodeError: for an unknown unit, paper name or orientation.
    """
    if unit not in UNIT_SCALE:
        raise EncodeError(f"Unknown unit: {unit!r}")
    if isinstance(page_format, str):
        width, height = fitz.paper_size(page_format.strip().lower())
        if width <= 0 or height <= 0:
            raise EncodeError(f"Unknown page format: {page_format!r}")
    else:
        try:
            width, height = (float(v) * UNIT_SCALE[unit] for v in page_format)
        except (TypeError, ValueError) as exc:
            raise EncodeError(f"Invalid page dimensions: {page_format!r}") from exc
        if width <= 0 or height <= 0:
            raise EncodeError(f"Invalid page dimensions: {page_format!r}")

    orientation = normalize_orientation(orientation)
    if orientation == "portrait" and width > height:
        width, height = height, width
    elif orientation == "landscape" and height > width:
        width, height = height, width
    return width, height


@dataclass
class _OutputDocument:
    doc: fitz.Document
    options: DocumentOptions
    unit_scale: float


class PyMuPdfEncoder:
    """PdfEncoder writing image-only PDFs with MuPDF.

    `create` opens the document with its first page already present, sized by
    the document options. Geometry passed to `add_image` and returned by
    `page_size` is in the document's unit.
    """

    def create(self, options: DocumentOptions) -> _OutputDocument:
        width, height = resolve_page_size(options.format, options.orientation, options.unit)
        doc = fitz.open()
        doc.new_page(width=width, height=height)
        return _OutputDocument(doc=doc, options=options, unit_scale=UNIT_SCALE[options.unit])

    def add_page(self, handle: _OutputDocument, options: PageOptions) -> None:
        document = handle.options
        page_format = options.format if options.format is not None else document.format
        orientation = options.orientation if options.orientation is not None else document.orientation
        width, height = resolve_page_size(page_format, orientation, document.unit)
        handle.doc.new_page(width=width, height=height)
        logger.debug("Added output page %.1f x %.1f pt", width, height)

    def page_size(self, handle: _OutputDocument) -> Tuple[float, float]:
        rect = handle.doc.load_page(-1).rect
        return rect.width / handle.unit_scale, rect.height / handle.unit_scale

    def add_image(self, handle: _OutputDocument, image: bytes, geometry: Geometry) -> None:
        x, y, w, h = (v * handle.unit_scale for v in geometry)
        page = handle.doc.load_page(-1)
        try:
            page.insert_image(fitz.Rect(x, y, x + w, y + h), stream=image, keep_proportion=False)
        except (RuntimeError, ValueError) as exc:
            raise EncodeError(f"Failed to place page image: {exc}") from exc

    def serialize(self, handle: _OutputDocument) -> bytes:
        try:
            if handle.options.compress:
                return handle.doc.tobytes(garbage=3, deflate=True)
            return handle.doc.tobytes()
        except (RuntimeError, ValueError) as exc:
            raise EncodeError(f"Failed to write PDF: {exc}") from exc
        finally:
            handle.doc.close()

    def discard(self, handle: _OutputDocument) -> None:
        if not handle.doc.is_closed:
            handle.doc.close()
