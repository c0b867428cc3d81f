"""Document layer: data model, PDF decoding/encoding and payload codec.

Exposes:
- Data model: Page, PageGeometry, DecodedPdf, StrokeStyle, ExportOptions
- Decoder: PyMuPdfDecoder (pages → RGB arrays)
- Encoder: PyMuPdfEncoder (page images → image-only PDF)
"""

from .model import (
    DecodedPdf,
    DocumentOptions,
    ExportOptions,
    Page,
    PageGeometry,
    PageOptions,
    StrokeStyle,
)
from .payload import decode_payload, encode_payload
from .pdf_io import PdfDecoder, PyMuPdfDecoder
from .pdf_writer import PdfEncoder, PyMuPdfEncoder, resolve_page_size

__all__ = [
    "DecodedPdf",
    "DocumentOptions",
    "ExportOptions",
    "Page",
    "PageGeometry",
    "PageOptions",
    "StrokeStyle",
    "decode_payload",
    "encode_payload",
    "PdfDecoder",
    "PyMuPdfDecoder",
    "PdfEncoder",
    "PyMuPdfEncoder",
    "resolve_page_size",
]
