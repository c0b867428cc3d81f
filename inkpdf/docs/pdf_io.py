from __future__ import annotations

import asyncio
import logging
from typing import List, Protocol

import fitz  # PyMuPDF
import numpy as np

from inkpdf.errors import DecodeError, RasterizationError

from .model import DecodedPdf, PageGeometry

logger = logging.getLogger(__name__)

# PyMuPDF raises these for damaged, empty or non-PDF streams.
_FITZ_OPEN_ERRORS = (RuntimeError, ValueError, TypeError)


class PdfDecoder(Protocol):
    async def decode(self, data: bytes) -> DecodedPdf:
        ...

    async def rasterize(self, document: DecodedPdf, page_index: int, scale: float) -> np.ndarray:
        ...


def _open(data: bytes) -> fitz.Document:
    if not data:
        raise DecodeError("Empty document payload")
    try:
        return fitz.open(stream=data, filetype="pdf")
    except _FITZ_OPEN_ERRORS as exc:
        raise DecodeError(f"Unreadable PDF document: {exc}") from exc


def read_page_geometry(data: bytes) -> List[PageGeometry]:
    """Open a PDF from memory and list its pages in order.

    Args:
        data: Encoded PDF bytes.

    Returns:
        One PageGeometry per page, sizes in points with page rotation applied.

    Raises:
        DecodeError: if the bytes are not a PDF or the document has no pages.
    """
    doc = _open(data)
    try:
        if doc.needs_pass:
            raise DecodeError("Encrypted PDF documents are not supported")
        if doc.page_count == 0:
            raise DecodeError("PDF document has no pages")
        pages: List[PageGeometry] = []
        for idx in range(doc.page_count):
            rect = doc.load_page(idx).rect
            pages.append(PageGeometry(number=idx + 1, width=rect.width, height=rect.height))
        return pages
    finally:
        doc.close()


def render_page_pixels(data: bytes, page_index: int, scale: float) -> np.ndarray:
    """Rasterize one page to an RGB array of shape (height, width, 3).

    Each call opens its own document so calls can run on worker threads.

    Args:
        data: Encoded PDF bytes.
        page_index: 1-based page number.
        scale: Zoom factor relative to 72 dpi.
    """
    doc = _open(data)
    try:
        page = doc.load_page(page_index - 1)
        pix = page.get_pixmap(matrix=fitz.Matrix(scale, scale), colorspace=fitz.csRGB, alpha=False)
        pixels = np.frombuffer(pix.samples, dtype=np.uint8)
        pixels = pixels.reshape(pix.height, pix.stride)[:, : pix.width * pix.n]
        return pixels.reshape(pix.height, pix.width, pix.n).copy()
    finally:
        doc.close()


class PyMuPdfDecoder:
    """PdfDecoder backed by MuPDF; blocking work runs on worker threads."""

    async def decode(self, data: bytes) -> DecodedPdf:
        pages = await asyncio.to_thread(read_page_geometry, data)
        logger.debug("Decoded PDF with %d page(s)", len(pages))
        return DecodedPdf(data=data, pages=pages)

    async def rasterize(self, document: DecodedPdf, page_index: int, scale: float) -> np.ndarray:
        try:
            return await asyncio.to_thread(render_page_pixels, document.data, page_index, scale)
        except DecodeError:
            raise
        except _FITZ_OPEN_ERRORS as exc:
            raise RasterizationError(page_index, f"Failed to rasterize page {page_index}: {exc}") from exc
