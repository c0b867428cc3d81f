from __future__ import annotations

import asyncio
import io
import logging
from typing import List, Optional

import numpy as np
from PIL import Image

from inkpdf.docs.model import ExportOptions
from inkpdf.docs.pdf_writer import PdfEncoder
from inkpdf.errors import EncodeError, InkPdfError
from inkpdf.signals import Signal

from .session import DocumentSession

logger = logging.getLogger(__name__)

_IMAGE_FORMATS = {"png": "PNG", "jpeg": "JPEG", "jpg": "JPEG"}


def encode_frame(frame: np.ndarray, image_format: str = "png", jpeg_quality: int = 85) -> bytes:
    """Encode an RGB raster as an embeddable PNG or JPEG image."""
    fmt = _IMAGE_FORMATS.get(image_format.lower())
    if fmt is None:
        raise EncodeError(f"Unsupported image format: {image_format!r}")
    buf = io.BytesIO()
    image = Image.fromarray(frame)
    if fmt == "JPEG":
        image.save(buf, format=fmt, quality=int(jpeg_quality))
    else:
        image.save(buf, format=fmt)
    return buf.getvalue()


class ExportPipeline:
    """Re-encode the session's surfaces, strokes included, into a PDF.

    The first output page takes the encoder's document geometry
    (`options.document`); every following page is opened with
    `options.page`. Each page image fills its page.
    """

    def __init__(self, session: DocumentSession, encoder: PdfEncoder, options: Optional[ExportOptions] = None) -> None:
        self.session = session
        self.encoder = encoder
        self.options = options or ExportOptions()
        self.saving = Signal("saving")
        self.export_failed = Signal("export_failed")

    async def export(self, options: Optional[ExportOptions] = None) -> bytes:
        options = options or self.options
        self.saving.emit(True)
        try:
            frames = await self.session.capture()
            if not frames:
                raise EncodeError("No pages to export")
            logger.info("Exporting %d page(s)", len(frames))
            data = await asyncio.to_thread(self._encode, frames, options)
        except InkPdfError as exc:
            logger.warning("Export failed: %s", exc)
            self.export_failed.emit(exc)
            raise
        finally:
            self.saving.emit(False)
        logger.info("Exported %d bytes", len(data))
        return data

    def _encode(self, frames: List[np.ndarray], options: ExportOptions) -> bytes:
        handle = None
        try:
            handle = self.encoder.create(options.document)
            for position, frame in enumerate(frames):
                if position > 0:
                    self.encoder.add_page(handle, options.page)
                width, height = self.encoder.page_size(handle)
                image = encode_frame(frame, options.image_format, options.jpeg_quality)
                self.encoder.add_image(handle, image, (0.0, 0.0, width, height))
            return self.encoder.serialize(handle)
        except InkPdfError:
            self._discard(handle)
            raise
        except Exception as exc:
            self._discard(handle)
            raise EncodeError(f"Failed to encode document: {exc}") from exc

    def _discard(self, handle) -> None:
        if handle is not None:
            self.encoder.discard(handle)
