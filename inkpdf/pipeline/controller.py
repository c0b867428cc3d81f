"""Thin entry point for a host UI: base64 source in, base64 document out.

Mirrors the component contract of an embeddable viewer: setting `source`
reloads, `save()` exports the annotated pages, announces the new payload
and reloads from it.
"""

from __future__ import annotations

import logging
from typing import Optional

from inkpdf.config import Settings
from inkpdf.docs.model import ExportOptions
from inkpdf.docs.payload import decode_payload, encode_payload
from inkpdf.docs.pdf_io import PyMuPdfDecoder
from inkpdf.docs.pdf_writer import PyMuPdfEncoder
from inkpdf.errors import InkPdfError
from inkpdf.signals import Signal

from .export import ExportPipeline
from .renderer import PageRenderer
from .session import DocumentSession

logger = logging.getLogger(__name__)


class Controller:
    def __init__(
        self,
        session: DocumentSession,
        pipeline: ExportPipeline,
        export_options: Optional[ExportOptions] = None,
        reload_after_save: bool = True,
    ) -> None:
        self.session = session
        self.pipeline = pipeline
        self.export_options = export_options or pipeline.options
        self.reload_after_save = reload_after_save
        self._source: Optional[str] = None

        self.loading = session.loading
        self.saving = pipeline.saving
        self.document_changed = Signal("document_changed")
        self.drawing_enabled_changed = Signal("drawing_enabled_changed")
        self.failed = Signal("failed")
        session.load_failed.connect(self.failed.emit)
        pipeline.export_failed.connect(self.failed.emit)

    @property
    def source(self) -> Optional[str]:
        return self._source

    @property
    def drawing_enabled(self) -> bool:
        return self.session.drawing_enabled

    def set_drawing_enabled(self, enabled: bool) -> None:
        enabled = bool(enabled)
        if enabled == self.session.drawing_enabled:
            return
        self.session.set_drawing_enabled(enabled)
        self.drawing_enabled_changed.emit(enabled)

    async def set_source(self, payload: Optional[str]):
        """Load a base64 (or data URL) payload; None unloads the document."""
        self._source = payload
        if not payload:
            self.session.teardown()
            return None
        try:
            data = decode_payload(payload)
        except InkPdfError as exc:
            self.session.teardown()
            self.failed.emit(exc)
            raise
        return await self.session.load(data)

    async def save(self) -> str:
        """Export the annotated document and return it as base64 text."""
        data = await self.pipeline.export(self.export_options)
        payload = encode_payload(data)
        self._source = payload
        self.document_changed.emit(payload)
        if self.reload_after_save:
            await self.session.load(data)
        return payload

    def dispose(self) -> None:
        self.session.teardown()


def build_controller(settings: Optional[Settings] = None) -> Controller:
    """Wire a controller with the MuPDF decoder and encoder."""
    settings = settings or Settings()
    renderer = PageRenderer(
        PyMuPdfDecoder(),
        scale=settings.render_scale,
        max_concurrent_pages=settings.max_concurrent_pages,
    )
    session = DocumentSession(renderer, stroke_style=settings.stroke_style())
    pipeline = ExportPipeline(session, PyMuPdfEncoder(), settings.export_options())
    return Controller(session, pipeline)
