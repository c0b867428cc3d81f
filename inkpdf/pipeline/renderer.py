"""Page rendering: decoded document → one painted surface per page.

Every page is rasterized by its own task. Surfaces land in slots reserved
by page index, so the returned sequence is in page order whatever order the
tasks finish in.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, List, Optional

from inkpdf.docs.model import DecodedPdf, Page
from inkpdf.docs.pdf_io import PdfDecoder
from inkpdf.errors import InkPdfError, RasterizationError
from inkpdf.render.surface import Surface
from inkpdf.signals import Signal

logger = logging.getLogger(__name__)

DEFAULT_RENDER_SCALE = 2.0


class StaleRenderError(InkPdfError):
    """The render was superseded before it finished."""


class PageRenderer:
    def __init__(
        self,
        decoder: PdfDecoder,
        scale: float = DEFAULT_RENDER_SCALE,
        max_concurrent_pages: int = 4,
    ) -> None:
        if scale <= 0:
            raise ValueError("Render scale must be positive")
        self.decoder = decoder
        self.scale = float(scale)
        self.max_concurrent_pages = max(1, int(max_concurrent_pages))
        self.page_rendered = Signal("page_rendered")

    async def render(self, data: bytes, is_current: Optional[Callable[[], bool]] = None) -> List[Surface]:
        """Decode `data` and return painted surfaces in page order.

        Args:
            data: Encoded PDF bytes.
            is_current: Checked after each suspension point; once it returns
                False the render stops and its results are dropped.

        Raises:
            DecodeError: if the payload cannot be decoded.
            RasterizationError: if any page fails; no surfaces are returned.
            StaleRenderError: if `is_current` turned False.
        """
        is_current = is_current or (lambda: True)
        document = await self.decoder.decode(data)
        if not is_current():
            raise StaleRenderError("Render superseded after decode")

        slots: List[Optional[Surface]] = [None] * document.page_count
        limit = asyncio.Semaphore(self.max_concurrent_pages)
        tasks = [
            asyncio.ensure_future(self._render_page(document, position, slots, limit, is_current))
            for position in range(document.page_count)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            for surface in slots:
                if surface is not None:
                    surface.release()
            raise

        logger.debug("Rendered %d page(s) at scale %.2f", len(slots), self.scale)
        return [surface for surface in slots if surface is not None]

    async def _render_page(
        self,
        document: DecodedPdf,
        position: int,
        slots: List[Optional[Surface]],
        limit: asyncio.Semaphore,
        is_current: Callable[[], bool],
    ) -> None:
        page = Page.from_geometry(document.pages[position], self.scale)
        async with limit:
            try:
                bitmap = await self.decoder.rasterize(document, page.index, self.scale)
            except InkPdfError:
                raise
            except Exception as exc:
                raise RasterizationError(page.index, f"Failed to rasterize page {page.index}: {exc}") from exc
        if not is_current():
            raise StaleRenderError(f"Render superseded at page {page.index}")
        surface = Surface(page)
        surface.paint(bitmap)
        slots[position] = surface
        logger.debug("Page %d ready (%dx%d)", page.index, surface.width, surface.height)
        self.page_rendered.emit(page)
