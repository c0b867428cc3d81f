"""Error taxonomy shared by the decode, rasterize and export stages."""

from __future__ import annotations

from typing import Optional


class InkPdfError(Exception):
    """Base class for every failure reported by inkpdf."""


class DecodeError(InkPdfError):
    """The input payload is not a readable PDF document."""


class RasterizationError(InkPdfError):
    """A single page failed to rasterize; the whole load is aborted."""

    def __init__(self, page_index: int, message: Optional[str] = None) -> None:
        self.page_index = page_index
        super().__init__(message or f"Failed to rasterize page {page_index}")


class EncodeError(InkPdfError):
    """The export pipeline could not produce an output document."""
