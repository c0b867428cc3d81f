"""Test doubles for the decoder/encoder contracts and a PDF builder."""

from __future__ import annotations

import asyncio
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import fitz
import numpy as np

from inkpdf.docs.model import DecodedPdf, DocumentOptions, PageGeometry, PageOptions
from inkpdf.docs.pdf_writer import UNIT_SCALE, resolve_page_size
from inkpdf.errors import DecodeError, RasterizationError


def make_pdf(sizes: Sequence[Tuple[float, float]]) -> bytes:
    doc = fitz.open()
    for number, (width, height) in enumerate(sizes, start=1):
        page = doc.new_page(width=width, height=height)
        page.insert_text((10, 20), f"Page {number}", fontsize=10)
    data = doc.tobytes()
    doc.close()
    return data


def page_color(data: bytes, index: int) -> Tuple[int, int, int]:
    """Fill color FakeDecoder paints for page `index` of document `data`."""
    return (index * 40) % 256, sum(data) % 256, 90


class FakeDecoder:
    """Decodes registered payloads into solid-color pages.

    `delays` maps page index → seconds to wait before the page completes;
    `failing` holds page indexes that fail to rasterize.
    """

    def __init__(
        self,
        documents: Dict[bytes, List[Tuple[float, float]]],
        delays: Optional[Dict[int, float]] = None,
        failing: Iterable[int] = (),
    ) -> None:
        self.documents = documents
        self.delays = delays or {}
        self.failing = set(failing)
        self.completed: List[Tuple[bytes, int]] = []

    async def decode(self, data: bytes) -> DecodedPdf:
        await asyncio.sleep(0)
        if data not in self.documents:
            raise DecodeError("unknown payload")
        pages = [PageGeometry(i, w, h) for i, (w, h) in enumerate(self.documents[data], start=1)]
        return DecodedPdf(data=data, pages=pages)

    async def rasterize(self, document: DecodedPdf, page_index: int, scale: float) -> np.ndarray:
        await asyncio.sleep(self.delays.get(page_index, 0))
        if page_index in self.failing:
            raise RasterizationError(page_index)
        geometry = document.pages[page_index - 1]
        width, height = int(round(geometry.width * scale)), int(round(geometry.height * scale))
        self.completed.append((document.data, page_index))
        return np.full((height, width, 3), page_color(document.data, page_index), dtype=np.uint8)


class RecordingEncoder:
    """PdfEncoder double that records calls; sizes are in document units."""

    def __init__(self, fail_on_image: Optional[int] = None) -> None:
        self.fail_on_image = fail_on_image
        self.calls: List[str] = []
        self.discarded = 0

    def create(self, options: DocumentOptions) -> dict:
        self.calls.append("create")
        size = resolve_page_size(options.format, options.orientation, options.unit)
        return {"options": options, "pages": [size], "images": []}

    def add_page(self, handle: dict, options: PageOptions) -> None:
        self.calls.append("add_page")
        document = handle["options"]
        handle["pages"].append(
            resolve_page_size(
                options.format or document.format,
                options.orientation or document.orientation,
                document.unit,
            )
        )

    def page_size(self, handle: dict) -> Tuple[float, float]:
        width, height = handle["pages"][-1]
        scale = UNIT_SCALE[handle["options"].unit]
        return width / scale, height / scale

    def add_image(self, handle: dict, image: bytes, geometry) -> None:
        self.calls.append("add_image")
        if self.fail_on_image is not None and len(handle["images"]) + 1 == self.fail_on_image:
            raise MemoryError("out of memory")
        handle["images"].append((image, geometry))

    def serialize(self, handle: dict) -> bytes:
        self.calls.append("serialize")
        return b"%PDF-fake " + str(len(handle["images"])).encode()

    def discard(self, handle: dict) -> None:
        self.discarded += 1
