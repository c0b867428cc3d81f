from __future__ import annotations

from typing import Optional, Tuple

import cv2
import numpy as np

from inkpdf.docs.model import Page, StrokeStyle
from inkpdf.input.events import EventSource, Rect
from inkpdf.signals import Signal

from .draw import BBox, Point, stroke_segment


class SurfaceReleasedError(RuntimeError):
    """Raised when the raster of a released surface is accessed."""


class Surface:
    """Mutable RGB raster holding one rendered page plus drawn strokes.

    The raster is `page.pixel_size` pixels. `rect` is where the host displays
    it, in client coordinates; it defaults to a 1:1 placement at the origin.
    `changed` is emitted with the touched pixel box after every mutation.
    """

    def __init__(self, page: Page, rect: Optional[Rect] = None) -> None:
        self.page = page
        width, height = page.pixel_size
        self._pixels: Optional[np.ndarray] = np.full((height, width, 3), 255, dtype=np.uint8)
        self.rect = rect or Rect(0.0, 0.0, float(width), float(height))
        self.events = EventSource()
        self.changed = Signal("changed")
        self.revision = 0

    @property
    def index(self) -> int:
        return self.page.index

    @property
    def size(self) -> Tuple[int, int]:
        return self.page.pixel_size

    @property
    def width(self) -> int:
        return self.size[0]

    @property
    def height(self) -> int:
        return self.size[1]

    @property
    def released(self) -> bool:
        return self._pixels is None

    @property
    def pixels(self) -> np.ndarray:
        if self._pixels is None:
            raise SurfaceReleasedError(f"Surface for page {self.index} was released")
        return self._pixels

    def layout(self, rect: Rect) -> None:
        self.rect = rect

    def _touch(self, box: BBox) -> None:
        self.revision += 1
        self.changed.emit(box)

    def paint(self, bitmap: np.ndarray) -> None:
        """Copy a rasterized page into the surface, resampling on size mismatch."""
        target = self.pixels
        if bitmap.ndim == 2:
            bitmap = cv2.cvtColor(bitmap, cv2.COLOR_GRAY2RGB)
        elif bitmap.shape[2] == 4:
            bitmap = cv2.cvtColor(bitmap, cv2.COLOR_RGBA2RGB)
        if bitmap.shape[:2] != target.shape[:2]:
            bitmap = cv2.resize(bitmap, (self.width, self.height), interpolation=cv2.INTER_AREA)
        target[...] = bitmap
        self._touch((0, 0, self.width, self.height))

    def draw_segment(self, start: Point, end: Point, style: StrokeStyle) -> Optional[BBox]:
        box = stroke_segment(self.pixels, start, end, style)
        if box is not None:
            self._touch(box)
        return box

    def snapshot(self) -> np.ndarray:
        return self.pixels.copy()

    def release(self) -> None:
        self.events.clear()
        self._pixels = None

    def __repr__(self) -> str:
        state = "released" if self.released else f"{self.width}x{self.height}"
        return f"Surface(page={self.index}, {state})"
