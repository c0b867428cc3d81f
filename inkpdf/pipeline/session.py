"""Lifecycle of one loaded document and its annotated surfaces.

`DocumentSession` owns the mapping page index → surface. A load tears the
previous document down, renders the new one and mounts every surface in one
step. Loads supersede each other: starting a load (or tearing down) bumps a
generation counter and cancels the in-flight load, whose late results are
dropped.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

import numpy as np

from inkpdf.docs.model import StrokeStyle
from inkpdf.errors import InkPdfError
from inkpdf.render.stroke import StrokeRecorder
from inkpdf.render.surface import Surface
from inkpdf.signals import Signal

from .renderer import PageRenderer, StaleRenderError
from .settle import SettleBarrier

logger = logging.getLogger(__name__)


class DocumentSession:
    def __init__(
        self,
        renderer: PageRenderer,
        stroke_style: Optional[StrokeStyle] = None,
        drawing_enabled: bool = True,
    ) -> None:
        self.renderer = renderer
        self.stroke_style = stroke_style or StrokeStyle()
        self.barrier = SettleBarrier()
        self._drawing_enabled = bool(drawing_enabled)
        self._surfaces: List[Surface] = []
        self._recorders: Dict[int, StrokeRecorder] = {}
        self._generation = 0
        self._pending: Optional[asyncio.Future] = None

        self.loading = Signal("loading")
        self.load_failed = Signal("load_failed")
        self.surfaces_mounted = Signal("surfaces_mounted")

    # -- state -----------------------------------------------------------

    @property
    def surfaces(self) -> Tuple[Surface, ...]:
        return tuple(self._surfaces)

    @property
    def page_count(self) -> int:
        return len(self._surfaces)

    @property
    def is_loading(self) -> bool:
        return self._pending is not None

    @property
    def drawing_enabled(self) -> bool:
        return self._drawing_enabled

    def set_drawing_enabled(self, enabled: bool) -> None:
        self._drawing_enabled = bool(enabled)

    def _is_drawing_enabled(self) -> bool:
        return self._drawing_enabled

    def surface(self, index: int) -> Surface:
        """Surface for 1-based page `index`."""
        for surface in self._surfaces:
            if surface.index == index:
                return surface
        raise KeyError(f"No surface for page {index}")

    def recorder(self, index: int) -> StrokeRecorder:
        return self._recorders[index]

    # -- load / teardown -------------------------------------------------

    async def load(self, data: bytes) -> Optional[Tuple[Surface, ...]]:
        """Replace the current document with `data`.

        Returns the mounted surfaces, or None when a later load or a teardown
        superseded this one.

        Raises:
            DecodeError / RasterizationError: the document could not be
                rendered; no surfaces are mounted.
        """
        self.teardown()
        generation = self._generation
        self.loading.emit(True)
        logger.info("Loading document (%d bytes, load #%d)", len(data), generation)

        task = asyncio.ensure_future(self._render(data, generation))
        self._pending = task
        try:
            surfaces = await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.info("Load #%d superseded", generation)
                return None
            self._pending = None
            self.loading.emit(False)
            raise
        except StaleRenderError:
            logger.info("Load #%d superseded", generation)
            return None
        except InkPdfError as exc:
            if generation != self._generation:
                return None
            self._pending = None
            logger.warning("Load #%d failed: %s", generation, exc)
            self.load_failed.emit(exc)
            self.loading.emit(False)
            raise

        if generation != self._generation:
            for surface in surfaces:
                surface.release()
            logger.info("Load #%d superseded", generation)
            return None
        self._pending = None
        self._mount(surfaces)
        self.loading.emit(False)
        logger.info("Loaded %d page(s)", len(surfaces))
        return self.surfaces

    async def _render(self, data: bytes, generation: int) -> List[Surface]:
        return await self.renderer.render(data, is_current=lambda: generation == self._generation)

    def _mount(self, surfaces: List[Surface]) -> None:
        self._surfaces = list(surfaces)
        for surface in self._surfaces:
            recorder = StrokeRecorder(surface, self._is_drawing_enabled, self.stroke_style)
            recorder.attach()
            self._recorders[surface.index] = recorder
        self.surfaces_mounted.emit(self.surfaces)

    def teardown(self) -> None:
        """Cancel any in-flight load, detach all recorders and release all
        surfaces. Idempotent."""
        self._generation += 1
        pending, self._pending = self._pending, None
        if pending is not None:
            # A finished task may still be waiting for load() to resume.
            if not pending.done():
                pending.cancel()
            self.loading.emit(False)

        recorders, self._recorders = self._recorders, {}
        for recorder in recorders.values():
            recorder.detach()
        surfaces, self._surfaces = self._surfaces, []
        for surface in surfaces:
            surface.release()
        self.barrier.reset()
        if surfaces:
            logger.debug("Released %d surface(s)", len(surfaces))

    # -- reads -------------------------------------------------------------

    async def wait_loaded(self) -> None:
        """Wait until no load is in flight (successful or not)."""
        while self._pending is not None:
            pending = self._pending
            if pending.done():
                # The load coroutine still has to mount or report the result.
                await asyncio.sleep(0)
            else:
                await asyncio.wait([pending])

    async def capture(self) -> List[np.ndarray]:
        """Copies of every surface raster, in page order, once stable.

        Waits for any pending load and for the settle barrier, then copies all
        buffers without yielding to the loop, so no stroke, load or teardown
        can interleave with the read.
        """
        while True:
            await self.wait_loaded()
            await self.barrier.wait()
            if not self.is_loading and not self.barrier.pending:
                return [surface.snapshot() for surface in self._surfaces]
