"""Freehand stroke capture: pointer/touch events → segments on one surface.

Per surface state machine: Idle → Drawing on down (only while drawing is
enabled), each move in Drawing strokes the segment from the previous point
immediately, up returns to Idle. The enabled flag is read at the down
transition only; turning drawing off mid-stroke lets that stroke finish.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

from inkpdf.docs.model import StrokeStyle
from inkpdf.input.coords import map_to_surface
from inkpdf.input.events import EventKind, PointerEvent, PointerEventSource

from .surface import Surface

logger = logging.getLogger(__name__)


class StrokeRecorder:
    def __init__(
        self,
        surface: Surface,
        is_enabled: Callable[[], bool] = lambda: True,
        style: Optional[StrokeStyle] = None,
    ) -> None:
        self.surface = surface
        self.style = style or StrokeStyle()
        self._is_enabled = is_enabled
        self._source: Optional[PointerEventSource] = None
        self.active = False
        self.last_point: Optional[Tuple[float, float]] = None

    @property
    def attached(self) -> bool:
        return self._source is not None

    def attach(self, source: Optional[PointerEventSource] = None) -> None:
        """Subscribe to down/move/up on `source` (the surface's own by default)."""
        if self._source is not None:
            self.detach()
        source = source if source is not None else self.surface.events
        source.add_listener(EventKind.DOWN, self.on_down)
        source.add_listener(EventKind.MOVE, self.on_move)
        source.add_listener(EventKind.UP, self.on_up)
        self._source = source

    def detach(self) -> None:
        """Force Idle and unsubscribe; safe to call repeatedly."""
        self.cancel()
        source, self._source = self._source, None
        if source is None:
            return
        source.remove_listener(EventKind.DOWN, self.on_down)
        source.remove_listener(EventKind.MOVE, self.on_move)
        source.remove_listener(EventKind.UP, self.on_up)

    def cancel(self) -> None:
        if self.active:
            logger.debug("Stroke on page %d cancelled", self.surface.index)
        self.active = False
        self.last_point = None

    def _map(self, event: PointerEvent) -> Optional[Tuple[float, float]]:
        return map_to_surface(event, self.surface.rect, self.surface.size)

    def on_down(self, event: PointerEvent) -> None:
        if not self._is_enabled() or self.surface.released:
            return
        point = self._map(event)
        if point is None:
            return
        self.active = True
        self.last_point = point

    def on_move(self, event: PointerEvent) -> None:
        if not self.active or self.surface.released:
            return
        point = self._map(event)
        if point is None:
            return
        self.surface.draw_segment(self.last_point, point, self.style)
        self.last_point = point
        event.prevent_default()

    def on_up(self, event: PointerEvent) -> None:
        self.active = False
        self.last_point = None
