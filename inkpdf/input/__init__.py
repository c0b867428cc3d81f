"""Input layer: pointer/touch events, listener registry, coordinate mapping."""

from .coords import client_point, map_to_surface
from .events import EventKind, EventSource, PointerEvent, PointerEventSource, Rect, TouchPoint

__all__ = [
    "client_point",
    "map_to_surface",
    "EventKind",
    "EventSource",
    "PointerEvent",
    "PointerEventSource",
    "Rect",
    "TouchPoint",
]
