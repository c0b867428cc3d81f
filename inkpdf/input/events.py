"""Pointer/touch events and the listener registry each surface exposes.

The host input system (a GUI toolkit, a web bridge, a test) converts its own
events into `PointerEvent` and calls `EventSource.dispatch`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Protocol, Tuple

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"


@dataclass(frozen=True)
class TouchPoint:
    client_x: Optional[float]
    client_y: Optional[float]


@dataclass(frozen=True)
class Rect:
    """Displayed bounding rectangle of a surface, in client coordinates."""

    left: float
    top: float
    width: float
    height: float


@dataclass
class PointerEvent:
    kind: EventKind
    client_x: Optional[float] = None
    client_y: Optional[float] = None
    touches: Tuple[TouchPoint, ...] = ()
    default_prevented: bool = field(default=False, compare=False)

    @property
    def is_touch(self) -> bool:
        return bool(self.touches)

    def prevent_default(self) -> None:
        self.default_prevented = True

    @classmethod
    def mouse(cls, kind: EventKind, x: float, y: float) -> "PointerEvent":
        return cls(kind=kind, client_x=x, client_y=y)

    @classmethod
    def touch(cls, kind: EventKind, x: float, y: float) -> "PointerEvent":
        return cls(kind=kind, touches=(TouchPoint(x, y),))


Listener = Callable[[PointerEvent], None]


class PointerEventSource(Protocol):
    def add_listener(self, kind: EventKind, listener: Listener) -> None:
        ...

    def remove_listener(self, kind: EventKind, listener: Listener) -> None:
        ...


class EventSource:
    """In-process PointerEventSource: listeners run synchronously in
    registration order."""

    def __init__(self) -> None:
        self._listeners: Dict[EventKind, List[Listener]] = {kind: [] for kind in EventKind}

    def add_listener(self, kind: EventKind, listener: Listener) -> None:
        listeners = self._listeners[EventKind(kind)]
        if listener not in listeners:
            listeners.append(listener)

    def remove_listener(self, kind: EventKind, listener: Listener) -> None:
        listeners = self._listeners[EventKind(kind)]
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, kind: Optional[EventKind] = None) -> int:
        if kind is not None:
            return len(self._listeners[EventKind(kind)])
        return sum(len(v) for v in self._listeners.values())

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()

    def dispatch(self, event: PointerEvent) -> PointerEvent:
        for listener in list(self._listeners[event.kind]):
            listener(event)
        return event
