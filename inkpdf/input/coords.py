from __future__ import annotations

import math
from typing import Optional, Tuple

from .events import PointerEvent, Rect


def _finite(value) -> bool:
    return isinstance(value, (int, float)) and math.isfinite(value)


def client_point(event: PointerEvent) -> Optional[Tuple[float, float]]:
    """Client coordinates of a pointer event; the first touch point wins for
    touch events. None when the event carries no usable coordinates."""
    if event.touches:
        first = event.touches[0]
        x, y = first.client_x, first.client_y
    else:
        x, y = event.client_x, event.client_y
    if not (_finite(x) and _finite(y)):
        return None
    return float(x), float(y)


def map_to_surface(
    event: PointerEvent,
    rect: Rect,
    intrinsic_size: Tuple[float, float],
) -> Optional[Tuple[float, float]]:
    """Map a pointer event onto intrinsic raster coordinates.

    The surface is displayed inside `rect` (after any display scaling) while
    its raster is `intrinsic_size` pixels. Points outside the surface are
    passed through. Returns None instead of raising for malformed events or a
    collapsed rect.
    """
    point = client_point(event)
    if point is None:
        return None
    if not all(_finite(v) for v in (rect.left, rect.top, rect.width, rect.height)):
        return None
    if rect.width <= 0 or rect.height <= 0:
        return None
    client_x, client_y = point
    intrinsic_width, intrinsic_height = intrinsic_size
    x = intrinsic_width * (client_x - rect.left) / rect.width
    y = intrinsic_height * (client_y - rect.top) / rect.height
    return x, y
