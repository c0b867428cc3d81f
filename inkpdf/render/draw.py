"""Rendering helpers to draw freehand stroke segments onto a raster.

Segments are rasterized with OpenCV on RGB numpy arrays; colors are parsed
with PIL so any Pillow color spec ("#RRGGBB", "red", "rgb(...)") works.
"""

from __future__ import annotations

from typing import Optional, Tuple, Union

import cv2
import numpy as np
from PIL import ImageColor

from inkpdf.docs.model import StrokeStyle

# Sub-pixel precision for cv2.line: coordinates are fixed point with 4
# fractional bits.
_SHIFT = 4
_ONE = 1 << _SHIFT

Point = Tuple[float, float]
BBox = Tuple[int, int, int, int]


def parse_color(color: Union[str, Tuple[int, int, int]]) -> Tuple[int, int, int]:
    """Convert a color spec to an RGB triple.

    Doxygen:
    - @param color: Pillow color string or an (r, g, b) tuple.
    - @return: (r, g, b) integers in 0..255.
    - @throws ValueError: If the string is not a known color.
    """
    if isinstance(color, str):
        rgb = ImageColor.getrgb(color)
        return int(rgb[0]), int(rgb[1]), int(rgb[2])
    r, g, b = color[:3]
    return int(r), int(g), int(b)


def segment_bounds(start: Point, end: Point, width: int, size: Tuple[int, int]) -> Optional[BBox]:
    """Pixel box (x0, y0, x1, y1), exclusive end, that a segment can touch.

    Doxygen:
    - @param start: Segment start in intrinsic pixels.
    - @param end: Segment end in intrinsic pixels.
    - @param width: Stroke width in pixels.
    - @param size: Raster (width, height).
    - @return: Clipped box or None if the segment lies fully outside.
    """
    # Anti-aliasing bleeds one pixel past the nominal half width.
    pad = width / 2.0 + 1.0
    x0 = int(np.floor(min(start[0], end[0]) - pad))
    y0 = int(np.floor(min(start[1], end[1]) - pad))
    x1 = int(np.ceil(max(start[0], end[0]) + pad)) + 1
    y1 = int(np.ceil(max(start[1], end[1]) + pad)) + 1
    w, h = size
    x0, y0 = max(0, x0), max(0, y0)
    x1, y1 = min(w, x1), min(h, y1)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def clip_segment(start: Point, end: Point, box: Tuple[float, float, float, float]) -> Optional[Tuple[Point, Point]]:
    """Clip a segment to an axis-aligned box (Liang-Barsky).

    Doxygen:
    - @param start: Segment start.
    - @param end: Segment end.
    - @param box: (x_min, y_min, x_max, y_max).
    - @return: The clipped (start, end), or None if the segment misses the box.
    """
    x_min, y_min, x_max, y_max = box
    x0, y0 = start
    dx, dy = end[0] - x0, end[1] - y0
    t0, t1 = 0.0, 1.0
    for p, q in ((-dx, x0 - x_min), (dx, x_max - x0), (-dy, y0 - y_min), (dy, y_max - y0)):
        if p == 0:
            if q < 0:
                return None
            continue
        t = q / p
        if p < 0:
            if t > t1:
                return None
            t0 = max(t0, t)
        else:
            if t < t0:
                return None
            t1 = min(t1, t)
    return (x0 + t0 * dx, y0 + t0 * dy), (x0 + t1 * dx, y0 + t1 * dy)


def stroke_segment(img: np.ndarray, start: Point, end: Point, style: StrokeStyle) -> Optional[BBox]:
    """Draw one anti-aliased, round-capped segment in place.

    Doxygen:
    - @param img: RGB uint8 array of shape (h, w, 3), modified in place.
    - @param start: Segment start in intrinsic pixels.
    - @param end: Segment end in intrinsic pixels.
    - @param style: Stroke color and width.
    - @return: Box of pixels that may have changed, or None when nothing could.
    """
    height, width = img.shape[:2]
    bounds = segment_bounds(start, end, style.width, (width, height))
    if bounds is None:
        return None
    # Far-away endpoints would overflow cv2's int32 fixed-point coordinates.
    pad = style.width / 2.0 + 1.0
    clipped = clip_segment(start, end, (-pad, -pad, width + pad, height + pad))
    if clipped is None:
        return None
    start, end = clipped
    p0 = (int(round(start[0] * _ONE)), int(round(start[1] * _ONE)))
    p1 = (int(round(end[0] * _ONE)), int(round(end[1] * _ONE)))
    cv2.line(img, p0, p1, parse_color(style.color), max(1, int(style.width)), cv2.LINE_AA, _SHIFT)
    return bounds
