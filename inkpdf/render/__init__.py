"""Raster surfaces and freehand stroke capture."""

from .draw import parse_color, stroke_segment
from .stroke import StrokeRecorder
from .surface import Surface, SurfaceReleasedError

__all__ = [
    "parse_color",
    "stroke_segment",
    "StrokeRecorder",
    "Surface",
    "SurfaceReleasedError",
]
