"""Load → draw → save orchestration."""

from .controller import Controller, build_controller
from .export import ExportPipeline, encode_frame
from .renderer import DEFAULT_RENDER_SCALE, PageRenderer, StaleRenderError
from .session import DocumentSession
from .settle import SettleBarrier

__all__ = [
    "Controller",
    "build_controller",
    "ExportPipeline",
    "encode_frame",
    "DEFAULT_RENDER_SCALE",
    "PageRenderer",
    "StaleRenderError",
    "DocumentSession",
    "SettleBarrier",
]
