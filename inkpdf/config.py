import json
import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional, Tuple, Union

from inkpdf.docs.model import DocumentOptions, ExportOptions, PageOptions, StrokeStyle

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, "config", "settings.json")
CONFIG_ENV_VAR = "INKPDF_CONFIG"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class Settings:
    render_scale: float = 2.0
    max_concurrent_pages: int = 4
    stroke_color: str = "#000000"
    stroke_width: int = 1
    image_format: str = "png"
    jpeg_quality: int = 85
    document_format: Union[str, Tuple[float, float]] = "a4"
    document_orientation: str = "portrait"
    document_unit: str = "mm"
    page_format: Optional[Union[str, Tuple[float, float]]] = None
    page_orientation: Optional[str] = None
    log_level: str = "INFO"

    def stroke_style(self) -> StrokeStyle:
        return StrokeStyle(color=self.stroke_color, width=int(self.stroke_width))

    def export_options(self) -> ExportOptions:
        return ExportOptions(
            page=PageOptions(format=self.page_format, orientation=self.page_orientation),
            document=DocumentOptions(
                format=self.document_format,
                orientation=self.document_orientation,
                unit=self.document_unit,
            ),
            image_format=self.image_format,
            jpeg_quality=int(self.jpeg_quality),
        )


def _coerce(raw: Dict[str, Any]) -> Dict[str, Any]:
    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            logger.warning("Ignoring unknown setting '%s'", key)
            continue
        if key in ("document_format", "page_format") and isinstance(value, list):
            value = tuple(value)
        values[key] = value
    return values


def load_settings(path: Optional[str] = None) -> Settings:
    """Read settings from JSON, falling back to defaults.

    The path is, in order: `path`, $INKPDF_CONFIG, config/settings.json under
    the project root. A missing default file is not an error; a broken file
    is logged and ignored.
    """
    config_path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    if not os.path.exists(config_path):
        if path or os.environ.get(CONFIG_ENV_VAR):
            logger.warning("Settings file not found at %s; using defaults", config_path)
        return Settings()

    try:
        with open(config_path, "r", encoding="utf-8") as settings_file:
            raw = json.load(settings_file) or {}
        if not isinstance(raw, dict):
            raise ValueError("top-level JSON value must be an object")
        settings = Settings(**_coerce(raw))
        settings.render_scale = float(settings.render_scale)
        settings.max_concurrent_pages = int(settings.max_concurrent_pages)
    except (OSError, ValueError, TypeError) as exc:
        logger.warning("Could not load settings from %s: %s; using defaults", config_path, exc)
        return Settings()

    if settings.render_scale <= 0:
        logger.warning("render_scale must be positive; using %.1f", Settings.render_scale)
        settings.render_scale = Settings.render_scale
    return settings


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
