from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

PageFormat = Union[str, Tuple[float, float]]


@dataclass(frozen=True)
class PageGeometry:
    """Size of a decoded PDF page in points (1/72 inch), rotation applied."""

    number: int
    width: float
    height: float


@dataclass(frozen=True)
class Page:
    """A page rendered at a given scale; `width`/`height` are intrinsic pixels."""

    index: int
    width: float
    height: float

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return max(1, int(round(self.width))), max(1, int(round(self.height)))

    @classmethod
    def from_geometry(cls, geometry: PageGeometry, scale: float) -> "Page":
        return cls(index=geometry.number, width=geometry.width * scale, height=geometry.height * scale)


@dataclass(frozen=True)
class StrokeStyle:
    color: Union[str, Tuple[int, int, int]] = "#000000"
    width: int = 1


@dataclass
class DocumentOptions:
    """Options handed to the encoder when the output document is created."""

    format: PageFormat = "a4"
    orientation: str = "portrait"
    unit: str = "mm"
    compress: bool = True


@dataclass
class PageOptions:
    """Geometry for every output page after the first; unset fields fall back
    to the document options."""

    format: Optional[PageFormat] = None
    orientation: Optional[str] = None


@dataclass
class ExportOptions:
    page: PageOptions = field(default_factory=PageOptions)
    document: DocumentOptions = field(default_factory=DocumentOptions)
    image_format: str = "png"
    jpeg_quality: int = 85


@dataclass
class DecodedPdf:
    """Result of decoding a payload: the raw bytes and the page geometry."""

    data: bytes
    pages: List[PageGeometry] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)
