"""Domain models for cutting plan text, tables, fields and page bitmaps."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import numpy as np

MIN_CROP_SIZE = 200

_HORIZONTAL_WS = re.compile(r"[ \t]+")


@dataclass(slots=True, frozen=True)
class TextFragment:
    """One run of text at a page position (origin bottom-left, points)."""

    text: str
    x: float
    y: float


@dataclass(slots=True)
class Line:
    """Fragments sharing a quantized y coordinate."""

    y: float
    fragments: List[TextFragment] = field(default_factory=list)

    @property
    def text(self) -> str:
        joined = " ".join(fragment.text for fragment in self.fragments)
        return _HORIZONTAL_WS.sub(" ", joined).strip()


@dataclass(slots=True)
class PageText:
    """Decoded text layer of a single page, before line reconstruction."""

    fragments: List[TextFragment]
    width: float
    height: float


@dataclass(slots=True)
class ReconstructedText:
    lines: List[Line]
    anchor_y: Optional[float]
    page_width: float
    page_height: float

    @property
    def text(self) -> str:
        """Line-oriented text stream, top of page first."""
        return "\n".join(line.text for line in self.lines)


@dataclass(slots=True, frozen=True)
class TableRow:
    size: str
    complete_count: float
    mold_count: float
    model: str

    def to_dict(self) -> dict:
        return {
            "tamanho": self.size,
            "completos": _json_number(self.complete_count),
            "moldes": _json_number(self.mold_count),
            "modelo": self.model,
        }


QuantityMatrix = Dict[str, Dict[str, float]]


@dataclass(slots=True)
class SizeModelTable:
    rows: List[TableRow] = field(default_factory=list)
    models: List[str] = field(default_factory=list)
    sizes: List[str] = field(default_factory=list)
    quantities: QuantityMatrix = field(default_factory=dict)

    def single_model_quantities(self) -> Dict[str, float]:
        """Per-size quantities, only meaningful when exactly one model is present."""
        if len(self.models) != 1:
            return {}
        return dict(self.quantities.get(self.models[0], {}))

    def to_dict(self) -> dict:
        return {
            "rows": [row.to_dict() for row in self.rows],
            "modelos": list(self.models),
            "tamanhos": list(self.sizes),
            "qtyByModelo": {
                model: {size: _json_number(qty) for size, qty in sizes.items()}
                for model, sizes in self.quantities.items()
            },
        }


@dataclass(slots=True)
class FieldRecord:
    material: Optional[str] = None
    scale_x: Optional[str] = None
    scale_y: Optional[str] = None
    yield_percent: Optional[str] = None
    length: Optional[str] = None
    width: Optional[str] = None
    description: Optional[str] = None
    notes: Optional[str] = None
    model: Optional[str] = None
    single_direction: Optional[str] = None
    table: SizeModelTable = field(default_factory=SizeModelTable)

    @property
    def pieces_by_size(self) -> Dict[str, float]:
        return self.table.single_model_quantities()

    def to_dict(self) -> dict:
        return {
            "tecido": self.material,
            "fatorEscalaX": self.scale_x,
            "fatorEscalaY": self.scale_y,
            "aproveitamento": self.yield_percent,
            "comprimento": self.length,
            "largura": self.width,
            "descricao": self.description,
            "observacoes": self.notes,
            "modelo": self.model,
            "sentidoUnico": self.single_direction,
            "tabela": self.table.to_dict(),
            "pecasPorTamanho": {
                size: _json_number(qty) for size, qty in self.pieces_by_size.items()
            },
        }


@dataclass(slots=True)
class Bitmap:
    """RGBA page raster, row-major, shape (height, width, 4)."""

    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3 or self.pixels.shape[2] != 4:
            raise ValueError("bitmap pixels must have shape (height, width, 4)")
        if self.pixels.dtype != np.uint8:
            self.pixels = self.pixels.astype(np.uint8)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])


@dataclass(slots=True, frozen=True)
class CropBounds:
    top: int
    bottom: int
    left: int
    right: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @classmethod
    def clamped(
        cls,
        top: int,
        bottom: int,
        left: int,
        right: int,
        image_width: int,
        image_height: int,
        min_size: int = MIN_CROP_SIZE,
    ) -> "CropBounds":
        """Build bounds inside the image, at least ``min_size`` on each side where the image allows."""
        top, bottom = _clamp_span(top, bottom, image_height, min_size)
        left, right = _clamp_span(left, right, image_width, min_size)
        return cls(top=top, bottom=bottom, left=left, right=right)


def _clamp_span(start: int, end: int, limit: int, min_size: int) -> tuple[int, int]:
    start = max(0, min(start, limit - 1))
    end = max(start + 1, min(end, limit))
    size = min(max(min_size, end - start), limit)
    if end - start < size:
        end = min(limit, start + size)
        start = end - size
    return start, end


def _json_number(value: float) -> float | int:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
