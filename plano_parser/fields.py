"""Tolerant field extraction from reconstructed cutting plan text.

Each field is an independent rule: one or more label patterns tried in order
plus an extractor that turns the match into a value. A rule that finds nothing
yields None; extraction never raises on unexpected documents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from .logging import get_logger
from .models import FieldRecord
from .numeral import NUMBER_TOKEN, find_number
from .table import parse_size_model_table

logger = get_logger(__name__)

LABEL_WINDOW = 120

_HORIZONTAL_WS = re.compile(r"[ \t]+")
_FLAGS = re.IGNORECASE

Extractor = Callable[[re.Match, str], Optional[str]]


@dataclass(slots=True, frozen=True)
class ExtractionRule:
    field: str
    patterns: Tuple[re.Pattern, ...]
    extract: Extractor

    def apply(self, text: str) -> Optional[str]:
        for pattern in self.patterns:
            match = pattern.search(text)
            if not match:
                continue
            value = self.extract(match, text)
            if value:
                return value
        return None


def normalize_text(text: Optional[str]) -> str:
    """Collapse horizontal whitespace and NBSPs, keeping line breaks."""
    value = (text or "").replace("\u00a0", " ")
    return _HORIZONTAL_WS.sub(" ", value).strip()


def clean_material_value(raw: Optional[str]) -> Optional[str]:
    """Trim a material value, cutting anything from "Tipo:" onwards."""
    value = normalize_text(raw)
    if not value:
        return None
    idx = value.lower().find("tipo:")
    if idx >= 0:
        value = value[:idx].strip()
    return value or None


def _captured(match: re.Match, _text: str) -> Optional[str]:
    return match.group(1).strip()


def _material(match: re.Match, _text: str) -> Optional[str]:
    return clean_material_value(match.group(1))


def _number_after_label(match: re.Match, text: str) -> Optional[str]:
    end = match.end()
    return find_number(text[end:end + LABEL_WINDOW])


def _yes_no(match: re.Match, _text: str) -> Optional[str]:
    return "Sim" if match.group(1).lower().startswith("sim") else "Não"


def _rule(field: str, extract: Extractor, *patterns: str) -> ExtractionRule:
    return ExtractionRule(
        field=field,
        patterns=tuple(re.compile(p, _FLAGS) for p in patterns),
        extract=extract,
    )


_LINE_VALUE = r"\s*[:\-]?\s*(.+?)(?:\n|\Z)"
_NUMBER_VALUE = r"\s*[:\-]?\s*" + NUMBER_TOKEN

FIELD_RULES: Tuple[ExtractionRule, ...] = (
    _rule(
        "material",
        _material,
        r"Tecido\s*[:\-]?\s*(.+?)(?=\s*Tipo\s*:|\n|\Z)",
        r"Material\s*[:\-]?\s*(.+?)(?=\s*Tipo\s*:|\n|\Z)",
    ),
    _rule(
        "scale_x",
        _number_after_label,
        r"Fator[\s\S]{0,40}escala[\s\S]{0,20}X",
        r"Fator[\s\S]{0,40}X",
    ),
    _rule(
        "scale_y",
        _number_after_label,
        r"Fator[\s\S]{0,40}escala[\s\S]{0,20}Y",
        r"Fator[\s\S]{0,40}Y",
    ),
    _rule("yield_percent", _captured, r"Aproveitamento" + _NUMBER_VALUE + r"\s*%?"),
    _rule("length", _captured, r"Comprimento" + _NUMBER_VALUE),
    _rule("width", _captured, r"Largura" + _NUMBER_VALUE),
    _rule("description", _captured, r"Descri[cç][aã]o" + _LINE_VALUE),
    _rule("notes", _captured, r"Observa[cç][oõ]es" + _LINE_VALUE),
    _rule("model", _captured, r"Modelo" + _LINE_VALUE),
    # Often inline: "Tipo: PLANO Sentido único: Sim ..."
    _rule("single_direction", _yes_no, r"Sentido\s*[uú]nico\s*[:\-]?\s*(Sim|N[aã]o)\b"),
)


def extract_scalar_fields(text: Optional[str]) -> Dict[str, Optional[str]]:
    normalized = normalize_text(text)
    return {rule.field: rule.apply(normalized) for rule in FIELD_RULES}


def extract_fields(text: Optional[str]) -> FieldRecord:
    """Build the field record for a reconstructed page text stream."""
    values = extract_scalar_fields(text)
    table = parse_size_model_table(text)
    record = FieldRecord(table=table, **values)
    logger.info(
        "fields_extracted",
        found=sorted(name for name, value in values.items() if value is not None),
        models=len(table.models),
        rows=len(table.rows),
    )
    return record
