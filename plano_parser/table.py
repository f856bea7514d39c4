"""Parser for the size / model quantity table of a cutting plan."""

from __future__ import annotations

import re
from typing import List, Optional

from .logging import get_logger
from .models import QuantityMatrix, SizeModelTable, TableRow
from .numeral import parse_finite_number

logger = get_logger(__name__)

HEADER_LOOKAHEAD = 2
MIN_ROW_TOKENS = 4

_LINE_BREAK = re.compile(r"\r?\n")
_HORIZONTAL_WS = re.compile(r"[ \t]+")


def _split_lines(raw_text: Optional[str]) -> List[str]:
    lines = []
    for line in _LINE_BREAK.split(raw_text or ""):
        line = _HORIZONTAL_WS.sub(" ", line.replace("\u00a0", " ")).strip()
        if line:
            lines.append(line)
    return lines


def find_header_index(lines: List[str]) -> int:
    """Index of the table header line, or -1.

    The header must mention "tamanho" and "modelo"; "completo" may sit on the
    same line or on one of the next two, since the header is sometimes split.
    """
    for idx, line in enumerate(lines):
        lower = line.lower()
        if "tamanho" not in lower or "modelo" not in lower:
            continue
        window = lines[idx:idx + 1 + HEADER_LOOKAHEAD]
        if any("completo" in candidate.lower() for candidate in window):
            return idx
    return -1


def parse_table_row(line: str) -> Optional[TableRow]:
    """Parse "<size> <complete> <molds> <model...>", or None at end of table."""
    line = line.strip()
    if not line:
        return None
    parts = line.split()
    if len(parts) < MIN_ROW_TOKENS:
        return None

    complete = parse_finite_number(parts[1])
    molds = parse_finite_number(parts[2])
    if complete is None or molds is None:
        return None

    model = " ".join(parts[3:]).strip()
    if not model:
        return None
    return TableRow(size=parts[0], complete_count=complete, mold_count=molds, model=model)


def aggregate_quantities(rows: List[TableRow]) -> QuantityMatrix:
    quantities: QuantityMatrix = {}
    for row in rows:
        per_size = quantities.setdefault(row.model, {})
        per_size[row.size] = per_size.get(row.size, 0.0) + row.complete_count
    return quantities


def _sorted_unique(values) -> List[str]:
    return sorted(set(values), key=lambda v: (v.casefold(), v))


def parse_size_model_table(raw_text: Optional[str]) -> SizeModelTable:
    lines = _split_lines(raw_text)
    start = find_header_index(lines)
    if start < 0:
        return SizeModelTable()

    rows: List[TableRow] = []
    for line in lines[start + 1:]:
        row = parse_table_row(line)
        if row is None:
            break
        rows.append(row)

    table = SizeModelTable(
        rows=rows,
        models=_sorted_unique(row.model for row in rows),
        sizes=_sorted_unique(row.size.strip() for row in rows if row.size.strip()),
        quantities=aggregate_quantities(rows),
    )
    logger.debug("table_parsed", header_line=start, rows=len(rows), models=table.models)
    return table
