"""Helpers for numbers found in cutting plan text."""

from __future__ import annotations

import math
import re
from typing import Optional

__all__ = ["NUMBER_TOKEN", "find_number", "parse_finite_number"]

# Integer or decimal with comma or dot separator, e.g. "1", "0,985", "1.02".
NUMBER_TOKEN = r"([0-9]+(?:[.,][0-9]+)?)"

_NUMBER_PATTERN = re.compile(NUMBER_TOKEN)
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_PREFIXED_PATTERN = re.compile(r"0([xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_PREFIX_BASES = {"x": 16, "o": 8, "b": 2}


def find_number(text: str) -> Optional[str]:
    """Return the first numeric token in ``text``, or None."""
    if not text:
        return None
    match = _NUMBER_PATTERN.search(text)
    return match.group(1).strip() if match else None


def parse_finite_number(raw: Optional[str]) -> Optional[float]:
    """Parse a table cell as a finite number.

    Accepts plain decimals with optional sign and exponent, plus 0x/0o/0b
    prefixed integers. Returns None for anything else, including infinities,
    NaN and comma decimals.
    """
    if raw is None:
        return None
    value = raw.strip()
    if not value:
        return None

    prefixed = _PREFIXED_PATTERN.fullmatch(value)
    if prefixed:
        digits = prefixed.group(1)
        return float(int(digits[1:], _PREFIX_BASES[digits[0].lower()]))

    if not _DECIMAL_PATTERN.fullmatch(value):
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None
