"""Rebuild visual lines from unordered text fragments."""

from __future__ import annotations

import math
from typing import Dict, Iterable, List, Optional

from .logging import get_logger
from .models import Line, PageText, ReconstructedText, TextFragment

logger = get_logger(__name__)

ANCHOR_LABEL = "tecido"
LINE_BUCKET_PT = 0.5


def normalize_fragment_text(text: str) -> str:
    return (text or "").replace("\u00a0", " ").strip()


def quantize_y(y: float, unit: float = LINE_BUCKET_PT) -> float:
    """Round ``y`` half-up to the nearest multiple of ``unit``."""
    return math.floor(y / unit + 0.5) * unit


def reconstruct_lines(
    fragments: Iterable[TextFragment],
    page_width: float = 0.0,
    page_height: float = 0.0,
) -> ReconstructedText:
    """Group fragments into lines ordered top to bottom, left to right.

    The anchor is the unquantized y of the first fragment, in scan order,
    whose text contains "tecido". Scan order is the decoder's emission order,
    so with out-of-order emission this may not be the visually first one.
    """
    anchor_y: Optional[float] = None
    buckets: Dict[float, Line] = {}

    for fragment in fragments:
        text = normalize_fragment_text(fragment.text)
        if not text:
            continue

        if anchor_y is None and ANCHOR_LABEL in text.lower():
            anchor_y = fragment.y

        key = quantize_y(fragment.y)
        line = buckets.get(key)
        if line is None:
            line = buckets[key] = Line(y=key)
        line.fragments.append(TextFragment(text=text, x=fragment.x, y=fragment.y))

    lines: List[Line] = []
    for line in sorted(buckets.values(), key=lambda ln: ln.y, reverse=True):
        line.fragments.sort(key=lambda fr: fr.x)
        if line.text:
            lines.append(line)

    logger.debug("lines_reconstructed", lines=len(lines), anchor_y=anchor_y)
    return ReconstructedText(
        lines=lines,
        anchor_y=anchor_y,
        page_width=page_width,
        page_height=page_height,
    )


def reconstruct_page(page: PageText) -> ReconstructedText:
    return reconstruct_lines(page.fragments, page.width, page.height)
