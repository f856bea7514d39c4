"""Text-layer decoding of a cutting plan page with pdfplumber."""

from __future__ import annotations

import io
from typing import Any, Dict, List

import pdfplumber

from .logging import get_logger
from .models import PageText, TextFragment

logger = get_logger(__name__)


def decode_text_layer(pdf_bytes: bytes, page_number: int = 1) -> PageText:
    """Return the positioned words of one page, in content-stream order.

    Coordinates use the PDF convention: origin at the bottom-left corner,
    y growing upwards, in points.
    """
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        if page_number < 1 or page_number > len(pdf.pages):
            raise ValueError(f"PDF has no page {page_number}")
        page = pdf.pages[page_number - 1]
        width = float(page.width)
        height = float(page.height)

        words = page.extract_words(
            use_text_flow=True,
            keep_blank_chars=False,
            return_chars=True,
        )
        fragments: List[TextFragment] = [
            TextFragment(
                text=word["text"],
                x=float(word["x0"]),
                y=_baseline_y(word, height),
            )
            for word in words
        ]

    logger.info(
        "text_layer_decoded",
        page=page_number,
        fragments=len(fragments),
        width=width,
        height=height,
    )
    return PageText(fragments=fragments, width=width, height=height)


def _baseline_y(word: Dict[str, Any], page_height: float) -> float:
    chars = word.get("chars") or []
    matrix = chars[0].get("matrix") if chars else None
    if matrix and len(matrix) == 6:
        return float(matrix[5])
    # pdfplumber "bottom" is measured from the top edge
    return page_height - float(word["bottom"])
