"""Crop boundary detection on a rendered cutting plan page.

The page has a header/logo band at the top, the diagram in the middle and a
legend/footer block at the bottom, usually separated from the diagram by one
or more horizontal rules. Bounds are found from per-row ink density:

- top: first tall white gap after the header ink,
- bottom: anchor-derived height, pulled up above a separator rule when the
  crop is likely to reach the footer,
- right: rightmost inked column between top and bottom, plus a margin.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .logging import get_logger
from .models import MIN_CROP_SIZE, Bitmap, CropBounds

logger = get_logger(__name__)


@dataclass(slots=True, frozen=True)
class DetectionThresholds:
    # a pixel is white when R, G and B are all >= this, or alpha is 0
    white_level: int = 245
    # header search
    white_row_max_ink: float = 0.004
    ink_row_min: float = 0.012
    gap_rows: int = 18
    top_offset: int = 18
    top_search_ratio: float = 0.60
    top_max_ratio: float = 0.55
    fallback_top: int = 140
    # bottom bound
    bottom_offset: int = 15
    min_bottom: int = 120
    fallback_bottom: int = 900
    # footer separator rule
    rule_hit_ink: float = 0.35
    rule_near_ink: float = 0.22
    rule_search_min_span: int = 220
    rule_search_ratio: float = 0.58
    footer_rule_margin: int = 10
    late_rule_margin: int = 6
    late_bottom_ratio: float = 0.88
    # right bound
    right_margin: int = 14
    min_crop_size: int = MIN_CROP_SIZE


DEFAULT_THRESHOLDS = DetectionThresholds()


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def ink_mask(bitmap: Bitmap, thresholds: DetectionThresholds = DEFAULT_THRESHOLDS) -> np.ndarray:
    """Boolean (height, width) mask of non-white pixels."""
    px = bitmap.pixels
    rgb_white = np.all(px[:, :, :3] >= thresholds.white_level, axis=2)
    transparent = px[:, :, 3] == 0
    return ~(rgb_white | transparent)


def row_ink_ratios(mask: np.ndarray) -> np.ndarray:
    width = mask.shape[1]
    if width == 0:
        return np.zeros(mask.shape[0], dtype=float)
    return mask.sum(axis=1) / float(width)


def find_top_below_header(
    ratios: np.ndarray,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    """Row just above the end of the first tall white gap after the header ink."""
    height = len(ratios)
    fallback = min(height - 1, thresholds.fallback_top)
    end_y = min(height - 1, int(height * thresholds.top_search_ratio))

    seen_ink = False
    run = 0
    for y in range(0, end_y + 1):
        ratio = ratios[y]
        if not seen_ink and ratio >= thresholds.ink_row_min:
            seen_ink = True

        if seen_ink and ratio <= thresholds.white_row_max_ink:
            run += 1
            if run >= thresholds.gap_rows:
                top = min(height - 1, y - thresholds.top_offset)
                if top > height * thresholds.top_max_ratio:
                    return fallback
                return top
        else:
            run = 0
    return fallback


def find_separator_rule(
    ratios: np.ndarray,
    top: int,
    bottom: int,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> Optional[int]:
    """Top row of the lowest horizontal rule above ``bottom``, or None.

    Rows are scanned upwards; a multi-pixel or anti-aliased rule is absorbed
    while the row above stays dense enough.
    """
    height = len(ratios)
    search_bottom = _clamp(int(bottom) - 1, 0, height - 1)
    search_top = _clamp(
        max(top + thresholds.rule_search_min_span, int(height * thresholds.rule_search_ratio)),
        0,
        height - 1,
    )

    for y in range(search_bottom, search_top - 1, -1):
        if ratios[y] >= thresholds.rule_hit_ink:
            rule_top = y
            while rule_top > search_top and ratios[rule_top - 1] >= thresholds.rule_near_ink:
                rule_top -= 1
            return rule_top
    return None


def initial_bottom(
    crop_height: Optional[float],
    top: int,
    height: int,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    if crop_height is not None and np.isfinite(crop_height):
        bottom = _clamp(int(np.floor(crop_height)) - thresholds.bottom_offset, thresholds.min_bottom, height)
    else:
        bottom = thresholds.fallback_bottom
    return _clamp(bottom, top + thresholds.min_crop_size, height)


def find_bottom(
    ratios: np.ndarray,
    top: int,
    crop_height: Optional[float],
    footer_likely: bool,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    height = len(ratios)
    bottom = initial_bottom(crop_height, top, height, thresholds)

    if footer_likely:
        margin = thresholds.footer_rule_margin
    elif bottom > height * thresholds.late_bottom_ratio:
        margin = thresholds.late_rule_margin
    else:
        return bottom

    rule_y = find_separator_rule(ratios, top, bottom, thresholds)
    if rule_y is not None:
        bottom = _clamp(rule_y - margin, top + thresholds.min_crop_size, height)
    return bottom


def find_right_edge(
    mask: np.ndarray,
    top: int,
    bottom: int,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> int:
    width = mask.shape[1]
    band = mask[max(0, top):max(0, bottom)]
    columns = np.flatnonzero(band.any(axis=0)) if band.size else np.empty(0, dtype=int)
    rightmost = int(columns[-1]) if columns.size else 0
    return min(width - 1, rightmost + thresholds.right_margin)


def detect_crop_bounds(
    bitmap: Bitmap,
    crop_height: Optional[float] = None,
    footer_likely: bool = False,
    thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
) -> CropBounds:
    """Compute the diagram crop for a rendered page.

    ``crop_height`` is the anchor-derived height from the top of the page in
    pixels (None when the anchor was not found); ``footer_likely`` tells that
    the anchor sits low on the page, so the footer rule should be looked for.
    """
    mask = ink_mask(bitmap, thresholds)
    ratios = row_ink_ratios(mask)

    top = find_top_below_header(ratios, thresholds)
    bottom = find_bottom(ratios, top, crop_height, footer_likely, thresholds)
    right_edge = find_right_edge(mask, top, min(bottom, bitmap.height), thresholds)

    bounds = CropBounds.clamped(
        top=top,
        bottom=bottom,
        left=0,
        right=right_edge + 1,
        image_width=bitmap.width,
        image_height=bitmap.height,
        min_size=thresholds.min_crop_size,
    )
    logger.info(
        "crop_bounds_detected",
        top=bounds.top,
        bottom=bounds.bottom,
        left=bounds.left,
        right=bounds.right,
        crop_height=crop_height,
        footer_likely=footer_likely,
    )
    return bounds
