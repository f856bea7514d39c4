"""Cutting plan pipeline: text fields plus the cropped diagram image."""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Callable, Optional

from .boundaries import DEFAULT_THRESHOLDS, DetectionThresholds, detect_crop_bounds
from .config import AppConfig
from .cropper import crop_to_data_url
from .fields import extract_fields
from .lines import reconstruct_page
from .logging import get_logger
from .models import FieldRecord, PageText
from .render import PageRenderer
from .textlayer import decode_text_layer

logger = get_logger(__name__)

PAGE_NUMBER = 1
POINTS_PER_INCH = 72
FOOTER_ANCHOR_RATIO = 0.28

TextDecoder = Callable[[bytes, int], PageText]


@dataclass(slots=True)
class PlanoResult:
    fields: FieldRecord
    image_data_url: str

    def to_dict(self) -> dict:
        return {
            "ok": True,
            "fields": self.fields.to_dict(),
            "imageDataUrl": self.image_data_url,
        }


def _is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def anchor_crop_height(
    anchor_y: Optional[float],
    page_height_pts: Optional[float],
    dpi: int,
    margin_px: int,
) -> Optional[int]:
    """Pixel distance from the page top to the anchor, minus ``margin_px``."""
    if not _is_finite(anchor_y) or not _is_finite(page_height_pts):
        return None
    from_top_px = (page_height_pts - anchor_y) * dpi / POINTS_PER_INCH
    return math.floor(from_top_px - margin_px)


def is_footer_likely(anchor_y: Optional[float], page_height_pts: Optional[float]) -> bool:
    """True when the anchor label sits in the bottom part of the page."""
    if not _is_finite(anchor_y) or not _is_finite(page_height_pts):
        return False
    return anchor_y < page_height_pts * FOOTER_ANCHOR_RATIO


class PlanoParser:
    def __init__(
        self,
        config: AppConfig,
        renderer: PageRenderer,
        decoder: TextDecoder = decode_text_layer,
        thresholds: DetectionThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self.config = config
        self.renderer = renderer
        self.decoder = decoder
        self.thresholds = replace(thresholds, fallback_bottom=config.fallback_crop_height)

    def parse(self, pdf_bytes: bytes) -> PlanoResult:
        """Run every stage in order; any stage error propagates."""
        page = self.decoder(pdf_bytes, PAGE_NUMBER)
        text = reconstruct_page(page)
        fields = extract_fields(text.text)

        crop_height = anchor_crop_height(
            text.anchor_y,
            text.page_height,
            self.config.render_dpi,
            self.config.crop_margin_px,
        )
        footer_likely = is_footer_likely(text.anchor_y, text.page_height)
        logger.info(
            "crop_target",
            anchor_y=text.anchor_y,
            page_height=text.page_height,
            crop_height=crop_height,
            footer_likely=footer_likely,
        )

        bitmap = self.renderer.render(pdf_bytes, PAGE_NUMBER, self.config.render_dpi)
        bounds = detect_crop_bounds(bitmap, crop_height, footer_likely, self.thresholds)

        return PlanoResult(fields=fields, image_data_url=crop_to_data_url(bitmap, bounds))
