"""Cut the detected rectangle out of a page bitmap and encode it for transport."""

from __future__ import annotations

import base64
import io

from PIL import Image

from .models import Bitmap, CropBounds

PNG_DATA_URL_PREFIX = "data:image/png;base64,"


def crop_bitmap(bitmap: Bitmap, bounds: CropBounds) -> Bitmap:
    if not (0 <= bounds.top < bounds.bottom <= bitmap.height):
        raise ValueError(f"vertical bounds {bounds.top}..{bounds.bottom} outside image height {bitmap.height}")
    if not (0 <= bounds.left < bounds.right <= bitmap.width):
        raise ValueError(f"horizontal bounds {bounds.left}..{bounds.right} outside image width {bitmap.width}")
    region = bitmap.pixels[bounds.top:bounds.bottom, bounds.left:bounds.right]
    return Bitmap(pixels=region.copy())


def encode_png(bitmap: Bitmap) -> bytes:
    buffer = io.BytesIO()
    Image.fromarray(bitmap.pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_url(png_bytes: bytes) -> str:
    return PNG_DATA_URL_PREFIX + base64.b64encode(png_bytes).decode("ascii")


def crop_to_data_url(bitmap: Bitmap, bounds: CropBounds) -> str:
    return to_data_url(encode_png(crop_bitmap(bitmap, bounds)))
