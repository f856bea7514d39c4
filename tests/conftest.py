import random

import numpy as np
import pytest

from plano_parser.config import load_config
from plano_parser.models import Bitmap, PageText, TextFragment

CONFIG_ENV = (
    "PDFTOPPM",
    "RENDER_DPI",
    "CROP_MARGIN_PX",
    "FALLBACK_CROP_HEIGHT",
    "HOST",
    "PORT",
    "ALLOWED_ORIGINS",
    "LOG_LEVEL",
)


def white_bitmap(width: int, height: int) -> Bitmap:
    return Bitmap(pixels=np.full((height, width, 4), 255, dtype=np.uint8))


def paint(bitmap: Bitmap, rows: slice, cols: slice = slice(None), value: int = 0) -> Bitmap:
    bitmap.pixels[rows, cols, :3] = value
    bitmap.pixels[rows, cols, 3] = 255
    return bitmap


@pytest.fixture()
def clean_env(monkeypatch):
    for key in CONFIG_ENV:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture()
def config(clean_env):
    return load_config()


PAGE_HEIGHT = 842.0

FRAGMENTS = [
    TextFragment("Modelo:", 40.0, 800.0),
    TextFragment("VestidoA", 90.0, 800.0),
    TextFragment("Tecido:", 40.0, 600.0),
    TextFragment("Algodão", 90.0, 600.2),
    TextFragment("Tipo:", 150.0, 600.0),
    TextFragment("PLANO", 180.0, 600.0),
    TextFragment("Tamanho", 40.0, 300.0),
    TextFragment("Modelo", 100.0, 300.0),
    TextFragment("Completos", 160.0, 300.0),
    TextFragment("Moldes", 230.0, 300.0),
    TextFragment("M", 40.0, 285.0),
    TextFragment("10", 100.0, 285.0),
    TextFragment("2", 160.0, 285.0),
    TextFragment("VestidoA", 230.0, 285.0),
    TextFragment("G", 40.0, 270.0),
    TextFragment("5", 100.0, 270.0),
    TextFragment("1", 160.0, 270.0),
    TextFragment("VestidoA", 230.0, 270.0),
]


class FakeRenderer:
    def __init__(self, bitmap=None, error=None):
        self.bitmap = bitmap
        self.error = error
        self.calls = []

    def render(self, pdf_bytes, page, dpi):
        self.calls.append((pdf_bytes, page, dpi))
        if self.error:
            raise self.error
        return self.bitmap


def fake_decoder(pdf_bytes, page_number):
    fragments = FRAGMENTS[:]
    random.Random(3).shuffle(fragments)
    return PageText(fragments=fragments, width=595.0, height=PAGE_HEIGHT)
