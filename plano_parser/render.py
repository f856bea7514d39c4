"""Page rendering through Poppler's pdftoppm."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Protocol

import numpy as np
from PIL import Image

from .logging import get_logger
from .models import Bitmap

logger = get_logger(__name__)


class RenderError(RuntimeError):
    """Raised when the external renderer exits with an error."""


class PageRenderer(Protocol):
    def render(self, pdf_bytes: bytes, page: int, dpi: int) -> Bitmap:
        ...


def load_bitmap(path: Path) -> Bitmap:
    with Image.open(path) as image:
        pixels = np.array(image.convert("RGBA"), dtype=np.uint8)
    return Bitmap(pixels=pixels)


class PdftoppmRenderer:
    """Render one page to PNG with pdftoppm in a per-call temporary directory.

    The subprocess has no timeout; a hung pdftoppm blocks the caller.
    """

    def __init__(self, executable: str = "pdftoppm") -> None:
        self.executable = executable

    def render(self, pdf_bytes: bytes, page: int = 1, dpi: int = 120) -> Bitmap:
        with tempfile.TemporaryDirectory(prefix="plano-", ignore_cleanup_errors=True) as tmpdir:
            pdf_path = Path(tmpdir) / "input.pdf"
            out_prefix = Path(tmpdir) / "page"
            pdf_path.write_bytes(pdf_bytes)

            self._run(
                [
                    self.executable,
                    "-f", str(page),
                    "-l", str(page),
                    "-png",
                    "-r", str(dpi),
                    "-singlefile",
                    str(pdf_path),
                    str(out_prefix),
                ]
            )

            image_path = out_prefix.with_suffix(".png")
            if not image_path.exists():
                raise RenderError(f"pdftoppm produced no image for page {page}")
            bitmap = load_bitmap(image_path)

        logger.info("page_rendered", page=page, dpi=dpi, width=bitmap.width, height=bitmap.height)
        return bitmap

    def _run(self, command: list[str]) -> None:
        try:
            subprocess.run(command, check=True, capture_output=True)
        except subprocess.CalledProcessError as exc:
            stderr = exc.stderr.decode(errors="replace").strip() if exc.stderr else ""
            raise RenderError(f"pdftoppm failed ({exc.returncode}): {stderr}") from exc
