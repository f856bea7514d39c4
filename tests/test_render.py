import subprocess
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from plano_parser import render
from plano_parser.render import PdftoppmRenderer, RenderError


def test_render_runs_pdftoppm_and_loads_rgba(monkeypatch):
    seen = {}

    def fake_run(command, check, capture_output):
        seen["command"] = command
        pdf_path = Path(command[-2])
        seen["pdf"] = pdf_path.read_bytes()
        seen["tmpdir"] = pdf_path.parent
        Image.new("RGB", (30, 20), (255, 0, 0)).save(command[-1] + ".png")
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(render.subprocess, "run", fake_run)
    bitmap = PdftoppmRenderer("/usr/bin/pdftoppm").render(b"%PDF-1.4", page=1, dpi=120)

    assert seen["command"][:9] == ["/usr/bin/pdftoppm", "-f", "1", "-l", "1", "-png", "-r", "120", "-singlefile"]
    assert seen["command"][-1].endswith("page")
    assert seen["pdf"] == b"%PDF-1.4"
    assert (bitmap.width, bitmap.height) == (30, 20)
    assert np.array_equal(bitmap.pixels[0, 0], [255, 0, 0, 255])
    assert not seen["tmpdir"].exists()


def test_render_wraps_process_errors(monkeypatch):
    def fake_run(command, check, capture_output):
        raise subprocess.CalledProcessError(1, command, stderr=b"Syntax Error: Couldn't read xref table")

    monkeypatch.setattr(render.subprocess, "run", fake_run)
    with pytest.raises(RenderError, match="xref"):
        PdftoppmRenderer().render(b"not a pdf")


def test_render_fails_when_no_image_written(monkeypatch):
    monkeypatch.setattr(render.subprocess, "run", lambda command, check, capture_output: None)
    with pytest.raises(RenderError, match="no image"):
        PdftoppmRenderer().render(b"%PDF")
