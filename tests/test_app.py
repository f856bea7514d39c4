import pytest
from fastapi.testclient import TestClient

from conftest import FakeRenderer, fake_decoder, paint, white_bitmap
from plano_parser.app import create_app
from plano_parser.pipeline import PlanoParser
from plano_parser.render import RenderError
from plano_parser.runtime import Runtime


def _client(config, renderer):
    parser = PlanoParser(config, renderer, decoder=fake_decoder)
    runtime = Runtime(config=config, renderer=renderer, parser=parser)
    return TestClient(create_app(runtime))


@pytest.fixture()
def renderer():
    return FakeRenderer(paint(white_bitmap(700, 1000), slice(20, 41), slice(0, 200)))


def test_health(config, renderer):
    response = _client(config, renderer).get("/api/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_missing_file_is_rejected_without_rendering(config, renderer):
    response = _client(config, renderer).post("/api/parse-plano")
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Sem ficheiro"}
    assert renderer.calls == []


def test_text_field_named_file_is_treated_as_missing(config, renderer):
    response = _client(config, renderer).post("/api/parse-plano", data={"file": "notafile"})
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Sem ficheiro"}
    assert renderer.calls == []


def test_upload_under_other_field_name_is_missing(config, renderer):
    response = _client(config, renderer).post(
        "/api/parse-plano",
        files={"pdf": ("plano.pdf", b"%PDF-1.4 fake", "application/pdf")},
    )
    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "Sem ficheiro"}


def test_parse_plano_success(config, renderer):
    response = _client(config, renderer).post(
        "/api/parse-plano",
        files={"file": ("plano.pdf", b"%PDF-1.4 fake", "application/pdf")},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["ok"] is True
    assert body["fields"]["modelo"] == "VestidoA"
    assert body["fields"]["tabela"]["tamanhos"] == ["G", "M"]
    assert body["imageDataUrl"].startswith("data:image/png;base64,")
    assert renderer.calls[0][0] == b"%PDF-1.4 fake"


def test_stage_failure_collapses_to_error_payload(config):
    failing = FakeRenderer(error=RenderError("pdftoppm failed (99): bad pdf"))
    response = _client(config, failing).post(
        "/api/parse-plano",
        files={"file": ("plano.pdf", b"%PDF", "application/pdf")},
    )
    assert response.status_code == 500
    assert response.json() == {"ok": False, "error": "pdftoppm failed (99): bad pdf"}


def _preflight(client, origin):
    return client.options(
        "/api/parse-plano",
        headers={"Origin": origin, "Access-Control-Request-Method": "POST"},
    )


def test_cors_allows_configured_origin(config, renderer):
    client = _client(config, renderer)
    response = _preflight(client, "https://moldette.pt")
    assert response.status_code == 204
    assert response.headers["access-control-allow-origin"] == "https://moldette.pt"
    assert "POST" in response.headers["access-control-allow-methods"]

    response = client.get("/api/health", headers={"Origin": "https://moldette.pt"})
    assert response.headers["access-control-allow-origin"] == "https://moldette.pt"


def test_cors_preflight_from_unknown_origin_gets_bare_204(config, renderer):
    client = _client(config, renderer)
    response = _preflight(client, "https://evil.example")
    assert response.status_code == 204
    assert "access-control-allow-origin" not in response.headers
    assert response.content == b""

    response = client.get("/api/health", headers={"Origin": "https://evil.example"})
    assert "access-control-allow-origin" not in response.headers
