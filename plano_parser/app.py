"""FastAPI application exposing the cutting plan parser."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers, UploadFile
from starlette.exceptions import HTTPException
from starlette.responses import Response

from .logging import get_logger
from .runtime import Runtime, build_runtime

logger = get_logger(__name__)

MISSING_FILE_ERROR = "Sem ficheiro"
UPLOAD_FIELD = "file"

_BODY_HEADERS = ("content-length", "content-type")


class PreflightCORSMiddleware(CORSMiddleware):
    """CORS middleware that answers every preflight with 204.

    Allowed preflights carry the access-control headers; rejected ones get a
    bare 204 and the browser blocks the follow-up request.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return Response(status_code=204)
        headers = {
            key: value for key, value in response.headers.items() if key not in _BODY_HEADERS
        }
        return Response(status_code=204, headers=headers)


def get_runtime(request: Request) -> Runtime:
    runtime: Runtime = request.app.state.runtime
    return runtime


async def read_upload(request: Request) -> Optional[UploadFile]:
    """The uploaded ``file`` part, or None when the request carries no file upload."""
    try:
        form = await request.form()
    except HTTPException as exc:
        logger.warning("upload_form_unreadable", error=exc.detail)
        return None
    upload = form.get(UPLOAD_FIELD)
    if not isinstance(upload, UploadFile):
        return None
    return upload


def create_app(runtime: Runtime | None = None) -> FastAPI:
    api = FastAPI(title="Plano Parser Service", version="1.0.0")
    api.state.runtime = runtime or build_runtime()
    api.add_middleware(
        PreflightCORSMiddleware,
        allow_origins=sorted(api.state.runtime.config.allowed_origins),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @api.get("/api/health")
    def health() -> dict:
        return {"ok": True}

    @api.post("/api/parse-plano")
    async def parse_plano(
        request: Request,
        runtime: Runtime = Depends(get_runtime),
    ) -> JSONResponse:
        file = await read_upload(request)
        if file is None:
            return JSONResponse(status_code=400, content={"ok": False, "error": MISSING_FILE_ERROR})

        try:
            pdf_bytes = await file.read()
            result = await run_in_threadpool(runtime.parser.parse, pdf_bytes)
        except Exception as exc:
            logger.exception("parse_plano_failed", filename=file.filename, error=str(exc))
            return JSONResponse(status_code=500, content={"ok": False, "error": str(exc)})

        return JSONResponse(content=result.to_dict())

    return api
