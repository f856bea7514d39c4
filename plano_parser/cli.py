"""Command-line interface for the plano parser."""

from __future__ import annotations

import base64
import json
from pathlib import Path
from typing import Optional

import typer

from .config import load_config
from .cropper import PNG_DATA_URL_PREFIX
from .logging import get_logger
from .runtime import build_runtime

logger = get_logger(__name__)

app = typer.Typer(add_completion=False, help="Cutting plan PDF parser")


@app.command("parse")
def parse_command(
    pdf: Path = typer.Argument(..., exists=True, dir_okay=False, help="Cutting plan PDF"),
    image_out: Optional[Path] = typer.Option(
        None,
        "--image-out",
        help="Write the cropped diagram PNG to this path",
    ),
) -> None:
    runtime = build_runtime()
    result = runtime.parser.parse(pdf.read_bytes())

    if image_out is not None:
        encoded = result.image_data_url[len(PNG_DATA_URL_PREFIX):]
        image_out.write_bytes(base64.b64decode(encoded))
        logger.info("image_written", path=str(image_out))

    typer.echo(json.dumps(result.fields.to_dict(), ensure_ascii=False, indent=2))


@app.command("service")
def service_command(
    host: Optional[str] = typer.Option(None, "--host", help="Service bind host (default: $HOST)"),
    port: Optional[int] = typer.Option(None, "--port", help="Service port (default: $PORT)"),
) -> None:
    import uvicorn

    config = load_config()
    uvicorn.run(
        "plano_parser.app:create_app",
        host=host or config.host,
        port=port or config.port,
        factory=True,
        log_level=config.log_level.lower(),
    )


def main():
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
