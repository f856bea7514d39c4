"""Runtime wiring for CLI and service entrypoints."""

from __future__ import annotations

from dataclasses import dataclass

from .config import AppConfig, load_config
from .logging import configure_logging
from .pipeline import PlanoParser
from .render import PageRenderer, PdftoppmRenderer


@dataclass(slots=True)
class Runtime:
    config: AppConfig
    renderer: PageRenderer
    parser: PlanoParser


def build_runtime(
    config: AppConfig | None = None,
    renderer: PageRenderer | None = None,
) -> Runtime:
    cfg = config or load_config()
    configure_logging(cfg.log_level)

    page_renderer = renderer or PdftoppmRenderer(cfg.pdftoppm_path)
    parser = PlanoParser(cfg, page_renderer)

    return Runtime(config=cfg, renderer=page_renderer, parser=parser)
