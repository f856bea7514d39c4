"""Configuration loader for the plano parser service."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from typing import FrozenSet, Optional


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is not None:
        value = value.strip()
        if value == "":
            return default
        return value
    return default


def _get_int(key: str, default: int) -> int:
    value = _get_env(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"Environment variable {key} must be an integer") from exc


def _get_csv(key: str, default: tuple[str, ...]) -> FrozenSet[str]:
    value = _get_env(key)
    if value is None:
        return frozenset(default)
    return frozenset(item.strip() for item in value.split(",") if item.strip())


@dataclass(slots=True, frozen=True)
class AppConfig:
    pdftoppm_path: str
    render_dpi: int
    crop_margin_px: int
    fallback_crop_height: int
    host: str
    port: int
    allowed_origins: FrozenSet[str]
    log_level: str


DEFAULT_ALLOWED_ORIGINS = (
    "https://www.moldette.pt",
    "https://moldette.pt",
    "http://localhost:5173",
    "http://localhost:5174",
    "http://localhost:5175",
)

WINDOWS_PDFTOPPM = r"C:\poppler\poppler-25.12.0\Library\bin\pdftoppm.exe"


def default_pdftoppm_path(platform: str = sys.platform) -> str:
    return WINDOWS_PDFTOPPM if platform == "win32" else "pdftoppm"


def load_config() -> AppConfig:
    pdftoppm_path = _get_env("PDFTOPPM", default_pdftoppm_path())
    render_dpi = max(1, _get_int("RENDER_DPI", 120))
    crop_margin_px = max(0, _get_int("CROP_MARGIN_PX", 25))
    fallback_crop_height = max(1, _get_int("FALLBACK_CROP_HEIGHT", 900))
    host = _get_env("HOST", "0.0.0.0")
    port = _get_int("PORT", 5176)
    allowed_origins = _get_csv("ALLOWED_ORIGINS", DEFAULT_ALLOWED_ORIGINS)
    log_level = _get_env("LOG_LEVEL", "INFO").upper()

    return AppConfig(
        pdftoppm_path=pdftoppm_path,
        render_dpi=render_dpi,
        crop_margin_px=crop_margin_px,
        fallback_crop_height=fallback_crop_height,
        host=host,
        port=port,
        allowed_origins=allowed_origins,
        log_level=log_level,
    )
