"""Core package for the cutting plan (plano de corte) parser service."""

__all__ = [
    "config",
    "models",
    "numeral",
    "textlayer",
    "lines",
    "fields",
    "table",
    "boundaries",
    "cropper",
    "render",
    "pipeline",
    "runtime",
    "app",
    "cli",
]
