import pytest

from plano_parser.config import DEFAULT_ALLOWED_ORIGINS, default_pdftoppm_path, load_config


def test_defaults(clean_env):
    config = load_config()
    assert config.render_dpi == 120
    assert config.crop_margin_px == 25
    assert config.fallback_crop_height == 900
    assert config.port == 5176
    assert config.host == "0.0.0.0"
    assert config.allowed_origins == frozenset(DEFAULT_ALLOWED_ORIGINS)
    assert config.log_level == "INFO"


def test_env_overrides(clean_env):
    clean_env.setenv("PDFTOPPM", "/opt/poppler/bin/pdftoppm")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("ALLOWED_ORIGINS", "https://a.example, https://b.example,,")
    clean_env.setenv("LOG_LEVEL", "debug")
    clean_env.setenv("RENDER_DPI", "  ")
    config = load_config()
    assert config.pdftoppm_path == "/opt/poppler/bin/pdftoppm"
    assert config.port == 8080
    assert config.allowed_origins == {"https://a.example", "https://b.example"}
    assert config.log_level == "DEBUG"
    assert config.render_dpi == 120


def test_invalid_integer_names_variable(clean_env):
    clean_env.setenv("PORT", "http")
    with pytest.raises(ValueError, match="PORT"):
        load_config()


def test_pdftoppm_default_depends_on_platform():
    assert default_pdftoppm_path("linux") == "pdftoppm"
    assert default_pdftoppm_path("win32").endswith("pdftoppm.exe")
