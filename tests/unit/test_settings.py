"""
Unit Tests for Settings
=======================

Environment-driven configuration.
"""

import pytest
from pydantic import ValidationError

from svg2png.config.settings import Settings, get_settings


class TestSettings:
    """Environment variable handling and validation."""

    def test_defaults(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SVG2PNG_TEMP_PATH", str(tmp_path / "tmp"))

        settings = Settings(_env_file=None)

        assert settings.host == "0.0.0.0"
        assert settings.port == 3000
        assert settings.log_level == "INFO"
        assert settings.transparency_executable == "convert"

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SVG2PNG_HOST", "127.0.0.1")
        monkeypatch.setenv("SVG2PNG_PORT", "8080")
        monkeypatch.setenv("SVG2PNG_LOG_LEVEL", "debug")
        monkeypatch.setenv("SVG2PNG_TRANSPARENCY_EXECUTABLE", "magick")
        monkeypatch.setenv("SVG2PNG_TEMP_PATH", str(tmp_path / "artifacts"))

        settings = Settings(_env_file=None)

        assert settings.host == "127.0.0.1"
        assert settings.port == 8080
        assert settings.log_level == "DEBUG"
        assert settings.transparency_executable == "magick"
        assert settings.temp_path == tmp_path / "artifacts"

    def test_temp_path_is_created(self, tmp_path):
        settings = Settings(_env_file=None, temp_path=tmp_path / "a" / "b")

        assert settings.temp_path.is_dir()

    @pytest.mark.parametrize(
        "field,value",
        [("environment", "staging"), ("log_level", "LOUD"), ("port", 0), ("port", "http")],
    )
    def test_invalid_values(self, tmp_path, field, value):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, temp_path=tmp_path, **{field: value})

    def test_get_settings_returns_active_settings(self, test_settings):
        assert get_settings() is test_settings
