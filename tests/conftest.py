"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, stand-in conversion executables, and HTTP clients.
"""

import io
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from PIL import Image  # type: ignore
from pydantic_settings import SettingsConfigDict

from svg2png.config.settings import Settings
from svg2png.api.main import create_app
from svg2png.core.conversion import ConversionOrchestrator, get_orchestrator
from svg2png.core.rendering.transparency import TransparencyConverter


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"

    model_config = SettingsConfigDict(env_file=".env.test", env_prefix="SVG2PNG_")


@pytest.fixture(scope="session")
def temp_dir() -> Generator[Path, None, None]:
    """Create temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp(prefix="svg2png_test_"))
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture(scope="session")
def test_settings(temp_dir: Path) -> TestSettings:
    """Test settings fixture."""
    return TestSettings(temp_path=temp_dir / "artifacts")


@pytest.fixture(scope="session", autouse=True)
def override_settings(test_settings: TestSettings):
    """Override application settings for testing."""
    with patch("svg2png.config.settings.settings", test_settings):
        yield test_settings


@pytest.fixture
def artifact_dir(tmp_path: Path) -> Path:
    """Empty directory for temporary conversion artifacts."""
    path = tmp_path / "artifacts"
    path.mkdir()
    return path


@pytest.fixture
def make_executable(tmp_path: Path) -> Callable[[str, str], str]:
    """
    Factory writing a shell script that stands in for the ImageMagick binary.

    Scripts receive ``-background none <input> <output>``, so the input path
    is ``$3`` and the output path is ``$4``.
    """

    def _make(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text(f"#!/bin/sh\n{body}\n")
        path.chmod(0o755)
        return str(path)

    return _make


@pytest.fixture
def transparent_png(tmp_path: Path) -> Path:
    """Small fully transparent PNG on disk."""
    path = tmp_path / "transparent.png"
    Image.new("RGBA", (4, 4), (0, 0, 0, 0)).save(path, format="PNG")
    return path


@pytest.fixture
def copying_executable(make_executable, transparent_png: Path) -> str:
    """Stand-in converter that writes a fixed transparent PNG."""
    return make_executable("fake-convert", f'cp "{transparent_png}" "$4"')


@pytest.fixture
def echo_executable(make_executable) -> str:
    """Stand-in converter that copies its input to its output."""
    return make_executable("echo-convert", 'cp "$3" "$4"')


@pytest.fixture
def failing_executable(make_executable) -> str:
    """Stand-in converter that exits non-zero."""
    return make_executable("failing-convert", 'echo "convert: no decode delegate" >&2\nexit 1')


@pytest.fixture
def missing_executable(tmp_path: Path) -> str:
    """Path of an executable that does not exist."""
    return str(tmp_path / "no-such-convert")


@pytest.fixture
def png_bytes() -> Callable[[tuple], bytes]:
    """Factory for small solid-color PNG documents."""

    def _make(color: tuple) -> bytes:
        output = io.BytesIO()
        Image.new("RGBA", (2, 2), color).save(output, format="PNG")
        return output.getvalue()

    return _make


@pytest.fixture
def client_factory(artifact_dir: Path) -> Generator[Callable[[str], TestClient], None, None]:
    """Factory for test clients whose transparent path uses ``executable``."""
    clients = []

    def _make(executable: str) -> TestClient:
        app = create_app()
        orchestrator = ConversionOrchestrator(
            transparency_converter=TransparencyConverter(
                executable=executable, temp_dir=artifact_dir
            )
        )
        app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_factory, copying_executable: str) -> TestClient:
    """FastAPI test client with a working stand-in converter."""
    return client_factory(copying_executable)
