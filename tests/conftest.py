"""Pytest configuration and fixtures."""

import io
import logging
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image
from typer.testing import CliRunner

from fchanger.config import get_settings
from fchanger.core.models import SourceImage
from fchanger.image.formats import SupportedFormat, is_encoder_available

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent

requires_avif = pytest.mark.skipif(
    not is_encoder_available(SupportedFormat.AVIF),
    reason="Pillow build has no AVIF encoder",
)


def image_bytes(
    mode: str = "RGB",
    size: tuple[int, int] = (16, 12),
    color: tuple[int, ...] | int = (200, 30, 30),
    fmt: str = "PNG",
) -> bytes:
    """Encode a solid-color image in memory."""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


def half_transparent_png(size: tuple[int, int] = (32, 32)) -> bytes:
    """Left half opaque blue, right half fully transparent."""
    image = Image.new("RGBA", size, (0, 0, 0, 0))
    for x in range(size[0] // 2):
        for y in range(size[1]):
            image.putpixel((x, y), (0, 0, 255, 255))
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Temporary directory for tests."""
    return tmp_path


@pytest.fixture
def output_dir(temp_dir: Path) -> Path:
    """Create an output directory."""
    output = temp_dir / "output"
    output.mkdir()
    return output


@pytest.fixture
def png_bytes() -> bytes:
    return image_bytes()


@pytest.fixture
def transparent_png_bytes() -> bytes:
    return half_transparent_png()


@pytest.fixture
def corrupt_bytes() -> bytes:
    # Valid PNG signature followed by garbage
    return b"\x89PNG\r\n\x1a\n" + b"not really an image" * 4


@pytest.fixture
def make_source() -> Callable[..., SourceImage]:
    """Factory for SourceImage values."""

    def _make(
        name: str = "photo.png",
        data: bytes | None = None,
        content_type: str = "image/png",
    ) -> SourceImage:
        return SourceImage(data=image_bytes() if data is None else data, content_type=content_type, name=name)

    return _make


@pytest.fixture
def sample_image_files(temp_dir: Path) -> list[Path]:
    """A PNG, a JPEG and a transparent PNG on disk."""
    files = {
        "red.png": image_bytes(),
        "green.jpg": image_bytes(color=(20, 180, 20), fmt="JPEG"),
        "logo.png": half_transparent_png(),
    }
    paths = []
    for name, data in files.items():
        path = temp_dir / name
        path.write_bytes(data)
        paths.append(path)
    return paths


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Isolate settings, logs and API keys for a CLI invocation."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FCHANGER_LOG_DIR", str(tmp_path / ".logs"))
    for name in ("GOOGLE_API_KEY", "OPENAI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    get_settings.cache_clear()
