"""Tests for the top-level CLI app and small commands."""

import json

import pytest

from fchanger import __version__
from fchanger.cli.main import app

pytestmark = pytest.mark.usefixtures("cli_env")


class TestMainApp:
    """Tests for the app callback."""

    def test_version(self, runner):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert f"Fchanger version {__version__}" in result.output

    def test_no_args_shows_help(self, runner):
        result = runner.invoke(app, [])

        assert "convert" in result.output
        assert "formats" in result.output


class TestFormatsCommand:
    def test_lists_all_formats(self, runner):
        result = runner.invoke(app, ["formats"])

        assert result.exit_code == 0
        for name in ("PNG", "JPEG", "WEBP", "BMP", "AVIF", "GIF"):
            assert name in result.output
        assert ".jpg" in result.output


class TestConfigCommand:
    """Tests for the config sub-commands."""

    def test_show_masks_api_key(self, runner, monkeypatch):
        monkeypatch.setenv("FCHANGER_ENRICHMENT__API_KEY", "super-secret")

        result = runner.invoke(app, ["config", "show"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["enrichment"]["api_key"] == "***"
        assert data["conversion"]["default_format"] == "png"
        assert "super-secret" not in result.output

    def test_show_reads_yaml(self, runner, tmp_path):
        (tmp_path / "fchanger.yaml").write_text("conversion:\n  default_format: webp\n")

        result = runner.invoke(app, ["config", "show"])

        assert json.loads(result.output)["conversion"]["default_format"] == "webp"

    def test_path(self, runner, tmp_path):
        (tmp_path / "fchanger.yaml").write_text("log_level: INFO\n")

        result = runner.invoke(app, ["config", "path"])

        assert result.exit_code == 0
        assert "fchanger.yaml" in result.output
        assert "found" in result.output
