"""Tests for the ``python -m netwise`` command."""

import importlib
from unittest.mock import Mock, patch

import netwise.__main__ as cli
from click.testing import CliRunner
from netwise.config import Settings


class TestDotenv:
    def test_dotenv_is_loaded_on_import(self):
        with patch("dotenv.load_dotenv") as load_dotenv:
            importlib.reload(cli)

        load_dotenv.assert_called_once()

    def test_dotenv_values_reach_settings(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("NETWISE_MODEL", raising=False)
        (tmp_path / ".env").write_text("NETWISE_MODEL=gemini-from-dotenv\n")

        importlib.reload(cli)

        try:
            assert Settings.from_env().model == "gemini-from-dotenv"
        finally:
            monkeypatch.delenv("NETWISE_MODEL", raising=False)


class TestMain:
    def test_serves_the_app(self, monkeypatch):
        monkeypatch.setenv("NETWISE_PORT", "9001")
        app = Mock()

        with (
            patch.object(cli, "NetWise", return_value=app),
            patch.object(cli.uvicorn, "run") as run,
        ):
            result = CliRunner().invoke(cli.main, ["--host", "0.0.0.0"])

        assert result.exit_code == 0, result.output
        assert "http://0.0.0.0:9001" in result.output
        run.assert_called_once_with(app, host="0.0.0.0", port=9001, log_level="info")
