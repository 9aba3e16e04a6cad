"""Tests for composite_uow.cli.app module."""

from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

import composite_uow.cli as cli
from composite_uow.cli.app import app


class TestMainCallback:
    """Tests for the main_callback function (global options)."""

    def test_config_path_set_from_option(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        config_dir = tmp_path / "my_configs"
        config_dir.mkdir()

        cli_runner.invoke(app, ["--config-path", str(config_dir), "show", "scenarios"])

        assert config_dir.resolve() == cli.CONFIG_PATH

    def test_config_path_defaults_to_cwd_configs(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("COMPOSITE_UOW_CONFIG_PATH", raising=False)

        cli_runner.invoke(app, ["show", "scenarios"])

        assert (tmp_path / "configs").resolve() == cli.CONFIG_PATH

    def test_config_path_from_env_var(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """COMPOSITE_UOW_CONFIG_PATH env var sets config path."""
        config_dir = tmp_path / "env_configs"
        config_dir.mkdir()

        monkeypatch.setenv("COMPOSITE_UOW_CONFIG_PATH", str(config_dir))
        cli_runner.invoke(app, ["show", "scenarios"])

        assert config_dir.resolve() == cli.CONFIG_PATH


def test_help_lists_commands(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "run" in result.output
    assert "show" in result.output


def test_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert result.output.startswith("composite-uow ")


def test_package_entry_point_delegates_to_app_main() -> None:
    with patch("composite_uow.cli.app.main") as app_main:
        cli.main()

    app_main.assert_called_once_with()
