"""Tests for composite_uow.cli.commands.show module."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from composite_uow.cli.app import app
from composite_uow.cli.commands.show import print_catalog, print_scenarios


def test_print_catalog_defaults_to_regression_catalog(mock_config_path: Path, capsys: pytest.CaptureFixture) -> None:
    print_catalog()

    captured = capsys.readouterr()
    assert "  Composite (table: composite)" in captured.out
    assert "    key: a_id, b_id, another_id" in captured.out
    assert "    composite -> Composite (key reference: a_id, b_id)" in captured.out


def test_print_scenarios(capsys: pytest.CaptureFixture) -> None:
    print_scenarios()

    captured = capsys.readouterr()
    assert "dependent-with-extra-key" in captured.out
    assert "nested-reference" in captured.out
    assert "explicit-ids-order" in captured.out


def test_show_catalog_from_config(cli_runner: CliRunner, sample_catalog_file: Path) -> None:
    result = cli_runner.invoke(app, ["-cp", str(sample_catalog_file), "show", "catalog"])

    assert result.exit_code == 0
    assert "  Order (table: orders)" in result.output
    assert "  OrderLine (table: orderline)" in result.output
    assert "    key: order_id, position" in result.output
    assert "    order -> Order (key reference: order_id)" in result.output
    assert "Composite" not in result.output


def test_show_invalid_resource(cli_runner: CliRunner, mock_config_path: Path) -> None:
    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "show", "tables"])

    assert result.exit_code != 0
