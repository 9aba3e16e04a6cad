"""Tests for composite_uow.cli.commands.run module."""

from pathlib import Path
from unittest.mock import patch

from typer.testing import CliRunner

from composite_uow.cli.app import app
from composite_uow.scenarios import ScenarioResult


def test_run_all_scenarios(cli_runner: CliRunner, mock_config_path: Path) -> None:
    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run"])

    assert result.exit_code == 0
    assert "[PASS] dependent-with-extra-key: ok" in result.output
    assert "[PASS] nested-reference: ok" in result.output
    assert "[PASS] explicit-ids-order: ok" in result.output
    assert "insert order: A -> B -> Composite -> Dependent" in result.output
    assert "Results: 3 passed, 0 failed" in result.output


def test_run_single_scenario(cli_runner: CliRunner, mock_config_path: Path) -> None:
    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run", "nested-reference"])

    assert result.exit_code == 0
    assert "insert order: A -> B -> Composite -> Dependent2" in result.output
    assert "Results: 1 passed, 0 failed" in result.output


def test_run_unknown_scenario(cli_runner: CliRunner, mock_config_path: Path) -> None:
    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run", "missing"])

    assert result.exit_code == 1
    assert "Unknown scenario 'missing'" in result.output


def test_run_uses_db_yaml(cli_runner: CliRunner, mock_config_path: Path) -> None:
    db_file = mock_config_path / "scenarios.db"
    (mock_config_path / "db.yaml").write_text(f"url: sqlite:///{db_file}\n")

    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run"])

    assert result.exit_code == 0
    assert db_file.exists()


def test_run_with_db_url_option(cli_runner: CliRunner, mock_config_path: Path) -> None:
    db_file = mock_config_path / "option.db"

    result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run", "--db-url", f"sqlite:///{db_file}"])

    assert result.exit_code == 0
    assert db_file.exists()


def test_run_reports_failures(cli_runner: CliRunner, mock_config_path: Path) -> None:
    failed = ScenarioResult(
        name="nested-reference",
        passed=False,
        order=["A", "B", "Composite", "Dependent2"],
        message="1 check(s) failed",
        failures=["Dependent2 row (1, 2) not found"],
    )
    with patch("composite_uow.cli.commands.run.run_scenario", return_value=failed):
        result = cli_runner.invoke(app, ["-cp", str(mock_config_path), "run", "nested-reference"])

    assert result.exit_code == 1
    assert "[FAIL] nested-reference: 1 check(s) failed" in result.output
    assert "    - Dependent2 row (1, 2) not found" in result.output
    assert "Results: 0 passed, 1 failed" in result.output


def test_run_with_unusable_db_url(cli_runner: CliRunner, mock_config_path: Path) -> None:
    args = ["-cp", str(mock_config_path), "run", "explicit-ids-order", "--db-url", "nosuchdialect://"]
    result = cli_runner.invoke(app, args)

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "[FAIL] explicit-ids-order:" in result.output
    assert "Results: 0 passed, 1 failed" in result.output
