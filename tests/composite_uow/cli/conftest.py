"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

import composite_uow.cli as cli


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CliRunner for testing commands."""
    return CliRunner()


@pytest.fixture
def mock_config_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Set cli.CONFIG_PATH to a temp directory and return it."""
    monkeypatch.setattr(cli, "CONFIG_PATH", tmp_path)
    monkeypatch.delenv("COMPOSITE_UOW_DB_URL", raising=False)
    return tmp_path


@pytest.fixture
def sample_catalog_file(tmp_path: Path) -> Path:
    """Write a two-entity catalog.yaml into a temp config directory."""
    (tmp_path / "catalog.yaml").write_text(
        """entities:
  Order:
    table: orders
    fields:
      id:
        generated: true
      note:
        type: string
    primary_key: [id]
  OrderLine:
    fields:
      order:
        target: Order
      position: {}
    primary_key: [order, position]
"""
    )
    return tmp_path
