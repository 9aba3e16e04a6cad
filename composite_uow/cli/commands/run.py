"""run command - Run the composite-key regression scenarios."""

import logging
from typing import Annotated

import typer

from composite_uow.cli.utils import load_db_connection
from composite_uow.scenarios import SCENARIOS, run_scenario

logger = logging.getLogger("Composite-UoW")


def run_command(
    scenario: Annotated[
        str,
        typer.Argument(help="Scenario to run, or 'all'"),
    ] = "all",
    db_url: Annotated[
        str | None,
        typer.Option("--db-url", help="SQLAlchemy database URL (default: in-memory SQLite)"),
    ] = None,
) -> None:
    """Run regression scenarios and report PASS/FAIL for each.

    Writes are rolled back after every scenario.

    Examples:
      composite-uow run
      composite-uow run nested-reference
      composite-uow run all --db-url sqlite:///scenarios.db
    """
    if scenario != "all" and scenario not in SCENARIOS:
        typer.echo(f"Unknown scenario '{scenario}'. Available: {', '.join(SCENARIOS)}", err=True)
        raise typer.Exit(1)

    names = list(SCENARIOS) if scenario == "all" else [scenario]
    failed = 0
    for name in names:
        # In-memory databases get a fresh connection per scenario.
        db_conn = load_db_connection(db_url)
        try:
            result = run_scenario(name, db_conn)
        finally:
            db_conn.dispose()

        status = "PASS" if result.passed else "FAIL"
        typer.echo(f"[{status}] {name}: {result.message}")
        if result.order:
            typer.echo(f"    insert order: {' -> '.join(result.order)}")
        for failure in result.failures:
            typer.echo(f"    - {failure}")
        if not result.passed:
            failed += 1

    typer.echo(f"\nResults: {len(names) - failed} passed, {failed} failed")
    if failed:
        raise typer.Exit(1)
