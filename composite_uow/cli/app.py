"""Typer-based CLI application for Composite-UoW."""

import logging
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path
from typing import Annotated

import typer

import composite_uow.cli as cli
from composite_uow.cli.commands.run import run_command
from composite_uow.cli.commands.show import show_resources

# Configure logging for CLI output
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        try:
            installed = get_version("composite-uow")
        except PackageNotFoundError:
            installed = "unknown"
        typer.echo(f"composite-uow {installed}")
        raise typer.Exit()


# Main Typer app
app = typer.Typer(
    name="composite-uow",
    help="Composite-UoW CLI - dependency-ordered inserts for composite foreign keys.",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main_callback(
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config-path",
            "-cp",
            help="Path to configuration directory",
            envvar="COMPOSITE_UOW_CONFIG_PATH",
        ),
    ] = None,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Composite-UoW CLI - dependency-ordered inserts for composite foreign keys.

    Global options are processed before any command.
    """
    # Set global config path (default: ./configs)
    cli.CONFIG_PATH = (config_path or Path.cwd() / "configs").resolve()


app.command(name="show")(show_resources)
app.command(name="run")(run_command)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
