"""show command - Show the catalog and available scenarios."""

from typing import Annotated, Literal

import typer

from composite_uow.catalog import ReferenceField
from composite_uow.cli.utils import load_catalog
from composite_uow.scenarios import SCENARIOS

ResourceType = Literal["catalog", "scenarios"]


def show_resources(
    resource: Annotated[
        ResourceType,
        typer.Argument(help="Resource type: catalog or scenarios"),
    ],
) -> None:
    """Show available resources.

    RESOURCE types:
      catalog    - Entity types with their expanded key columns and references
      scenarios  - Regression scenarios accepted by 'run'

    Examples:
      composite-uow show catalog
      composite-uow show scenarios
    """
    if resource == "catalog":
        print_catalog()
    else:
        print_scenarios()


def print_catalog() -> None:
    catalog = load_catalog()
    typer.echo("\nEntity types:")
    typer.echo("-" * 60)
    for entity_type in catalog:
        typer.echo(f"  {entity_type.name} (table: {entity_type.table})")
        typer.echo(f"    key: {', '.join(entity_type.key.columns)}")
        for entity_field in entity_type.fields:
            if isinstance(entity_field, ReferenceField):
                kind = "key reference" if entity_type.is_key_field(entity_field.name) else "reference"
                typer.echo(
                    f"    {entity_field.name} -> {entity_field.target} ({kind}: {', '.join(entity_field.columns)})"
                )


def print_scenarios() -> None:
    typer.echo("\nScenarios:")
    typer.echo("-" * 60)
    for name, scenario in SCENARIOS.items():
        summary = (scenario.__doc__ or "").strip().splitlines()[0]
        typer.echo(f"  {name:<28} {summary}")
