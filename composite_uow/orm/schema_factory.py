"""Schema factory for the insertion planner.

Generates SQLAlchemy Core tables from a `SchemaCatalog`: composite primary
keys, one composite `ForeignKeyConstraint` per reference and a column type
inherited from the referenced key column.
"""

from typing import Any

from sqlalchemy import Boolean, Column, Float, ForeignKeyConstraint, Integer, MetaData, String, Table

from composite_uow.catalog import EntityType, SchemaCatalog

COLUMN_TYPES: dict[str, Any] = {
    "integer": Integer,
    "string": lambda: String(255),
    "float": Float,
    "boolean": Boolean,
}


def create_schema(catalog: SchemaCatalog, metadata: MetaData | None = None):
    """Create SQLAlchemy tables for every entity type of the catalog.

    Args:
        catalog: The catalog to generate tables for.
        metadata: Optional MetaData to attach the tables to. A fresh one is created if None.

    Returns:
        A Schema namespace object containing:
        - metadata: The MetaData holding every generated table
        - tables: Mapping of entity type name to its Table
        - catalog: The source catalog

    Example:
        >>> schema = create_schema(REGRESSION_CATALOG)
        >>> schema.metadata.create_all(engine)
        >>> schema.tables["Composite"].primary_key.columns.keys()
        ['a_id', 'b_id']
    """
    metadata = metadata or MetaData()
    tables = {entity_type.name: _create_table(catalog, entity_type, metadata) for entity_type in catalog}

    class Schema:
        pass

    Schema.metadata = metadata  # type: ignore
    Schema.tables = tables  # type: ignore
    Schema.catalog = catalog  # type: ignore

    return Schema


def _create_table(catalog: SchemaCatalog, entity_type: EntityType, metadata: MetaData) -> Table:
    key_columns = entity_type.key.columns
    generated = entity_type.key.generated_column

    columns = []
    for column_name in entity_type.columns:
        column_type = COLUMN_TYPES[catalog.column_type(entity_type, column_name)]()
        if column_name in key_columns:
            columns.append(
                Column(column_name, column_type, primary_key=True, autoincrement=column_name == generated)
            )
        else:
            columns.append(Column(column_name, column_type, nullable=entity_type.is_nullable(column_name)))

    constraints = []
    for reference in entity_type.references:
        target = catalog[reference.target]
        constraints.append(
            ForeignKeyConstraint(
                list(reference.columns),
                [f"{target.table}.{column}" for column in target.key.columns],
                name=f"fk_{entity_type.table}_{reference.name.lower()}",
            )
        )

    return Table(entity_type.table, metadata, *columns, *constraints)
