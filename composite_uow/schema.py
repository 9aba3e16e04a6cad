"""Default catalog reproducing the composite-key regression schema.

`A` and `B` carry store-generated integer ids. `Composite` is keyed purely by
its two references, and `Dependent` / `Dependent2` reference `Composite`
through the pair of columns (a_id, b_id), which are part of their own keys.

Example:
    from composite_uow.schema import REGRESSION_CATALOG

    REGRESSION_CATALOG["Dependent"].key.columns  # ('a_id', 'b_id', 'another_id')
"""

from composite_uow.catalog import ColumnField, EntityType, ReferenceField, SchemaCatalog


def build_regression_catalog() -> SchemaCatalog:
    """Create a fresh catalog with the A, B, Composite, Dependent and Dependent2 entity types."""
    a = EntityType.declare(
        "A",
        [ColumnField("id", generated=True), ColumnField("number")],
        primary_key=["id"],
        table="a",
    )
    b = EntityType.declare(
        "B",
        [ColumnField("id", generated=True), ColumnField("number")],
        primary_key=["id"],
        table="b",
    )
    composite = EntityType.declare(
        "Composite",
        [
            ReferenceField("entityA", target="A", columns=("a_id",)),
            ReferenceField("entityB", target="B", columns=("b_id",)),
        ],
        primary_key=["entityA", "entityB"],
        table="composite",
    )
    dependent = EntityType.declare(
        "Dependent",
        [
            ReferenceField("composite", target="Composite", columns=("a_id", "b_id")),
            ColumnField("anotherId", column="another_id"),
        ],
        primary_key=["composite", "anotherId"],
        table="dependent",
    )
    dependent2 = EntityType.declare(
        "Dependent2",
        [ReferenceField("composite", target="Composite", columns=("a_id", "b_id"))],
        primary_key=["composite"],
        table="dependent2",
    )
    return SchemaCatalog([a, b, composite, dependent, dependent2])


REGRESSION_CATALOG = build_regression_catalog()

__all__ = ["REGRESSION_CATALOG", "build_regression_catalog"]
