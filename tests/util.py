from composite_uow.catalog import ColumnField, EntityType, ReferenceField, SchemaCatalog


def build_cycle_catalog() -> SchemaCatalog:
    """Two entity types whose keys reference each other."""
    x = EntityType.declare("X", [ReferenceField("y", target="Y", columns=("y_id",))], primary_key=["y"])
    y = EntityType.declare("Y", [ReferenceField("x", target="X", columns=("x_id",))], primary_key=["x"])
    return SchemaCatalog([x, y])


def build_favorite_catalog() -> SchemaCatalog:
    """Parent keyed by a generated id, Child keyed by (parent, position).

    Parent.favorite is a nullable plain reference back to one of its children,
    so it can only be written after the child exists.
    """
    parent = EntityType.declare(
        "Parent",
        [
            ColumnField("id", generated=True),
            ColumnField("name", type="string"),
            ReferenceField(
                "favorite",
                target="Child",
                columns=("favorite_parent_id", "favorite_position"),
                nullable=True,
            ),
        ],
        primary_key=["id"],
    )
    child = EntityType.declare(
        "Child",
        [ReferenceField("parent", target="Parent", columns=("parent_id",)), ColumnField("position")],
        primary_key=["parent", "position"],
    )
    note = EntityType.declare(
        "Note",
        [
            ColumnField("id", generated=True),
            ReferenceField("author", target="Parent", columns=("author_id",), nullable=True),
        ],
        primary_key=["id"],
    )
    return SchemaCatalog([parent, child, note])
