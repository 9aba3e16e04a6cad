"""Schema catalog for the insertion planner.

The catalog is the static description of every entity type the planner may
see: its table, its fields and the ordered list of fields that compose its
primary key (the KeyDescriptor). A reference field listed in the primary key
is a composite foreign key component: it contributes *all* of the referenced
type's key columns to the dependent's own key.

Example:
    >>> catalog = SchemaCatalog.from_dict({
    ...     "entities": {
    ...         "A": {"fields": {"id": {"generated": True}}, "primary_key": ["id"]},
    ...         "Composite": {
    ...             "fields": {"entityA": {"target": "A", "columns": ["a_id"]}},
    ...             "primary_key": ["entityA"],
    ...         },
    ...     }
    ... })
    >>> catalog["Composite"].key.columns
    ('a_id',)
"""

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from composite_uow.exceptions import SchemaMismatchError

FIELD_TYPES: tuple[str, ...] = ("integer", "string", "float", "boolean")


@dataclass(frozen=True)
class ColumnField:
    """A literal-typed column."""

    name: str
    type: str = "integer"
    column: str | None = None
    nullable: bool = False
    generated: bool = False

    @property
    def columns(self) -> tuple[str, ...]:
        return (self.column or self.name,)


@dataclass(frozen=True)
class ReferenceField:
    """A many-to-one reference to another entity type.

    `columns` are the local column names, aligned positionally with the
    target's expanded key columns.
    """

    name: str
    target: str
    columns: tuple[str, ...]
    nullable: bool = False


Field = Union[ColumnField, ReferenceField]


@dataclass(frozen=True)
class KeyDescriptor:
    """Ordered list of the fields composing an entity type's primary key."""

    fields: tuple[Field, ...]

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    @property
    def columns(self) -> tuple[str, ...]:
        """Fully expanded key column list; a reference contributes every one of its columns."""
        expanded: list[str] = []
        for key_field in self.fields:
            for column in key_field.columns:
                if column not in expanded:
                    expanded.append(column)
        return tuple(expanded)

    @property
    def generated_column(self) -> str | None:
        """Column assigned by the store on insert, if any."""
        for key_field in self.fields:
            if isinstance(key_field, ColumnField) and key_field.generated:
                return key_field.columns[0]
        return None

    @property
    def references(self) -> tuple[ReferenceField, ...]:
        return tuple(f for f in self.fields if isinstance(f, ReferenceField))


@dataclass(frozen=True)
class EntityType:
    """Declaration of one entity type."""

    name: str
    table: str
    fields: tuple[Field, ...]
    key: KeyDescriptor
    _by_name: dict[str, Field] = field(default_factory=dict, init=False, repr=False, compare=False, hash=False)

    def __post_init__(self) -> None:
        for entity_field in self.fields:
            if entity_field.name in self._by_name:
                raise SchemaMismatchError(f"field '{entity_field.name}' is declared twice on '{self.name}'")
            self._by_name[entity_field.name] = entity_field

    @classmethod
    def declare(
        cls,
        name: str,
        fields: Iterable[Field],
        primary_key: Iterable[str],
        table: str | None = None,
    ) -> "EntityType":
        """Build an entity type, resolving the primary key field names into a KeyDescriptor."""
        fields = tuple(fields)
        by_name = {f.name: f for f in fields}
        key_fields = []
        for key_name in primary_key:
            if key_name not in by_name:
                raise SchemaMismatchError(f"primary key field '{key_name}' is not a field of '{name}'")
            key_fields.append(by_name[key_name])
        if not key_fields:
            raise SchemaMismatchError(f"entity type '{name}' declares no primary key")
        return cls(name=name, table=table or name.lower(), fields=fields, key=KeyDescriptor(tuple(key_fields)))

    def get_field(self, name: str) -> Field | None:
        return self._by_name.get(name)

    def is_key_field(self, name: str) -> bool:
        return name in self.key.field_names

    @property
    def references(self) -> tuple[ReferenceField, ...]:
        return tuple(f for f in self.fields if isinstance(f, ReferenceField))

    @property
    def columns(self) -> tuple[str, ...]:
        """Every column of the table, key columns first."""
        ordered = list(self.key.columns)
        for entity_field in self.fields:
            for column in entity_field.columns:
                if column not in ordered:
                    ordered.append(column)
        return tuple(ordered)

    def is_nullable(self, column: str) -> bool:
        if column in self.key.columns:
            return False
        for entity_field in self.fields:
            if isinstance(entity_field, ColumnField) and column in entity_field.columns:
                return entity_field.nullable
        return all(reference.nullable for reference in self.references if column in reference.columns)

    def reference_for_column(self, column: str) -> ReferenceField | None:
        for reference in self.references:
            if column in reference.columns:
                return reference
        return None


class SchemaCatalog:
    """Read-only registry of entity types, validated once on construction."""

    def __init__(self, entity_types: Iterable[EntityType]):
        self._types: dict[str, EntityType] = {}
        for entity_type in entity_types:
            if entity_type.name in self._types:
                raise SchemaMismatchError(f"entity type '{entity_type.name}' is declared twice")
            self._types[entity_type.name] = entity_type
        for entity_type in self._types.values():
            self._validate(entity_type)

    def __getitem__(self, name: str) -> EntityType:
        try:
            return self._types[name]
        except KeyError:
            raise SchemaMismatchError(f"unknown entity type '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[EntityType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)

    def __repr__(self) -> str:
        return f"SchemaCatalog(entities={list(self._types)})"

    def column_type(self, entity_type: EntityType, column: str) -> str:
        """Return the literal type of a column, following references down to the owning column."""
        seen: set[tuple[str, str]] = set()
        while (entity_type.name, column) not in seen:
            seen.add((entity_type.name, column))
            for entity_field in entity_type.fields:
                if isinstance(entity_field, ColumnField) and column in entity_field.columns:
                    return entity_field.type
            reference = entity_type.reference_for_column(column)
            if reference is None:
                break
            target = self[reference.target]
            column = target.key.columns[reference.columns.index(column)]
            entity_type = target
        # Type-level key cycles have no owning literal column.
        return "integer"

    def _validate(self, entity_type: EntityType) -> None:
        literal_columns: set[str] = set()
        reference_columns: set[str] = set()
        for entity_field in entity_type.fields:
            if isinstance(entity_field, ColumnField):
                if entity_field.type not in FIELD_TYPES:
                    raise SchemaMismatchError(
                        f"field '{entity_type.name}.{entity_field.name}' has unsupported type '{entity_field.type}'"
                    )
                column = entity_field.columns[0]
                if column in literal_columns or column in reference_columns:
                    raise SchemaMismatchError(f"column '{entity_type.table}.{column}' is declared twice")
                literal_columns.add(column)
                if entity_field.generated and (
                    entity_field.type != "integer" or entity_type.key.fields != (entity_field,)
                ):
                    raise SchemaMismatchError(
                        f"'{entity_type.name}.{entity_field.name}': only a single integer key column can be generated"
                    )
            else:
                if entity_field.target not in self._types:
                    raise SchemaMismatchError(
                        f"'{entity_type.name}.{entity_field.name}' references unknown entity type "
                        f"'{entity_field.target}'"
                    )
                target_columns = self._types[entity_field.target].key.columns
                if len(entity_field.columns) != len(target_columns):
                    raise SchemaMismatchError(
                        f"'{entity_type.name}.{entity_field.name}' maps {len(entity_field.columns)} column(s) "
                        f"onto the {len(target_columns)}-column key of '{entity_field.target}'"
                    )
                if literal_columns.intersection(entity_field.columns):
                    raise SchemaMismatchError(
                        f"'{entity_type.name}.{entity_field.name}' reuses a literal column as a foreign key"
                    )
                reference_columns.update(entity_field.columns)
        for key_field in entity_type.key.fields:
            if key_field.nullable:
                raise SchemaMismatchError(f"key field '{entity_type.name}.{key_field.name}' cannot be nullable")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SchemaCatalog":
        """Build a catalog from a plain mapping of the form ``{"entities": {name: spec}}``.

        Each entity spec has ``fields`` (name -> field spec), ``primary_key``
        (list of field names) and an optional ``table``. A field spec holding a
        ``target`` is a reference, anything else is a literal column.
        """
        entities = data.get("entities")
        if not isinstance(entities, Mapping) or not entities:
            raise SchemaMismatchError("catalog must define a non-empty 'entities' mapping")

        entity_types = []
        for name, spec in entities.items():
            fields: list[Field] = []
            for field_name, field_spec in (spec.get("fields") or {}).items():
                field_spec = dict(field_spec or {})
                if "target" in field_spec:
                    columns = field_spec.get("columns") or [f"{field_name}_id"]
                    fields.append(
                        ReferenceField(
                            name=field_name,
                            target=field_spec["target"],
                            columns=tuple(columns),
                            nullable=bool(field_spec.get("nullable", False)),
                        )
                    )
                else:
                    fields.append(
                        ColumnField(
                            name=field_name,
                            type=field_spec.get("type", "integer"),
                            column=field_spec.get("column"),
                            nullable=bool(field_spec.get("nullable", False)),
                            generated=bool(field_spec.get("generated", False)),
                        )
                    )
            entity_types.append(
                EntityType.declare(name, fields, spec.get("primary_key") or [], table=spec.get("table"))
            )
        return cls(entity_types)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "SchemaCatalog":
        """Load a catalog from a YAML file."""
        from omegaconf import DictConfig, OmegaConf

        cfg = OmegaConf.load(path)
        if not isinstance(cfg, DictConfig):
            raise TypeError(f"{path} must be a YAML mapping.")  # noqa: TRY003
        return cls.from_dict(OmegaConf.to_container(cfg, resolve=True))
