"""Entity graph builder.

Pending entity instances live in an arena (`EntityGraph.nodes`) and are
linked by index-based `Edge`s, one per reference field. An edge carries the
full column mapping from the referenced key onto the dependent's columns, so
a composite reference always moves every constituent column together.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from composite_uow.catalog import EntityType, ReferenceField, SchemaCatalog
from composite_uow.exceptions import InvalidStateTransitionError, SchemaMismatchError

logger = logging.getLogger("Composite-UoW")


class _Pending:
    """Marker for a value the store assigns on insert."""

    def __repr__(self) -> str:
        return "PENDING"

    def __bool__(self) -> bool:
        return False


PENDING: Any = _Pending()


class NodeState(Enum):
    """Lifecycle of a node within one flush."""

    REGISTERED = "registered"
    ORDERED = "ordered"
    RESOLVING = "resolving"
    RESOLVED = "resolved"
    EMITTED = "emitted"
    ACKNOWLEDGED = "acknowledged"
    DISCARDED = "discarded"


_TRANSITIONS: dict[NodeState, frozenset[NodeState]] = {
    NodeState.REGISTERED: frozenset({NodeState.ORDERED, NodeState.DISCARDED}),
    NodeState.ORDERED: frozenset({NodeState.RESOLVING, NodeState.DISCARDED}),
    NodeState.RESOLVING: frozenset({NodeState.RESOLVED, NodeState.DISCARDED}),
    NodeState.RESOLVED: frozenset({NodeState.EMITTED, NodeState.DISCARDED}),
    NodeState.EMITTED: frozenset({NodeState.ACKNOWLEDGED, NodeState.DISCARDED}),
    NodeState.ACKNOWLEDGED: frozenset(),
    NodeState.DISCARDED: frozenset(),
}


@dataclass(eq=False)
class EntityNode:
    """One pending or persisted entity instance.

    `fields` holds what the caller registered (literals and referenced nodes),
    `columns` the row values that will be written, filled in by the
    materializer and by the store for generated keys.
    """

    index: int
    entity_type: EntityType
    fields: dict[str, Any] = field(default_factory=dict)
    columns: dict[str, Any] = field(default_factory=dict)
    state: NodeState = NodeState.REGISTERED

    def __repr__(self) -> str:
        return f"{self.entity_type.name}#{self.index}"

    @property
    def label(self) -> str:
        return repr(self)

    def get(self, name: str) -> Any:
        """Read a field: the referenced node for a reference, the column value for a literal."""
        entity_field = self.entity_type.get_field(name)
        if entity_field is None:
            raise SchemaMismatchError(f"'{self.entity_type.name}' has no field '{name}'")
        if isinstance(entity_field, ReferenceField):
            return self.fields.get(name)
        value = self.columns.get(entity_field.columns[0])
        return None if value is PENDING else value

    @property
    def key_known(self) -> bool:
        return all(self.columns.get(column) not in (None, PENDING) for column in self.entity_type.key.columns)

    @property
    def identity(self) -> dict[str, Any] | None:
        """Key column values once every one of them is known."""
        if not self.key_known:
            return None
        return {column: self.columns[column] for column in self.entity_type.key.columns}

    def transition(self, target: NodeState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(self.label, self.state.value, target.value)
        self.state = target


@dataclass(frozen=True)
class Edge:
    """Directed relation from a dependent node to the node it references.

    `column_map` pairs every column of the referenced key with the
    dependent's column receiving it.
    """

    dependent: int
    referenced: int
    field_name: str
    column_map: tuple[tuple[str, str], ...]
    key_contributing: bool


class EntityGraph:
    """Arena of entity nodes plus the edges induced by their references."""

    def __init__(self, catalog: SchemaCatalog):
        self.catalog = catalog
        self.nodes: list[EntityNode] = []
        self._edges: dict[tuple[int, str], Edge] = {}
        self._pending: list[int] = []

    def register(self, type_name: str, **values: Any) -> EntityNode:
        """Add a new pending node.

        Args:
            type_name: Entity type name declared in the catalog.
            **values: Field values by field name. References accept an
                `EntityNode`, or their raw local columns by column name, in
                which case every column of the composite must be supplied.

        Returns:
            The registered node.

        Raises:
            SchemaMismatchError: If the type, a field or a referenced node does not match the catalog.
        """
        node = self._new_node(type_name, values)
        self._pending.append(node.index)
        logger.debug(f"Registered {node.label} with fields {sorted(values)}")
        return node

    def attach(self, type_name: str, **values: Any) -> EntityNode:
        """Add a node for an already-persisted entity identified by its key.

        The node starts acknowledged and is never inserted.
        """
        node = self._new_node(type_name, values)
        for edge in self.outgoing(node):
            referenced = self.referenced(edge)
            if referenced.key_known:
                for source, target in edge.column_map:
                    node.columns[target] = referenced.columns[source]
        if not node.key_known:
            self._drop_edges(node)
            self.nodes.pop()
            raise SchemaMismatchError(
                f"attaching {node.label} requires every key column {list(node.entity_type.key.columns)}"
            )
        node.state = NodeState.ACKNOWLEDGED
        self._drop_edges(node)
        return node

    def assign(self, node: EntityNode, name: str, value: Any) -> None:
        """Set or replace a field of a node that has not been ordered yet."""
        self._check_member(node)
        if node.state is not NodeState.REGISTERED:
            raise SchemaMismatchError(f"{node.label} is {node.state.value}; only registered nodes can be modified")
        self._apply(node, {name: value})

    def outgoing(self, node: EntityNode) -> list[Edge]:
        """Edges leaving `node`, in field declaration order."""
        edges = []
        for reference in node.entity_type.references:
            edge = self._edges.get((node.index, reference.name))
            if edge is not None:
                edges.append(edge)
        return edges

    def referenced(self, edge: Edge) -> EntityNode:
        return self.nodes[edge.referenced]

    def pending_nodes(self) -> list[EntityNode]:
        """Nodes waiting to be flushed, in registration order."""
        return [self.nodes[index] for index in self._pending]

    def release(self, node: EntityNode) -> None:
        """Remove a node from the pending set."""
        if node.index in self._pending:
            self._pending.remove(node.index)

    def link_raw_references(self, node: EntityNode) -> None:
        """Link references given as raw key columns to the node holding that key, if any.

        Covers targets registered after the dependent; a node that supplied
        the key of a pending row must still be inserted after it.
        """
        for reference in node.entity_type.references:
            if (node.index, reference.name) in self._edges or node.fields.get(reference.name) is not None:
                continue
            if any(node.columns.get(column) is None for column in reference.columns):
                continue
            self._link_by_key(node, reference)

    def validate(self, node: EntityNode) -> None:
        """Check that every required field of a pending node has been supplied."""
        missing = []
        for entity_field in node.entity_type.fields:
            if entity_field.nullable:
                continue
            if isinstance(entity_field, ReferenceField):
                has_edge = (node.index, entity_field.name) in self._edges
                has_columns = all(node.columns.get(column) is not None for column in entity_field.columns)
                if not (has_edge or has_columns):
                    missing.append(entity_field.name)
            elif node.columns.get(entity_field.columns[0]) is None:
                missing.append(entity_field.name)
        if missing:
            raise SchemaMismatchError(f"{node.label} is missing required field(s) {missing}")

    def _new_node(self, type_name: str, values: dict[str, Any]) -> EntityNode:
        entity_type = self.catalog[type_name]
        node = EntityNode(index=len(self.nodes), entity_type=entity_type)
        generated = entity_type.key.generated_column
        for column in entity_type.columns:
            node.columns[column] = PENDING if column == generated else None
        try:
            self._apply(node, values)
        except SchemaMismatchError:
            # The index is handed out again, so no edge may outlive the failed node.
            self._drop_edges(node)
            raise
        self.nodes.append(node)
        return node

    def _apply(self, node: EntityNode, values: dict[str, Any]) -> None:
        entity_type = node.entity_type
        raw_columns: dict[str, Any] = {}
        for name, value in values.items():
            entity_field = entity_type.get_field(name)
            if entity_field is None:
                if entity_type.reference_for_column(name) is None:
                    raise SchemaMismatchError(f"'{entity_type.name}' has no field or column '{name}'")
                raw_columns[name] = value
            elif isinstance(entity_field, ReferenceField):
                self._set_reference(node, entity_field, value)
            else:
                node.fields[name] = value
                node.columns[entity_field.columns[0]] = value

        for reference in entity_type.references:
            supplied = [column for column in reference.columns if column in raw_columns]
            if not supplied:
                continue
            if len(supplied) != len(reference.columns):
                absent = [column for column in reference.columns if column not in raw_columns]
                raise SchemaMismatchError(
                    f"'{entity_type.name}.{reference.name}' is a composite reference; "
                    f"columns {absent} must be supplied together with {supplied}"
                )
            if reference.name in values:
                raise SchemaMismatchError(
                    f"'{entity_type.name}.{reference.name}' was given both as a reference and as raw columns"
                )
            self._edges.pop((node.index, reference.name), None)
            node.fields.pop(reference.name, None)
            for column in reference.columns:
                node.columns[column] = raw_columns[column]
            self._link_by_key(node, reference)

    def _set_reference(self, node: EntityNode, reference: ReferenceField, value: Any) -> None:
        entity_type = node.entity_type
        if value is None:
            if not reference.nullable:
                raise SchemaMismatchError(f"'{entity_type.name}.{reference.name}' is not nullable")
            self._edges.pop((node.index, reference.name), None)
            node.fields[reference.name] = None
            for column in reference.columns:
                node.columns[column] = None
            return

        if not isinstance(value, EntityNode):
            raise SchemaMismatchError(
                f"'{entity_type.name}.{reference.name}' expects a {reference.target} node, got {type(value).__name__}"
            )
        self._check_member(value)
        if value.entity_type.name != reference.target:
            raise SchemaMismatchError(
                f"'{entity_type.name}.{reference.name}' expects a {reference.target} node, got {value.label}"
            )
        if value.state is NodeState.DISCARDED:
            raise SchemaMismatchError(f"{value.label} was discarded by a failed flush and must be registered again")

        target_columns = self.catalog[reference.target].key.columns
        self._edges[(node.index, reference.name)] = Edge(
            dependent=node.index,
            referenced=value.index,
            field_name=reference.name,
            column_map=tuple(zip(target_columns, reference.columns)),
            key_contributing=entity_type.is_key_field(reference.name),
        )
        node.fields[reference.name] = value

    def _link_by_key(self, node: EntityNode, reference: ReferenceField) -> None:
        target_columns = self.catalog[reference.target].key.columns
        key = {source: node.columns[local] for source, local in zip(target_columns, reference.columns)}
        if any(value is None for value in key.values()):
            return
        for candidate in self.nodes:
            if (
                candidate is node
                or candidate.state is NodeState.DISCARDED
                or candidate.entity_type.name != reference.target
            ):
                continue
            if all(self._known_value(candidate, column) == value for column, value in key.items()):
                self._set_reference(node, reference, candidate)
                logger.debug(f"Linked '{reference.name}' of {node.label} to {candidate.label} by key {key}")
                return

    def _known_value(self, node: EntityNode, column: str, seen: frozenset[int] = frozenset()) -> Any:
        """Value a key column will hold, following references not materialized yet."""
        value = node.columns.get(column)
        if value is not None and value is not PENDING:
            return value
        reference = node.entity_type.reference_for_column(column)
        if reference is None or node.index in seen:
            return None
        edge = self._edges.get((node.index, reference.name))
        if edge is None:
            return None
        source = next(source for source, local in edge.column_map if local == column)
        return self._known_value(self.nodes[edge.referenced], source, seen | {node.index})

    def _check_member(self, node: EntityNode) -> None:
        if node.index >= len(self.nodes) or self.nodes[node.index] is not node:
            raise SchemaMismatchError(f"{node.label} does not belong to this unit of work")

    def _drop_edges(self, node: EntityNode) -> None:
        for reference in node.entity_type.references:
            self._edges.pop((node.index, reference.name), None)
