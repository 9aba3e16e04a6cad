"""Dependency-ordered insertion of entities linked by composite foreign keys."""

from composite_uow.catalog import ColumnField, EntityType, KeyDescriptor, ReferenceField, SchemaCatalog
from composite_uow.exceptions import (
    CyclicDependencyError,
    PlannerError,
    SchemaMismatchError,
    StoreRejectedError,
    UnresolvedDependencyError,
)
from composite_uow.planner import EntityNode, FlushResult, InsertionPlanner, NodeState

__all__ = [
    "ColumnField",
    "CyclicDependencyError",
    "EntityNode",
    "EntityType",
    "FlushResult",
    "InsertionPlanner",
    "KeyDescriptor",
    "NodeState",
    "PlannerError",
    "ReferenceField",
    "SchemaCatalog",
    "SchemaMismatchError",
    "StoreRejectedError",
    "UnresolvedDependencyError",
]
