"""Insertion planner for composite and chained foreign keys.

- EntityGraph: Builds the node arena and reference edges
- DependencyResolver: Orders nodes so references are inserted first
- ForeignKeyMaterializer: Copies complete referenced keys into dependents
- StatementEmitter: Emits inserts and records store-assigned identities
- InsertionPlanner: Runs the four phases once per flush
"""

from composite_uow.planner.emitter import StatementEmitter
from composite_uow.planner.graph import PENDING, Edge, EntityGraph, EntityNode, NodeState
from composite_uow.planner.materializer import ForeignKeyMaterializer
from composite_uow.planner.planner import FlushResult, InsertionPlanner
from composite_uow.planner.resolver import DependencyResolver

__all__ = [
    "PENDING",
    "DependencyResolver",
    "Edge",
    "EntityGraph",
    "EntityNode",
    "FlushResult",
    "ForeignKeyMaterializer",
    "InsertionPlanner",
    "NodeState",
    "StatementEmitter",
]
