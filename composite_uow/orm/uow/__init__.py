"""Unit of Work (UoW) pattern implementations for Composite-UoW.

- BaseUnitOfWork: Abstract base class with the session lifecycle
- PlannerUnitOfWork: Registers entities and flushes them through the insertion planner
"""

from composite_uow.orm.uow.base import BaseUnitOfWork
from composite_uow.orm.uow.planner_uow import PlannerUnitOfWork

__all__ = [
    "BaseUnitOfWork",
    "PlannerUnitOfWork",
]
