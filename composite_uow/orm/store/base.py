"""Persistence store interface used by the statement emitter.

A store receives one row-level request at a time and reports the identity
it assigned, if any. Constraint violations surface as `StoreRejectedError`
with the store's own message left untouched.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class InsertRequest:
    """One row insert: target table plus the column -> value mapping."""

    entity: str
    table: str
    values: dict[str, Any]
    generated: str | None = None


@dataclass(frozen=True)
class UpdateRequest:
    """Post-insert update of plain foreign key columns, addressed by primary key."""

    entity: str
    table: str
    key: dict[str, Any]
    values: dict[str, Any]


@dataclass
class InsertResult:
    """Outcome of an insert.

    `identity` holds the store-assigned key columns; it is empty when the
    caller supplied the key and the store only acknowledged the write.
    """

    identity: dict[str, Any] = field(default_factory=dict)


class PersistenceStore(ABC):
    """Abstract base class for stores the planner writes through."""

    @abstractmethod
    def insert(self, request: InsertRequest) -> InsertResult:
        """Insert one row.

        Raises:
            StoreRejectedError: If the store refuses the row.
        """
        ...

    @abstractmethod
    def update(self, request: UpdateRequest) -> None:
        """Update columns of an existing row.

        Raises:
            StoreRejectedError: If the store refuses the update.
        """
        ...
