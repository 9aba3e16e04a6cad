"""Base Unit of Work for Composite-UoW.

Provides the session lifecycle shared by unit of work implementations.
"""

from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.orm import Session, sessionmaker
from typing_extensions import Self


class BaseUnitOfWork(ABC):
    """Abstract base class for Unit of Work pattern.

    Provides common functionality for managing database transactions:
    - Session lifecycle management (context manager)
    - Transaction operations (commit, rollback)

    Subclasses must implement:
    - `_reset()`: Drop every collaborator bound to the closed session
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        """Initialize Unit of Work with a session factory.

        Args:
            session_factory: SQLAlchemy sessionmaker instance.
        """
        self.session_factory = session_factory
        self.session: Session | None = None

    def __enter__(self) -> Self:
        """Enter the context manager and create a new session.

        Returns:
            Self for method chaining.
        """
        self.session = self.session_factory()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit the context manager and clean up session.

        Automatically rolls back if an exception occurred.

        Args:
            exc_type: Exception type if an error occurred.
            exc_val: Exception value if an error occurred.
            exc_tb: Exception traceback if an error occurred.
        """
        if exc_type is not None:
            self.rollback()
        if self.session:
            self.session.close()
            self.session = None
        self._reset()

    @abstractmethod
    def _reset(self) -> None:
        """Reset every session-bound collaborator to None.

        Called during cleanup so they are recreated on the next session.
        """
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        if self.session:
            self.session.commit()

    def rollback(self) -> None:
        """Rollback the current transaction."""
        if self.session:
            self.session.rollback()
