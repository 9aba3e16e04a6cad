class PlannerError(Exception):
    """Base class for every error raised while planning or executing a flush."""


class SchemaMismatchError(PlannerError):
    """Raised when an entity registration or catalog declaration does not match the schema."""

    def __init__(self, message: str):
        super().__init__(f"Schema mismatch: {message}")


class CyclicDependencyError(PlannerError):
    """Raised when key-contributing references form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = cycle
        super().__init__(f"Cyclic key dependency detected: {' -> '.join(cycle)}.")


class UnresolvedDependencyError(PlannerError):
    """Raised when a referenced entity has no final identity at materialization time.

    This signals a planner invariant violation, never a legitimate user error.
    """

    def __init__(self, dependent: str, referenced: str, field_name: str):
        super().__init__(
            f"Reference '{field_name}' of {dependent} points to {referenced}, whose key is not resolved yet."
        )


class StoreRejectedError(PlannerError):
    """Raised when the persistence store rejects a write (constraint violation etc.)."""

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"Store rejected the write: {detail}")


class InvalidStateTransitionError(PlannerError):
    """Raised when a node is moved to a lifecycle state it cannot reach from its current one."""

    def __init__(self, node: str, current: str, target: str):
        super().__init__(f"{node} cannot move from '{current}' to '{target}'.")


class SessionNotSetError(Exception):
    """Raised when the database session is not set."""

    def __init__(self):
        super().__init__("Database session is not set.")


class MissingConfigError(Exception):
    """Raised when a required configuration file or value is not found."""

    def __init__(self, name: str):
        super().__init__(f"Configuration '{name}' not found.")
