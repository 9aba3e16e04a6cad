"""Composite-key regression scenarios.

Each scenario builds a small entity graph over the regression catalog,
flushes it through a `PlannerUnitOfWork` and checks what reached the
database. Writes are rolled back afterwards, so the scenarios can run
against a persistent database as well as the default in-memory one.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError

from composite_uow.exceptions import PlannerError
from composite_uow.orm.connection import DBConnection
from composite_uow.orm.uow import PlannerUnitOfWork
from composite_uow.schema import REGRESSION_CATALOG

logger = logging.getLogger("Composite-UoW")


@dataclass
class ScenarioResult:
    """Outcome of one scenario run."""

    name: str
    passed: bool
    order: list[str] = field(default_factory=list)
    message: str = ""
    failures: list[str] = field(default_factory=list)


def dependent_with_extra_key(uow: PlannerUnitOfWork) -> tuple[list[str], list[str]]:
    """A and B get store-generated ids; Dependent keys on Composite plus its own another_id.

    Both a_id and b_id of the Dependent row must be filled, not only the first one.
    """
    a = uow.register("A", number=1)
    b = uow.register("B", number=2)
    composite = uow.register("Composite", entityA=a, entityB=b)
    uow.register("Dependent", composite=composite, anotherId=3)
    result = uow.flush()

    failures = []
    if result.order != ["A", "B", "Composite", "Dependent"]:
        failures.append(f"unexpected insert order {result.order}")
    row = uow.store.get("Dependent", a_id=a.get("id"), b_id=b.get("id"), another_id=3)
    if row is None:
        failures.append("Dependent row not found")
    elif row["a_id"] is None or row["b_id"] is None:
        failures.append(f"Dependent row has a NULL foreign key column: {row}")
    return result.order, failures


def nested_reference(uow: PlannerUnitOfWork) -> tuple[list[str], list[str]]:
    """Dependent2 is keyed only by its Composite reference, which is itself keyed by A and B."""
    a = uow.register("A", id=1, number=1)
    b = uow.register("B", id=2, number=2)
    composite = uow.register("Composite", entityA=a, entityB=b)
    dependent = uow.register("Dependent2", composite=composite)
    result = uow.flush()

    failures = []
    referenced = dependent.get("composite")
    if referenced is None:
        failures.append("Dependent2.composite is empty after flush")
    elif referenced.get("entityA") is None or referenced.get("entityB") is None:
        failures.append("Dependent2.composite has an empty entityA or entityB")
    if uow.store.get("Dependent2", a_id=1, b_id=2) is None:
        failures.append("Dependent2 row (1, 2) not found")
    return result.order, failures


def explicit_ids_order(uow: PlannerUnitOfWork) -> tuple[list[str], list[str]]:
    """A and B carry caller-supplied ids; Composite must still be inserted after both."""
    a = uow.register("A", id=1, number=1)
    b = uow.register("B", id=2, number=2)
    uow.register("Composite", entityA=a, entityB=b)
    result = uow.flush()

    failures = []
    if result.order.index("Composite") < max(result.order.index("A"), result.order.index("B")):
        failures.append(f"Composite inserted before its references: {result.order}")
    if uow.store.get("Composite", a_id=1, b_id=2) is None:
        failures.append("Composite row (1, 2) not found")
    return result.order, failures


SCENARIOS: dict[str, Callable[[PlannerUnitOfWork], tuple[list[str], list[str]]]] = {
    "dependent-with-extra-key": dependent_with_extra_key,
    "nested-reference": nested_reference,
    "explicit-ids-order": explicit_ids_order,
}


def run_scenario(name: str, db_conn: DBConnection | None = None) -> ScenarioResult:
    """Run one scenario on its own transaction and report the outcome.

    Args:
        name: Scenario name, one of `SCENARIOS`.
        db_conn: Database to run against. A fresh in-memory SQLite database is used if None.

    Returns:
        The scenario result; planner and database errors are reported as a failed result.
    """
    if name not in SCENARIOS:
        raise KeyError(f"Unknown scenario '{name}'. Available: {', '.join(SCENARIOS)}")  # noqa: TRY003

    owns_connection = db_conn is None
    db_conn = db_conn or DBConnection()
    try:
        schema = db_conn.create_schema(REGRESSION_CATALOG)
        with PlannerUnitOfWork(db_conn.get_session_factory(), REGRESSION_CATALOG, schema) as uow:
            try:
                order, failures = SCENARIOS[name](uow)
            finally:
                uow.rollback()
    except (PlannerError, SQLAlchemyError) as e:
        logger.error(f"Scenario '{name}' failed: {e}")
        return ScenarioResult(name=name, passed=False, message=str(e))
    finally:
        if owns_connection:
            db_conn.dispose()

    message = "ok" if not failures else f"{len(failures)} check(s) failed"
    return ScenarioResult(name=name, passed=not failures, order=order, message=message, failures=failures)
