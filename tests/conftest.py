from collections.abc import Generator
from typing import Any

import pytest
from sqlalchemy.orm import Session, sessionmaker

from composite_uow.catalog import SchemaCatalog
from composite_uow.orm.connection import DBConnection
from composite_uow.orm.store import InMemoryStore
from composite_uow.planner import InsertionPlanner
from composite_uow.schema import build_regression_catalog


@pytest.fixture
def catalog() -> SchemaCatalog:
    return build_regression_catalog()


@pytest.fixture
def memory_store(catalog: SchemaCatalog) -> InMemoryStore:
    return InMemoryStore(catalog)


@pytest.fixture
def planner(catalog: SchemaCatalog, memory_store: InMemoryStore) -> InsertionPlanner:
    """Planner writing into a constraint-checking in-memory store."""
    return InsertionPlanner(catalog, memory_store)


@pytest.fixture
def db_connection() -> Generator[DBConnection, Any, None]:
    """Create an in-memory SQLite connection for one test.

    Foreign keys are enforced, so ordering mistakes surface as rejected inserts.
    """
    db_conn = DBConnection()

    yield db_conn

    db_conn.dispose()


@pytest.fixture
def db_schema(db_connection: DBConnection, catalog: SchemaCatalog):
    return db_connection.create_schema(catalog)


@pytest.fixture
def session_factory(db_connection: DBConnection, db_schema) -> sessionmaker[Session]:
    return db_connection.get_session_factory()


@pytest.fixture
def db_session(session_factory: sessionmaker[Session]) -> Generator[Session, Any, None]:
    """Create a new database session for each test.

    The session is automatically rolled back after the test to maintain isolation.
    """
    session = session_factory()

    yield session

    session.rollback()
    session.close()
