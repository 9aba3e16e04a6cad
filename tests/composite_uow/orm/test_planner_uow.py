import pytest
from sqlalchemy import func, select

from composite_uow.exceptions import SessionNotSetError, StoreRejectedError
from composite_uow.orm.store import SqlAlchemyStore
from composite_uow.orm.uow import PlannerUnitOfWork


def _count(session_factory, table) -> int:
    with session_factory() as session:
        return session.execute(select(func.count()).select_from(table)).scalar_one()


def test_context_manager_lifecycle(session_factory, catalog, db_schema):
    uow = PlannerUnitOfWork(session_factory, catalog, db_schema)
    assert uow.session is None

    with uow:
        assert uow.session is not None
        assert isinstance(uow.store, SqlAlchemyStore)
        assert uow.planner is uow.planner

    assert uow.session is None
    assert uow._planner is None


def test_register_without_session_raises_error(session_factory, catalog):
    uow = PlannerUnitOfWork(session_factory, catalog)

    with pytest.raises(SessionNotSetError):
        uow.register("A", number=1)


def test_flush_and_commit(session_factory, catalog, db_schema):
    with PlannerUnitOfWork(session_factory, catalog, db_schema) as uow:
        a = uow.register("A", number=1)
        b = uow.register("B", number=2)
        composite = uow.register("Composite", entityA=a, entityB=b)
        uow.register("Dependent", composite=composite, anotherId=3)
        result = uow.flush()
        uow.commit()

    assert result.order == ["A", "B", "Composite", "Dependent"]
    with session_factory() as session:
        rows = session.execute(select(db_schema.tables["Dependent"])).mappings().all()
    assert [dict(row) for row in rows] == [{"a_id": 1, "b_id": 1, "another_id": 3}]


def test_nested_reference_is_persisted(session_factory, catalog, db_schema):
    with PlannerUnitOfWork(session_factory, catalog, db_schema) as uow:
        a = uow.register("A", id=1, number=1)
        b = uow.register("B", id=2, number=2)
        composite = uow.register("Composite", entityA=a, entityB=b)
        dependent = uow.register("Dependent2", composite=composite)
        uow.flush()

        assert dependent.get("composite").get("entityA") is a
        assert uow.store.get("Dependent2", a_id=1, b_id=2) == {"a_id": 1, "b_id": 2}


def test_rollback_on_store_rejection(session_factory, catalog, db_schema):
    with pytest.raises(StoreRejectedError, match="FOREIGN KEY constraint failed"):
        with PlannerUnitOfWork(session_factory, catalog, db_schema) as uow:
            uow.register("A", id=1, number=1)
            uow.register("Composite", a_id=1, b_id=99)
            uow.flush()

    assert _count(session_factory, db_schema.tables["A"]) == 0


def test_without_commit_nothing_is_persisted(session_factory, catalog, db_schema):
    with PlannerUnitOfWork(session_factory, catalog, db_schema) as uow:
        uow.register("A", number=1)
        uow.flush()
        uow.rollback()

    assert _count(session_factory, db_schema.tables["A"]) == 0
