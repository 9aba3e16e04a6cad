import pytest
from sqlalchemy.orm import Session

from composite_uow.exceptions import StoreRejectedError
from composite_uow.orm.store import InsertRequest, SqlAlchemyStore, UpdateRequest


@pytest.fixture
def sql_store(db_session: Session, db_schema) -> SqlAlchemyStore:
    return SqlAlchemyStore(db_session, db_schema)


def test_insert_returns_generated_identity(sql_store: SqlAlchemyStore):
    first = sql_store.insert(InsertRequest(entity="A", table="a", values={"number": 1}, generated="id"))
    second = sql_store.insert(InsertRequest(entity="A", table="a", values={"number": 2}, generated="id"))

    assert first.identity == {"id": 1}
    assert second.identity == {"id": 2}
    assert sql_store.get("A", id=2) == {"id": 2, "number": 2}


def test_insert_with_supplied_key_is_acknowledged(sql_store: SqlAlchemyStore):
    result = sql_store.insert(InsertRequest(entity="A", table="a", values={"id": 7, "number": 1}, generated="id"))

    assert result.identity == {}
    assert sql_store.get("A", id=7) is not None


def test_foreign_key_violation_is_rejected(sql_store: SqlAlchemyStore):
    with pytest.raises(StoreRejectedError, match="FOREIGN KEY constraint failed"):
        sql_store.insert(InsertRequest(entity="Composite", table="composite", values={"a_id": 1, "b_id": 2}))


def test_update(sql_store: SqlAlchemyStore):
    sql_store.insert(InsertRequest(entity="B", table="b", values={"id": 3, "number": 1}, generated="id"))

    sql_store.update(UpdateRequest(entity="B", table="b", key={"id": 3}, values={"number": 9}))

    assert sql_store.get("B", id=3) == {"id": 3, "number": 9}


def test_update_missing_row_is_rejected(sql_store: SqlAlchemyStore):
    with pytest.raises(StoreRejectedError, match="no row in b"):
        sql_store.update(UpdateRequest(entity="B", table="b", key={"id": 3}, values={"number": 9}))
