import pytest

from composite_uow.orm.connection import DBConnection
from composite_uow.scenarios import SCENARIOS, run_scenario


@pytest.mark.parametrize("name", list(SCENARIOS))
def test_scenario_passes(name):
    result = run_scenario(name)

    assert result.passed, result.failures or result.message
    assert result.message == "ok"
    assert result.failures == []


def test_dependent_with_extra_key_order():
    result = run_scenario("dependent-with-extra-key")

    assert result.order == ["A", "B", "Composite", "Dependent"]


def test_nested_reference_order():
    result = run_scenario("nested-reference")

    assert result.order == ["A", "B", "Composite", "Dependent2"]


def test_unknown_scenario():
    with pytest.raises(KeyError, match="Unknown scenario 'missing'"):
        run_scenario("missing")


def test_scenarios_are_repeatable_on_file_database(tmp_path):
    db_conn = DBConnection(url=f"sqlite:///{tmp_path / 'scenarios.db'}")
    try:
        first = run_scenario("explicit-ids-order", db_conn)
        second = run_scenario("explicit-ids-order", db_conn)
    finally:
        db_conn.dispose()

    assert first.passed
    assert second.passed


def test_database_error_is_reported_as_failure():
    db_conn = DBConnection(url="nosuchdialect://")

    result = run_scenario("explicit-ids-order", db_conn)

    assert not result.passed
    assert "nosuchdialect" in result.message
    assert result.order == []
