from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine

from syncstore.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
    unit_of_work_factory,
)
from tests.helpers.records import make_schema

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy.engine import Engine

    from syncstore.domain.model import ModelSchema


@pytest.fixture(autouse=True)
def reset_unit_of_work_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def _count(schema: ModelSchema) -> int:
    with SqlAlchemyUnitOfWork(schema) as uow:
        return sum(
            len(batch)
            for batch in uow.repositories.records.fetch_rows(
                scope={}, identities=None, batch_size=100
            )
        )


def test_sqlalchemy_unit_of_work_requires_startup(schema: ModelSchema) -> None:
    with pytest.raises(StartupError):
        SqlAlchemyUnitOfWork(schema)


def test_startup_requires_force_for_reconfiguration() -> None:
    engine_a = create_engine("sqlite+pysqlite:///:memory:", future=True)
    engine_b = create_engine("sqlite+pysqlite:///:memory:", future=True)

    startup(engine=engine_a, force=True)

    with pytest.raises(StartupError):
        startup(engine=engine_b)

    startup(engine=engine_b, force=True)
    assert configured_engine() is engine_b
    assert is_started()


def test_repositories_require_an_open_session(
    sqlite_engine: Engine,
    schema: ModelSchema,
) -> None:
    startup(engine=sqlite_engine, force=True)
    uow = SqlAlchemyUnitOfWork(schema)

    with pytest.raises(StartupError):
        _ = uow.repositories


def test_commit_persists_rows(sqlite_engine: Engine, schema: ModelSchema) -> None:
    startup(engine=sqlite_engine, force=True)

    with SqlAlchemyUnitOfWork(schema) as uow:
        uow.repositories.records.insert({"ems_ref": "vm-1"})
        uow.commit()

    assert _count(schema) == 1


def test_exception_rolls_back_and_propagates(sqlite_engine: Engine, schema: ModelSchema) -> None:
    startup(engine=sqlite_engine, force=True)

    with pytest.raises(RuntimeError, match="boom"), SqlAlchemyUnitOfWork(schema) as uow:
        uow.repositories.records.insert({"ems_ref": "vm-1"})
        raise RuntimeError("boom")

    assert _count(schema) == 0


def test_factory_creates_tables_registered_after_startup(sqlite_engine: Engine) -> None:
    startup(engine=sqlite_engine, force=True)
    late_schema = make_schema(name="late_registered")
    factory = unit_of_work_factory(late_schema)

    with factory() as uow:
        uow.repositories.records.insert({"ems_ref": "x"})
        uow.commit()

    assert _count(late_schema) == 1


def test_startup_from_uri_logs_and_creates_registered_tables(
    caplog: pytest.LogCaptureFixture,
    schema: ModelSchema,
) -> None:
    caplog.set_level(logging.INFO, logger="syncstore.adapters.sqlalchemy")

    startup(database_uri="sqlite+pysqlite:///:memory:")

    assert "Starting SQLAlchemy adapter on sqlite+pysqlite:///:memory:" in caplog.messages
    assert "Creating all tables" in caplog.messages
    assert _count(schema) == 0
