from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from syncstore.adapters.sqlalchemy.unit_of_work import is_started, shutdown
from syncstore.app import build_reconciler, reconcile_collection
from syncstore.config import SyncConfig
from syncstore.domain.model import DesiredCollection, ViolationPolicy

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from syncstore.adapters.sqlalchemy.unit_of_work import SqlAlchemyUnitOfWork
    from syncstore.domain.model import ModelSchema
    from tests.helpers.records import InMemoryDatabase


@pytest.fixture
def reset_adapter() -> Iterator[None]:
    shutdown()
    yield
    shutdown()


def test_build_reconciler_applies_config(database: InMemoryDatabase) -> None:
    config = SyncConfig(
        violation_policy=ViolationPolicy.LENIENT,
        bulk_batch_size=7,
        object_batch_size=3,
        purge_batch_size=5,
    )

    reconciler = build_reconciler(database.unit_of_work, config=config)

    assert reconciler.policy is ViolationPolicy.LENIENT
    assert reconciler.bulk_batch_size == 7
    assert reconciler.object_batch_size == 3
    assert reconciler.purge_batch_size == 5


def test_reconcile_collection_with_injected_unit_of_work(
    database: InMemoryDatabase,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    logging_calls: list[None] = []
    monkeypatch.setattr("syncstore.app.configure_logging", lambda: logging_calls.append(None))
    collection = DesiredCollection(schema=database.schema)
    collection.add({"ems_ref": "vm-1"})

    with caplog.at_level(logging.INFO):
        result = reconcile_collection(
            collection,
            config=SyncConfig(),
            unit_of_work_factory=database.unit_of_work,
        )

    assert len(result.created) == 1
    assert set(database.by_identity()) == {("vm-1",)}
    assert "Finished reconciliation of DesiredCollection:<vms>: created=1" in caplog.text
    assert logging_calls == []


def test_reconcile_collection_starts_sqlalchemy_adapter(
    reset_adapter: None,
    monkeypatch: pytest.MonkeyPatch,
    schema: ModelSchema,
) -> None:
    _ = reset_adapter
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    logging_calls: list[None] = []
    monkeypatch.setattr("syncstore.app.configure_logging", lambda: logging_calls.append(None))
    collection = DesiredCollection(schema=schema)
    collection.add({"ems_ref": "vm-1", "name": "one"})

    result = reconcile_collection(collection, config=SyncConfig())

    assert is_started()
    assert logging_calls == [None]
    assert [record.values["name"] for record in result.created] == ["one"]


def test_reconcile_collection_reuses_started_adapter(
    sqlite_unit_of_work: Callable[[], SqlAlchemyUnitOfWork],
    schema: ModelSchema,
) -> None:
    collection = DesiredCollection(schema=schema)
    collection.add({"ems_ref": "vm-2"})

    reconcile_collection(collection, config=SyncConfig())

    with sqlite_unit_of_work() as uow:
        (batch,) = list(
            uow.repositories.records.fetch_records(scope={}, identities=None, batch_size=10)
        )
    assert [record.values["ems_ref"] for record in batch] == ["vm-2"]
