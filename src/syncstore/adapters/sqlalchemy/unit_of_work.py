"""SQLAlchemy-backed units of work for reconciliation passes.

The adapter owns one process-wide engine. ``startup()`` binds it and creates
every registered table; schemas registered later get their table created the
first time a unit of work is requested for them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, cast

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from syncstore.adapters.sqlalchemy.repositories import SqlAlchemyRecordStore
from syncstore.adapters.sqlalchemy.tables import create_all_tables, register_schema
from syncstore.config import get_database_config
from syncstore.domain.ports import RecordRepositories

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from sqlalchemy.engine import Engine

    from syncstore.domain.model import ModelSchema

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the adapter is used before ``startup()`` or reconfigured implicitly."""


@dataclass(slots=True)
class _AdapterState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None
    tables_created: set[str] = field(default_factory=set[str])

    def configure(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)
        self.tables_created.clear()

    def reset(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None
        self.tables_created.clear()

    def session_factory(self) -> sessionmaker[Session]:
        if self.sessions is None:
            raise StartupError(
                "SQLAlchemy adapter not initialised; call "
                "syncstore.adapters.sqlalchemy.startup() first"
            )
        return self.sessions

    def ensure_table(self, schema: ModelSchema) -> None:
        if self.engine is None or schema.name in self.tables_created:
            return
        register_schema(schema).create(self.engine, checkfirst=True)
        self.tables_created.add(schema.name)


_STATE = _AdapterState()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the adapter to ``engine`` (or a new one for ``database_uri``).

    Without either argument the URI comes from ``get_database_config()``.
    Rebinding an already started adapter requires ``force=True``.
    """

    if _STATE.engine is not None and not force:
        raise StartupError("SQLAlchemy adapter already initialised; pass force=True to rebind")

    resolved = engine or create_engine(database_uri or get_database_config().uri)
    log.info(
        "Starting SQLAlchemy adapter on %s", resolved.url.render_as_string(hide_password=True)
    )
    create_all_tables(resolved)
    _STATE.configure(resolved)


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def shutdown() -> None:
    """Dispose the engine and forget every created table."""

    _STATE.reset()


class SqlAlchemyUnitOfWork:
    """One session, and therefore one transaction, per ``with`` block.

    Leaving the block without ``commit()`` discards the work; leaving it via an
    exception rolls back explicitly before the session is closed.
    """

    def __init__(self, schema: ModelSchema) -> None:
        self.schema = schema
        self.session_factory = _STATE.session_factory()
        _STATE.ensure_table(schema)
        self._session: Session | None = None
        self._repositories: RecordRepositories | None = None

    def __enter__(self) -> SqlAlchemyUnitOfWork:
        if self._session is not None:
            raise StartupError("Unit of work already entered")
        self._session = self.session_factory()
        self._repositories = RecordRepositories(
            records=SqlAlchemyRecordStore(self._session, self.schema)
        )
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self._session = None
        self._repositories = None
        return False

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work has no open session")
        return self._session

    @property
    def repositories(self) -> RecordRepositories:
        if self._repositories is None:
            raise StartupError("Unit of work has no open session")
        return self._repositories

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def unit_of_work_factory(schema: ModelSchema) -> Callable[[], SqlAlchemyUnitOfWork]:
    """Return a factory producing units of work bound to ``schema``'s table."""

    def factory() -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(schema)

    return factory


if TYPE_CHECKING:
    from syncstore.domain.ports import ReconciliationUnitOfWork

    _schema_stub = cast("ModelSchema", object())
    _uow_check: ReconciliationUnitOfWork = SqlAlchemyUnitOfWork(_schema_stub)
