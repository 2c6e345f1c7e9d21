"""SQLAlchemy adapter package for syncstore."""

from __future__ import annotations

from .repositories import SqlAlchemyRecordStore
from .tables import UTCDateTime, create_all_tables, metadata, register_schema
from .unit_of_work import (
    SqlAlchemyUnitOfWork,
    StartupError,
    configured_engine,
    is_started,
    shutdown,
    startup,
    unit_of_work_factory,
)

__all__ = [
    "SqlAlchemyRecordStore",
    "SqlAlchemyUnitOfWork",
    "StartupError",
    "UTCDateTime",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "register_schema",
    "shutdown",
    "startup",
    "unit_of_work_factory",
]
