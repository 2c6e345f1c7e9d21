"""Ports for persistence and transaction boundaries."""

from __future__ import annotations

from .persistence import RecordStore
from .unit_of_work import (
    ReconciliationUnitOfWork,
    RecordRepositories,
    RepositoryCollection,
    UnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "ReconciliationUnitOfWork",
    "RecordRepositories",
    "RecordStore",
    "RepositoryCollection",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
