"""Reconciliation of desired collections against persisted rows.

Components, leaf-first:
- ``UniquenessGuard`` / ``IntegrityGuard``: per-pass consistency checks
- ``RecordWriter``: create/update/delete of one row with timestamp stamping
- ``PersistedStoreScanner``: batched reads in bulk or row-object mode
- ``ComplementPurger``: batched deletion for full-replacement collections
- ``Reconciler``: orchestration and transaction boundaries
"""

from __future__ import annotations

from .errors import DistinctViolationError, IntegrityViolationError, ReconciliationError
from .guards import IntegrityGuard, UniquenessGuard
from .purge import ComplementPurger
from .reconciler import Reconciler
from .scanner import PersistedStoreScanner, resolve_fetch_mode
from .writer import RecordWriter, utc_now

__all__ = [
    "ComplementPurger",
    "DistinctViolationError",
    "IntegrityGuard",
    "IntegrityViolationError",
    "PersistedStoreScanner",
    "ReconciliationError",
    "Reconciler",
    "RecordWriter",
    "UniquenessGuard",
    "resolve_fetch_mode",
    "utc_now",
]
