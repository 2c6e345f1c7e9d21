"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.adapters.sqlalchemy.unit_of_work import is_started, startup
from syncstore.adapters.sqlalchemy.unit_of_work import (
    unit_of_work_factory as sqlalchemy_unit_of_work_factory,
)
from syncstore.config import configure_logging, get_sync_config
from syncstore.domain.reconciliation import Reconciler, utc_now

if TYPE_CHECKING:
    from syncstore.config import SyncConfig
    from syncstore.domain.model import DesiredCollection, ReconciliationResult
    from syncstore.domain.ports import UnitOfWorkFactory
    from syncstore.domain.reconciliation.writer import Clock


log = getLogger(__name__)


def build_reconciler(
    unit_of_work_factory: UnitOfWorkFactory,
    *,
    config: SyncConfig | None = None,
    clock: Clock = utc_now,
) -> Reconciler:
    """Create a reconciler using the configured policy and batch sizes."""

    effective_config = config or get_sync_config()
    return Reconciler(
        unit_of_work_factory,
        policy=effective_config.violation_policy,
        bulk_batch_size=effective_config.bulk_batch_size,
        object_batch_size=effective_config.object_batch_size,
        purge_batch_size=effective_config.purge_batch_size,
        clock=clock,
    )


def reconcile_collection(
    collection: DesiredCollection,
    *,
    config: SyncConfig | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReconciliationResult:
    """Reconcile ``collection`` into the configured SQLAlchemy database.

    Without an injected ``unit_of_work_factory`` and before any ``startup()``, this
    call is the process entry point: it sets up logging and starts the adapter.
    """

    if unit_of_work_factory is None and not is_started():
        configure_logging()
        startup()
    effective_uow = unit_of_work_factory or sqlalchemy_unit_of_work_factory(collection.schema)
    effective_config = config or get_sync_config()
    log.info(
        "Starting reconciliation of %s: policy=%s, size=%d",
        collection,
        effective_config.violation_policy.value,
        len(collection),
    )

    result = build_reconciler(effective_uow, config=effective_config).reconcile(collection)

    log.info(
        f"Finished reconciliation of {collection}: created={len(result.created)}, "
        f"updated={len(result.updated)}, deleted={len(result.deleted)}, "
        f"skipped={len(result.skipped)}, purged={result.purged}"
    )
    return result
