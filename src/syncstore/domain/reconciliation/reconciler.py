"""Reconcile a desired collection against the rows already in the store.

A regular pass runs in two units of work:

1) scan persisted rows in scope, updating the matched ones and deleting the
   stale ones (when deleting is allowed)
2) after the optional reconnect strategy has run, create every desired entry
   that never matched a row (when creating is allowed)

A collection carrying its complete identity universe skips both phases and
purges the complement of that universe instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.domain.model import SkippedEntry, SkipReason, ViolationPolicy

from .guards import IntegrityGuard, UniquenessGuard
from .purge import ComplementPurger
from .scanner import PersistedStoreScanner
from .writer import RecordWriter, utc_now

if TYPE_CHECKING:
    from syncstore.domain.model import (
        Attributes,
        DesiredCollection,
        DesiredObject,
        Identity,
        ReconciliationResult,
    )
    from syncstore.domain.ports import UnitOfWorkFactory

    from .writer import Clock

log = getLogger(__name__)

DEFAULT_BULK_BATCH_SIZE = 10_000
DEFAULT_OBJECT_BATCH_SIZE = 1_000
DEFAULT_PURGE_BATCH_SIZE = 1_000


@dataclass(slots=True)
class _DesiredIndex:
    """Unmatched desired entries keyed by identity; entries are consumed at most once."""

    objects: dict[Identity, DesiredObject]
    attributes: dict[Identity, Attributes]

    @classmethod
    def build(cls, collection: DesiredCollection) -> _DesiredIndex:
        objects: dict[Identity, DesiredObject] = {}
        attributes: dict[Identity, Attributes] = {}
        for desired in collection:
            identity = desired.identity(collection.natural_key)
            objects[identity] = desired
            attributes[identity] = desired.attributes_for_write()
        return cls(objects=objects, attributes=attributes)

    def pop(self, identity: Identity) -> Attributes | None:
        self.objects.pop(identity, None)
        return self.attributes.pop(identity, None)


class Reconciler:
    """Converge the store to a desired collection with minimal writes."""

    def __init__(
        self,
        unit_of_work_factory: UnitOfWorkFactory,
        *,
        policy: ViolationPolicy = ViolationPolicy.STRICT,
        bulk_batch_size: int = DEFAULT_BULK_BATCH_SIZE,
        object_batch_size: int = DEFAULT_OBJECT_BATCH_SIZE,
        purge_batch_size: int = DEFAULT_PURGE_BATCH_SIZE,
        clock: Clock = utc_now,
    ) -> None:
        self.unit_of_work_factory = unit_of_work_factory
        self.policy = policy
        self.bulk_batch_size = bulk_batch_size
        self.object_batch_size = object_batch_size
        self.purge_batch_size = purge_batch_size
        self.clock = clock

    def reconcile(self, collection: DesiredCollection) -> ReconciliationResult:
        """Run one pass for ``collection`` and return its accumulated result."""

        if collection.is_noop:
            log.debug("Skipping %s, nothing to reconcile", collection)
            return collection.result
        if collection.is_full_replacement:
            purged = self._delete_complement(collection)
            log.info("Processed %s, purged=%d", collection, purged)
            return collection.result

        index = _DesiredIndex.build(collection)
        log.info("Processing %s of size %d", collection, len(collection))
        try:
            self._update_or_delete(collection, index)
            if collection.reconnect is not None:
                collection.reconnect(collection, index.objects, index.attributes)
            if collection.create_allowed:
                self._create(collection, index)
        except Exception:
            log.exception(
                "Error when saving %s of size %d with %s",
                collection,
                len(collection),
                collection.strategy_details(),
            )
            raise

        result = collection.result
        log.info(
            "Processed %s, created=%d, updated=%d, deleted=%d, skipped=%d",
            collection,
            len(result.created),
            len(result.updated),
            len(result.deleted),
            len(result.skipped),
        )
        return result

    def _update_or_delete(self, collection: DesiredCollection, index: _DesiredIndex) -> None:
        uniqueness = UniquenessGuard(collection, policy=self.policy)
        integrity = IntegrityGuard(collection, policy=self.policy)
        updated = deleted = 0

        with self.unit_of_work_factory() as uow:
            store = uow.repositories.records
            writer = RecordWriter(collection, store, clock=self.clock)
            scanner = PersistedStoreScanner(
                collection,
                store,
                bulk_batch_size=self.bulk_batch_size,
                object_batch_size=self.object_batch_size,
            )
            log.info(
                "Scanning persisted rows of %s in %s mode, batch size %d",
                collection,
                scanner.mode.value,
                scanner.batch_size,
            )
            for record in scanner:
                identity = record.identity(collection.natural_key)
                if not uniqueness.check(record.primary_key):
                    collection.result.skipped.append(
                        SkippedEntry(identity, SkipReason.DUPLICATE_PRIMARY_KEY)
                    )
                    continue

                attributes = index.pop(identity)
                if attributes is None:
                    # persisted but no longer desired
                    if collection.delete_allowed and writer.delete(record):
                        deleted += 1
                elif integrity.check(attributes):
                    if writer.update(record, attributes):
                        updated += 1
                else:
                    collection.result.skipped.append(
                        SkippedEntry(identity, SkipReason.MISSING_FOREIGN_KEY)
                    )
            uow.commit()

        log.info(
            "Scanned %d persisted rows of %s, updated=%d, deleted=%d",
            len(uniqueness),
            collection,
            updated,
            deleted,
        )

    def _create(self, collection: DesiredCollection, index: _DesiredIndex) -> None:
        integrity = IntegrityGuard(collection, policy=self.policy)
        log.info("Creating up to %d unmatched entries of %s", len(index.objects), collection)
        created = 0

        with self.unit_of_work_factory() as uow:
            writer = RecordWriter(collection, uow.repositories.records, clock=self.clock)
            for identity in list(index.objects):
                attributes = index.pop(identity)
                if attributes is None:
                    continue
                if integrity.check(attributes):
                    writer.create(attributes)
                    created += 1
                else:
                    collection.result.skipped.append(
                        SkippedEntry(identity, SkipReason.MISSING_FOREIGN_KEY)
                    )
            uow.commit()

        log.info("Created %d entries of %s", created, collection)

    def _delete_complement(self, collection: DesiredCollection) -> int:
        purger = ComplementPurger(
            collection,
            self.unit_of_work_factory,
            batch_size=self.purge_batch_size,
            clock=self.clock,
        )
        try:
            return purger.purge()
        except Exception:
            log.exception(
                "Error when purging complement of %s with %s",
                collection,
                collection.strategy_details(),
            )
            raise
