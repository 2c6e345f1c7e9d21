"""Full-replacement deletion of everything outside a known identity universe."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.domain.model import DeleteMethod

from .writer import RecordWriter, utc_now

if TYPE_CHECKING:
    from collections.abc import Collection, Hashable

    from syncstore.domain.model import DesiredCollection, Identity
    from syncstore.domain.ports import UnitOfWorkFactory

    from .writer import Clock

log = getLogger(__name__)


class ComplementPurger:
    """Delete rows in scope whose identity is not part of the supplied universe.

    Every batch is read and deleted inside its own unit of work, which keeps
    memory use and lock duration bounded by ``batch_size``. Deleted rows are
    only counted, in the return value and in ``result.purged``.
    """

    def __init__(
        self,
        collection: DesiredCollection,
        unit_of_work_factory: UnitOfWorkFactory,
        *,
        batch_size: int,
        clock: Clock = utc_now,
    ) -> None:
        self.collection = collection
        self.unit_of_work_factory = unit_of_work_factory
        self.batch_size = batch_size
        self.clock = clock

    def purge(self, universe: Collection[Identity] | None = None) -> int:
        """Delete the complement of ``universe`` (default: the collection's identities)."""

        if not self.collection.delete_allowed:
            return 0
        if universe is None:
            universe = self.collection.all_identities or frozenset()

        log.info(
            "Processing complement deletion of %s with universe of size %d",
            self.collection,
            len(universe),
        )
        include_soft_deleted = self.collection.delete_method is DeleteMethod.HARD
        deleted = 0
        after: Hashable | None = None
        while True:
            with self.unit_of_work_factory() as uow:
                store = uow.repositories.records
                batch = store.fetch_complement(
                    scope=self.collection.scope,
                    universe=universe,
                    after=after,
                    limit=self.batch_size,
                    include_soft_deleted=include_soft_deleted,
                )
                if not batch:
                    break
                writer = RecordWriter(self.collection, store, clock=self.clock)
                batch_deleted = sum(writer.delete(record, keep_record=False) for record in batch)
                uow.commit()
            deleted += batch_deleted
            self.collection.result.purged += batch_deleted
            if len(batch) < self.batch_size:
                break
            after = batch[-1].primary_key

        log.info(
            "Processed complement deletion of %s with universe of size %d, deleted=%d",
            self.collection,
            len(universe),
            deleted,
        )
        return deleted
