"""Batched reads of the persisted rows a collection is compared against."""

from __future__ import annotations

from typing import TYPE_CHECKING

from syncstore.domain.model import FetchMode, PersistedRecord

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from syncstore.domain.model import DesiredCollection
    from syncstore.domain.ports import RecordStore


def resolve_fetch_mode(collection: DesiredCollection) -> FetchMode:
    """Pick the fetch mode for ``collection``.

    Targeted collections cover a small, pre-materialized set of rows, so they
    keep full record objects; everything else streams raw columnar batches.
    """

    if collection.fetch_mode is not FetchMode.AUTO:
        return collection.fetch_mode
    return FetchMode.OBJECTS if collection.targeted else FetchMode.BULK


class PersistedStoreScanner:
    """Stream the rows in scope for ``collection`` in batches."""

    def __init__(
        self,
        collection: DesiredCollection,
        store: RecordStore,
        *,
        bulk_batch_size: int,
        object_batch_size: int,
    ) -> None:
        self.collection = collection
        self.store = store
        self.mode = resolve_fetch_mode(collection)
        self.batch_size = bulk_batch_size if self.mode is FetchMode.BULK else object_batch_size

    def __iter__(self) -> Iterator[PersistedRecord]:
        for batch in self.batches():
            yield from batch

    def batches(self) -> Iterator[Sequence[PersistedRecord]]:
        identities = self.collection.identities() if self.collection.targeted else None
        if self.mode is FetchMode.OBJECTS:
            yield from self.store.fetch_records(
                scope=self.collection.scope,
                identities=identities,
                batch_size=self.batch_size,
            )
            return

        columns = self.store.row_columns
        primary_key_index = columns.index(self.collection.schema.primary_key)
        value_indexes = [
            (name, position) for position, name in enumerate(columns) if position != primary_key_index
        ]
        for rows in self.store.fetch_rows(
            scope=self.collection.scope,
            identities=identities,
            batch_size=self.batch_size,
        ):
            yield [
                PersistedRecord(
                    row[primary_key_index],  # type: ignore[arg-type]
                    {name: row[position] for name, position in value_indexes},
                )
                for row in rows
            ]
