"""Ports for reading and writing persisted rows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Collection, Hashable, Iterator, Mapping, Sequence

    from syncstore.domain.model import Identity, ModelSchema, PersistedRecord


@runtime_checkable
class RecordStore(Protocol):
    """Store-adapter boundary for one model.

    All column-name resolution against the backing store happens behind this
    protocol. Scans are restricted by ``scope`` (column equality filters) and,
    when ``identities`` is given, to rows whose natural key is one of them.
    """

    @property
    def schema(self) -> ModelSchema: ...

    @property
    def row_columns(self) -> tuple[str, ...]:
        """Column order of the raw tuples yielded by :meth:`fetch_rows`."""
        ...

    def fetch_rows(
        self,
        *,
        scope: Mapping[str, object],
        identities: Collection[Identity] | None,
        batch_size: int,
    ) -> Iterator[Sequence[Sequence[object]]]: ...

    def fetch_records(
        self,
        *,
        scope: Mapping[str, object],
        identities: Collection[Identity] | None,
        batch_size: int,
    ) -> Iterator[Sequence[PersistedRecord]]: ...

    def fetch_complement(
        self,
        *,
        scope: Mapping[str, object],
        universe: Collection[Identity],
        after: Hashable | None,
        limit: int,
        include_soft_deleted: bool,
    ) -> Sequence[PersistedRecord]:
        """Return the next batch of rows whose identity lies outside ``universe``.

        Rows are ordered by primary key and start strictly after ``after``.
        """
        ...

    def insert(self, values: Mapping[str, object]) -> Hashable: ...

    def update(self, primary_key: Hashable, values: Mapping[str, object]) -> None: ...

    def delete(self, primary_key: Hashable) -> None: ...
