"""Record store backed by a SQLAlchemy session."""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

from sqlalchemy import select, tuple_

from syncstore.adapters.sqlalchemy.tables import register_schema
from syncstore.domain.model import DELETED_ON, PersistedRecord, UnknownColumnError

if TYPE_CHECKING:
    from collections.abc import Collection, Hashable, Iterator, Mapping, Sequence

    from sqlalchemy import ColumnElement, Row, Select
    from sqlalchemy.orm import Session

    from syncstore.domain.model import Identity, ModelSchema


class SqlAlchemyRecordStore:
    """Read and write rows of one schema's table through ``session``.

    Scans page through the table by primary key, so rows updated or deleted
    between batches never shift later pages.
    """

    def __init__(self, session: Session, schema: ModelSchema) -> None:
        self.session = session
        self._schema = schema
        self.table = register_schema(schema)
        self._primary_key = self.table.c[schema.primary_key]

    @property
    def schema(self) -> ModelSchema:
        return self._schema

    @property
    def row_columns(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.table.columns)

    def fetch_rows(
        self,
        *,
        scope: Mapping[str, object],
        identities: Collection[Identity] | None,
        batch_size: int,
    ) -> Iterator[Sequence[Sequence[object]]]:
        for rows in self._pages(self._scoped_select(scope, identities), batch_size):
            yield [tuple(row) for row in rows]

    def fetch_records(
        self,
        *,
        scope: Mapping[str, object],
        identities: Collection[Identity] | None,
        batch_size: int,
    ) -> Iterator[Sequence[PersistedRecord]]:
        for rows in self._pages(self._scoped_select(scope, identities), batch_size):
            yield [self._record(row) for row in rows]

    def fetch_complement(
        self,
        *,
        scope: Mapping[str, object],
        universe: Collection[Identity],
        after: Hashable | None,
        limit: int,
        include_soft_deleted: bool,
    ) -> Sequence[PersistedRecord]:
        stmt = self._scoped_select(scope, None)
        if universe:
            stmt = stmt.where(self._natural_key().not_in(self._key_values(universe)))
        if not include_soft_deleted and self._schema.supports_soft_delete:
            stmt = stmt.where(self.table.c[DELETED_ON].is_(None))
        if after is not None:
            stmt = stmt.where(self._primary_key > after)
        rows = self.session.execute(stmt.order_by(self._primary_key).limit(limit)).all()
        return [self._record(row) for row in rows]

    def insert(self, values: Mapping[str, object]) -> Hashable:
        result = self.session.execute(self.table.insert().values(self._bind(values)))
        return cast("Hashable", result.inserted_primary_key[0])

    def update(self, primary_key: Hashable, values: Mapping[str, object]) -> None:
        stmt = (
            self.table.update()
            .where(self._primary_key == primary_key)
            .values(self._bind(values))
        )
        self.session.execute(stmt)

    def delete(self, primary_key: Hashable) -> None:
        self.session.execute(self.table.delete().where(self._primary_key == primary_key))

    def _pages(
        self,
        stmt: Select[tuple[object, ...]],
        batch_size: int,
    ) -> Iterator[Sequence[Row[tuple[object, ...]]]]:
        after: object | None = None
        while True:
            page = stmt if after is None else stmt.where(self._primary_key > after)
            rows = self.session.execute(page.order_by(self._primary_key).limit(batch_size)).all()
            if not rows:
                return
            yield rows
            if len(rows) < batch_size:
                return
            after = rows[-1]._mapping[self._primary_key]  # noqa: SLF001

    def _scoped_select(
        self,
        scope: Mapping[str, object],
        identities: Collection[Identity] | None,
    ) -> Select[tuple[object, ...]]:
        stmt = select(self.table)
        for name, value in scope.items():
            stmt = stmt.where(self.table.c[name] == value)
        if identities is not None:
            stmt = stmt.where(self._natural_key().in_(self._key_values(identities)))
        return stmt

    def _natural_key(self) -> ColumnElement[object]:
        columns = [self.table.c[name] for name in self._schema.natural_key]
        if len(columns) == 1:
            return columns[0]
        return tuple_(*columns)

    def _key_values(self, identities: Collection[Identity]) -> list[object]:
        if len(self._schema.natural_key) == 1:
            return [identity[0] for identity in identities]
        return [tuple(identity) for identity in identities]

    def _bind(self, values: Mapping[str, object]) -> dict[str, object]:
        unknown = self._schema.unknown_columns(values)
        if unknown:
            raise UnknownColumnError(self._schema.name, unknown)
        return dict(values)

    def _record(self, row: Row[tuple[object, ...]]) -> PersistedRecord:
        values = dict(row._mapping)  # noqa: SLF001
        primary_key = cast("Hashable", values.pop(self._schema.primary_key))
        return PersistedRecord(primary_key, values)


if TYPE_CHECKING:
    from syncstore.domain.ports import RecordStore

    _session_stub = cast("Session", object())
    _schema_stub = cast("ModelSchema", object())
    _store_check: RecordStore = SqlAlchemyRecordStore(_session_stub, _schema_stub)
