"""Create/update/delete of single persisted rows."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from syncstore.domain.model import (
    CREATED_AT,
    CREATED_ON,
    DELETED_ON,
    TYPE_COLUMN,
    UPDATED_AT,
    UPDATED_ON,
    Attributes,
    DeleteMethod,
    PersistedRecord,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable, Mapping

    from syncstore.domain.model import DesiredCollection
    from syncstore.domain.ports import RecordStore

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


class RecordWriter:
    """Apply writes for ``collection`` through ``store`` and record them on its result."""

    def __init__(
        self,
        collection: DesiredCollection,
        store: RecordStore,
        *,
        clock: Clock = utc_now,
    ) -> None:
        self.collection = collection
        self.store = store
        self.clock = clock

    def create(self, attributes: Mapping[str, object]) -> Hashable:
        values: Attributes = dict(attributes)
        self._assign_for_create(values, self.clock())
        primary_key = self.store.insert(values)
        self.collection.result.created.append(PersistedRecord(primary_key, values))
        return primary_key

    def update(self, record: PersistedRecord, attributes: Mapping[str, object]) -> bool:
        """Patch ``record`` with ``attributes``; returns ``False`` when it is already in sync."""

        values: Attributes = dict(attributes)
        if self.collection.schema.supports_soft_delete and record.values.get(DELETED_ON) is not None:
            values[DELETED_ON] = None
        if all(record.values.get(key) == value for key, value in values.items()):
            return False

        self._assign_for_update(values, self.clock())
        self.store.update(record.primary_key, values)
        self.collection.result.updated.append(
            PersistedRecord(record.primary_key, {**record.values, **values})
        )
        return True

    def delete(self, record: PersistedRecord, *, keep_record: bool = True) -> bool:
        """Delete ``record`` using the collection's delete method.

        Soft-deleting a row that is already soft-deleted is a no-op and returns ``False``.
        With ``keep_record`` off the row is not appended to ``result.deleted``.
        """

        if self.collection.delete_method is DeleteMethod.SOFT:
            if record.values.get(DELETED_ON) is not None:
                return False
            deleted_on = self.clock()
            self.store.update(record.primary_key, {DELETED_ON: deleted_on})
            record = PersistedRecord(record.primary_key, {**record.values, DELETED_ON: deleted_on})
        else:
            self.store.delete(record.primary_key)
        if keep_record:
            self.collection.result.deleted.append(record)
        return True

    def _assign_for_update(self, values: Attributes, update_time: datetime) -> None:
        if self.collection.supports_updated_on:
            values[UPDATED_ON] = update_time
        if self.collection.supports_updated_at:
            values[UPDATED_AT] = update_time

    def _assign_for_create(self, values: Attributes, create_time: datetime) -> None:
        if self.collection.supports_type_column and values.get(TYPE_COLUMN) is None:
            values[TYPE_COLUMN] = self.collection.schema.type_name
        if self.collection.supports_created_on:
            values[CREATED_ON] = create_time
        if self.collection.supports_created_at:
            values[CREATED_AT] = create_time
        self._assign_for_update(values, create_time)
