"""Explicit schema descriptor for reconciled models.

The descriptor is the only place that knows which columns a model carries.
Capability flags (timestamps, polymorphic ``type`` column, soft delete) are
derived from the declared columns instead of being probed on live rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .enums import ColumnType

if TYPE_CHECKING:
    from collections.abc import Iterable

CREATED_AT: Final[str] = "created_at"
CREATED_ON: Final[str] = "created_on"
UPDATED_AT: Final[str] = "updated_at"
UPDATED_ON: Final[str] = "updated_on"
TYPE_COLUMN: Final[str] = "type"
DELETED_ON: Final[str] = "deleted_on"


class SchemaError(ValueError):
    """Raised when a schema descriptor or an attribute map does not line up."""


class UnknownColumnError(SchemaError):
    """Raised when attributes reference columns the schema does not declare."""

    def __init__(self, schema_name: str, columns: tuple[str, ...]) -> None:
        self.schema_name = schema_name
        self.columns = columns
        super().__init__(f"Unknown columns for {schema_name}: {', '.join(columns)}")


@dataclass(frozen=True, slots=True)
class ColumnSpec:
    name: str
    type: ColumnType = ColumnType.STRING
    nullable: bool = True


@dataclass(frozen=True, slots=True)
class ModelSchema:
    """Ordered, typed column layout of one persisted model."""

    name: str
    natural_key: tuple[str, ...]
    columns: tuple[ColumnSpec, ...]
    model_name: str | None = None
    primary_key: str = "id"

    def __post_init__(self) -> None:
        names = [column.name for column in self.columns]
        if len(set(names)) != len(names):
            raise SchemaError(f"Duplicate column names in schema {self.name}")
        if self.primary_key in names:
            raise SchemaError(
                f"Primary key {self.primary_key!r} of {self.name} is managed by the store"
            )
        if not self.natural_key:
            raise SchemaError(f"Schema {self.name} needs at least one natural key column")
        missing = [key for key in self.natural_key if key not in names]
        if missing:
            raise SchemaError(
                f"Natural key columns {missing} are not declared on schema {self.name}"
            )

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(column.name for column in self.columns)

    @property
    def type_name(self) -> str:
        return self.model_name or self.name

    def has_column(self, name: str) -> bool:
        return name in self.column_names

    @property
    def supports_created_at(self) -> bool:
        return self.has_column(CREATED_AT)

    @property
    def supports_created_on(self) -> bool:
        return self.has_column(CREATED_ON)

    @property
    def supports_updated_at(self) -> bool:
        return self.has_column(UPDATED_AT)

    @property
    def supports_updated_on(self) -> bool:
        return self.has_column(UPDATED_ON)

    @property
    def supports_type_column(self) -> bool:
        return self.has_column(TYPE_COLUMN)

    @property
    def supports_soft_delete(self) -> bool:
        return self.has_column(DELETED_ON)

    def unknown_columns(self, names: Iterable[str]) -> tuple[str, ...]:
        """Return the names in ``names`` that are not declared columns."""

        known = set(self.column_names)
        return tuple(sorted(name for name in names if name not in known))
