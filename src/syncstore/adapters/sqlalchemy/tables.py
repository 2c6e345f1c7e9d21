"""SQLAlchemy Core tables built from schema descriptors."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Dialect,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
)

from syncstore.domain.model import ColumnType, SchemaError

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.types import TypeEngine

    from syncstore.domain.model import ModelSchema

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)


def _column_type(column_type: ColumnType) -> TypeEngine[object] | type[TypeEngine[object]]:
    match column_type:
        case ColumnType.STRING:
            return String
        case ColumnType.INTEGER:
            return Integer
        case ColumnType.FLOAT:
            return Float
        case ColumnType.BOOLEAN:
            return Boolean
        case ColumnType.DATETIME:
            return UTCDateTime()
        case ColumnType.JSON:
            return JSON


def register_schema(schema: ModelSchema) -> Table:
    """Return the table for ``schema``, defining it on first use.

    The natural key gets a unique constraint: that constraint, not the
    reconciler, is what prevents duplicate creates after an interrupted pass.
    """

    expected = (schema.primary_key, *schema.column_names)
    existing = metadata.tables.get(schema.name)
    if existing is not None:
        if tuple(column.name for column in existing.columns) != expected:
            raise SchemaError(f"Table {schema.name} is already registered with other columns")
        return existing

    return Table(
        schema.name,
        metadata,
        Column(schema.primary_key, Integer, primary_key=True, autoincrement=True),
        *(
            Column(column.name, _column_type(column.type), nullable=column.nullable)
            for column in schema.columns
        ),
        UniqueConstraint(*schema.natural_key),
    )


def create_all_tables(engine: Engine) -> None:
    log.info("Creating all tables")
    metadata.create_all(engine)
