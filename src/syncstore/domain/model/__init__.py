"""Public domain model surface."""

from __future__ import annotations

from syncstore.domain.model.collection import (
    Attributes,
    DesiredCollection,
    DesiredObject,
    Identity,
    PersistedRecord,
    ReconciliationResult,
    ReconnectStrategy,
    SkippedEntry,
    identity_of,
)
from syncstore.domain.model.enums import (
    ColumnType,
    DeleteMethod,
    FetchMode,
    SkipReason,
    ViolationPolicy,
)
from syncstore.domain.model.schema import (
    CREATED_AT,
    CREATED_ON,
    DELETED_ON,
    TYPE_COLUMN,
    UPDATED_AT,
    UPDATED_ON,
    ColumnSpec,
    ModelSchema,
    SchemaError,
    UnknownColumnError,
)

__all__ = [  # noqa: RUF022
    # schema
    "CREATED_AT",
    "CREATED_ON",
    "DELETED_ON",
    "TYPE_COLUMN",
    "UPDATED_AT",
    "UPDATED_ON",
    "ColumnSpec",
    "ColumnType",
    "ModelSchema",
    "SchemaError",
    "UnknownColumnError",
    # collections
    "Attributes",
    "DesiredCollection",
    "DesiredObject",
    "Identity",
    "PersistedRecord",
    "ReconciliationResult",
    "ReconnectStrategy",
    "SkippedEntry",
    "identity_of",
    # policies
    "DeleteMethod",
    "FetchMode",
    "SkipReason",
    "ViolationPolicy",
]
