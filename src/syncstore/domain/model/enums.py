"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ViolationPolicy(StrEnum):
    """Whether consistency violations abort a pass or are downgraded to warnings."""

    STRICT = "strict"
    LENIENT = "lenient"


class DeleteMethod(StrEnum):
    SOFT = "soft"
    HARD = "hard"


class FetchMode(StrEnum):
    """How persisted rows are read while scanning the backing store."""

    AUTO = "auto"
    BULK = "bulk"  # raw columnar batches, large batch size
    OBJECTS = "objects"  # full record objects, small batch size


class ColumnType(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    JSON = "json"


class SkipReason(StrEnum):
    DUPLICATE_PRIMARY_KEY = "duplicate_primary_key"
    MISSING_FOREIGN_KEY = "missing_foreign_key"
