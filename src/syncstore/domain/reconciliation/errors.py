"""Consistency violations raised by reconciliation passes."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping


class ReconciliationError(RuntimeError):
    """Base class for errors that abort a reconciliation phase."""


class DistinctViolationError(ReconciliationError):
    """Raised when the scan returns the same primary key twice within one pass."""

    def __init__(self, *, collection: str, primary_key: Hashable) -> None:
        self.collection = collection
        self.primary_key = primary_key
        super().__init__(
            f"Scan of {collection} returned primary key {primary_key!r} more than once. "
            "Please update its scope or association to return a DISTINCT result."
        )


class IntegrityViolationError(ReconciliationError):
    """Raised when a required foreign key column is missing from attributes about to be written."""

    def __init__(
        self,
        *,
        collection: str,
        column: str,
        attributes: Mapping[str, object],
    ) -> None:
        self.collection = collection
        self.column = column
        self.attributes = dict(attributes)
        super().__init__(
            f"Referential integrity check violated for {self.attributes} of {collection} "
            f"because of missing foreign key {column}"
        )
