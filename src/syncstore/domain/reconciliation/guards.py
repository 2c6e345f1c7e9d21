"""Consistency guards consulted while scanning and writing rows.

Both guards apply the violation policy they were constructed with: a strict
guard raises, a lenient one logs a warning and reports ``False`` so the caller
can skip the offending row or entry.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from syncstore.domain.model import ViolationPolicy

from .errors import DistinctViolationError, IntegrityViolationError

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping

    from syncstore.domain.model import DesiredCollection

log = getLogger(__name__)


class UniquenessGuard:
    """Track primary keys seen during one scan pass."""

    def __init__(self, collection: DesiredCollection, *, policy: ViolationPolicy) -> None:
        self._collection = collection
        self._policy = policy
        self._seen: set[Hashable] = set()

    def __len__(self) -> int:
        return len(self._seen)

    def check(self, primary_key: Hashable) -> bool:
        if primary_key not in self._seen:
            self._seen.add(primary_key)
            return True

        if self._policy is ViolationPolicy.STRICT:
            raise DistinctViolationError(collection=str(self._collection), primary_key=primary_key)
        log.warning(
            "Please update the scope or association of %s to return a DISTINCT result. "
            "The duplicate primary key %r is being ignored.",
            self._collection,
            primary_key,
        )
        return False


class IntegrityGuard:
    """Verify that the collection's fixed foreign keys are set before a write."""

    def __init__(self, collection: DesiredCollection, *, policy: ViolationPolicy) -> None:
        self._collection = collection
        self._policy = policy

    def check(self, attributes: Mapping[str, object]) -> bool:
        for column in self._collection.fixed_foreign_keys:
            if attributes.get(column) is not None:
                continue
            if self._policy is ViolationPolicy.STRICT:
                raise IntegrityViolationError(
                    collection=str(self._collection),
                    column=column,
                    attributes=attributes,
                )
            log.warning(
                "Referential integrity check violated, ignoring %s of %s because of "
                "missing foreign key %s",
                dict(attributes),
                self._collection,
                column,
            )
            return False
        return True
