"""Desired-state collections and the records they are reconciled against."""

from __future__ import annotations

from collections.abc import Hashable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .enums import DeleteMethod, FetchMode, SkipReason
from .schema import SchemaError

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Sequence

    from .schema import ModelSchema


type Identity = tuple[Hashable, ...]
type Attributes = dict[str, object]


def identity_of(values: Mapping[str, object], natural_key: Sequence[str]) -> Identity:
    """Extract the natural-key tuple from a desired attribute map or a persisted row."""

    return tuple(values.get(key) for key in natural_key)  # type: ignore[misc]


@dataclass(frozen=True, slots=True)
class DesiredObject:
    """One external entity as it should exist in the store."""

    attributes: Mapping[str, object]

    def identity(self, natural_key: Sequence[str]) -> Identity:
        return identity_of(self.attributes, natural_key)

    def attributes_for_write(self) -> Attributes:
        return dict(self.attributes)


@dataclass(frozen=True, slots=True)
class PersistedRecord:
    """A store-resident row: store-assigned primary key plus column values."""

    primary_key: Hashable
    values: Mapping[str, object]

    def identity(self, natural_key: Sequence[str]) -> Identity:
        return identity_of(self.values, natural_key)


@dataclass(frozen=True, slots=True)
class SkippedEntry:
    identity: Identity
    reason: SkipReason


@dataclass(slots=True)
class ReconciliationResult:
    """Writes applied by reconciliation passes, in the order they happened.

    Full-replacement purges only count their deletions in ``purged``.
    """

    created: list[PersistedRecord] = field(default_factory=list[PersistedRecord])
    updated: list[PersistedRecord] = field(default_factory=list[PersistedRecord])
    deleted: list[PersistedRecord] = field(default_factory=list[PersistedRecord])
    skipped: list[SkippedEntry] = field(default_factory=list[SkippedEntry])
    purged: int = 0

    @property
    def total_writes(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted) + self.purged


class ReconnectStrategy(Protocol):
    """Remap still-unmatched desired entries after the update/delete phase.

    Implementations may remove entries from both mappings; whatever remains is
    handed to the create phase.
    """

    def __call__(
        self,
        collection: DesiredCollection,
        remaining_objects: dict[Identity, DesiredObject],
        remaining_attributes: dict[Identity, Attributes],
    ) -> None: ...


@dataclass(slots=True, kw_only=True)
class DesiredCollection:
    """Complete desired state of one model, materialized before a pass starts."""

    schema: ModelSchema
    objects: list[DesiredObject] = field(default_factory=list[DesiredObject])
    create_allowed: bool = True
    delete_allowed: bool = True
    delete_method: DeleteMethod = DeleteMethod.HARD
    all_identities: frozenset[Identity] | None = None
    fixed_foreign_keys: tuple[str, ...] = ()
    reconnect: ReconnectStrategy | None = None
    scope: Mapping[str, object] = field(default_factory=dict[str, object])
    targeted: bool = False
    fetch_mode: FetchMode = FetchMode.AUTO
    result: ReconciliationResult = field(default_factory=ReconciliationResult)

    def __post_init__(self) -> None:
        if self.delete_method is DeleteMethod.SOFT and not self.schema.supports_soft_delete:
            raise SchemaError(
                f"Soft delete requires a deleted_on column on schema {self.schema.name}"
            )
        unknown = self.schema.unknown_columns((*self.fixed_foreign_keys, *self.scope))
        if unknown:
            raise SchemaError(
                f"Foreign key/scope columns {list(unknown)} are not declared on "
                f"schema {self.schema.name}"
            )
        if self.all_identities is not None:
            self.all_identities = frozenset(
                self._normalize_identity(item) for item in self.all_identities
            )

    def _normalize_identity(self, item: object) -> Identity:
        """Coerce one universe member to a natural-key tuple.

        Bare scalars are accepted only for single-column natural keys.
        """

        if isinstance(item, tuple | list):
            identity: Identity = tuple(item)  # type: ignore[arg-type]
        elif len(self.natural_key) == 1:
            identity = (item,)  # type: ignore[assignment]
        else:
            raise SchemaError(
                f"Identity {item!r} of schema {self.schema.name} must be a tuple "
                f"matching natural key {self.natural_key}"
            )
        if len(identity) != len(self.natural_key):
            raise SchemaError(
                f"Identity {item!r} of schema {self.schema.name} does not match "
                f"natural key {self.natural_key}"
            )
        return identity

    def __str__(self) -> str:
        suffix = ", targeted" if self.targeted else ""
        return f"DesiredCollection:<{self.schema.type_name}{suffix}>"

    def __iter__(self) -> Iterator[DesiredObject]:
        return iter(self.objects)

    def __len__(self) -> int:
        return len(self.objects)

    def add(self, attributes: Mapping[str, object]) -> DesiredObject:
        desired = DesiredObject(attributes=dict(attributes))
        self.objects.append(desired)
        return desired

    def extend(self, items: Iterable[Mapping[str, object]]) -> None:
        for attributes in items:
            self.add(attributes)

    @property
    def natural_key(self) -> tuple[str, ...]:
        return self.schema.natural_key

    @property
    def supports_created_at(self) -> bool:
        return self.schema.supports_created_at

    @property
    def supports_created_on(self) -> bool:
        return self.schema.supports_created_on

    @property
    def supports_updated_at(self) -> bool:
        return self.schema.supports_updated_at

    @property
    def supports_updated_on(self) -> bool:
        return self.schema.supports_updated_on

    @property
    def supports_type_column(self) -> bool:
        return self.schema.supports_type_column

    @property
    def is_full_replacement(self) -> bool:
        return bool(self.all_identities)

    @property
    def is_noop(self) -> bool:
        if self.targeted and not self.objects:
            return True
        return not self.objects and not self.delete_allowed and not self.is_full_replacement

    def identities(self) -> list[Identity]:
        return [desired.identity(self.natural_key) for desired in self.objects]

    def strategy_details(self) -> str:
        return (
            f"create_allowed: {self.create_allowed}, delete_allowed: {self.delete_allowed}, "
            f"delete_method: {self.delete_method.value}, "
            f"full_replacement: {self.is_full_replacement}, targeted: {self.targeted}, "
            f"fetch_mode: {self.fetch_mode.value}"
        )
