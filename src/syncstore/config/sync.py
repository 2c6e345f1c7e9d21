"""Reconciliation defaults and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass

from syncstore.domain.model import ViolationPolicy
from syncstore.domain.reconciliation.reconciler import (
    DEFAULT_BULK_BATCH_SIZE,
    DEFAULT_OBJECT_BATCH_SIZE,
    DEFAULT_PURGE_BATCH_SIZE,
)

from .env import optional_positive_int
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class SyncConfig:
    violation_policy: ViolationPolicy = ViolationPolicy.STRICT
    bulk_batch_size: int = DEFAULT_BULK_BATCH_SIZE
    object_batch_size: int = DEFAULT_OBJECT_BATCH_SIZE
    purge_batch_size: int = DEFAULT_PURGE_BATCH_SIZE


def _violation_policy() -> ViolationPolicy:
    raw = os.getenv("SYNCSTORE_VIOLATION_POLICY")
    if raw is None or not raw.strip():
        return ViolationPolicy.STRICT
    try:
        return ViolationPolicy(raw.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(policy.value for policy in ViolationPolicy)
        raise ConfigurationError(
            f"SYNCSTORE_VIOLATION_POLICY must be one of: {allowed} (got {raw!r})"
        ) from exc


def get_sync_config() -> SyncConfig:
    return SyncConfig(
        violation_policy=_violation_policy(),
        bulk_batch_size=optional_positive_int(
            "SYNCSTORE_BULK_BATCH_SIZE", DEFAULT_BULK_BATCH_SIZE
        ),
        object_batch_size=optional_positive_int(
            "SYNCSTORE_OBJECT_BATCH_SIZE", DEFAULT_OBJECT_BATCH_SIZE
        ),
        purge_batch_size=optional_positive_int(
            "SYNCSTORE_PURGE_BATCH_SIZE", DEFAULT_PURGE_BATCH_SIZE
        ),
    )
