from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from syncstore.config import (
    ConfigurationError,
    StorageConfig,
    SyncConfig,
    configure_logging,
    get_database_config,
    get_storage_config,
    get_sync_config,
)
from syncstore.domain.model import ViolationPolicy

_SYNC_VARS = (
    "SYNCSTORE_VIOLATION_POLICY",
    "SYNCSTORE_BULK_BATCH_SIZE",
    "SYNCSTORE_OBJECT_BATCH_SIZE",
    "SYNCSTORE_PURGE_BATCH_SIZE",
)


@pytest.fixture
def clean_sync_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _SYNC_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_sync_config_defaults(clean_sync_env: pytest.MonkeyPatch) -> None:
    _ = clean_sync_env

    assert get_sync_config() == SyncConfig()
    assert SyncConfig().violation_policy is ViolationPolicy.STRICT


def test_sync_config_reads_environment(clean_sync_env: pytest.MonkeyPatch) -> None:
    clean_sync_env.setenv("SYNCSTORE_VIOLATION_POLICY", " Lenient ")
    clean_sync_env.setenv("SYNCSTORE_BULK_BATCH_SIZE", "500")
    clean_sync_env.setenv("SYNCSTORE_OBJECT_BATCH_SIZE", "20")
    clean_sync_env.setenv("SYNCSTORE_PURGE_BATCH_SIZE", "30")

    config = get_sync_config()

    assert config == SyncConfig(
        violation_policy=ViolationPolicy.LENIENT,
        bulk_batch_size=500,
        object_batch_size=20,
        purge_batch_size=30,
    )


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("SYNCSTORE_VIOLATION_POLICY", "relaxed"),
        ("SYNCSTORE_BULK_BATCH_SIZE", "many"),
        ("SYNCSTORE_PURGE_BATCH_SIZE", "0"),
        ("SYNCSTORE_OBJECT_BATCH_SIZE", "-5"),
    ],
)
def test_sync_config_rejects_invalid_values(
    clean_sync_env: pytest.MonkeyPatch,
    name: str,
    value: str,
) -> None:
    clean_sync_env.setenv(name, value)

    with pytest.raises(ConfigurationError, match=name):
        get_sync_config()


def test_storage_config_honours_data_dir(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("SYNCSTORE_DATA_DIR", str(tmp_path / "data"))

    storage = get_storage_config()

    assert storage.resolve_data_dir() == (tmp_path / "data").resolve()
    assert storage.database_path() == (tmp_path / "data" / "syncstore.db").resolve()
    assert (tmp_path / "data").is_dir()


def test_database_config_prefers_database_uri(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite+pysqlite:///:memory:")
    assert get_database_config().uri == "sqlite+pysqlite:///:memory:"

    monkeypatch.delenv("DATABASE_URI")
    storage = StorageConfig(data_dir=tmp_path)
    assert get_database_config(storage=storage).uri == (
        f"sqlite+pysqlite:///{tmp_path.resolve() / 'syncstore.db'}"
    )
    assert os.getenv("DATABASE_URI") is None


def test_configure_logging_force_replaces_root_handlers() -> None:
    root = logging.getLogger()
    saved_handlers = root.handlers[:]
    saved_level = root.level
    try:
        configure_logging(level=logging.DEBUG, force=True)

        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        formatter = root.handlers[0].formatter
        assert formatter is not None
        assert formatter._fmt == "%(asctime)s %(levelname)s [%(name)s] %(message)s"  # noqa: SLF001
    finally:
        for handler in root.handlers[:]:
            root.removeHandler(handler)
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
