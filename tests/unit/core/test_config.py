"""Unit tests for core config parsing."""

from __future__ import annotations

import pytest

from core.config import ReferenceTableConfig
from core.errors import ReferenceTableConfigError


def test_from_env_reads_data_root(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve data root from environment."""
    monkeypatch.setenv("REFTABLE_DATA_ROOT", "./.tmp-reftable")

    config = ReferenceTableConfig.from_env()

    assert config.data_root.name == ".tmp-reftable"


def test_from_env_uses_defaults() -> None:
    """Config should default to durable storage and local snapshots."""
    config = ReferenceTableConfig.from_env()

    assert (config.storage_backend, config.snapshot_backend) == ("lakehouse", "local")
    assert config.lock_timeout_seconds == 30.0


def test_from_env_normalizes_backend_names(monkeypatch: pytest.MonkeyPatch) -> None:
    """Backend names should be case-insensitive."""
    monkeypatch.setenv("REFTABLE_STORAGE_BACKEND", " Memory ")
    monkeypatch.setenv("REFTABLE_SNAPSHOT_BACKEND", "S3")

    config = ReferenceTableConfig.from_env()

    assert (config.storage_backend, config.snapshot_backend) == ("memory", "s3")


def test_from_env_raises_for_unknown_storage_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for unsupported storage backends."""
    monkeypatch.setenv("REFTABLE_STORAGE_BACKEND", "sqlite")

    with pytest.raises(ReferenceTableConfigError):
        ReferenceTableConfig.from_env()


@pytest.mark.parametrize("raw_timeout", ["not-a-number", "0", "-5"])
def test_from_env_raises_for_invalid_lock_timeout(
    monkeypatch: pytest.MonkeyPatch, raw_timeout: str
) -> None:
    """Config should fail for non-positive or non-numeric lock timeouts."""
    monkeypatch.setenv("REFTABLE_LOCK_TIMEOUT_SECONDS", raw_timeout)

    with pytest.raises(ReferenceTableConfigError):
        ReferenceTableConfig.from_env()


def test_from_env_treats_blank_base_uri_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    """An empty snapshot base URI should fall back to None."""
    monkeypatch.setenv("REFTABLE_SNAPSHOT_BASE_URI", "")

    config = ReferenceTableConfig.from_env()

    assert config.snapshot_base_uri is None
