"""Runtime configuration model for the reference-table engine.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_DATA_ROOT,
    DEFAULT_LOCK_TIMEOUT_SECONDS,
    SUPPORTED_SNAPSHOT_BACKENDS,
    SUPPORTED_STORAGE_BACKENDS,
)
from core.errors import ReferenceTableConfigError


@dataclass(frozen=True)
class ReferenceTableConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory for table documents and snapshots.
        storage_backend: Table storage backend, ``lakehouse`` or ``memory``.
        snapshot_backend: Snapshot export backend, ``memory``, ``local`` or ``s3``.
        snapshot_base_uri: Optional base address for published snapshots.
        s3_region: Optional default AWS region for S3 snapshot exports.
        s3_profile: Optional AWS profile for boto3 session initialization.
        lock_timeout_seconds: Maximum wait for a per-table lock.
    """

    data_root: Path
    storage_backend: str = "lakehouse"
    snapshot_backend: str = "local"
    snapshot_base_uri: str | None = None
    s3_region: str | None = None
    s3_profile: str | None = None
    lock_timeout_seconds: float = DEFAULT_LOCK_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "ReferenceTableConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ReferenceTableConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("REFTABLE_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        storage_backend = _parse_choice(
            "REFTABLE_STORAGE_BACKEND",
            os.getenv("REFTABLE_STORAGE_BACKEND", "lakehouse"),
            SUPPORTED_STORAGE_BACKENDS,
        )
        snapshot_backend = _parse_choice(
            "REFTABLE_SNAPSHOT_BACKEND",
            os.getenv("REFTABLE_SNAPSHOT_BACKEND", "local"),
            SUPPORTED_SNAPSHOT_BACKENDS,
        )
        lock_timeout = _parse_lock_timeout(
            os.getenv("REFTABLE_LOCK_TIMEOUT_SECONDS", str(DEFAULT_LOCK_TIMEOUT_SECONDS))
        )
        return cls(
            data_root=Path(data_root_value).expanduser().resolve(),
            storage_backend=storage_backend,
            snapshot_backend=snapshot_backend,
            snapshot_base_uri=os.getenv("REFTABLE_SNAPSHOT_BASE_URI") or None,
            s3_region=os.getenv("REFTABLE_S3_REGION"),
            s3_profile=os.getenv("REFTABLE_S3_PROFILE"),
            lock_timeout_seconds=lock_timeout,
        )


def _parse_choice(env_name: str, raw_value: str, supported: tuple[str, ...]) -> str:
    """Parse one enumerated environment value.

    Args:
        env_name: Environment variable name, used in error messages.
        raw_value: Raw string from environment.
        supported: Accepted values.

    Returns:
        Normalized lower-case value.

    Raises:
        ReferenceTableConfigError: If value is not supported.
    """
    value = raw_value.strip().lower()
    if value not in supported:
        raise ReferenceTableConfigError(
            f"Invalid {env_name} value '{raw_value}'. "
            f"Set {env_name} to one of: {', '.join(supported)}."
        )
    return value


def _parse_lock_timeout(raw_value: str) -> float:
    """Parse the per-table lock timeout environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Parsed positive timeout in seconds.

    Raises:
        ReferenceTableConfigError: If value is not a positive number.
    """
    try:
        timeout = float(raw_value)
    except ValueError as error:
        raise ReferenceTableConfigError(
            "Invalid REFTABLE_LOCK_TIMEOUT_SECONDS value: "
            f"expected number, got '{raw_value}'. "
            "Set REFTABLE_LOCK_TIMEOUT_SECONDS to a positive number of seconds."
        ) from error
    if timeout <= 0:
        raise ReferenceTableConfigError(
            f"Invalid REFTABLE_LOCK_TIMEOUT_SECONDS value {timeout}: must be positive."
        )
    return timeout
