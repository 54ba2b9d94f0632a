"""Snapshot export port.

This module defines the contract shared by snapshot backends, the pure
address builder, and the factory that selects a backend from config.
"""

from __future__ import annotations

from typing import Protocol

from core.config import ReferenceTableConfig
from core.constants import (
    DEFAULT_SNAPSHOT_BASE_URI,
    SNAPSHOT_FILE_EXTENSION,
    SNAPSHOTS_DIR_NAME,
    SNAPSHOT_TABLES_SEGMENT,
)
from core.errors import ReferenceTableConfigError
from core.types import MappingData, SnapshotLocation
from core.validation import require_non_blank


class SnapshotStore(Protocol):
    """One-way export of flattened table mappings keyed by a three-part address."""

    def store(
        self,
        item_id: str,
        workspace_id: str,
        table_name: str,
        data: MappingData,
    ) -> str: ...

    def read(self, item_id: str, workspace_id: str, table_name: str) -> MappingData: ...

    def delete(self, item_id: str, workspace_id: str, table_name: str) -> bool: ...

    def address_for(self, workspace_id: str, item_id: str, table_name: str) -> str: ...


def build_location(
    item_id: str,
    workspace_id: str,
    table_name: str,
    operation: str,
) -> SnapshotLocation:
    """Validate the three address parts and bundle them.

    Raises:
        ReferenceTableArgumentError: If any part is blank.
    """
    return SnapshotLocation(
        workspace_id=require_non_blank(workspace_id, "workspace_id", operation),
        item_id=require_non_blank(item_id, "item_id", operation),
        table_name=require_non_blank(table_name, "table_name", operation),
    )


def build_snapshot_address(base_uri: str, location: SnapshotLocation) -> str:
    """Return ``{base}/{workspace}/{item}/Tables/{table}`` without any I/O."""
    return "/".join(
        (
            base_uri.rstrip("/"),
            location.workspace_id,
            location.item_id,
            SNAPSHOT_TABLES_SEGMENT,
            location.table_name,
        )
    )


def snapshot_relative_key(location: SnapshotLocation) -> str:
    """Return the backend-relative object key for a snapshot document."""
    return "/".join(
        (
            location.workspace_id,
            location.item_id,
            SNAPSHOT_TABLES_SEGMENT,
            f"{location.table_name}{SNAPSHOT_FILE_EXTENSION}",
        )
    )


def build_snapshot_store(config: ReferenceTableConfig) -> SnapshotStore:
    """Create the snapshot backend selected by config.

    Args:
        config: Runtime configuration.

    Returns:
        In-memory, local-filesystem, or S3 snapshot store.

    Raises:
        ReferenceTableConfigError: If the backend is unsupported or misconfigured.
    """
    from export.local_snapshot import LocalSnapshotStore
    from export.memory_snapshot import InMemorySnapshotStore
    from export.s3_snapshot import S3SnapshotStore

    base_uri = config.snapshot_base_uri
    if config.snapshot_backend == "memory":
        return InMemorySnapshotStore(base_uri or DEFAULT_SNAPSHOT_BASE_URI)
    if config.snapshot_backend == "local":
        return LocalSnapshotStore(config.data_root / SNAPSHOTS_DIR_NAME, base_uri)
    if config.snapshot_backend == "s3":
        if not base_uri:
            raise ReferenceTableConfigError(
                "S3 snapshot export requires REFTABLE_SNAPSHOT_BASE_URI "
                "in format s3://bucket/prefix."
            )
        return S3SnapshotStore(
            base_uri,
            s3_region=config.s3_region,
            s3_profile=config.s3_profile,
        )
    raise ReferenceTableConfigError(
        f"Unsupported snapshot backend '{config.snapshot_backend}'. "
        "Use 'memory', 'local', or 's3'."
    )
