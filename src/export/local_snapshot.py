"""Local-filesystem snapshot store.

Snapshots are written as JSON documents under a root directory that
mirrors the published address layout, e.g. a mounted OneLake volume.
"""

from __future__ import annotations

from pathlib import Path

from core.constants import DEFAULT_SNAPSHOT_BASE_URI
from core.errors import (
    ReferenceTableArgumentError,
    ReferenceTableNotFoundError,
    ReferenceTableStorageError,
)
from core.logging_config import get_logger
from core.types import MappingData, SnapshotLocation
from core.validation import require_not_none
from export.snapshot_port import build_location, build_snapshot_address, snapshot_relative_key
from store.json_io import delete_document, read_json_document, write_json_document

_LOGGER = get_logger(__name__)


class LocalSnapshotStore:
    """Filesystem-backed snapshot store."""

    def __init__(self, root_dir: Path, base_uri: str | None = None) -> None:
        """Initialize the store.

        Args:
            root_dir: Directory holding snapshot documents.
            base_uri: Base of returned addresses; defaults to the OneLake endpoint.
        """
        self._root_dir = root_dir.expanduser().resolve()
        self._base_uri = base_uri or DEFAULT_SNAPSHOT_BASE_URI

    def store(
        self,
        item_id: str,
        workspace_id: str,
        table_name: str,
        data: MappingData,
    ) -> str:
        """Write a snapshot document and return its address."""
        location = build_location(item_id, workspace_id, table_name, "store_snapshot")
        require_not_none(data, "data", "store_snapshot")
        snapshot_path = self._snapshot_path(location)
        write_json_document(snapshot_path, data)
        address = build_snapshot_address(self._base_uri, location)
        _LOGGER.info(
            "snapshot_stored",
            table_name=table_name,
            item_id=item_id,
            workspace_id=workspace_id,
            record_count=len(data),
            address=address,
        )
        return address

    def read(self, item_id: str, workspace_id: str, table_name: str) -> MappingData:
        """Read a snapshot document.

        Raises:
            ReferenceTableNotFoundError: If no snapshot exists at the address.
            ReferenceTableStorageError: If the document is unreadable.
        """
        location = build_location(item_id, workspace_id, table_name, "read_snapshot")
        snapshot_path = self._snapshot_path(location)
        if not snapshot_path.exists():
            raise ReferenceTableNotFoundError(
                f"read_snapshot: mapping table '{table_name}' not found for item '{item_id}' "
                f"in workspace '{workspace_id}'."
            )
        payload = read_json_document(snapshot_path)
        if not isinstance(payload, dict):
            raise ReferenceTableStorageError(
                f"Failed to read snapshot '{table_name}' at {snapshot_path}: "
                "expected JSON object at top level."
            )
        return payload

    def delete(self, item_id: str, workspace_id: str, table_name: str) -> bool:
        """Delete a snapshot document; return whether it existed."""
        location = build_location(item_id, workspace_id, table_name, "delete_snapshot")
        return delete_document(self._snapshot_path(location))

    def address_for(self, workspace_id: str, item_id: str, table_name: str) -> str:
        """Return the snapshot address without touching the filesystem."""
        location = build_location(item_id, workspace_id, table_name, "snapshot_address")
        return build_snapshot_address(self._base_uri, location)

    def _snapshot_path(self, location: SnapshotLocation) -> Path:
        """Return the snapshot document path, confined to the root directory.

        Raises:
            ReferenceTableArgumentError: If address parts escape the root.
        """
        snapshot_path = (self._root_dir / snapshot_relative_key(location)).resolve()
        if not snapshot_path.is_relative_to(self._root_dir):
            raise ReferenceTableArgumentError(
                f"Snapshot address parts {location} resolve outside {self._root_dir}."
            )
        return snapshot_path
