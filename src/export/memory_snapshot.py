"""In-memory snapshot store.

Snapshots are kept as serialized JSON strings so a read returns an
independent copy of what was published, as a remote store would.
"""

from __future__ import annotations

import json
import threading

from core.constants import DEFAULT_SNAPSHOT_BASE_URI
from core.errors import ReferenceTableNotFoundError, ReferenceTableStorageError
from core.logging_config import get_logger
from core.types import MappingData
from core.validation import require_not_none
from export.snapshot_port import build_location, build_snapshot_address, snapshot_relative_key
from store.json_io import dump_json_text

_LOGGER = get_logger(__name__)


class InMemorySnapshotStore:
    """Process-lifetime snapshot store."""

    def __init__(self, base_uri: str = DEFAULT_SNAPSHOT_BASE_URI) -> None:
        self._base_uri = base_uri
        self._snapshots: dict[str, str] = {}
        self._lock = threading.Lock()

    def store(
        self,
        item_id: str,
        workspace_id: str,
        table_name: str,
        data: MappingData,
    ) -> str:
        """Serialize and keep a snapshot; return its address."""
        location = build_location(item_id, workspace_id, table_name, "store_snapshot")
        require_not_none(data, "data", "store_snapshot")
        try:
            serialized = dump_json_text(data)
        except (TypeError, ValueError) as error:
            raise ReferenceTableStorageError(
                f"Failed to serialize snapshot '{table_name}' for item '{item_id}': {error}."
            ) from error
        with self._lock:
            self._snapshots[snapshot_relative_key(location)] = serialized
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
        """Return a stored snapshot.

        Raises:
            ReferenceTableNotFoundError: If nothing was stored at the address.
        """
        location = build_location(item_id, workspace_id, table_name, "read_snapshot")
        with self._lock:
            serialized = self._snapshots.get(snapshot_relative_key(location))
        if serialized is None:
            raise ReferenceTableNotFoundError(
                f"read_snapshot: mapping table '{table_name}' not found for item '{item_id}' "
                f"in workspace '{workspace_id}'."
            )
        return json.loads(serialized)

    def delete(self, item_id: str, workspace_id: str, table_name: str) -> bool:
        """Drop a snapshot; return whether it existed."""
        location = build_location(item_id, workspace_id, table_name, "delete_snapshot")
        with self._lock:
            return self._snapshots.pop(snapshot_relative_key(location), None) is not None

    def address_for(self, workspace_id: str, item_id: str, table_name: str) -> str:
        """Return the snapshot address without touching the store."""
        location = build_location(item_id, workspace_id, table_name, "snapshot_address")
        return build_snapshot_address(self._base_uri, location)
