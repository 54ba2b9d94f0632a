"""Python SDK for reference-table operations.

This module exposes the high-level client that wires configuration,
table storage, the engine, and the snapshot exporter together.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
import threading
from typing import Any, Iterable, Mapping, Sequence

from core.config import ReferenceTableConfig
from core.logging_config import get_logger
from core.table_definition import load_table_definitions
from core.types import (
    MappingData,
    ReferenceTable,
    ReferenceTableColumn,
    ReferenceTableRow,
    TableProvenance,
)
from engine.key_accessor import KeyAccessor
from engine.mapping_engine import ReferenceTableEngine
from engine.table_locks import TableLockRegistry
from export.snapshot_port import SnapshotStore, build_snapshot_store
from store.table_storage import TableStorage, build_table_storage

_LOGGER = get_logger(__name__)


class ReferenceTableClient:
    """Primary SDK entry point for reference tables."""

    def __init__(
        self,
        config: ReferenceTableConfig | None = None,
        storage: TableStorage | None = None,
        snapshot_store: SnapshotStore | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration; read from env when omitted.
            storage: Optional table storage overriding the configured backend.
            snapshot_store: Optional snapshot store overriding the configured backend.
        """
        self._config = config or ReferenceTableConfig.from_env()
        self._storage = storage or build_table_storage(self._config)
        self._snapshot_store = snapshot_store
        self._engine = ReferenceTableEngine(
            self._storage,
            TableLockRegistry(self._config.lock_timeout_seconds),
        )

    @property
    def config(self) -> ReferenceTableConfig:
        """Return the client configuration."""
        return self._config

    @property
    def engine(self) -> ReferenceTableEngine:
        """Return the underlying engine."""
        return self._engine

    @property
    def snapshots(self) -> SnapshotStore:
        """Return the snapshot store, creating the configured one on first use."""
        if self._snapshot_store is None:
            self._snapshot_store = build_snapshot_store(self._config)
        return self._snapshot_store

    def create_table(
        self,
        table_name: str,
        columns: Sequence[ReferenceTableColumn | Mapping[str, Any]],
        is_visible: bool = True,
        notify_on_new_mapping: bool = False,
        provenance: TableProvenance | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ReferenceTable:
        """Create an empty table with the given schema."""
        return self._engine.create_table(
            table_name,
            columns,
            is_visible=is_visible,
            notify_on_new_mapping=notify_on_new_mapping,
            provenance=provenance,
            cancel_event=cancel_event,
        )

    def create_tables_from_file(
        self,
        definition_path: str | Path,
        cancel_event: threading.Event | None = None,
    ) -> tuple[str, ...]:
        """Create every table declared in a YAML table-definition file.

        Args:
            definition_path: Path to the YAML definition.
            cancel_event: Optional cancellation signal checked per table.

        Returns:
            Names of the created tables in file order.
        """
        requests = load_table_definitions(definition_path)
        tables = self._engine.create_tables(requests, cancel_event=cancel_event)
        return tuple(table.name for table in tables)

    def sync(
        self,
        data: Iterable[Any],
        key_field: str | KeyAccessor,
        table_name: str,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """Merge new keys from ``data`` into a table; return how many were added."""
        return self._engine.sync(data, key_field, table_name, cancel_event=cancel_event)

    def read(self, table_name: str) -> MappingData:
        """Return the materialized mapping for a table."""
        return self._engine.read(table_name)

    def upsert_row(
        self,
        table_name: str,
        key: str,
        attributes: Mapping[str, Any],
        cancel_event: threading.Event | None = None,
    ) -> ReferenceTableRow:
        """Insert or update one row."""
        return self._engine.upsert_row(table_name, key, attributes, cancel_event=cancel_event)

    def delete_table(
        self,
        table_name: str,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Delete a table; return whether it existed."""
        return self._engine.delete_table(table_name, cancel_event=cancel_event)

    def get_table(self, table_name: str) -> ReferenceTable | None:
        """Return a table, or None when absent."""
        return self._engine.get_table(table_name)

    def list_table_names(self) -> set[str]:
        """Return the names of all tables."""
        return self._engine.list_table_names()

    def export_snapshot(
        self,
        table_name: str,
        workspace_id: str,
        item_id: str,
        snapshot_table_name: str | None = None,
    ) -> str:
        """Read a table and publish its mapping as a snapshot.

        Args:
            table_name: Table to read.
            workspace_id: Destination workspace identifier.
            item_id: Destination item identifier.
            snapshot_table_name: Optional snapshot name; defaults to ``table_name``.

        Returns:
            Address of the published snapshot.
        """
        data = self._engine.read(table_name)
        target_name = snapshot_table_name or table_name
        address = self.snapshots.store(item_id, workspace_id, target_name, data)
        _LOGGER.info(
            "reference_table_exported",
            table_name=table_name,
            snapshot_table_name=target_name,
            workspace_id=workspace_id,
            item_id=item_id,
            record_count=len(data),
            address=address,
        )
        return address

    def with_data_root(self, data_root: str) -> "ReferenceTableClient":
        """Clone the client with a different local data root.

        Args:
            data_root: New data root path.

        Returns:
            New SDK client instance using the configured backends.
        """
        resolved_root = Path(data_root).expanduser().resolve()
        updated_config = replace(self._config, data_root=resolved_root)
        return ReferenceTableClient(updated_config)
