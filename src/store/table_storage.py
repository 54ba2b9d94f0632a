"""Table storage port.

This module defines the contract every table backend implements and
selects the configured backend for the engine.
"""

from __future__ import annotations

from typing import Protocol

from core.config import ReferenceTableConfig
from core.errors import ReferenceTableConfigError
from core.types import ReferenceTable


class TableStorage(Protocol):
    """Whole-table persistence keyed case-insensitively by table name.

    ``save`` upserts the full table and refreshes its ``updated_at``;
    ``delete`` returns whether anything was removed.
    """

    def get(self, table_name: str) -> ReferenceTable | None: ...

    def save(self, table: ReferenceTable) -> None: ...

    def delete(self, table_name: str) -> bool: ...

    def list_names(self) -> set[str]: ...

    def exists(self, table_name: str) -> bool: ...


def build_table_storage(config: ReferenceTableConfig) -> TableStorage:
    """Create the table backend selected by config.

    Args:
        config: Runtime configuration.

    Returns:
        Transient or durable table storage.

    Raises:
        ReferenceTableConfigError: If the backend name is unsupported.
    """
    from store.lakehouse_storage import LakehouseTableStorage
    from store.memory_storage import InMemoryTableStorage

    if config.storage_backend == "memory":
        return InMemoryTableStorage()
    if config.storage_backend == "lakehouse":
        return LakehouseTableStorage(config.data_root)
    raise ReferenceTableConfigError(
        f"Unsupported storage backend '{config.storage_backend}'. Use 'lakehouse' or 'memory'."
    )
