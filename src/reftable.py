"""Public SDK surface for reference tables.

This module provides a stable import path for SDK users.
It re-exports the primary client, the engine, and typed models.
"""

from __future__ import annotations

from core.config import ReferenceTableConfig
from core.errors import (
    ReferenceTableArgumentError,
    ReferenceTableCancelledError,
    ReferenceTableConfigError,
    ReferenceTableDefinitionError,
    ReferenceTableDependencyError,
    ReferenceTableError,
    ReferenceTableExistsError,
    ReferenceTableLockTimeoutError,
    ReferenceTableNotFoundError,
    ReferenceTableStorageError,
)
from core.table_definition import load_table_definitions
from core.types import (
    CaseInsensitiveDict,
    CreateTableRequest,
    MappingData,
    ReferenceTable,
    ReferenceTableColumn,
    ReferenceTableRow,
    TableProvenance,
)
from engine.client import ReferenceTableClient
from engine.mapping_engine import ReferenceTableEngine
from export.local_snapshot import LocalSnapshotStore
from export.memory_snapshot import InMemorySnapshotStore
from export.s3_snapshot import S3SnapshotStore
from store.lakehouse_storage import LakehouseTableStorage
from store.memory_storage import InMemoryTableStorage

__all__ = [
    "CaseInsensitiveDict",
    "CreateTableRequest",
    "InMemorySnapshotStore",
    "InMemoryTableStorage",
    "LakehouseTableStorage",
    "LocalSnapshotStore",
    "MappingData",
    "ReferenceTable",
    "ReferenceTableArgumentError",
    "ReferenceTableCancelledError",
    "ReferenceTableClient",
    "ReferenceTableColumn",
    "ReferenceTableConfig",
    "ReferenceTableConfigError",
    "ReferenceTableDefinitionError",
    "ReferenceTableDependencyError",
    "ReferenceTableEngine",
    "ReferenceTableError",
    "ReferenceTableExistsError",
    "ReferenceTableLockTimeoutError",
    "ReferenceTableNotFoundError",
    "ReferenceTableRow",
    "ReferenceTableStorageError",
    "S3SnapshotStore",
    "TableProvenance",
    "load_table_definitions",
]
