"""Transient in-memory table storage.

Tables live for the lifetime of the process in one dictionary keyed by
casefolded table name and guarded by a single lock. Stored and returned
tables are deep copies, so callers never share state with the store.
"""

from __future__ import annotations

import copy
import threading

from core.logging_config import get_logger
from core.types import ReferenceTable, utc_now
from core.validation import require_non_blank, require_not_none

_LOGGER = get_logger(__name__)


class InMemoryTableStorage:
    """Thread-safe process-lifetime table storage."""

    def __init__(self) -> None:
        self._tables: dict[str, ReferenceTable] = {}
        self._lock = threading.Lock()

    def get(self, table_name: str) -> ReferenceTable | None:
        """Return a copy of the stored table, or None when absent."""
        require_non_blank(table_name, "table_name", "get")
        with self._lock:
            table = self._tables.get(table_name.casefold())
            return copy.deepcopy(table) if table is not None else None

    def save(self, table: ReferenceTable) -> None:
        """Store a copy of the table and refresh its ``updated_at``."""
        require_not_none(table, "table", "save")
        require_non_blank(table.name, "table.name", "save")
        table.updated_at = utc_now()
        stored_table = copy.deepcopy(table)
        with self._lock:
            self._tables[table.name.casefold()] = stored_table
        _LOGGER.debug("table_saved", table_name=table.name, row_count=len(table.rows))

    def delete(self, table_name: str) -> bool:
        """Remove the table; return whether it existed."""
        require_non_blank(table_name, "table_name", "delete")
        with self._lock:
            return self._tables.pop(table_name.casefold(), None) is not None

    def list_names(self) -> set[str]:
        """Return the names of all stored tables."""
        with self._lock:
            return {table.name for table in self._tables.values()}

    def exists(self, table_name: str) -> bool:
        """Return whether the table is stored."""
        require_non_blank(table_name, "table_name", "exists")
        with self._lock:
            return table_name.casefold() in self._tables
