"""Durable two-document table storage.

Each table is persisted as a configuration document (the full table,
rows included) and a data document (the flattened key to record map)
in sibling directories under a base path. The base path may be a local
directory or a mounted lakehouse volume.

The two writes are not transactional: a failure between them leaves the
configuration document newer than the data document. Reads rebuild rows
from the data document, so per-row timestamps and ``is_new`` flags stored
in the configuration document are not restored.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote, unquote

from core.constants import (
    CONFIGURATION_DIR_NAME,
    CONFIGURATION_FILE_SUFFIX,
    DATA_DIR_NAME,
    DATA_FILE_SUFFIX,
)
from core.errors import ReferenceTableStorageError
from core.logging_config import get_logger
from core.types import ReferenceTable, utc_now
from core.validation import require_non_blank, require_not_none
from store.json_io import delete_document, read_json_document, write_json_document
from store.table_payload import (
    rows_from_mapping_data,
    rows_to_mapping_data,
    table_from_payload,
    table_to_payload,
)

_LOGGER = get_logger(__name__)


class LakehouseTableStorage:
    """Filesystem-backed table storage with configuration and data documents."""

    def __init__(
        self,
        base_path: Path,
        configuration_dir_name: str = CONFIGURATION_DIR_NAME,
        data_dir_name: str = DATA_DIR_NAME,
    ) -> None:
        """Initialize storage rooted at ``base_path``.

        Args:
            base_path: Root directory holding both document directories.
            configuration_dir_name: Directory name for configuration documents.
            data_dir_name: Directory name for data documents.
        """
        self._base_path = base_path.expanduser().resolve()
        self._configuration_dir = self._base_path / configuration_dir_name
        self._data_dir = self._base_path / data_dir_name

    @property
    def base_path(self) -> Path:
        """Return the resolved storage root."""
        return self._base_path

    def get(self, table_name: str) -> ReferenceTable | None:
        """Load a table from its configuration and data documents.

        Args:
            table_name: Table name, compared case-insensitively.

        Returns:
            Table with rows rebuilt from the data document, or None when
            no configuration document exists.

        Raises:
            ReferenceTableStorageError: If a document cannot be read or parsed.
        """
        require_non_blank(table_name, "table_name", "get")
        configuration_path = self.configuration_path(table_name)
        if not configuration_path.exists():
            return None
        table = table_from_payload(read_json_document(configuration_path))
        data_payload = read_json_document(self.data_path(table_name), default_value={})
        if not isinstance(data_payload, dict):
            raise ReferenceTableStorageError(
                f"Invalid data document for table '{table_name}' at "
                f"{self.data_path(table_name)}: expected JSON object at top level."
            )
        table.rows = rows_from_mapping_data(data_payload, table.key_column_name)
        return table

    def save(self, table: ReferenceTable) -> None:
        """Write the configuration document, then the data document.

        Args:
            table: Table to persist; its ``updated_at`` is refreshed.

        Raises:
            ReferenceTableStorageError: If either write fails.
        """
        require_not_none(table, "table", "save")
        require_non_blank(table.name, "table.name", "save")
        table.updated_at = utc_now()
        configuration_path = self.configuration_path(table.name)
        data_path = self.data_path(table.name)
        write_json_document(configuration_path, table_to_payload(table))
        write_json_document(data_path, rows_to_mapping_data(table))
        _LOGGER.debug(
            "table_documents_written",
            table_name=table.name,
            configuration_path=str(configuration_path),
            data_path=str(data_path),
            row_count=len(table.rows),
        )

    def delete(self, table_name: str) -> bool:
        """Remove both documents; return whether either existed."""
        require_non_blank(table_name, "table_name", "delete")
        configuration_deleted = delete_document(self.configuration_path(table_name))
        data_deleted = delete_document(self.data_path(table_name))
        if configuration_deleted != data_deleted:
            _LOGGER.warning(
                "table_documents_partially_present",
                table_name=table_name,
                configuration_deleted=configuration_deleted,
                data_deleted=data_deleted,
            )
        return configuration_deleted or data_deleted

    def list_names(self) -> set[str]:
        """Return table names recorded in the configuration documents.

        Raises:
            ReferenceTableStorageError: If a configuration document is unreadable.
        """
        if not self._configuration_dir.exists():
            return set()
        names: set[str] = set()
        for configuration_path in sorted(
            self._configuration_dir.glob(f"*{CONFIGURATION_FILE_SUFFIX}")
        ):
            payload = read_json_document(configuration_path)
            stored_name = payload.get("name") if isinstance(payload, dict) else None
            if isinstance(stored_name, str) and stored_name:
                names.add(stored_name)
            else:
                names.add(unquote(configuration_path.name.removesuffix(CONFIGURATION_FILE_SUFFIX)))
        return names

    def exists(self, table_name: str) -> bool:
        """Return whether the configuration document exists."""
        require_non_blank(table_name, "table_name", "exists")
        return self.configuration_path(table_name).exists()

    def configuration_path(self, table_name: str) -> Path:
        """Return the configuration document path for a table."""
        return self._configuration_dir / f"{_file_stem(table_name)}{CONFIGURATION_FILE_SUFFIX}"

    def data_path(self, table_name: str) -> Path:
        """Return the data document path for a table."""
        return self._data_dir / f"{_file_stem(table_name)}{DATA_FILE_SUFFIX}"


def _file_stem(table_name: str) -> str:
    """Return the case-insensitive file stem for a table name.

    The casefolded name is percent-encoded, dots included, so distinct
    names never share a document and no stem is a relative path segment.
    """
    return quote(table_name.casefold(), safe="").replace(".", "%2E")
