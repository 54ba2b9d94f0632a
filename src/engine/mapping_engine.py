"""Reference-table engine.

This module owns schema creation, merge-only synchronization, row
upserts, and full-table materialization. All persistence goes through
the table storage port; the engine never touches snapshot exports.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
import threading
from typing import Any

from core.constants import DEFAULT_COLUMN_DATA_TYPE, DEFAULT_KEY_COLUMN_NAME
from core.errors import (
    ReferenceTableArgumentError,
    ReferenceTableExistsError,
    ReferenceTableNotFoundError,
)
from core.logging_config import get_logger
from core.types import (
    CreateTableRequest,
    MappingData,
    ReferenceTable,
    ReferenceTableColumn,
    ReferenceTableRow,
    TableProvenance,
    utc_now,
)
from core.validation import require_non_blank, require_not_none
from engine.cancellation import raise_if_cancelled
from engine.key_accessor import KeyAccessor, key_to_string, resolve_key_accessor
from engine.table_locks import TableLockRegistry
from store.table_storage import TableStorage

_LOGGER = get_logger(__name__)


class ReferenceTableEngine:
    """Orchestrates reference-table operations over one storage backend.

    Writes to the same table name are serialized by a per-table lock, so
    concurrent syncs inside one process never lose inserts. Separate
    processes sharing a durable base path are not coordinated.
    """

    def __init__(self, storage: TableStorage, locks: TableLockRegistry | None = None) -> None:
        """Create the engine.

        Args:
            storage: Table storage backend.
            locks: Optional per-table lock registry; a default one is created.
        """
        self._storage = storage
        self._locks = locks or TableLockRegistry()

    @property
    def storage(self) -> TableStorage:
        """Return the backing table storage."""
        return self._storage

    def create_table(
        self,
        table_name: str,
        columns: Sequence[ReferenceTableColumn | Mapping[str, Any]],
        is_visible: bool = True,
        notify_on_new_mapping: bool = False,
        provenance: TableProvenance | None = None,
        cancel_event: threading.Event | None = None,
    ) -> ReferenceTable:
        """Create and persist an empty table with the given schema.

        Args:
            table_name: Name of the new table.
            columns: Schema columns, as column objects or mappings with
                ``name``/``data_type``/``description``/``order`` fields.
            is_visible: Consumption visibility flag.
            notify_on_new_mapping: Notification flag.
            provenance: Optional source dataset metadata.
            cancel_event: Optional cancellation signal.

        Returns:
            The persisted table.

        Raises:
            ReferenceTableArgumentError: If the name or columns are invalid.
            ReferenceTableExistsError: If a table with this name exists.
        """
        operation = "create_table"
        require_non_blank(table_name, "table_name", operation)
        require_not_none(columns, "columns", operation)
        schema = _coerce_columns(columns, table_name)
        with self._locks.hold(table_name, operation):
            raise_if_cancelled(cancel_event, operation, table_name)
            if self._storage.exists(table_name):
                raise ReferenceTableExistsError(
                    f"{operation}: reference table '{table_name}' already exists."
                )
            now = utc_now()
            table = ReferenceTable(
                name=table_name,
                key_column_name=DEFAULT_KEY_COLUMN_NAME,
                columns=schema,
                rows=[],
                created_at=now,
                updated_at=now,
                is_visible=is_visible,
                notify_on_new_mapping=notify_on_new_mapping,
                provenance=provenance or TableProvenance(),
            )
            self._storage.save(table)
        _LOGGER.info(
            "reference_table_created",
            table_name=table_name,
            column_count=len(schema),
            is_visible=is_visible,
            notify_on_new_mapping=notify_on_new_mapping,
            has_provenance=not table.provenance.is_empty(),
        )
        return table

    def create_tables(
        self,
        requests: Iterable[CreateTableRequest],
        cancel_event: threading.Event | None = None,
    ) -> tuple[ReferenceTable, ...]:
        """Create several tables in order, stopping at the first failure.

        Tables created before a failure stay in place.

        Args:
            requests: Creation requests, e.g. from a table-definition file.
            cancel_event: Optional cancellation signal.

        Returns:
            The persisted tables in request order.
        """
        created: list[ReferenceTable] = []
        for request in requests:
            created.append(
                self.create_table(
                    request.table_name,
                    request.columns,
                    is_visible=request.is_visible,
                    notify_on_new_mapping=request.notify_on_new_mapping,
                    provenance=request.provenance,
                    cancel_event=cancel_event,
                )
            )
        return tuple(created)

    def sync(
        self,
        data: Iterable[Any],
        key_field: str | KeyAccessor,
        table_name: str,
        cancel_event: threading.Event | None = None,
    ) -> int:
        """Insert keys from ``data`` that the table does not hold yet.

        Existing rows are never modified, so repeating a sync with the same
        dataset adds nothing and performs no write. A table that does not
        exist is created implicitly with no columns and notifications on.

        Args:
            data: Iterable of records (mappings or objects).
            key_field: Record field holding the key, or a ``record -> key``
                accessor.
            table_name: Target table name.
            cancel_event: Optional cancellation signal.

        Returns:
            Number of newly added keys.

        Raises:
            ReferenceTableArgumentError: If arguments are blank or malformed, or
                the key field does not exist on the records.
        """
        operation = "sync"
        if not callable(key_field):
            require_non_blank(key_field, "key_field", operation)
        require_non_blank(table_name, "table_name", operation)
        records = _materialize_records(data, table_name)
        if not records:
            return 0
        accessor = resolve_key_accessor(records[0], key_field)
        with self._locks.hold(table_name, operation):
            raise_if_cancelled(cancel_event, operation, table_name)
            table = self._storage.get(table_name)
            if table is None:
                now = utc_now()
                table = ReferenceTable(
                    name=table_name,
                    key_column_name=DEFAULT_KEY_COLUMN_NAME,
                    created_at=now,
                    updated_at=now,
                    is_visible=True,
                    notify_on_new_mapping=True,
                )
            existing_keys = table.key_set()
            new_keys_added = 0
            for record in records:
                key = key_to_string(accessor(record))
                if key is None or key.casefold() in existing_keys:
                    continue
                now = utc_now()
                table.rows.append(
                    ReferenceTableRow(
                        key=key, attributes={}, created_at=now, updated_at=now, is_new=True
                    )
                )
                existing_keys.add(key.casefold())
                new_keys_added += 1
            if new_keys_added > 0 or not table.rows:
                raise_if_cancelled(cancel_event, operation, table_name)
                table.updated_at = utc_now()
                self._storage.save(table)
        _LOGGER.info(
            "reference_table_synced",
            table_name=table_name,
            record_count=len(records),
            new_keys=new_keys_added,
            row_count=len(table.rows),
        )
        return new_keys_added

    def read(self, table_name: str) -> MappingData:
        """Materialize a table into ``{key: {key_column: key, **attributes}}``.

        Raises:
            ReferenceTableNotFoundError: If the table does not exist.
        """
        table = self._require_table(table_name, "read")
        _LOGGER.debug("reference_table_read", table_name=table_name, row_count=len(table.rows))
        return table.to_mapping_data()

    def upsert_row(
        self,
        table_name: str,
        key: str,
        attributes: Mapping[str, Any],
        cancel_event: threading.Event | None = None,
    ) -> ReferenceTableRow:
        """Insert a row or replace an existing row's attributes.

        Updating an existing row confirms it (``is_new`` becomes False);
        inserting a new row marks it as new.

        Args:
            table_name: Target table name.
            key: Row key, matched case-insensitively.
            attributes: Full replacement attribute mapping.
            cancel_event: Optional cancellation signal.

        Returns:
            The inserted or updated row.

        Raises:
            ReferenceTableArgumentError: If arguments are blank or missing.
            ReferenceTableNotFoundError: If the table does not exist.
        """
        operation = "upsert_row"
        require_non_blank(table_name, "table_name", operation)
        require_non_blank(key, "key", operation)
        require_not_none(attributes, "attributes", operation)
        with self._locks.hold(table_name, operation):
            raise_if_cancelled(cancel_event, operation, table_name)
            table = self._require_table(table_name, operation)
            now = utc_now()
            row = table.find_row(key)
            inserted = row is None
            if row is None:
                row = ReferenceTableRow(
                    key=key, attributes=dict(attributes), created_at=now, updated_at=now
                )
                table.rows.append(row)
            else:
                row.attributes = dict(attributes)
                row.updated_at = now
                row.is_new = False
            raise_if_cancelled(cancel_event, operation, table_name)
            table.updated_at = now
            self._storage.save(table)
        _LOGGER.info(
            "reference_table_row_upserted",
            table_name=table_name,
            key=key,
            inserted=inserted,
            attribute_count=len(row.attributes),
        )
        return row

    def delete_table(
        self,
        table_name: str,
        cancel_event: threading.Event | None = None,
    ) -> bool:
        """Delete a table; return whether it existed."""
        operation = "delete_table"
        require_non_blank(table_name, "table_name", operation)
        with self._locks.hold(table_name, operation):
            raise_if_cancelled(cancel_event, operation, table_name)
            deleted = self._storage.delete(table_name)
        _LOGGER.info("reference_table_deleted", table_name=table_name, deleted=deleted)
        return deleted

    def get_table(self, table_name: str) -> ReferenceTable | None:
        """Return the stored table, or None when absent."""
        require_non_blank(table_name, "table_name", "get_table")
        return self._storage.get(table_name)

    def list_table_names(self) -> set[str]:
        """Return the names of all stored tables."""
        return self._storage.list_names()

    def table_exists(self, table_name: str) -> bool:
        """Return whether a table with this name exists."""
        require_non_blank(table_name, "table_name", "table_exists")
        return self._storage.exists(table_name)

    def _require_table(self, table_name: str, operation: str) -> ReferenceTable:
        require_non_blank(table_name, "table_name", operation)
        table = self._storage.get(table_name)
        if table is None:
            raise ReferenceTableNotFoundError(
                f"{operation}: reference table '{table_name}' not found."
            )
        return table


def _materialize_records(data: Iterable[Any], table_name: str) -> list[Any]:
    """Return the dataset as a list.

    Raises:
        ReferenceTableArgumentError: If ``data`` is None or not a record collection.
    """
    if data is None:
        raise ReferenceTableArgumentError(
            f"sync: 'data' must not be None for table '{table_name}'."
        )
    if isinstance(data, (str, bytes, bytearray, Mapping)) or not isinstance(data, Iterable):
        raise ReferenceTableArgumentError(
            f"sync: 'data' for table '{table_name}' must be an iterable of records, "
            f"got {type(data).__name__}."
        )
    return list(data)


def _coerce_columns(
    columns: Sequence[ReferenceTableColumn | Mapping[str, Any]],
    table_name: str,
) -> list[ReferenceTableColumn]:
    """Normalize column inputs and enforce unique column names.

    Raises:
        ReferenceTableArgumentError: If a column is malformed or duplicated.
    """
    schema: list[ReferenceTableColumn] = []
    seen_names: set[str] = set()
    for column in columns:
        if isinstance(column, Mapping):
            column = _column_from_mapping(column, table_name)
        if not isinstance(column, ReferenceTableColumn):
            raise ReferenceTableArgumentError(
                f"create_table: unsupported column {column!r} for table '{table_name}'."
            )
        require_non_blank(column.name, "column.name", "create_table")
        if column.name in seen_names:
            raise ReferenceTableArgumentError(
                f"create_table: duplicate column '{column.name}' for table '{table_name}'."
            )
        seen_names.add(column.name)
        schema.append(column)
    return schema


def _column_from_mapping(payload: Mapping[str, Any], table_name: str) -> ReferenceTableColumn:
    data_type = payload.get("data_type") or payload.get("dataType") or DEFAULT_COLUMN_DATA_TYPE
    try:
        return ReferenceTableColumn(
            name=payload["name"],
            data_type=data_type,
            description=payload.get("description"),
            order=int(payload.get("order", 0)),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise ReferenceTableArgumentError(
            f"create_table: invalid column {dict(payload)!r} for table '{table_name}': {error}."
        ) from error
