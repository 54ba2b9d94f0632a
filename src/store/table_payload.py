"""Shared JSON serialization for reference-table documents.

This module centralizes the camelCase configuration-document codec and
the conversion between row objects and the flattened data document.
It is reused by the durable backend and the snapshot exporters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from core.constants import DEFAULT_COLUMN_DATA_TYPE, DEFAULT_KEY_COLUMN_NAME
from core.errors import ReferenceTableStorageError
from core.types import (
    MappingData,
    ReferenceTable,
    ReferenceTableColumn,
    ReferenceTableRow,
    TableProvenance,
    utc_now,
)


def table_to_payload(table: ReferenceTable) -> dict[str, object]:
    """Serialize a table into its configuration-document payload.

    Args:
        table: Table to serialize, rows included.

    Returns:
        JSON-safe dictionary with camelCase field names.
    """
    provenance = table.provenance
    return {
        "name": table.name,
        "keyColumnName": table.key_column_name,
        "columns": [_column_to_payload(column) for column in table.columns],
        "rows": [_row_to_payload(row) for row in table.rows],
        "createdAt": table.created_at.isoformat(),
        "updatedAt": table.updated_at.isoformat(),
        "isVisible": table.is_visible,
        "notifyOnNewMapping": table.notify_on_new_mapping,
        "sourceLakehouseItemId": provenance.source_item_id,
        "sourceWorkspaceId": provenance.source_workspace_id,
        "sourceTableName": provenance.source_table_name,
        "sourceOneLakeLink": provenance.source_link,
    }


def table_from_payload(payload: object) -> ReferenceTable:
    """Deserialize a configuration-document payload into a table.

    Args:
        payload: Parsed configuration document.

    Returns:
        Table with rows as stored in the configuration document.

    Raises:
        ReferenceTableStorageError: If the payload is not a table document.
    """
    if not isinstance(payload, dict) or not isinstance(payload.get("name"), str):
        raise ReferenceTableStorageError(
            "Invalid table configuration document: expected object with a 'name' string."
        )
    try:
        return ReferenceTable(
            name=payload["name"],
            key_column_name=str(payload.get("keyColumnName") or DEFAULT_KEY_COLUMN_NAME),
            columns=[_column_from_payload(item) for item in payload.get("columns") or []],
            rows=[_row_from_payload(item) for item in payload.get("rows") or []],
            created_at=_parse_timestamp(payload.get("createdAt")),
            updated_at=_parse_timestamp(payload.get("updatedAt")),
            is_visible=bool(payload.get("isVisible", True)),
            notify_on_new_mapping=bool(payload.get("notifyOnNewMapping", False)),
            provenance=TableProvenance(
                source_item_id=payload.get("sourceLakehouseItemId"),
                source_workspace_id=payload.get("sourceWorkspaceId"),
                source_table_name=payload.get("sourceTableName"),
                source_link=payload.get("sourceOneLakeLink"),
            ),
        )
    except (KeyError, TypeError, ValueError) as error:
        raise ReferenceTableStorageError(
            f"Invalid configuration document for table '{payload['name']}': {error}."
        ) from error


def rows_to_mapping_data(table: ReferenceTable) -> MappingData:
    """Flatten table rows into the key to record data document."""
    return table.to_mapping_data()


def rows_from_mapping_data(data: Mapping[str, Any], key_column_name: str) -> list[ReferenceTableRow]:
    """Rebuild rows from a flattened data document.

    Row timestamps are not part of the data document, so rebuilt rows get
    fresh timestamps and are marked as confirmed.

    Args:
        data: Parsed data document.
        key_column_name: Key column to strip from each record.

    Returns:
        Rows in document order.

    Raises:
        ReferenceTableStorageError: If a record is not an object.
    """
    folded_key_column = key_column_name.casefold()
    rows: list[ReferenceTableRow] = []
    for key, record in data.items():
        if not isinstance(record, Mapping):
            raise ReferenceTableStorageError(
                f"Invalid data document record for key '{key}': expected object."
            )
        attributes = {
            name: value for name, value in record.items() if name.casefold() != folded_key_column
        }
        now = utc_now()
        rows.append(
            ReferenceTableRow(
                key=str(key),
                attributes=attributes,
                created_at=now,
                updated_at=now,
                is_new=False,
            )
        )
    return rows


def _column_to_payload(column: ReferenceTableColumn) -> dict[str, object]:
    return {
        "name": column.name,
        "dataType": column.data_type,
        "description": column.description,
        "order": column.order,
    }


def _column_from_payload(payload: Mapping[str, Any]) -> ReferenceTableColumn:
    return ReferenceTableColumn(
        name=str(payload["name"]),
        data_type=str(payload.get("dataType") or DEFAULT_COLUMN_DATA_TYPE),
        description=payload.get("description"),
        order=int(payload.get("order", 0)),
    )


def _row_to_payload(row: ReferenceTableRow) -> dict[str, object]:
    return {
        "key": row.key,
        "attributes": dict(row.attributes),
        "createdAt": row.created_at.isoformat(),
        "updatedAt": row.updated_at.isoformat(),
        "isNew": row.is_new,
    }


def _row_from_payload(payload: Mapping[str, Any]) -> ReferenceTableRow:
    return ReferenceTableRow(
        key=str(payload["key"]),
        attributes=dict(payload.get("attributes") or {}),
        created_at=_parse_timestamp(payload.get("createdAt")),
        updated_at=_parse_timestamp(payload.get("updatedAt")),
        is_new=bool(payload.get("isNew", True)),
    )


def _parse_timestamp(raw_value: object) -> datetime:
    if raw_value is None:
        return utc_now()
    return datetime.fromisoformat(str(raw_value))
