"""Unit tests for the table document codec."""

from __future__ import annotations

import pytest

from core.errors import ReferenceTableStorageError
from core.types import ReferenceTable, ReferenceTableColumn, ReferenceTableRow
from store.table_payload import rows_from_mapping_data, table_from_payload, table_to_payload


def test_table_payload_uses_camel_case_fields() -> None:
    """Configuration payload should use camelCase field names."""
    table = ReferenceTable(
        name="Products",
        columns=[ReferenceTableColumn(name="Category", data_type="string")],
        rows=[ReferenceTableRow(key="A", attributes={"Category": "Fruit"})],
    )

    payload = table_to_payload(table)

    assert payload["keyColumnName"] == "key"
    assert payload["columns"] == [
        {"name": "Category", "dataType": "string", "description": None, "order": 0}
    ]
    assert payload["rows"][0]["isNew"] is True


def test_table_from_payload_restores_metadata() -> None:
    """Decoding should restore flags, columns, and stored rows."""
    table = ReferenceTable(
        name="Products",
        columns=[ReferenceTableColumn(name="Category", order=2)],
        rows=[ReferenceTableRow(key="A", is_new=False)],
        is_visible=False,
    )

    decoded_table = table_from_payload(table_to_payload(table))

    assert decoded_table.is_visible is False
    assert decoded_table.columns[0].order == 2
    assert decoded_table.rows[0].is_new is False
    assert decoded_table.created_at == table.created_at


@pytest.mark.parametrize("payload", [[], {"rows": []}, {"name": "T", "columns": [{}]}])
def test_table_from_payload_rejects_invalid_documents(payload: object) -> None:
    """Malformed configuration documents should raise storage errors."""
    with pytest.raises(ReferenceTableStorageError):
        table_from_payload(payload)


def test_rows_from_mapping_data_strips_key_column_case_insensitively() -> None:
    """The key column should not leak into row attributes."""
    rows = rows_from_mapping_data({"A": {"KEY": "A", "Category": "Fruit"}}, "key")

    assert rows[0].key == "A"
    assert rows[0].attributes == {"Category": "Fruit"}
    assert rows[0].is_new is False


def test_rows_from_mapping_data_rejects_non_object_records() -> None:
    """Each data document record must be an object."""
    with pytest.raises(ReferenceTableStorageError):
        rows_from_mapping_data({"A": "Fruit"}, "key")
