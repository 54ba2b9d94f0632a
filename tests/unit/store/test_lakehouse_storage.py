"""Unit tests for durable two-document table storage."""

from __future__ import annotations

import json

import pytest

from core.errors import ReferenceTableStorageError
from core.types import ReferenceTable, ReferenceTableColumn, ReferenceTableRow, TableProvenance
from store.lakehouse_storage import LakehouseTableStorage


def _sample_table() -> ReferenceTable:
    return ReferenceTable(
        name="Products",
        columns=[ReferenceTableColumn(name="Category", description="Label", order=1)],
        rows=[
            ReferenceTableRow(key="A", attributes={"Category": "Fruit"}),
            ReferenceTableRow(key="B"),
        ],
        notify_on_new_mapping=True,
        provenance=TableProvenance(source_table_name="dim_products"),
    )


def test_save_writes_configuration_and_data_documents(tmp_path) -> None:
    """Save should write both documents under the base path."""
    storage = LakehouseTableStorage(tmp_path)

    storage.save(_sample_table())

    configuration = json.loads(storage.configuration_path("Products").read_text("utf-8"))
    data = json.loads(storage.data_path("Products").read_text("utf-8"))
    assert configuration["name"] == "Products"
    assert configuration["notifyOnNewMapping"] is True
    assert configuration["sourceTableName"] == "dim_products"
    assert data == {"A": {"key": "A", "Category": "Fruit"}, "B": {"key": "B"}}


def test_document_paths_use_expected_layout(tmp_path) -> None:
    """Documents should live in the configuration and data directories."""
    storage = LakehouseTableStorage(tmp_path)

    assert storage.configuration_path("Products").parent.name == "ReferenceTableConfigurations"
    assert storage.data_path("Products").name == "products_data.json"


def test_get_rebuilds_rows_from_data_document(tmp_path) -> None:
    """Loaded rows should come from the data document and be confirmed."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(_sample_table())

    loaded_table = storage.get("products")

    assert loaded_table is not None
    assert loaded_table.to_mapping_data() == _sample_table().to_mapping_data()
    assert all(row.is_new is False for row in loaded_table.rows)
    assert loaded_table.columns[0].description == "Label"


def test_get_returns_none_without_configuration_document(tmp_path) -> None:
    """Missing configuration document should mean an absent table."""
    storage = LakehouseTableStorage(tmp_path)

    assert storage.get("Products") is None


def test_get_tolerates_missing_data_document(tmp_path) -> None:
    """A table without a data document should load with no rows."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(_sample_table())
    storage.data_path("Products").unlink()

    loaded_table = storage.get("Products")

    assert loaded_table is not None
    assert loaded_table.rows == []


def test_get_raises_for_corrupt_configuration_document(tmp_path) -> None:
    """Unparseable documents should surface as storage errors."""
    storage = LakehouseTableStorage(tmp_path)
    configuration_path = storage.configuration_path("Products")
    configuration_path.parent.mkdir(parents=True)
    configuration_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ReferenceTableStorageError):
        storage.get("Products")


def test_list_names_keeps_original_casing(tmp_path) -> None:
    """Listed names should come from the stored configuration."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(_sample_table())
    storage.save(ReferenceTable(name="Regions"))

    assert storage.list_names() == {"Products", "Regions"}


def test_delete_removes_both_documents(tmp_path) -> None:
    """Delete should remove configuration and data documents."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(_sample_table())

    assert storage.delete("PRODUCTS") is True
    assert not storage.configuration_path("Products").exists()
    assert not storage.data_path("Products").exists()
    assert storage.delete("Products") is False


def test_save_leaves_no_temp_files(tmp_path) -> None:
    """Atomic writes should not leave temp files behind."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(_sample_table())

    assert list(tmp_path.rglob("*.tmp")) == []


@pytest.mark.parametrize(
    ("first_name", "second_name"),
    [("ab", "a:b"), ("xy", "x?y"), ("a b", "a b "), ("a.b", "a%2Eb")],
)
def test_names_differing_beyond_case_use_separate_documents(
    tmp_path, first_name: str, second_name: str
) -> None:
    """Only casing may map two table names onto the same documents."""
    storage = LakehouseTableStorage(tmp_path)
    storage.save(ReferenceTable(name=first_name, rows=[ReferenceTableRow(key="K1")]))

    assert storage.exists(second_name) is False
    storage.save(ReferenceTable(name=second_name))

    first_table = storage.get(first_name)
    second_table = storage.get(second_name)
    assert first_table is not None and second_table is not None
    assert (first_table.name, len(first_table.rows)) == (first_name, 1)
    assert (second_table.name, second_table.rows) == (second_name, [])
    assert storage.list_names() == {first_name, second_name}


@pytest.mark.parametrize("table_name", ["..", ".", "a/../b"])
def test_document_paths_stay_inside_their_directory(tmp_path, table_name: str) -> None:
    """Path-like names should never escape the document directories."""
    storage = LakehouseTableStorage(tmp_path)

    configuration_path = storage.configuration_path(table_name)

    assert configuration_path.parent == tmp_path.resolve() / "ReferenceTableConfigurations"
