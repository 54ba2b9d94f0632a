"""Unit tests for the reference-table read model."""

from __future__ import annotations

import copy

from core.types import CaseInsensitiveDict, ReferenceTable, ReferenceTableRow


def test_case_insensitive_dict_matches_any_casing() -> None:
    """Lookups, membership, and deletes should ignore key casing."""
    mapping = CaseInsensitiveDict({"ProductId": "P1"})

    assert mapping["productid"] == "P1"
    assert "PRODUCTID" in mapping
    del mapping["productId"]
    assert len(mapping) == 0


def test_case_insensitive_dict_keeps_first_key_casing() -> None:
    """Reassigning through another casing should replace only the value."""
    mapping = CaseInsensitiveDict({"Category": "Fruit"})

    mapping["CATEGORY"] = "Tools"

    assert list(mapping.items()) == [("Category", "Tools")]


def test_case_insensitive_dict_compares_equal_to_plain_dict() -> None:
    """Equality should follow mapping semantics."""
    assert CaseInsensitiveDict({"a": 1}) == {"a": 1}
    assert CaseInsensitiveDict({"a": 1}) != {"A": 1}


def test_case_insensitive_dict_converts_nested_values() -> None:
    """Plain conversion should unwrap nested case-insensitive values."""
    mapping = CaseInsensitiveDict({"P1": CaseInsensitiveDict({"key": "P1"})})

    plain = mapping.to_dict()

    assert type(plain["P1"]) is dict
    assert copy.deepcopy(mapping) == plain


def test_to_mapping_data_reads_keys_case_insensitively() -> None:
    """The materialized table should resolve rows and fields in any casing."""
    table = ReferenceTable(
        name="Products",
        rows=[ReferenceTableRow(key="P1", attributes={"Category": "Tools"})],
    )

    materialized = table.to_mapping_data()

    assert materialized["p1"]["CATEGORY"] == "Tools"
    assert materialized["P1"]["KEY"] == "P1"


def test_to_mapping_keeps_one_key_column_entry() -> None:
    """An attribute named like the key column should not add a second entry."""
    row = ReferenceTableRow(key="P1", attributes={"KEY": "override"})

    assert row.to_mapping("key") == {"key": "override"}
