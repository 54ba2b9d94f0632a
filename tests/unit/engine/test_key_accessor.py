"""Unit tests for key accessor resolution."""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from core.errors import ReferenceTableArgumentError
from engine.key_accessor import key_to_string, resolve_key_accessor


@dataclass
class _Product:
    ProductId: str | None


def test_resolve_key_accessor_reads_mapping_items() -> None:
    """Mapping records should be read by item."""
    accessor = resolve_key_accessor({"ProductId": "A"}, "ProductId")

    assert accessor({"ProductId": "B"}) == "B"
    assert accessor({"Other": "C"}) is None


def test_resolve_key_accessor_reads_object_attributes() -> None:
    """Object records should be read by attribute."""
    accessor = resolve_key_accessor(_Product("A"), "ProductId")

    assert accessor(_Product("B")) == "B"


def test_resolve_key_accessor_passes_callables_through() -> None:
    """A callable key field should be used as-is."""
    accessor = resolve_key_accessor({"id": 1}, lambda record: record["id"] * 2)

    assert accessor({"id": 3}) == 6


@pytest.mark.parametrize("sample", [{"Other": "A"}, _Product("A")])
def test_resolve_key_accessor_rejects_unknown_field(sample: object) -> None:
    """Unknown key fields should fail on the first record."""
    with pytest.raises(ReferenceTableArgumentError):
        resolve_key_accessor(sample, "Missing")


@pytest.mark.parametrize(("raw_key", "expected"), [(None, None), ("  ", None), (42, "42")])
def test_key_to_string_skips_null_and_blank(raw_key: object, expected: str | None) -> None:
    """Null and blank keys should be dropped; others stringified."""
    assert key_to_string(raw_key) == expected
