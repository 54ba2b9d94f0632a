"""Unit tests for the in-memory snapshot store."""

from __future__ import annotations

import pytest

from core.errors import ReferenceTableNotFoundError
from core.types import CaseInsensitiveDict
from export import memory_snapshot
from export.memory_snapshot import InMemorySnapshotStore


def test_store_then_read_returns_independent_copy() -> None:
    """Reads should not alias the published mapping."""
    store = InMemorySnapshotStore("https://onelake.example")
    data = {"A": {"key": "A", "Category": "Fruit"}}

    address = store.store("item", "ws", "Products", data)
    data["A"]["Category"] = "Changed"
    snapshot = store.read("item", "ws", "Products")

    assert address == "https://onelake.example/ws/item/Tables/Products"
    assert snapshot["A"]["Category"] == "Fruit"


def test_store_overwrites_previous_snapshot() -> None:
    """Publishing twice should replace the snapshot."""
    store = InMemorySnapshotStore()
    store.store("item", "ws", "Products", {"A": {"key": "A"}})

    store.store("item", "ws", "Products", {"B": {"key": "B"}})

    assert store.read("item", "ws", "Products") == {"B": {"key": "B"}}


def test_read_raises_for_missing_snapshot() -> None:
    """Reading an unpublished snapshot should fail."""
    store = InMemorySnapshotStore()

    with pytest.raises(ReferenceTableNotFoundError):
        store.read("item", "ws", "Products")


def test_delete_reports_whether_snapshot_existed() -> None:
    """Delete should return True once and False afterwards."""
    store = InMemorySnapshotStore()
    store.store("item", "ws", "Products", {})

    assert store.delete("item", "ws", "Products") is True
    assert store.delete("item", "ws", "Products") is False


class _RecordingLogger:
    def __init__(self) -> None:
        self.events: list[tuple[str, dict[str, object]]] = []

    def info(self, event: str, **fields: object) -> None:
        self.events.append((event, fields))


def test_store_logs_snapshot_stored_event(monkeypatch: pytest.MonkeyPatch) -> None:
    """Publishing should emit the same event as the other snapshot stores."""
    recorder = _RecordingLogger()
    monkeypatch.setattr(memory_snapshot, "_LOGGER", recorder)
    store = InMemorySnapshotStore("https://onelake.example")

    address = store.store("item", "ws", "Products", {"A": {"key": "A"}})

    assert recorder.events == [
        (
            "snapshot_stored",
            {
                "table_name": "Products",
                "item_id": "item",
                "workspace_id": "ws",
                "record_count": 1,
                "address": address,
            },
        )
    ]


def test_store_accepts_case_insensitive_read_model() -> None:
    """Materialized table mappings should serialize as plain objects."""
    store = InMemorySnapshotStore()
    data = CaseInsensitiveDict({"A": CaseInsensitiveDict({"key": "A"})})

    store.store("item", "ws", "Products", data)

    assert store.read("item", "ws", "Products") == {"A": {"key": "A"}}
