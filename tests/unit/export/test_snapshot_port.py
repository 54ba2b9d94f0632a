"""Unit tests for snapshot addressing and backend selection."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.config import ReferenceTableConfig
from core.errors import ReferenceTableArgumentError, ReferenceTableConfigError
from core.types import SnapshotLocation
from export.local_snapshot import LocalSnapshotStore
from export.memory_snapshot import InMemorySnapshotStore
from export.s3_snapshot import S3SnapshotStore
from export.snapshot_port import (
    build_location,
    build_snapshot_address,
    build_snapshot_store,
    snapshot_relative_key,
)


def test_build_snapshot_address_uses_tables_segment() -> None:
    """Address should be base/workspace/item/Tables/table."""
    location = SnapshotLocation(workspace_id="ws", item_id="item", table_name="Products")

    address = build_snapshot_address("https://onelake.example/", location)

    assert address == "https://onelake.example/ws/item/Tables/Products"


def test_snapshot_relative_key_appends_json_extension() -> None:
    """Backend keys should name a JSON document."""
    location = SnapshotLocation(workspace_id="ws", item_id="item", table_name="Products")

    assert snapshot_relative_key(location) == "ws/item/Tables/Products.json"


@pytest.mark.parametrize(
    ("item_id", "workspace_id", "table_name"),
    [("", "ws", "t"), ("item", " ", "t"), ("item", "ws", "")],
)
def test_build_location_rejects_blank_parts(
    item_id: str, workspace_id: str, table_name: str
) -> None:
    """Every address part must be non-blank."""
    with pytest.raises(ReferenceTableArgumentError):
        build_location(item_id, workspace_id, table_name, "store_snapshot")


def test_build_snapshot_store_selects_backend(tmp_path) -> None:
    """Factory should honor the configured snapshot backend."""
    config = replace(ReferenceTableConfig.from_env(), data_root=tmp_path)

    local_store = build_snapshot_store(config)
    memory_store = build_snapshot_store(replace(config, snapshot_backend="memory"))
    s3_store = build_snapshot_store(
        replace(config, snapshot_backend="s3", snapshot_base_uri="s3://bucket/prefix")
    )

    assert isinstance(local_store, LocalSnapshotStore)
    assert isinstance(memory_store, InMemorySnapshotStore)
    assert isinstance(s3_store, S3SnapshotStore)


def test_build_snapshot_store_requires_s3_base_uri(tmp_path) -> None:
    """S3 backend should fail without a destination URI."""
    config = replace(ReferenceTableConfig.from_env(), data_root=tmp_path, snapshot_backend="s3")

    with pytest.raises(ReferenceTableConfigError):
        build_snapshot_store(config)
