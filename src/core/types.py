"""Shared typed models.

This module defines the reference-table data model consumed by the
engine, storage backends, and snapshot exporters. Tables and rows are
mutable records; columns, provenance, and addresses are immutable.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from core.constants import DEFAULT_COLUMN_DATA_TYPE, DEFAULT_KEY_COLUMN_NAME

MappingData = Mapping[str, Mapping[str, Any]]


def utc_now() -> datetime:
    """Return the current timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


class CaseInsensitiveDict(MutableMapping[str, Any]):
    """Dictionary whose string keys match case-insensitively.

    Iteration yields each key with the casing it was first inserted with;
    assigning through a differently cased key replaces the value only.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._store: dict[object, tuple[str, Any]] = {}
        if data is not None:
            self.update(data)

    def __getitem__(self, key: str) -> Any:
        return self._store[_fold(key)][1]

    def __setitem__(self, key: str, value: Any) -> None:
        folded_key = _fold(key)
        existing = self._store.get(folded_key)
        self._store[folded_key] = (existing[0] if existing else key, value)

    def __delitem__(self, key: str) -> None:
        del self._store[_fold(key)]

    def __iter__(self) -> Iterator[str]:
        return (original_key for original_key, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"

    def to_dict(self) -> dict[str, Any]:
        """Return a plain dict copy, nested case-insensitive values included."""
        return {
            key: value.to_dict() if isinstance(value, CaseInsensitiveDict) else value
            for key, value in self.items()
        }


def _fold(key: object) -> object:
    return key.casefold() if isinstance(key, str) else key


@dataclass(frozen=True)
class ReferenceTableColumn:
    """Schema column declared at table creation.

    Attributes:
        name: Column name, unique within the table.
        data_type: Advisory data type label, not enforced.
        description: Optional human-readable description.
        order: Display and sort hint.
    """

    name: str
    data_type: str = DEFAULT_COLUMN_DATA_TYPE
    description: str | None = None
    order: int = 0


@dataclass(frozen=True)
class TableProvenance:
    """External source dataset a table was derived from.

    Attributes:
        source_item_id: Source lakehouse item identifier.
        source_workspace_id: Source workspace identifier.
        source_table_name: Table name inside the source item.
        source_link: Resolvable link to the source dataset.
    """

    source_item_id: str | None = None
    source_workspace_id: str | None = None
    source_table_name: str | None = None
    source_link: str | None = None

    def is_empty(self) -> bool:
        """Return whether no provenance field is set."""
        return not any(
            (
                self.source_item_id,
                self.source_workspace_id,
                self.source_table_name,
                self.source_link,
            )
        )


@dataclass
class ReferenceTableRow:
    """One keyed row in a reference table.

    Attributes:
        key: Row key, unique within the table under case-insensitive comparison.
        attributes: Attribute name to scalar value mapping.
        created_at: UTC creation timestamp.
        updated_at: UTC last-update timestamp.
        is_new: True until the row is confirmed through an upsert.
    """

    key: str
    attributes: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    is_new: bool = True

    def to_mapping(self, key_column_name: str) -> CaseInsensitiveDict:
        """Flatten the row into its read-model record.

        An attribute named like the key column overrides its value but
        keeps the key column name.
        """
        flattened = CaseInsensitiveDict({key_column_name: self.key})
        flattened.update(self.attributes)
        return flattened


@dataclass
class ReferenceTable:
    """Named lookup table of key to attribute-set mappings.

    Attributes:
        name: Table name, unique under case-insensitive comparison.
        key_column_name: Reserved key column name, fixed at creation.
        columns: Ordered schema columns.
        rows: Current row set.
        created_at: UTC creation timestamp.
        updated_at: UTC timestamp refreshed on every save.
        is_visible: Consumption visibility flag.
        notify_on_new_mapping: Flag consumed by an external notifier.
        provenance: Optional source dataset metadata.
    """

    name: str
    key_column_name: str = DEFAULT_KEY_COLUMN_NAME
    columns: list[ReferenceTableColumn] = field(default_factory=list)
    rows: list[ReferenceTableRow] = field(default_factory=list)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)
    is_visible: bool = True
    notify_on_new_mapping: bool = False
    provenance: TableProvenance = field(default_factory=TableProvenance)

    def find_row(self, key: str) -> ReferenceTableRow | None:
        """Return the row matching ``key`` case-insensitively, if any."""
        folded_key = key.casefold()
        for row in self.rows:
            if row.key.casefold() == folded_key:
                return row
        return None

    def key_set(self) -> set[str]:
        """Return casefolded keys of all current rows."""
        return {row.key.casefold() for row in self.rows}

    def to_mapping_data(self) -> CaseInsensitiveDict:
        """Materialize the table into its case-insensitive read model."""
        materialized = CaseInsensitiveDict()
        for row in self.rows:
            materialized[row.key] = row.to_mapping(self.key_column_name)
        return materialized


@dataclass(frozen=True)
class SnapshotLocation:
    """Three-part address of a published snapshot.

    Attributes:
        workspace_id: Destination workspace identifier.
        item_id: Destination item identifier.
        table_name: Snapshot table name, independent of storage table names.
    """

    workspace_id: str
    item_id: str
    table_name: str


@dataclass(frozen=True)
class CreateTableRequest:
    """Inputs for one table creation.

    Attributes:
        table_name: Table name to create.
        columns: Schema columns.
        is_visible: Consumption visibility flag.
        notify_on_new_mapping: Notification flag.
        provenance: Optional source dataset metadata.
    """

    table_name: str
    columns: tuple[ReferenceTableColumn, ...] = ()
    is_visible: bool = True
    notify_on_new_mapping: bool = False
    provenance: TableProvenance | None = None
