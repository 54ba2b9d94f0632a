"""Typed table-definition parsing for declarative table creation.

This module loads and validates YAML files that describe reference
tables (schema columns, visibility flags, and source provenance) so a
set of tables can be created in one call from a checked-in definition.
"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import DEFAULT_COLUMN_DATA_TYPE, TABLE_DEFINITION_VERSION
from core.errors import ReferenceTableDefinitionError, ReferenceTableDependencyError
from core.types import CreateTableRequest, ReferenceTableColumn, TableProvenance

_ROOT_KEYS = {"version", "tables"}
_TABLE_KEYS = {"name", "visible", "notify_on_new_mapping", "columns", "provenance"}
_COLUMN_KEYS = {"name", "data_type", "description", "order"}
_PROVENANCE_KEYS = {
    "source_item_id",
    "source_workspace_id",
    "source_table_name",
    "source_link",
}


def load_table_definitions(definition_path: str | Path) -> tuple[CreateTableRequest, ...]:
    """Load and validate a YAML table-definition file.

    Args:
        definition_path: File path to the YAML definition.

    Returns:
        One creation request per declared table, in file order.

    Raises:
        ReferenceTableDependencyError: If PyYAML is unavailable.
        ReferenceTableDefinitionError: If file is invalid or schema checks fail.
    """
    payload = _load_yaml_payload(definition_path)
    root_mapping = _expect_mapping(payload, "table definition root")
    _validate_keys(root_mapping, _ROOT_KEYS, "table definition root")
    _parse_version(root_mapping)
    return _parse_tables(root_mapping)


def _load_yaml_payload(definition_path: str | Path) -> object:
    try:
        import yaml
    except ImportError as error:  # pragma: no cover - dependency failure
        raise ReferenceTableDependencyError(
            "YAML table definitions require PyYAML. Install with 'pip install pyyaml'."
        ) from error
    definition_file = Path(definition_path).expanduser().resolve()
    if not definition_file.exists():
        raise ReferenceTableDefinitionError(
            f"Table definition file does not exist at {definition_file}. "
            "Provide a valid YAML file path."
        )
    try:
        payload = cast(object, yaml.safe_load(definition_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise ReferenceTableDefinitionError(
            f"Failed to read table definition at {definition_file}: {error}."
        ) from error
    except yaml.YAMLError as error:
        raise ReferenceTableDefinitionError(
            f"Failed to parse YAML table definition at {definition_file}: {error}. "
            "Fix YAML syntax and retry."
        ) from error
    if payload is None:
        raise ReferenceTableDefinitionError(
            f"Table definition at {definition_file} is empty. Define 'version' and 'tables'."
        )
    return payload


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise ReferenceTableDefinitionError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise ReferenceTableDefinitionError(
        f"Invalid {context}: expected object mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise ReferenceTableDefinitionError(
        f"Invalid {context}: expected list, got {type(value).__name__}."
    )


def _parse_version(root_mapping: Mapping[str, object]) -> None:
    raw_version = root_mapping.get("version")
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise ReferenceTableDefinitionError(
            f"Table definition field 'version' must be an integer. "
            f"Set version: {TABLE_DEFINITION_VERSION}."
        )
    if raw_version != TABLE_DEFINITION_VERSION:
        raise ReferenceTableDefinitionError(
            f"Unsupported table definition version {raw_version}. "
            f"Use version: {TABLE_DEFINITION_VERSION}."
        )


def _parse_tables(root_mapping: Mapping[str, object]) -> tuple[CreateTableRequest, ...]:
    raw_tables = root_mapping.get("tables")
    if raw_tables is None:
        raise ReferenceTableDefinitionError(
            "Table definition missing required field 'tables'. Add a non-empty list."
        )
    table_rows = _expect_sequence(raw_tables, "tables")
    if len(table_rows) == 0:
        raise ReferenceTableDefinitionError(
            "Table definition field 'tables' must include at least one table."
        )
    requests: list[CreateTableRequest] = []
    seen_names: set[str] = set()
    for index, table_value in enumerate(table_rows):
        request = _parse_table(table_value, index)
        folded_name = request.table_name.casefold()
        if folded_name in seen_names:
            raise ReferenceTableDefinitionError(
                f"Duplicate table name '{request.table_name}' in table definition."
            )
        seen_names.add(folded_name)
        requests.append(request)
    return tuple(requests)


def _parse_table(table_value: object, table_index: int) -> CreateTableRequest:
    context = f"table #{table_index + 1}"
    table_mapping = _expect_mapping(table_value, context)
    _validate_keys(table_mapping, _TABLE_KEYS, context)
    table_name = _optional_string(table_mapping, "name", context)
    if table_name is None:
        raise ReferenceTableDefinitionError(f"Invalid {context}: field 'name' is required.")
    return CreateTableRequest(
        table_name=table_name,
        columns=_parse_columns(table_mapping.get("columns"), f"{context} ('{table_name}')"),
        is_visible=_optional_bool(table_mapping, "visible", context, default=True),
        notify_on_new_mapping=_optional_bool(
            table_mapping, "notify_on_new_mapping", context, default=False
        ),
        provenance=_parse_provenance(table_mapping.get("provenance"), context),
    )


def _parse_columns(raw_columns: object, context: str) -> tuple[ReferenceTableColumn, ...]:
    if raw_columns is None:
        return ()
    columns: list[ReferenceTableColumn] = []
    seen_names: set[str] = set()
    for index, column_value in enumerate(_expect_sequence(raw_columns, f"{context} columns")):
        column_context = f"{context} column #{index + 1}"
        column_mapping = _expect_mapping(column_value, column_context)
        _validate_keys(column_mapping, _COLUMN_KEYS, column_context)
        name = _optional_string(column_mapping, "name", column_context)
        if name is None:
            raise ReferenceTableDefinitionError(
                f"Invalid {column_context}: field 'name' is required."
            )
        if name in seen_names:
            raise ReferenceTableDefinitionError(
                f"Duplicate column name '{name}' in {context}."
            )
        seen_names.add(name)
        raw_order = column_mapping.get("order", index)
        if not isinstance(raw_order, int) or isinstance(raw_order, bool):
            raise ReferenceTableDefinitionError(
                f"Invalid {column_context}: field 'order' must be an integer."
            )
        columns.append(
            ReferenceTableColumn(
                name=name,
                data_type=_optional_string(column_mapping, "data_type", column_context)
                or DEFAULT_COLUMN_DATA_TYPE,
                description=_optional_string(column_mapping, "description", column_context),
                order=raw_order,
            )
        )
    return tuple(columns)


def _parse_provenance(raw_provenance: object, context: str) -> TableProvenance | None:
    if raw_provenance is None:
        return None
    provenance_context = f"{context} provenance"
    provenance_mapping = _expect_mapping(raw_provenance, provenance_context)
    _validate_keys(provenance_mapping, _PROVENANCE_KEYS, provenance_context)
    return TableProvenance(
        source_item_id=_optional_string(provenance_mapping, "source_item_id", provenance_context),
        source_workspace_id=_optional_string(
            provenance_mapping, "source_workspace_id", provenance_context
        ),
        source_table_name=_optional_string(
            provenance_mapping, "source_table_name", provenance_context
        ),
        source_link=_optional_string(provenance_mapping, "source_link", provenance_context),
    )


def _optional_string(mapping: Mapping[str, object], field_name: str, context: str) -> str | None:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return None
    if isinstance(raw_value, str):
        normalized_value = raw_value.strip()
        return normalized_value if normalized_value else None
    raise ReferenceTableDefinitionError(
        f"Invalid {context}: field '{field_name}' must be a string when provided."
    )


def _optional_bool(
    mapping: Mapping[str, object],
    field_name: str,
    context: str,
    default: bool,
) -> bool:
    raw_value = mapping.get(field_name)
    if raw_value is None:
        return default
    if isinstance(raw_value, bool):
        return raw_value
    raise ReferenceTableDefinitionError(
        f"Invalid {context}: field '{field_name}' must be true or false."
    )


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise ReferenceTableDefinitionError(
            f"Invalid {context}: unknown fields {', '.join(unknown_keys)}."
        )
