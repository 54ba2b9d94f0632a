"""Key accessor resolution for merge synchronization.

The key field is resolved once per sync call from the first record:
mappings are read by item, other records by attribute, and a callable
is used as the accessor directly.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping

from core.errors import ReferenceTableArgumentError

KeyAccessor = Callable[[Any], Any]


def resolve_key_accessor(sample: object, key_field: str | KeyAccessor) -> KeyAccessor:
    """Build an accessor that extracts the key value from one record.

    Args:
        sample: First record of the dataset, used to check the field exists.
        key_field: Field name, or a caller-supplied ``record -> key`` callable.

    Returns:
        Accessor returning the raw key value, or None when a later record
        lacks the field.

    Raises:
        ReferenceTableArgumentError: If the field is absent on ``sample``.
    """
    if callable(key_field):
        return key_field
    if isinstance(sample, Mapping):
        if key_field not in sample:
            raise ReferenceTableArgumentError(
                f"sync: key field '{key_field}' not found on record keys "
                f"{sorted(str(name) for name in sample)}."
            )
        return lambda record: record.get(key_field) if isinstance(record, Mapping) else None
    if not hasattr(sample, key_field):
        raise ReferenceTableArgumentError(
            f"sync: key field '{key_field}' not found on type '{type(sample).__name__}'."
        )
    return lambda record: getattr(record, key_field, None)


def key_to_string(raw_key: object) -> str | None:
    """Convert a raw key value to its row key, or None when it is null or blank."""
    if raw_key is None:
        return None
    key_string = str(raw_key)
    if not key_string.strip():
        return None
    return key_string
