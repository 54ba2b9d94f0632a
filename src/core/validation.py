"""Argument validation helpers.

Validation runs before any storage I/O so invalid calls fail fast
with a message naming the field and the operation.
"""

from __future__ import annotations

from core.errors import ReferenceTableArgumentError


def require_non_blank(value: object, field_name: str, operation: str) -> str:
    """Return ``value`` when it is a non-blank string.

    Args:
        value: Candidate value.
        field_name: Argument name for error messages.
        operation: Operation name for error messages.

    Returns:
        The validated string.

    Raises:
        ReferenceTableArgumentError: If value is missing, not a string, or blank.
    """
    if not isinstance(value, str) or not value.strip():
        raise ReferenceTableArgumentError(
            f"{operation}: '{field_name}' must be a non-blank string, got {value!r}."
        )
    return value


def require_not_none(value: object, field_name: str, operation: str) -> None:
    """Reject a missing argument.

    Raises:
        ReferenceTableArgumentError: If value is None.
    """
    if value is None:
        raise ReferenceTableArgumentError(f"{operation}: '{field_name}' must not be None.")
