"""Cooperative cancellation checks for engine operations."""

from __future__ import annotations

import threading

from core.errors import ReferenceTableCancelledError


def raise_if_cancelled(
    cancel_event: threading.Event | None,
    operation: str,
    table_name: str,
) -> None:
    """Abort an operation when its cancellation event is set.

    Documents already written by the operation are left in place.

    Raises:
        ReferenceTableCancelledError: If ``cancel_event`` is set.
    """
    if cancel_event is not None and cancel_event.is_set():
        raise ReferenceTableCancelledError(
            f"{operation}: cancelled for table '{table_name}'."
        )
