"""Reference-table exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each failure kind raises a specific error type so callers can map it
onto their own transport-level error codes.
"""

from __future__ import annotations


class ReferenceTableError(Exception):
    """Base exception for all reference-table failures."""


class ReferenceTableArgumentError(ReferenceTableError):
    """Raised for blank names, missing inputs, or unknown key fields."""


class ReferenceTableExistsError(ReferenceTableError):
    """Raised when creating a table whose name is already taken."""


class ReferenceTableNotFoundError(ReferenceTableError):
    """Raised when an operation targets a table or snapshot that is absent."""


class ReferenceTableStorageError(ReferenceTableError):
    """Raised for persistence and serialization failures."""


class ReferenceTableLockTimeoutError(ReferenceTableStorageError):
    """Raised when a per-table lock cannot be acquired in time."""


class ReferenceTableConfigError(ReferenceTableError):
    """Raised for invalid runtime configuration."""


class ReferenceTableDependencyError(ReferenceTableError):
    """Raised when an optional runtime dependency is missing."""


class ReferenceTableDefinitionError(ReferenceTableError):
    """Raised for invalid or unsupported table-definition files."""


class ReferenceTableCancelledError(ReferenceTableError):
    """Raised when an operation observes an external cancellation signal."""
