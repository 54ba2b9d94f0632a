"""JSON document I/O helpers for table and snapshot persistence."""

from __future__ import annotations

from collections.abc import Mapping
import json
import os
from pathlib import Path

from core.errors import ReferenceTableStorageError


def read_json_document(document_path: Path, default_value: object | None = None) -> object:
    """Read one JSON document, returning ``default_value`` when it is missing."""
    if default_value is not None and not document_path.exists():
        return default_value
    try:
        return json.loads(document_path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise ReferenceTableStorageError(f"Missing document at {document_path}.") from error
    except json.JSONDecodeError as error:
        raise ReferenceTableStorageError(
            f"Failed to parse JSON document at {document_path}: {error.msg}."
        ) from error
    except OSError as error:
        raise ReferenceTableStorageError(
            f"Failed to read document {document_path}: {error}."
        ) from error


def write_json_document(document_path: Path, payload: object) -> None:
    """Write one JSON document, replacing any previous version atomically.

    The payload is written to a sibling temp file and moved into place, so
    readers see either the old or the new document, never a torn write.
    """
    temp_path = document_path.with_name(document_path.name + ".tmp")
    try:
        document_path.parent.mkdir(parents=True, exist_ok=True)
        text = dump_json_text(payload) + "\n"
        temp_path.write_text(text, encoding="utf-8")
        os.replace(temp_path, document_path)
    except (TypeError, ValueError) as error:
        raise ReferenceTableStorageError(
            f"Failed to serialize document {document_path}: {error}."
        ) from error
    except OSError as error:
        raise ReferenceTableStorageError(
            f"Failed to write document {document_path}: {error}."
        ) from error


def delete_document(document_path: Path) -> bool:
    """Delete one document; return whether it existed."""
    try:
        document_path.unlink()
    except FileNotFoundError:
        return False
    except OSError as error:
        raise ReferenceTableStorageError(
            f"Failed to delete document {document_path}: {error}."
        ) from error
    return True


def dump_json_text(payload: object) -> str:
    """Serialize a document, writing any mapping type as a JSON object.

    Raises:
        TypeError: If the payload holds a non-JSON value.
        ValueError: If the payload holds a circular reference.
    """
    return json.dumps(payload, indent=2, ensure_ascii=False, default=_encode_mapping)


def _encode_mapping(value: object) -> dict[object, object]:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
