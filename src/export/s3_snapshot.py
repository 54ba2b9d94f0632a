"""S3 snapshot store.

This module publishes snapshot documents to an S3 bucket through boto3.
Object keys mirror the address layout under the configured prefix.
"""

from __future__ import annotations

import json
from typing import Any

from core.errors import (
    ReferenceTableDependencyError,
    ReferenceTableNotFoundError,
    ReferenceTableStorageError,
)
from core.logging_config import get_logger
from core.s3_uri import parse_s3_uri
from core.types import MappingData, SnapshotLocation
from core.validation import require_not_none
from export.snapshot_port import build_location, build_snapshot_address, snapshot_relative_key
from store.json_io import dump_json_text

_LOGGER = get_logger(__name__)
_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class S3SnapshotStore:
    """Snapshot store backed by one S3 bucket and prefix."""

    def __init__(
        self,
        base_uri: str,
        s3_client: Any | None = None,
        s3_region: str | None = None,
        s3_profile: str | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            base_uri: Destination in format ``s3://bucket/prefix``.
            s3_client: Optional preconfigured boto3 S3 client.
            s3_region: Optional AWS region for a lazily created client.
            s3_profile: Optional AWS profile for a lazily created client.

        Raises:
            ReferenceTableConfigError: If ``base_uri`` is not an S3 URI.
        """
        self._location = parse_s3_uri(base_uri)
        self._base_uri = base_uri
        self._s3_client = s3_client
        self._s3_region = s3_region
        self._s3_profile = s3_profile

    def store(
        self,
        item_id: str,
        workspace_id: str,
        table_name: str,
        data: MappingData,
    ) -> str:
        """Upload a snapshot object and return its address.

        Raises:
            ReferenceTableStorageError: If serialization or upload fails.
        """
        location = build_location(item_id, workspace_id, table_name, "store_snapshot")
        require_not_none(data, "data", "store_snapshot")
        object_key = self._object_key(location)
        try:
            body = dump_json_text(data).encode("utf-8")
        except (TypeError, ValueError) as error:
            raise ReferenceTableStorageError(
                f"Failed to serialize snapshot '{table_name}' for item '{item_id}': {error}."
            ) from error
        try:
            self._client().put_object(
                Bucket=self._location.bucket,
                Key=object_key,
                Body=body,
                ContentType="application/json",
            )
        except Exception as error:
            raise ReferenceTableStorageError(
                f"Failed to store snapshot '{table_name}' to "
                f"s3://{self._location.bucket}/{object_key}: {error}. "
                "Check AWS credentials and retry export."
            ) from error
        address = build_snapshot_address(self._base_uri, location)
        _LOGGER.info(
            "snapshot_stored",
            table_name=table_name,
            item_id=item_id,
            workspace_id=workspace_id,
            record_count=len(data),
            address=address,
        )
        return address

    def read(self, item_id: str, workspace_id: str, table_name: str) -> MappingData:
        """Download and parse a snapshot object.

        Raises:
            ReferenceTableNotFoundError: If the object does not exist.
            ReferenceTableStorageError: If download or parsing fails.
        """
        location = build_location(item_id, workspace_id, table_name, "read_snapshot")
        object_key = self._object_key(location)
        try:
            response = self._client().get_object(Bucket=self._location.bucket, Key=object_key)
            raw_body = response["Body"].read()
        except Exception as error:
            if _is_missing_object_error(error):
                raise ReferenceTableNotFoundError(
                    f"read_snapshot: mapping table '{table_name}' not found for item "
                    f"'{item_id}' in workspace '{workspace_id}'."
                ) from error
            raise ReferenceTableStorageError(
                f"Failed to read snapshot s3://{self._location.bucket}/{object_key}: {error}."
            ) from error
        try:
            payload = json.loads(raw_body)
        except json.JSONDecodeError as error:
            raise ReferenceTableStorageError(
                f"Failed to parse snapshot s3://{self._location.bucket}/{object_key}: "
                f"{error.msg}."
            ) from error
        if not isinstance(payload, dict):
            raise ReferenceTableStorageError(
                f"Failed to read snapshot s3://{self._location.bucket}/{object_key}: "
                "expected JSON object at top level."
            )
        return payload

    def delete(self, item_id: str, workspace_id: str, table_name: str) -> bool:
        """Delete a snapshot object; return whether it existed.

        Raises:
            ReferenceTableStorageError: If the existence check or delete fails.
        """
        location = build_location(item_id, workspace_id, table_name, "delete_snapshot")
        object_key = self._object_key(location)
        client = self._client()
        try:
            client.head_object(Bucket=self._location.bucket, Key=object_key)
        except Exception as error:
            if _is_missing_object_error(error):
                return False
            raise ReferenceTableStorageError(
                f"Failed to inspect snapshot s3://{self._location.bucket}/{object_key}: {error}."
            ) from error
        try:
            client.delete_object(Bucket=self._location.bucket, Key=object_key)
        except Exception as error:
            raise ReferenceTableStorageError(
                f"Failed to delete snapshot s3://{self._location.bucket}/{object_key}: {error}."
            ) from error
        return True

    def address_for(self, workspace_id: str, item_id: str, table_name: str) -> str:
        """Return the snapshot address without any network call."""
        location = build_location(item_id, workspace_id, table_name, "snapshot_address")
        return build_snapshot_address(self._base_uri, location)

    def _object_key(self, location: SnapshotLocation) -> str:
        relative_key = snapshot_relative_key(location)
        if not self._location.prefix:
            return relative_key
        return f"{self._location.prefix}/{relative_key}"

    def _client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = create_s3_client(self._s3_region, self._s3_profile)
        return self._s3_client


def create_s3_client(s3_region: str | None, s3_profile: str | None) -> Any:
    """Create boto3 S3 client for snapshot exports.

    Args:
        s3_region: Optional AWS region.
        s3_profile: Optional AWS profile name.

    Returns:
        Boto3 S3 client.

    Raises:
        ReferenceTableDependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise ReferenceTableDependencyError(
            "S3 snapshot export requires boto3, but it is not installed. "
            "Install boto3 to export snapshots to s3:// destinations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if s3_profile:
        session_kwargs["profile_name"] = s3_profile
    if s3_region:
        session_kwargs["region_name"] = s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def _is_missing_object_error(error: Exception) -> bool:
    """Return whether a boto3 error reports a missing object."""
    response = getattr(error, "response", None)
    if not isinstance(response, dict):
        return False
    error_code = str(response.get("Error", {}).get("Code", ""))
    return error_code in _MISSING_OBJECT_CODES
