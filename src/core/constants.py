"""Core constants used across reference-table modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_DATA_ROOT = Path(".reftable")
DEFAULT_KEY_COLUMN_NAME = "key"
DEFAULT_COLUMN_DATA_TYPE = "string"
CONFIGURATION_DIR_NAME = "ReferenceTableConfigurations"
DATA_DIR_NAME = "ReferenceTableData"
CONFIGURATION_FILE_SUFFIX = "_config.json"
DATA_FILE_SUFFIX = "_data.json"
SNAPSHOTS_DIR_NAME = "onelake"
SNAPSHOT_TABLES_SEGMENT = "Tables"
SNAPSHOT_FILE_EXTENSION = ".json"
DEFAULT_SNAPSHOT_BASE_URI = "https://onelake.dfs.fabric.microsoft.com"
DEFAULT_LOCK_TIMEOUT_SECONDS = 30.0
SUPPORTED_STORAGE_BACKENDS = ("lakehouse", "memory")
SUPPORTED_SNAPSHOT_BACKENDS = ("memory", "local", "s3")
TABLE_DEFINITION_VERSION = 1
