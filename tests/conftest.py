"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop reference-table env overrides leaking from the host shell."""
    for env_name in (
        "REFTABLE_DATA_ROOT",
        "REFTABLE_STORAGE_BACKEND",
        "REFTABLE_SNAPSHOT_BACKEND",
        "REFTABLE_SNAPSHOT_BASE_URI",
        "REFTABLE_S3_REGION",
        "REFTABLE_S3_PROFILE",
        "REFTABLE_LOCK_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(env_name, raising=False)
