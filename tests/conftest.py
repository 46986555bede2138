"""
Pytest configuration and fixtures for all tests.
"""
import hashlib

import polars as pl
import pytest

from partition_sizing.engine.execution import EXECUTOR_ENV


@pytest.fixture(autouse=True)
def thread_executor(monkeypatch):
    """
    Resolve the AUTO executor policy to threads.

    Tests that need another policy set it explicitly on SizingConfig.
    """
    monkeypatch.setenv(EXECUTOR_ENV, "threads")


@pytest.fixture
def temp_dir(tmp_path):
    """Provide a temporary directory for tests."""
    return tmp_path


@pytest.fixture
def even_device_ids():
    """100,000 DeviceIds: 500 distinct values with 200 rows each."""
    return [device for device in range(500) for _ in range(200)]


@pytest.fixture
def even_device_df(even_device_ids):
    """Evenly distributed DeviceId DataFrame."""
    return pl.DataFrame({
        "DeviceId": even_device_ids,
        "Timestamp": list(range(len(even_device_ids))),
    })


@pytest.fixture
def even_device_records(even_device_ids):
    """Evenly distributed DeviceId rows as plain dict records."""
    return [{"DeviceId": device, "ActionType": "ProcessCreated"} for device in even_device_ids]


@pytest.fixture
def skewed_device_df():
    """100,000 rows where DeviceId 0 alone holds 30,000 rows."""
    device_ids = [0] * 30_000 + [device for device in range(1, 351) for _ in range(200)]
    return pl.DataFrame({"DeviceId": device_ids})


@pytest.fixture
def file_hash_records():
    """File events keyed by SHA256 with a FileName column."""
    records = []
    for i in range(50):
        sha256 = hashlib.sha256(f"payload-{i}".encode()).hexdigest()
        for copy in range(2):
            records.append({
                "SHA256": sha256,
                "FileName": f"file_{i % 7}.exe",
                "DeviceId": copy,
            })
    return records
