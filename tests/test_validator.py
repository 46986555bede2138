"""Tests for partition key validation."""

import logging

import pytest

from partition_sizing.core.errors import NoUsableKeyError
from partition_sizing.engine.validator import PartitionKeyValidator


class TestValidate:
    """Tests for downstream grouping checks."""

    def test_no_grouping_columns(self):
        assert PartitionKeyValidator.validate("DeviceId") is None
        assert PartitionKeyValidator.validate("DeviceId", []) is None

    def test_grouping_on_partition_key(self):
        assert PartitionKeyValidator.validate("DeviceId", ["DeviceId"]) is None

    def test_mismatch_warns(self, caplog):
        with caplog.at_level(logging.WARNING):
            warning = PartitionKeyValidator.validate("SHA256", ["FileName"])

        assert warning.partition_key == "SHA256"
        assert warning.mismatched_columns == ("FileName",)
        assert "FileName" in warning.message
        assert "under-count" in caplog.text

    def test_mismatched_columns_sorted_and_deduplicated(self):
        warning = PartitionKeyValidator.validate("SHA256", ["SHA256", "FileName", "DeviceId", "FileName"])
        assert warning.mismatched_columns == ("DeviceId", "FileName")

    def test_warning_to_dict(self):
        data = PartitionKeyValidator.validate("SHA256", ["FileName"]).to_dict()
        assert data["partitionKey"] == "SHA256"
        assert data["mismatchedColumns"] == ["FileName"]


class TestCheckKeyPresent:
    """Tests for schema checks."""

    def test_present(self):
        PartitionKeyValidator.check_key_present("DeviceId", {"DeviceId", "Timestamp"})

    def test_unknown_schema_passes(self):
        PartitionKeyValidator.check_key_present("DeviceId", None)

    def test_missing(self):
        with pytest.raises(NoUsableKeyError) as exc_info:
            PartitionKeyValidator.check_key_present("DeviceId", {"Timestamp"})
        assert exc_info.value.column == "DeviceId"
        assert exc_info.value.rows_scanned is None
