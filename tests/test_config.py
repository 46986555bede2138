"""
Unit Tests for Configuration
============================

Tests for the pydantic config models and YAML loading.
"""

import pytest
import yaml
from pydantic import ValidationError

from partition_sizing.config.config import (
    ExportConfig,
    PartitionSizingConfig,
    SizingConfig,
    load_config,
    save_example_config,
)
from partition_sizing.core.enums import DataFormat, ExecutorPolicy


class TestSizingConfig:
    """Tests for SizingConfig."""

    def test_defaults(self):
        config = SizingConfig()

        assert config.exact_counting
        assert config.search_window == 10
        assert config.search_step == 1
        assert config.deadline_seconds is None
        assert config.hash_seed == 0
        assert config.integer_passthrough
        assert config.executor == ExecutorPolicy.AUTO

    def test_frozen(self):
        config = SizingConfig()
        with pytest.raises(ValidationError):
            config.search_window = 3

    @pytest.mark.parametrize(
        "field,value",
        [
            ("search_window", 0),
            ("search_step", 0),
            ("deadline_seconds", 0),
            ("hash_seed", -1),
            ("max_workers", 0),
            ("kmv_k", 1),
            ("executor", "gpu"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            SizingConfig(**{field: value})

    def test_executor_from_string(self):
        assert SizingConfig(executor="serial").executor == ExecutorPolicy.SERIAL


class TestExportConfig:
    def test_defaults(self):
        config = ExportConfig()
        assert config.format == DataFormat.PARQUET
        assert config.partition_column == "partition"


class TestLoadConfig:
    """Tests for load_config."""

    def test_explicit_path(self, temp_dir):
        path = temp_dir / "sizing.yaml"
        path.write_text(yaml.dump({
            "sizing": {"search_window": 25, "executor": "threads"},
            "export": {"format": "csv"},
            "log_level": "DEBUG",
        }))

        config = load_config(str(path))

        assert config.sizing.search_window == 25
        assert config.sizing.executor == ExecutorPolicy.THREADS
        assert config.export.format == DataFormat.CSV
        assert config.log_level == "DEBUG"

    def test_empty_file_gives_defaults(self, temp_dir):
        path = temp_dir / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == PartitionSizingConfig()

    def test_environment_variable(self, temp_dir, monkeypatch):
        path = temp_dir / "env.yaml"
        path.write_text(yaml.dump({"sizing": {"hash_seed": 7}}))
        monkeypatch.setenv("PARTITION_SIZING_CONFIG", str(path))

        assert load_config().sizing.hash_seed == 7

    def test_working_directory_file(self, temp_dir, monkeypatch):
        (temp_dir / "partition_sizing.yaml").write_text(yaml.dump({"sizing": {"search_step": 4}}))
        monkeypatch.delenv("PARTITION_SIZING_CONFIG", raising=False)
        monkeypatch.chdir(temp_dir)

        assert load_config().sizing.search_step == 4

    def test_no_config_found(self, temp_dir, monkeypatch):
        monkeypatch.delenv("PARTITION_SIZING_CONFIG", raising=False)
        monkeypatch.chdir(temp_dir)
        monkeypatch.setenv("HOME", str(temp_dir))

        with pytest.raises(FileNotFoundError):
            load_config()

    def test_missing_explicit_path(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            load_config(str(temp_dir / "nope.yaml"))

    def test_invalid_values_rejected(self, temp_dir):
        path = temp_dir / "bad.yaml"
        path.write_text(yaml.dump({"sizing": {"search_window": 0}}))
        with pytest.raises(ValidationError):
            load_config(str(path))


class TestSaveExampleConfig:
    def test_example_loads(self, temp_dir):
        path = save_example_config(str(temp_dir / "nested" / "example.yaml"))

        assert path.exists()
        config = load_config(str(path))
        assert config.sizing.deadline_seconds == 60.0
        assert config.export.format == DataFormat.PARQUET

    def test_example_documents_every_field(self, temp_dir):
        path = save_example_config(str(temp_dir / "example.yaml"))
        example = yaml.safe_load(path.read_text())

        assert set(example["sizing"]) == set(SizingConfig.model_fields)
        assert set(example["export"]) == set(ExportConfig.model_fields)
        assert {"log_level", "log_format"} <= set(example)
