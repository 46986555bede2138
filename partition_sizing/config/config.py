"""Configuration management for partition sizing."""
import os
import yaml
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from partition_sizing.core.enums import DataFormat, ExecutorPolicy


class SizingConfig(BaseModel):
    """
    Parameters for a single sizing request.

    Frozen: the solver receives it by value and never mutates it.
    """
    model_config = ConfigDict(frozen=True)

    exact_counting: bool = Field(
        default=True,
        description="Keep an exact key -> count map. False uses bounded-memory sketches."
    )
    search_window: int = Field(
        default=10, ge=1,
        description="Number of candidate partition counts evaluated from the lower bound"
    )
    search_step: int = Field(
        default=1, ge=1,
        description="Increment between candidate partition counts"
    )
    deadline_seconds: Optional[float] = Field(
        default=None, gt=0,
        description="Overall solve deadline in seconds (None = no deadline)"
    )

    # Hashing
    hash_seed: int = Field(default=0, ge=0, description="xxHash64 seed")
    integer_passthrough: bool = Field(
        default=True,
        description="Integer keys hash to their own value instead of xxHash64"
    )

    # Execution
    executor: ExecutorPolicy = Field(
        default=ExecutorPolicy.AUTO,
        description="Candidate simulation executor: auto, threads, processes, serial"
    )
    max_workers: Optional[int] = Field(
        default=None, ge=1,
        description="Worker count for the executor (None = executor default)"
    )

    # Approximate counting
    kmv_k: int = Field(default=1024, ge=2, description="KMV sketch size for distinct counting")
    heavy_hitter_capacity: int = Field(
        default=1024, ge=1,
        description="Counters kept by the heavy-hitter summary"
    )


class ExportConfig(BaseModel):
    """Where and how partition slices are written."""
    format: DataFormat = DataFormat.PARQUET
    output_dir: str = "./partitions"
    partition_column: str = "partition"  # Name of the partition index column
    file_prefix: str = "partition"  # Files are named {prefix}_{index:04d}.{ext}


class PartitionSizingConfig(BaseModel):
    """Root configuration."""
    sizing: SizingConfig = Field(default_factory=SizingConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_config(config_path: Optional[str] = None) -> PartitionSizingConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, looks for:
            1. PARTITION_SIZING_CONFIG environment variable
            2. ./partition_sizing.yaml
            3. ~/.partition_sizing/config.yaml

    Returns:
        PartitionSizingConfig instance
    """
    if config_path is None:
        # Check environment variable
        config_path = os.environ.get("PARTITION_SIZING_CONFIG")

        if config_path is None:
            # Check default locations
            candidates = [
                Path("./partition_sizing.yaml"),
                Path.home() / ".partition_sizing" / "config.yaml",
            ]
            for candidate in candidates:
                if candidate.exists():
                    config_path = str(candidate)
                    break

    if config_path is None:
        raise FileNotFoundError(
            "No config file found. Set PARTITION_SIZING_CONFIG or create partition_sizing.yaml"
        )

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r') as f:
        yaml_data = yaml.safe_load(f) or {}

    return PartitionSizingConfig(**yaml_data)


def save_example_config(output_path: str = "./partition_sizing.example.yaml") -> Path:
    """
    Save an example configuration file.

    Args:
        output_path: Where to save the example config
    """
    example = {
        "sizing": {
            "exact_counting": True,
            "search_window": 10,
            "search_step": 1,
            "deadline_seconds": 60.0,
            "hash_seed": 0,
            "integer_passthrough": True,
            "executor": "auto",
            "max_workers": None,
            "kmv_k": 1024,
            "heavy_hitter_capacity": 1024,
        },
        "export": {
            "format": "parquet",
            "output_dir": "./partitions",
            "partition_column": "partition",
            "file_prefix": "partition",
        },
        "log_level": "INFO",
        "log_format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    }

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, 'w') as f:
        yaml.dump(example, f, default_flow_style=False, sort_keys=False)

    return output_path
