"""Config package."""
from .config import (
    ExportConfig,
    PartitionSizingConfig,
    SizingConfig,
    load_config,
    save_example_config,
)

__all__ = [
    "ExportConfig",
    "PartitionSizingConfig",
    "SizingConfig",
    "load_config",
    "save_example_config",
]
