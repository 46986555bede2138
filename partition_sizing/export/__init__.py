"""Export slicing of sized partitions."""

from partition_sizing.export.slicing import (
    DEFAULT_PARTITION_COLUMN,
    assign_partitions,
    iter_partitions,
    write_partitions,
)

__all__ = [
    "DEFAULT_PARTITION_COLUMN",
    "assign_partitions",
    "iter_partitions",
    "write_partitions",
]
