"""
Partition Sizing Core
=====================

Shared enums, result types and the error taxonomy used by every engine stage.
"""

from partition_sizing.core.enums import CountingMode, DataFormat, ExecutorPolicy
from partition_sizing.core.errors import (
    DeadlineExceeded,
    EmptyDatasetError,
    InfeasibleError,
    NoUsableKeyError,
    PartitionSizingError,
    SearchExhaustedError,
)
from partition_sizing.core.types import (
    DatasetProfile,
    Key,
    PartitionKeyWarning,
    PartitionScheme,
    SizingResult,
    freeze_counts,
)

__all__ = [
    # Enums
    "CountingMode",
    "DataFormat",
    "ExecutorPolicy",
    # Errors
    "PartitionSizingError",
    "EmptyDatasetError",
    "NoUsableKeyError",
    "InfeasibleError",
    "SearchExhaustedError",
    "DeadlineExceeded",
    # Types
    "Key",
    "DatasetProfile",
    "PartitionKeyWarning",
    "PartitionScheme",
    "SizingResult",
    "freeze_counts",
]
