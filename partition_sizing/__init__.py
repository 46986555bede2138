"""partition-sizing - Minimum hash partition counts under a per-partition row limit."""

__version__ = "0.1.0"
__license__ = "MIT"

from partition_sizing.config import PartitionSizingConfig, SizingConfig, load_config
from partition_sizing.core import (
    DeadlineExceeded,
    EmptyDatasetError,
    InfeasibleError,
    NoUsableKeyError,
    PartitionSizingError,
    SearchExhaustedError,
    SizingResult,
)
from partition_sizing.engine import (
    DatasetProfiler,
    Hasher,
    KeyExtractor,
    MinimumPartitionSolver,
    PartitionKeyValidator,
    PartitionSimulator,
    solve,
)

__all__ = [
    "__version__",
    "PartitionSizingConfig",
    "SizingConfig",
    "load_config",
    "PartitionSizingError",
    "EmptyDatasetError",
    "NoUsableKeyError",
    "InfeasibleError",
    "SearchExhaustedError",
    "DeadlineExceeded",
    "SizingResult",
    "Hasher",
    "KeyExtractor",
    "DatasetProfiler",
    "PartitionSimulator",
    "MinimumPartitionSolver",
    "PartitionKeyValidator",
    "solve",
]
