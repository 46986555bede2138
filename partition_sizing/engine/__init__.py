"""
Partition Sizing Engine
=======================

Pipeline stages, leaves first:
- Hasher: deterministic non-cryptographic key hashing and bucketing
- KeyExtractor: partition key lookup with absent-row accounting
- DatasetProfiler: row totals, distinct keys, heaviest key
- PartitionSimulator: per-partition histogram for a candidate count
- MinimumPartitionSolver: smallest count whose busiest partition fits
- PartitionKeyValidator: partition key vs downstream grouping checks
"""

from partition_sizing.engine.hashing import Hasher, key_to_bytes
from partition_sizing.engine.keys import NOT_FOUND, Dataset, KeyExtractor, column_names
from partition_sizing.engine.profiler import DatasetProfiler
from partition_sizing.engine.simulator import PartitionSimulator, histogram_for
from partition_sizing.engine.sketches import HeavyHitterSummary, KMVEstimator
from partition_sizing.engine.solver import (
    MinimumPartitionSolver,
    candidate_counts,
    lower_bound,
    solve,
)
from partition_sizing.engine.validator import PartitionKeyValidator

__all__ = [
    "Hasher",
    "key_to_bytes",
    "NOT_FOUND",
    "Dataset",
    "KeyExtractor",
    "column_names",
    "DatasetProfiler",
    "PartitionSimulator",
    "histogram_for",
    "HeavyHitterSummary",
    "KMVEstimator",
    "MinimumPartitionSolver",
    "candidate_counts",
    "lower_bound",
    "solve",
    "PartitionKeyValidator",
]
