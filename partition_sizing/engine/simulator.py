"""Histogram simulation for candidate partition counts."""

from typing import Any, Dict, List, Mapping, Sequence, Tuple

from partition_sizing.engine.hashing import Hasher
from partition_sizing.engine.keys import Dataset, KeyExtractor

HashedCounts = Sequence[Tuple[int, int]]


def empty_histogram(partition_count: int) -> Dict[int, int]:
    if partition_count <= 0:
        raise ValueError(f"partition_count must be positive, got {partition_count}")
    return dict.fromkeys(range(partition_count), 0)


def histogram_for(hashed_counts: HashedCounts, partition_count: int) -> Dict[int, int]:
    """
    Rows per partition for pre-hashed (hash, row_count) pairs.

    Module-level so process pools can pickle it.
    """
    histogram = empty_histogram(partition_count)
    for key_hash, rows in hashed_counts:
        histogram[key_hash % partition_count] += rows
    return histogram


class PartitionSimulator:
    """
    Computes per-partition row counts for a candidate partition count.

    Every row sharing a key lands in hash(key) mod N, so simulating over the
    profiler's key -> count map gives the same histogram as scanning raw
    rows, at the cost of one modulo per distinct key.
    """

    def __init__(self, hasher: Hasher):
        self.hasher = hasher

    def simulate(self, dataset: Dataset, column: str, partition_count: int) -> Dict[int, int]:
        """Histogram from a raw row scan; rows without a key are skipped."""
        histogram = empty_histogram(partition_count)
        bucket = self.hasher.bucket
        # Fresh extractor per call: candidates may run on concurrent threads.
        for key, present in KeyExtractor().extract_all(dataset, column):
            if present:
                histogram[bucket(key, partition_count)] += 1
        return histogram

    def hash_key_counts(self, key_counts: Mapping[Any, int]) -> List[Tuple[int, int]]:
        """Hash every distinct key once for reuse across candidates."""
        key_hash = self.hasher.hash
        return [(key_hash(key), rows) for key, rows in key_counts.items()]

    def simulate_key_counts(
        self,
        key_counts: Mapping[Any, int],
        partition_count: int,
    ) -> Dict[int, int]:
        """Histogram from a key -> row count mapping."""
        return histogram_for(self.hash_key_counts(key_counts), partition_count)
