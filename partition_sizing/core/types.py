"""
Shared data structures for partition sizing.

All results are frozen dataclasses wrapping read-only mappings: they are
created once per sizing request and never mutated afterwards.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, Hashable, Mapping, Optional, Tuple

from partition_sizing.core.enums import CountingMode

if TYPE_CHECKING:
    from partition_sizing.engine.hashing import Hasher

Key = Hashable


def freeze_counts(counts: Mapping[Any, int]) -> Mapping[Any, int]:
    """Wrap a count mapping in a read-only view over a private copy."""
    return MappingProxyType(dict(counts))


@dataclass(frozen=True)
class PartitionScheme:
    """
    A fixed partition count plus the hash configuration (seed and integer
    passthrough) that assigns keys to it.

    Assignment is always recomputed as hash(key) mod partition_count; the
    scheme itself stores no per-key state.
    """
    partition_count: int
    seed: int = 0
    integer_passthrough: bool = True

    def __post_init__(self):
        if self.partition_count <= 0:
            raise ValueError(
                f"partition_count must be positive, got {self.partition_count}"
            )

    def hasher(self) -> "Hasher":
        """Hasher matching this scheme's seed and integer passthrough."""
        from partition_sizing.engine.hashing import Hasher

        return Hasher(seed=self.seed, integer_passthrough=self.integer_passthrough)

    def assign(self, key: Key, hasher: Optional["Hasher"] = None) -> int:
        """Partition index for a key (using the scheme's own hasher if none given)."""
        return (hasher or self.hasher()).bucket(key, self.partition_count)


@dataclass(frozen=True)
class DatasetProfile:
    """
    Single-pass summary of a dataset's partition key distribution.

    Attributes:
        column: Partition key column that was profiled.
        rows_scanned: Every row seen, including rows without a key.
        total_rows: Rows with a usable key (the rows that get partitioned).
        skipped_rows: Rows where the key was absent or null.
        distinct_keys: Distinct key count (estimate in approximate mode).
        distinct_keys_exact: Whether distinct_keys is exact.
        max_rows_for_any_single_key: Largest single-key row count. In
            approximate mode this is a guaranteed lower bound.
        heaviest_key: Key holding max_rows_for_any_single_key.
        oversized_key_count: Keys with more than half the row limit; no two
            of them can share a partition. Zero when no limit was given.
        key_counts: Key -> row count (exact mode only, None otherwise).
        counting_mode: EXACT or APPROXIMATE.
    """
    column: str
    rows_scanned: int
    total_rows: int
    skipped_rows: int
    distinct_keys: int
    distinct_keys_exact: bool
    max_rows_for_any_single_key: int
    heaviest_key: Optional[Key] = None
    oversized_key_count: int = 0
    key_counts: Optional[Mapping[Key, int]] = None
    counting_mode: CountingMode = CountingMode.EXACT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "rowsScanned": self.rows_scanned,
            "totalRows": self.total_rows,
            "skippedRows": self.skipped_rows,
            "distinctKeys": self.distinct_keys,
            "distinctKeysExact": self.distinct_keys_exact,
            "maxRowsForAnySingleKey": self.max_rows_for_any_single_key,
            "countingMode": str(self.counting_mode),
        }


@dataclass(frozen=True)
class PartitionKeyWarning:
    """Downstream grouping columns that differ from the partition key."""
    partition_key: str
    mismatched_columns: Tuple[str, ...]
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "partitionKey": self.partition_key,
            "mismatchedColumns": list(self.mismatched_columns),
            "message": self.message,
        }


@dataclass(frozen=True)
class SizingResult:
    """
    Output of the minimum partition solver.

    per_partition_row_counts holds every index in [0, minimum_partition_count),
    including empty partitions, so callers can inspect skew before exporting.
    """
    minimum_partition_count: int
    per_partition_row_counts: Mapping[int, int]
    key_column_used: str
    warnings: Tuple[PartitionKeyWarning, ...] = ()
    profile: Optional[DatasetProfile] = None
    candidates_evaluated: Tuple[int, ...] = ()
    lower_bound: int = 1
    seed: int = 0
    integer_passthrough: bool = True

    @property
    def max_partition_rows(self) -> int:
        return max(self.per_partition_row_counts.values(), default=0)

    def scheme(self) -> PartitionScheme:
        """Partition scheme that reproduces this result's assignment."""
        return PartitionScheme(
            self.minimum_partition_count,
            seed=self.seed,
            integer_passthrough=self.integer_passthrough,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serializable record; partition indexes become string keys."""
        return {
            "minimumPartitionCount": self.minimum_partition_count,
            "perPartitionRowCounts": {
                str(idx): count
                for idx, count in sorted(self.per_partition_row_counts.items())
            },
            "keyColumnUsed": self.key_column_used,
            "warnings": [w.to_dict() for w in self.warnings],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)
