"""
Error taxonomy for partition sizing.

Every error is terminal for the solve call that raised it. They describe
properties of the data or the constraint, never transient faults.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence, Tuple

if TYPE_CHECKING:
    from partition_sizing.core.types import DatasetProfile


class PartitionSizingError(Exception):
    """Base class for all sizing failures."""


class EmptyDatasetError(PartitionSizingError):
    """The dataset contains no rows."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Dataset is empty; cannot size partitions on '{column}'")


class NoUsableKeyError(PartitionSizingError):
    """The partition key column is absent (or null) on every row."""

    def __init__(self, column: str, rows_scanned: Optional[int] = None):
        self.column = column
        self.rows_scanned = rows_scanned
        if rows_scanned is None:
            message = f"Partition key column '{column}' not found in dataset schema"
        else:
            message = (
                f"Partition key column '{column}' is absent on all "
                f"{rows_scanned} scanned rows"
            )
        super().__init__(message)


class InfeasibleError(PartitionSizingError):
    """
    A single key holds more rows than the per-partition limit.

    Rows sharing a key always land in the same partition, so no partition
    count can satisfy the constraint.
    """

    def __init__(self, column: str, key: Any, key_rows: int, max_rows_per_partition: int):
        self.column = column
        self.key = key
        self.key_rows = key_rows
        self.max_rows_per_partition = max_rows_per_partition
        super().__init__(
            f"Key {key!r} in column '{column}' has {key_rows} rows, "
            f"exceeding max_rows_per_partition={max_rows_per_partition}"
        )


class SearchExhaustedError(PartitionSizingError):
    """
    No candidate partition count in the search window satisfied the limit.

    Carries the best histogram found so callers can decide whether to widen
    the window, raise the limit, or choose a different key.
    """

    def __init__(
        self,
        column: str,
        max_rows_per_partition: int,
        best_partition_count: int,
        best_histogram: Dict[int, int],
        candidates: Sequence[int],
        profile: Optional["DatasetProfile"] = None,
    ):
        self.column = column
        self.max_rows_per_partition = max_rows_per_partition
        self.best_partition_count = best_partition_count
        self.best_histogram = dict(best_histogram)
        self.candidates: Tuple[int, ...] = tuple(candidates)
        self.profile = profile
        best_max = max(self.best_histogram.values()) if self.best_histogram else 0
        super().__init__(
            f"No partition count in {list(self.candidates)} keeps '{column}' under "
            f"{max_rows_per_partition} rows; best was {best_partition_count} "
            f"partitions with max {best_max} rows"
        )


class DeadlineExceeded(PartitionSizingError, TimeoutError):
    """The solve deadline elapsed before all candidates completed."""

    def __init__(self, deadline_seconds: float, completed_candidates: Sequence[int] = ()):
        self.deadline_seconds = deadline_seconds
        self.completed_candidates: Tuple[int, ...] = tuple(completed_candidates)
        super().__init__(
            f"Sizing exceeded deadline of {deadline_seconds:.3f}s "
            f"({len(self.completed_candidates)} candidates completed)"
        )
