"""
Dataset Profiler
================

Single pass over a dataset producing row totals, distinct key cardinality
and the heaviest single key. The heaviest key bounds feasibility: rows that
share a key are never split, so no partition can hold fewer rows than it.

Two counting modes:
- Exact: full key -> row count mapping. Polars frames are aggregated
  inside the engine with group_by; other iterables use a Counter.
- Approximate: bounded memory via a KMV distinct counter and a Misra-Gries
  heavy-hitter summary. No key mapping is kept, so simulation falls back
  to scanning raw rows.
"""

import logging
from collections import Counter
from typing import Any, Mapping, Optional, Union

import polars as pl

from partition_sizing.core.enums import CountingMode
from partition_sizing.core.errors import EmptyDatasetError, NoUsableKeyError
from partition_sizing.core.types import DatasetProfile, freeze_counts
from partition_sizing.engine.keys import Dataset, KeyExtractor, column_names, frame_height, is_frame
from partition_sizing.engine.sketches import HeavyHitterSummary, KMVEstimator

logger = logging.getLogger(__name__)


class DatasetProfiler:
    """
    Profiles the partition key distribution of a dataset.

    Example:
        profiler = DatasetProfiler()
        profile = profiler.profile(df, "DeviceId", max_rows_per_partition=20_000)
        print(profile.distinct_keys, profile.max_rows_for_any_single_key)
    """

    def __init__(
        self,
        exact_counting: bool = True,
        kmv_k: int = 1024,
        heavy_hitter_capacity: int = 1024,
        extractor: Optional[KeyExtractor] = None,
    ):
        """
        Initialize profiler.

        Args:
            exact_counting: Keep a full key -> count mapping (True) or use
                bounded-memory sketches (False).
            kmv_k: Number of minimum hashes kept by the distinct counter.
            heavy_hitter_capacity: Counters kept by the heavy-hitter summary.
            extractor: Key extractor (a fresh one if not provided).
        """
        self.exact_counting = exact_counting
        self.kmv_k = kmv_k
        self.heavy_hitter_capacity = heavy_hitter_capacity
        self.extractor = extractor or KeyExtractor()

    @property
    def counting_mode(self) -> CountingMode:
        return CountingMode.EXACT if self.exact_counting else CountingMode.APPROXIMATE

    def profile(
        self,
        dataset: Dataset,
        column: str,
        max_rows_per_partition: Optional[int] = None,
    ) -> DatasetProfile:
        """
        Profile the dataset on a partition key column.

        Args:
            dataset: Polars DataFrame/LazyFrame or re-iterable of records.
            column: Partition key column.
            max_rows_per_partition: Optional row ceiling; when given, keys
                holding more than half of it are counted as oversized.

        Returns:
            DatasetProfile for the column.

        Raises:
            EmptyDatasetError: If the dataset has no rows.
            NoUsableKeyError: If the key is absent on every row.
        """
        if self.exact_counting:
            if is_frame(dataset):
                profile = self._profile_frame_exact(dataset, column, max_rows_per_partition)
            else:
                profile = self._profile_rows_exact(dataset, column, max_rows_per_partition)
        else:
            profile = self._profile_rows_approximate(dataset, column, max_rows_per_partition)

        if profile.skipped_rows:
            logger.warning(
                f"Profile '{column}': {profile.skipped_rows} rows without a key skipped "
                f"(scanned={profile.rows_scanned}, usable={profile.total_rows})"
            )
        logger.info(
            f"Profiled '{column}' ({profile.counting_mode}): rows={profile.total_rows}, "
            f"distinct_keys={profile.distinct_keys}"
            f"{'' if profile.distinct_keys_exact else ' (estimated)'}, "
            f"max_rows_single_key={profile.max_rows_for_any_single_key}"
        )
        return profile

    # =========================================================================
    # Exact Counting
    # =========================================================================

    def _profile_frame_exact(
        self,
        frame: Union[pl.DataFrame, pl.LazyFrame],
        column: str,
        max_rows_per_partition: Optional[int],
    ) -> DatasetProfile:
        rows_scanned = frame_height(frame)
        if rows_scanned == 0:
            raise EmptyDatasetError(column)
        if column not in column_names(frame):
            raise NoUsableKeyError(column, rows_scanned)

        counts_df = (
            frame.lazy()
            .filter(pl.col(column).is_not_null())
            .group_by(column, maintain_order=True)
            .agg(pl.len().alias("rows"))
            .collect()
        )
        key_counts = dict(zip(counts_df.get_column(column), counts_df.get_column("rows")))
        return self._exact_profile(column, rows_scanned, key_counts, max_rows_per_partition)

    def _profile_rows_exact(
        self,
        dataset: Dataset,
        column: str,
        max_rows_per_partition: Optional[int],
    ) -> DatasetProfile:
        key_counts: Counter = Counter()
        rows_scanned = 0
        for key, present in self.extractor.extract_all(dataset, column):
            rows_scanned += 1
            if present:
                key_counts[key] += 1

        if rows_scanned == 0:
            raise EmptyDatasetError(column)
        return self._exact_profile(column, rows_scanned, key_counts, max_rows_per_partition)

    def _exact_profile(
        self,
        column: str,
        rows_scanned: int,
        key_counts: Mapping[Any, int],
        max_rows_per_partition: Optional[int],
    ) -> DatasetProfile:
        if not key_counts:
            raise NoUsableKeyError(column, rows_scanned)

        total_rows = sum(key_counts.values())
        heaviest_key = max(key_counts, key=key_counts.__getitem__)
        oversized = 0
        if max_rows_per_partition is not None:
            half = max_rows_per_partition / 2
            oversized = sum(1 for count in key_counts.values() if count > half)

        return DatasetProfile(
            column=column,
            rows_scanned=rows_scanned,
            total_rows=total_rows,
            skipped_rows=rows_scanned - total_rows,
            distinct_keys=len(key_counts),
            distinct_keys_exact=True,
            max_rows_for_any_single_key=key_counts[heaviest_key],
            heaviest_key=heaviest_key,
            oversized_key_count=oversized,
            key_counts=freeze_counts(key_counts),
            counting_mode=CountingMode.EXACT,
        )

    # =========================================================================
    # Approximate Counting
    # =========================================================================

    def _profile_rows_approximate(
        self,
        dataset: Dataset,
        column: str,
        max_rows_per_partition: Optional[int],
    ) -> DatasetProfile:
        distinct = KMVEstimator(k=self.kmv_k)
        heavy = HeavyHitterSummary(capacity=self.heavy_hitter_capacity)
        rows_scanned = 0
        total_rows = 0

        for key, present in self.extractor.extract_all(dataset, column):
            rows_scanned += 1
            if not present:
                continue
            total_rows += 1
            distinct.add(key)
            heavy.add(key)

        if rows_scanned == 0:
            raise EmptyDatasetError(column)
        if total_rows == 0:
            raise NoUsableKeyError(column, rows_scanned)

        distinct_keys, distinct_exact = distinct.estimate()
        heaviest_key, heaviest_rows = heavy.heaviest()
        oversized = 0
        if max_rows_per_partition is not None:
            oversized = heavy.count_above(max_rows_per_partition / 2)

        if not heavy.exact:
            logger.debug(
                f"Heavy-hitter summary saturated ({heavy.decremented} decrements); "
                f"single-key maximum is a lower bound"
            )

        return DatasetProfile(
            column=column,
            rows_scanned=rows_scanned,
            total_rows=total_rows,
            skipped_rows=rows_scanned - total_rows,
            distinct_keys=distinct_keys,
            distinct_keys_exact=distinct_exact,
            max_rows_for_any_single_key=heaviest_rows,
            heaviest_key=heaviest_key,
            oversized_key_count=oversized,
            key_counts=None,
            counting_mode=CountingMode.APPROXIMATE,
        )
