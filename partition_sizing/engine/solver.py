"""
Minimum Partition Solver
========================

Finds the smallest hash partition count whose busiest partition stays at
or under a row limit.

Algorithm:
1. Profile the key column once.
2. Fail fast when a single key alone exceeds the limit.
3. Derive a lower bound from total rows and from keys too large to share
   a partition with each other.
4. Simulate a window of candidate counts from that bound, concurrently,
   and take the smallest candidate that fits once all have completed.
"""

import logging
import os
import time
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, wait
from functools import partial
from typing import Callable, Dict, Iterable, List, Optional

from partition_sizing.config.config import SizingConfig
from partition_sizing.core.errors import (
    DeadlineExceeded,
    InfeasibleError,
    SearchExhaustedError,
)
from partition_sizing.core.types import DatasetProfile, SizingResult, freeze_counts
from partition_sizing.engine.execution import (
    EXECUTOR_ENV,
    describe_executor,
    get_executor_class,
    is_gil_enabled,
)
from partition_sizing.engine.hashing import Hasher
from partition_sizing.engine.keys import Dataset, column_names
from partition_sizing.engine.profiler import DatasetProfiler
from partition_sizing.engine.simulator import PartitionSimulator, histogram_for
from partition_sizing.engine.validator import PartitionKeyValidator

logger = logging.getLogger(__name__)

Histograms = Dict[int, Dict[int, int]]


def lower_bound(profile: DatasetProfile, max_rows_per_partition: int) -> int:
    """
    Smallest partition count that could possibly satisfy the limit.

    ceil(total_rows / limit) partitions are needed to hold every row, and
    keys holding more than half the limit cannot pair up in one partition.
    The true minimum also depends on how the hash spreads keys, hence the
    search above this bound.
    """
    by_rows = -(-profile.total_rows // max_rows_per_partition)
    return max(1, by_rows, profile.oversized_key_count)


def candidate_counts(lower: int, search_window: int, search_step: int) -> List[int]:
    """Ascending candidate partition counts starting at lower."""
    if lower < 1:
        raise ValueError(f"lower bound must be positive, got {lower}")
    if search_window < 1:
        raise ValueError(f"search_window must be positive, got {search_window}")
    if search_step < 1:
        raise ValueError(f"search_step must be positive, got {search_step}")
    return [lower + i * search_step for i in range(search_window)]


class MinimumPartitionSolver:
    """
    Sizes hash partitions for a dataset under a per-partition row ceiling.

    Example:
        solver = MinimumPartitionSolver(SizingConfig(search_window=20))
        result = solver.solve(df, "DeviceId", max_rows_per_partition=20_000)
        print(result.minimum_partition_count)
    """

    def __init__(
        self,
        config: Optional[SizingConfig] = None,
        hasher: Optional[Hasher] = None,
        profiler: Optional[DatasetProfiler] = None,
        validator: Optional[PartitionKeyValidator] = None,
    ):
        self.config = config or SizingConfig()
        self.hasher = hasher or Hasher(
            seed=self.config.hash_seed,
            integer_passthrough=self.config.integer_passthrough,
        )
        self.profiler = profiler or DatasetProfiler(
            exact_counting=self.config.exact_counting,
            kmv_k=self.config.kmv_k,
            heavy_hitter_capacity=self.config.heavy_hitter_capacity,
        )
        self.simulator = PartitionSimulator(self.hasher)
        self.validator = validator or PartitionKeyValidator()

    # =========================================================================
    # Main Entry Point
    # =========================================================================

    def solve(
        self,
        dataset: Dataset,
        column: str,
        max_rows_per_partition: int,
        group_by: Optional[Iterable[str]] = None,
    ) -> SizingResult:
        """
        Find the minimum partition count for the dataset.

        Args:
            dataset: Polars DataFrame/LazyFrame or re-iterable of records.
            column: Partition key column.
            max_rows_per_partition: Row ceiling for every partition.
            group_by: Columns downstream exports group or join on.

        Returns:
            SizingResult with the chosen count and its histogram.

        Raises:
            ValueError: If max_rows_per_partition is not positive.
            EmptyDatasetError: If the dataset has no rows.
            NoUsableKeyError: If the key is absent on every row.
            InfeasibleError: If a single key exceeds the limit.
            SearchExhaustedError: If no candidate in the window fits.
            DeadlineExceeded: If the configured deadline elapses.
        """
        if max_rows_per_partition <= 0:
            raise ValueError(
                f"max_rows_per_partition must be positive, got {max_rows_per_partition}"
            )

        total_start = time.perf_counter()
        deadline_at = None
        if self.config.deadline_seconds is not None:
            deadline_at = time.monotonic() + self.config.deadline_seconds

        executor_class = get_executor_class(self.config.executor)
        executor_override = os.environ.get(EXECUTOR_ENV, "")
        override_info = f", {EXECUTOR_ENV}={executor_override}" if executor_override else ""
        logger.info(
            f"Starting: column={column}, max_rows={max_rows_per_partition}, "
            f"executor={describe_executor(executor_class)}, "
            f"GIL={'enabled' if is_gil_enabled() else 'disabled'}{override_info}"
        )

        self.validator.check_key_present(column, column_names(dataset))
        warning = self.validator.validate(column, group_by)
        warnings = (warning,) if warning is not None else ()

        profile = self.profiler.profile(dataset, column, max_rows_per_partition)
        self._check_deadline(deadline_at, ())

        if profile.max_rows_for_any_single_key > max_rows_per_partition:
            raise InfeasibleError(
                column,
                profile.heaviest_key,
                profile.max_rows_for_any_single_key,
                max_rows_per_partition,
            )

        lower = lower_bound(profile, max_rows_per_partition)
        candidates = candidate_counts(lower, self.config.search_window, self.config.search_step)
        logger.info(
            f"Searching partition counts {candidates[0]}..{candidates[-1]} "
            f"(lower bound {lower}, step {self.config.search_step})"
        )

        histograms = self._simulate_candidates(
            dataset, column, profile, candidates, executor_class, deadline_at
        )
        for count in candidates:
            logger.debug(
                f"Candidate {count}: max partition rows {max(histograms[count].values())}"
            )

        fitting = [
            count for count in candidates
            if max(histograms[count].values()) <= max_rows_per_partition
        ]
        if not fitting:
            best = min(candidates, key=lambda count: (max(histograms[count].values()), count))
            raise SearchExhaustedError(
                column=column,
                max_rows_per_partition=max_rows_per_partition,
                best_partition_count=best,
                best_histogram=histograms[best],
                candidates=candidates,
                profile=profile,
            )

        chosen = fitting[0]
        total_time = time.perf_counter() - total_start
        logger.info(
            f"Result: {chosen} partitions, max {max(histograms[chosen].values())} rows "
            f"(total {total_time:.2f}s)"
        )
        return SizingResult(
            minimum_partition_count=chosen,
            per_partition_row_counts=freeze_counts(histograms[chosen]),
            key_column_used=column,
            warnings=warnings,
            profile=profile,
            candidates_evaluated=tuple(candidates),
            lower_bound=lower,
            seed=self.hasher.seed,
            integer_passthrough=self.hasher.integer_passthrough,
        )

    # =========================================================================
    # Candidate Simulation
    # =========================================================================

    def _simulate_candidates(
        self,
        dataset: Dataset,
        column: str,
        profile: DatasetProfile,
        candidates: List[int],
        executor_class,
        deadline_at: Optional[float],
    ) -> Histograms:
        if profile.key_counts is not None:
            hashed_counts = self.simulator.hash_key_counts(profile.key_counts)
            task: Callable[[int], Dict[int, int]] = partial(histogram_for, hashed_counts)
        else:
            # Raw record iterables may not pickle; keep raw scans in-process.
            task = partial(self.simulator.simulate, dataset, column)
            if executor_class is ProcessPoolExecutor:
                executor_class = ThreadPoolExecutor

        if executor_class is None or len(candidates) == 1:
            return self._run_serial(task, candidates, deadline_at)
        return self._run_concurrent(task, candidates, executor_class, deadline_at)

    def _run_serial(
        self,
        task: Callable[[int], Dict[int, int]],
        candidates: List[int],
        deadline_at: Optional[float],
    ) -> Histograms:
        histograms: Histograms = {}
        for count in candidates:
            self._check_deadline(deadline_at, histograms.keys())
            histograms[count] = task(count)
        return histograms

    def _run_concurrent(
        self,
        task: Callable[[int], Dict[int, int]],
        candidates: List[int],
        executor_class,
        deadline_at: Optional[float],
    ) -> Histograms:
        timeout = None
        if deadline_at is not None:
            timeout = max(0.0, deadline_at - time.monotonic())

        executor = executor_class(max_workers=self.config.max_workers)
        timed_out = False
        try:
            futures = {executor.submit(task, count): count for count in candidates}
            done, not_done = wait(futures, timeout=timeout)
            if not_done:
                timed_out = True
                for future in not_done:
                    future.cancel()
                raise DeadlineExceeded(
                    self.config.deadline_seconds,
                    sorted(futures[future] for future in done),
                )
            # Selection waits for every candidate regardless of completion order.
            return {futures[future]: future.result() for future in done}
        finally:
            executor.shutdown(wait=not timed_out, cancel_futures=True)

    def _check_deadline(self, deadline_at: Optional[float], completed: Iterable[int]) -> None:
        if deadline_at is not None and time.monotonic() >= deadline_at:
            raise DeadlineExceeded(self.config.deadline_seconds, sorted(completed))


def solve(
    dataset: Dataset,
    column: str,
    max_rows_per_partition: int,
    config: Optional[SizingConfig] = None,
    group_by: Optional[Iterable[str]] = None,
) -> SizingResult:
    """Size partitions with a one-off solver (see MinimumPartitionSolver.solve)."""
    solver = MinimumPartitionSolver(config)
    return solver.solve(dataset, column, max_rows_per_partition, group_by=group_by)
