"""
Bounded-memory key statistics for approximate profiling.

KMVEstimator estimates distinct key cardinality; HeavyHitterSummary tracks
the largest per-key row counts with a fixed number of counters.
"""

import bisect
from typing import Any, Dict, List, Optional, Set, Tuple

from partition_sizing.engine.hashing import Hasher


class KMVEstimator:
    """
    K-minimum-values distinct counter.

    Stays exact until 2k distinct keys have been seen, then keeps only the k
    smallest 64-bit hashes and estimates cardinality as (k - 1) / r_k.
    """

    def __init__(self, k: int = 1024, seed: int = 0):
        if k < 2:
            raise ValueError(f"k must be at least 2, got {k}")
        self.k = k
        # Passthrough would leave small integer keys clustered near zero.
        self._hasher = Hasher(seed=seed, integer_passthrough=False)
        self._exact: Optional[Set[Any]] = set()
        self._hashes: List[int] = []

    def add(self, key: Any) -> None:
        if self._exact is not None:
            self._exact.add(key)
            if len(self._exact) >= self.k * 2:
                hashes = sorted({self._hasher.hash(v) for v in self._exact})
                self._hashes = hashes[:self.k]
                self._exact = None
            return

        h = self._hasher.hash(key)
        full = len(self._hashes) >= self.k
        if full and h >= self._hashes[-1]:
            return
        idx = bisect.bisect_left(self._hashes, h)
        if idx < len(self._hashes) and self._hashes[idx] == h:
            return
        self._hashes.insert(idx, h)
        if full:
            self._hashes.pop()

    def estimate(self) -> Tuple[int, bool]:
        """(distinct count, is_exact)."""
        if self._exact is not None:
            return len(self._exact), True
        if len(self._hashes) < self.k:
            return len(self._hashes), False
        r_k = self._hashes[-1] / float(1 << 64)
        if r_k <= 0:
            return len(self._hashes), False
        return int(round((self.k - 1) / r_k)), False


class HeavyHitterSummary:
    """
    Misra-Gries frequent-items summary.

    With ``capacity`` counters, any key holding more than n / (capacity + 1)
    of n rows is guaranteed to be tracked, and every tracked count is a lower
    bound on the true count, off by at most ``decremented``. Counts are exact
    while the number of distinct keys stays within capacity.
    """

    def __init__(self, capacity: int = 1024):
        if capacity < 1:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.decremented = 0
        self._counters: Dict[Any, int] = {}

    def add(self, key: Any) -> None:
        counters = self._counters
        if key in counters:
            counters[key] += 1
        elif len(counters) < self.capacity:
            counters[key] = 1
        else:
            self.decremented += 1
            for tracked in list(counters):
                counters[tracked] -= 1
                if counters[tracked] == 0:
                    del counters[tracked]

    @property
    def exact(self) -> bool:
        return self.decremented == 0

    def heaviest(self) -> Tuple[Optional[Any], int]:
        """(key, lower-bound count) of the heaviest tracked key."""
        if not self._counters:
            return None, 0
        key = max(self._counters, key=self._counters.__getitem__)
        return key, self._counters[key]

    def count_above(self, threshold: float) -> int:
        """Tracked keys whose lower-bound count exceeds threshold."""
        return sum(1 for count in self._counters.values() if count > threshold)
