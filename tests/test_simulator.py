"""Tests for candidate histogram simulation."""

from collections import Counter

import polars as pl
import pytest

from partition_sizing.engine.hashing import Hasher
from partition_sizing.engine.simulator import PartitionSimulator, empty_histogram, histogram_for


@pytest.fixture
def simulator():
    return PartitionSimulator(Hasher())


class TestEmptyHistogram:
    def test_every_index_present(self):
        assert empty_histogram(3) == {0: 0, 1: 0, 2: 0}

    def test_non_positive_rejected(self):
        with pytest.raises(ValueError):
            empty_histogram(0)


class TestSimulate:
    """Tests for raw-row simulation."""

    def test_even_integer_keys(self, simulator, even_device_records):
        histogram = simulator.simulate(even_device_records, "DeviceId", 5)
        assert histogram == {i: 20_000 for i in range(5)}

    def test_dataframe_matches_records(self, simulator, even_device_df, even_device_records):
        assert simulator.simulate(even_device_df, "DeviceId", 7) == simulator.simulate(
            even_device_records, "DeviceId", 7
        )

    def test_rows_sum_to_usable_rows(self, simulator):
        records = [{"k": f"key-{i % 37}"} for i in range(1_000)] + [{"k": None}, {}]
        histogram = simulator.simulate(records, "k", 11)

        assert sum(histogram.values()) == 1_000
        assert set(histogram) == set(range(11))

    def test_same_key_same_partition(self, simulator):
        """Rows sharing a key are never split."""
        histogram = simulator.simulate([{"k": "only"}] * 50, "k", 9)
        assert sorted(histogram.values()) == [0] * 8 + [50]

    def test_equal_numeric_keys_stay_together(self, simulator):
        """1, 1.0 and True are one key, as they are in the exact profile."""
        records = [{"k": key} for key in (1, 1.0, True) for _ in range(5)]

        assert simulator.simulate(records, "k", 7) == simulator.simulate_key_counts(
            Counter(record["k"] for record in records), 7
        )
        assert sorted(simulator.simulate(records, "k", 7).values()) == [0] * 6 + [15]

    def test_empty_partitions_reported(self, simulator):
        histogram = simulator.simulate([{"k": 0}, {"k": 3}], "k", 6)
        assert histogram == {0: 1, 1: 0, 2: 0, 3: 1, 4: 0, 5: 0}


class TestSimulateKeyCounts:
    """Tests for simulation over a key -> count map."""

    def test_matches_raw_scan(self, simulator):
        records = [{"k": f"user-{i % 113}"} for i in range(5_000)]
        key_counts = Counter(record["k"] for record in records)

        for n in (1, 2, 10, 64):
            assert simulator.simulate_key_counts(key_counts, n) == simulator.simulate(
                records, "k", n
            )

    def test_single_partition_holds_everything(self, simulator):
        assert simulator.simulate_key_counts({"a": 3, "b": 4}, 1) == {0: 7}

    def test_hashed_counts_reusable(self, simulator):
        hashed = simulator.hash_key_counts({"a": 3, "b": 4, "c": 5})
        for n in (2, 3, 4):
            assert histogram_for(hashed, n) == simulator.simulate_key_counts(
                {"a": 3, "b": 4, "c": 5}, n
            )

    def test_seed_changes_layout(self):
        key_counts = {f"key-{i}": 1 for i in range(200)}
        seeded = PartitionSimulator(Hasher(seed=1)).simulate_key_counts(key_counts, 8)
        unseeded = PartitionSimulator(Hasher(seed=0)).simulate_key_counts(key_counts, 8)

        assert sum(seeded.values()) == sum(unseeded.values()) == 200
        assert seeded != unseeded

    def test_lazyframe_scan(self, simulator):
        lf = pl.DataFrame({"k": [1, 2, 3, 4]}).lazy()
        assert simulator.simulate(lf, "k", 2) == {0: 2, 1: 2}
