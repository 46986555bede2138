"""Partition key extraction from records and datasets."""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, Iterator, Optional, Set, Tuple, Union

import polars as pl

logger = logging.getLogger(__name__)

Dataset = Union[pl.DataFrame, pl.LazyFrame, Iterable[Any]]


class _NotFound:
    """Sentinel for a record without a usable partition key."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NOT_FOUND"

    def __bool__(self) -> bool:
        return False


NOT_FOUND = _NotFound()


def is_frame(dataset: Any) -> bool:
    return isinstance(dataset, (pl.DataFrame, pl.LazyFrame))


def column_names(dataset: Dataset) -> Optional[Set[str]]:
    """Schema column names for polars frames, None for plain iterables."""
    if isinstance(dataset, pl.LazyFrame):
        return set(dataset.collect_schema().names())
    if isinstance(dataset, pl.DataFrame):
        return set(dataset.columns)
    return None


def frame_height(dataset: Union[pl.DataFrame, pl.LazyFrame]) -> int:
    if isinstance(dataset, pl.LazyFrame):
        return dataset.select(pl.len()).collect().item()
    return dataset.height


class KeyExtractor:
    """
    Resolves the partition key field on records.

    Absent fields and None/null values are both reported as NOT_FOUND; the
    number of such rows from the last extract_all pass is kept in
    ``skipped`` so they are never dropped without accounting.
    """

    def __init__(self):
        self.skipped = 0

    @staticmethod
    def extract(record: Any, column: str) -> Any:
        """Key value for one record, or NOT_FOUND."""
        if isinstance(record, Mapping):
            value = record.get(column, NOT_FOUND)
        else:
            value = getattr(record, column, NOT_FOUND)
        if value is None:
            return NOT_FOUND
        return value

    def extract_all(self, dataset: Dataset, column: str) -> Iterator[Tuple[Any, bool]]:
        """
        Lazily yield (key, present) for every row of the dataset.

        Polars frames are streamed column-wise; a column missing from the
        schema reports every row as absent.
        """
        self.skipped = 0
        if is_frame(dataset):
            yield from self._extract_frame(dataset, column)
            return

        for record in dataset:
            key = self.extract(record, column)
            if key is NOT_FOUND:
                self.skipped += 1
                yield None, False
            else:
                yield key, True

    def _extract_frame(
        self,
        frame: Union[pl.DataFrame, pl.LazyFrame],
        column: str,
    ) -> Iterator[Tuple[Any, bool]]:
        if column not in column_names(frame):
            height = frame_height(frame)
            logger.debug(f"Column '{column}' not in frame schema; {height} rows absent")
            for _ in range(height):
                self.skipped += 1
                yield None, False
            return

        if isinstance(frame, pl.LazyFrame):
            series = frame.select(column).collect().get_column(column)
        else:
            series = frame.get_column(column)

        for value in series:
            if value is None:
                self.skipped += 1
                yield None, False
            else:
                yield value, True
