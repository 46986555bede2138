"""
Partition key validity checks.

Exports grouped or joined on a column other than the partition key can
split one logical group across several partitions, silently under-counting
per-partition aggregates. That risk is surfaced as a warning, never an error.
"""

import logging
from typing import Iterable, Optional, Set

from partition_sizing.core.errors import NoUsableKeyError
from partition_sizing.core.types import PartitionKeyWarning

logger = logging.getLogger(__name__)


class PartitionKeyValidator:
    """Pre-checks run once before sizing."""

    @staticmethod
    def check_key_present(column: str, available_columns: Optional[Set[str]]) -> None:
        """
        Raise NoUsableKeyError if a known schema lacks the partition key.

        Unknown schemas (plain record iterables) pass; the profiler detects
        an absent key on those.
        """
        if available_columns is not None and column not in available_columns:
            raise NoUsableKeyError(column)

    @staticmethod
    def validate(
        column: str,
        downstream_grouping_columns: Optional[Iterable[str]] = None,
    ) -> Optional[PartitionKeyWarning]:
        """
        Compare downstream grouping/joining columns with the partition key.

        Args:
            column: Partition key column.
            downstream_grouping_columns: Columns later exports group or join on.

        Returns:
            PartitionKeyWarning listing the mismatched columns, or None when
            every grouping column is the partition key (or none are given).
        """
        mismatched = tuple(sorted(set(downstream_grouping_columns or ()) - {column}))
        if not mismatched:
            return None

        message = (
            f"Downstream grouping on {list(mismatched)} differs from partition key "
            f"'{column}'; rows of one group may be split across partitions and "
            f"per-partition aggregates will under-count"
        )
        logger.warning(message)
        return PartitionKeyWarning(
            partition_key=column,
            mismatched_columns=mismatched,
            message=message,
        )
