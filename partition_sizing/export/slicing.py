"""
Partition slicing for export.

Splits a DataFrame into the hash partitions chosen by the solver so each
slice can be exported under the interface row limit. Assignment uses the
same Hasher as sizing, so slice sizes match the simulated histogram.

Usage:
    result = solve(df, "DeviceId", max_rows_per_partition=20_000)
    for index, part in iter_partitions(df, "DeviceId", result.scheme()):
        print(f"Partition {index}: {len(part)} rows")
"""

import logging
from pathlib import Path
from typing import Generator, List, Optional, Tuple, Union

import polars as pl

from partition_sizing.core.enums import DataFormat
from partition_sizing.core.types import PartitionScheme
from partition_sizing.engine.hashing import Hasher
from partition_sizing.engine.keys import column_names
from partition_sizing.engine.validator import PartitionKeyValidator

logger = logging.getLogger(__name__)

DEFAULT_PARTITION_COLUMN = "partition"

Frame = Union[pl.DataFrame, pl.LazyFrame]


def assign_partitions(
    df: Frame,
    column: str,
    scheme: PartitionScheme,
    hasher: Optional[Hasher] = None,
    alias: str = DEFAULT_PARTITION_COLUMN,
) -> Frame:
    """
    Add a UInt32 partition index column derived from the key column.

    Each distinct key is hashed once; rows without a key get a null index.

    Args:
        df: Input DataFrame or LazyFrame
        column: Partition key column
        scheme: Partition count and seed
        hasher: Hasher used for sizing (default: scheme.hasher())
        alias: Name of the partition index column

    Returns:
        Frame of the same kind with the index column appended

    Raises:
        NoUsableKeyError: If the key column is not in the frame
        ValueError: If the alias collides with an existing column
    """
    available = column_names(df)
    PartitionKeyValidator.check_key_present(column, available)
    if alias in available:
        raise ValueError(f"Partition column '{alias}' already exists in frame")

    hasher = hasher or scheme.hasher()
    keys = (
        df.lazy()
        .select(pl.col(column).drop_nulls().unique(maintain_order=True))
        .collect()
        .get_column(column)
        .to_list()
    )
    if not keys:
        return df.with_columns(pl.lit(None, dtype=pl.UInt32).alias(alias))

    indexes = [scheme.assign(key, hasher) for key in keys]
    return df.with_columns(
        pl.col(column)
        .replace_strict(keys, indexes, default=None, return_dtype=pl.UInt32)
        .alias(alias)
    )


def iter_partitions(
    df: Frame,
    column: str,
    scheme: PartitionScheme,
    hasher: Optional[Hasher] = None,
    alias: str = DEFAULT_PARTITION_COLUMN,
) -> Generator[Tuple[int, pl.DataFrame], None, None]:
    """
    Yield (partition_index, slice) for every index in [0, partition_count).

    Empty partitions are yielded as empty frames. Rows without a key belong
    to no partition and are logged as skipped.
    """
    assigned = assign_partitions(df, column, scheme, hasher=hasher, alias=alias)
    if isinstance(assigned, pl.LazyFrame):
        assigned = assigned.collect()

    unassigned = assigned.get_column(alias).null_count()
    if unassigned:
        logger.warning(f"{unassigned} rows without '{column}' excluded from all partitions")

    for index in range(scheme.partition_count):
        yield index, assigned.filter(pl.col(alias) == index).drop(alias)


def write_partitions(
    df: Frame,
    column: str,
    scheme: PartitionScheme,
    output_dir: Union[str, Path],
    fmt: DataFormat = DataFormat.PARQUET,
    hasher: Optional[Hasher] = None,
    file_prefix: str = DEFAULT_PARTITION_COLUMN,
    alias: str = DEFAULT_PARTITION_COLUMN,
) -> List[Path]:
    """
    Write one file per partition slice.

    Files are named {file_prefix}_{index:04d}.{format}.

    Returns:
        Paths of the written files, in partition order
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)
    fmt = DataFormat(fmt)

    written = []
    for index, part in iter_partitions(df, column, scheme, hasher=hasher, alias=alias):
        path = output_path / f"{file_prefix}_{index:04d}.{fmt.value}"
        if fmt == DataFormat.PARQUET:
            part.write_parquet(path)
        elif fmt == DataFormat.CSV:
            part.write_csv(path)
        else:
            part.write_ndjson(path)
        logger.debug(f"Wrote partition {index}: {len(part)} rows -> {path}")
        written.append(path)

    logger.info(f"Wrote {len(written)} partitions to {output_path}")
    return written
