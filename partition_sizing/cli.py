"""
Size Hash Partitions for Export
===============================

Finds the smallest number of hash partitions that keeps every partition of
a dataset under a row limit, prints the sizing result as JSON and optionally
writes one file per partition.

Usage:
    # Size a CSV export on DeviceId with a 20k row interface limit
    partition-sizing events.csv --column DeviceId --max-rows 20000

    # Warn if downstream aggregation groups on another column
    partition-sizing events.parquet --column SHA256 --max-rows 50000 --group-by FileName

    # Size and write the partitions
    partition-sizing events.parquet --column DeviceId --max-rows 20000 --export-dir ./out
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import polars as pl

from partition_sizing.config.config import PartitionSizingConfig, load_config
from partition_sizing.core.enums import DataFormat, ExecutorPolicy
from partition_sizing.core.errors import (
    InfeasibleError,
    PartitionSizingError,
    SearchExhaustedError,
)
from partition_sizing.engine.hashing import Hasher
from partition_sizing.engine.solver import MinimumPartitionSolver
from partition_sizing.export.slicing import write_partitions

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_USAGE = 1
# argparse exits with 2 on malformed arguments.
EXIT_SIZING_FAILED = 3

SUFFIX_FORMATS = {
    ".csv": DataFormat.CSV,
    ".parquet": DataFormat.PARQUET,
    ".pq": DataFormat.PARQUET,
    ".ndjson": DataFormat.NDJSON,
    ".jsonl": DataFormat.NDJSON,
}


def read_dataset(path: Path) -> pl.LazyFrame:
    """Scan an input file with the polars reader matching its suffix."""
    fmt = SUFFIX_FORMATS.get(path.suffix.lower())
    if fmt is None:
        raise ValueError(
            f"Unsupported input suffix '{path.suffix}' (expected one of {sorted(SUFFIX_FORMATS)})"
        )
    if fmt == DataFormat.CSV:
        return pl.scan_csv(path)
    if fmt == DataFormat.PARQUET:
        return pl.scan_parquet(path)
    return pl.scan_ndjson(path)


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="partition-sizing",
        description="Find the minimum hash partition count under a per-partition row limit.",
        epilog=(
            f"exit codes: {EXIT_OK} success, {EXIT_USAGE} bad input or config, "
            f"2 malformed arguments, {EXIT_SIZING_FAILED} sizing failed"
        ),
    )
    parser.add_argument("input_file", help="Dataset to size (.csv, .parquet, .ndjson)")
    parser.add_argument("--column", required=True, help="Partition key column")
    parser.add_argument("--max-rows", type=int, required=True, help="Max rows per partition")
    parser.add_argument(
        "--group-by",
        nargs="*",
        default=[],
        help="Columns downstream exports group or join on",
    )
    parser.add_argument("--config", help="YAML config file (overridden by flags below)")
    parser.add_argument("--search-window", type=int, help="Candidate partition counts to try")
    parser.add_argument("--search-step", type=int, help="Step between candidate counts")
    parser.add_argument("--deadline", type=float, help="Solve deadline in seconds")
    parser.add_argument(
        "--approximate",
        action="store_true",
        help="Use bounded-memory sketches instead of exact key counts",
    )
    parser.add_argument(
        "--executor",
        choices=[p.value for p in ExecutorPolicy],
        help="Candidate simulation executor",
    )
    parser.add_argument("--seed", type=int, help="Hash seed")
    parser.add_argument("--export-dir", help="Write one file per partition to this directory")
    parser.add_argument(
        "--export-format",
        choices=[f.value for f in DataFormat],
        help="Format of exported partition files",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from config, INFO)",
    )
    return parser


def build_config(args: argparse.Namespace) -> PartitionSizingConfig:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config(args.config) if args.config else PartitionSizingConfig()

    sizing_overrides = {}
    if args.search_window is not None:
        sizing_overrides["search_window"] = args.search_window
    if args.search_step is not None:
        sizing_overrides["search_step"] = args.search_step
    if args.deadline is not None:
        sizing_overrides["deadline_seconds"] = args.deadline
    if args.approximate:
        sizing_overrides["exact_counting"] = False
    if args.executor is not None:
        sizing_overrides["executor"] = ExecutorPolicy(args.executor)
    if args.seed is not None:
        sizing_overrides["hash_seed"] = args.seed

    export_overrides = {}
    if args.export_dir is not None:
        export_overrides["output_dir"] = args.export_dir
    if args.export_format is not None:
        export_overrides["format"] = DataFormat(args.export_format)

    # Re-validate through the models so overrides obey the same constraints.
    sizing = type(config.sizing).model_validate(
        {**config.sizing.model_dump(), **sizing_overrides}
    )
    export = type(config.export).model_validate(
        {**config.export.model_dump(), **export_overrides}
    )
    update = {"sizing": sizing, "export": export}
    if args.log_level:
        update["log_level"] = args.log_level
    return config.model_copy(update=update)


def report_failure(error: PartitionSizingError) -> None:
    """Log a sizing failure with its diagnostic payload."""
    logger.error(f"Sizing failed: {error}")
    if isinstance(error, InfeasibleError):
        logger.error(f"Choose a finer partition key or raise --max-rows above {error.key_rows}")
    elif isinstance(error, SearchExhaustedError):
        best = {str(k): v for k, v in sorted(error.best_histogram.items())}
        logger.error(
            f"Best histogram ({error.best_partition_count} partitions): {json.dumps(best)}"
        )
        if error.profile is not None:
            logger.error(f"Profile: {json.dumps(error.profile.to_dict())}")


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.max_rows <= 0:
        print(f"--max-rows must be positive, got {args.max_rows}", file=sys.stderr)
        return EXIT_USAGE

    try:
        config = build_config(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format=config.log_format,
        stream=sys.stderr,
    )

    input_path = Path(args.input_file)
    if not input_path.exists():
        logger.error(f"Input file not found: {input_path}")
        return EXIT_USAGE

    try:
        dataset = read_dataset(input_path)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_USAGE

    hasher = Hasher(
        seed=config.sizing.hash_seed,
        integer_passthrough=config.sizing.integer_passthrough,
    )
    solver = MinimumPartitionSolver(config.sizing, hasher=hasher)

    try:
        result = solver.solve(
            dataset,
            args.column,
            args.max_rows,
            group_by=args.group_by,
        )
    except PartitionSizingError as e:
        report_failure(e)
        return EXIT_SIZING_FAILED

    print(result.to_json(indent=2))

    if args.export_dir:
        write_partitions(
            dataset,
            args.column,
            result.scheme(),
            config.export.output_dir,
            fmt=config.export.format,
            hasher=hasher,
            file_prefix=config.export.file_prefix,
            alias=config.export.partition_column,
        )

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
