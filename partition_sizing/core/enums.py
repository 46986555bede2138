"""
Enums for Partition Sizing
==========================

Type-safe enumerations for sizing and export configuration options.
"""

from enum import Enum


class CountingMode(str, Enum):
    """
    Key counting strategy used by the profiler.
    
    - EXACT: Full key -> row count mapping (default)
    - APPROXIMATE: Bounded-memory sketches (KMV distinct count + heavy hitters)
    """
    EXACT = "exact"
    APPROXIMATE = "approximate"
    
    def __str__(self) -> str:
        return self.value


class ExecutorPolicy(str, Enum):
    """
    How candidate partition counts are simulated.
    
    - AUTO: Processes when the GIL is enabled, threads otherwise
    - THREADS: ThreadPoolExecutor
    - PROCESSES: ProcessPoolExecutor
    - SERIAL: Main thread only (useful for debugging with breakpoints)
    """
    AUTO = "auto"
    THREADS = "threads"
    PROCESSES = "processes"
    SERIAL = "serial"
    
    def __str__(self) -> str:
        return self.value


class DataFormat(str, Enum):
    """
    File formats for reading datasets and writing partition slices.
    """
    PARQUET = "parquet"
    CSV = "csv"
    NDJSON = "ndjson"
    
    def __str__(self) -> str:
        return self.value
