"""Executor selection for candidate simulation."""

import logging
import os
import sys
from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor
from typing import Optional, Type, Union

from partition_sizing.core.enums import ExecutorPolicy

logger = logging.getLogger(__name__)

ExecutorClass = Optional[Union[Type[ThreadPoolExecutor], Type[ProcessPoolExecutor]]]

# Environment variable to override executor selection.
EXECUTOR_ENV = "PARTITION_SIZING_EXECUTOR"


def is_gil_enabled() -> bool:
    """Check if GIL is enabled."""
    try:
        return sys._is_gil_enabled()
    except AttributeError:
        return True


def resolve_policy(policy: ExecutorPolicy = ExecutorPolicy.AUTO) -> ExecutorPolicy:
    """
    Resolve AUTO into a concrete policy.

    Priority:
    1. Explicit (non-AUTO) policy from configuration
    2. PARTITION_SIZING_EXECUTOR env var ("threads", "processes", or "serial")
    3. GIL status (enabled -> processes, disabled -> threads)
    """
    policy = ExecutorPolicy(policy)
    if policy != ExecutorPolicy.AUTO:
        return policy

    override = os.environ.get(EXECUTOR_ENV, "").lower()
    if override:
        try:
            resolved = ExecutorPolicy(override)
        except ValueError:
            logger.warning(f"Ignoring invalid {EXECUTOR_ENV}={override!r}")
        else:
            if resolved != ExecutorPolicy.AUTO:
                return resolved

    if is_gil_enabled():
        return ExecutorPolicy.PROCESSES
    return ExecutorPolicy.THREADS


def get_executor_class(policy: ExecutorPolicy) -> ExecutorClass:
    """Executor class for a resolved policy; None means serial."""
    policy = resolve_policy(policy)
    if policy == ExecutorPolicy.THREADS:
        return ThreadPoolExecutor
    if policy == ExecutorPolicy.PROCESSES:
        return ProcessPoolExecutor
    return None


def describe_executor(executor_class: ExecutorClass) -> str:
    """Convert an executor class into a readable policy name."""
    if executor_class is None:
        return str(ExecutorPolicy.SERIAL)
    if executor_class is ThreadPoolExecutor:
        return str(ExecutorPolicy.THREADS)
    return str(ExecutorPolicy.PROCESSES)
