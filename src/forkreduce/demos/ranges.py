"""
Integer range reductions.

sum_range adds up a range of integers; sum_tripled first maps every integer
to three times its value. Both record which worker handled how many
integers.
"""

import operator
from typing import Any

from utils.tracing import trace_function

from ..pool import WorkerPool
from .common import measure_reduction


def _identity(value: int) -> int:
    return value


def _triple(value: int) -> int:
    return value * 3


@trace_function(component="demo")
def sum_range(
    pool: WorkerPool,
    start: int = 0,
    stop: int = 1_000_000,
    leaf_size: int | None = None,
) -> dict[str, Any]:
    """
    Sum the integers in [start, stop) on ``pool``.

    Example:
        >>> with WorkerPool(4) as pool:
        ...     sum_range(pool)["result"]
        499999500000
    """
    return measure_reduction(
        pool,
        f"sum of range({start}, {stop})",
        range(start, stop),
        _identity,
        operator.add,
        0,
        leaf_size=leaf_size,
    )


@trace_function(component="demo")
def sum_tripled(
    pool: WorkerPool,
    start: int = 0,
    stop: int = 100_000,
    leaf_size: int | None = None,
) -> dict[str, Any]:
    """Sum ``i * 3`` for every i in [start, stop) on ``pool``."""
    return measure_reduction(
        pool,
        f"sum of i * 3 over range({start}, {stop})",
        range(start, stop),
        _triple,
        operator.add,
        0,
        leaf_size=leaf_size,
    )
