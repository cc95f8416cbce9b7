"""
Parallel reductions on a bounded work-stealing worker pool

This package runs associative reductions over finite inputs on an explicitly
owned, fixed-size pool of worker threads and reports which worker processed
how many elements.

Components:
- pool: WorkerPool, the work-stealing scheduler
- task: ReductionTask and Segment, the splittable reduction model
- contributions: WorkerContributionMap, per-worker element counts
- config: PoolConfig loaded from environment variables
- demos: integer sums, word lengths and probable primes
- report: console / JSON rendering of demo results
- cli: the ``forkreduce`` command

Usage:
    from forkreduce import WorkerContributionMap, create_pool

    contributions = WorkerContributionMap()
    with create_pool(4) as pool:
        total = pool.reduce(range(1_000_000), lambda i: i, operator.add, 0,
                            on_element_processed=contributions.record)
"""

from .contributions import WorkerContributionMap
from .errors import (
    ForkReduceError,
    InvalidConfiguration,
    PoolShutDown,
    TaskExecutionFailure,
)
from .pool import PoolState, WorkerPool, create_pool
from .task import ReductionTask, Segment

__version__ = "1.0.0"
__all__ = [
    "WorkerPool",
    "PoolState",
    "create_pool",
    "WorkerContributionMap",
    "ReductionTask",
    "Segment",
    "ForkReduceError",
    "InvalidConfiguration",
    "PoolShutDown",
    "TaskExecutionFailure",
]
