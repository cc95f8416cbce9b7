"""
Pool configuration loaded from environment variables.

Environment variables:
    FORKREDUCE_POOL_SIZE: Number of worker threads (default: 4)
    FORKREDUCE_LEAF_SIZE: Fixed leaf size for every reduction (default: derived)
    FORKREDUCE_SPLITS_PER_WORKER: Target leaves per worker (default: 4)
    FORKREDUCE_THREAD_PREFIX: Worker thread name prefix (default: generated)
"""

import logging
import os
from dataclasses import dataclass, replace
from typing import Any

from .errors import InvalidConfiguration
from .pool import WorkerPool
from .task import DEFAULT_SPLITS_PER_WORKER

logger = logging.getLogger(__name__)

DEFAULT_POOL_SIZE = 4


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidConfiguration(f"{name} must be an integer, got {raw!r}") from e
    if value <= 0:
        raise InvalidConfiguration(f"{name} must be positive, got {value}")
    return value


@dataclass(frozen=True)
class PoolConfig:
    """Settings used to build a WorkerPool and its reductions."""

    pool_size: int = DEFAULT_POOL_SIZE
    leaf_size: int | None = None
    splits_per_worker: int = DEFAULT_SPLITS_PER_WORKER
    thread_name_prefix: str | None = None

    @classmethod
    def from_env(cls, default_pool_size: int = DEFAULT_POOL_SIZE) -> "PoolConfig":
        """
        Build a configuration from FORKREDUCE_* environment variables.

        Args:
            default_pool_size: Pool size used when FORKREDUCE_POOL_SIZE is unset

        Raises:
            InvalidConfiguration: If a numeric variable is not a positive integer
        """
        pool_size = os.getenv("FORKREDUCE_POOL_SIZE")
        leaf_size = os.getenv("FORKREDUCE_LEAF_SIZE")
        splits = os.getenv("FORKREDUCE_SPLITS_PER_WORKER")

        config = cls(
            pool_size=(
                _positive_int("FORKREDUCE_POOL_SIZE", pool_size)
                if pool_size else default_pool_size
            ),
            leaf_size=(
                _positive_int("FORKREDUCE_LEAF_SIZE", leaf_size)
                if leaf_size else None
            ),
            splits_per_worker=(
                _positive_int("FORKREDUCE_SPLITS_PER_WORKER", splits)
                if splits else DEFAULT_SPLITS_PER_WORKER
            ),
            thread_name_prefix=os.getenv("FORKREDUCE_THREAD_PREFIX") or None,
        )
        logger.debug(f"Loaded pool configuration from environment: {config}")
        return config

    def with_overrides(self, **overrides: Any) -> "PoolConfig":
        """Return a copy with every non-None override applied."""
        values = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **values)

    def create_pool(self) -> WorkerPool:
        """Create a WorkerPool from this configuration."""
        return WorkerPool(
            self.pool_size,
            thread_name_prefix=self.thread_name_prefix,
            splits_per_worker=self.splits_per_worker,
        )
