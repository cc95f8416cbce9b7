"""
Pytest configuration and fixtures for forkreduce tests.
Provides shared pool and contribution map fixtures.
"""

from collections.abc import Iterator
from pathlib import Path

import pytest

from forkreduce import WorkerContributionMap, WorkerPool


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def pool() -> Iterator[WorkerPool]:
    """A four-worker pool that is shut down after the test."""
    worker_pool = WorkerPool(4)
    yield worker_pool
    worker_pool.shutdown()


@pytest.fixture
def contributions() -> WorkerContributionMap:
    """An empty contribution map."""
    return WorkerContributionMap()


@pytest.fixture(autouse=True)
def clear_forkreduce_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FORKREDUCE_* variables from the outer environment out of tests."""
    for key in (
        "FORKREDUCE_POOL_SIZE",
        "FORKREDUCE_LEAF_SIZE",
        "FORKREDUCE_SPLITS_PER_WORKER",
        "FORKREDUCE_THREAD_PREFIX",
    ):
        monkeypatch.delenv(key, raising=False)
