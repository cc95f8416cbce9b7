"""
Per-worker contribution accounting.

WorkerContributionMap counts how many elements each worker thread processed
during one or more reductions. It is safe to record into from every worker
at once and is meant to be passed as the ``on_element_processed`` hook.
"""

import threading
from collections.abc import Iterator


class WorkerContributionMap:
    """
    Thread-safe mapping of worker name to processed element count.

    Entries are created on a worker's first contribution and are only
    removed by an explicit clear().

    Example:
        >>> contributions = WorkerContributionMap()
        >>> with WorkerPool(4) as pool:
        ...     pool.reduce(range(10), lambda i: i, operator.add, 0,
        ...                 on_element_processed=contributions.record)
        45
        >>> contributions.total()
        10
    """

    def __init__(self):
        self._counts: dict[str, int] = {}
        self._lock = threading.Lock()

    def record(self, worker_id: str, count: int = 1) -> None:
        """
        Add ``count`` processed elements to ``worker_id``.

        Args:
            worker_id: Name of the worker that processed the elements
            count: Number of elements to add (default: 1)
        """
        with self._lock:
            self._counts[worker_id] = self._counts.get(worker_id, 0) + count

    __call__ = record

    def get(self, worker_id: str) -> int:
        """Return the count recorded for ``worker_id`` (0 if none)."""
        with self._lock:
            return self._counts.get(worker_id, 0)

    def snapshot(self) -> dict[str, int]:
        """Return a point-in-time copy of all counts."""
        with self._lock:
            return dict(self._counts)

    def total(self) -> int:
        """Return the sum of all recorded counts."""
        with self._lock:
            return sum(self._counts.values())

    def clear(self) -> None:
        """Remove every entry, typically between two runs."""
        with self._lock:
            self._counts.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)

    def __iter__(self) -> Iterator[tuple[str, int]]:
        return iter(sorted(self.snapshot().items()))

    def __repr__(self) -> str:
        return f"WorkerContributionMap({self.snapshot()!r})"
