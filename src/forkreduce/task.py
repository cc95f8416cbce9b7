"""
Splittable reduction tasks.

A ReductionTask describes one parallel reduction: an indexable input, a
per-element transform, an associative combiner and its identity. The input
is addressed through Segments, half-open index ranges that know whether they
are small enough to fold sequentially and how to split themselves in two.

Nothing in this module knows about threads; the scheduler in pool.py decides
which worker folds which segment.
"""

import math
import threading
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import InvalidConfiguration

T = TypeVar("T")
U = TypeVar("U")

# Leaves per worker when no explicit leaf size is given
DEFAULT_SPLITS_PER_WORKER = 4


@dataclass(frozen=True)
class Segment:
    """Half-open index range [start, stop) of a task's input."""

    start: int
    stop: int

    def __len__(self) -> int:
        return self.stop - self.start

    def is_small_enough(self, threshold: int) -> bool:
        """Return True if the segment should be folded without splitting."""
        return len(self) <= threshold

    def split(self) -> tuple["Segment", "Segment"]:
        """Split into a left and right half; the left half is never larger."""
        mid = self.start + len(self) // 2
        return Segment(self.start, mid), Segment(mid, self.stop)


def as_sequence(items: Iterable[T]) -> Sequence[T]:
    """
    Return ``items`` as an indexable sequence.

    Sequences such as lists, tuples and ranges are used in place. Unordered
    collections and one-shot iterables are materialized into a list, so a
    set is visited in its own iteration order.
    """
    if isinstance(items, Sequence):
        return items
    return list(items)


def default_threshold(
    size: int,
    parallelism: int,
    splits_per_worker: int = DEFAULT_SPLITS_PER_WORKER,
) -> int:
    """
    Compute the leaf size for an input of ``size`` elements.

    Aims for roughly ``parallelism * splits_per_worker`` leaves so that idle
    workers have something left to steal.

    Args:
        size: Number of input elements
        parallelism: Number of workers in the pool
        splits_per_worker: Target leaves per worker

    Returns:
        Maximum number of elements folded sequentially by one leaf
    """
    if parallelism <= 0 or splits_per_worker <= 0:
        raise InvalidConfiguration(
            f"parallelism and splits_per_worker must be positive, "
            f"got {parallelism} and {splits_per_worker}"
        )
    return max(1, math.ceil(size / (parallelism * splits_per_worker)))


@dataclass
class ReductionTask(Generic[T, U]):
    """
    One parallel reduction over an indexable input.

    ``combiner`` must be associative with ``identity`` as its neutral element.
    ``on_element_processed`` is called once per element with the name of the
    worker that processed it and must not influence the aggregate.
    """

    source: Sequence[T]
    transform: Callable[[T], U]
    combiner: Callable[[U, U], U]
    identity: U
    threshold: int = 1
    on_element_processed: Callable[[str], Any] | None = None

    def __post_init__(self) -> None:
        if self.threshold < 1:
            raise InvalidConfiguration(
                f"Leaf size must be at least 1, got {self.threshold}"
            )

    @property
    def size(self) -> int:
        return len(self.source)

    def root(self) -> Segment:
        """Return the segment covering the whole input."""
        return Segment(0, len(self.source))

    def fold(
        self,
        segment: Segment,
        worker_id: str,
        cancelled: threading.Event | None = None,
    ) -> U:
        """
        Sequentially fold ``segment`` into a partial result.

        Args:
            segment: Range of the input to process
            worker_id: Name reported to the element hook
            cancelled: Stops the fold early once set

        Returns:
            combiner-fold of the transformed elements, starting at identity
        """
        source = self.source
        transform = self.transform
        combiner = self.combiner
        hook = self.on_element_processed

        acc = self.identity
        for index in range(segment.start, segment.stop):
            if cancelled is not None and cancelled.is_set():
                break
            value = transform(source[index])
            # Abandoned while transforming: the element is not counted
            if cancelled is not None and cancelled.is_set():
                break
            acc = combiner(acc, value)
            if hook is not None:
                hook(worker_id)
        return acc

    def combine(self, left: U, right: U) -> U:
        """Join two sibling results, keeping left-to-right order."""
        return self.combiner(left, right)

    def sequential(self, worker_id: str = "sequential") -> U:
        """Fold the whole input on the calling thread."""
        return self.fold(self.root(), worker_id)
