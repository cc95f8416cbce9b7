"""
Bounded work-stealing worker pool.

WorkerPool owns a fixed number of worker threads and runs splittable
reductions on them. Each worker keeps its own deque of segments: it pushes
and pops at the right end and other workers steal from the left end when
they run dry. A submitted reduction starts as one root segment; whoever
picks it up keeps splitting it, forking the right half onto its own deque
and continuing with the left half, until the segment is small enough to
fold sequentially. Partial results are joined pairwise on the way back up
the split tree by whichever worker finishes the second sibling.

The caller of reduce() blocks until the root is resolved, or until a failed
run has been abandoned and no worker is still inside it.
"""

import itertools
import logging
import random
import threading
from collections import deque
from collections.abc import Callable, Iterable
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any

from opentelemetry import trace

from utils.tracing import add_span_event, trace_operation

from .errors import InvalidConfiguration, PoolShutDown, TaskExecutionFailure
from .metrics import (
    ACTIVE_POOLS,
    ELEMENTS_PROCESSED,
    REDUCTION_TIME,
    REDUCTIONS_TOTAL,
    SEGMENTS_STOLEN,
)
from .task import (
    DEFAULT_SPLITS_PER_WORKER,
    ReductionTask,
    Segment,
    as_sequence,
    default_threshold,
)

logger = logging.getLogger(__name__)

_pool_ids = itertools.count(1)


class PoolState(Enum):
    """Lifecycle of a WorkerPool."""

    CREATED = "created"
    ACTIVE = "active"
    SHUTTING_DOWN = "shutting_down"
    TERMINATED = "terminated"


class _Join:
    """Meeting point of two sibling segments."""

    def __init__(self, parent: "_Join | None", slot: int):
        self.parent = parent
        self.slot = slot
        self.results: list[Any] = [None, None]
        self._pending = 2
        self._lock = threading.Lock()

    def offer(self, slot: int, value: Any) -> bool:
        """Store one side's result; return True for the second arrival."""
        with self._lock:
            self.results[slot] = value
            self._pending -= 1
            return self._pending == 0


class _Run:
    """Book-keeping for one submitted reduction."""

    def __init__(self, pool: "WorkerPool", task: ReductionTask):
        self.pool = pool
        self.task = task
        self.future: Future = Future()
        self.cancelled = threading.Event()
        self._active = 0
        self._error: TaskExecutionFailure | None = None
        self._finished = False
        self._lock = threading.Lock()

    def enter(self) -> bool:
        """Register a worker on this run; False once the run is abandoned."""
        with self._lock:
            if self.cancelled.is_set():
                return False
            self._active += 1
            return True

    def leave(self) -> None:
        with self._lock:
            self._active -= 1
            # A failed run settles only when no worker is still inside it
            settle = self._error is not None and self._active == 0 and not self._finished
            if settle:
                self._finished = True
        if settle:
            self.future.set_exception(self._error)
            self.pool._run_finished()

    def resolve(self, value: Any) -> None:
        with self._lock:
            if self._finished or self._error is not None:
                return
            self._finished = True
        self.future.set_result(value)
        self.pool._run_finished()

    def fail(self, exc: BaseException) -> None:
        """Abandon the run; the caller is woken by the last leave()."""
        with self._lock:
            self.cancelled.set()
            if self._error is not None:
                return
            failure = TaskExecutionFailure(
                f"Reduction abandoned: {type(exc).__name__}: {exc}", exc
            )
            failure.__cause__ = exc
            self._error = failure


@dataclass
class _Work:
    """A segment of a run waiting in a deque."""

    run: _Run
    segment: Segment
    parent: _Join | None = None
    slot: int = 0


class _Worker(threading.Thread):
    """Worker thread with its own deque of segments."""

    def __init__(self, pool: "WorkerPool", index: int, name: str):
        super().__init__(name=name, daemon=True)
        self.pool = pool
        self.index = index
        self.deque: deque[_Work] = deque()

    def run(self) -> None:
        pool = self.pool
        logger.debug(f"Worker {self.name} started")
        try:
            while True:
                signal = pool._signal
                work = pool._find_work(self)
                if work is not None:
                    self.execute(work)
                    continue

                with pool._cond:
                    if pool._state is not PoolState.ACTIVE and pool._in_flight == 0:
                        break
                    if pool._signal == signal:
                        pool._cond.wait()
        finally:
            pool._worker_exited(self)
            logger.debug(f"Worker {self.name} exited")

    def help_until(self, future: Future) -> None:
        """Keep executing queued segments until ``future`` is resolved."""
        pool = self.pool
        while not future.done():
            signal = pool._signal
            work = pool._find_work(self)
            if work is not None:
                self.execute(work)
                continue

            with pool._cond:
                if not future.done() and pool._signal == signal:
                    pool._cond.wait()

    def execute(self, work: _Work) -> None:
        """Split ``work`` down to a leaf, fold it and join upwards."""
        run = work.run
        if not run.enter():
            return

        try:
            self._split_fold_join(run, work)
        except BaseException as e:
            run.fail(e)
            if isinstance(e, (KeyboardInterrupt, SystemExit)):
                raise
        finally:
            run.leave()

    def _split_fold_join(self, run: _Run, work: _Work) -> None:
        task = run.task
        segment, parent, slot = work.segment, work.parent, work.slot
        while not segment.is_small_enough(task.threshold):
            left, right = segment.split()
            join = _Join(parent, slot)
            self.pool._push(self, _Work(run, right, join, 1))
            segment, parent, slot = left, join, 0

        value = task.fold(segment, self.name, run.cancelled)
        if run.cancelled.is_set():
            return
        ELEMENTS_PROCESSED.inc(len(segment))

        while parent is not None:
            if not parent.offer(slot, value):
                return
            value = task.combine(parent.results[0], parent.results[1])
            parent, slot = parent.parent, parent.slot

        run.resolve(value)


class WorkerPool:
    """
    Fixed-size pool of work-stealing worker threads.

    Threads are started on the first submission and released by shutdown().
    The pool is safe to submit to from several caller threads at once.

    Example:
        >>> contributions = WorkerContributionMap()
        >>> with WorkerPool(4) as pool:
        ...     total = pool.reduce(
        ...         range(1_000_000),
        ...         transform=lambda i: i,
        ...         combiner=operator.add,
        ...         identity=0,
        ...         on_element_processed=contributions.record,
        ...     )
        >>> total, contributions.total()
        (499999500000, 1000000)
    """

    def __init__(
        self,
        pool_size: int,
        thread_name_prefix: str | None = None,
        splits_per_worker: int = DEFAULT_SPLITS_PER_WORKER,
    ):
        """
        Initialize worker pool.

        Args:
            pool_size: Number of worker threads, fixed for the pool's lifetime
            thread_name_prefix: Prefix for worker thread names
                               (default: forkreduce-pool-<n>)
            splits_per_worker: Target leaves per worker when reduce() picks
                               the leaf size itself (default: 4)

        Raises:
            InvalidConfiguration: If pool_size or splits_per_worker is not a
                                  positive integer
        """
        if isinstance(pool_size, bool) or not isinstance(pool_size, int) or pool_size <= 0:
            raise InvalidConfiguration(
                f"Pool size must be a positive integer, got {pool_size!r}"
            )
        if isinstance(splits_per_worker, bool) or not isinstance(splits_per_worker, int) \
                or splits_per_worker <= 0:
            raise InvalidConfiguration(
                f"splits_per_worker must be a positive integer, got {splits_per_worker!r}"
            )

        self.pool_size = pool_size
        self.splits_per_worker = splits_per_worker
        self.name = thread_name_prefix or f"forkreduce-pool-{next(_pool_ids)}"

        self._workers: list[_Worker] = []
        self._submissions: deque[_Work] = deque()
        self._cond = threading.Condition()
        self._signal = 0
        self._state = PoolState.CREATED
        self._in_flight = 0
        self._live_workers = 0
        self._steals = 0
        self._stats_lock = threading.Lock()

        logger.info(
            f"WorkerPool initialized: name={self.name}, "
            f"pool_size={pool_size}, splits_per_worker={splits_per_worker}"
        )

    def __enter__(self) -> "WorkerPool":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    def __repr__(self) -> str:
        return (
            f"WorkerPool(name={self.name!r}, pool_size={self.pool_size}, "
            f"state={self.state.value})"
        )

    @property
    def state(self) -> PoolState:
        with self._cond:
            return self._state

    @property
    def worker_names(self) -> list[str]:
        """Names of the started worker threads, empty before first use."""
        return [worker.name for worker in self._workers]

    @property
    def steal_count(self) -> int:
        """Number of segments taken from another worker's deque."""
        with self._stats_lock:
            return self._steals

    def reduce(
        self,
        items: Iterable[Any],
        transform: Callable[[Any], Any],
        combiner: Callable[[Any, Any], Any],
        identity: Any,
        on_element_processed: Callable[[str], Any] | None = None,
        leaf_size: int | None = None,
    ) -> Any:
        """
        Reduce ``items`` in parallel and block until the aggregate is ready.

        Args:
            items: Finite input; sequences are indexed in place, any other
                   iterable (sets included) is materialized first
            transform: Per-element function, applied exactly once per element
            combiner: Associative binary function joining partial results
            identity: Neutral element of ``combiner``
            on_element_processed: Optional hook called with the worker name
                                  once per processed element
            leaf_size: Largest segment folded without splitting
                       (default: derived from input size and pool size)

        Returns:
            The same value as folding ``combiner`` over the transformed input
            from left to right, starting at ``identity``

        Raises:
            PoolShutDown: If shutdown() has been called
            InvalidConfiguration: If leaf_size is smaller than 1
            TaskExecutionFailure: If transform, combiner or the hook raised;
                                  the original exception is chained
        """
        source = as_sequence(items)
        size = len(source)
        threshold = (
            leaf_size
            if leaf_size is not None
            else default_threshold(size, self.pool_size, self.splits_per_worker)
        )
        task = ReductionTask(
            source=source,
            transform=transform,
            combiner=combiner,
            identity=identity,
            threshold=threshold,
            on_element_processed=on_element_processed,
        )

        with self._cond:
            if self._state in (PoolState.SHUTTING_DOWN, PoolState.TERMINATED):
                REDUCTIONS_TOTAL.labels(status="rejected").inc()
                raise PoolShutDown(f"Pool {self.name} has been shut down")
            if size == 0:
                REDUCTIONS_TOTAL.labels(status="success").inc()
                return identity
            self._ensure_started()
            self._in_flight += 1

        run = _Run(self, task)

        with trace_operation(
            "forkreduce_reduce",
            kind=trace.SpanKind.INTERNAL,
            pool=self.name,
            pool_size=self.pool_size,
            input_size=size,
            leaf_size=threshold,
        ):
            with REDUCTION_TIME.labels(pool_size=self.pool_size).time():
                logger.debug(
                    f"Submitting reduction of {size} elements to {self.name} "
                    f"(leaf_size={threshold})"
                )
                self._submit(_Work(run, task.root()))

                current = threading.current_thread()
                if isinstance(current, _Worker) and current.pool is self:
                    current.help_until(run.future)

                try:
                    result = run.future.result()
                except TaskExecutionFailure:
                    REDUCTIONS_TOTAL.labels(status="failed").inc()
                    raise

                REDUCTIONS_TOTAL.labels(status="success").inc()
                add_span_event("reduction_completed", steals=self.steal_count)
                return result

    def shutdown(self, wait: bool = True) -> None:
        """
        Stop accepting submissions and release the worker threads.

        Reductions already submitted run to completion. Calling shutdown()
        more than once is a no-op.

        Args:
            wait: Block until every worker thread has exited (default: True)
        """
        with self._cond:
            if self._state is PoolState.CREATED:
                self._state = PoolState.TERMINATED
                logger.info(f"WorkerPool {self.name} shut down before first use")
                return
            if self._state is not PoolState.ACTIVE:
                logger.debug(f"WorkerPool {self.name} already shut down")
            else:
                self._state = PoolState.SHUTTING_DOWN
                self._cond.notify_all()
                logger.info(
                    f"Shutting down WorkerPool {self.name} "
                    f"({self._in_flight} reductions in flight)"
                )

        current = threading.current_thread()
        if wait and not (isinstance(current, _Worker) and current.pool is self):
            for worker in self._workers:
                worker.join()

    # Called with self._cond held
    def _ensure_started(self) -> None:
        if self._state is not PoolState.CREATED:
            return

        self._workers = [
            _Worker(self, index, f"{self.name}-worker-{index + 1}")
            for index in range(self.pool_size)
        ]
        self._live_workers = len(self._workers)
        self._state = PoolState.ACTIVE
        for worker in self._workers:
            worker.start()
        ACTIVE_POOLS.inc()
        logger.debug(f"Started {self.pool_size} workers for {self.name}")

    def _submit(self, work: _Work) -> None:
        self._submissions.append(work)
        self._wake_one()

    def _push(self, worker: _Worker, work: _Work) -> None:
        worker.deque.append(work)
        self._wake_one()

    def _wake_one(self) -> None:
        with self._cond:
            self._signal += 1
            self._cond.notify()

    def _find_work(self, worker: _Worker) -> _Work | None:
        """Own deque first, then steal, then take a new submission."""
        try:
            return worker.deque.pop()
        except IndexError:
            pass

        workers = self._workers
        count = len(workers)
        start = random.randrange(count)
        for offset in range(count):
            victim = workers[(start + offset) % count]
            if victim is worker:
                continue
            try:
                work = victim.deque.popleft()
            except IndexError:
                continue
            with self._stats_lock:
                self._steals += 1
            SEGMENTS_STOLEN.inc()
            return work

        try:
            return self._submissions.popleft()
        except IndexError:
            return None

    def _run_finished(self) -> None:
        with self._cond:
            self._in_flight -= 1
            self._cond.notify_all()

    def _worker_exited(self, worker: _Worker) -> None:
        with self._cond:
            self._live_workers -= 1
            if self._live_workers == 0:
                self._state = PoolState.TERMINATED
                ACTIVE_POOLS.dec()
                logger.info(f"WorkerPool {self.name} terminated")
            self._cond.notify_all()


def create_pool(pool_size: int, **kwargs: Any) -> WorkerPool:
    """
    Factory function to create a worker pool.

    Args:
        pool_size: Number of worker threads
        **kwargs: Additional WorkerPool options

    Returns:
        A new pool in the CREATED state

    Raises:
        InvalidConfiguration: If pool_size is not a positive integer
    """
    return WorkerPool(pool_size, **kwargs)
