"""
Shared plumbing for the demo reductions.

Every demo runs one or more reductions with a fresh contribution map and
returns a plain result dictionary suitable for the report formatters.
"""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from ..contributions import WorkerContributionMap
from ..pool import WorkerPool

logger = logging.getLogger(__name__)


def measure_reduction(
    pool: WorkerPool,
    label: str,
    items: Iterable[Any],
    transform: Callable[[Any], Any],
    combiner: Callable[[Any, Any], Any],
    identity: Any,
    leaf_size: int | None = None,
    contributions: WorkerContributionMap | None = None,
) -> dict[str, Any]:
    """
    Run one reduction and collect per-worker counts and timing.

    Args:
        pool: Pool to run the reduction on
        label: Name of the run in the report
        items: Input elements
        transform: Per-element function
        combiner: Associative combiner
        identity: Neutral element of the combiner
        leaf_size: Optional fixed leaf size
        contributions: Map to record into; cleared first (default: a new map)

    Returns:
        Dictionary with structure:
        {
            'label': str,
            'result': Any,
            'contributions': Dict[str, int],
            'total_elements': int,
            'pool_size': int,
            'duration_seconds': float,
            'timestamp': str (ISO format)
        }
    """
    if contributions is None:
        contributions = WorkerContributionMap()
    contributions.clear()

    start_time = datetime.now(UTC)
    result = pool.reduce(
        items,
        transform,
        combiner,
        identity,
        on_element_processed=contributions.record,
        leaf_size=leaf_size,
    )
    end_time = datetime.now(UTC)

    run = {
        "label": label,
        "result": result,
        "contributions": contributions.snapshot(),
        "total_elements": contributions.total(),
        "pool_size": pool.pool_size,
        "duration_seconds": (end_time - start_time).total_seconds(),
        "timestamp": end_time.isoformat(),
    }

    logger.info(
        f"{label}: result={result} from {run['total_elements']} elements "
        f"on {len(run['contributions'])} worker(s) in {run['duration_seconds']:.3f}s"
    )
    return run
