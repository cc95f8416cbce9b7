"""
Prometheus metrics for worker pool reductions.

This module defines metrics to track reduction throughput, duration and
work-stealing activity.
"""

from prometheus_client import Counter, Gauge, Histogram

from utils.metrics import get_or_create_metric

REDUCTIONS_TOTAL = get_or_create_metric(
    lambda: Counter(
        "forkreduce_reductions_total",
        "Total reductions submitted to worker pools",
        ["status"],  # success, failed, rejected
    ),
    "forkreduce_reductions_total",
)

REDUCTION_TIME = get_or_create_metric(
    lambda: Histogram(
        "forkreduce_reduction_seconds",
        "Wall-clock time of a single reduction",
        ["pool_size"],
        buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5, 10, 30, 60],
    ),
    "forkreduce_reduction_seconds",
)

ELEMENTS_PROCESSED = get_or_create_metric(
    lambda: Counter(
        "forkreduce_elements_processed_total",
        "Input elements folded by pool workers",
    ),
    "forkreduce_elements_processed_total",
)

SEGMENTS_STOLEN = get_or_create_metric(
    lambda: Counter(
        "forkreduce_segments_stolen_total",
        "Segments taken from another worker's deque",
    ),
    "forkreduce_segments_stolen_total",
)

ACTIVE_POOLS = get_or_create_metric(
    lambda: Gauge(
        "forkreduce_active_pools",
        "Worker pools with running threads",
    ),
    "forkreduce_active_pools",
)
