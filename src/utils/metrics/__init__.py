"""
Prometheus metrics helpers

This module provides utilities for registering application metrics and
exposing them to Prometheus over HTTP.

Usage:
    from utils.metrics import MetricsPublisher, get_or_create_metric

    REDUCTIONS_TOTAL = get_or_create_metric(
        lambda: Counter("reductions_total", "Total reductions", ["status"]),
        "reductions_total",
    )

    publisher = MetricsPublisher(port=9091)
    publisher.start()
"""

import logging
from typing import Callable, TypeVar

from prometheus_client import CollectorRegistry, REGISTRY

from .publisher import MetricsPublisher, start_http_server

logger = logging.getLogger(__name__)

# Type variable for metric types
T = TypeVar("T")


def get_or_create_metric(
    metric_factory: Callable[[], T],
    metric_name: str,
    registry: CollectorRegistry = REGISTRY,
) -> T:
    """
    Utility function for safe metric registration.

    Creates a new metric or returns the existing one if already registered,
    which happens when a module defining metrics is imported twice (for
    example under reload in tests).

    Args:
        metric_factory: Callable that creates the metric (e.g., lambda: Counter(...))
        metric_name: Name of the metric for lookup if already registered
        registry: Prometheus registry to use (default: global REGISTRY)

    Returns:
        The metric instance (either newly created or existing)

    Example:
        REQUESTS_TOTAL = get_or_create_metric(
            lambda: Counter("requests_total", "Total requests", ["method"]),
            "requests_total"
        )
    """
    try:
        return metric_factory()
    except ValueError:
        # Metric already registered, get existing one
        existing = registry._names_to_collectors.get(metric_name)
        if existing is not None:
            return existing
        # If still not found, re-raise the original error
        raise


__all__ = [
    "MetricsPublisher",
    "get_or_create_metric",
    "start_http_server",
]
