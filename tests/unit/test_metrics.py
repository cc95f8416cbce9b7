"""
Unit tests for utils.metrics and the pool metrics

Tests metric registration, the Prometheus HTTP publisher and the
metrics recorded by worker pool reductions.
"""

import operator
from unittest.mock import patch

import pytest
from prometheus_client import REGISTRY, CollectorRegistry, Counter

from forkreduce import WorkerPool
from forkreduce.metrics import REDUCTIONS_TOTAL
from utils.metrics import MetricsPublisher, get_or_create_metric


class TestGetOrCreateMetric:
    """Test get_or_create_metric helper"""

    def test_creates_new_metric(self):
        """Test a new metric is created and registered"""
        registry = CollectorRegistry()

        counter = get_or_create_metric(
            lambda: Counter("jobs_total", "Jobs", registry=registry),
            "jobs_total",
            registry=registry,
        )

        counter.inc()
        assert registry.get_sample_value("jobs_total") == 1.0

    def test_returns_existing_metric(self):
        """Test a second registration returns the first metric"""
        # Arrange
        registry = CollectorRegistry()

        def factory():
            return Counter("jobs_total", "Jobs", registry=registry)

        # Act
        first = get_or_create_metric(factory, "jobs_total", registry=registry)
        second = get_or_create_metric(factory, "jobs_total", registry=registry)

        # Assert
        assert second is first

    def test_reraises_unrelated_value_error(self):
        """Test errors for unregistered names propagate"""
        registry = CollectorRegistry()

        def factory():
            raise ValueError("invalid metric")

        with pytest.raises(ValueError, match="invalid metric"):
            get_or_create_metric(factory, "missing_total", registry=registry)

    def test_pool_metrics_are_module_singletons(self):
        """Test re-registering a pool metric yields the module instance"""
        again = get_or_create_metric(
            lambda: Counter(
                "forkreduce_reductions_total", "duplicate", ["status"]
            ),
            "forkreduce_reductions_total",
        )

        assert again is REDUCTIONS_TOTAL


class TestMetricsPublisher:
    """Test MetricsPublisher class"""

    def test_init_with_defaults(self):
        """Test initialization with default port and registry"""
        publisher = MetricsPublisher()

        assert publisher.port == 9091
        assert publisher.registry is REGISTRY
        assert publisher._server_started is False

    def test_init_with_custom_registry(self):
        """Test initialization with custom registry"""
        custom_registry = CollectorRegistry()

        publisher = MetricsPublisher(port=8080, registry=custom_registry)

        assert publisher.port == 8080
        assert publisher.registry is custom_registry

    @patch('utils.metrics.publisher.start_http_server')
    @patch('utils.metrics.publisher.logger')
    def test_start_successful(self, mock_logger, mock_start_http_server):
        """Test successful server start"""
        # Arrange
        publisher = MetricsPublisher(port=9091)

        # Act
        publisher.start()

        # Assert
        mock_start_http_server.assert_called_once_with(9091, registry=publisher.registry)
        assert publisher._server_started is True
        assert "Metrics server started on port 9091" in mock_logger.info.call_args[0][0]

    @patch('utils.metrics.publisher.start_http_server')
    @patch('utils.metrics.publisher.logger')
    def test_start_twice_warns(self, mock_logger, mock_start_http_server):
        """Test that starting an already-started server only warns"""
        publisher = MetricsPublisher(port=9091)

        publisher.start()
        publisher.start()

        mock_start_http_server.assert_called_once()
        assert "already running" in mock_logger.warning.call_args[0][0]

    @patch('utils.metrics.publisher.start_http_server')
    def test_start_port_already_in_use(self, mock_start_http_server):
        """Test handling of port already in use"""
        # Arrange
        publisher = MetricsPublisher(port=9091)
        mock_start_http_server.side_effect = OSError("Address already in use")

        # Act & Assert
        with pytest.raises(RuntimeError, match="9091 is already in use"):
            publisher.start()

        assert publisher._server_started is False

    @patch('utils.metrics.publisher.start_http_server')
    def test_start_other_os_error_raises(self, mock_start_http_server):
        """Test that non-port OSErrors are raised unchanged"""
        publisher = MetricsPublisher(port=9091)
        mock_start_http_server.side_effect = OSError("Permission denied")

        with pytest.raises(OSError, match="Permission denied"):
            publisher.start()


class TestPoolMetrics:
    """Test metrics recorded by WorkerPool"""

    def test_active_pools_gauge_follows_lifecycle(self):
        """Test the gauge rises on first reduce and falls after shutdown"""
        # Arrange
        before = REGISTRY.get_sample_value("forkreduce_active_pools")
        pool = WorkerPool(2)

        # Act & Assert
        assert REGISTRY.get_sample_value("forkreduce_active_pools") == before
        pool.reduce(range(10), int, operator.add, 0)
        assert REGISTRY.get_sample_value("forkreduce_active_pools") == before + 1
        pool.shutdown(wait=True)
        assert REGISTRY.get_sample_value("forkreduce_active_pools") == before

    def test_duration_observed(self):
        """Test the duration histogram is labelled by pool size"""
        labels = {"pool_size": "5"}
        before = REGISTRY.get_sample_value("forkreduce_reduction_seconds_count", labels) or 0

        with WorkerPool(5) as pool:
            pool.reduce(range(100), int, operator.add, 0)

        after = REGISTRY.get_sample_value("forkreduce_reduction_seconds_count", labels)
        assert after == before + 1
