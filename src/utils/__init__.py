"""
Ambient utilities for forkreduce

Provides:
- logging: structured and console logging setup
- tracing: OpenTelemetry spans around pool operations
- metrics: Prometheus metric registration and HTTP exporter
"""

__version__ = "1.0.0"
__all__ = ["logging", "tracing", "metrics"]
