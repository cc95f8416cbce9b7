"""
Structured logging configuration for forkreduce

Provides console logging that shows the emitting thread (so pool workers
can be told apart), optional JSON output and rotating file logs.

Usage:
    import logging

    from utils.logging import setup_logging

    # Setup logging (call once at application startup)
    setup_logging(level="INFO", log_file="/var/log/forkreduce/app.log")

    # Get logger for your module
    logger = logging.getLogger(__name__)

    # Log with context
    logger.info("Reduction finished", extra={
        "pool_size": 4,
        "input_size": 1000000,
    })
"""

from .config import configure_from_env, setup_logging, shutdown_logging
from .formatters import ConsoleFormatter, JSONFormatter
from .handlers import ContextLogger

__all__ = [
    "setup_logging",
    "configure_from_env",
    "shutdown_logging",
    "JSONFormatter",
    "ConsoleFormatter",
    "ContextLogger",
]
