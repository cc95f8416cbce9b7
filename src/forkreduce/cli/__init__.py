"""
Command-line interface for the forkreduce demos.

Available commands:
- sum: Sum of an integer range
- triple: Sum of i * 3 over an integer range
- words: Word length totals over a list and a set
- primes: Probable prime generation with find-first / find-any
"""

import logging
import os
import sys

from utils.logging import setup_logging
from utils.metrics import MetricsPublisher
from utils.tracing import initialize_tracing, shutdown_tracing

from ..errors import ForkReduceError
from .commands import (
    cmd_primes,
    cmd_sum,
    cmd_triple,
    cmd_words,
    emit_report,
    pool_config_from_args,
)
from .parser import create_parser

logger = logging.getLogger(__name__)

COMMANDS = {
    'sum': cmd_sum,
    'triple': cmd_triple,
    'words': cmd_words,
    'primes': cmd_primes,
}


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the forkreduce CLI"""
    parser = create_parser()
    args = parser.parse_args(argv)

    # Setup logging
    setup_logging(level=args.log_level, json_format=args.json_logs, app_name="forkreduce")

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        sys.exit(1)

    if args.metrics_port:
        MetricsPublisher(port=args.metrics_port).start()

    tracing_enabled = args.trace_console or bool(os.getenv("OTLP_ENDPOINT"))
    if tracing_enabled:
        initialize_tracing(service_name="forkreduce", console_export=args.trace_console)

    try:
        command(args)
    except (ForkReduceError, OSError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)
    finally:
        if tracing_enabled:
            shutdown_tracing()


__all__ = [
    'main',
    'cmd_sum',
    'cmd_triple',
    'cmd_words',
    'cmd_primes',
    'create_parser',
    'emit_report',
    'pool_config_from_args',
]


if __name__ == '__main__':
    main()
