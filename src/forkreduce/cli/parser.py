"""
Command-line argument parser configuration.

This module sets up the argument parser for the forkreduce CLI tool,
defining all demo commands and their options.
"""

import argparse


def _pool_options() -> argparse.ArgumentParser:
    """Options shared by every demo command."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--pool-size',
        type=int,
        help='Number of worker threads (default: FORKREDUCE_POOL_SIZE, else 8 for triple and words, 4 otherwise)'
    )
    common.add_argument(
        '--leaf-size',
        type=int,
        help='Largest input segment folded without splitting (default: derived)'
    )
    common.add_argument(
        '--format',
        choices=['console', 'json'],
        default='console',
        help='Output format (default: console)'
    )
    common.add_argument(
        '--output',
        help='Write the report to this file instead of stdout'
    )
    return common


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser for the CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog='forkreduce',
        description="Parallel reductions on a bounded work-stealing worker pool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Sum 0..999999 on 4 workers and show which worker handled how many numbers
  forkreduce sum --stop 1000000 --pool-size 4

  # Sum i * 3 over 0..99999 on 8 workers
  forkreduce triple --stop 100000 --pool-size 8

  # Total word length of a word list, as a list and as a set
  forkreduce words --file files/words.txt --pool-size 8

  # First of 1000 random 64-bit primes whose decimal form starts with "1"
  forkreduce primes --count 1000 --bits 64 --prefix 1 --mode first

  # JSON report written to a file, metrics exposed on :9091
  forkreduce --metrics-port 9091 sum --format json --output sum.json
        """
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        default='WARNING',
        help='Logging level (default: WARNING)'
    )
    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit logs as JSON'
    )
    parser.add_argument(
        '--metrics-port',
        type=int,
        help='Expose Prometheus metrics on this port'
    )
    parser.add_argument(
        '--trace-console',
        action='store_true',
        help='Print OpenTelemetry spans to the console (OTLP_ENDPOINT enables OTLP export)'
    )

    common = _pool_options()
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # ========== Sum command ==========
    sum_parser = subparsers.add_parser(
        'sum', parents=[common], help='Sum a range of integers'
    )
    sum_parser.set_defaults(default_pool_size=4)
    sum_parser.add_argument('--start', type=int, default=0, help='First integer (default: 0)')
    sum_parser.add_argument(
        '--stop', type=int, default=1_000_000,
        help='End of the range, exclusive (default: 1000000)'
    )

    # ========== Triple command ==========
    triple_parser = subparsers.add_parser(
        'triple', parents=[common], help='Sum i * 3 over a range of integers'
    )
    triple_parser.set_defaults(default_pool_size=8)
    triple_parser.add_argument('--start', type=int, default=0, help='First integer (default: 0)')
    triple_parser.add_argument(
        '--stop', type=int, default=100_000,
        help='End of the range, exclusive (default: 100000)'
    )

    # ========== Words command ==========
    words_parser = subparsers.add_parser(
        'words', parents=[common], help='Total word length over a list and a set'
    )
    words_parser.set_defaults(default_pool_size=8)
    words_parser.add_argument(
        '--file',
        required=True,
        help='Word list, one word per line'
    )

    # ========== Primes command ==========
    primes_parser = subparsers.add_parser(
        'primes', parents=[common], help='Find a probable prime with a given prefix'
    )
    primes_parser.set_defaults(default_pool_size=4)
    primes_parser.add_argument(
        '--count', type=int, default=1000,
        help='Number of primes to generate (default: 1000)'
    )
    primes_parser.add_argument(
        '--bits', type=int, default=64,
        help='Bit length of each prime (default: 64)'
    )
    primes_parser.add_argument(
        '--prefix', default='1',
        help='Required leading decimal digits (default: 1)'
    )
    primes_parser.add_argument(
        '--mode',
        choices=['first', 'any'],
        default='first',
        help='Pick the first match by index or any match (default: first)'
    )
    primes_parser.add_argument(
        '--repeat', type=int, default=1,
        help='Number of timed runs (default: 1)'
    )

    return parser
