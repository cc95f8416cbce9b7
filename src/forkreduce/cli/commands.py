"""
CLI command implementations.

This module contains the implementation of the demo commands:
- sum: Sum of an integer range
- triple: Sum of i * 3 over an integer range
- words: Word length totals over a list and a set
- primes: Probable prime generation with find-first / find-any
"""

import argparse
import logging
from pathlib import Path
from typing import Any

from utils.logging import ContextLogger

from ..config import DEFAULT_POOL_SIZE, PoolConfig
from ..demos import find_prime, read_words, sum_range, sum_tripled, word_lengths
from ..report import (
    export_report_json,
    format_report_console,
    format_report_json,
    generate_report,
)

logger = logging.getLogger(__name__)


def pool_config_from_args(args: argparse.Namespace) -> PoolConfig:
    """
    Build the pool configuration

    --pool-size wins over FORKREDUCE_POOL_SIZE, which wins over the
    command's own default pool size

    Args:
        args: Parsed command-line arguments

    Returns:
        Effective PoolConfig
    """
    default_pool_size = getattr(args, "default_pool_size", DEFAULT_POOL_SIZE)
    return PoolConfig.from_env(default_pool_size).with_overrides(
        pool_size=args.pool_size,
        leaf_size=args.leaf_size,
    )


def emit_report(report: dict[str, Any], args: argparse.Namespace) -> None:
    """
    Print the report or write it to ``args.output``

    Args:
        report: Report dictionary
        args: Parsed command-line arguments
    """
    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if args.format == "json":
            export_report_json(report, str(output_path))
        else:
            output_path.write_text(format_report_console(report))
        logger.info(f"Report saved to {output_path}")
    elif args.format == "json":
        print(format_report_json(report))
    else:
        print(format_report_console(report))


def cmd_sum(args: argparse.Namespace) -> dict[str, Any]:
    """
    Sum an integer range on the pool

    Args:
        args: Parsed command-line arguments
    """
    config = pool_config_from_args(args)
    with config.create_pool() as pool:
        run = sum_range(pool, args.start, args.stop, leaf_size=config.leaf_size)

    report = generate_report("sum", [run])
    emit_report(report, args)
    return report


def cmd_triple(args: argparse.Namespace) -> dict[str, Any]:
    """
    Sum i * 3 over an integer range on the pool

    Args:
        args: Parsed command-line arguments
    """
    config = pool_config_from_args(args)
    with config.create_pool() as pool:
        run = sum_tripled(pool, args.start, args.stop, leaf_size=config.leaf_size)

    report = generate_report("triple", [run])
    emit_report(report, args)
    return report


def cmd_words(args: argparse.Namespace) -> dict[str, Any]:
    """
    Total the word lengths of a word list, as a list and as a set

    Args:
        args: Parsed command-line arguments
    """
    words = read_words(args.file)
    config = pool_config_from_args(args)
    with config.create_pool() as pool:
        result = word_lengths(pool, words, leaf_size=config.leaf_size)

    report = generate_report(
        "words", result["runs"], source=args.file, word_count=result["word_count"]
    )
    emit_report(report, args)
    return report


def cmd_primes(args: argparse.Namespace) -> dict[str, Any]:
    """
    Generate probable primes and pick one with the requested prefix

    Repeated runs share one pool; the report carries the mean duration.

    Args:
        args: Parsed command-line arguments
    """
    log = ContextLogger(__name__, command="primes", mode=args.mode)
    config = pool_config_from_args(args)
    runs = []
    with config.create_pool() as pool:
        log.update_context(pool=pool.name)
        for attempt in range(1, max(args.repeat, 1) + 1):
            run = find_prime(
                pool,
                count=args.count,
                bits=args.bits,
                prefix=args.prefix,
                mode=args.mode,
                leaf_size=config.leaf_size,
            )
            log.debug("Prime run finished", attempt=attempt, result=run["result"])
            runs.append(run)

    mean = sum(run["duration_seconds"] for run in runs) / len(runs)
    report = generate_report(
        "primes", runs, mode=args.mode, mean_duration_seconds=round(mean, 6)
    )
    emit_report(report, args)
    return report
