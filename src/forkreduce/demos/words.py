"""
Word length totals over a word list.

The distinct words of a file are reduced twice, once as a list and once as
a set, to show that the aggregate does not depend on the collection type
while the split of work across workers does.
"""

import logging
import operator
from pathlib import Path
from typing import Any

from utils.tracing import add_span_attributes, trace_function

from ..contributions import WorkerContributionMap
from ..pool import WorkerPool
from .common import measure_reduction

logger = logging.getLogger(__name__)


def read_words(path: str | Path) -> set[str]:
    """
    Read the distinct words of a file, one word per line.

    Lines are stripped and blank lines are skipped.
    """
    with open(path, encoding="utf-8") as f:
        words = {line.strip() for line in f if line.strip()}
    logger.debug(f"Read {len(words)} distinct words from {path}")
    return words


@trace_function(component="demo")
def word_lengths(
    pool: WorkerPool,
    words: set[str],
    leaf_size: int | None = None,
) -> dict[str, Any]:
    """
    Total the lengths of ``words`` as a list and as a set.

    A single contribution map is reused and cleared between the two runs.

    Returns:
        Dictionary with 'word_count' and 'runs' (one result per collection)
    """
    add_span_attributes(word_count=len(words))
    contributions = WorkerContributionMap()
    runs = [
        measure_reduction(
            pool, "list", list(words), len, operator.add, 0,
            leaf_size=leaf_size, contributions=contributions,
        ),
        measure_reduction(
            pool, "set", set(words), len, operator.add, 0,
            leaf_size=leaf_size, contributions=contributions,
        ),
    ]
    return {"word_count": len(words), "runs": runs}
