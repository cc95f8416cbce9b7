"""
Demo reductions built on the worker pool.

- sum_range / sum_tripled: integer range sums
- word_lengths: word length totals over a list and a set
- find_prime: probable prime generation with find-first / find-any
"""

from .common import measure_reduction
from .primes import find_prime, is_probable_prime, probable_prime
from .ranges import sum_range, sum_tripled
from .words import read_words, word_lengths

__all__ = [
    'measure_reduction',
    'sum_range',
    'sum_tripled',
    'read_words',
    'word_lengths',
    'find_prime',
    'is_probable_prime',
    'probable_prime',
]
