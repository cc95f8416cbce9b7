"""
Probable prime generation.

Generates a batch of random probable primes on the pool and picks one whose
decimal form starts with a given prefix, either the first one by index or
any one at all. In "any" mode workers stop generating primes as soon as one
match is known.
"""

import random
import threading
from typing import Any

from utils.tracing import add_span_attributes, trace_function

from ..errors import InvalidConfiguration
from ..pool import WorkerPool
from .common import measure_reduction

# Bases that make Miller-Rabin deterministic below 2**64
_DETERMINISTIC_BASES = (2, 325, 9375, 28178, 450775, 9780504, 1795265022)
_SMALL_PRIMES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

_local = threading.local()


def _thread_rng() -> random.Random:
    rng = getattr(_local, "rng", None)
    if rng is None:
        rng = _local.rng = random.Random()
    return rng


def is_probable_prime(n: int, rounds: int = 20, rng: random.Random | None = None) -> bool:
    """
    Miller-Rabin primality test.

    Exact for n < 2**64; above that a composite passes with probability at
    most 4**-rounds.
    """
    if n < 2:
        return False
    for p in _SMALL_PRIMES:
        if n % p == 0:
            return n == p

    d = n - 1
    s = 0
    while d % 2 == 0:
        d //= 2
        s += 1

    if n < 2**64:
        bases = _DETERMINISTIC_BASES
    else:
        rng = rng or _thread_rng()
        bases = tuple(rng.randrange(2, n - 1) for _ in range(rounds))

    for a in bases:
        a %= n
        if a == 0:
            continue
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = (x * x) % n
            if x == n - 1:
                break
        else:
            return False
    return True


def probable_prime(bits: int, rng: random.Random | None = None) -> int:
    """Return a random probable prime of exactly ``bits`` bits."""
    if bits < 2:
        raise InvalidConfiguration(f"A prime needs at least 2 bits, got {bits}")
    rng = rng or _thread_rng()
    if bits == 2:
        return rng.choice((2, 3))
    while True:
        # Top bit fixes the length, low bit makes it odd
        candidate = rng.getrandbits(bits) | (1 << (bits - 1)) | 1
        if is_probable_prime(candidate, rng=rng):
            return candidate


def _leftmost(left: int | None, right: int | None) -> int | None:
    return left if left is not None else right


@trace_function(component="demo")
def find_prime(
    pool: WorkerPool,
    count: int = 1000,
    bits: int = 64,
    prefix: str = "1",
    mode: str = "first",
    leaf_size: int | None = None,
) -> dict[str, Any]:
    """
    Generate ``count`` probable primes and pick one starting with ``prefix``.

    Args:
        pool: Pool to run on
        count: Number of primes to generate
        bits: Bit length of each prime
        prefix: Required leading decimal digits
        mode: "first" for the match with the lowest index, "any" for any match
        leaf_size: Optional fixed leaf size

    Returns:
        Result dictionary from measure_reduction; 'result' is None when no
        generated prime matched
    """
    if mode not in ("first", "any"):
        raise InvalidConfiguration(f"mode must be 'first' or 'any', got {mode!r}")
    if bits < 2:
        raise InvalidConfiguration(f"A prime needs at least 2 bits, got {bits}")

    found = threading.Event()

    def candidate(_index: int) -> int | None:
        if mode == "any" and found.is_set():
            return None
        prime = probable_prime(bits)
        if str(prime).startswith(prefix):
            found.set()
            return prime
        return None

    run = measure_reduction(
        pool,
        f"find{mode.capitalize()} of {count} {bits}-bit primes starting with {prefix!r}",
        range(count),
        candidate,
        _leftmost,
        None,
        leaf_size=leaf_size,
    )
    run["mode"] = mode
    add_span_attributes(mode=mode, found=run["result"] is not None)
    return run
