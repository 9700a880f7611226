"""Random 32‑bit prime sampling with deterministic Miller–Rabin."""
from __future__ import annotations

import logging
import secrets

import numpy as np

from . import constants as C
from .errors import PrimeSearchExhausted, RandomSourceFailure

logger = logging.getLogger(__name__)


class RandomSource:
    """Cryptographically secure byte source backed by :mod:`secrets`.

    Subclasses may override :meth:`read` (or the word helpers) to make runs
    reproducible.
    """

    def read(self, size: int) -> bytes:
        try:
            data = secrets.token_bytes(size)
        except OSError as exc:
            raise RandomSourceFailure(f"random generation failed: {exc}") from exc
        if len(data) != size:
            raise RandomSourceFailure(
                "incomplete random read", requested=size, received=len(data)
            )
        return data

    def uint32(self) -> int:
        """Return one big‑endian unsigned 32‑bit word."""
        return int.from_bytes(self.read(4), "big")

    def uint32_array(self, count: int) -> np.ndarray:
        """Return ``count`` big‑endian words as a native ``uint32`` array."""
        raw = np.frombuffer(self.read(4 * count), dtype=">u4")
        return raw.astype(np.uint32)


def mod_pow(base: int, exp: int, mod: int) -> int:
    """Binary square‑and‑multiply modular exponentiation."""
    if mod == 0:
        raise ValueError("modulus cannot be zero")
    result = 1
    b = base % mod
    e = exp
    while e > 0:
        if e & 1:
            result = (result * b) % mod
        b = (b * b) % mod
        e >>= 1
    return result % mod


def miller_rabin_round(n: int, d: int, r: int, a: int) -> bool:
    """Return ``True`` when witness ``a`` does not prove ``n`` composite."""
    if n == a:
        return True
    x = mod_pow(a, d, n)
    if x == 1 or x == n - 1:
        return True
    for _ in range(r - 1):
        x = (x * x) % n
        if x == n - 1:
            return True
        if x == 1:
            return False
    return False


def is_prime(n: int) -> bool:
    """Deterministic primality for ``0 <= n < 2**32``."""
    if n <= 1 or n == 4:
        return False
    if n <= 3:
        return True

    d = n - 1
    r = 0
    while d % 2 == 0:
        d //= 2
        r += 1

    return all(miller_rabin_round(n, d, r, a) for a in C.MILLER_RABIN_WITNESSES)


def sample_prime(source: RandomSource, max_attempts: int) -> int:
    """Draw random words until one is prime.

    A failing random source is retried within the same attempt budget; if
    every attempt failed that way the last :class:`RandomSourceFailure`
    propagates. Otherwise exhausting the budget raises
    :class:`PrimeSearchExhausted`.
    """
    source_failures = 0
    last_failure: RandomSourceFailure | None = None
    for _ in range(max_attempts):
        try:
            value = source.uint32()
        except RandomSourceFailure as exc:
            source_failures += 1
            last_failure = exc
            logger.debug("random source failure %d/%d: %s", source_failures, max_attempts, exc)
            continue

        if value > C.WORD_MASK - C.OVERFLOW_GUARD:
            continue
        if is_prime(value):
            return value

    if last_failure is not None and source_failures == max_attempts:
        raise RandomSourceFailure(
            "random source unavailable for every attempt",
            attempts=max_attempts,
            cause=str(last_failure),
        )
    raise PrimeSearchExhausted(
        f"prime generation failed after {max_attempts} attempts",
        attempts=max_attempts,
        source_failures=source_failures,
    )


__all__ = [
    "RandomSource",
    "mod_pow",
    "miller_rabin_round",
    "is_prime",
    "sample_prime",
]
