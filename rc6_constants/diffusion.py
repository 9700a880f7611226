"""Avalanche measurements for a candidate mixing constant.

The transform under test is a single RC6‑like round on one word::

    rotl(rotl(x, 5) * constant, 3)   (mod 2**32)

All word arithmetic is done on ``numpy.uint32`` arrays, which wrap on
overflow exactly like the 32‑bit registers the constants are meant for.
"""
from __future__ import annotations

import time

import numpy as np

from . import constants as C
from .candidate import AvalancheTest
from .primes import RandomSource

_BIT_MASKS = np.left_shift(np.uint32(1), np.arange(C.WORD_BITS, dtype=np.uint32))


def rotl32(x: int, shift: int) -> int:
    shift %= C.WORD_BITS
    x &= C.WORD_MASK
    return ((x << shift) | (x >> (C.WORD_BITS - shift))) & C.WORD_MASK


def rc6_transform(value: int, constant: int) -> int:
    """Scalar reference for :func:`transform_array` on a single word."""
    x = rotl32(value, C.TRANSFORM_ROTATE_IN)
    x = (x * constant) & C.WORD_MASK
    return rotl32(x, C.TRANSFORM_ROTATE_OUT)


def _rotl_array(x: np.ndarray, shift: int) -> np.ndarray:
    return (x << np.uint32(shift)) | (x >> np.uint32(C.WORD_BITS - shift))


def transform_array(values: np.ndarray, constant: int) -> np.ndarray:
    x = _rotl_array(values.astype(np.uint32, copy=False), C.TRANSFORM_ROTATE_IN)
    x = x * np.uint32(constant & C.WORD_MASK)
    return _rotl_array(x, C.TRANSFORM_ROTATE_OUT)


def popcount_array(values: np.ndarray) -> np.ndarray:
    """Per‑element population count of a ``uint32`` array."""
    words = np.ascontiguousarray(values, dtype=np.uint32)
    bits = np.unpackbits(words.view(np.uint8).reshape(*words.shape, 4), axis=-1)
    return bits.sum(axis=-1, dtype=np.int64)


def count_avalanche_changes(inputs: np.ndarray, constant: int) -> int:
    """Total output bits changed over every single‑bit flip of ``inputs``."""
    inputs = np.asarray(inputs, dtype=np.uint32)
    base = transform_array(inputs, constant)
    flipped = transform_array(inputs[:, None] ^ _BIT_MASKS[None, :], constant)
    return int(popcount_array(base[:, None] ^ flipped).sum())


def run_avalanche_test(constant: int, test_cases: int, source: RandomSource) -> AvalancheTest:
    """Flip every bit of ``test_cases`` random inputs and count output changes."""
    if test_cases < 1:
        raise ValueError("test_cases must be positive")
    started = time.perf_counter()
    inputs = source.uint32_array(test_cases)
    changes = count_avalanche_changes(inputs, constant)
    total = test_cases * C.WORD_BITS * C.WORD_BITS
    return AvalancheTest(
        score=changes / float(total),
        changes=changes,
        total=total,
        duration=time.perf_counter() - started,
    )


def avalanche_score(constant: int, test_cases: int, source: RandomSource) -> float:
    """Mean fraction of output bits flipped per input bit flip, in [0, 1]."""
    return run_avalanche_test(constant, test_cases, source).score


def combined_avalanche(p: int, q: int, test_cases: int) -> float:
    """Output bits changed in ``(x*p) ^ (x*q)`` when the low bit of x flips.

    Inputs are the sequential words ``0 .. test_cases-1``; the score is the
    mean changed fraction of the 32 output bits.
    """
    if test_cases < 1:
        raise ValueError("test_cases must be positive")
    x = np.arange(test_cases, dtype=np.uint32)
    modified = x ^ np.uint32(1)
    p32 = np.uint32(p & C.WORD_MASK)
    q32 = np.uint32(q & C.WORD_MASK)
    before = (x * p32) ^ (x * q32)
    after = (modified * p32) ^ (modified * q32)
    changes = int(popcount_array(before ^ after).sum())
    return changes / float(test_cases * C.WORD_BITS)


def constant_correlation(p: int, q: int) -> float:
    """Pearson correlation between the bit vectors of ``p`` and ``q``.

    Returns 1.0 when either vector is constant and the coefficient is
    undefined.
    """
    shifts = np.arange(C.WORD_BITS, dtype=np.uint64)
    p_bits = ((np.uint64(p) >> shifts) & np.uint64(1)).astype(np.float64)
    q_bits = ((np.uint64(q) >> shifts) & np.uint64(1)).astype(np.float64)
    p_dev = p_bits - p_bits.mean()
    q_dev = q_bits - q_bits.mean()
    denominator = float(np.sqrt((p_dev**2).sum() * (q_dev**2).sum()))
    if denominator == 0.0:
        return 1.0
    return float((p_dev * q_dev).sum() / denominator)


__all__ = [
    "rotl32",
    "rc6_transform",
    "transform_array",
    "popcount_array",
    "count_avalanche_changes",
    "run_avalanche_test",
    "avalanche_score",
    "combined_avalanche",
    "constant_correlation",
]
