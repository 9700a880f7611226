from __future__ import annotations

import itertools
import threading
from datetime import datetime, timedelta
from typing import Iterable

import numpy as np
import pytest
import sympy

from rc6_constants.candidate import Candidate, GenerationResult, TestResults
from rc6_constants.config import Config
from rc6_constants.diffusion import avalanche_score
from rc6_constants.primes import RandomSource
from rc6_constants.selector import are_sufficiently_different
from rc6_constants.statistical import (
    calculate_bit_distribution,
    calculate_entropy,
    hamming_distance,
    hamming_weight,
    run_all_statistical_tests,
    verify_test_results,
)
from rc6_constants.validator import has_simple_bit_pattern, run_weak_key_tests


class ScriptedSource(RandomSource):
    """Returns the scripted words first, then words from a seeded generator."""

    def __init__(self, words: Iterable[int] = (), seed: int = 0) -> None:
        self._words = list(words)
        self._rng = np.random.default_rng(seed)
        self._lock = threading.Lock()
        self.words_served = 0

    def read(self, size: int) -> bytes:
        with self._lock:
            return self._rng.bytes(size)

    def uint32(self) -> int:
        with self._lock:
            self.words_served += 1
            if self._words:
                return self._words.pop(0)
            return int(self._rng.integers(0, 2**32, dtype=np.uint64))


def make_candidate(
    value: int,
    *,
    avalanche: float = 0.27,
    bit_distribution: float | None = None,
    entropy: float | None = None,
    weight: int | None = None,
) -> Candidate:
    return Candidate(
        value=value,
        bit_distribution=(
            calculate_bit_distribution(value) if bit_distribution is None else bit_distribution
        ),
        avalanche_score=avalanche,
        hamming_weight=hamming_weight(value) if weight is None else weight,
        entropy_score=calculate_entropy(value) if entropy is None else entropy,
        test_results=TestResults(weak_key_tests=tuple(run_weak_key_tests(value))),
    )


def make_result(p: Candidate, q: Candidate, **kwargs) -> GenerationResult:
    start = datetime(2024, 1, 1, 12, 0, 0)
    return GenerationResult(
        selected_p=p,
        selected_q=q,
        total_candidates=kwargs.pop("total_candidates", 42),
        start_time=start,
        end_time=start + timedelta(seconds=3),
        duration=timedelta(seconds=3),
        config=kwargs.pop("config", Config()),
        **kwargs,
    )


def _passes_every_gate(n: int) -> bool:
    if not 15 <= hamming_weight(n) <= 17 or has_simple_bit_pattern(n):
        return False
    if not verify_test_results(run_all_statistical_tests(n)):
        return False
    return avalanche_score(n, 256, ScriptedSource(seed=n)) >= 0.26


def _gate_passing_primes(start: int) -> Iterable[int]:
    primes = itertools.islice(sympy.primerange(start, 2**32 - 101), 20000)
    return (n for n in primes if _passes_every_gate(n))


@pytest.fixture(scope="session")
def good_prime_pair() -> tuple[int, int]:
    """Two primes that pass every gate and differ enough to form a pair."""
    found = _gate_passing_primes(0x9E3779B9)
    first = next(found)
    for n in found:
        if are_sufficiently_different(make_candidate(first), make_candidate(n)):
            return first, n
    raise AssertionError("no gate-passing pair found")


@pytest.fixture(scope="session")
def close_prime_pair() -> tuple[int, int]:
    """Two primes that pass every gate but are within 12 bits of each other."""
    found = _gate_passing_primes(0xB7E15163)
    first = next(found)
    for n in found:
        if hamming_distance(first, n) < 12:
            return first, n
    raise AssertionError("no close gate-passing pair found")


@pytest.fixture
def scripted_source():
    return ScriptedSource
