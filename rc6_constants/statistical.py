"""Statistical randomness tests over the 32 bits of a single word.

Bit sequences are read least‑significant bit first. Each test returns a
:class:`~rc6_constants.candidate.StatisticalTest` whose score lies in [0, 1].
"""
from __future__ import annotations

import math
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Sequence

from . import constants as C
from .candidate import StatisticalTest

StatisticalTestFn = Callable[[int], StatisticalTest]


def _bits(value: int) -> list[int]:
    return [(value >> i) & 1 for i in range(C.WORD_BITS)]


def _clamp(score: float) -> float:
    return min(1.0, max(0.0, score))


def hamming_weight(value: int) -> int:
    return bin(value & C.WORD_MASK).count("1")


def hamming_distance(a: int, b: int) -> int:
    return hamming_weight(a ^ b)


def calculate_bit_distribution(value: int) -> float:
    """Fraction of set bits."""
    return hamming_weight(value) / float(C.WORD_BITS)


def calculate_entropy(value: int) -> float:
    """Shannon entropy (base 2) of the 0/1 frequencies of the word's bits."""
    ones = hamming_weight(value)
    entropy = 0.0
    for count in (ones, C.WORD_BITS - ones):
        p = count / float(C.WORD_BITS)
        if p > 0:
            entropy -= p * math.log2(p)
    return entropy


def run_bit_frequency_test(value: int) -> StatisticalTest:
    """Frequency (monobit) test."""
    proportion = calculate_bit_distribution(value)
    deviation = abs(proportion - 0.5)
    return StatisticalTest(
        name="Bit Frequency Test",
        score=_clamp(1.0 - deviation * 2),
        passed=deviation <= C.MAX_BIT_FREQUENCY_DEVIATION,
        details=f"Proportion of ones: {proportion:.4f} (deviation: {deviation:.4f})",
    )


def count_runs(value: int) -> int:
    bits = _bits(value)
    return 1 + sum(1 for prev, cur in zip(bits, bits[1:]) if prev != cur)


def run_runs_test(value: int) -> StatisticalTest:
    """Runs test: observed run count against its expectation for n0/n1."""
    n = C.WORD_BITS
    runs = count_runs(value)
    n1 = hamming_weight(value)
    n0 = n - n1
    expected = 1.0 + 2.0 * n0 * n1 / n
    variance = (expected - 1.0) * (expected - 2.0) / (n - 1)

    if variance <= 0:
        # Constant word: a single run, no spread to measure against.
        return StatisticalTest(
            name="Runs Test",
            score=0.0,
            passed=False,
            details=f"Degenerate sequence (runs: {runs}, expected: {expected:.2f})",
        )

    z_score = (runs - expected) / math.sqrt(variance)
    return StatisticalTest(
        name="Runs Test",
        score=_clamp(1.0 - abs(z_score / C.RUNS_Z_SCALE)),
        passed=C.MIN_RUNS_Z_SCORE <= z_score <= C.MAX_RUNS_Z_SCORE,
        details=f"Z-score: {z_score:.4f} (runs: {runs}, expected: {expected:.2f})",
    )


def serial_pattern_counts(value: int) -> list[int]:
    """Counts of the 2‑bit patterns 00, 01, 10, 11 over 31 overlapping windows."""
    counts = [0, 0, 0, 0]
    for i in range(C.WORD_BITS - 1):
        counts[(value >> i) & 0x3] += 1
    return counts


def run_serial_test(value: int) -> StatisticalTest:
    """Serial test: chi‑square of 2‑bit pattern frequencies."""
    counts = serial_pattern_counts(value)
    expected = (C.WORD_BITS - 1) / 4.0
    chi_square = sum((count - expected) ** 2 / expected for count in counts)
    p_value = 1.0 - math.exp(-chi_square / 2.0)
    return StatisticalTest(
        name="Serial Test",
        score=_clamp(1.0 - abs(p_value - 0.5) * 2),
        passed=C.MIN_P_VALUE <= p_value <= C.MAX_P_VALUE,
        details=f"Chi-square: {chi_square:.4f} (p-value: {p_value:.4f})",
    )


def calculate_autocorrelation(value: int, shift: int) -> float:
    """Deviation from 0.5 of the agreement between bits ``i`` and ``i+shift``."""
    total = C.WORD_BITS - shift
    matches = sum(
        1 for i in range(total) if (value >> i) & 1 == (value >> (i + shift)) & 1
    )
    return abs(matches / float(total) - 0.5) * 2


def run_autocorrelation_test(value: int) -> StatisticalTest:
    max_correlation = max(
        calculate_autocorrelation(value, shift)
        for shift in range(1, C.MAX_AUTOCORRELATION_SHIFT + 1)
    )
    return StatisticalTest(
        name="Autocorrelation Test",
        score=_clamp(1.0 - max_correlation),
        passed=max_correlation <= C.MAX_SERIAL_CORRELATION,
        details=f"Maximum correlation: {max_correlation:.4f}",
    )


def calculate_linear_complexity(value: int) -> int:
    """Berlekamp–Massey over GF(2): length of the shortest generating LFSR."""
    seq = _bits(value)
    n_bits = len(seq)
    c = [0] * n_bits
    b = [0] * n_bits
    c[0] = b[0] = 1
    length = 0
    m = -1
    for n in range(n_bits):
        d = seq[n]
        for i in range(1, length + 1):
            d ^= c[i] & seq[n - i]
        if d == 0:
            continue
        t = c[:]
        shift = n - m
        for i in range(n_bits - shift):
            c[i + shift] ^= b[i]
        if 2 * length <= n:
            length = n + 1 - length
            m = n
            b = t
    return length


def run_linear_complexity_test(value: int) -> StatisticalTest:
    complexity = calculate_linear_complexity(value)
    deviation = abs(complexity - C.EXPECTED_LINEAR_COMPLEXITY)
    return StatisticalTest(
        name="Linear Complexity Test",
        score=_clamp(1.0 - deviation / C.EXPECTED_LINEAR_COMPLEXITY),
        passed=complexity >= C.MIN_LINEAR_COMPLEXITY,
        details=f"Linear complexity: {complexity} bits",
    )


STATISTICAL_TESTS: tuple[StatisticalTestFn, ...] = (
    run_bit_frequency_test,
    run_runs_test,
    run_serial_test,
    run_autocorrelation_test,
    run_linear_complexity_test,
)


def run_all_statistical_tests(
    value: int,
    *,
    executor: Executor | None = None,
    tests: Sequence[StatisticalTestFn] = STATISTICAL_TESTS,
) -> list[StatisticalTest]:
    """Run ``tests`` concurrently on ``value`` and return their results.

    Result order is unspecified. When no ``executor`` is given a short‑lived
    pool sized to the number of tests is used.
    """
    if executor is None:
        with ThreadPoolExecutor(max_workers=max(1, len(tests))) as pool:
            return run_all_statistical_tests(value, executor=pool, tests=tests)

    lock = threading.Lock()
    results: list[StatisticalTest] = []

    def _run_one(test: StatisticalTestFn) -> None:
        outcome = test(value)
        with lock:
            results.append(outcome)

    futures = [executor.submit(_run_one, test) for test in tests]
    for fut in futures:
        fut.result()
    return results


def aggregate_test_results(tests: Sequence[StatisticalTest]) -> float:
    """Mean score of ``tests`` (0.0 for none)."""
    if not tests:
        return 0.0
    return sum(t.score for t in tests) / len(tests)


def verify_test_results(tests: Sequence[StatisticalTest]) -> bool:
    """``True`` when no more than a fifth of ``tests`` failed."""
    failed = sum(1 for t in tests if not t.passed)
    return failed <= int(len(tests) * C.MAX_FAILED_TEST_FRACTION)


__all__ = [
    "STATISTICAL_TESTS",
    "hamming_weight",
    "hamming_distance",
    "calculate_bit_distribution",
    "calculate_entropy",
    "run_bit_frequency_test",
    "count_runs",
    "run_runs_test",
    "serial_pattern_counts",
    "run_serial_test",
    "calculate_autocorrelation",
    "run_autocorrelation_test",
    "calculate_linear_complexity",
    "run_linear_complexity_test",
    "run_all_statistical_tests",
    "aggregate_test_results",
    "verify_test_results",
]
