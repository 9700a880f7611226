"""Accept/reject gates for individual candidates."""
from __future__ import annotations

from typing import Callable

from . import constants as C
from .candidate import Candidate, WeakKeyTest
from .config import Config
from .statistical import hamming_weight

CandidateValidator = Callable[[Candidate, Config], bool]


def matching_weak_pattern(value: int) -> int | None:
    """Return the weak pattern ``value`` equals (directly or complemented)."""
    complement = ~value & C.WORD_MASK
    for pattern in C.WEAK_PATTERNS:
        if value == pattern or complement == pattern:
            return pattern
    return None


def has_simple_bit_pattern(value: int) -> bool:
    return matching_weak_pattern(value) is not None


def run_weak_key_tests(value: int) -> list[WeakKeyTest]:
    weight = hamming_weight(value)
    pattern = matching_weak_pattern(value)
    if pattern is None:
        pattern_details = "no canonical low-complexity pattern"
    else:
        pattern_details = f"matches 0x{pattern:08X} ({C.WEAK_PATTERNS[pattern]})"
    return [
        WeakKeyTest(
            pattern="Low Hamming Weight",
            passed=weight >= C.MIN_HAMMING_WEIGHT,
            details=f"{weight} bits set (minimum {C.MIN_HAMMING_WEIGHT})",
        ),
        WeakKeyTest(
            pattern="Simple Bit Pattern",
            passed=pattern is None,
            details=pattern_details,
        ),
    ]


def rejection_reasons(candidate: Candidate, config: Config) -> list[str]:
    """List every gate ``candidate`` fails; empty means accepted."""
    reasons: list[str] = []
    if not config.min_bit_distribution <= candidate.bit_distribution <= config.max_bit_distribution:
        reasons.append(
            f"bit distribution {candidate.bit_distribution:.4f} outside "
            f"[{config.min_bit_distribution}, {config.max_bit_distribution}]"
        )
    if candidate.avalanche_score < config.min_avalanche_score:
        reasons.append(
            f"avalanche score {candidate.avalanche_score:.4f} below {config.min_avalanche_score}"
        )
    if not C.MIN_HAMMING_WEIGHT <= candidate.hamming_weight <= C.MAX_HAMMING_WEIGHT:
        reasons.append(
            f"hamming weight {candidate.hamming_weight} outside "
            f"[{C.MIN_HAMMING_WEIGHT}, {C.MAX_HAMMING_WEIGHT}]"
        )
    if candidate.entropy_score < config.min_entropy:
        reasons.append(f"entropy {candidate.entropy_score:.4f} below {config.min_entropy}")
    for test in candidate.test_results.weak_key_tests:
        if not test.passed:
            reasons.append(f"weak key: {test.pattern} ({test.details})")
    return reasons


def validate_candidate(candidate: Candidate, config: Config) -> bool:
    return not rejection_reasons(candidate, config)


__all__ = [
    "CandidateValidator",
    "matching_weak_pattern",
    "has_simple_bit_pattern",
    "run_weak_key_tests",
    "rejection_reasons",
    "validate_candidate",
]
