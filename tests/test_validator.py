from __future__ import annotations

from dataclasses import replace

import pytest
from conftest import make_candidate

from rc6_constants.config import Config
from rc6_constants.validator import (
    has_simple_bit_pattern,
    matching_weak_pattern,
    rejection_reasons,
    run_weak_key_tests,
    validate_candidate,
)

# Weight 16, not one of the canonical patterns.
GOOD_VALUE = 0x3C5A96E1


@pytest.mark.parametrize(
    "value,pattern",
    [
        (0xAAAAAAAA, 0xAAAAAAAA),
        (0x55555555, 0xAAAAAAAA),
        (0xCCCCCCCC, 0x33333333),
        (0xF0F0F0F0, 0x0F0F0F0F),
    ],
)
def test_weak_patterns_and_complements(value: int, pattern: int) -> None:
    assert matching_weak_pattern(value) == pattern
    assert has_simple_bit_pattern(value)


@pytest.mark.parametrize("value", [GOOD_VALUE, 0xB7E15163, 0x9E3779B9, 0xAAAAAAAB])
def test_regular_values_have_no_pattern(value: int) -> None:
    assert matching_weak_pattern(value) is None


def test_weak_key_tests_report_low_weight_and_pattern() -> None:
    low, pattern = run_weak_key_tests(0x00000F01)
    assert low.pattern == "Low Hamming Weight" and not low.passed
    assert pattern.pattern == "Simple Bit Pattern" and pattern.passed

    low, pattern = run_weak_key_tests(0x55555555)
    assert low.passed
    assert not pattern.passed
    assert "0xAAAAAAAA" in pattern.details


def test_good_candidate_is_accepted() -> None:
    candidate = make_candidate(GOOD_VALUE)
    assert rejection_reasons(candidate, Config()) == []
    assert validate_candidate(candidate, Config())


@pytest.mark.parametrize(
    "overrides,reason",
    [
        ({"bit_distribution": 0.40}, "bit distribution"),
        ({"bit_distribution": 0.56}, "bit distribution"),
        ({"avalanche": 0.2}, "avalanche score"),
        ({"weight": 11}, "hamming weight"),
        ({"weight": 21}, "hamming weight"),
        ({"entropy": 0.9}, "entropy"),
    ],
)
def test_each_gate_rejects(overrides: dict, reason: str) -> None:
    candidate = make_candidate(GOOD_VALUE, **overrides)
    reasons = rejection_reasons(candidate, Config())
    assert len(reasons) == 1
    assert reasons[0].startswith(reason)
    assert not validate_candidate(candidate, Config())


def test_bounds_are_inclusive() -> None:
    candidate = make_candidate(GOOD_VALUE, bit_distribution=0.45, avalanche=0.25, weight=12, entropy=0.95)
    assert validate_candidate(candidate, Config())


def test_weak_pattern_candidate_is_rejected() -> None:
    reasons = rejection_reasons(make_candidate(0xAAAAAAAA), Config())
    assert any(r.startswith("weak key: Simple Bit Pattern") for r in reasons)


def test_thresholds_come_from_config() -> None:
    candidate = make_candidate(GOOD_VALUE, avalanche=0.27)
    assert not validate_candidate(candidate, Config(min_avalanche_score=0.3))
    relaxed = replace(candidate, entropy_score=0.5)
    assert validate_candidate(relaxed, Config(min_entropy=0.5))
