from __future__ import annotations

import numpy as np
import pytest

from rc6_constants.diffusion import (
    avalanche_score,
    combined_avalanche,
    constant_correlation,
    count_avalanche_changes,
    popcount_array,
    rc6_transform,
    rotl32,
    run_avalanche_test,
    transform_array,
)


@pytest.mark.parametrize(
    "x,shift,expected",
    [(1, 1, 2), (0x80000000, 1, 1), (0x12345678, 0, 0x12345678), (0x12345678, 32, 0x12345678), (0xF0000000, 4, 0xF)],
)
def test_rotl32(x: int, shift: int, expected: int) -> None:
    assert rotl32(x, shift) == expected


def test_transform_array_matches_scalar(scripted_source) -> None:
    inputs = scripted_source(seed=3).uint32_array(64)
    constant = 0x9E3779B9
    vector = transform_array(inputs, constant)
    assert vector.dtype == np.uint32
    assert vector.tolist() == [rc6_transform(int(x), constant) for x in inputs]


def test_popcount_array() -> None:
    values = np.array([0, 1, 0xFFFFFFFF, 0xAAAAAAAA, 0x80000001], dtype=np.uint32)
    assert popcount_array(values).tolist() == [0, 1, 32, 16, 2]


def test_identity_constant_only_rotates(scripted_source) -> None:
    # With constant 1 the round is a rotation, so each flip changes one bit.
    result = run_avalanche_test(1, 50, scripted_source(seed=1))
    assert result.total == 50 * 32 * 32
    assert result.changes == 50 * 32
    assert result.score == pytest.approx(1 / 32)


def test_prime_constant_scores_near_single_round_mean(scripted_source) -> None:
    score = avalanche_score(0x9E3779B1, 512, scripted_source(seed=2))
    assert 0.2 < score < 0.35


def test_avalanche_score_is_a_fraction(scripted_source) -> None:
    for constant in (0, 3, 0xFFFFFFFB, 0xB7E15163):
        assert 0.0 <= avalanche_score(constant, 16, scripted_source(seed=constant)) <= 1.0


def test_zero_constant_never_changes_output() -> None:
    inputs = np.arange(10, dtype=np.uint32)
    assert count_avalanche_changes(inputs, 0) == 0


def test_avalanche_rejects_non_positive_cases(scripted_source) -> None:
    with pytest.raises(ValueError):
        run_avalanche_test(3, 0, scripted_source())


def test_combined_avalanche_of_identical_constants_is_zero() -> None:
    assert combined_avalanche(0xB7E15163, 0xB7E15163, 100) == 0.0


def test_combined_avalanche_is_a_fraction() -> None:
    score = combined_avalanche(0xB7E15163, 0x9E3779B9, 1000)
    assert 0.0 < score <= 1.0


def test_constant_correlation_of_complements() -> None:
    assert constant_correlation(0xAAAAAAAA, 0x55555555) == pytest.approx(-1.0)
    assert constant_correlation(0xAAAAAAAA, 0xAAAAAAAA) == pytest.approx(1.0)


def test_constant_correlation_is_one_when_undefined() -> None:
    assert constant_correlation(0, 0x12345678) == 1.0
    assert constant_correlation(0x12345678, 0xFFFFFFFF) == 1.0


def test_constant_correlation_bounded() -> None:
    assert -1.0 <= constant_correlation(0xB7E15163, 0x9E3779B9) <= 1.0
