"""Data model for candidates and run results."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .config import Config


@dataclass(frozen=True)
class PrimalityTest:
    passed: bool
    method: str
    details: str = ""
    duration: float = 0.0


@dataclass(frozen=True)
class AvalancheTest:
    score: float
    changes: int
    total: int
    duration: float = 0.0


@dataclass(frozen=True)
class StatisticalTest:
    name: str
    score: float
    passed: bool
    details: str = ""


@dataclass(frozen=True)
class WeakKeyTest:
    pattern: str
    passed: bool
    details: str = ""


@dataclass(frozen=True)
class TestResults:
    """Independent sub‑results gathered for one candidate."""

    __test__ = False  # keep pytest from collecting this class

    primality_tests: tuple[PrimalityTest, ...] = ()
    avalanche_tests: tuple[AvalancheTest, ...] = ()
    statistical_tests: tuple[StatisticalTest, ...] = ()
    weak_key_tests: tuple[WeakKeyTest, ...] = ()

    @property
    def weak_key_passed(self) -> bool:
        return all(t.passed for t in self.weak_key_tests)


@dataclass(frozen=True)
class Candidate:
    """A prime together with the measurements used to judge it."""

    value: int
    bit_distribution: float
    avalanche_score: float
    hamming_weight: int
    entropy_score: float
    test_results: TestResults = field(default_factory=TestResults)
    generated_at: datetime = field(default_factory=datetime.now)
    test_duration: float = 0.0


@dataclass
class GenerationResult:
    """Outcome of a successful run, handed to the serialization layer."""

    selected_p: Candidate
    selected_q: Candidate
    total_candidates: int
    start_time: datetime
    end_time: datetime
    duration: timedelta
    config: Config
    pair_constraint_satisfied: bool = True
    pair_metrics: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "PrimalityTest",
    "AvalancheTest",
    "StatisticalTest",
    "WeakKeyTest",
    "TestResults",
    "Candidate",
    "GenerationResult",
]
