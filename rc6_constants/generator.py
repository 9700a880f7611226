"""Parallel candidate search and pair selection.

A run fans ``candidate_count`` attempts out over a fixed thread pool. Each
worker samples a prime, measures it, gates it through the validator and keeps
accepted candidates locally; the reports are merged once every worker has
finished. Cancellation is cooperative: workers check the run's
:class:`threading.Event` once per attempt, so a prime search or statistical
pass already in flight always completes before the worker stops.
"""
from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Sequence

from sympy import isprime

from . import constants as C
from .candidate import Candidate, GenerationResult, PrimalityTest, TestResults
from .config import Config, validate_config
from .diffusion import combined_avalanche, constant_correlation, run_avalanche_test
from .errors import (
    FinalValidationFailure,
    GenerationTimeout,
    InsufficientCandidates,
    PrimeSearchExhausted,
    RandomSourceFailure,
)
from .logger import RunLogger
from .primes import RandomSource, is_prime, sample_prime
from .selector import Selection, are_sufficiently_different, select_best_constants
from .statistical import (
    STATISTICAL_TESTS,
    calculate_bit_distribution,
    calculate_entropy,
    hamming_distance,
    hamming_weight,
    run_all_statistical_tests,
    verify_test_results,
)
from .validator import CandidateValidator, rejection_reasons, run_weak_key_tests, validate_candidate


@dataclass
class WorkerReport:
    """What one worker produced; merged after the join barrier."""

    worker_id: int
    attempts: int = 0
    rejected: int = 0
    accepted: list[Candidate] = field(default_factory=list)
    errors: list[PrimeSearchExhausted] = field(default_factory=list)
    source_failures: list[RandomSourceFailure] = field(default_factory=list)


def split_attempts(total: int, workers: int) -> list[int]:
    """Spread ``total`` attempts over ``workers`` as evenly as possible."""
    base, extra = divmod(total, workers)
    return [base + (1 if i < extra else 0) for i in range(workers)]


class Generator:
    """Runs one or more generation passes for a fixed :class:`Config`."""

    def __init__(
        self,
        config: Config,
        *,
        logger: RunLogger | None = None,
        random_source: RandomSource | None = None,
        validator: CandidateValidator | None = None,
    ) -> None:
        self.config = config
        self.logger = logger or RunLogger(detailed=config.detailed_logging)
        self.random_source = random_source or RandomSource()
        self.validator = validator or validate_candidate

    # ------------------------------------------------------------------
    # single candidate

    def run_tests(self, value: int, stats_executor: Executor | None = None) -> TestResults:
        started = time.perf_counter()
        primality = PrimalityTest(
            passed=is_prime(value),
            method="Miller-Rabin",
            details=f"Tested with bases {list(C.MILLER_RABIN_WITNESSES)}",
            duration=time.perf_counter() - started,
        )
        avalanche = run_avalanche_test(value, self.config.avalanche_test_cases, self.random_source)
        statistical: tuple = ()
        if self.config.statistical_analysis:
            statistical = tuple(run_all_statistical_tests(value, executor=stats_executor))
        return TestResults(
            primality_tests=(primality,),
            avalanche_tests=(avalanche,),
            statistical_tests=statistical,
            weak_key_tests=tuple(run_weak_key_tests(value)),
        )

    def generate_candidate(self, stats_executor: Executor | None = None) -> Candidate:
        generated_at = datetime.now()
        started = time.perf_counter()
        value = sample_prime(self.random_source, self.config.max_prime_attempts)
        results = self.run_tests(value, stats_executor)
        return Candidate(
            value=value,
            bit_distribution=calculate_bit_distribution(value),
            avalanche_score=results.avalanche_tests[0].score,
            hamming_weight=hamming_weight(value),
            entropy_score=calculate_entropy(value),
            test_results=results,
            generated_at=generated_at,
            test_duration=time.perf_counter() - started,
        )

    # ------------------------------------------------------------------
    # worker pool

    def _worker(
        self,
        worker_id: int,
        attempts: int,
        cancel: threading.Event,
        stats_executor: Executor,
    ) -> WorkerReport:
        report = WorkerReport(worker_id)
        for _ in range(attempts):
            if cancel.is_set():
                self.logger.debug("worker cancelled", worker=worker_id, attempts=report.attempts)
                break
            report.attempts += 1
            try:
                candidate = self.generate_candidate(stats_executor)
            except PrimeSearchExhausted as exc:
                report.errors.append(exc)
                self.logger.warning("candidate attempt discarded", worker=worker_id, error=exc)
                continue
            except RandomSourceFailure as exc:
                report.source_failures.append(exc)
                self.logger.warning(
                    "random source failed; attempt discarded", worker=worker_id, error=exc
                )
                continue

            if self.validator(candidate, self.config):
                report.accepted.append(candidate)
                self.logger.debug(
                    "candidate accepted",
                    worker=worker_id,
                    value=f"0x{candidate.value:08X}",
                    avalanche=round(candidate.avalanche_score, 4),
                )
            else:
                report.rejected += 1
                self.logger.debug(
                    "candidate rejected",
                    worker=worker_id,
                    value=f"0x{candidate.value:08X}",
                    reasons="; ".join(rejection_reasons(candidate, self.config)),
                )

        if report.attempts and len(report.source_failures) == report.attempts:
            raise RandomSourceFailure(
                "random source failed for every attempt",
                worker=worker_id,
                attempts=report.attempts,
                cause=str(report.source_failures[-1]),
            )
        return report

    def _collect(
        self,
        futures: Sequence[Future],
        cancel: threading.Event,
        deadline: float,
    ) -> list[WorkerReport]:
        pending = set(futures)
        while pending:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                cancel.set()
                raise GenerationTimeout(
                    "generation timed out",
                    timeout_seconds=self.config.timeout_seconds,
                    workers_outstanding=len(pending),
                    workers_total=len(futures),
                )
            done, pending = wait(pending, timeout=remaining, return_when=FIRST_EXCEPTION)
            for fut in done:
                exc = fut.exception()
                if exc is not None:
                    cancel.set()
                    self.logger.error("worker failed; aborting run", error=exc)
                    raise exc
        return [fut.result() for fut in futures]

    def generate(self) -> GenerationResult:
        """Run the search and return the selected pair.

        Raises a :class:`~rc6_constants.errors.GenerationError` subclass on
        any failure; no partial result is ever returned.
        """
        config = validate_config(self.config)
        start_time = datetime.now()
        deadline = time.monotonic() + config.timeout_seconds
        cancel = threading.Event()
        batches = split_attempts(config.candidate_count, config.worker_count)

        self.logger.info(
            "starting generation",
            candidates=config.candidate_count,
            workers=config.worker_count,
            timeout=config.timeout_seconds,
        )

        pool = ThreadPoolExecutor(max_workers=config.worker_count, thread_name_prefix="rc6-worker")
        stats_pool = ThreadPoolExecutor(
            max_workers=len(STATISTICAL_TESTS), thread_name_prefix="rc6-stats"
        )
        try:
            futures = [
                pool.submit(self._worker, worker_id, attempts, cancel, stats_pool)
                for worker_id, attempts in enumerate(batches)
            ]
            reports = self._collect(futures, cancel, deadline)

            candidates = [c for report in reports for c in report.accepted]
            attempts = sum(r.attempts for r in reports)
            rejected = sum(r.rejected for r in reports)
            discarded = sum(len(r.errors) for r in reports)
            source_failures = sum(len(r.source_failures) for r in reports)
            self.logger.info(
                "workers finished",
                attempts=attempts,
                accepted=len(candidates),
                rejected=rejected,
                discarded=discarded,
                source_failures=source_failures,
            )
            if len(candidates) < 2:
                raise InsufficientCandidates(
                    "insufficient valid candidates generated",
                    got=len(candidates),
                    need=2,
                    attempts=attempts,
                    rejected=rejected,
                    prime_search_failures=discarded,
                    source_failures=source_failures,
                )
            return self.process_results(candidates, start_time, stats_pool)
        finally:
            cancel.set()
            pool.shutdown(wait=False, cancel_futures=True)
            stats_pool.shutdown(wait=False, cancel_futures=True)

    # ------------------------------------------------------------------
    # selection and final checks

    def process_results(
        self,
        candidates: Sequence[Candidate],
        start_time: datetime,
        stats_executor: Executor | None = None,
    ) -> GenerationResult:
        selection = select_best_constants(
            candidates, self.config.score_weights, fallback=self.config.selection_fallback
        )
        self.validate_selected_constants(selection.p, selection.q)
        p, q = self.run_final_validation(selection, stats_executor)

        end_time = datetime.now()
        result = GenerationResult(
            selected_p=p,
            selected_q=q,
            total_candidates=len(candidates),
            start_time=start_time,
            end_time=end_time,
            duration=end_time - start_time,
            config=self.config,
            pair_constraint_satisfied=selection.constraint_satisfied,
            pair_metrics=self.pair_metrics(p.value, q.value),
        )
        self.logger.info(
            "generation complete",
            p=f"0x{p.value:08X}",
            q=f"0x{q.value:08X}",
            total_candidates=result.total_candidates,
            duration=result.duration.total_seconds(),
        )
        return result

    def _is_valid_bit_distribution(self, candidate: Candidate) -> bool:
        return (
            self.config.min_bit_distribution
            <= candidate.bit_distribution
            <= self.config.max_bit_distribution
        )

    def validate_selected_constants(self, p: Candidate, q: Candidate) -> None:
        """Re-check the chosen pair before the expensive final pass."""
        if p.value == 0 or q.value == 0:
            raise FinalValidationFailure("zero value constant selected", p=p.value, q=q.value)
        if (
            p.avalanche_score < self.config.min_avalanche_score
            or q.avalanche_score < self.config.min_avalanche_score
        ):
            raise FinalValidationFailure(
                "constants do not meet minimum avalanche score",
                p_avalanche=p.avalanche_score,
                q_avalanche=q.avalanche_score,
                min_avalanche_score=self.config.min_avalanche_score,
            )
        if not self._is_valid_bit_distribution(p) or not self._is_valid_bit_distribution(q):
            raise FinalValidationFailure(
                "constants do not meet bit distribution requirements",
                p_bit_distribution=p.bit_distribution,
                q_bit_distribution=q.bit_distribution,
            )
        for c in (p, q):
            if not (is_prime(c.value) and isprime(c.value)):
                raise FinalValidationFailure(
                    "selected constant is not prime", value=f"0x{c.value:08X}"
                )

    def run_final_validation(
        self, selection: Selection, stats_executor: Executor | None = None
    ) -> tuple[Candidate, Candidate]:
        """Re-run the statistical suite on P and Q and confirm they differ.

        Returns the pair with their statistical results replaced by the final
        ones.
        """
        p_tests = tuple(run_all_statistical_tests(selection.p.value, executor=stats_executor))
        q_tests = tuple(run_all_statistical_tests(selection.q.value, executor=stats_executor))
        p = replace(
            selection.p,
            test_results=replace(selection.p.test_results, statistical_tests=p_tests),
        )
        q = replace(
            selection.q,
            test_results=replace(selection.q.test_results, statistical_tests=q_tests),
        )

        if not verify_test_results(p_tests) or not verify_test_results(q_tests):
            raise FinalValidationFailure(
                "final statistical tests failed",
                p_failed=sorted(t.name for t in p_tests if not t.passed),
                q_failed=sorted(t.name for t in q_tests if not t.passed),
            )

        if not are_sufficiently_different(p, q):
            distance = hamming_distance(p.value, q.value)
            if selection.constraint_satisfied:
                raise FinalValidationFailure(
                    "selected constants are not sufficiently different",
                    hamming_distance=distance,
                    min_hamming_distance=C.MIN_PAIR_HAMMING_DISTANCE,
                )
            self.logger.warning(
                "selected pair violates the difference constraint",
                p=f"0x{p.value:08X}",
                q=f"0x{q.value:08X}",
                hamming_distance=distance,
            )
        return p, q

    def pair_metrics(self, p: int, q: int) -> dict[str, Any]:
        return {
            "hamming_distance": hamming_distance(p, q),
            "correlation": constant_correlation(p, q),
            "combined_avalanche": combined_avalanche(p, q, self.config.avalanche_test_cases),
        }


__all__ = ["Generator", "WorkerReport", "split_attempts"]
