"""Composite scoring and P/Q pair selection."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from . import constants as C
from .candidate import Candidate
from .config import ScoreWeights
from .diffusion import rotl32
from .errors import InsufficientCandidates, SelectionFailure
from .statistical import hamming_distance

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    p: Candidate
    q: Candidate
    # False when Q came from the second‑best fallback.
    constraint_satisfied: bool = True


def calculate_score(candidate: Candidate, weights: ScoreWeights | None = None) -> float:
    """Weighted mean of bit balance, avalanche and scaled entropy."""
    w = weights or ScoreWeights()
    bit_dist_score = 1.0 - abs(0.5 - candidate.bit_distribution)
    return (
        w.bit_distribution * bit_dist_score
        + w.avalanche * candidate.avalanche_score
        + w.entropy * (candidate.entropy_score / w.entropy_scale)
    ) / w.total


def are_rotation_related(a: int, b: int) -> bool:
    """True if ``a`` is a 1..31 bit rotation or shift of ``b``."""
    for i in range(1, C.WORD_BITS):
        if a in (rotl32(b, i), rotl32(b, C.WORD_BITS - i)):
            return True
        if a == (b << i) & C.WORD_MASK or a == b >> i:
            return True
    return False


def are_sufficiently_different(a: Candidate, b: Candidate) -> bool:
    if hamming_distance(a.value, b.value) < C.MIN_PAIR_HAMMING_DISTANCE:
        return False
    return not are_rotation_related(a.value, b.value)


def rank_candidates(
    candidates: Sequence[Candidate], weights: ScoreWeights | None = None
) -> list[tuple[float, Candidate]]:
    """Score once and sort descending; equal scores keep pool order."""
    scored = [(calculate_score(c, weights), c) for c in candidates]
    scored.sort(key=lambda item: item[0], reverse=True)
    return scored


def select_best_constants(
    candidates: Sequence[Candidate],
    weights: ScoreWeights | None = None,
    *,
    fallback: str = C.SELECTION_STRICT,
) -> Selection:
    """Pick P as the best‑scoring candidate and Q as the best one unlike P.

    With ``fallback="second_best"`` a pool with no qualifying Q yields the
    second‑best candidate and ``constraint_satisfied=False``; with the
    default ``"strict"`` it raises :class:`SelectionFailure`.
    """
    if len(candidates) < 2:
        raise InsufficientCandidates(
            "insufficient candidates for selection", got=len(candidates), need=2
        )

    ranked = rank_candidates(candidates, weights)
    best_score, best_p = ranked[0]
    for score, candidate in ranked[1:]:
        if are_sufficiently_different(best_p, candidate):
            logger.debug(
                "selected P=0x%08X (%.4f) Q=0x%08X (%.4f)",
                best_p.value, best_score, candidate.value, score,
            )
            return Selection(best_p, candidate)

    if fallback == C.SELECTION_SECOND_BEST:
        second = ranked[1][1]
        logger.warning(
            "no sufficiently different Q for P=0x%08X; falling back to second best 0x%08X",
            best_p.value, second.value,
        )
        return Selection(best_p, second, constraint_satisfied=False)

    raise SelectionFailure(
        "no sufficiently different pair found",
        best_p=f"0x{best_p.value:08X}",
        pool_size=len(candidates),
        min_hamming_distance=C.MIN_PAIR_HAMMING_DISTANCE,
    )


__all__ = [
    "Selection",
    "calculate_score",
    "are_rotation_related",
    "are_sufficiently_different",
    "rank_candidates",
    "select_best_constants",
]
