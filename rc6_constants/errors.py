"""Exception taxonomy for a generation run.

Every error carries a ``context`` mapping with the counts, thresholds and
observed values needed to diagnose a failure without re-running.
"""
from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    """Base class for all failures surfaced by the generator."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: dict[str, Any] = context

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
        return f"{self.message} ({details})"


class ConfigInvalid(GenerationError):
    """Thresholds or counts are unusable; raised before any work starts."""


class RandomSourceFailure(GenerationError):
    """The entropy source could not supply bytes."""


class PrimeSearchExhausted(GenerationError):
    """No prime was found within the attempt bound for one candidate."""


class InsufficientCandidates(GenerationError):
    """Fewer than two candidates survived validation."""


class SelectionFailure(GenerationError):
    """No sufficiently different pair exists in the candidate pool."""


class FinalValidationFailure(GenerationError):
    """The selected pair failed re-validation."""


class GenerationTimeout(GenerationError):
    """The run exceeded its wall-clock budget."""


__all__ = [
    "GenerationError",
    "ConfigInvalid",
    "RandomSourceFailure",
    "PrimeSearchExhausted",
    "InsufficientCandidates",
    "SelectionFailure",
    "FinalValidationFailure",
    "GenerationTimeout",
]
