"""Public package interface for the RC6 constant search.

Typical usage
-------------
>>> from rc6_constants import Generator, default_config
>>> result = Generator(default_config()).generate()
>>> hex(result.selected_p.value), hex(result.selected_q.value)
"""
from importlib.metadata import version as _version  # type: ignore

from .candidate import Candidate, GenerationResult, StatisticalTest, TestResults
from .config import Config, ScoreWeights, default_config, load_config, validate_config
from .errors import (
    ConfigInvalid,
    FinalValidationFailure,
    GenerationError,
    GenerationTimeout,
    InsufficientCandidates,
    PrimeSearchExhausted,
    RandomSourceFailure,
    SelectionFailure,
)
from .generator import Generator
from .logger import RunLogger
from .primes import RandomSource, is_prime

__all__ = [
    "Candidate",
    "GenerationResult",
    "StatisticalTest",
    "TestResults",
    "Config",
    "ScoreWeights",
    "default_config",
    "load_config",
    "validate_config",
    "GenerationError",
    "ConfigInvalid",
    "RandomSourceFailure",
    "PrimeSearchExhausted",
    "InsufficientCandidates",
    "SelectionFailure",
    "FinalValidationFailure",
    "GenerationTimeout",
    "Generator",
    "RunLogger",
    "RandomSource",
    "is_prime",
    "__version__",
]

try:
    __version__ = _version("rc6_constants")
except Exception:  # pragma: no cover – package not installed yet
    __version__ = "0.0.0"
