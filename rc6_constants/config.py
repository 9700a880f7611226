"""Run configuration: defaults, validation and JSON loading."""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import constants as C
from .errors import ConfigInvalid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreWeights:
    """Weights of the composite selection score."""

    bit_distribution: float = 1.0
    avalanche: float = 2.0
    entropy: float = 1.5
    # Entropy is divided by this before weighting.
    entropy_scale: float = 2.0

    @property
    def total(self) -> float:
        return self.bit_distribution + self.avalanche + self.entropy


@dataclass(frozen=True)
class Config:
    """Thresholds and counts for a single generation run."""

    candidate_count: int = 1000
    avalanche_test_cases: int = 10000
    min_prime_attempts: int = 100
    max_prime_attempts: int = 10000
    worker_count: int = 8
    min_bit_distribution: float = 0.45
    max_bit_distribution: float = 0.55
    # A single rotate‑multiply‑rotate round averages ~0.273.
    min_avalanche_score: float = 0.25
    # Bit‑level entropy at Hamming weight 12 (or 20) is ~0.954.
    min_entropy: float = 0.95
    statistical_analysis: bool = True
    timeout_seconds: float = 1800.0
    selection_fallback: str = C.SELECTION_STRICT
    score_weights: ScoreWeights = field(default_factory=ScoreWeights)
    results_file: str = "rc6_constants.json"
    detailed_logging: bool = True


def default_config() -> Config:
    return Config()


# Accepted runtime types per annotation; ``bool`` is rejected where a number is expected.
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "int": (int,),
    "float": (int, float),
    "bool": (bool,),
    "str": (str,),
}


def _check_field_types(obj: Any, prefix: str = "") -> None:
    for f in dataclasses.fields(obj):
        expected = _FIELD_TYPES.get(f.type)
        if expected is None:
            continue
        value = getattr(obj, f.name)
        is_bool_number = isinstance(value, bool) and f.type != "bool"
        if is_bool_number or not isinstance(value, expected):
            raise ConfigInvalid(
                f"{prefix}{f.name} must be of type {f.type}",
                field=f"{prefix}{f.name}",
                value=value,
            )


def validate_config(config: Config) -> Config:
    """Raise :class:`ConfigInvalid` unless every invariant of ``config`` holds."""
    _check_field_types(config)
    if not isinstance(config.score_weights, ScoreWeights):
        raise ConfigInvalid("score_weights must be a ScoreWeights", value=config.score_weights)
    _check_field_types(config.score_weights, "score_weights.")
    if config.candidate_count < 1:
        raise ConfigInvalid(
            "candidate_count must be positive", candidate_count=config.candidate_count
        )
    if config.worker_count < 1:
        raise ConfigInvalid("worker_count must be positive", worker_count=config.worker_count)
    if config.min_bit_distribution >= config.max_bit_distribution:
        raise ConfigInvalid(
            "invalid bit distribution range",
            min_bit_distribution=config.min_bit_distribution,
            max_bit_distribution=config.max_bit_distribution,
        )
    if not 0.0 <= config.min_avalanche_score <= 1.0:
        raise ConfigInvalid(
            "invalid avalanche score threshold",
            min_avalanche_score=config.min_avalanche_score,
        )
    if config.avalanche_test_cases < 1:
        raise ConfigInvalid(
            "avalanche_test_cases must be positive",
            avalanche_test_cases=config.avalanche_test_cases,
        )
    if not 1 <= config.min_prime_attempts <= config.max_prime_attempts:
        raise ConfigInvalid(
            "invalid prime attempt bounds",
            min_prime_attempts=config.min_prime_attempts,
            max_prime_attempts=config.max_prime_attempts,
        )
    if not 0.0 <= config.min_entropy <= 1.0:
        raise ConfigInvalid("invalid entropy threshold", min_entropy=config.min_entropy)
    if config.timeout_seconds <= 0:
        raise ConfigInvalid(
            "timeout_seconds must be positive", timeout_seconds=config.timeout_seconds
        )
    if config.selection_fallback not in C.SELECTION_FALLBACKS:
        raise ConfigInvalid(
            "unknown selection fallback",
            selection_fallback=config.selection_fallback,
            allowed=C.SELECTION_FALLBACKS,
        )
    w = config.score_weights
    if min(w.bit_distribution, w.avalanche, w.entropy) < 0 or w.total <= 0:
        raise ConfigInvalid("score weights must be non-negative with a positive sum", weights=w)
    if w.entropy_scale <= 0:
        raise ConfigInvalid("entropy_scale must be positive", entropy_scale=w.entropy_scale)
    return config


def replace_config(config: Config, **changes: Any) -> Config:
    """Return a copy of ``config`` with ``changes`` applied (not validated)."""
    return dataclasses.replace(config, **changes)


def config_to_dict(config: Config) -> dict[str, Any]:
    return dataclasses.asdict(config)


def _config_from_mapping(raw: dict[str, Any]) -> Config:
    known = {f.name for f in dataclasses.fields(Config)}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))

    values = {k: v for k, v in raw.items() if k in known}
    weights = values.pop("score_weights", None)
    if weights is not None:
        if not isinstance(weights, dict):
            raise ConfigInvalid("score_weights must be an object", score_weights=weights)
        try:
            values["score_weights"] = ScoreWeights(**weights)
        except TypeError as exc:
            raise ConfigInvalid(f"invalid score_weights: {exc}") from exc
    return replace_config(default_config(), **values)


def load_config(path: str | Path | None = None) -> Config:
    """Load a JSON config file over the defaults and validate it.

    With no ``path`` the validated defaults are returned.
    """
    if not path:
        return validate_config(default_config())

    try:
        text = Path(path).read_text("utf-8")
    except OSError as exc:
        raise ConfigInvalid(f"reading config: {exc}", path=str(path)) from exc
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigInvalid(f"parsing config: {exc}", path=str(path)) from exc
    if not isinstance(raw, dict):
        raise ConfigInvalid("config file must hold a JSON object", path=str(path))

    return validate_config(_config_from_mapping(raw))


__all__ = [
    "Config",
    "ScoreWeights",
    "default_config",
    "validate_config",
    "replace_config",
    "config_to_dict",
    "load_config",
]
