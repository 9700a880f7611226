"""Command‑line interface wrapper around :class:`rc6_constants.generator.Generator`."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import constants as C
from .config import Config, load_config, replace_config, validate_config
from .errors import ConfigInvalid, GenerationError
from .generator import Generator
from .logger import RunLogger
from .report import FORMATS, compare_results, load_result_values, render, save_result

__all__ = ["main"]

logger = logging.getLogger(__name__)


def _parse_cli(argv: list[str] | None = None) -> argparse.Namespace:  # noqa: D401 – imperative mood
    parser = argparse.ArgumentParser(
        description="Search for prime RC6-style P/Q mixing constants"
    )
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument(
        "--format",
        choices=FORMATS,
        default="text",
        type=str.lower,
        help="Output format",
    )
    parser.add_argument("--verbose", action="store_true", help="Show per-constant analysis")
    parser.add_argument("--output", help="Write the rendered result to this file")
    parser.add_argument(
        "--quick",
        action="store_true",
        help=(
            f"Quick run with {C.QUICK_CANDIDATES} candidates and "
            f"{C.QUICK_AVALANCHE_CASES} avalanche test cases"
        ),
    )
    parser.add_argument("--compare", help="Compare with an existing JSON result file")
    parser.add_argument("--workers", type=int, help="Override the worker count")
    parser.add_argument("--candidates", type=int, help="Override the candidate count")
    parser.add_argument("--timeout", type=float, help="Override the run timeout in seconds")
    parser.add_argument(
        "--selection-fallback",
        choices=C.SELECTION_FALLBACKS,
        help="What to do when no sufficiently different Q exists",
    )
    parser.add_argument(
        "--log-level",
        choices=["WARNING", "INFO", "DEBUG"],
        default="WARNING",
        help="Logging level for rc6_constants",
    )
    return parser.parse_args(argv)


def _apply_overrides(config: Config, ns: argparse.Namespace) -> Config:
    changes: dict[str, object] = {}
    if ns.quick:
        changes["candidate_count"] = C.QUICK_CANDIDATES
        changes["avalanche_test_cases"] = C.QUICK_AVALANCHE_CASES
    if ns.workers is not None:
        changes["worker_count"] = ns.workers
    if ns.candidates is not None:
        changes["candidate_count"] = ns.candidates
    if ns.timeout is not None:
        changes["timeout_seconds"] = ns.timeout
    if ns.selection_fallback is not None:
        changes["selection_fallback"] = ns.selection_fallback
    if not changes:
        return config
    return validate_config(replace_config(config, **changes))


def _configure_logging(level_name: str) -> int:
    logging.basicConfig(level=logging.WARNING)
    level = getattr(logging, level_name)
    pkg_logger = logging.getLogger("rc6_constants")
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(logging.BASIC_FORMAT))
    handler.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False
    pkg_logger.setLevel(level)
    return level


def main(argv: list[str] | None = None) -> None:  # noqa: D401 – imperative mood
    ns = _parse_cli(argv)
    level = _configure_logging(ns.log_level)

    try:
        config = _apply_overrides(load_config(ns.config), ns)
    except ConfigInvalid as exc:
        sys.exit(f"Error loading configuration: {exc}")

    if ns.quick:
        print("Running in quick test mode with reduced parameters", file=sys.stderr)

    run_logger = RunLogger(detailed=config.detailed_logging and level <= logging.INFO)
    generator = Generator(config, logger=run_logger)
    print("Starting RC6 constant generation and analysis...", file=sys.stderr)
    try:
        result = generator.generate()
    except GenerationError as exc:
        sys.exit(f"Error generating constants: {exc}")

    if config.results_file:
        try:
            save_result(result, config.results_file)
        except OSError as exc:
            logger.error("Failed to save results to %s: %s", config.results_file, exc)

    rendered = render(result, ns.format, verbose=ns.verbose)
    if ns.output:
        Path(ns.output).write_text(rendered, "utf-8")
        print(f"✔ Result written to {ns.output}")
    else:
        sys.stdout.write(rendered)

    if ns.compare:
        try:
            existing = load_result_values(ns.compare)
        except (OSError, ValueError) as exc:
            print(f"Error reading comparison file: {exc}", file=sys.stderr)
            return
        sys.stdout.write(compare_results(result, existing))


if __name__ == "__main__":  # pragma: no cover
    main()
