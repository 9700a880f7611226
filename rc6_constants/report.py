"""Rendering of a :class:`GenerationResult` as text, JSON or CSV."""
from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

from .candidate import Candidate, GenerationResult

FORMATS = ("text", "json", "csv")

_CSV_HEADER = [
    "Constant",
    "Value",
    "BitDistribution",
    "AvalancheScore",
    "EntropyScore",
    "HammingWeight",
]


def _json_default(obj: Any) -> Any:  # noqa: ANN401 – generic hook
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, timedelta):
        return obj.total_seconds()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def result_to_dict(result: GenerationResult) -> dict[str, Any]:
    data = asdict(result)
    data["selected_p"]["value_hex"] = f"0x{result.selected_p.value:08X}"
    data["selected_q"]["value_hex"] = f"0x{result.selected_q.value:08X}"
    return data


def render_json(result: GenerationResult) -> str:
    return json.dumps(result_to_dict(result), indent=2, default=_json_default)


def render_csv(result: GenerationResult) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(_CSV_HEADER)
    for label, c in (("P", result.selected_p), ("Q", result.selected_q)):
        writer.writerow([
            label,
            f"0x{c.value:X}",
            f"{c.bit_distribution:.4f}",
            f"{c.avalanche_score:.4f}",
            f"{c.entropy_score:.4f}",
            c.hamming_weight,
        ])
    return buf.getvalue()


def overall_score(candidate: Candidate) -> float:
    """Summary score shown in reports: avalanche counts twice, every
    statistical test once."""
    total = candidate.avalanche_score * 2.0
    count = 2
    total += candidate.bit_distribution
    count += 1
    total += candidate.entropy_score / 2.0
    count += 1
    for test in candidate.test_results.statistical_tests:
        total += test.score
        count += 1
    return total / count


def _constant_analysis(c: Candidate) -> list[str]:
    lines = [
        f"  Value: 0x{c.value:X}",
        f"  Bit Distribution: {c.bit_distribution:.4f}",
        f"  Avalanche Score: {c.avalanche_score:.4f}",
        f"  Entropy Score: {c.entropy_score:.4f}",
        f"  Hamming Weight: {c.hamming_weight}",
    ]
    tests = sorted(c.test_results.statistical_tests, key=lambda t: t.name)
    if tests:
        lines.append("  Statistical Tests:")
        for test in tests:
            lines.append(f"    {test.name}: {test.score:.4f} ({test.passed})")
            if test.details:
                lines.append(f"      {test.details}")
    return lines


def render_text(result: GenerationResult, *, verbose: bool = False) -> str:
    lines = [
        f"Generation completed in {result.duration}",
        "",
        "Selected Constants:",
        f"P: 0x{result.selected_p.value:X}",
        f"Q: 0x{result.selected_q.value:X}",
    ]
    if not result.pair_constraint_satisfied:
        lines.append("Warning: P and Q do not satisfy the difference constraint")

    if verbose:
        lines += ["", "Detailed Analysis:", "P Constant:"]
        lines += _constant_analysis(result.selected_p)
        lines += ["", "Q Constant:"]
        lines += _constant_analysis(result.selected_q)

    lines += [
        "",
        "Overall Statistical Analysis:",
        f"Total Candidates Tested: {result.total_candidates}",
        f"Generation Time: {result.duration}",
        f"P Constant Overall Score: {overall_score(result.selected_p):.4f}",
        f"Q Constant Overall Score: {overall_score(result.selected_q):.4f}",
    ]
    metrics = result.pair_metrics
    if metrics:
        lines.append(f"Pair Hamming Distance: {metrics.get('hamming_distance')}")
        if "correlation" in metrics:
            lines.append(f"Pair Bit Correlation: {metrics['correlation']:.4f}")
        if "combined_avalanche" in metrics:
            lines.append(f"Combined Avalanche: {metrics['combined_avalanche']:.4f}")
    return "\n".join(lines) + "\n"


def render(result: GenerationResult, fmt: str, *, verbose: bool = False) -> str:
    if fmt == "json":
        return render_json(result)
    if fmt == "csv":
        return render_csv(result)
    return render_text(result, verbose=verbose)


def save_result(result: GenerationResult, path: str | Path) -> None:
    Path(path).write_text(render_json(result), "utf-8")


def load_result_values(path: str | Path) -> dict[str, Any]:
    """Read P/Q values and avalanche scores from a saved JSON result."""
    data = json.loads(Path(path).read_text("utf-8"))
    try:
        p, q = data["selected_p"], data["selected_q"]
        return {
            "p_value": int(p["value"]),
            "q_value": int(q["value"]),
            "p_avalanche": float(p["avalanche_score"]),
            "q_avalanche": float(q["avalanche_score"]),
        }
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"not a generation result file: {path}") from exc


def compare_results(result: GenerationResult, existing: dict[str, Any]) -> str:
    lines = [
        "Comparing with existing constants:",
        "",
        "Existing Constants:",
        f"P: 0x{existing['p_value']:X}",
        f"Q: 0x{existing['q_value']:X}",
        "",
        "Statistical Comparison:",
        "                    New         Existing",
        f"P Avalanche Score: {result.selected_p.avalanche_score:.4f} vs {existing['p_avalanche']:.4f}",
        f"Q Avalanche Score: {result.selected_q.avalanche_score:.4f} vs {existing['q_avalanche']:.4f}",
    ]
    return "\n".join(lines) + "\n"


__all__ = [
    "FORMATS",
    "result_to_dict",
    "render",
    "render_json",
    "render_csv",
    "render_text",
    "overall_score",
    "save_result",
    "load_result_values",
    "compare_results",
]
