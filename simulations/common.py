# simulations/common.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import time

from src.coin_flip_simulation.coin_flip_simulation import CoinFlipResult, EmpiricalResult


# 2^24 outcome strings is the most a single run enumerates
MAX_FLIPS = 24


@dataclass(frozen=True)
class SimulationSpec:
    """
    Parameters for one simulation run, checked before the engine is called.
    """
    flips: int
    iterations: int
    seed: Optional[int] = None
    partitions: int = 1  # number of sequential sub-runs whose tallies are merged

    def __post_init__(self) -> None:
        for name in ("flips", "iterations", "partitions"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {type(value).__name__}")
        if self.flips < 0:
            raise ValueError("flips must be >= 0")
        if self.flips > MAX_FLIPS:
            raise ValueError(f"flips must be <= {MAX_FLIPS}")
        if self.iterations <= 0:
            raise ValueError("iterations must be > 0")
        if self.partitions <= 0:
            raise ValueError("partitions must be > 0")
        if self.partitions > self.iterations:
            raise ValueError("partitions must be <= iterations")


@dataclass
class SimulationReport:
    """
    Common return type for the simulation runners.
    """
    spec: SimulationSpec
    result: CoinFlipResult

    runtime_s: Optional[float] = None
    meta: Dict[str, Any] = field(default_factory=dict)


class Timer:
    """
    Wall-clock timer for a block; elapsed_s stays None until the block exits.

        with Timer() as t:
            run(...)
        t.elapsed_s
    """
    def __init__(self) -> None:
        self.started_at: Optional[float] = None
        self.elapsed_s: Optional[float] = None

    def __enter__(self) -> "Timer":
        self.started_at = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.elapsed_s = time.perf_counter() - self.started_at


def _entry(r: EmpiricalResult) -> Dict[str, Any]:
    return {"count": r.count, "probability": r.probability}


def result_to_dict(result: CoinFlipResult) -> Dict[str, Any]:
    """
    Canonical external representation of a result (used for JSON output).
    Outcomes keep their ascending order.
    """
    return {
        "iterations": result.iterations,
        "expected": _entry(result.expected),
        "actual": {outcome: _entry(r) for outcome, r in result.results.items()},
    }


def format_empirical(r: EmpiricalResult) -> str:
    return f"{{count: {r.count}, probability: {r.probability:.5f}}}"


def format_result(result: CoinFlipResult, indent: str = "    ") -> str:
    """
    Human-friendly multi-line report:

        {
            iterations: 8000
            expected: {count: 1000, probability: 0.12500}
            actual: {
                HHH: {count: 1012, probability: 0.12650}
                ...
            }
        }
    """
    lines = [
        "{",
        f"{indent}iterations: {result.iterations}",
        f"{indent}expected: {format_empirical(result.expected)}",
        f"{indent}actual: {{",
    ]
    for outcome, r in result.results.items():
        lines.append(f"{indent}{indent}{outcome}: {format_empirical(r)}")
    lines.append(f"{indent}}}")
    lines.append("}")
    return "\n".join(lines)


def max_deviation(result: CoinFlipResult) -> float:
    """
    Largest absolute gap between an empirical probability and the expected one.
    """
    expected = result.expected.probability
    worst = 0.0
    for r in result.results.values():
        d = abs(r.probability - expected)
        if d > worst:
            worst = d
    return worst


def format_summary_line(report: SimulationReport) -> str:
    """
    One-liner for logs and the CLI footer.
    """
    res = report.result
    return (
        f"flips={report.spec.flips}, iterations={res.iterations}, "
        f"outcomes={len(res.results)}, expected_p={res.expected.probability:.5f}, "
        f"max_dev={max_deviation(res):.5f}"
        + (f", runtime={report.runtime_s:.3f}s" if report.runtime_s is not None else "")
    )
