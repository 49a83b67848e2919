from __future__ import annotations

import random
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional

from .outcomes import Coin, InvalidArgument, enumerate_outcomes, num_outcomes


__all__ = [
    "CoinFlipResult",
    "EmpiricalResult",
    "EXPECTED_METHODS",
    "InvalidArgument",
    "build_result",
    "get_expected_method",
    "merge_tallies",
    "run",
    "tally_trials",
]


@dataclass(frozen=True)
class EmpiricalResult:
    """
    Raw count of an outcome and its observed probability (count / iterations).
    """
    count: int
    probability: float

    @classmethod
    def from_count(cls, count: int, iterations: int) -> "EmpiricalResult":
        return cls(count=count, probability=count / iterations)


@dataclass(frozen=True)
class CoinFlipResult:
    """
    Result of one simulation run.

    results maps every outcome string to its EmpiricalResult, ordered by
    outcome ascending. It is a read-only view.
    """
    iterations: int
    expected: EmpiricalResult
    results: Mapping[str, EmpiricalResult]

    def __post_init__(self) -> None:
        ordered = {k: self.results[k] for k in sorted(self.results)}
        object.__setattr__(self, "results", MappingProxyType(ordered))

        # Sanity: every trial is tallied exactly once
        actual = 0
        for r in ordered.values():
            actual += r.count
        if actual != self.iterations:
            raise ValueError(
                f"counts sum mismatch: expected {self.iterations}, got {actual}"
            )


# ------------------------------------------------------------
# Argument checks
# ------------------------------------------------------------

def _check_args(flips_per_iteration: int, iterations: int) -> None:
    for name, value in (
        ("flips_per_iteration", flips_per_iteration),
        ("iterations", iterations),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidArgument(f"{name} must be an int, got {type(value).__name__}")
    if flips_per_iteration < 0:
        raise InvalidArgument("flips_per_iteration must be >= 0")
    if iterations <= 0:
        raise InvalidArgument("iterations must be > 0")


# ------------------------------------------------------------
# Expected result
# ------------------------------------------------------------

def expected_floor(flips_per_iteration: int, iterations: int) -> EmpiricalResult:
    """
    iterations // 2^k trials per outcome, probability re-derived from that count.

    For iterations not divisible by 2^k this is below 1 / 2^k.
    """
    count = iterations // num_outcomes(flips_per_iteration)
    return EmpiricalResult.from_count(count, iterations)


def expected_closed_form(flips_per_iteration: int, iterations: int) -> EmpiricalResult:
    """
    Theoretical probability 1 / 2^k. The count is still the floored share.
    """
    n = num_outcomes(flips_per_iteration)
    return EmpiricalResult(count=iterations // n, probability=1 / n)


ExpectedFn = Callable[[int, int], EmpiricalResult]

EXPECTED_METHODS: Dict[str, ExpectedFn] = {
    "floor": expected_floor,
    "closed_form": expected_closed_form,
}


def get_expected_method(name: str) -> ExpectedFn:
    if not isinstance(name, str):
        raise ValueError(f"expected method name must be a str, got {type(name).__name__}")
    name = name.strip().lower()
    if name not in EXPECTED_METHODS:
        raise ValueError(
            f"unknown expected method '{name}'. Available: {sorted(EXPECTED_METHODS.keys())}"
        )
    return EXPECTED_METHODS[name]


# ------------------------------------------------------------
# Core API
# ------------------------------------------------------------

def tally_trials(
    flips_per_iteration: int,
    iterations: int,
    rng: random.Random,
) -> Dict[str, int]:
    """
    Run the trials and count how often each outcome came up.

    The tally starts with every possible outcome at zero, so outcomes that
    never show up are still present.
    """
    _check_args(flips_per_iteration, iterations)

    tally: Dict[str, int] = {outcome: 0 for outcome in enumerate_outcomes(flips_per_iteration)}

    for _ in range(iterations):
        flips = "".join(str(Coin.flip(rng)) for _ in range(flips_per_iteration))
        tally[flips] = tally.get(flips, 0) + 1

    return tally


def merge_tallies(tallies: Iterable[Mapping[str, int]]) -> Dict[str, int]:
    """
    Key-wise sum of tallies from independent sub-runs, ordered by outcome.
    """
    merged: Dict[str, int] = {}
    for tally in tallies:
        for outcome, count in tally.items():
            merged[outcome] = merged.get(outcome, 0) + count
    return {k: merged[k] for k in sorted(merged)}


def build_result(
    flips_per_iteration: int,
    iterations: int,
    tally: Mapping[str, int],
    expected: str = "floor",
) -> CoinFlipResult:
    """
    Turn raw counts into a CoinFlipResult.
    """
    _check_args(flips_per_iteration, iterations)
    expected_fn = get_expected_method(expected)

    results = {
        outcome: EmpiricalResult.from_count(count, iterations)
        for outcome, count in tally.items()
    }

    return CoinFlipResult(
        iterations=iterations,
        expected=expected_fn(flips_per_iteration, iterations),
        results=results,
    )


def run(
    flips_per_iteration: int,
    iterations: int,
    seed: Optional[int] = None,
    expected: str = "floor",
) -> CoinFlipResult:
    """
    Flip a fair coin flips_per_iteration times, iterations times over, and
    compare the observed outcome frequencies to the expected one.

    Parameters
    ----------
    flips_per_iteration:
        Flips per trial (k). 0 is allowed and yields the single outcome "".
    iterations:
        Number of trials (N), must be > 0.
    seed:
        Optional RNG seed for reproducible runs.
    expected:
        Name of the expected-result method ('floor' or 'closed_form').

    Returns
    -------
    CoinFlipResult

    Example
    -------
        result = run(3, 8000)
        result.expected.count        # 1000
        result.expected.probability  # 0.125
        "HHH" in result.results      # True
    """
    _check_args(flips_per_iteration, iterations)
    get_expected_method(expected)

    rng = random.Random(seed)
    tally = tally_trials(flips_per_iteration, iterations, rng)
    return build_result(flips_per_iteration, iterations, tally, expected=expected)
