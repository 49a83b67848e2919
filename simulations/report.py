# simulations/report.py

from __future__ import annotations

import argparse
import json
import logging
import sys

import matplotlib.pyplot as plt

from .common import SimulationReport, format_result, format_summary_line, result_to_dict
from .run import run_partitioned, run_simulation

from src.coin_flip_simulation.coin_flip_simulation import EXPECTED_METHODS


DEFAULT_SEED = None
DEFAULT_EXPECTED = "floor"
DEFAULT_FORMAT = "text"


def render(report: SimulationReport, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(result_to_dict(report.result), indent=4)
    return format_result(report.result)


def plot_result(report: SimulationReport):
    """
    Bar chart of empirical probability per outcome, with the expected
    probability as a horizontal line. Returns the figure.
    """
    res = report.result
    outcomes = list(res.results.keys())
    probs = [r.probability for r in res.results.values()]

    fig = plt.figure(figsize=(max(6, len(outcomes) * 0.4), 4))
    plt.bar(range(len(outcomes)), probs)
    plt.axhline(res.expected.probability, color="red", linestyle="--", label="expected")
    plt.xticks(range(len(outcomes)), outcomes, rotation=90)
    plt.xlabel("Outcome")
    plt.ylabel("Probability")
    plt.legend()
    plt.title(f"flips={report.spec.flips}, iterations={res.iterations}")
    plt.tight_layout()
    return fig


def main(argv: list[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="coin_flip_simulation",
        description="Flip a fair coin and compare outcome frequencies to the expected one.",
    )
    parser.add_argument("flips_per_iteration", type=int, help="coin flips per iteration")
    parser.add_argument("iterations", type=int, help="number of iterations")
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="RNG seed")
    parser.add_argument(
        "--expected",
        choices=sorted(EXPECTED_METHODS.keys()),
        default=DEFAULT_EXPECTED,
        help="how the expected result is computed",
    )
    parser.add_argument("--partitions", type=int, default=1, help="merge this many sub-runs")
    parser.add_argument("--format", choices=["text", "json"], default=DEFAULT_FORMAT)
    parser.add_argument("--plot", action="store_true", help="show a bar chart")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)

    try:
        if args.partitions != 1:
            report = run_partitioned(
                flips=args.flips_per_iteration,
                iterations=args.iterations,
                partitions=args.partitions,
                seed=args.seed,
                expected=args.expected,
            )
        else:
            report = run_simulation(
                flips=args.flips_per_iteration,
                iterations=args.iterations,
                seed=args.seed,
                expected=args.expected,
            )
    except (ValueError, OverflowError) as e:
        print(f"error: {e}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    print(render(report, args.format))
    if args.verbose:
        print(format_summary_line(report), file=sys.stderr)

    if args.plot:
        plot_result(report)
        plt.show()

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
