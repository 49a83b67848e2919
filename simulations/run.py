# simulations/run.py

from __future__ import annotations

import logging
import random
from typing import List, Optional

from .common import SimulationReport, SimulationSpec, Timer

from src.coin_flip_simulation.coin_flip_simulation import (
    build_result,
    merge_tallies,
    run,
    tally_trials,
)


logger = logging.getLogger(__name__)


def split_iterations(iterations: int, partitions: int) -> List[int]:
    """
    Split iterations into `partitions` near-equal positive chunks.
    The first (iterations % partitions) chunks get one extra trial.
    """
    if partitions <= 0:
        raise ValueError("partitions must be > 0")
    if partitions > iterations:
        raise ValueError("partitions must be <= iterations")

    base, extra = divmod(iterations, partitions)
    return [base + 1 if i < extra else base for i in range(partitions)]


def run_simulation(
    flips: int,
    iterations: int,
    seed: Optional[int] = None,
    expected: str = "floor",
) -> SimulationReport:
    """
    Run the engine once and return a SimulationReport.

    Parameters
    ----------
    flips:
        Flips per iteration.
    iterations:
        Number of trials.
    seed:
        Optional RNG seed.
    expected:
        Name of the expected-result method ('floor' or 'closed_form').

    Returns
    -------
    SimulationReport
    """
    spec = SimulationSpec(flips=flips, iterations=iterations, seed=seed)
    logger.info("running %d iterations of %d flips (seed=%s)", iterations, flips, seed)

    with Timer() as t:
        result = run(flips, iterations, seed=seed, expected=expected)

    logger.debug("run finished in %.3fs", t.elapsed_s)
    return SimulationReport(
        spec=spec,
        result=result,
        runtime_s=t.elapsed_s,
        meta={"expected": expected},
    )


def run_partitioned(
    flips: int,
    iterations: int,
    partitions: int,
    seed: Optional[int] = None,
    expected: str = "floor",
) -> SimulationReport:
    """
    Split the trials into independent sub-runs, then merge their tallies
    and recompute probabilities from the merged counts.

    Sub-run i uses seed + 1000 * (i + 1) when a seed is given. Sub-runs
    execute one after another.
    """
    spec = SimulationSpec(flips=flips, iterations=iterations, seed=seed, partitions=partitions)
    chunks = split_iterations(iterations, partitions)
    logger.info(
        "running %d iterations of %d flips in %d partitions (seed=%s)",
        iterations, flips, partitions, seed,
    )

    with Timer() as t:
        tallies = []
        for i, n in enumerate(chunks):
            rng = random.Random(seed + 1000 * (i + 1) if seed is not None else None)
            tallies.append(tally_trials(flips, n, rng))
            logger.debug("partition %d: %d iterations", i, n)

        merged = merge_tallies(tallies)
        result = build_result(flips, iterations, merged, expected=expected)

    return SimulationReport(
        spec=spec,
        result=result,
        runtime_s=t.elapsed_s,
        meta={"expected": expected, "partitions": chunks},
    )
