"""
Tests for the simulation engine: tallying, expected results, and CoinFlipResult.
"""

import dataclasses
import random

import pytest

from src.coin_flip_simulation.coin_flip_simulation import (
    CoinFlipResult,
    EmpiricalResult,
    InvalidArgument,
    build_result,
    get_expected_method,
    merge_tallies,
    run,
    tally_trials,
)
from src.coin_flip_simulation.outcomes import enumerate_outcomes


class TestRun:

    def test_expected_for_even_split(self):
        result = run(3, 8000, seed=1)

        assert result.iterations == 8000
        assert result.expected == EmpiricalResult(count=1000, probability=0.125)
        assert "HHH" in result.results

    @pytest.mark.parametrize("k,iterations", [(1, 1), (2, 7), (3, 100), (5, 333)])
    def test_every_trial_tallied_once(self, k, iterations):
        result = run(k, iterations, seed=42)
        assert sum(r.count for r in result.results.values()) == iterations

    @pytest.mark.parametrize("k", [1, 3, 6])
    def test_all_outcomes_present_in_order(self, k):
        # with 2 iterations most outcomes stay at zero for k=6
        result = run(k, 2, seed=5)
        assert list(result.results.keys()) == enumerate_outcomes(k)

        zeros = [r for r in result.results.values() if r.count == 0]
        for r in zeros:
            assert r.probability == 0.0

    @pytest.mark.parametrize("k,iterations", [(2, 10), (3, 10), (4, 1000), (3, 7)])
    def test_expected_uses_floor_division(self, k, iterations):
        result = run(k, iterations, seed=3)
        assert result.expected.count == iterations // 2 ** k
        assert result.expected.probability == result.expected.count / iterations

    def test_probabilities_are_count_over_iterations(self):
        result = run(2, 50, seed=11)
        for r in result.results.values():
            assert r.probability == r.count / 50
            assert 0.0 <= r.probability <= 1.0

    def test_zero_flips(self):
        result = run(0, 25, seed=0)

        assert dict(result.results) == {"": EmpiricalResult(count=25, probability=1.0)}
        assert result.expected == EmpiricalResult(count=25, probability=1.0)

    def test_seed_is_reproducible(self):
        a = run(4, 500, seed=7)
        b = run(4, 500, seed=7)
        assert dict(a.results) == dict(b.results)

    def test_roughly_uniform(self):
        result = run(3, 80000, seed=12345)
        for outcome, r in result.results.items():
            assert abs(r.probability - 0.125) < 0.02, outcome

    def test_closed_form_expected(self):
        result = run(3, 10, seed=1, expected="closed_form")
        assert result.expected == EmpiricalResult(count=1, probability=0.125)

    @pytest.mark.parametrize(
        "k,iterations",
        [(3, 0), (3, -5), (-1, 10), (1.0, 10), (3, 2.5), ("3", 10), (True, 10), (3, False)],
    )
    def test_invalid_arguments(self, k, iterations):
        with pytest.raises(InvalidArgument):
            run(k, iterations)

    def test_invalid_argument_is_value_error(self):
        with pytest.raises(ValueError):
            run(2, 0)

    def test_overflow_before_any_trial(self):
        class ExplodingRng(random.Random):
            def random(self):
                raise AssertionError("no trial should run")

        with pytest.raises(OverflowError):
            tally_trials(64, 10, ExplodingRng())
        with pytest.raises(OverflowError):
            run(64, 10)

    def test_unknown_expected_method(self):
        with pytest.raises(ValueError, match="unknown expected method"):
            run(2, 10, expected="bogus")


class TestRngErrors:

    def test_rng_failure_propagates(self):
        class BrokenRng(random.Random):
            def random(self):
                raise RuntimeError("entropy source down")

        with pytest.raises(RuntimeError, match="entropy source down"):
            tally_trials(2, 3, BrokenRng())


class TestTallies:

    def test_tally_seeded_with_zeros(self):
        tally = tally_trials(3, 1, random.Random(0))
        assert list(tally.keys()) == enumerate_outcomes(3)
        assert sum(tally.values()) == 1

    def test_merge_sums_by_key(self):
        merged = merge_tallies([
            {"HH": 1, "HT": 2, "TH": 0, "TT": 3},
            {"HH": 4, "HT": 0, "TH": 1, "TT": 0},
        ])
        assert merged == {"HH": 5, "HT": 2, "TH": 1, "TT": 3}

    def test_merge_is_commutative_and_ordered(self):
        a = {"T": 2, "H": 1}
        b = {"H": 3, "X": 1}
        ab = merge_tallies([a, b])
        ba = merge_tallies([b, a])

        assert ab == ba == {"H": 4, "T": 2, "X": 1}
        assert list(ab.keys()) == ["H", "T", "X"]

    def test_merged_subruns_rebuild_probabilities(self):
        t1 = tally_trials(2, 30, random.Random(1))
        t2 = tally_trials(2, 70, random.Random(2))
        result = build_result(2, 100, merge_tallies([t1, t2]))

        assert sum(r.count for r in result.results.values()) == 100
        for outcome, r in result.results.items():
            assert r.count == t1[outcome] + t2[outcome]
            assert r.probability == r.count / 100

    def test_build_result_keeps_unexpected_outcome(self):
        result = build_result(1, 4, {"H": 1, "T": 2, "Z": 1})
        assert result.results["Z"] == EmpiricalResult(count=1, probability=0.25)


class TestCoinFlipResult:

    def _result(self):
        return CoinFlipResult(
            iterations=4,
            expected=EmpiricalResult(count=2, probability=0.5),
            results={
                "T": EmpiricalResult(count=1, probability=0.25),
                "H": EmpiricalResult(count=3, probability=0.75),
            },
        )

    def test_results_sorted_by_outcome(self):
        assert list(self._result().results.keys()) == ["H", "T"]

    def test_results_are_read_only(self):
        result = self._result()
        with pytest.raises(TypeError):
            result.results["H"] = EmpiricalResult(count=0, probability=0.0)

    def test_frozen(self):
        result = self._result()
        with pytest.raises(dataclasses.FrozenInstanceError):
            result.iterations = 5

    def test_count_sum_mismatch(self):
        with pytest.raises(ValueError, match="counts sum mismatch"):
            CoinFlipResult(
                iterations=5,
                expected=EmpiricalResult(count=2, probability=0.4),
                results={"H": EmpiricalResult(count=1, probability=0.2)},
            )


class TestExpectedMethods:

    def test_lookup_normalizes_name(self):
        fn = get_expected_method("  Floor ")
        assert fn(2, 10) == EmpiricalResult(count=2, probability=0.2)

    @pytest.mark.parametrize("name", [None, 3])
    def test_lookup_rejects_non_string(self, name):
        with pytest.raises(ValueError, match="must be a str"):
            get_expected_method(name)

    def test_floor_vs_closed_form(self):
        floor = get_expected_method("floor")(3, 10)
        closed = get_expected_method("closed_form")(3, 10)

        assert floor.probability == 0.1
        assert closed.probability == 0.125
        assert floor.count == closed.count == 1
