"""Tests for the compass search and find_best_fit."""

import math
import unittest

from bestfit_pkg.optimizer import SearchState, compass_search, find_best_fit, rescore
from bestfit_pkg.parser import compile_template
from bestfit_pkg.scoring import ResidualScorer
from bestfit_pkg.types import FitResult, ParseError, ValidationError

LINE = [[1, 5], [2, 7], [3, 9]]


class TestFindBestFit(unittest.TestCase):
    """Test fitting with the default options."""

    def test_linear_fit(self):
        self.assertEqual(find_best_fit(LINE, "$x + $"), [2.0, 3.0])

    def test_default_template_is_linear(self):
        self.assertEqual(find_best_fit(LINE), [2.0, 3.0])

    def test_poly_macro(self):
        self.assertEqual(find_best_fit(LINE, "#poly(1)"), [2.0, 3.0])

    def test_format(self):
        self.assertEqual(find_best_fit(LINE, "$x + $", format=True), "2x + 3")

    def test_unrounded_values_are_close(self):
        values = find_best_fit(LINE, "$x + $", round=False)
        self.assertAlmostEqual(values[0], 2.0, places=3)
        self.assertAlmostEqual(values[1], 3.0, places=3)

    def test_return_score(self):
        result = find_best_fit(LINE, "$x + $", return_score=True)
        self.assertIsInstance(result, FitResult)
        self.assertEqual(result.values, [2.0, 3.0])
        self.assertLess(result.score, 1e-4)
        self.assertEqual(len(result.proportional), 2)

    def test_exponential_base(self):
        values = find_best_fit([(1, 2), (2, 4), (3, 8)], "$^x")
        self.assertAlmostEqual(values[0], 2.0, places=2)

    def test_is_deterministic(self):
        options = {"iterations": 5, "batch_size": 20}
        data = [(1, 1), (2, 4), (3, 9), (4, 16)]
        first = find_best_fit(data, "$x^2 + $x + $", return_score=True, **options)
        second = find_best_fit(data, "$x^2 + $x + $", return_score=True, **options)
        self.assertEqual(first, second)

    def test_zero_iterations_keeps_start(self):
        self.assertEqual(find_best_fit(LINE, "$x + $", iterations=0), [1.0, 1.0])

    def test_never_accepts_undefined_scores(self):
        data = [(0, 1), (1, 2), (2, 3)]
        result = find_best_fit(
            data, "$/x", iterations=2, batch_size=10, return_score=True
        )
        self.assertEqual(result.values, [1.0])
        self.assertEqual(result.score, math.inf)


class TestFindBestFitErrors(unittest.TestCase):
    def test_invalid_template(self):
        with self.assertRaises(ParseError) as ctx:
            find_best_fit(LINE, "$x + y")
        self.assertEqual(ctx.exception.code, "UNKNOWN_IDENTIFIER")

    def test_invalid_data(self):
        with self.assertRaises(ValidationError) as ctx:
            find_best_fit([], "$x + $")
        self.assertEqual(ctx.exception.code, "EMPTY_DATA")

    def test_invalid_options(self):
        for options in (
            {"iterations": -1},
            {"batch_size": 0},
            {"minimum_step_dp": -1},
            {"precision": 1.5},
            {"iterations": True},
        ):
            with self.assertRaises(ValidationError) as ctx:
                find_best_fit(LINE, "$x + $", **options)
            self.assertEqual(ctx.exception.code, "INVALID_OPTION", options)


class ConstantScorer:
    """Scorer that ignores the coefficients."""

    size = 1

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def __call__(self, coefficients):
        self.calls += 1
        return self.value


class TestCompassSearch:
    def test_trial_budget(self):
        scorer = ConstantScorer(4.0)
        outcome = compass_search(scorer, 2, iterations=3, batch_size=5)
        # one initial evaluation plus one per trial
        assert scorer.calls == outcome.trials + 1
        assert outcome.trials <= 3 * 5 * 2
        assert outcome.values == [1.0, 1.0]

    def test_stops_when_residual_is_below_precision(self):
        outcome = compass_search(ConstantScorer(0.0), 1, precision=4)
        assert outcome.converged
        assert outcome.trials == 1

    def test_no_coefficients_are_mutated_on_failure(self):
        outcome = compass_search(ConstantScorer(math.inf), 3, iterations=1, batch_size=4)
        assert outcome.values == [1.0, 1.0, 1.0]
        assert outcome.score == math.inf
        assert not outcome.converged

    def test_improves_on_real_objective(self):
        scorer = ResidualScorer(LINE, compile_template("$x + $"))
        start = scorer([1.0, 1.0])
        outcome = compass_search(scorer, 2, iterations=2, batch_size=50)
        assert outcome.score < start

    def test_search_state_round_robin(self):
        state = SearchState(index=1, step=0.001, batch_iterations=7)
        state.next_coefficient(2)
        assert state.index == 0
        assert state.step == 0.1
        assert state.batch_iterations == 0


class TestRescore:
    def test_rescore_rounded_values(self):
        assert rescore(LINE, "$x + $", [2.0, 3.0]) == 0.0
        assert rescore(LINE, "$x + $", [2.0, 2.0]) == 3.0


if __name__ == "__main__":
    unittest.main()
