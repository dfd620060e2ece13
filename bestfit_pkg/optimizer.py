"""Coordinate-wise adaptive local search ("compass search").

The search perturbs one coefficient at a time. Each coefficient gets a
batch of trials in round-robin order; within a batch the step starts at
``INITIAL_STEP`` and shrinks tenfold whenever both directions fail. For
"proportional" coefficients the step is also scaled by the root mean
residual, so coefficients move quickly while the fit is poor and slowly
once it is close. The search stops early once that scale drops below the
requested display precision.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITERATIONS,
    DEFAULT_MINIMUM_STEP_DP,
    DEFAULT_PRECISION,
    DEFAULT_TEMPLATE,
    INITIAL_STEP,
)
from .formatting import format_equation, round_half_up
from .logging_config import get_logger
from .parser import compile_template
from .scoring import ResidualScorer
from .types import FitResult, ValidationError

logger = get_logger("optimizer")


@dataclass
class SearchState:
    """Mutable bookkeeping for one search; never shared between calls."""

    index: int = 0
    step: float = INITIAL_STEP
    direction: int = 1
    weight: float = 1.0
    batch_iterations: int = 0
    wrong_direction: int = 0
    wrong_step: int = 0

    def next_coefficient(self, count: int) -> None:
        self.index = (self.index + 1) % count
        self.batch_iterations = 0
        self.step = INITIAL_STEP


@dataclass
class SearchOutcome:
    values: list[float]
    score: float
    proportional: list[bool]
    trials: int
    converged: bool


def _validate_options(
    iterations: int, batch_size: int, minimum_step_dp: int, precision: int
) -> None:
    for name, value, minimum in (
        ("iterations", iterations, 0),
        ("batch_size", batch_size, 1),
        ("minimum_step_dp", minimum_step_dp, 0),
        ("precision", precision, 0),
    ):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(
                f"{name} must be an integer (got {value!r})", "INVALID_OPTION"
            )
        if value < minimum:
            raise ValidationError(
                f"{name} must be at least {minimum} (got {value})", "INVALID_OPTION"
            )


def compass_search(
    scorer: ResidualScorer,
    count: int,
    iterations: int = DEFAULT_ITERATIONS,
    batch_size: int = DEFAULT_BATCH_SIZE,
    minimum_step_dp: int = DEFAULT_MINIMUM_STEP_DP,
    precision: int = DEFAULT_PRECISION,
) -> SearchOutcome:
    """Minimize ``scorer`` over ``count`` coefficients starting from all ones.

    Args:
        scorer: Objective; lower is better, non-finite means undefined
        count: Number of coefficients
        iterations: Batches per coefficient
        batch_size: Trials per batch
        minimum_step_dp: Step-size floor as decimal places
        precision: Decimal places at which the search counts as converged

    Returns:
        SearchOutcome with the best vector found and its score
    """
    values = [1.0] * count
    proportional = [True] * count
    best = scorer(values)
    size = scorer.size

    min_step = 10.0**-minimum_step_dp
    min_weight = 10.0 ** -(precision + 1)
    state = SearchState()

    trials = 0
    converged = False
    for trials in range(1, iterations * batch_size * count + 1):
        state.batch_iterations += 1
        if state.batch_iterations >= batch_size:
            state.next_coefficient(count)

        vi = state.index
        original = values[vi]
        values[vi] = original + state.direction * state.step * state.weight
        score = scorer(values)

        if not proportional[vi]:
            state.weight = 1.0
        elif math.isfinite(score):
            state.weight = math.sqrt(score / size)
        elif math.isfinite(best):
            state.weight = math.sqrt(best / size)
        else:
            state.weight = 1.0

        if score < best:
            best = score
            state.wrong_direction = 0
            continue

        state.direction = -state.direction
        values[vi] = original

        # the residual is already below the displayed precision
        if state.weight < min_weight:
            converged = True
            break

        # both directions failed at this step size
        state.wrong_direction += 1
        if state.wrong_direction != 2:
            continue

        state.step /= 10
        state.wrong_direction = 0
        state.wrong_step += 1
        if state.step > min_step:
            continue

        if state.wrong_step >= batch_size - 1:
            logger.debug("Coefficient %d is not scale-sensitive; using unit weight", vi)
            proportional[vi] = False
        state.wrong_step = 0
        state.next_coefficient(count)

    return SearchOutcome(values, best, proportional, trials, converged)


def find_best_fit(
    data: Any,
    template: str = DEFAULT_TEMPLATE,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    batch_size: int = DEFAULT_BATCH_SIZE,
    minimum_step_dp: int = DEFAULT_MINIMUM_STEP_DP,
    precision: int = DEFAULT_PRECISION,
    format: bool = False,
    round: bool = True,
    return_score: bool = False,
) -> list[float] | str | FitResult:
    """Find coefficient values for ``template`` that best explain ``data``.

    Args:
        data: Sequence of ``(x, y)`` pairs
        template: Equation template, e.g. ``"$x^2 + $x + $"`` or ``"#poly(2)"``
        iterations: Batches per coefficient
        batch_size: Trials per batch
        minimum_step_dp: Step-size floor as decimal places
        precision: Rounding and convergence precision (decimal places)
        format: Return the formatted equation instead of the values
        round: Round values to ``precision`` decimal places
        return_score: Return a FitResult with the score and proportionality flags

    Returns:
        List of values, the formatted equation, or a FitResult

    Raises:
        ParseError: if the template is invalid (MacroError for macros)
        ValidationError: if the data or options are invalid

    Example:
        >>> find_best_fit([(1, 5), (2, 7), (3, 9)], "$x + $")
        [2.0, 3.0]
    """
    _validate_options(iterations, batch_size, minimum_step_dp, precision)
    formula = compile_template(template)
    scorer = ResidualScorer(data, formula)

    logger.debug(
        "Fitting %r (%d coefficients) to %d points",
        formula.template,
        formula.placeholder_count,
        scorer.size,
    )
    outcome = compass_search(
        scorer,
        formula.placeholder_count,
        iterations=iterations,
        batch_size=batch_size,
        minimum_step_dp=minimum_step_dp,
        precision=precision,
    )
    logger.info(
        "Fitted %r in %d trials (score=%g%s)",
        formula.template,
        outcome.trials,
        outcome.score,
        ", converged" if outcome.converged else "",
    )

    if format:
        return format_equation(formula.template, precision, outcome.values)

    values = outcome.values
    if round:
        values = [round_half_up(v, precision) for v in values]

    if return_score:
        return FitResult(score=outcome.score, values=values, proportional=outcome.proportional)
    return values


def rescore(data: Any, template: str, values: Sequence[float]) -> float:
    """Score already-solved values for ``template`` against ``data``."""
    return ResidualScorer(data, compile_template(template))(values)
