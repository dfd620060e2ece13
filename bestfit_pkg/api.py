"""Public API for bestfit - returns structured objects without raising."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any

from .auto import auto_find_best_fit
from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITERATIONS,
    DEFAULT_MINIMUM_STEP_DP,
    DEFAULT_PRECISION,
    DEFAULT_TEMPLATE,
)
from .evaluator import build_eval_function
from .formatting import format_equation
from .logging_config import get_logger
from .optimizer import find_best_fit
from .parser import compile_template
from .types import FitReport, ParseError, ValidationError

logger = get_logger("api")


def _failure(error: ParseError | ValidationError) -> FitReport:
    logger.warning("Fit rejected (%s): %s", error.code, error)
    return FitReport(
        ok=False,
        error=str(error),
        code=error.code,
        position=getattr(error, "position", None),
    )


def fit(
    data: Any,
    template: str = DEFAULT_TEMPLATE,
    *,
    iterations: int = DEFAULT_ITERATIONS,
    batch_size: int = DEFAULT_BATCH_SIZE,
    minimum_step_dp: int = DEFAULT_MINIMUM_STEP_DP,
    precision: int = DEFAULT_PRECISION,
    **unsupported: Any,
) -> FitReport:
    """Fit ``template`` to ``data``.

    Any other keyword is reported as an INVALID_OPTION failure.

    Args:
        data: Sequence of ``(x, y)`` pairs
        template: Equation template
        iterations: Batches per coefficient
        batch_size: Trials per batch
        minimum_step_dp: Step-size floor as decimal places
        precision: Rounding and convergence precision (decimal places)

    Returns:
        FitReport with values, score and the formatted equation

    Example:
        >>> from bestfit_pkg.api import fit
        >>> report = fit([(1, 5), (2, 7), (3, 9)], "$x + $")
        >>> report.values
        [2.0, 3.0]
        >>> report.equation
        '2x + 3'
    """
    if unsupported:
        names = ", ".join(sorted(unsupported))
        return _failure(ValidationError(f"Unsupported option(s): {names}", "INVALID_OPTION"))
    try:
        result = find_best_fit(
            data,
            template,
            iterations=iterations,
            batch_size=batch_size,
            minimum_step_dp=minimum_step_dp,
            precision=precision,
            return_score=True,
        )
        equation = format_equation(template, precision, result.values)
    except (ParseError, ValidationError) as e:
        return _failure(e)
    return FitReport(
        ok=True,
        template=template,
        values=result.values,
        score=result.score,
        equation=equation,
        proportional=result.proportional,
    )


def auto_fit(data: Any) -> FitReport:
    """Pick the best template from the built-in catalog for ``data``.

    Example:
        >>> from bestfit_pkg.api import auto_fit
        >>> auto_fit([(1, 2), (2, 4), (3, 6)]).template
        '$x + $'
    """
    try:
        score, template, values = auto_find_best_fit(data)
        equation = format_equation(template, DEFAULT_PRECISION, values)
    except (ParseError, ValidationError) as e:
        return _failure(e)
    return FitReport(
        ok=True, template=template, values=values, score=score, equation=equation
    )


def validate_template(template: str) -> tuple[bool, str | None]:
    """Check that a template expands and parses.

    Example:
        >>> validate_template("$x + y")
        (False, "Unknown identifier 'y' (at position 5)")
    """
    try:
        compile_template(template)
    except ParseError as e:
        return False, str(e)
    return True, None


def evaluate(template: str, coefficients: Sequence[float], x: float) -> float:
    """Evaluate a fitted template at ``x``; nan where undefined or invalid."""
    try:
        func = build_eval_function(template, coefficients)
    except (ParseError, ValidationError) as e:
        logger.warning("Cannot evaluate %r: %s", template, e)
        return math.nan
    return func(x)
