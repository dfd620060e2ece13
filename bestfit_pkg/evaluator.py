"""Build prediction functions from a template and solved coefficients."""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

from .parser import compile_template
from .types import ValidationError


def build_eval_function(
    template: str, coefficients: Sequence[float]
) -> Callable[[float], float]:
    """Return ``f(x) -> y`` for ``template`` with fixed coefficients.

    The coefficients are copied, so later changes to the caller's sequence
    do not affect the returned function. Where the formula is undefined
    (division by zero, domain errors, overflow) the function returns nan.

    Raises:
        ParseError: if the template is invalid
        ValidationError: if the number of coefficients does not match
    """
    formula = compile_template(template)
    values = tuple(float(c) for c in coefficients)
    if len(values) != formula.placeholder_count:
        raise ValidationError(
            f"Template has {formula.placeholder_count} placeholder(s) "
            f"but {len(values)} coefficient(s) were given",
            "COEFFICIENT_COUNT",
        )

    def evaluate(x: float) -> float:
        try:
            return float(formula(float(x), values))
        except (ArithmeticError, ValueError):
            return math.nan

    return evaluate
