"""Rounding and rendering of solved coefficients.

``round_half_up`` is the single rounding rule used by the optimizer, the
formatter and the catalog re-score.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Callable, Mapping, Sequence

import sympy as sp

from .config import PLACEHOLDER, VARIABLE_NAME
from .macros import DEFAULT_MACROS, expand_macros
from .parser import compile_template
from .types import ValidationError


def round_half_up(value: float, precision: int) -> float:
    """Round to ``precision`` decimal places, halves round toward +inf.

    A machine-epsilon bias keeps values such as ``1.005`` (stored as
    1.00499999...) rounding up.
    """
    if not math.isfinite(value):
        return value
    factor = 10**precision
    scaled = (value + sys.float_info.epsilon) * factor
    if not math.isfinite(scaled):
        return value
    return math.floor(scaled + 0.5) / factor


def format_number(value: float, precision: int) -> str:
    """Render a rounded value in fixed notation without trailing zeros.

    >>> format_number(2.5000, 4)
    '2.5'
    >>> format_number(-0.00001, 4)
    '0'
    """
    if not math.isfinite(value):
        return str(value)
    text = f"{round_half_up(value, precision):.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text == "-0":
        return "0"
    return text


def format_equation(
    template: str,
    precision: int,
    values: Sequence[float],
    macros: Mapping[str, Callable[..., str]] = DEFAULT_MACROS,
) -> str:
    """Substitute solved values into ``template``.

    A value that rounds to exactly 1 is dropped when it directly precedes
    the variable, so ``1x`` renders as ``x``. The result parses back to the
    same formula: a value following a number, a name or ')' gets an explicit
    '*', and a negative value is parenthesized after '-' or as the base of '^'.

    Raises:
        ValidationError: if the number of values does not match the number
            of placeholders
    """
    template = expand_macros(template, macros)
    expected = template.count(PLACEHOLDER)
    if expected != len(values):
        raise ValidationError(
            f"Template has {expected} placeholder(s) but {len(values)} value(s) were given",
            "COEFFICIENT_COUNT",
        )

    pieces = []
    index = 0
    for pos, char in enumerate(template):
        if char != PLACEHOLDER:
            pieces.append(char)
            continue
        value = round_half_up(values[index], precision)
        index += 1
        previous = "".join(pieces).rstrip()[-1:]
        implicit = previous.isalnum() or previous in (".", ")")
        if value == 1 and template.startswith(VARIABLE_NAME, pos + 1):
            if implicit:
                pieces.append("*")
            continue

        text = format_number(value, precision)
        following = template[pos + 1 :].lstrip()[:1]
        if text.startswith("-") and (
            previous == "-" or (following == "^" and previous != "^")
        ):
            text = f"({text})"
        if implicit:
            text = "*" + text
        pieces.append(text)
    return "".join(pieces)


def _recognize(value: float, precision: int) -> sp.Expr:
    """Map a rounded value to a small rational or a multiple of pi or e."""
    if value.is_integer():
        return sp.Integer(int(value))
    tolerance = 10.0**-precision
    candidate = sp.nsimplify(value, [sp.pi, sp.E], tolerance=tolerance)
    if candidate.is_Rational and candidate.q > 100:
        return sp.Float(format_number(value, precision))
    if abs(float(candidate) - value) > tolerance:
        return sp.Float(format_number(value, precision))
    return candidate


def symbolic_equation(template: str, values: Sequence[float], precision: int) -> sp.Expr:
    """Build a SymPy expression of the fitted equation.

    Rounded values are recognized as simple closed forms where possible,
    e.g. 0.3333 becomes 1/3 and 3.1416 becomes pi at precision 4.
    """
    formula = compile_template(template)
    if formula.placeholder_count != len(values):
        raise ValidationError(
            f"Template has {formula.placeholder_count} placeholder(s) "
            f"but {len(values)} value(s) were given",
            "COEFFICIENT_COUNT",
        )
    recognized = [_recognize(round_half_up(v, precision), precision) for v in values]
    return formula.to_sympy(recognized)
