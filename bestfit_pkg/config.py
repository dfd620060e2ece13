"""Centralized configuration for bestfit.

This module defines:
- Optimizer defaults (iterations, batch size, step floor, precision)
- Input validation limits (template length, nesting depth)
- Cache sizes for compiled templates
- Template tokens and the math function/constant library
- The candidate catalog used by the automatic search

Configuration can be overridden via:
- CLI flags (see cli.py)
- Environment variables (prefixed with BESTFIT_)
"""

import importlib.metadata
import math
import os
from types import MappingProxyType

import sympy as sp

from .types import MathFunction

try:
    VERSION = importlib.metadata.version("bestfit")
except importlib.metadata.PackageNotFoundError:
    # Running from a source checkout
    VERSION = "1.0.0"

# Optimizer defaults (can be overridden via environment variables)
DEFAULT_ITERATIONS = int(os.getenv("BESTFIT_ITERATIONS", "100"))  # batches per coefficient
DEFAULT_BATCH_SIZE = int(os.getenv("BESTFIT_BATCH_SIZE", "500"))  # trials per batch
DEFAULT_MINIMUM_STEP_DP = int(
    os.getenv("BESTFIT_MINIMUM_STEP_DP", "5")
)  # step floor as decimal places
DEFAULT_PRECISION = int(os.getenv("BESTFIT_PRECISION", "4"))  # rounding/convergence digits
AUTO_FORMAT_PRECISION = int(os.getenv("BESTFIT_AUTO_FORMAT_PRECISION", "2"))
INITIAL_STEP = float(os.getenv("BESTFIT_INITIAL_STEP", "0.1"))

# Input validation limits
MAX_TEMPLATE_LENGTH = int(os.getenv("BESTFIT_MAX_TEMPLATE_LENGTH", "10000"))  # characters
MAX_NESTING_DEPTH = int(
    os.getenv("BESTFIT_MAX_NESTING_DEPTH", "100")
)  # parentheses/call depth

# Cache configuration
CACHE_SIZE_PARSE = int(os.getenv("BESTFIT_CACHE_SIZE_PARSE", "256"))

# Template tokens
VARIABLE_NAME = "x"
PLACEHOLDER = "$"
MACRO_MARKER = "#"

DEFAULT_TEMPLATE = "$x + $"


def _hypot(a, b):
    return sp.sqrt(a**2 + b**2)


def _cbrt(a):
    return math.copysign(math.pow(abs(a), 1.0 / 3.0), a)


def _sign(a):
    if math.isnan(a):
        return a
    return math.copysign(1.0, a) if a else 0.0


def _round(a):
    # halves toward +inf
    return math.floor(a + 0.5)


def _minimum(*args):
    return min(args)


def _maximum(*args):
    return max(args)


MATH_FUNCTIONS = MappingProxyType(
    {
        "sin": MathFunction(math.sin, sp.sin),
        "cos": MathFunction(math.cos, sp.cos),
        "tan": MathFunction(math.tan, sp.tan),
        "asin": MathFunction(math.asin, sp.asin),
        "acos": MathFunction(math.acos, sp.acos),
        "atan": MathFunction(math.atan, sp.atan),
        "sinh": MathFunction(math.sinh, sp.sinh),
        "cosh": MathFunction(math.cosh, sp.cosh),
        "tanh": MathFunction(math.tanh, sp.tanh),
        "asinh": MathFunction(math.asinh, sp.asinh),
        "acosh": MathFunction(math.acosh, sp.acosh),
        "atanh": MathFunction(math.atanh, sp.atanh),
        "exp": MathFunction(math.exp, sp.exp),
        "log": MathFunction(math.log, sp.log, 1, 2),
        "sqrt": MathFunction(math.sqrt, sp.sqrt),
        "pow": MathFunction(math.pow, sp.Pow, 2, 2),
        "hypot": MathFunction(math.hypot, _hypot, 2, 2),
        "abs": MathFunction(math.fabs, sp.Abs),
        "fabs": MathFunction(math.fabs, sp.Abs),
        "floor": MathFunction(math.floor, sp.floor),
        "ceil": MathFunction(math.ceil, sp.ceiling),
        "trunc": MathFunction(math.trunc, lambda a: sp.sign(a) * sp.floor(sp.Abs(a))),
        "round": MathFunction(_round, lambda a: sp.floor(a + sp.Rational(1, 2))),
        "sign": MathFunction(_sign, sp.sign),
        "cbrt": MathFunction(_cbrt, lambda a: sp.real_root(a, 3)),
        "log10": MathFunction(math.log10, lambda a: sp.log(a, 10)),
        "log2": MathFunction(math.log2, lambda a: sp.log(a, 2)),
        "expm1": MathFunction(math.expm1, lambda a: sp.exp(a) - 1),
        "log1p": MathFunction(math.log1p, lambda a: sp.log(1 + a)),
        "min": MathFunction(_minimum, sp.Min, 1, None),
        "max": MathFunction(_maximum, sp.Max, 1, None),
    }
)

MATH_CONSTANTS = MappingProxyType(
    {
        "pi": (math.pi, sp.pi),
        "e": (math.e, sp.E),
        "tau": (math.tau, 2 * sp.pi),
    }
)

# Shapes tried by the automatic search, in priority order (first wins ties)
CANDIDATE_TEMPLATES = (
    "$/x + $",
    "$x + $",
    "$x^2 + $x + $",
    "$x^3 + $x^2 + $x + $",
    "$*sin($x) + $",
    "$*cos($x) + $",
    "$*tan($x) + $",
    "$^x",
)
