"""Expression tree produced by the template parser.

Nodes are frozen dataclasses. ``compile()`` turns a tree into nested
closures of the form ``f(x, coefficients) -> float`` so that a formula can
be evaluated many thousands of times during a search without walking the
tree; ``symbolic()`` builds the equivalent SymPy expression.
"""

from __future__ import annotations

import math
import operator
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import sympy as sp

from .config import MATH_CONSTANTS, MATH_FUNCTIONS

Compiled = Callable[[float, Sequence[float]], float]

_OPERATORS = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
}


class Node:
    """Base class for expression tree nodes."""

    def compile(self) -> Compiled:
        raise NotImplementedError

    def symbolic(self, x: sp.Symbol, coefficients: Sequence[sp.Expr]) -> sp.Expr:
        raise NotImplementedError


@dataclass(frozen=True)
class Number(Node):
    value: float

    def compile(self) -> Compiled:
        value = self.value
        return lambda x, c: value

    def symbolic(self, x, coefficients):
        if self.value.is_integer():
            return sp.Integer(int(self.value))
        return sp.Float(self.value)


@dataclass(frozen=True)
class Variable(Node):
    def compile(self) -> Compiled:
        return lambda x, c: x

    def symbolic(self, x, coefficients):
        return x


@dataclass(frozen=True)
class Coefficient(Node):
    index: int

    def compile(self) -> Compiled:
        index = self.index
        return lambda x, c: c[index]

    def symbolic(self, x, coefficients):
        return coefficients[self.index]


@dataclass(frozen=True)
class Constant(Node):
    name: str

    def compile(self) -> Compiled:
        value = MATH_CONSTANTS[self.name][0]
        return lambda x, c: value

    def symbolic(self, x, coefficients):
        return MATH_CONSTANTS[self.name][1]


@dataclass(frozen=True)
class Negate(Node):
    operand: Node

    def compile(self) -> Compiled:
        operand = self.operand.compile()
        return lambda x, c: -operand(x, c)

    def symbolic(self, x, coefficients):
        return -self.operand.symbolic(x, coefficients)


@dataclass(frozen=True)
class BinaryOp(Node):
    op: str
    left: Node
    right: Node

    def compile(self) -> Compiled:
        func = _OPERATORS[self.op]
        left = self.left.compile()
        right = self.right.compile()
        return lambda x, c: func(left(x, c), right(x, c))

    def symbolic(self, x, coefficients):
        left = self.left.symbolic(x, coefficients)
        right = self.right.symbolic(x, coefficients)
        return _OPERATORS[self.op](left, right)


@dataclass(frozen=True)
class Power(Node):
    base: Node
    exponent: Node

    def compile(self) -> Compiled:
        base = self.base.compile()
        exponent = self.exponent.compile()
        # math.pow raises instead of returning complex numbers
        return lambda x, c: math.pow(base(x, c), exponent(x, c))

    def symbolic(self, x, coefficients):
        return sp.Pow(
            self.base.symbolic(x, coefficients),
            self.exponent.symbolic(x, coefficients),
        )


@dataclass(frozen=True)
class Call(Node):
    name: str
    args: tuple[Node, ...]

    def compile(self) -> Compiled:
        func = MATH_FUNCTIONS[self.name].numeric
        args = [arg.compile() for arg in self.args]
        if len(args) == 1:
            arg = args[0]
            return lambda x, c: func(arg(x, c))
        return lambda x, c: func(*[arg(x, c) for arg in args])

    def symbolic(self, x, coefficients):
        func = MATH_FUNCTIONS[self.name].symbolic
        return func(*[arg.symbolic(x, coefficients) for arg in self.args])


@dataclass(frozen=True)
class Formula:
    """A parsed template: ``formula(x, coefficients) -> float``.

    Evaluation may raise ``ArithmeticError`` or ``ValueError`` where the
    formula is undefined (division by zero, domain errors, overflow).
    """

    template: str
    root: Node
    placeholder_count: int
    _compiled: Compiled = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_compiled", self.root.compile())

    def __call__(self, x: float, coefficients: Sequence[float]) -> float:
        return self._compiled(x, coefficients)

    def coefficient_symbols(self) -> tuple[sp.Symbol, ...]:
        return sp.symbols(f"c0:{self.placeholder_count}") if self.placeholder_count else ()

    def to_sympy(
        self,
        coefficients: Sequence[sp.Expr] | None = None,
        variable: sp.Symbol | None = None,
    ) -> sp.Expr:
        """Build the SymPy expression for this formula.

        Args:
            coefficients: Values or symbols substituted for the placeholders
                (default: symbols ``c0, c1, ...``)
            variable: Symbol used for the independent variable (default: ``x``)
        """
        if variable is None:
            variable = sp.Symbol("x")
        if coefficients is None:
            coefficients = self.coefficient_symbols()
        return self.root.symbolic(variable, list(coefficients))

    def equivalent_to(self, other: Formula) -> bool:
        """Check symbolic equality with another formula over the same coefficients."""
        if self.placeholder_count != other.placeholder_count:
            return False
        return sp.simplify(self.to_sympy() - other.to_sympy()) == 0
