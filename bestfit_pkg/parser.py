"""Template parsing module.

This module handles:
- Whitespace stripping with position mapping back to the expanded template
- Recursive-descent parsing of the template language into a Formula
- Placeholder numbering in left-to-right scan order
- Cached compilation of raw templates (macro expansion + parsing)

Grammar::

    sum      := term (('+' | '-') term)*
    term     := unary (('*' | '/') unary | <implicit> unary)*
    unary    := '-' unary | power
    power    := atom ('^' exponent)?
    exponent := ('x' | '$' | ['-'] number) ('^' exponent)?
    atom     := '$' | number | identifier | call | '(' sum ')'
    call     := function '(' sum (',' sum)* ')'
    identifier := letter (letter | digit)*

Implicit multiplication applies when an operand is directly followed by a
placeholder or a letter, e.g. ``$x`` or ``2sin(x)``.

Every parsing method takes an explicit cursor and placeholder counter and
returns a ParseStep; failures are propagated by early return and only
turned into a ParseError at the public boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from string import ascii_letters
from typing import Any

from .config import (
    CACHE_SIZE_PARSE,
    MATH_CONSTANTS,
    MATH_FUNCTIONS,
    MAX_NESTING_DEPTH,
    MAX_TEMPLATE_LENGTH,
    PLACEHOLDER,
    VARIABLE_NAME,
)
from .formula import (
    BinaryOp,
    Call,
    Coefficient,
    Constant,
    Formula,
    Negate,
    Number,
    Power,
    Variable,
)
from .logging_config import get_logger
from .macros import DEFAULT_MACROS, expand_macros
from .types import ParseError

logger = get_logger("parser")

OPERATORS = "+*/"
DIGITS = "0123456789"
IDENTIFIER_CHARS = ascii_letters + DIGITS


@dataclass(frozen=True)
class ParseStep:
    """Result of one parsing method: a node and the state after it, or a failure."""

    ok: bool
    node: Any = None
    cursor: int = 0
    index: int = 0
    error: str | None = None
    code: str | None = None

    @classmethod
    def success(cls, node: Any, cursor: int, index: int) -> ParseStep:
        return cls(ok=True, node=node, cursor=cursor, index=index)

    @classmethod
    def failure(cls, message: str, cursor: int, code: str) -> ParseStep:
        return cls(ok=False, cursor=cursor, error=message, code=code)


class _TemplateParser:
    """Recursive-descent parser over a whitespace-free template."""

    def __init__(self, text: str, variable: str):
        self.text = text
        self.variable = variable
        self.length = len(text)

    def peek(self, cursor: int) -> str:
        return self.text[cursor] if cursor < self.length else ""

    def unexpected(self, cursor: int) -> ParseStep:
        """Describe the character at ``cursor`` where no parse rule applies."""
        char = self.peek(cursor)
        if char == "":
            return ParseStep.failure("Unexpected end of template", cursor, "UNEXPECTED_END")
        if char == ",":
            return ParseStep.failure(
                "',' is only allowed in function parameters",
                cursor,
                "COMMA_OUTSIDE_CALL",
            )
        if char == ")":
            return ParseStep.failure("Unmatched ')'", cursor, "UNBALANCED")
        if char == "(" or char in DIGITS or char == ".":
            return ParseStep.failure(
                f"Missing operator before '{char}'", cursor, "MISSING_OPERATOR"
            )
        if char == "^":
            return ParseStep.failure(
                "'^' must follow an operand", cursor, "MALFORMED_EXPONENT"
            )
        return ParseStep.failure(
            f"Unexpected character '{char}'", cursor, "UNEXPECTED_CHARACTER"
        )

    def parse(self) -> ParseStep:
        if self.length == 0:
            return ParseStep.failure("Template is empty", 0, "EMPTY")
        step = self.parse_sum(0, 0, 0)
        if not step.ok:
            return step
        if step.cursor < self.length:
            return self.unexpected(step.cursor)
        return step

    def parse_sum(self, cursor: int, index: int, depth: int) -> ParseStep:
        step = self.parse_term(cursor, index, depth)
        if not step.ok:
            return step
        node, cursor, index = step.node, step.cursor, step.index
        while self.peek(cursor) in ("+", "-"):
            op = self.peek(cursor)
            step = self.parse_term(cursor + 1, index, depth)
            if not step.ok:
                return step
            node = BinaryOp(op, node, step.node)
            cursor, index = step.cursor, step.index
        return ParseStep.success(node, cursor, index)

    def parse_term(self, cursor: int, index: int, depth: int) -> ParseStep:
        step = self.parse_unary(cursor, index, depth)
        if not step.ok:
            return step
        node, cursor, index = step.node, step.cursor, step.index
        while True:
            char = self.peek(cursor)
            if char in ("*", "/"):
                op = char
                step = self.parse_unary(cursor + 1, index, depth)
            elif char == PLACEHOLDER or (char != "" and char in ascii_letters):
                op = "*"
                step = self.parse_unary(cursor, index, depth)
            else:
                break
            if not step.ok:
                return step
            node = BinaryOp(op, node, step.node)
            cursor, index = step.cursor, step.index
        return ParseStep.success(node, cursor, index)

    def parse_unary(self, cursor: int, index: int, depth: int) -> ParseStep:
        if self.peek(cursor) != "-":
            return self.parse_power(cursor, index, depth)
        if cursor > 0 and self.text[cursor - 1] == "-":
            return ParseStep.failure(
                "Invalid operator '-'", cursor, "INVALID_OPERATOR"
            )
        step = self.parse_unary(cursor + 1, index, depth)
        if not step.ok:
            return step
        return ParseStep.success(Negate(step.node), step.cursor, step.index)

    def parse_power(self, cursor: int, index: int, depth: int) -> ParseStep:
        step = self.parse_atom(cursor, index, depth)
        if not step.ok or self.peek(step.cursor) != "^":
            return step
        base = step.node
        step = self.parse_exponent(step.cursor + 1, step.index)
        if not step.ok:
            return step
        return ParseStep.success(Power(base, step.node), step.cursor, step.index)

    def parse_exponent(self, cursor: int, index: int) -> ParseStep:
        """Parse a chain of exponents; '^' is right-associative."""
        operands = []
        while True:
            char = self.peek(cursor)
            if char == PLACEHOLDER:
                operands.append(Coefficient(index))
                cursor, index = cursor + 1, index + 1
            elif self.text.startswith(self.variable, cursor):
                operands.append(Variable())
                cursor += len(self.variable)
            else:
                negative = char == "-"
                step = self.scan_number(cursor + 1 if negative else cursor)
                if not step.ok:
                    return ParseStep.failure(
                        "Expected number following exponent but encountered "
                        f"{char or 'end of template'}",
                        cursor,
                        "MALFORMED_EXPONENT",
                    )
                operands.append(Negate(step.node) if negative else step.node)
                cursor = step.cursor
            if self.peek(cursor) != "^":
                break
            cursor += 1

        node = operands[-1]
        for operand in reversed(operands[:-1]):
            node = Power(operand, node)
        return ParseStep.success(node, cursor, index)

    def scan_number(self, cursor: int) -> ParseStep:
        start = cursor
        while self.peek(cursor) != "" and self.peek(cursor) in DIGITS + ".":
            cursor += 1
        literal = self.text[start:cursor]
        if not literal:
            return self.unexpected(start)
        if literal.count(".") > 1 or literal == ".":
            return ParseStep.failure(
                f"Malformed number '{literal}'", start, "MALFORMED_NUMBER"
            )
        return ParseStep.success(Number(float(literal)), cursor, 0)

    def parse_atom(self, cursor: int, index: int, depth: int) -> ParseStep:
        char = self.peek(cursor)
        if char == PLACEHOLDER:
            return ParseStep.success(Coefficient(index), cursor + 1, index + 1)

        if char != "" and char in ascii_letters:
            return self.parse_identifier(cursor, index, depth)

        if char != "" and char in DIGITS + ".":
            step = self.scan_number(cursor)
            if not step.ok:
                return step
            return ParseStep.success(step.node, step.cursor, index)

        if char == "(":
            if depth >= MAX_NESTING_DEPTH:
                return ParseStep.failure(
                    f"Template too deeply nested (>{MAX_NESTING_DEPTH} levels)",
                    cursor,
                    "TOO_DEEP",
                )
            step = self.parse_sum(cursor + 1, index, depth + 1)
            if not step.ok:
                return step
            if self.peek(step.cursor) == "":
                return ParseStep.failure(
                    "Unexpected end of input, unterminated parenthesis",
                    cursor,
                    "UNTERMINATED",
                )
            if self.peek(step.cursor) != ")":
                return self.unexpected(step.cursor)
            return ParseStep.success(step.node, step.cursor + 1, step.index)

        if char != "" and char in OPERATORS:
            return ParseStep.failure(
                f"Invalid operator '{char}'", cursor, "INVALID_OPERATOR"
            )
        return self.unexpected(cursor)

    def parse_identifier(self, cursor: int, index: int, depth: int) -> ParseStep:
        start = cursor
        while self.peek(cursor) != "" and self.peek(cursor) in IDENTIFIER_CHARS:
            cursor += 1
        identifier = self.text[start:cursor]

        if identifier == self.variable:
            return ParseStep.success(Variable(), cursor, index)
        if identifier in MATH_CONSTANTS:
            return ParseStep.success(Constant(identifier), cursor, index)
        if identifier not in MATH_FUNCTIONS:
            return ParseStep.failure(
                f"Unknown identifier '{identifier}'", start, "UNKNOWN_IDENTIFIER"
            )

        if self.peek(cursor) != "(":
            return ParseStep.failure(
                f"Expected '(' after function '{identifier}' "
                f"(encountered {self.peek(cursor) or 'end of template'})",
                cursor,
                "MISSING_PAREN",
            )
        if depth >= MAX_NESTING_DEPTH:
            return ParseStep.failure(
                f"Template too deeply nested (>{MAX_NESTING_DEPTH} levels)",
                cursor,
                "TOO_DEEP",
            )
        step = self.parse_arguments(cursor, index, depth + 1)
        if not step.ok:
            return step

        args = step.node
        spec = MATH_FUNCTIONS[identifier]
        too_many = spec.max_args is not None and len(args) > spec.max_args
        if len(args) < spec.min_args or too_many:
            if spec.max_args is None:
                expected = f"at least {spec.min_args}"
            elif spec.min_args == spec.max_args:
                expected = str(spec.min_args)
            else:
                expected = f"{spec.min_args} to {spec.max_args}"
            return ParseStep.failure(
                f"Function '{identifier}' takes {expected} argument(s) but got {len(args)}",
                start,
                "BAD_ARITY",
            )
        return ParseStep.success(Call(identifier, args), step.cursor, step.index)

    def parse_arguments(self, open_cursor: int, index: int, depth: int) -> ParseStep:
        args = []
        cursor = open_cursor + 1
        while True:
            step = self.parse_sum(cursor, index, depth)
            if not step.ok:
                return step
            args.append(step.node)
            cursor, index = step.cursor, step.index
            char = self.peek(cursor)
            if char == ",":
                cursor += 1
                continue
            if char == ")":
                return ParseStep.success(tuple(args), cursor + 1, index)
            if char == "":
                return ParseStep.failure(
                    "Unexpected end of input, unterminated parenthesis",
                    open_cursor,
                    "UNTERMINATED",
                )
            return self.unexpected(cursor)


def parse_template(template: str, variable: str = VARIABLE_NAME) -> Formula:
    """Parse an already macro-expanded template into a Formula.

    Args:
        template: Expanded template (whitespace is ignored)
        variable: Name of the independent variable

    Returns:
        Formula whose placeholders are numbered in scan order

    Raises:
        ParseError: on the first construct that cannot be parsed; the
            position refers to ``template`` as given
    """
    if len(template) > MAX_TEMPLATE_LENGTH:
        raise ParseError(
            f"Template too long (>{MAX_TEMPLATE_LENGTH} characters)", "TOO_LONG"
        )

    offsets = [pos for pos, char in enumerate(template) if not char.isspace()]
    stripped = "".join(template[pos] for pos in offsets)

    step = _TemplateParser(stripped, variable).parse()
    if not step.ok:
        position = offsets[step.cursor] if step.cursor < len(offsets) else len(template)
        logger.debug("Failed to parse %r: %s", template, step.error)
        raise ParseError(step.error, step.code, position)
    return Formula(template, step.node, step.index)


@lru_cache(maxsize=CACHE_SIZE_PARSE)
def compile_template(template: str) -> Formula:
    """Expand macros with the default registry and parse the result.

    Formulas are immutable, so cached instances are shared between callers.
    """
    return parse_template(expand_macros(template, DEFAULT_MACROS))
