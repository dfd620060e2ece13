"""Macro expansion for equation templates.

A macro invocation has the form ``#name(arg, ...)`` and is replaced by the
template fragment its generator returns before the template is parsed.
Generators are looked up in an immutable registry that callers may replace.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from string import ascii_letters
from types import MappingProxyType

from .config import MACRO_MARKER, PLACEHOLDER, VARIABLE_NAME
from .logging_config import get_logger
from .types import MacroError

logger = get_logger("macros")


def split_top_level_commas(input_str: str) -> list[str]:
    """Split string by commas that are not inside parentheses.

    Empty segments are kept so that ``#poly(,)`` reports a bad argument
    instead of silently dropping it.
    """
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for char in input_str:
        if char == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        current.append(char)
    parts.append("".join(current).strip())
    return parts


def find_closing_paren(text: str, open_pos: int) -> int:
    """Return the index of the ')' matching the '(' at ``open_pos``, or -1."""
    depth = 0
    for pos in range(open_pos, len(text)):
        char = text[pos]
        if char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return pos
    return -1


def polynomial(*args: str) -> str:
    """Expand ``#poly(N)`` into ``$x^N + ... + $x^2 + $x + $``."""
    if len(args) != 1:
        raise MacroError(
            f"poly expects exactly one argument (got {len(args)})",
            "INVALID_MACRO_ARGUMENT",
        )
    try:
        degree = int(args[0])
    except ValueError:
        raise MacroError(
            f"Invalid degree '{args[0]}'", "INVALID_MACRO_ARGUMENT"
        ) from None
    if degree < 1:
        raise MacroError(
            f"degree must be at least 1 (got {degree})", "INVALID_MACRO_ARGUMENT"
        )

    term = PLACEHOLDER + VARIABLE_NAME
    terms = [f"{term}^{power}" for power in range(degree, 1, -1)]
    terms.append(term)
    terms.append(PLACEHOLDER)
    return " + ".join(terms)


DEFAULT_MACROS: Mapping[str, Callable[..., str]] = MappingProxyType(
    {"poly": polynomial}
)


def expand_macros(
    template: str, macros: Mapping[str, Callable[..., str]] = DEFAULT_MACROS
) -> str:
    """Replace every macro invocation in ``template`` with its expansion.

    Expansion is a single pass: generator output is inserted verbatim and is
    not scanned for further macro markers.

    Args:
        template: Equation template, possibly containing ``#name(args)``
        macros: Mapping from macro name to generator

    Returns:
        The expanded template

    Raises:
        MacroError: malformed invocation, unbalanced parentheses, unknown
            macro name, or arguments rejected by the generator
    """
    pieces: list[str] = []
    pos = 0
    length = len(template)
    while pos < length:
        start = template.find(MACRO_MARKER, pos)
        if start == -1:
            pieces.append(template[pos:])
            break
        pieces.append(template[pos:start])

        name_end = start + 1
        while name_end < length and template[name_end] in ascii_letters:
            name_end += 1
        name = template[start + 1 : name_end]
        if not name or name_end >= length or template[name_end] != "(":
            raise MacroError(
                f"Expected a macro name followed by '(' after '{MACRO_MARKER}'",
                "MACRO_SYNTAX",
                start,
            )

        close = find_closing_paren(template, name_end)
        if close == -1:
            raise MacroError(
                f"Unterminated parenthesis in call to macro '{name}'",
                "UNBALANCED",
                name_end,
            )

        generator = macros.get(name)
        if generator is None:
            raise MacroError(f"No macro '{name}' found", "UNKNOWN_MACRO", start)

        args = split_top_level_commas(template[name_end + 1 : close])
        try:
            expansion = generator(*args)
        except MacroError as exc:
            if exc.position is None:
                exc.position = start
            raise
        logger.debug("Expanded macro %s(%s) -> %r", name, ", ".join(args), expansion)
        pieces.append(expansion)
        pos = close + 1

    return "".join(pieces)
