"""Type definitions, result dataclasses and exceptions for consistent API responses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, NamedTuple


@dataclass(frozen=True)
class MathFunction:
    """A callable from the template function library.

    ``numeric`` is used when evaluating formulas, ``symbolic`` when a formula
    is converted to a SymPy expression. A ``max_args`` of None accepts any
    number of arguments from ``min_args`` up.
    """

    numeric: Callable[..., float]
    symbolic: Callable[..., Any]
    min_args: int = 1
    max_args: int | None = 1


@dataclass
class FitResult:
    """Outcome of a single fit when the caller asks for the score."""

    score: float
    values: list[float]
    proportional: list[bool]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "score": self.score,
            "values": list(self.values),
            "proportional": list(self.proportional),
        }


class AutoFitResult(NamedTuple):
    """Best candidate found by the automatic catalog search."""

    score: float
    template: str
    values: list[float]


@dataclass
class FitReport:
    """Non-raising result of a fit performed through the public API."""

    ok: bool
    template: str | None = None
    values: list[float] | None = None
    score: float | None = None
    equation: str | None = None
    proportional: list[bool] | None = None
    error: str | None = None
    code: str | None = None
    position: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result_dict: dict[str, Any] = {"ok": self.ok}
        for name in (
            "template",
            "values",
            "score",
            "equation",
            "proportional",
            "error",
            "code",
            "position",
        ):
            value = getattr(self, name)
            if value is not None:
                result_dict[name] = value
        return result_dict

    def __repr__(self) -> str:
        """Return string representation of the report."""
        if not self.ok:
            return f"FitReport(ok=False, code={self.code!r}, error={self.error!r})"
        return (
            f"FitReport(ok=True, template={self.template!r}, "
            f"values={self.values!r}, score={self.score!r})"
        )


@dataclass
class PlotResult:
    """Result of rendering a fit to an image file."""

    ok: bool
    path: str | None = None
    error: str | None = None
    points: int = 0


class ValidationError(Exception):
    """Raised when a dataset, option or coefficient vector is invalid."""

    def __init__(self, message: str, code: str = "VALIDATION_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class ParseError(Exception):
    """Raised when a template cannot be parsed.

    ``position`` is the offset of the offending construct in the
    macro-expanded template, or None when it is not known.
    """

    def __init__(
        self, message: str, code: str = "PARSE_ERROR", position: int | None = None
    ):
        self.message = message
        self.code = code
        self.position = position
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.position is None:
            return self.message
        return f"{self.message} (at position {self.position})"


class MacroError(ParseError):
    """Raised when a macro invocation cannot be expanded."""

    def __init__(
        self, message: str, code: str = "MACRO_ERROR", position: int | None = None
    ):
        super().__init__(message, code, position)
