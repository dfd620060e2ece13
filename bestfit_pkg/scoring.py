"""Datasets and residual scoring.

A dataset is a non-empty sequence of finite ``(x, y)`` pairs. The residual
score of a coefficient vector is the sum of squared differences between the
observed and predicted values. Points where the formula is undefined make
the whole score ``inf`` so that such vectors are never preferred.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import Any

import numpy as np

from .formula import Formula
from .types import ValidationError

Dataset = tuple[tuple[float, float], ...]


def normalize_dataset(data: Any) -> Dataset:
    """Validate ``data`` and convert it to a tuple of float pairs.

    Args:
        data: Sequence of ``(x, y)`` pairs or an array of shape ``(n, 2)``

    Returns:
        Tuple of ``(x, y)`` float tuples

    Raises:
        ValidationError: if the data is empty, not pairs, or not finite
    """
    try:
        array = np.asarray(data, dtype=float)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Dataset must contain numeric (x, y) pairs: {e}", "INVALID_DATA") from e

    if array.size == 0:
        raise ValidationError("Dataset must contain at least one point", "EMPTY_DATA")
    if array.ndim != 2 or array.shape[1] != 2:
        raise ValidationError(
            f"Dataset must have shape (n, 2), got {array.shape}", "INVALID_DATA"
        )
    if not np.isfinite(array).all():
        raise ValidationError("Dataset contains non-finite values", "INVALID_DATA")

    return tuple((float(x), float(y)) for x, y in array)


def sequential(values: Iterable[float], start: int = 1) -> list[tuple[int, float]]:
    """Pair each value of a one-dimensional series with an ascending integer x.

    >>> sequential([5, 7, 9])
    [(1, 5), (2, 7), (3, 9)]
    """
    return [(start + offset, value) for offset, value in enumerate(values)]


class ResidualScorer:
    """Sum-of-squared-residuals objective for one dataset and formula."""

    def __init__(self, data: Any, formula: Formula):
        self.data = normalize_dataset(data)
        self.formula = formula

    @property
    def size(self) -> int:
        return len(self.data)

    def __call__(self, coefficients: Sequence[float]) -> float:
        formula = self.formula
        total = 0.0
        try:
            for x, y in self.data:
                diff = y - formula(x, coefficients)
                total += diff * diff
        except (ArithmeticError, ValueError):
            return math.inf
        if math.isfinite(total):
            return total
        return math.inf


def residual_score(data: Any, formula: Formula, coefficients: Sequence[float]) -> float:
    """Score ``coefficients`` against ``data`` in a single call."""
    return ResidualScorer(data, formula)(coefficients)
