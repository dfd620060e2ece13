"""Automatic search over a fixed catalog of equation shapes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from .config import AUTO_FORMAT_PRECISION, CANDIDATE_TEMPLATES
from .formatting import format_equation
from .logging_config import get_logger
from .optimizer import find_best_fit, rescore
from .scoring import normalize_dataset
from .types import AutoFitResult

logger = get_logger("auto")


def auto_find_best_fit(
    data: Any,
    format: bool = False,
    templates: Sequence[str] = CANDIDATE_TEMPLATES,
) -> AutoFitResult | str:
    """Fit every candidate template and keep the one with the lowest residual.

    Candidates are compared on the score of their rounded values, which is
    what a caller would actually use. On equal scores the earlier template
    in ``templates`` wins.

    Args:
        data: Sequence of ``(x, y)`` pairs
        format: Return the formatted winning equation instead of the result
        templates: Candidate templates, tried in order

    Returns:
        AutoFitResult ``(score, template, values)`` or the formatted equation

    Example:
        >>> score, template, values = auto_find_best_fit([(1, 2), (2, 4), (3, 6)])
        >>> template
        '$x + $'
    """
    if not templates:
        raise ValueError("At least one candidate template is required")
    points = normalize_dataset(data)

    best: AutoFitResult | None = None
    for template in templates:
        result = find_best_fit(points, template, return_score=True)
        score = rescore(points, template, result.values)
        logger.debug("Candidate %r scored %g with %s", template, score, result.values)
        if best is None or score < best.score:
            best = AutoFitResult(score, template, result.values)

    logger.info("Best candidate %r (score=%g)", best.template, best.score)
    if format:
        return format_equation(best.template, AUTO_FORMAT_PRECISION, best.values)
    return best
