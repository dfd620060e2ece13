"""Optional plotting of a dataset together with its fitted curve."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import numpy as np

try:
    # Non-GUI backend; plots are always written to a file
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from .config import DEFAULT_PRECISION
from .evaluator import build_eval_function
from .formatting import format_equation
from .logging_config import get_logger
from .scoring import normalize_dataset
from .types import ParseError, PlotResult, ValidationError

logger = get_logger("plotting")


def plot_fit(
    data: Any,
    template: str,
    coefficients: Sequence[float],
    path: str,
    points: int = 200,
    precision: int = DEFAULT_PRECISION,
) -> PlotResult:
    """Save a plot of ``data`` and the fitted ``template`` to ``path``.

    The curve is sampled on ``points`` evenly spaced x values spanning the
    data with a 5% margin on each side; undefined points leave gaps.

    Args:
        data: Sequence of ``(x, y)`` pairs
        template: Equation template that was fitted
        coefficients: Solved coefficient values
        path: Output image path (format inferred from the extension)
        points: Number of samples for the curve
        precision: Decimal places used in the legend

    Returns:
        PlotResult with the written path, or an error
    """
    if not HAS_MATPLOTLIB:
        return PlotResult(
            ok=False, error="matplotlib not installed. Install with: pip install matplotlib"
        )

    try:
        points_xy = np.asarray(normalize_dataset(data))
        func = build_eval_function(template, coefficients)
        label = format_equation(template, precision, coefficients)
    except (ParseError, ValidationError) as e:
        return PlotResult(ok=False, error=str(e))

    x_min, x_max = points_xy[:, 0].min(), points_xy[:, 0].max()
    margin = (x_max - x_min) * 0.05 or 1.0
    x_vals = np.linspace(x_min - margin, x_max + margin, points)
    y_vals = np.array([func(x) for x in x_vals])

    fig, ax = plt.subplots(figsize=(10, 6))
    try:
        ax.scatter(points_xy[:, 0], points_xy[:, 1], color="#A23B72", zorder=3, label="data")
        ax.plot(x_vals, y_vals, linewidth=2, color="#2E86AB", label=f"y = {label}")
        ax.set_xlabel("x", fontsize=12, fontweight="bold")
        ax.set_ylabel("y", fontsize=12, fontweight="bold")
        ax.set_title(f"Best fit of {template}", fontsize=14, fontweight="bold")
        ax.grid(True, alpha=0.3, linestyle="--")
        ax.legend(loc="best", fontsize=10)
        fig.tight_layout()
        fig.savefig(path, dpi=150, bbox_inches="tight")
    except (OSError, ValueError) as e:
        logger.error("Failed to save plot to %s: %s", path, e)
        return PlotResult(ok=False, error=f"Failed to save plot: {e}")
    finally:
        plt.close(fig)

    logger.info("Plot saved to %s", path)
    return PlotResult(ok=True, path=path, points=points)
