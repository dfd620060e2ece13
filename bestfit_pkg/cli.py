"""Command-line interface for bestfit."""

from __future__ import annotations

import argparse
import json
import re
import sys
from typing import Any

import numpy as np

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_ITERATIONS,
    DEFAULT_MINIMUM_STEP_DP,
    DEFAULT_PRECISION,
    DEFAULT_TEMPLATE,
    VERSION,
)
from .logging_config import get_logger, setup_logging
from .scoring import sequential
from .types import FitReport

logger = get_logger("cli")

_POINT_SEPARATOR_RE = re.compile(r"[;\n]+")


def parse_points(text: str) -> list[tuple[float, float]]:
    """Parse ``"1,5; 2,7; 3,9"`` into a list of points.

    Raises:
        ValueError: if a point is not two comma-separated numbers
    """
    points = []
    for chunk in _POINT_SEPARATOR_RE.split(text):
        chunk = chunk.strip()
        if not chunk:
            continue
        parts = [p.strip() for p in chunk.split(",")]
        if len(parts) != 2:
            raise ValueError(f"Expected 'x,y' but got '{chunk}'")
        points.append((float(parts[0]), float(parts[1])))
    return points


def parse_sequence(text: str, start: int = 1) -> list[tuple[int, float]]:
    """Parse a whitespace or comma separated series into sequential points."""
    values = [float(v) for v in re.split(r"[\s,]+", text.strip()) if v]
    return sequential(values, start)


def load_points(path: str) -> list[tuple[float, float]]:
    """Read a two-column CSV file (header lines starting with '#' are skipped)."""
    array = np.loadtxt(path, delimiter=",", ndmin=2, comments="#")
    if array.shape[1] != 2:
        raise ValueError(f"Expected 2 columns in {path}, found {array.shape[1]}")
    return [(float(x), float(y)) for x, y in array]


def print_report(
    report: FitReport, output_format: str = "human", precision: int = DEFAULT_PRECISION
) -> None:
    """Print a fit report in the requested format.

    Args:
        report: Result of the fit
        output_format: "json" for JSON output, "human" for human-readable
        precision: Decimal places used for the simplified equation
    """
    if output_format == "json":
        print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
        return
    if not report.ok:
        print("Error:", report.error)
        return
    print(f"y = {report.equation}")
    print(f"Template: {report.template}")
    print(f"Coefficients: {report.values}")
    print(f"Score: {report.score:.6g}")
    equivalent = _equivalent_form(report, precision)
    if equivalent.replace(" ", "") != (report.equation or "").replace(" ", ""):
        print(f"Equivalent: y = {equivalent}")


def _equivalent_form(report: FitReport, precision: int) -> str:
    from .formatting import symbolic_equation

    return str(symbolic_equation(report.template, report.values, precision))


def _health_check() -> int:
    """Run health check to verify dependencies and basic operations.

    Returns:
        Exit code (0 for success, non-zero for failures)
    """
    checks_passed = 0
    checks_failed = 0

    print("Running bestfit health check...")
    print("-" * 50)

    try:
        import sympy

        print(f"[OK] SymPy {sympy.__version__} imported successfully")
        checks_passed += 1
    except ImportError as e:
        print(f"[FAIL] SymPy import failed: {e}")
        checks_failed += 1

    print(f"[OK] NumPy {np.__version__} available")
    checks_passed += 1

    try:
        from .parser import compile_template

        formula = compile_template("#poly(2)")
        if formula.placeholder_count == 3 and formula(2.0, [1.0, 1.0, 1.0]) == 7.0:
            print("[OK] Template parsing works")
            checks_passed += 1
        else:
            print("[FAIL] Template parsing returned unexpected results")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Template parsing check failed: {e}")
        checks_failed += 1

    try:
        from .optimizer import find_best_fit

        values = find_best_fit([(1, 5), (2, 7), (3, 9)], "$x + $")
        if values == [2.0, 3.0]:
            print("[OK] Basic fitting works")
            checks_passed += 1
        else:
            print(f"[FAIL] Fitting check failed: expected [2.0, 3.0], got {values}")
            checks_failed += 1
    except Exception as e:
        print(f"[FAIL] Fitting check failed: {e}")
        checks_failed += 1

    try:
        import matplotlib

        print(f"[OK] Matplotlib {matplotlib.__version__} available")
        checks_passed += 1
    except ImportError:
        print("[WARN] Matplotlib not available (--plot disabled)")
        print("  To install: pip install matplotlib")

    print("-" * 50)
    print(f"Results: {checks_passed} passed, {checks_failed} failed")

    if checks_failed > 0:
        print("\n[WARN] Some health checks failed. Core functionality may be impaired.")
        return 1

    print("\n[OK] All health checks passed!")
    return 0


def _read_data(args: argparse.Namespace) -> list[Any]:
    if args.data_file:
        return load_points(args.data_file)
    if args.sequence:
        return parse_sequence(args.sequence, args.start)
    return parse_points(args.data)


def main_entry(argv: list[str] | None = None) -> int:
    """
    Main entry point for the bestfit CLI.

    Args:
        argv: Optional command-line arguments (defaults to sys.argv)

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    parser = argparse.ArgumentParser(
        prog="bestfit",
        description="Fit an equation template to 2-D data without derivatives.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-d", "--data", type=str, help="Data points, e.g. \"1,5; 2,7; 3,9\""
    )
    source.add_argument(
        "-s", "--sequence", type=str, help="One-dimensional series, e.g. \"5 7 9\""
    )
    source.add_argument("--data-file", type=str, help="Two-column CSV file of x,y points")
    parser.add_argument(
        "--start", type=int, default=1, help="First x value for --sequence (default: 1)"
    )
    parser.add_argument(
        "-t",
        "--template",
        type=str,
        default=DEFAULT_TEMPLATE,
        help=f"Equation template (default: '{DEFAULT_TEMPLATE}')",
    )
    parser.add_argument(
        "-a", "--auto", action="store_true", help="Try the built-in catalog of templates"
    )
    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"Batches per coefficient (default: {DEFAULT_ITERATIONS})",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Trials per batch (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--minimum-step-dp",
        type=int,
        default=DEFAULT_MINIMUM_STEP_DP,
        help=f"Step-size floor in decimal places (default: {DEFAULT_MINIMUM_STEP_DP})",
    )
    parser.add_argument(
        "-p",
        "--precision",
        type=int,
        default=DEFAULT_PRECISION,
        help=f"Rounding precision in decimal places (default: {DEFAULT_PRECISION})",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=["json", "human"],
        default="human",
        help="Output format: json (machine-readable) or human (human-readable)",
    )
    parser.add_argument("--plot", type=str, metavar="PATH", help="Save a plot of the fit")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level",
    )
    parser.add_argument("--log-file", type=str, help="Write logs to file")
    parser.add_argument(
        "-v", "--version", action="store_true", help="Show program version"
    )
    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and verify dependencies",
    )
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level, log_file=args.log_file)

    if args.version:
        print(VERSION)
        return 0
    if args.health_check:
        return _health_check()
    if not (args.data or args.sequence or args.data_file):
        parser.error("one of --data, --sequence or --data-file is required")

    try:
        data = _read_data(args)
    except (OSError, ValueError) as e:
        print(f"Error: Could not read data: {e}")
        return 1
    logger.debug("Read %d data points", len(data))

    from .api import auto_fit, fit

    if args.auto:
        report = auto_fit(data)
    else:
        report = fit(
            data,
            args.template,
            iterations=args.iterations,
            batch_size=args.batch_size,
            minimum_step_dp=args.minimum_step_dp,
            precision=args.precision,
        )
    precision = DEFAULT_PRECISION if args.auto else args.precision
    print_report(report, output_format=args.format, precision=precision)
    if not report.ok:
        return 1

    if args.plot:
        from .plotting import plot_fit

        result = plot_fit(data, report.template, report.values, args.plot, precision=args.precision)
        if not result.ok:
            print(f"Error: {result.error}")
            return 1
        if args.format == "human":
            print(f"Plot saved to: {result.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main_entry())
