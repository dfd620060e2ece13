"""Test that API functions return typed dataclasses."""

import math

from bestfit_pkg.api import auto_fit, evaluate, fit, validate_template
from bestfit_pkg.types import FitReport

LINE = [(1, 5), (2, 7), (3, 9)]


class TestAPITypedReturns:
    """Test that all API functions return typed dataclasses."""

    def test_fit_returns_fit_report(self):
        """Test that fit() returns FitReport."""
        result = fit(LINE, "$x + $")
        assert isinstance(result, FitReport)
        assert result.ok is True
        assert result.values == [2.0, 3.0]
        assert result.equation == "2x + 3"
        assert result.template == "$x + $"
        assert result.score is not None

    def test_fit_error_returns_fit_report(self):
        """Test that fit() errors return FitReport."""
        result = fit(LINE, "$x + y")
        assert isinstance(result, FitReport)
        assert result.ok is False
        assert result.code == "UNKNOWN_IDENTIFIER"
        assert result.position == 5
        assert result.values is None

    def test_fit_invalid_data(self):
        result = fit([], "$x + $")
        assert result.ok is False
        assert result.code == "EMPTY_DATA"
        assert result.position is None

    def test_fit_invalid_option(self):
        result = fit(LINE, "$x + $", iterations=-1)
        assert result.ok is False
        assert result.code == "INVALID_OPTION"

    def test_fit_unsupported_options_return_fit_report(self):
        for option in ("format", "return_score", "round"):
            result = fit(LINE, "$x + $", **{option: True})
            assert isinstance(result, FitReport)
            assert result.ok is False
            assert result.code == "INVALID_OPTION"
            assert option in result.error

    def test_fit_explicit_options(self):
        result = fit(LINE, "$x + $", iterations=0, batch_size=10, minimum_step_dp=3)
        assert result.ok is True
        assert result.values == [1.0, 1.0]
        assert result.equation == "x + 1"

    def test_fit_precision_option(self):
        result = fit(LINE, "$x + $", precision=2)
        assert result.ok is True
        assert all(round(v, 2) == v for v in result.values)

    def test_auto_fit_returns_fit_report(self):
        """Test that auto_fit() returns FitReport."""
        result = auto_fit([(1, 2), (2, 4), (3, 6)])
        assert isinstance(result, FitReport)
        assert result.ok is True
        assert result.template == "$x + $"
        assert result.equation == "2x + 0"

    def test_auto_fit_error_returns_fit_report(self):
        result = auto_fit([(1, 2, 3)])
        assert result.ok is False
        assert result.code == "INVALID_DATA"

    def test_validate_template(self):
        assert validate_template("#poly(3)") == (True, None)
        ok, error = validate_template("$x + y")
        assert ok is False
        assert error == "Unknown identifier 'y' (at position 5)"

    def test_evaluate(self):
        assert evaluate("$x + $", [2.0, 3.0], 4.0) == 11.0
        assert math.isnan(evaluate("$x + $", [2.0], 4.0))
        assert math.isnan(evaluate("$/x", [1.0], 0.0))


class TestFitReport:
    def test_to_dict_omits_missing_fields(self):
        report = FitReport(ok=False, error="bad", code="EMPTY")
        assert report.to_dict() == {"ok": False, "error": "bad", "code": "EMPTY"}

    def test_to_dict_success(self):
        report = fit(LINE, "$x + $")
        data = report.to_dict()
        assert data["ok"] is True
        assert data["values"] == [2.0, 3.0]
        assert data["equation"] == "2x + 3"
        assert "error" not in data

    def test_repr(self):
        assert "code='EMPTY'" in repr(FitReport(ok=False, error="bad", code="EMPTY"))
