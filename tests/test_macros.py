"""Unit tests for macro expansion."""

import unittest

from bestfit_pkg.macros import (
    DEFAULT_MACROS,
    expand_macros,
    find_closing_paren,
    polynomial,
    split_top_level_commas,
)
from bestfit_pkg.types import MacroError, ParseError


class TestPolynomialMacro(unittest.TestCase):
    """Test the built-in poly macro."""

    def test_degree_one(self):
        self.assertEqual(polynomial("1"), "$x + $")

    def test_degree_three(self):
        self.assertEqual(polynomial("3"), "$x^3 + $x^2 + $x + $")

    def test_placeholder_count(self):
        for degree in range(1, 8):
            self.assertEqual(polynomial(str(degree)).count("$"), degree + 1)

    def test_rejects_zero_degree(self):
        with self.assertRaises(MacroError) as ctx:
            polynomial("0")
        self.assertEqual(ctx.exception.code, "INVALID_MACRO_ARGUMENT")

    def test_rejects_non_integer_degree(self):
        for arg in ("3.5", "x", ""):
            with self.assertRaises(MacroError) as ctx:
                polynomial(arg)
            self.assertEqual(ctx.exception.code, "INVALID_MACRO_ARGUMENT")

    def test_rejects_extra_arguments(self):
        with self.assertRaises(MacroError) as ctx:
            polynomial("1", "2")
        self.assertEqual(ctx.exception.code, "INVALID_MACRO_ARGUMENT")


class TestExpandMacros(unittest.TestCase):
    """Test template-level expansion."""

    def test_template_without_macros_is_unchanged(self):
        self.assertEqual(expand_macros("$x + $"), "$x + $")

    def test_expands_poly(self):
        self.assertEqual(expand_macros("#poly(2)"), "$x^2 + $x + $")

    def test_expands_inside_expression(self):
        self.assertEqual(expand_macros("sin(#poly(1))"), "sin($x + $)")

    def test_expands_multiple_invocations(self):
        self.assertEqual(
            expand_macros("#poly(1) + #poly(1)"), "$x + $ + $x + $"
        )

    def test_whitespace_in_arguments(self):
        self.assertEqual(expand_macros("#poly( 2 )"), "$x^2 + $x + $")

    def test_unknown_macro(self):
        with self.assertRaises(MacroError) as ctx:
            expand_macros("#nomacro(3)")
        self.assertEqual(ctx.exception.code, "UNKNOWN_MACRO")
        self.assertEqual(ctx.exception.position, 0)

    def test_macro_error_is_parse_error(self):
        with self.assertRaises(ParseError):
            expand_macros("#nomacro(3)")

    def test_missing_parenthesis(self):
        for template in ("#poly", "# poly(3)", "#(3)", "#poly 3"):
            with self.assertRaises(MacroError) as ctx:
                expand_macros(template)
            self.assertEqual(ctx.exception.code, "MACRO_SYNTAX", template)

    def test_unbalanced_invocation(self):
        with self.assertRaises(MacroError) as ctx:
            expand_macros("#poly(3")
        self.assertEqual(ctx.exception.code, "UNBALANCED")
        self.assertEqual(ctx.exception.position, 5)

    def test_generator_error_gets_invocation_position(self):
        with self.assertRaises(MacroError) as ctx:
            expand_macros("$ + #poly(0)")
        self.assertEqual(ctx.exception.code, "INVALID_MACRO_ARGUMENT")
        self.assertEqual(ctx.exception.position, 4)

    def test_custom_registry(self):
        macros = {"line": lambda *args: "$x + $"}
        self.assertEqual(expand_macros("#line()", macros), "$x + $")
        with self.assertRaises(MacroError):
            expand_macros("#poly(2)", macros)

    def test_expansion_is_single_pass(self):
        macros = {"outer": lambda *args: "#poly(1)"}
        self.assertEqual(expand_macros("#outer()", macros), "#poly(1)")

    def test_default_registry_is_read_only(self):
        with self.assertRaises(TypeError):
            DEFAULT_MACROS["line"] = lambda *args: "$x + $"


class TestHelpers(unittest.TestCase):
    def test_split_top_level_commas(self):
        self.assertEqual(
            split_top_level_commas("a, (b, c), d"), ["a", "(b, c)", "d"]
        )

    def test_split_keeps_empty_segments(self):
        self.assertEqual(split_top_level_commas(","), ["", ""])
        self.assertEqual(split_top_level_commas(""), [""])

    def test_find_closing_paren(self):
        self.assertEqual(find_closing_paren("f(a(b))c", 1), 6)
        self.assertEqual(find_closing_paren("f(a(b)", 1), -1)


if __name__ == "__main__":
    unittest.main()
