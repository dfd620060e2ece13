"""Tests for the expression tree and its SymPy form."""

import dataclasses

import pytest
import sympy as sp

from bestfit_pkg.formula import BinaryOp, Coefficient, Formula, Number, Variable
from bestfit_pkg.parser import compile_template


class TestFormula:
    def test_manual_tree(self):
        root = BinaryOp("+", BinaryOp("*", Coefficient(0), Variable()), Coefficient(1))
        formula = Formula("$x + $", root, 2)
        assert formula(4.0, [2.0, 3.0]) == 11.0

    def test_nodes_are_immutable(self):
        node = Number(2.0)
        with pytest.raises(dataclasses.FrozenInstanceError):
            node.value = 3.0

    def test_coefficient_symbols(self):
        assert compile_template("$x + $").coefficient_symbols() == sp.symbols("c0:2")
        assert compile_template("x^2").coefficient_symbols() == ()

    def test_to_sympy_with_symbols(self):
        c0, c1 = sp.symbols("c0:2")
        x = sp.Symbol("x")
        assert compile_template("$x + $").to_sympy() == c0 * x + c1

    def test_to_sympy_with_values(self):
        x = sp.Symbol("x")
        expr = compile_template("$x^2 + $").to_sympy([2, 5])
        assert sp.simplify(expr - (2 * x**2 + 5)) == 0

    def test_to_sympy_functions_and_constants(self):
        x = sp.Symbol("x")
        expr = compile_template("sin(pi*x) + exp(x)").to_sympy()
        assert expr == sp.sin(sp.pi * x) + sp.exp(x)


class TestEquivalence:
    def test_poly_macro_matches_written_cubic(self):
        poly = compile_template("#poly(3)")
        cubic = compile_template("$x^3 + $x^2 + $x + $")
        assert poly.placeholder_count == 4
        assert poly.equivalent_to(cubic)

    def test_different_placeholder_counts_are_not_equivalent(self):
        a = compile_template("$*(x + 1)")
        b = compile_template("$x + $*1")
        assert a.placeholder_count == 1
        assert b.placeholder_count == 2
        assert not a.equivalent_to(b)

    def test_power_of_variable_is_not_power_of_two(self):
        assert not compile_template("$^x").equivalent_to(compile_template("$^2"))
        assert not compile_template("x^x").equivalent_to(compile_template("x^2"))

    def test_commutative_forms(self):
        assert compile_template("x*$ + $").equivalent_to(compile_template("$x + $"))
