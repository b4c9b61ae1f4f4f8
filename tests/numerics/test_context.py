"""Tests for MathContext and the decimal helpers."""

from decimal import Decimal

import pytest

from numtower.core.errors import NonTerminatingDecimalError, PrecisionError
from numtower.numerics import DECIMAL64, UNLIMITED, IntegerImpl, MathContext, RealImpl, RoundingMode
from numtower.numerics.context import (
    DivisionByZeroPolicy,
    compute,
    divide,
    division_by_zero_policy,
    infer_math_context,
    strip_trailing_zeros,
    terminates,
    terminating_decimal,
)


class TestMathContext:
    """Precision and rounding settings."""

    def test_defaults(self):
        """Rounding defaults to half-even."""
        mctx = MathContext(10)
        assert mctx.precision == 10
        assert mctx.rounding == RoundingMode.HALF_EVEN

    def test_default_comes_from_settings(self):
        """The default context uses the configured precision."""
        assert MathContext.default() == MathContext(34, RoundingMode.HALF_EVEN)

    def test_rounding_accepts_decimal_names(self):
        """decimal module constant names are accepted."""
        assert MathContext(5, "ROUND_HALF_UP").rounding == RoundingMode.HALF_UP

    def test_negative_precision_rejected(self):
        """Precision zero means unlimited, below zero is invalid."""
        with pytest.raises(ValueError):
            MathContext(-1)

    def test_is_hashable_and_immutable(self):
        """Contexts key the constant cache, so they must hash by value."""
        cache = {MathContext(10): "ten"}
        assert cache[MathContext(10)] == "ten"
        with pytest.raises(Exception):
            DECIMAL64.precision = 3

    def test_unlimited(self):
        """Guard digits leave an unlimited context alone."""
        assert UNLIMITED.is_unlimited
        assert UNLIMITED.with_guard_digits(5) is UNLIMITED
        assert MathContext(10).with_guard_digits(5).precision == 15

    def test_require_bounded(self):
        """The error names the algorithm that needed a bound."""
        MathContext(10).require_bounded("Square root")
        with pytest.raises(PrecisionError, match="Square root"):
            UNLIMITED.require_bounded("Square root")

    def test_round(self):
        """Rounding honours the mode and skips unlimited contexts."""
        assert MathContext(3).round(Decimal("3.14159")) == Decimal("3.14")
        assert MathContext(3, RoundingMode.UP).round(Decimal("3.141")) == Decimal("3.15")
        assert UNLIMITED.round(Decimal("3.14159")) == Decimal("3.14159")


class TestCompute:
    """Running decimal operations and detecting rounding."""

    def test_reports_rounding(self):
        """1/3 at five digits is rounded."""
        value, rounded = compute(MathContext(5), lambda c: c.divide(Decimal(1), Decimal(3)))
        assert value == Decimal("0.33333")
        assert rounded

    def test_exact_operation_not_rounded(self):
        """Exact results are not flagged."""
        value, rounded = compute(MathContext(5), lambda c: c.add(Decimal("1.5"), Decimal("2.5")))
        assert value == Decimal("4")
        assert not rounded

    def test_unlimited_division_terminating(self):
        """Terminating quotients are exact at unlimited precision."""
        assert divide(Decimal(1), Decimal(4), UNLIMITED) == (Decimal("0.25"), False)

    def test_unlimited_division_non_terminating_fails(self):
        """An unlimited context never attempts an infinite expansion."""
        with pytest.raises(NonTerminatingDecimalError):
            divide(Decimal(1), Decimal(3), UNLIMITED)

    def test_terminating_decimal(self):
        """Only fractions with a finite expansion are accepted."""
        assert terminating_decimal(3, 8) == Decimal("0.375")
        assert terminating_decimal(-7, 20) == Decimal("-0.35")
        with pytest.raises(ArithmeticError):
            terminating_decimal(1, 7)

    def test_terminates(self):
        """Termination is decided on the reduced denominator."""
        assert terminates(1, 8)
        assert terminates(3, 6)
        assert not terminates(1, 6)

    def test_strip_trailing_zeros(self):
        """Zero keeps no exponent."""
        assert str(strip_trailing_zeros(Decimal("1.500"))) == "1.5"
        assert str(strip_trailing_zeros(Decimal("0.000"))) == "0"


class TestInferMathContext:
    """Choosing the context of a result."""

    def test_smallest_bounded_precision_wins(self):
        """The lower precision wins."""
        left = RealImpl("1", mctx=MathContext(10))
        right = RealImpl("2", mctx=MathContext(20))
        assert infer_math_context(left, right) == MathContext(10)

    def test_unlimited_operands_are_ignored(self):
        """Integers do not limit the result."""
        real = RealImpl("2", mctx=MathContext(20))
        assert infer_math_context(IntegerImpl(1), real) == MathContext(20)

    def test_all_unlimited(self):
        """Only unlimited operands give an unlimited result."""
        assert infer_math_context(IntegerImpl(1), IntegerImpl(2)) is UNLIMITED

    def test_rounding_from_first_bounded(self):
        """Rounding comes from the first bounded operand."""
        left = RealImpl("1", mctx=MathContext(30, RoundingMode.DOWN))
        right = RealImpl("2", mctx=MathContext(20, RoundingMode.UP))
        assert infer_math_context(left, right) == MathContext(20, RoundingMode.DOWN)


def test_default_division_policy_is_throw():
    """Dividing by zero raises unless configured otherwise."""
    assert division_by_zero_policy() == DivisionByZeroPolicy.THROW
