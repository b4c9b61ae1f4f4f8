"""Tests for RepeatingDecimal rendering and cycle detection."""

import pytest

from numtower.numerics import UNLIMITED, MathContext, RationalImpl, RepeatingDecimal
from numtower.util.text_effects import overline


class TestCycleDetection:
    """Finding where the period starts and how long it is."""

    @pytest.mark.parametrize("num,den,start,length", [
        (1, 3, 0, 1),
        (1, 6, 1, 1),
        (1, 7, 0, 6),
        (1, 12, 2, 1),
        (7, 30, 1, 1),
        (1, 97, 0, 96),
    ])
    def test_repeating(self, num, den, start, length):
        """Known periods and prefixes."""
        value = RepeatingDecimal(num, den)
        assert not value.is_finite()
        assert value.cycle_start() == start
        assert value.cycle_length() == length

    @pytest.mark.parametrize("num,den", [(1, 8), (3, 40), (7, 1), (1, 1024)])
    def test_finite(self, num, den):
        """Denominators of the form 2^a 5^b have no period."""
        value = RepeatingDecimal(num, den)
        assert value.is_finite()
        assert value.cycle_start() is None
        assert value.cycle_length() is None

    def test_unreduced_input(self):
        """The period is found on the reduced fraction."""
        value = RepeatingDecimal(2, 6)
        assert value.cycle_start() == 0
        assert value.cycle_length() == 1

    def test_from_rational(self):
        """Wrapping a RationalImpl keeps its value and context."""
        value = RepeatingDecimal(RationalImpl(5, 7, mctx=MathContext(12)))
        assert value == RationalImpl(5, 7)
        assert value.math_context == MathContext(12)
        assert value.cycle_length() == 6

    def test_fractional_digits(self):
        """Digits after the point ignore the sign."""
        assert RepeatingDecimal(1, 7).fractional_digits(8) == [1, 4, 2, 8, 5, 7, 1, 4]
        assert RepeatingDecimal(-22, 7).fractional_digits(3) == [1, 4, 2]


class TestRendering:
    """Overlined text output."""

    def test_single_digit_period(self):
        """Every repeated digit is overlined."""
        assert str(RepeatingDecimal(1, 3, mctx=MathContext(10))) == "0." + "3\u0305" * 10

    def test_partial_period_gets_ellipsis(self):
        """A period cut short ends in an ellipsis."""
        text = str(RepeatingDecimal(1, 7, mctx=MathContext(10)))
        assert text == "0." + overline("142857") + overline("1428") + "…"

    def test_prefix_before_period(self):
        """Digits before the period are not overlined."""
        assert str(RepeatingDecimal(1, 6, mctx=MathContext(5))) == "0.1" + overline("6666")

    def test_integer_part_uses_budget(self):
        """Integer digits count toward the precision."""
        assert str(RepeatingDecimal(7, 3, mctx=MathContext(5))) == "2." + overline("3333")

    def test_negative(self):
        """The sign precedes the expansion."""
        assert str(RepeatingDecimal(-1, 3, mctx=MathContext(3))) == "-0." + overline("333")

    def test_finite_expansion(self):
        """Finite expansions print in full."""
        assert str(RepeatingDecimal(1, 8)) == "0.125"

    def test_finite_expansion_truncated(self):
        """Long finite expansions are cut at the precision."""
        assert str(RepeatingDecimal(1, 1024, mctx=MathContext(5))) == "0.00097…"

    def test_integer_value(self):
        """Whole values print without a point."""
        assert str(RepeatingDecimal(6, 3)) == "2"

    def test_period_beyond_budget(self):
        """A period that does not fit is not overlined."""
        assert str(RepeatingDecimal(1, 12, mctx=MathContext(2))) == "0.08…"

    def test_unlimited_shows_one_period(self):
        """Unlimited precision prints exactly one period."""
        assert str(RepeatingDecimal(1, 7, mctx=UNLIMITED)) == "0." + overline("142857")
        assert str(RepeatingDecimal(1, 6, mctx=UNLIMITED)) == "0.1" + overline("6")
        assert str(RepeatingDecimal(3, 8, mctx=UNLIMITED)) == "0.375"

    def test_repr(self):
        """repr shows the numerator and denominator."""
        assert repr(RepeatingDecimal(1, 3)) == "RepeatingDecimal(1, 3)"
