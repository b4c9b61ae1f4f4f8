"""Tests for parsing numeric literals."""

from decimal import Decimal

import pytest

import numtower
from numtower.numerics import IntegerImpl, MathContext, Numeric, RationalImpl, RealImpl, parse


class TestParse:
    """Parsing integers, fractions and decimals."""

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        (" -17 ", -17),
        ("+3", 3),
        ("123456789012345678901234567890", 123456789012345678901234567890),
    ])
    def test_integers(self, text, expected):
        """Signs and surrounding whitespace are allowed."""
        value = parse(text)
        assert isinstance(value, IntegerImpl)
        assert value.as_int() == expected

    def test_fractions(self):
        """Spaces around the slash are allowed."""
        assert parse("22/7") == RationalImpl(22, 7)
        assert parse("-1 / 3") == RationalImpl(-1, 3)
        assert parse("4/-8") == RationalImpl(-4, 8)

    def test_fractions_are_not_reduced(self):
        """Parsed fractions keep their written terms."""
        assert str(parse("6/4")) == "6/4"

    def test_zero_denominator(self):
        """A zero denominator is a parse error."""
        with pytest.raises(ValueError):
            parse("1/0")

    @pytest.mark.parametrize("text,expected", [
        ("3.14159", "3.14159"),
        ("-0.5", "-0.5"),
        (".5", "0.5"),
        ("5.", "5"),
        ("1.5e-10", "1.5E-10"),
    ])
    def test_decimals(self, text, expected):
        """Decimal literals become exact reals."""
        value = parse(text)
        assert isinstance(value, RealImpl)
        assert value.as_decimal() == Decimal(expected)
        assert value.is_exact()

    def test_context_is_applied(self):
        """The requested context reaches the parsed value."""
        assert parse("2.5", mctx=MathContext(10)).math_context == MathContext(10)
        assert parse("1/3", mctx=MathContext(10)).math_context == MathContext(10)

    @pytest.mark.parametrize("text", ["", "abc", "1/2/3", "1..2", "0x10", "3 + 4i"])
    def test_rejects_other_text(self, text):
        """Anything outside the three literal forms is rejected."""
        with pytest.raises(ValueError):
            parse(text)


class TestFromPython:
    """Converting builtin Python numbers."""

    def test_strings_go_through_parse(self):
        """Strings use the literal parser."""
        assert Numeric.from_python("22/7") == RationalImpl(22, 7)
        assert Numeric.from_python("7") == IntegerImpl(7)

    def test_floats_are_inexact(self):
        """Floats use their shortest repr and are inexact."""
        value = Numeric.from_python(0.1)
        assert value.as_decimal() == Decimal("0.1")
        assert not value.is_exact()

    def test_complex(self):
        """Python complex numbers become rectangular values."""
        value = Numeric.from_python(1 + 2j)
        assert value.real().as_decimal() == 1
        assert value.imaginary().as_decimal() == 2

    def test_bool_is_integer(self):
        """True converts to the integer 1."""
        assert Numeric.from_python(True) == IntegerImpl(1)


def test_package_level_parse():
    """parse is exported from the package root."""
    assert numtower.parse("1.25") == RealImpl("1.25")
