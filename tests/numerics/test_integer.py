"""Tests for IntegerImpl."""

from decimal import Decimal

import pytest

from numtower.core.errors import CoercionError, DivisionByZeroError
from numtower.numerics import (
    UNLIMITED,
    IntegerImpl,
    NegInfinity,
    NumericHierarchy,
    PosInfinity,
    RationalImpl,
    RealImpl,
    Sign,
)


class TestIntegerConstruction:
    """Parsing and basic properties."""

    def test_from_int_and_string(self):
        """Strings may carry whitespace and exceed 64 bits."""
        assert IntegerImpl(42).as_int() == 42
        assert IntegerImpl(" -12345678901234567890 ").as_int() == -12345678901234567890

    def test_exact_by_default(self):
        """Exactness can be turned off explicitly."""
        assert IntegerImpl(7).is_exact()
        assert not IntegerImpl(7, exact=False).is_exact()

    def test_context_is_unlimited(self):
        """Integers never round."""
        assert IntegerImpl(7).math_context is UNLIMITED

    def test_sign(self):
        """Sign of negative, zero and positive values."""
        assert IntegerImpl(-3).sign() == Sign.NEGATIVE
        assert IntegerImpl(0).sign() == Sign.ZERO
        assert IntegerImpl(3).sign() == Sign.POSITIVE


class TestIntegerArithmetic:
    """Integer arithmetic and division."""

    def test_add_subtract_multiply(self):
        """Closed operations stay integral."""
        assert IntegerImpl(2) + IntegerImpl(3) == IntegerImpl(5)
        assert IntegerImpl(2) - IntegerImpl(3) == IntegerImpl(-1)
        assert IntegerImpl(6) * IntegerImpl(7) == IntegerImpl(42)

    def test_python_int_operands(self):
        """Plain ints work on either side."""
        assert IntegerImpl(2) + 3 == IntegerImpl(5)
        assert 3 + IntegerImpl(2) == IntegerImpl(5)
        assert 10 - IntegerImpl(4) == IntegerImpl(6)

    def test_exactness_propagates(self):
        """An inexact operand makes the result inexact."""
        result = IntegerImpl(2, exact=False) + IntegerImpl(3)
        assert result.as_int() == 5
        assert not result.is_exact()

    def test_divide_evenly(self):
        """Even division stays an integer."""
        assert IntegerImpl(6) / IntegerImpl(3) == IntegerImpl(2)

    def test_divide_gives_reduced_rational(self):
        """Uneven division gives a reduced fraction."""
        assert IntegerImpl(1) / IntegerImpl(3) == RationalImpl(1, 3)
        assert IntegerImpl(6) / IntegerImpl(4) == RationalImpl(3, 2)

    def test_divide_by_zero_throws_by_default(self):
        """The error is also a ZeroDivisionError."""
        with pytest.raises(DivisionByZeroError):
            IntegerImpl(5) / IntegerImpl(0)
        with pytest.raises(ZeroDivisionError):
            IntegerImpl(5) / IntegerImpl(0)

    def test_divide_by_zero_signed_infinity(self, signed_infinity):
        """The signed-infinity policy keeps the dividend's sign."""
        assert isinstance(IntegerImpl(5) / IntegerImpl(0), PosInfinity)
        assert isinstance(IntegerImpl(-5) / IntegerImpl(0), NegInfinity)

    def test_zero_over_zero_always_raises(self, signed_infinity):
        """0/0 raises whatever the policy."""
        with pytest.raises(DivisionByZeroError):
            IntegerImpl(0) / IntegerImpl(0)

    def test_multiply_by_rational(self):
        """Whole products narrow back to integers."""
        assert IntegerImpl(4) * RationalImpl(3, 2) == IntegerImpl(6)
        assert IntegerImpl(3) * RationalImpl(1, 2) == RationalImpl(3, 2)

    def test_mixed_kinds_widen(self):
        """Rational and real operands widen the result."""
        assert IntegerImpl(1) + RationalImpl(1, 2) == RationalImpl(3, 2)
        assert IntegerImpl(1) + RealImpl("0.5") == RealImpl("1.5")

    def test_inverse(self):
        """1 is its own inverse."""
        assert IntegerImpl(4).inverse() == RationalImpl(1, 4)
        assert IntegerImpl(1).inverse() == IntegerImpl(1)

    def test_negate_and_magnitude(self):
        """Unary minus and abs()."""
        assert -IntegerImpl(5) == IntegerImpl(-5)
        assert abs(IntegerImpl(-5)) == IntegerImpl(5)


class TestIntegerSqrt:
    """Integer square roots by Newton's method."""

    def test_perfect_square(self):
        """Perfect squares have exact roots."""
        root = IntegerImpl(16).sqrt()
        assert root == IntegerImpl(4)
        assert root.is_exact()

    def test_non_square_is_inexact_floor(self):
        """Other values give the inexact floor."""
        root = IntegerImpl(17).sqrt()
        assert root.as_int() == 4
        assert not root.is_exact()

    def test_initial_guess_below_root(self):
        """The first guess never overshoots the root."""
        assert IntegerImpl(30).sqrt().as_int() == 5

    def test_large_perfect_square(self):
        """Roots beyond float range."""
        assert IntegerImpl(10 ** 40).sqrt() == IntegerImpl(10 ** 20)

    def test_floor_below_next_square(self):
        """n = r^2 + 2r makes Newton's method alternate between r and r + 1."""
        root = IntegerImpl(99).sqrt()
        assert root.as_int() == 9
        assert not root.is_exact()

    def test_negative_promotes_to_complex(self):
        """sqrt(-4) is 2i."""
        root = IntegerImpl(-4).sqrt()
        assert root.real().as_decimal() == 0
        assert root.imaginary().as_decimal() == 2


class TestIntegerExtras:
    """Digit and parity helpers."""

    def test_even_odd(self):
        """Parity of positive and negative values."""
        assert IntegerImpl(4).is_even()
        assert IntegerImpl(-3).is_odd()

    @pytest.mark.parametrize("value,expected", [
        (0, True),
        (1, True),
        (49, True),
        (50, False),
        (-4, False),
        (10 ** 30, True),
        (10 ** 30 + 1, False),
    ])
    def test_is_perfect_square(self, value, expected):
        """Negative values are never perfect squares."""
        assert IntegerImpl(value).is_perfect_square() is expected

    @pytest.mark.parametrize("value,digits", [
        (0, 1),
        (9, 1),
        (10, 2),
        (99, 2),
        (100, 3),
        (12345, 5),
        (-999, 3),
        (10 ** 100, 101),
    ])
    def test_number_of_digits(self, value, digits):
        """Digit counts ignore the sign."""
        assert IntegerImpl(value).number_of_digits() == digits

    def test_digit_at(self):
        """Digits are indexed from the least significant end."""
        value = IntegerImpl(12345)
        assert value.digit_at(0) == 5
        assert value.digit_at(4) == 1
        with pytest.raises(IndexError):
            value.digit_at(5)
        with pytest.raises(IndexError):
            value.digit_at(-1)

    def test_stream(self):
        """Digits stream least significant first."""
        assert list(IntegerImpl(255).stream(16)) == ["f", "f"]
        assert list(IntegerImpl(10).stream(2)) == ["0", "1", "0", "1"]
        assert list(IntegerImpl(0).stream()) == ["0"]

    def test_stream_rejects_bad_radix(self):
        """A radix below 2 is rejected."""
        with pytest.raises(ValueError):
            list(IntegerImpl(10).stream(1))

    def test_pow(self):
        """Negative powers give rationals."""
        assert IntegerImpl(2).pow(10) == IntegerImpl(1024)
        assert IntegerImpl(2).pow(-2) == RationalImpl(1, 4)

    def test_modulus(self):
        """Remainder by int or IntegerImpl."""
        assert IntegerImpl(17).modulus(5) == IntegerImpl(2)
        assert IntegerImpl(17).modulus(IntegerImpl(17)) == IntegerImpl(0)


class TestIntegerCoercion:
    """Widening to the other kinds."""

    def test_widens_to_every_kind(self):
        """Integers widen to every kind in the tower."""
        value = IntegerImpl(3)
        for kind in NumericHierarchy:
            assert value.is_coercible_to(kind)
        assert value.coerce_to(NumericHierarchy.INTEGER) is value
        assert value.coerce_to(NumericHierarchy.RATIONAL) == RationalImpl(3, 1)
        assert value.coerce_to(NumericHierarchy.REAL) == RealImpl(Decimal(3))

    def test_to_complex(self):
        """The imaginary part is zero."""
        value = IntegerImpl(3).coerce_to(NumericHierarchy.COMPLEX)
        assert value.real().as_decimal() == 3
        assert value.imaginary().as_decimal() == 0

    def test_unknown_target(self):
        """Targets outside the tower fail."""
        assert not IntegerImpl(3).is_coercible_to(None)
        with pytest.raises(CoercionError):
            IntegerImpl(3).coerce_to(PosInfinity)


class TestIntegerProtocol:
    """Python comparison, hashing and conversion hooks."""

    def test_ordering_across_kinds(self):
        """Ordering against rationals, reals and ints."""
        assert IntegerImpl(2) < IntegerImpl(3)
        assert IntegerImpl(2) < RationalImpl(5, 2)
        assert IntegerImpl(3) > RealImpl("2.5")
        assert IntegerImpl(3) >= 3

    def test_equality_and_hash(self):
        """Exactness is part of equality."""
        assert IntegerImpl(5) == 5
        assert IntegerImpl(5) != IntegerImpl(5, exact=False)
        assert hash(IntegerImpl(5)) == hash(IntegerImpl(5))
        assert len({IntegerImpl(5), IntegerImpl(5)}) == 1

    @pytest.mark.parametrize("value", [3, 0, -7, 10 ** 40])
    def test_hash_matches_plain_int(self, value):
        """Exact integers are interchangeable with ints as dict and set keys."""
        assert IntegerImpl(value) == value
        assert hash(IntegerImpl(value)) == hash(value)
        assert {value: "x"}[IntegerImpl(value)] == "x"
        assert IntegerImpl(value) in {value}

    def test_inexact_is_not_a_plain_int(self):
        """Inexact integers neither equal nor look up as ints."""
        inexact = IntegerImpl(3, exact=False)
        assert inexact != 3
        assert inexact not in {3: "x"}

    def test_str_and_int(self):
        """IntegerImpl works as a list index."""
        assert str(IntegerImpl(-42)) == "-42"
        assert int(IntegerImpl(42)) == 42
        assert [10, 20, 30][IntegerImpl(1)] == 20
