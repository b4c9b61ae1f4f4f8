"""
Arbitrary-precision integer values.

IntegerImpl is the bottom of the numeric tower: it widens losslessly to every
other kind, and its math context is always unlimited.
"""

from __future__ import annotations

from decimal import Decimal
from math import gcd
from typing import Any, Iterator

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from ..core.errors import CoercionError
from ..core.logging import get_logger
from .context import UNLIMITED, MathContext
from .dispatch import dispatch_binary
from .value import IntegerType, Numeric, NumericHierarchy, RationalType, Sign, Streamable

logger = get_logger(__name__)

_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"


class IntegerImpl(BaseModel, IntegerType, Streamable):
    """
    Integer value of unbounded magnitude.

    May carry exact=False when it stands for the integral result of an
    inexact computation (e.g. the truncated square root of a non-square).

    Examples:
        >>> IntegerImpl(42)
        >>> IntegerImpl("-12345678901234567890")
        >>> IntegerImpl(7, exact=False)
    """

    model_config = ConfigDict(frozen=True)

    value: int = Field(description="The integer value")
    exact: bool = Field(default=True, description="False if derived from an inexact computation")

    _num_digits: int | None = PrivateAttr(default=None)

    def __init__(self, value: int | str, exact: bool = True, **kwargs):
        if isinstance(value, str):
            value = int(value.strip())
        elif isinstance(value, IntegerType):
            value = value.as_int()
        super().__init__(value=value, exact=exact, **kwargs)

    # Contract

    def is_exact(self) -> bool:
        return self.exact

    @property
    def math_context(self) -> MathContext:
        return UNLIMITED

    def as_int(self) -> int:
        return self.value

    def sign(self) -> Sign:
        return Sign.from_value(self.value)

    def is_coercible_to(self, numtype: Any) -> bool:
        # integers widen to every known kind
        return NumericHierarchy.for_numeric_type(numtype) is not None

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl
        from .rational import RationalImpl
        from .real import RealImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.INTEGER:
            return self
        elif kind == NumericHierarchy.RATIONAL:
            return RationalImpl(self.value, 1, exact=self.exact)
        elif kind == NumericHierarchy.REAL:
            return RealImpl(Decimal(self.value), exact=self.exact)
        elif kind == NumericHierarchy.COMPLEX:
            return ComplexRectImpl(RealImpl(Decimal(self.value), exact=self.exact), RealImpl(Decimal(0)))
        raise CoercionError("Cannot coerce integer to specified type", self, numtype)

    def magnitude(self) -> IntegerImpl:
        return IntegerImpl(abs(self.value), exact=self.exact)

    def negate(self) -> IntegerImpl:
        return IntegerImpl(-self.value, exact=self.exact)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, IntegerType):
            return IntegerImpl(self.value + addend.as_int(), exact=self.exact and addend.is_exact())
        return dispatch_binary(self, addend, "add")

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, IntegerType):
            return IntegerImpl(self.value - subtrahend.as_int(), exact=self.exact and subtrahend.is_exact())
        return dispatch_binary(self, subtrahend, "subtract")

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, IntegerType):
            return IntegerImpl(self.value * multiplier.as_int(), exact=self.exact and multiplier.is_exact())
        elif isinstance(multiplier, RationalType):
            from .rational import RationalImpl

            exact = self.exact and multiplier.is_exact()
            num = self.value * multiplier.numerator().as_int()
            den = multiplier.denominator().as_int()
            divisor = gcd(num, den)
            if divisor == den:
                # reducing would leave a denominator of 1
                return IntegerImpl(num // divisor, exact=exact)
            return RationalImpl(num, den, exact=exact, mctx=multiplier.math_context).reduce()
        return dispatch_binary(self, multiplier, "multiply")

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, IntegerType):
            from .constants import divide_by_zero
            from .rational import RationalImpl

            if divisor.as_int() == 0:
                return divide_by_zero(self)
            exact = self.exact and divisor.is_exact()
            quotient, remainder = divmod(self.value, divisor.as_int())
            if remainder == 0:
                return IntegerImpl(quotient, exact=exact)
            return RationalImpl(self.value, divisor.as_int(), exact=exact).reduce()
        return dispatch_binary(self, divisor, "divide")

    def inverse(self) -> Numeric:
        from .constants import divide_by_zero
        from .rational import RationalImpl

        if self.value == 0:
            return divide_by_zero(IntegerImpl(1))
        if self.value == 1:
            # 1 is its own inverse
            return self
        return RationalImpl(1, self.value, exact=self.exact)

    def sqrt(self) -> Numeric:
        """
        Integer square root by Newton's method.

        Exact only for perfect squares; otherwise the result is the floor of
        the true root and is flagged inexact. Negative values are promoted to
        Complex.
        """
        if self.value < 0:
            return self.coerce_to(NumericHierarchy.COMPLEX).sqrt()
        if self.value < 2:
            return self

        guess = 1 << (self.value.bit_length() // 2)
        previous = guess
        # Loop until we hit the same value twice in a row, or wind up alternating
        while True:
            nxt = (guess + self.value // guess) >> 1
            if nxt == guess:
                root = guess
                break
            if nxt == previous:
                root = min(guess, nxt)
                break
            previous = guess
            guess = nxt
        return IntegerImpl(root, exact=self.exact and root * root == self.value)

    # Integer-specific operations

    def is_even(self) -> bool:
        return self.value % 2 == 0

    def is_odd(self) -> bool:
        return not self.is_even()

    def is_perfect_square(self) -> bool:
        """
        Determine if this integer is a perfect square.

        Negative numbers are never perfect squares. Cheap screens on the
        last digit and the digital root rule out most candidates before the
        square root is computed.
        """
        if self.value < 0:
            return False
        if self.digit_at(0) in (2, 3, 7, 8):
            return False

        root_digits = self.magnitude()
        while root_digits.value > 9:
            root_digits = IntegerImpl(sum(int(d) for d in root_digits.stream()))
        if root_digits.value not in (0, 1, 4, 7, 9):
            return False

        root = self.sqrt()
        return root.as_int() * root.as_int() == self.value

    def number_of_digits(self) -> int:
        """Count of decimal digits in |value| (1 for zero)."""
        if self._num_digits is not None:
            return self._num_digits
        if self.value == 0:
            return 1

        digits = 0
        temp = abs(self.value)
        # Remove digits in chunks of bit_length / 4, since 4 > log2(10)
        while True:
            bits = temp.bit_length()
            reduce = bits // 4
            temp //= 10 ** reduce
            digits += reduce
            if bits <= 4:
                break
        if temp > 0:
            digits += 1

        self._num_digits = digits
        return digits

    def digit_at(self, position: int) -> int:
        """
        Decimal digit at `position`, counting from 0 at the least significant digit.

        Raises:
            IndexError: If position is negative or beyond the leading digit
        """
        if position < 0:
            raise IndexError("Negative index is not supported")

        temp = abs(self.value)
        count = 0
        while True:
            temp, digit = divmod(temp, 10)
            if count == position:
                return digit
            count += 1
            if temp == 0:
                break
        raise IndexError(f"Index {position} exceeds max value {count - 1}")

    def stream(self, radix: int = 10) -> Iterator[str]:
        """Digits of |value| in base `radix`, least significant first."""
        if not 2 <= radix <= len(_DIGITS):
            raise ValueError(f"Radix must be between 2 and {len(_DIGITS)}, got {radix}")

        temp = abs(self.value)
        while True:
            temp, digit = divmod(temp, radix)
            yield _DIGITS[digit]
            if temp == 0:
                break

    def pow(self, exponent: IntegerType | int) -> Numeric:
        """Raise to an integer power; negative exponents give a Rational."""
        from .rational import RationalImpl

        n = exponent.as_int() if isinstance(exponent, IntegerType) else int(exponent)
        if n < 0:
            return RationalImpl(1, self.value ** -n, exact=self.exact)
        return IntegerImpl(self.value ** n, exact=self.exact)

    def modulus(self, divisor: IntegerType | int) -> IntegerImpl:
        d = divisor.as_int() if isinstance(divisor, IntegerType) else int(divisor)
        return IntegerImpl(self.value % d)

    # Python protocol

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, IntegerType):
            return self.exact == other.is_exact() and self.value == other.as_int()
        if isinstance(other, int) and not isinstance(other, bool):
            return self.exact and self.value == other
        return False

    def __hash__(self) -> int:
        # exact values compare equal to plain ints, so they must hash like them
        return hash(self.value) if self.exact else hash((False, self.value))

    def __int__(self) -> int:
        return self.value

    def __index__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        suffix = "" if self.exact else ", exact=False"
        return f"IntegerImpl({self.value}{suffix})"
