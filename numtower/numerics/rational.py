"""
Rational values: a numerator/denominator pair of arbitrary-precision integers.

Construction normalizes the sign onto the numerator but never reduces;
callers reduce explicitly with reduce(). Equality is structural, so 2/4 and
1/2 are different values until both are reduced.
"""

from __future__ import annotations

from decimal import Decimal
from math import gcd
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.errors import CoercionError
from .context import MathContext, compute, terminating_decimal
from .dispatch import dispatch_binary
from .integer import IntegerImpl
from .value import IntegerType, Numeric, NumericHierarchy, PrecisionAware, RationalType, Sign


class RationalImpl(BaseModel, RationalType, PrecisionAware):
    """
    Fraction of two integers.

    Examples:
        >>> RationalImpl(3, 4)
        >>> RationalImpl("22/7")
        >>> RationalImpl(IntegerImpl(6), IntegerImpl(-4))  # -6/4, not reduced
    """

    model_config = ConfigDict(frozen=True)

    num: int = Field(description="Numerator, carrying the sign")
    den: int = Field(description="Denominator, always positive")
    exact: bool = Field(default=True, description="False if derived from an inexact computation")
    mctx: MathContext = Field(default_factory=MathContext.default, description="Context for decimal conversion")

    def __init__(
        self,
        numerator: int | str | IntegerType,
        denominator: int | IntegerType | None = None,
        exact: bool = True,
        mctx: Optional[MathContext] = None,
        **kwargs,
    ):
        if isinstance(numerator, str):
            text = numerator.strip()
            if "/" in text:
                num_text, den_text = text.split("/", 1)
                numerator, denominator = int(num_text), int(den_text)
            else:
                numerator = int(text)
        if isinstance(numerator, IntegerType):
            exact = exact and numerator.is_exact()
            numerator = numerator.as_int()
        if isinstance(denominator, IntegerType):
            exact = exact and denominator.is_exact()
            denominator = denominator.as_int()
        if denominator is None:
            denominator = 1

        if mctx is not None:
            kwargs["mctx"] = mctx
        super().__init__(num=numerator, den=denominator, exact=exact, **kwargs)

    @model_validator(mode="before")
    @classmethod
    def normalize_sign(cls, data: Any) -> Any:
        """By convention the denominator is positive."""
        if isinstance(data, dict):
            den = data.get("den")
            if den == 0:
                raise ValueError("Denominator must be non-zero")
            if den is not None and den < 0:
                data = {**data, "num": -data["num"], "den": -den}
        return data

    # Contract

    def is_exact(self) -> bool:
        return self.exact

    @property
    def math_context(self) -> MathContext:
        return self.mctx

    def with_math_context(self, mctx: MathContext) -> RationalImpl:
        return self.model_copy(update={"mctx": mctx})

    def numerator(self) -> IntegerImpl:
        return IntegerImpl(self.num)

    def denominator(self) -> IntegerImpl:
        return IntegerImpl(self.den)

    def sign(self) -> Sign:
        # the denominator is always positive, so the numerator carries the sign
        return Sign.from_value(self.num)

    def as_decimal(self) -> Decimal:
        """
        Decimal value under this rational's MathContext.

        Raises:
            NonTerminatingDecimalError: Under an unlimited context when the
                expansion does not terminate
        """
        if self.mctx.is_unlimited:
            return terminating_decimal(self.num, self.den)
        value, _ = compute(self.mctx, lambda c: c.divide(Decimal(self.num), Decimal(self.den)))
        return value

    def reduce(self) -> RationalImpl:
        divisor = gcd(self.num, self.den)
        if divisor == 1:
            # this fraction cannot be reduced any further
            return self
        return self._derive(self.num // divisor, self.den // divisor, self.exact)

    def is_coercible_to(self, numtype: Any) -> bool:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.INTEGER:
            return self.den == 1 or self.num == 0
        return kind is not None

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl
        from .real import RealImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.INTEGER:
            if self.den == 1 or self.num == 0:
                return IntegerImpl(self.num, exact=self.exact)
            raise CoercionError("Cannot convert fraction to integer", self, numtype)
        elif kind == NumericHierarchy.RATIONAL:
            return self
        elif kind == NumericHierarchy.REAL:
            return RealImpl.from_rational(self)
        elif kind == NumericHierarchy.COMPLEX:
            real = RealImpl.from_rational(self)
            return ComplexRectImpl(real, RealImpl(Decimal(0), mctx=self.mctx), mctx=self.mctx)
        raise CoercionError("Cannot convert rational to unknown type", self, numtype)

    def magnitude(self) -> RationalImpl:
        return self._derive(abs(self.num), self.den, self.exact).reduce()

    def negate(self) -> RationalImpl:
        return self._derive(-self.num, self.den, self.exact)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, RationalType):
            other_num, other_den = addend.numerator().as_int(), addend.denominator().as_int()
            return self._derive(
                self.num * other_den + other_num * self.den,
                self.den * other_den,
                self.exact and addend.is_exact(),
            ).reduce()
        elif isinstance(addend, IntegerType):
            return self._derive(
                self.num + self.den * addend.as_int(),
                self.den,
                self.exact and addend.is_exact(),
            )
        return dispatch_binary(self, addend, "add")

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, RationalType):
            other_num, other_den = subtrahend.numerator().as_int(), subtrahend.denominator().as_int()
            return self._derive(
                self.num * other_den - other_num * self.den,
                self.den * other_den,
                self.exact and subtrahend.is_exact(),
            ).reduce()
        elif isinstance(subtrahend, IntegerType):
            return self._derive(
                self.num - self.den * subtrahend.as_int(),
                self.den,
                self.exact and subtrahend.is_exact(),
            )
        return dispatch_binary(self, subtrahend, "subtract")

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, RationalType):
            return self._derive(
                self.num * multiplier.numerator().as_int(),
                self.den * multiplier.denominator().as_int(),
                self.exact and multiplier.is_exact(),
            ).reduce()
        elif isinstance(multiplier, IntegerType):
            return self._derive(
                self.num * multiplier.as_int(),
                self.den,
                self.exact and multiplier.is_exact(),
            ).reduce()
        return dispatch_binary(self, multiplier, "multiply")

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, (RationalType, IntegerType)) and divisor.sign() == Sign.ZERO:
            from .constants import divide_by_zero
            return divide_by_zero(self)
        if isinstance(divisor, (RationalType, IntegerType)):
            return self.multiply(divisor.inverse())
        return dispatch_binary(self, divisor, "divide")

    def inverse(self) -> Numeric:
        if self.num == 0:
            from .constants import divide_by_zero
            return divide_by_zero(IntegerImpl(1))
        if self.num == 1:
            return IntegerImpl(self.den, exact=self.exact)
        if self.num == -1:
            return IntegerImpl(-self.den, exact=self.exact)
        return self._derive(self.den, self.num, self.exact)

    def sqrt(self) -> Numeric:
        """
        Square root using sqrt(a/b) = sqrt(a)/sqrt(b) on the reduced fraction.

        Exact only if numerator and denominator are both perfect squares.
        Negative values are promoted to Complex.
        """
        if self.num < 0:
            return self.coerce_to(NumericHierarchy.COMPLEX).sqrt()
        reduced = self.reduce()
        num_root = reduced.numerator().sqrt()
        den_root = reduced.denominator().sqrt()
        return RationalImpl(num_root, den_root, exact=self.exact, mctx=self.mctx)

    def _derive(self, num: int, den: int, exact: bool) -> RationalImpl:
        """New rational of the same context as this one."""
        return RationalImpl(num, den, exact=exact, mctx=self.mctx)

    # Python protocol

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, RationalType):
            return (
                self.exact == other.is_exact()
                and self.num == other.numerator().as_int()
                and self.den == other.denominator().as_int()
            )
        return False

    def __hash__(self) -> int:
        return hash((self.exact, self.num, self.den))

    def __str__(self) -> str:
        return f"{self.num}/{self.den}"

    def __repr__(self) -> str:
        suffix = "" if self.exact else ", exact=False"
        return f"RationalImpl({self.num}, {self.den}{suffix})"

