"""
Real values backed by a high-precision Decimal.

A RealImpl tracks whether it is exact (no rounding happened) and whether it
is known to be irrational; the two are mutually exclusive. All rounding is
governed by the value's MathContext.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.errors import CoercionError
from ..core.logging import get_logger
from .context import (
    UNLIMITED,
    MathContext,
    compute,
    divide,
    infer_math_context,
    is_integral,
    strip_trailing_zeros,
    terminates,
    terminating_decimal,
)
from .dispatch import dispatch_binary
from .integer import IntegerImpl
from .rational import RationalImpl
from .value import (
    ComplexType,
    IntegerType,
    Numeric,
    NumericHierarchy,
    PrecisionAware,
    RationalType,
    RealType,
    Sign,
)

logger = get_logger(__name__)


class RealImpl(BaseModel, RealType, PrecisionAware):
    """
    Real number with explicit exactness and irrationality tracking.

    Examples:
        >>> RealImpl("3.14159")
        >>> RealImpl(Decimal("2"), mctx=MathContext(50))
        >>> RealImpl("1.4142135", exact=False, irrational=True)
    """

    model_config = ConfigDict(frozen=True)

    value: Decimal = Field(description="The decimal value")
    exact: bool = Field(default=True, description="False if rounding occurred")
    irrational: bool = Field(default=False, description="True if known to be irrational")
    mctx: MathContext = Field(default_factory=MathContext.default, description="Precision and rounding")

    def __init__(
        self,
        value: Decimal | str | int,
        exact: bool = True,
        irrational: bool = False,
        mctx: Optional[MathContext] = None,
        **kwargs,
    ):
        if isinstance(value, str):
            try:
                value = Decimal(value.strip())
            except decimal.InvalidOperation as e:
                raise ValueError(f"Invalid decimal literal: {value!r}") from e
        elif isinstance(value, int):
            value = Decimal(value)
        if mctx is not None:
            kwargs["mctx"] = mctx
        super().__init__(value=value, exact=exact, irrational=irrational, **kwargs)

    @model_validator(mode="after")
    def check_irrational_exactness(self) -> RealImpl:
        if self.irrational and self.exact:
            raise ValueError("There cannot be an exact representation of an irrational number")
        return self

    @classmethod
    def from_rational(cls, rational: RationalType, mctx: Optional[MathContext] = None) -> RealImpl:
        """
        Convert a rational to a real.

        The result is exact when the rational is exact and its decimal
        expansion terminates within the context's precision.
        """
        mctx = mctx or rational.math_context
        num, den = rational.numerator().as_int(), rational.denominator().as_int()
        if terminates(num, den):
            expansion = terminating_decimal(num, den)
            if mctx.is_unlimited:
                value, rounded = expansion, False
            else:
                value, rounded = compute(mctx, lambda c: c.plus(expansion))
        else:
            # raises NonTerminatingDecimalError under an unlimited context
            value, rounded = divide(Decimal(num), Decimal(den), mctx)
        return cls(value, exact=rational.is_exact() and not rounded, mctx=mctx)

    # Contract

    def is_exact(self) -> bool:
        return self.exact

    @property
    def math_context(self) -> MathContext:
        return self.mctx

    def with_math_context(self, mctx: MathContext) -> RealImpl:
        return self.model_copy(update={"mctx": mctx})

    def as_decimal(self) -> Decimal:
        return self.value

    def is_irrational(self) -> bool:
        return self.irrational

    def sign(self) -> Sign:
        return Sign.from_value(self.value)

    def is_integral_value(self) -> bool:
        return is_integral(self.value)

    def is_coercible_to(self, numtype: Any) -> bool:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind in (NumericHierarchy.REAL, NumericHierarchy.COMPLEX):
            return True
        if kind == NumericHierarchy.INTEGER:
            return self.is_integral_value()
        if kind == NumericHierarchy.RATIONAL:
            return not self.irrational
        return False

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.REAL:
            return self
        elif kind == NumericHierarchy.COMPLEX:
            return ComplexRectImpl(self, RealImpl(Decimal(0), mctx=self.mctx), mctx=self.mctx)
        elif kind == NumericHierarchy.RATIONAL and not self.irrational:
            return self.rationalize()
        elif kind == NumericHierarchy.INTEGER and self.is_integral_value():
            return IntegerImpl(int(self.value), exact=self.exact)
        raise CoercionError("Failed to coerce real value", self, numtype)

    def rationalize(self) -> RationalImpl:
        """Exact rational equal to this decimal, in lowest terms."""
        num, den = self.value.as_integer_ratio()
        return RationalImpl(num, den, exact=self.exact, mctx=self.mctx)

    def magnitude(self) -> RealImpl:
        return self._derive(self.value.copy_abs(), self.exact, self.irrational)

    def negate(self) -> RealImpl:
        return self._derive(self.value.copy_negate(), self.exact, self.irrational)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, RealType):
            return self._combine(addend, lambda c: c.add(self.value, addend.as_decimal()))
        return dispatch_binary(self, addend, "add")

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, RealType):
            return self._combine(subtrahend, lambda c: c.subtract(self.value, subtrahend.as_decimal()))
        return dispatch_binary(self, subtrahend, "subtract")

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, RealType):
            return self._combine(multiplier, lambda c: c.multiply(self.value, multiplier.as_decimal()))
        elif isinstance(multiplier, IntegerType) and self.is_integral_value():
            return IntegerImpl(int(self.value) * multiplier.as_int(), exact=self.exact and multiplier.is_exact())
        return dispatch_binary(self, multiplier, "multiply")

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, (RealType, RationalType, IntegerType)) and divisor.sign() == Sign.ZERO:
            from .constants import divide_by_zero
            return divide_by_zero(self)
        if isinstance(divisor, RealType):
            mctx = infer_math_context(self, divisor)
            value, rounded = divide(self.value, divisor.as_decimal(), mctx)
            return RealImpl(
                value,
                exact=self.exact and divisor.is_exact() and not rounded,
                irrational=self.irrational or divisor.is_irrational(),
                mctx=mctx,
            )
        elif isinstance(divisor, IntegerType) and self.is_integral_value():
            return RationalImpl(
                int(self.value), divisor.as_int(), exact=self.exact and divisor.is_exact(), mctx=self.mctx
            )
        return dispatch_binary(self, divisor, "divide")

    def inverse(self) -> Numeric:
        if self.value.is_zero():
            from .constants import divide_by_zero
            return divide_by_zero(IntegerImpl(1))
        if self.exact and self.is_integral_value():
            return RationalImpl(1, int(self.value), exact=True, mctx=self.mctx)

        value, rounded = divide(Decimal(1), self.value, self.mctx)
        exact = self.exact and not rounded
        return RealImpl(value, exact=exact, irrational=self.irrational and not exact, mctx=self.mctx)

    def sqrt(self) -> Numeric:
        """
        Principal square root.

        Perfect squares delegate to the exact integer square root, negative
        values are promoted to Complex, and anything else runs Heron's method
        at this value's precision. A result whose square does not reproduce
        this value exactly is flagged irrational.

        Raises:
            PrecisionError: If an iterative root is needed under an unlimited context
        """
        if self.is_integral_value() and self.sign() != Sign.NEGATIVE:
            int_value = IntegerImpl(int(self.value), exact=self.exact)
            if int_value.is_perfect_square():
                return int_value.sqrt()
        if self.sign() == Sign.NEGATIVE:
            return self.coerce_to(NumericHierarchy.COMPLEX).sqrt()

        self.mctx.require_bounded("Square root")
        ctx = self.mctx.decimal_context()
        two = Decimal(2)
        current = ctx.divide(self.value, two) if self.value > 1 else Decimal(1)
        previous = None
        while True:
            nxt = ctx.divide(ctx.add(current, ctx.divide(self.value, current)), two)
            if nxt == current:
                break
            if nxt == previous:
                logger.debug(f"Square root of {self} alternating at precision {self.mctx.precision}")
                nxt = min(nxt, current)
                break
            previous, current = current, nxt

        root = strip_trailing_zeros(nxt)
        squares_back = UNLIMITED.decimal_context().multiply(root, root) == self.value
        if squares_back:
            return RealImpl(root, exact=self.exact, mctx=self.mctx)
        return RealImpl(root, exact=False, irrational=True, mctx=self.mctx)

    def nth_roots(self, n: IntegerType | int) -> list[ComplexType]:
        """All n complex nth roots, via the polar form with argument 0 or pi."""
        from .complex import ComplexPolarImpl
        from .constants import Pi

        if self.sign() == Sign.NEGATIVE:
            angle = Pi.get_instance(self.mctx).as_real()
        else:
            angle = RealImpl(Decimal(0), mctx=self.mctx)
        return ComplexPolarImpl(self.magnitude(), angle, mctx=self.mctx).nth_roots(n)

    def ln(self) -> RealImpl:
        """Natural logarithm under this value's context."""
        from ..util.math_utils import ln

        return ln(self, self.mctx)

    def _combine(self, other: RealType, operation) -> RealImpl:
        mctx = infer_math_context(self, other)
        value, rounded = compute(mctx, operation)
        return RealImpl(
            value,
            exact=self.exact and other.is_exact() and not rounded,
            irrational=self.irrational or other.is_irrational(),
            mctx=mctx,
        )

    def _derive(self, value: Decimal, exact: bool, irrational: bool) -> RealImpl:
        return RealImpl(value, exact=exact, irrational=irrational, mctx=self.mctx)

    # Python protocol

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, RealType):
            return self.exact == other.is_exact() and self.value == other.as_decimal()
        return False

    def __hash__(self) -> int:
        return hash((self.exact, self.value))

    def __float__(self) -> float:
        return float(self.value)

    def __str__(self) -> str:
        return format(self.value, "f")

    def __repr__(self) -> str:
        flags = "" if self.exact else ", exact=False"
        if self.irrational:
            flags += ", irrational=True"
        return f"RealImpl('{self}'{flags})"
