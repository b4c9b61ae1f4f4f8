"""
Precision and rounding model for inexact arithmetic.

A MathContext pairs a precision (significant decimal digits, 0 meaning
unlimited) with a rounding policy. It is immutable and hashable, so it doubles
as the cache key for the per-precision constant singletons.
"""

from __future__ import annotations

import decimal
from decimal import Decimal
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import settings
from ..core.errors import NonTerminatingDecimalError, PrecisionError


class RoundingMode(str, Enum):
    """Rounding policies, valued by their decimal module names."""

    UP = decimal.ROUND_UP
    DOWN = decimal.ROUND_DOWN
    CEILING = decimal.ROUND_CEILING
    FLOOR = decimal.ROUND_FLOOR
    HALF_UP = decimal.ROUND_HALF_UP
    HALF_DOWN = decimal.ROUND_HALF_DOWN
    HALF_EVEN = decimal.ROUND_HALF_EVEN
    ZERO_FIVE_UP = decimal.ROUND_05UP


class DivisionByZeroPolicy(str, Enum):
    """What a division by an exact zero produces."""

    THROW = "throw"
    SIGNED_INFINITY = "signed_infinity"


def division_by_zero_policy() -> DivisionByZeroPolicy:
    """Current division-by-zero policy from settings."""
    return DivisionByZeroPolicy(settings.DIVISION_BY_ZERO_POLICY.lower())


class MathContext(BaseModel):
    """
    Precision/rounding pair governing all inexact arithmetic.

    Examples:
        >>> MathContext(10)
        >>> MathContext(50, RoundingMode.HALF_UP)
        >>> UNLIMITED
    """

    model_config = ConfigDict(frozen=True)

    precision: int = Field(default=34, ge=0, description="Significant digits, 0 for unlimited")
    rounding: RoundingMode = Field(default=RoundingMode.HALF_EVEN, description="Rounding policy")

    def __init__(self, precision: int = 34, rounding: RoundingMode | str = RoundingMode.HALF_EVEN, **kwargs):
        super().__init__(precision=precision, rounding=RoundingMode(rounding), **kwargs)

    @classmethod
    def default(cls) -> MathContext:
        """Context built from DEFAULT_PRECISION / DEFAULT_ROUNDING settings."""
        return cls(settings.DEFAULT_PRECISION, settings.DEFAULT_ROUNDING)

    @property
    def is_unlimited(self) -> bool:
        return self.precision == 0

    def with_guard_digits(self, digits: int) -> MathContext:
        """Same rounding, `digits` more precision (unlimited stays unlimited)."""
        if self.is_unlimited:
            return self
        return MathContext(self.precision + digits, self.rounding)

    def require_bounded(self, algorithm: str) -> None:
        """Fail fast for iterative algorithms that cannot stop at unlimited precision."""
        if self.is_unlimited:
            raise PrecisionError(algorithm)

    def decimal_context(self) -> decimal.Context:
        """A fresh decimal.Context with clean flags for one computation."""
        return decimal.Context(
            prec=self.precision if self.precision > 0 else decimal.MAX_PREC,
            rounding=self.rounding.value,
            Emax=decimal.MAX_EMAX,
            Emin=decimal.MIN_EMIN,
            traps=[decimal.InvalidOperation, decimal.DivisionByZero, decimal.Overflow],
        )

    def round(self, value: Decimal) -> Decimal:
        """Round `value` to this context's precision."""
        if self.is_unlimited:
            return value
        return self.decimal_context().plus(value)

    def __str__(self) -> str:
        return f"precision={self.precision} rounding={self.rounding.name}"


UNLIMITED = MathContext(0, RoundingMode.HALF_UP)
DECIMAL32 = MathContext(7, RoundingMode.HALF_EVEN)
DECIMAL64 = MathContext(16, RoundingMode.HALF_EVEN)
DECIMAL128 = MathContext(34, RoundingMode.HALF_EVEN)


def compute(mctx: MathContext, operation: Callable[[decimal.Context], Decimal]) -> tuple[Decimal, bool]:
    """
    Run a decimal operation under `mctx`.

    Args:
        mctx: Context supplying precision and rounding
        operation: Callable receiving the decimal.Context, e.g. ``lambda c: c.add(a, b)``

    Returns:
        (result, rounded) where rounded is True if any digits were discarded

    Example:
        compute(MathContext(5), lambda c: c.multiply(a, b))
    """
    ctx = mctx.decimal_context()
    result = operation(ctx)
    return result, bool(ctx.flags[decimal.Inexact])


def divide(dividend: Decimal, divisor: Decimal, mctx: MathContext) -> tuple[Decimal, bool]:
    """
    Divide under `mctx`.

    Under an unlimited context the quotient must terminate; otherwise
    NonTerminatingDecimalError is raised instead of attempting an infinite
    expansion.
    """
    if mctx.is_unlimited:
        return exact_quotient(dividend, divisor), False
    return compute(mctx, lambda c: c.divide(dividend, divisor))


def exact_quotient(dividend: Decimal, divisor: Decimal) -> Decimal:
    """Exact decimal quotient, or NonTerminatingDecimalError."""
    num_n, num_d = dividend.as_integer_ratio()
    div_n, div_d = divisor.as_integer_ratio()
    if div_n == 0:
        raise decimal.DivisionByZero("division by zero")
    return terminating_decimal(num_n * div_d, num_d * div_n)


def terminating_decimal(numerator: int, denominator: int) -> Decimal:
    """Exact decimal for numerator/denominator, which must have only 2 and 5 in its reduced denominator."""
    from math import gcd

    if denominator < 0:
        numerator, denominator = -numerator, -denominator
    g = gcd(numerator, denominator)
    num, den = numerator // g, denominator // g

    twos = fives = 0
    rest = den
    while rest % 2 == 0:
        rest //= 2
        twos += 1
    while rest % 5 == 0:
        rest //= 5
        fives += 1
    if rest != 1:
        raise NonTerminatingDecimalError(numerator, denominator)

    scale = max(twos, fives)
    return Decimal(num * (10 ** scale // den)).scaleb(-scale, UNLIMITED.decimal_context())


def is_integral(value: Decimal) -> bool:
    """True if `value` has no nonzero fractional digits."""
    return value == value.to_integral_value()


def strip_trailing_zeros(value: Decimal) -> Decimal:
    """Most compact representation of `value` (``0`` for any zero)."""
    if value.is_zero():
        return Decimal(0)
    ctx = decimal.Context(prec=max(len(value.as_tuple().digits), 1), Emax=decimal.MAX_EMAX, Emin=decimal.MIN_EMIN)
    return value.normalize(ctx)


def fractional_digits(value: Decimal) -> int:
    """Number of digits after the decimal point (never negative)."""
    return max(-value.as_tuple().exponent, 0)


def integer_digits(value: Decimal) -> int:
    """Digit count of the integer part of |value| (0 when |value| < 1)."""
    integral = abs(int(value))
    return len(str(integral)) if integral else 0


def terminates(numerator: int, denominator: int) -> bool:
    """True if numerator/denominator has a finite decimal expansion."""
    from math import gcd

    den = abs(denominator) // gcd(numerator, denominator)
    for prime in (2, 5):
        while den % prime == 0:
            den //= prime
    return den == 1


def infer_math_context(*values) -> MathContext:
    """
    Context for combining values: the smallest bounded precision among them.

    Rounding comes from the first bounded context. If every value is
    unlimited, the result is unlimited.
    """
    bounded = [v.math_context for v in values if not v.math_context.is_unlimited]
    if not bounded:
        return UNLIMITED
    precision = min(ctx.precision for ctx in bounded)
    if bounded[0].precision == precision:
        return bounded[0]
    return MathContext(precision, bounded[0].rounding)
