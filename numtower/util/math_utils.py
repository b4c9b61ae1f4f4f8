"""
Iterative and transcendental engines shared across the numeric tower.

Factorials, integer and generalized exponentiation, nth roots, roots of
unity, natural and general logarithms, multiplicative order, and
scientific-notation rendering.
"""

from __future__ import annotations

import threading
from decimal import Decimal
from math import gcd
from typing import Any, Dict, List, Optional

from ..core.errors import NotCoprimeError, UnsupportedOperationError
from ..core.logging import get_logger
from ..numerics.complex import ComplexPolarImpl, as_real
from ..numerics.context import UNLIMITED, MathContext, compute, infer_math_context, strip_trailing_zeros
from ..numerics.integer import IntegerImpl
from ..numerics.rational import RationalImpl
from ..numerics.real import RealImpl
from ..numerics.value import (
    ComplexType,
    IntegerType,
    Numeric,
    NumericHierarchy,
    RationalType,
    RealType,
    Sign,
    kind_of,
)
from .text_effects import numeric_superscript

logger = get_logger(__name__)

__all__ = [
    "factorial",
    "compute_integer_exponent",
    "generalized_exponent",
    "nth_root",
    "roots_of_unity",
    "multiplicative_order",
    "infer_math_context",
    "ln",
    "log",
    "mantissa",
    "exponent",
    "in_scientific_notation",
]

# Extra digits carried by ln() before rounding back to the caller's context
LN_GUARD_DIGITS = 4

# Thin space, multiplication sign, thin space
TIMES_TEN = "\u2009\u00d7\u200910"

_factorial_cache: Dict[int, int] = {0: 1, 1: 1}
_factorial_lock = threading.Lock()


def _as_int(n: IntegerType | int) -> int:
    return n.as_int() if isinstance(n, IntegerType) else int(n)


def _bounded_context(value: Numeric, mctx: Optional[MathContext], algorithm: str) -> MathContext:
    """
    Context for an iterative algorithm on `value`.

    An explicit context must be bounded. Otherwise the value's own context
    is used, falling back to the default when the value is unlimited (as
    integers always are).
    """
    if mctx is None:
        mctx = value.math_context
        if mctx.is_unlimited:
            mctx = MathContext.default()
    mctx.require_bounded(algorithm)
    return mctx


def _real_of(value: Numeric) -> RealType:
    if isinstance(value, RealType):
        return value
    return Numeric.from_python(value).coerce_to(NumericHierarchy.REAL)


def _normalize(value: Any) -> Numeric:
    """Convert Python numbers and kind-less singletons (Zero, One) to a concrete kind."""
    value = Numeric.from_python(value)
    if isinstance(value, (IntegerType, RationalType, RealType, ComplexType)):
        return value
    kind = kind_of(value)
    if kind is None:
        return value
    return value.coerce_to(kind)


def factorial(n: IntegerType | int) -> IntegerImpl:
    """
    n! for a non-negative integer.

    Results are cached; a new request extends from the largest cached
    argument below it.
    """
    n = _as_int(n)
    if n < 0:
        raise ValueError(f"Factorial is undefined for negative values, got {n}")

    with _factorial_lock:
        cached = _factorial_cache.get(n)
        if cached is None:
            start = max(k for k in _factorial_cache if k < n)
            cached = _factorial_cache[start]
            for k in range(start + 1, n + 1):
                cached *= k
                _factorial_cache[k] = cached
    return IntegerImpl(cached)


def compute_integer_exponent(x: Any, n: IntegerType | int, mctx: Optional[MathContext] = None) -> Numeric:
    """
    Raise `x` to an integer power.

    Args:
        x: Integer, rational, real or complex base
        n: The exponent; negative exponents invert the result
        mctx: Context for real results (default: the base's context)

    Returns:
        x ** n, with 1 for any base when n is 0
    """
    x = _normalize(x)
    n = _as_int(n)
    if n == 0:
        return IntegerImpl(1)

    if n < 0 and isinstance(x, (IntegerType, RationalType, RealType)) and x.sign() == Sign.ZERO:
        from ..numerics.constants import divide_by_zero
        return divide_by_zero(IntegerImpl(1))

    if isinstance(x, IntegerType):
        return IntegerImpl(x.as_int(), exact=x.is_exact()).pow(n)
    elif isinstance(x, RationalType):
        powered = RationalImpl(
            x.numerator().as_int() ** abs(n),
            x.denominator().as_int() ** abs(n),
            exact=x.is_exact(),
            mctx=mctx or x.math_context,
        )
        return powered.inverse() if n < 0 else powered
    elif isinstance(x, RealType):
        mctx = mctx or x.math_context
        base = x.as_decimal()
        value, rounded = compute(mctx, lambda c: c.power(base, abs(n)))
        powered = RealImpl(
            value,
            exact=x.is_exact() and not rounded,
            irrational=x.is_irrational(),
            mctx=mctx,
        )
        return powered.inverse() if n < 0 else powered
    elif isinstance(x, ComplexType):
        # square-and-multiply
        result = None
        square = x
        k = abs(n)
        while k:
            if k & 1:
                result = square if result is None else result.multiply(square)
            k >>= 1
            if k:
                square = square.multiply(square)
        return result.inverse() if n < 0 else result
    raise UnsupportedOperationError("exponent", x, IntegerImpl(n))


def generalized_exponent(base: Any, exponent: Any, mctx: Optional[MathContext] = None) -> Numeric:
    """
    Raise `base` to an integer, rational or real power.

    Integer exponents use repeated multiplication. A rational exponent p/q
    takes the qth root of base^p. A non-integral real exponent is evaluated
    as exp(exponent * ln(base)). Negative real bases with non-integral
    exponents give the principal complex value.

    Raises:
        UnsupportedOperationError: For complex exponents or values outside
            the tower
    """
    base, exponent = _normalize(base), _normalize(exponent)

    if isinstance(exponent, IntegerType):
        return compute_integer_exponent(base, exponent, mctx)
    if isinstance(exponent, (RationalType, RealType)) and exponent.sign() == Sign.ZERO:
        return IntegerImpl(1)

    if isinstance(exponent, RationalType):
        reduced = exponent.reduce()
        p, q = reduced.numerator().as_int(), reduced.denominator().as_int()
        if q == 1:
            return compute_integer_exponent(base, p, mctx)
        if isinstance(base, ComplexType):
            return compute_integer_exponent(base.nth_roots(q)[0], p, mctx)
        powered = compute_integer_exponent(base, p, mctx)
        if powered.sign() == Sign.NEGATIVE and q % 2 == 0:
            return powered.coerce_to(NumericHierarchy.COMPLEX).nth_roots(q)[0]
        return nth_root(powered, q, mctx)

    if isinstance(exponent, RealType):
        value = exponent.as_decimal()
        if value == value.to_integral_value():
            return compute_integer_exponent(base, int(value), mctx)
        if isinstance(base, ComplexType):
            work = _bounded_context(base, mctx, "Complex exponentiation")
            modulus = _exp_ln(as_real(base.magnitude(), work), exponent, work)
            angle = as_real(base.argument().multiply(exponent), work)
            return ComplexPolarImpl(modulus, angle, mctx=work)

        real = _real_of(base)
        work = _bounded_context(real, mctx, "Real exponentiation")
        if real.sign() == Sign.ZERO:
            return IntegerImpl(0)
        if real.sign() == Sign.POSITIVE:
            return _exp_ln(real, exponent, work)

        from ..numerics.constants import Pi

        modulus = _exp_ln(real.magnitude(), exponent, work)
        angle = as_real(Pi.get_instance(work).as_real().multiply(exponent), work)
        return ComplexPolarImpl(modulus, angle, mctx=work)

    raise UnsupportedOperationError("exponent", base, exponent)


def _exp_ln(base: RealType, exponent: RealType, mctx: MathContext) -> RealImpl:
    """exp(exponent * ln(base)) for a positive real base."""
    from ..numerics.constants import Euler

    work = mctx.with_guard_digits(LN_GUARD_DIGITS)
    product = ln(base, work).multiply(as_real(exponent, work))
    result = Euler.get_instance(work).exp(product)
    return RealImpl(mctx.round(result.as_decimal()), exact=False, irrational=True, mctx=mctx)


def nth_root(a: Any, n: IntegerType | int, mctx: Optional[MathContext] = None) -> RealImpl:
    """
    Principal real nth root by Newton's method.

    The iteration starts above the root and stops once an iterate no longer
    decreases. The result is exact only if raising it back to the nth power
    reproduces `a` exactly; otherwise it is flagged irrational.

    Raises:
        ValueError: If n is not positive
        ArithmeticError: For an even root of a negative value
        PrecisionError: If `mctx` is unlimited
    """
    degree = _as_int(n)
    if degree < 1:
        raise ValueError(f"Root degree must be positive, got {degree}")
    real = _real_of(a)
    mctx = _bounded_context(real, mctx, "Nth root")

    value = real.as_decimal()
    if degree == 1:
        return as_real(real, mctx)
    if value.is_zero():
        return RealImpl(Decimal(0), exact=real.is_exact(), mctx=mctx)
    if value < 0:
        if degree % 2 == 0:
            raise ArithmeticError(f"Even root of a negative value ({degree}th root of {real})")
        return nth_root(real.magnitude(), degree, mctx).negate()

    ctx = mctx.with_guard_digits(2).decimal_context()
    # 10^ceil((adjusted + 1) / n) bounds the root from above
    current = Decimal(1).scaleb(-(-(value.adjusted() + 1) // degree), ctx)
    iterations = 0
    while True:
        correction = ctx.divide(value, ctx.power(current, degree - 1))
        nxt = ctx.divide(ctx.add(ctx.multiply(degree - 1, current), correction), degree)
        iterations += 1
        if nxt >= current:
            break
        current = nxt
    logger.debug(f"Root of degree {degree} converged after {iterations} iterations")

    root = strip_trailing_zeros(mctx.round(current))
    if real.is_exact() and UNLIMITED.decimal_context().power(root, degree) == value:
        return RealImpl(root, exact=True, mctx=mctx)
    return RealImpl(root, exact=False, irrational=True, mctx=mctx)


def roots_of_unity(n: IntegerType | int, mctx: Optional[MathContext] = None) -> List[ComplexPolarImpl]:
    """
    The n nth roots of unity, e^(2 pi i k / n) for k = 0..n-1, in polar form.

    The k = 0 root has an exact argument of 0.
    """
    from ..numerics.constants import Pi

    degree = _as_int(n)
    if degree < 1:
        raise ValueError(f"Root degree must be positive, got {degree}")
    mctx = mctx or MathContext.default()

    one = RealImpl(Decimal(1), mctx=mctx)
    pi = Pi.get_instance(mctx).as_real()
    roots = [ComplexPolarImpl(one, RealImpl(Decimal(0), mctx=mctx), mctx=mctx)]
    for k in range(1, degree):
        angle = pi.multiply(RealImpl(Decimal(2 * k), mctx=mctx)).divide(RealImpl(Decimal(degree), mctx=mctx))
        roots.append(ComplexPolarImpl(one, as_real(angle, mctx), mctx=mctx))
    return roots


def multiplicative_order(base: IntegerType | int, modulus: IntegerType | int) -> int:
    """
    Smallest e > 0 with base^e = 1 (mod modulus).

    Raises:
        NotCoprimeError: If base and modulus share a factor, since no such e exists
    """
    base, modulus = _as_int(base), _as_int(modulus)
    if modulus < 1:
        raise ValueError(f"Modulus must be positive, got {modulus}")
    divisor = gcd(base, modulus)
    if divisor != 1:
        raise NotCoprimeError(base, modulus, divisor)
    if modulus == 1:
        return 1

    order = 1
    power = base % modulus
    while power != 1:
        power = power * base % modulus
        order += 1
    return order


def ln(x: Any, mctx: Optional[MathContext] = None) -> Numeric:
    """
    Natural logarithm of a non-negative real value.

    Values up to 1/2 use ln(x) = -ln(1/x). Values in (1/2, 2) use Newton's
    method on exp(y) = x, with extra digits as x approaches 1 so the small
    result keeps its full precision. Values up to 10 sum the series
    sum((1/n) * ((x - 1) / x)^n), and larger values split off their power
    of ten.

    Args:
        x: Value whose logarithm is taken
        mctx: Result context (default: the value's own, or the default
            context for unlimited values)

    Returns:
        An irrational RealImpl, exact 0 for ln(1), or NegInfinity for ln(0)

    Raises:
        ArithmeticError: For negative values
    """
    from ..numerics.constants import NegInfinity

    real = _real_of(x)
    mctx = _bounded_context(real, mctx, "Natural logarithm")
    value = real.as_decimal()

    if value == 1:
        return RealImpl(Decimal(0), exact=real.is_exact(), mctx=mctx)
    if value.is_zero():
        return NegInfinity.get_instance(mctx)
    if value < 0:
        raise ArithmeticError(f"Natural logarithm is undefined for negative values ({real})")

    result = _ln(value, mctx.with_guard_digits(LN_GUARD_DIGITS))
    return RealImpl(mctx.round(result), exact=False, irrational=True, mctx=mctx)


def _ln(value: Decimal, work: MathContext) -> Decimal:
    ctx = work.decimal_context()
    if value <= Decimal("0.5"):
        return ctx.minus(_ln(ctx.divide(1, value), work))
    if value > 10:
        power = value.adjusted()
        scaled = value.scaleb(-power, UNLIMITED.decimal_context())
        return ctx.add(_ln(scaled, work), ctx.multiply(power, _ln(Decimal(10), work)))
    if value < 2:
        return _ln_newton(value, work)
    return _ln_series(value, work)


def _ln_newton(value: Decimal, work: MathContext) -> Decimal:
    from ..numerics.constants import Euler

    distance = work.decimal_context().subtract(value, 1)
    if not distance.is_zero() and distance.adjusted() < 0:
        # ln(x) is about as small as x - 1, so carry that many more digits
        work = work.with_guard_digits(-distance.adjusted())
    euler = Euler.get_instance(work)
    ctx = work.decimal_context()
    current = ctx.subtract(value, 1)
    seen = {current}
    while True:
        power = euler.exp(RealImpl(current, exact=False, mctx=work)).as_decimal()
        step = ctx.divide(ctx.multiply(2, ctx.subtract(value, power)), ctx.add(value, power))
        nxt = ctx.add(current, step)
        if nxt == current:
            return nxt
        if nxt in seen:
            # rounding noise in the last digits keeps the iteration cycling
            logger.debug(f"Logarithm of {value} cycling at precision {work.precision}")
            return nxt
        seen.add(nxt)
        current = nxt


def _ln_series(value: Decimal, work: MathContext) -> Decimal:
    ctx = work.decimal_context()
    ratio = ctx.divide(ctx.subtract(value, 1), value)
    power = ratio
    total = Decimal(0)
    n = 1
    while True:
        updated = ctx.add(total, ctx.divide(power, n))
        if updated == total:
            return total
        total = updated
        power = ctx.multiply(power, ratio)
        n += 1


def log(x: Any, base: Any = 10, mctx: Optional[MathContext] = None) -> Numeric:
    """Logarithm of `x` in an arbitrary base (10 by default)."""
    real = _real_of(x)
    mctx = _bounded_context(real, mctx, "Logarithm")
    return ln(real, mctx).divide(ln(base, mctx))


def exponent(x: Any) -> int:
    """Power of ten of the leading digit of `x` (e.g. 2 for 345.6)."""
    value = _real_of(x).as_decimal()
    if value.is_zero():
        return 0
    return value.adjusted()


def mantissa(x: Any) -> RealImpl:
    """`x` scaled by a power of ten into [1, 10) (keeping its sign)."""
    real = _real_of(x)
    value = real.as_decimal().scaleb(-exponent(real), UNLIMITED.decimal_context())
    return RealImpl(
        strip_trailing_zeros(value),
        exact=real.is_exact(),
        irrational=real.is_irrational(),
        mctx=real.math_context,
    )


def in_scientific_notation(value: Any) -> str:
    """
    Render an integer, rational or real value as "d.ddd × 10ⁿ".

    Integers keep every digit; other values use their decimal expansion.

    Examples:
        >>> in_scientific_notation(IntegerImpl(12345))
        '1.2345 × 10⁴'
    """
    value = _normalize(value)
    if isinstance(value, IntegerType):
        digits = str(abs(value.as_int()))
        sign = "-" if value.sign() == Sign.NEGATIVE else ""
        leading = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        return f"{sign}{leading}{TIMES_TEN}{numeric_superscript(len(digits) - 1)}"

    if not isinstance(value, (RationalType, RealType)):
        raise UnsupportedOperationError("scientific notation", value, value)

    decimal_value = value.as_decimal()
    if decimal_value == decimal_value.to_integral_value():
        return in_scientific_notation(IntegerImpl(int(decimal_value)))
    scaled = mantissa(RealImpl(decimal_value))
    return f"{scaled}{TIMES_TEN}{numeric_superscript(exponent(RealImpl(decimal_value)))}"
