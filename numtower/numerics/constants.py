"""
Singleton constants, one instance per MathContext.

Instances live in a ConstantRegistry rather than in class-level globals, so
tests can swap in an isolated registry with reset_registry(). Creation is a
locked check-then-create per constant class; the value is computed inside
the critical section so concurrent first requests compute it once.
"""

from __future__ import annotations

import threading
from abc import abstractmethod
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from ..core.errors import CoercionError, DivisionByZeroError
from ..core.logging import get_context_logger, get_logger
from .context import DivisionByZeroPolicy, MathContext, division_by_zero_policy
from .integer import IntegerImpl
from .rational import RationalImpl
from .real import RealImpl
from .value import ComplexType, IntegerType, Numeric, NumericHierarchy, PrecisionAware, RealType, Sign

logger = get_logger(__name__)


class ConstantRegistry:
    """
    Owner of all constant instances.

    Each constant class gets its own lock and its own map of
    MathContext -> instance. Instances are never evicted.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[type, threading.Lock] = {}
        self._instances: Dict[type, Dict[MathContext, Any]] = {}

    def _lock_for(self, cls: type) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(cls, threading.Lock())

    def get_or_create(self, cls: type, mctx: MathContext, factory: Callable[[MathContext], Any]) -> Any:
        """Return the instance of `cls` for `mctx`, creating it on first request."""
        with self._lock_for(cls):
            instances = self._instances.setdefault(cls, {})
            instance = instances.get(mctx)
            if instance is None:
                instance = factory(mctx)
                instances[mctx] = instance
                logger.debug(f"Created {cls.__name__} for {mctx}")
            return instance

    def instance_count(self, cls: Optional[type] = None) -> int:
        """Number of cached instances, for one class or overall."""
        with self._guard:
            if cls is not None:
                return len(self._instances.get(cls, {}))
            return sum(len(instances) for instances in self._instances.values())


_registry = ConstantRegistry()


def get_registry() -> ConstantRegistry:
    """The process-wide default registry."""
    return _registry


def reset_registry() -> ConstantRegistry:
    """Replace the default registry with an empty one and return it."""
    global _registry
    _registry = ConstantRegistry()
    return _registry


def _sign(value: Numeric) -> Optional[Sign]:
    sign_of = getattr(value, "sign", None)
    return sign_of() if sign_of is not None else None


def divide_by_zero(dividend: Numeric) -> Numeric:
    """
    Result of dividing `dividend` by an exact zero.

    0/0 always raises. Otherwise the configured DivisionByZeroPolicy decides
    between raising and returning an infinity signed like the dividend.

    Raises:
        DivisionByZeroError: Under the throw policy, for 0/0, or for a
            dividend without a sign (e.g. a complex value)
    """
    sign = _sign(dividend)
    if sign == Sign.ZERO:
        raise DivisionByZeroError("Indeterminate form 0/0")
    if sign is None or division_by_zero_policy() == DivisionByZeroPolicy.THROW:
        raise DivisionByZeroError()

    mctx = dividend.math_context
    if sign == Sign.POSITIVE:
        return PosInfinity.get_instance(mctx)
    return NegInfinity.get_instance(mctx)


class SingletonConstant(PrecisionAware):
    """
    Shared behavior for per-context singletons.

    Subclasses are created only through get_instance().
    """

    def __init__(self, mctx: MathContext):
        self._mctx = mctx

    @classmethod
    def get_instance(cls, mctx: MathContext | int | None = None, registry: Optional[ConstantRegistry] = None):
        """
        The instance of this constant for `mctx`.

        Args:
            mctx: MathContext or a precision in digits (default from settings)
            registry: Registry to use instead of the default one
        """
        if mctx is None:
            mctx = MathContext.default()
        elif isinstance(mctx, int):
            mctx = MathContext(mctx)
        return (registry or get_registry()).get_or_create(cls, mctx, cls)

    @property
    def math_context(self) -> MathContext:
        return self._mctx

    def with_math_context(self, mctx: MathContext) -> Numeric:
        return type(self).get_instance(mctx)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._mctx})"


class _Ordered:
    """Ordering operators for constants, in terms of compare_to()."""

    def __lt__(self, other: Any) -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: Any) -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: Any) -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: Any) -> bool:
        return self.compare_to(other) >= 0


class Zero(SingletonConstant, _Ordered, Numeric):
    """A universal representation of zero."""

    kind = NumericHierarchy.INTEGER

    def is_exact(self) -> bool:
        return True

    def sign(self) -> Sign:
        return Sign.ZERO

    def is_coercible_to(self, numtype: Any) -> bool:
        return NumericHierarchy.for_numeric_type(numtype) is not None

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.INTEGER:
            return IntegerImpl(0)
        elif kind == NumericHierarchy.RATIONAL:
            return RationalImpl(0, 1, mctx=self._mctx)
        elif kind == NumericHierarchy.REAL:
            return RealImpl(Decimal(0), mctx=self._mctx)
        elif kind == NumericHierarchy.COMPLEX:
            return ComplexRectImpl(RealImpl(Decimal(0), mctx=self._mctx), RealImpl(Decimal(0), mctx=self._mctx))
        raise CoercionError("Cannot coerce zero to expected type", self, numtype)

    def magnitude(self) -> Numeric:
        return Zero.get_instance(self._mctx)

    def negate(self) -> Numeric:
        return self

    def add(self, addend: Numeric) -> Numeric:
        return addend

    def subtract(self, subtrahend: Numeric) -> Numeric:
        return subtrahend.negate()

    def multiply(self, multiplier: Numeric) -> Numeric:
        return self

    def divide(self, divisor: Numeric) -> Numeric:
        if _sign(divisor) == Sign.ZERO:
            raise DivisionByZeroError("Indeterminate form 0/0")
        return self

    def inverse(self) -> Numeric:
        return divide_by_zero(One.get_instance(self._mctx))

    def sqrt(self) -> Numeric:
        return self

    def compare_to(self, other: Any) -> int:
        return IntegerImpl(0).compare_to(other)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, Zero)

    def __hash__(self) -> int:
        return hash(Zero)

    def __str__(self) -> str:
        return "0"


class NegZero(Zero):
    """Zero approached from below."""

    def negate(self) -> Numeric:
        return Zero.get_instance(self._mctx)

    def inverse(self) -> Numeric:
        return divide_by_zero(IntegerImpl(-1))

    def __str__(self) -> str:
        return "−0"


class One(SingletonConstant, _Ordered, Numeric):
    """A universal representation of unity."""

    kind = NumericHierarchy.INTEGER

    def is_exact(self) -> bool:
        return True

    def sign(self) -> Sign:
        return Sign.POSITIVE

    def is_coercible_to(self, numtype: Any) -> bool:
        return NumericHierarchy.for_numeric_type(numtype) is not None

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.INTEGER:
            return IntegerImpl(1)
        elif kind == NumericHierarchy.RATIONAL:
            return RationalImpl(1, 1, mctx=self._mctx)
        elif kind == NumericHierarchy.REAL:
            return RealImpl(Decimal(1), mctx=self._mctx)
        elif kind == NumericHierarchy.COMPLEX:
            return ComplexRectImpl(RealImpl(Decimal(1), mctx=self._mctx), RealImpl(Decimal(0), mctx=self._mctx))
        raise CoercionError("Cannot coerce unity to expected type", self, numtype)

    def magnitude(self) -> Numeric:
        return self

    def negate(self) -> Numeric:
        return IntegerImpl(-1)

    def add(self, addend: Numeric) -> Numeric:
        return IntegerImpl(1).add(addend)

    def subtract(self, subtrahend: Numeric) -> Numeric:
        return IntegerImpl(1).subtract(subtrahend)

    def multiply(self, multiplier: Numeric) -> Numeric:
        return multiplier

    def divide(self, divisor: Numeric) -> Numeric:
        return divisor.inverse()

    def inverse(self) -> Numeric:
        return self

    def sqrt(self) -> Numeric:
        return self

    def compare_to(self, other: Any) -> int:
        return IntegerImpl(1).compare_to(other)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, One)

    def __hash__(self) -> int:
        return hash(One)

    def __str__(self) -> str:
        return "1"


class _Infinity(SingletonConstant, _Ordered, Numeric):
    """Shared parts of the signed infinities, which sit outside the tower."""

    def is_exact(self) -> bool:
        return False

    def is_coercible_to(self, numtype: Any) -> bool:
        return False

    def coerce_to(self, numtype: Any) -> Numeric:
        raise CoercionError("Can't coerce infinity to any other Numeric type", self, numtype)

    def sqrt(self) -> Numeric:
        return self

    def __eq__(self, other: Any) -> bool:
        return type(other) is type(self)

    def __hash__(self) -> int:
        return hash(type(self))


class PosInfinity(_Infinity):
    """Positive infinity."""

    def sign(self) -> Sign:
        return Sign.POSITIVE

    def magnitude(self) -> Numeric:
        return self

    def negate(self) -> Numeric:
        return NegInfinity.get_instance(self._mctx)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, NegInfinity):
            return Zero.get_instance(self._mctx)
        return self

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, PosInfinity):
            return Zero.get_instance(self._mctx)
        return self

    def multiply(self, multiplier: Numeric) -> Numeric:
        if _sign(multiplier) == Sign.NEGATIVE:
            return NegInfinity.get_instance(self._mctx)
        return self

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, NegInfinity):
            return NegZero.get_instance(self._mctx)
        if isinstance(divisor, PosInfinity):
            return Zero.get_instance(self._mctx)
        if _sign(divisor) == Sign.NEGATIVE:
            return NegInfinity.get_instance(self._mctx)
        return self

    def inverse(self) -> Numeric:
        return Zero.get_instance(self._mctx)

    def compare_to(self, other: Any) -> int:
        # positive infinity is greater than any other value
        return 0 if isinstance(other, PosInfinity) else 1

    def __str__(self) -> str:
        return "∞"


class NegInfinity(_Infinity):
    """Negative infinity."""

    def sign(self) -> Sign:
        return Sign.NEGATIVE

    def magnitude(self) -> Numeric:
        return PosInfinity.get_instance(self._mctx)

    def negate(self) -> Numeric:
        return PosInfinity.get_instance(self._mctx)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, PosInfinity):
            return Zero.get_instance(self._mctx)
        return self

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, NegInfinity):
            return Zero.get_instance(self._mctx)
        return self

    def multiply(self, multiplier: Numeric) -> Numeric:
        if _sign(multiplier) == Sign.NEGATIVE:
            return PosInfinity.get_instance(self._mctx)
        return self

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, PosInfinity):
            return NegZero.get_instance(self._mctx)
        if isinstance(divisor, NegInfinity):
            return Zero.get_instance(self._mctx)
        if _sign(divisor) == Sign.NEGATIVE:
            return PosInfinity.get_instance(self._mctx)
        return self

    def inverse(self) -> Numeric:
        return NegZero.get_instance(self._mctx)

    def compare_to(self, other: Any) -> int:
        # negative infinity is less than any other value
        return 0 if isinstance(other, NegInfinity) else -1

    def __str__(self) -> str:
        return "−∞"


class IrrationalConstant(SingletonConstant, RealType):
    """
    A transcendental constant computed once per MathContext.

    Arithmetic goes through an inexact, irrational RealImpl proxy, except
    for combinations of the constant with itself, which have closed forms.
    """

    symbol = "?"

    def __init__(self, mctx: MathContext):
        super().__init__(mctx)
        mctx.require_bounded(type(self).__name__)
        self._value = self._calculate(mctx)

    @abstractmethod
    def _calculate(self, mctx: MathContext) -> Decimal:
        """Value of the constant rounded to `mctx`."""

    def as_real(self) -> RealImpl:
        """This constant as a plain irrational RealImpl."""
        return RealImpl(self._value, exact=False, irrational=True, mctx=self._mctx)

    def as_decimal(self) -> Decimal:
        return self._value

    def is_irrational(self) -> bool:
        return True

    def is_exact(self) -> bool:
        return False

    def sign(self) -> Sign:
        return Sign.POSITIVE

    def number_of_digits(self) -> int:
        return self._mctx.precision

    def is_coercible_to(self, numtype: Any) -> bool:
        kind = NumericHierarchy.for_numeric_type(numtype)
        # can be coerced to real or complex
        return kind is not None and kind >= NumericHierarchy.REAL

    def coerce_to(self, numtype: Any) -> Numeric:
        from .complex import ComplexRectImpl

        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.REAL:
            return self
        elif kind == NumericHierarchy.COMPLEX:
            return ComplexRectImpl(self.as_real(), RealImpl(Decimal(0), mctx=self._mctx))
        raise CoercionError(f"{type(self).__name__} can only be coerced to real or complex", self, numtype)

    def _is_same(self, other: Numeric) -> bool:
        return type(other) is type(self) and other.math_context == self._mctx

    def magnitude(self) -> RealImpl:
        return self.as_real()

    def negate(self) -> RealImpl:
        return self.as_real().negate()

    def add(self, addend: Numeric) -> Numeric:
        if self._is_same(addend):
            return self.as_real().multiply(RealImpl(Decimal(2), mctx=self._mctx))
        return self.as_real().add(addend)

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if self._is_same(subtrahend):
            return Zero.get_instance(self._mctx)
        return self.as_real().subtract(subtrahend)

    def multiply(self, multiplier: Numeric) -> Numeric:
        if self._is_same(multiplier):
            proxy = self.as_real()
            return proxy.multiply(proxy)
        return self.as_real().multiply(multiplier)

    def divide(self, divisor: Numeric) -> Numeric:
        if self._is_same(divisor):
            return One.get_instance(self._mctx)
        return self.as_real().divide(divisor)

    def inverse(self) -> Numeric:
        return self.as_real().inverse()

    def sqrt(self) -> Numeric:
        return self.as_real().sqrt()

    def nth_roots(self, n: IntegerType | int) -> list[ComplexType]:
        return self.as_real().nth_roots(n)

    def __eq__(self, other: Any) -> bool:
        return self._is_same(other)

    def __hash__(self) -> int:
        return hash((type(self), self._mctx))

    def __float__(self) -> float:
        return float(self._value)

    def __str__(self) -> str:
        return f"{self.symbol}[{self.number_of_digits()}]"


class Pi(IrrationalConstant):
    """The ratio of a circle's circumference to its diameter."""

    symbol = "\U0001d70b"

    def _calculate(self, mctx: MathContext) -> Decimal:
        """
        Bailey-Borwein-Plouffe series.

        Sums precision - 1 terms with 4 extra digits, then rounds to the
        requested precision.
        """
        ctx = mctx.with_guard_digits(4).decimal_context()
        terms = max(mctx.precision - 1, 1)
        total = Decimal(0)
        for k in range(terms):
            total = ctx.add(total, self._bbp_term(k, ctx))
        get_context_logger(__name__, constant="pi").debug(
            "Computed constant", extra_data={"precision": mctx.precision, "terms": terms}
        )
        return mctx.round(total)

    @staticmethod
    def _bbp_term(k: int, ctx) -> Decimal:
        eight_k = 8 * k
        scale = ctx.divide(Decimal(1), ctx.power(Decimal(16), k))
        total = ctx.divide(Decimal(4), Decimal(eight_k + 1))
        total = ctx.subtract(total, ctx.divide(Decimal(2), Decimal(eight_k + 4)))
        total = ctx.subtract(total, ctx.divide(Decimal(1), Decimal(eight_k + 5)))
        total = ctx.subtract(total, ctx.divide(Decimal(1), Decimal(eight_k + 6)))
        return ctx.multiply(total, scale)

    def floor(self) -> IntegerImpl:
        return IntegerImpl(3)

    def ceil(self) -> IntegerImpl:
        return IntegerImpl(4)


class Euler(IrrationalConstant):
    """Euler's number e, the base of the natural logarithm."""

    symbol = "ℯ"

    # Extra digits used while summing series
    GUARD_DIGITS = 4

    def _calculate(self, mctx: MathContext) -> Decimal:
        """
        Brothers' formula: e = sum over k of (2k + 2) / (2k + 1)!.

        At least precision / 2 terms are summed, continuing until a term no
        longer changes the guard-digit sum.
        """
        from ..util.math_utils import factorial

        ctx = mctx.with_guard_digits(self.GUARD_DIGITS).decimal_context()
        minimum_terms = max(mctx.precision // 2, 1)
        total = Decimal(0)
        k = 0
        while True:
            term = ctx.divide(Decimal(2 * k + 2), Decimal(factorial(2 * k + 1).as_int()))
            updated = ctx.add(total, term)
            if k >= minimum_terms and updated == total:
                break
            total = updated
            k += 1
        get_context_logger(__name__, constant="e").debug(
            "Computed constant", extra_data={"precision": mctx.precision, "terms": k}
        )
        return mctx.round(total)

    def exp(self, x: Numeric) -> RealImpl:
        """
        e raised to a real power, at this constant's precision.

        The argument is halved until it is small, the Taylor series is summed,
        and the result is squared back once per halving.
        """
        if not isinstance(x, RealType):
            x = x.coerce_to(NumericHierarchy.REAL)
        value = x.as_decimal()
        if value.is_zero():
            return RealImpl(Decimal(1), mctx=self._mctx)

        counting = MathContext(20).decimal_context()
        halvings = 0
        bound = value.copy_abs()
        while bound > Decimal("0.5"):
            bound = counting.divide(bound, 2)
            halvings += 1

        # each squaring doubles the relative error, so widen the guard accordingly
        ctx = self._mctx.with_guard_digits(self.GUARD_DIGITS + halvings // 3 + 1).decimal_context()
        reduced = value
        for _ in range(halvings):
            reduced = ctx.divide(reduced, 2)

        total = Decimal(1)
        term = Decimal(1)
        n = 1
        while True:
            term = ctx.divide(ctx.multiply(term, reduced), n)
            updated = ctx.add(total, term)
            if updated == total:
                break
            total = updated
            n += 1
        for _ in range(halvings):
            total = ctx.multiply(total, total)

        return RealImpl(self._mctx.round(total), exact=False, irrational=True, mctx=self._mctx)

    def floor(self) -> IntegerImpl:
        return IntegerImpl(2)

    def ceil(self) -> IntegerImpl:
        return IntegerImpl(3)


class ImaginaryUnit(SingletonConstant, ComplexType):
    """The imaginary unit i, a square root of -1."""

    def _rect(self):
        from .complex import ComplexRectImpl

        return ComplexRectImpl(
            RealImpl(Decimal(0), mctx=self._mctx), RealImpl(Decimal(1), mctx=self._mctx), mctx=self._mctx
        )

    def is_exact(self) -> bool:
        return True

    def real(self) -> RealImpl:
        return RealImpl(Decimal(0), mctx=self._mctx)

    def imaginary(self) -> RealImpl:
        return RealImpl(Decimal(1), mctx=self._mctx)

    def magnitude(self) -> RealImpl:
        return RealImpl(Decimal(1), mctx=self._mctx)

    def argument(self) -> RealType:
        # on the positive imaginary axis, the argument is pi/2
        return Pi.get_instance(self._mctx).as_real().divide(RealImpl(Decimal(2), mctx=self._mctx))

    def conjugate(self) -> ComplexType:
        return self._rect().conjugate()

    def negate(self) -> ComplexType:
        return self._rect().negate()

    def is_coercible_to(self, numtype: Any) -> bool:
        return NumericHierarchy.for_numeric_type(numtype) == NumericHierarchy.COMPLEX

    def coerce_to(self, numtype: Any) -> Numeric:
        if NumericHierarchy.for_numeric_type(numtype) == NumericHierarchy.COMPLEX:
            return self._rect()
        raise CoercionError("The imaginary unit can only be coerced to complex", self, numtype)

    def add(self, addend: Numeric) -> Numeric:
        from .complex import ComplexRectImpl

        if isinstance(addend, ImaginaryUnit):
            return ComplexRectImpl(self.real(), RealImpl(Decimal(2), mctx=self._mctx), mctx=self._mctx)
        return self._rect().add(addend)

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, ImaginaryUnit):
            return Zero.get_instance(self._mctx)
        return self._rect().subtract(subtrahend)

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, ImaginaryUnit):
            return IntegerImpl(-1)
        return self._rect().multiply(multiplier)

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, ImaginaryUnit):
            return One.get_instance(self._mctx)
        return self._rect().divide(divisor)

    def inverse(self) -> Numeric:
        return self.conjugate()

    def sqrt(self) -> Numeric:
        return self._rect().sqrt()

    def nth_roots(self, n: IntegerType | int) -> list[ComplexType]:
        return self._rect().nth_roots(n)

    def __eq__(self, other: Any) -> bool:
        from .complex import complex_close

        if isinstance(other, ImaginaryUnit):
            return True
        return isinstance(other, ComplexType) and complex_close(self, other)

    def __hash__(self) -> int:
        return hash("complex")

    def __str__(self) -> str:
        return "ⅈ"
