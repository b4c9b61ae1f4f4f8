"""
Base Numeric contract for the numeric tower.

This module provides the foundation shared by every numeric kind:
- The NumericHierarchy total order used for coercion direction
- The Numeric abstract base class (the capability contract)
- Capability traits replacing optional, reflectively discovered operations
- Kind-specific abstract types (IntegerType, RationalType, RealType, ComplexType)
- Operator overloading in terms of the contract
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal
from enum import IntEnum
from fractions import Fraction
from typing import TYPE_CHECKING, Any, Iterator, Optional

if TYPE_CHECKING:
    from .context import MathContext


class NumericHierarchy(IntEnum):
    """
    Type promotion hierarchy.

    Lower values widen to higher values; a value of a lower kind can always
    be coerced to any higher kind.
    """

    INTEGER = 0
    RATIONAL = 1
    REAL = 2
    COMPLEX = 3

    @classmethod
    def for_numeric_type(cls, numtype: Any) -> Optional[NumericHierarchy]:
        """
        Resolve the hierarchy level of a kind, value class, or value.

        Returns None for anything outside the tower (e.g. infinities or
        foreign Numeric implementations).
        """
        if numtype is None:
            return None
        if isinstance(numtype, NumericHierarchy):
            return numtype
        if isinstance(numtype, Numeric):
            return numtype.kind
        if isinstance(numtype, type) and issubclass(numtype, Numeric):
            return numtype.kind
        return None


class Sign(IntEnum):
    """Sign of a real-line value."""

    NEGATIVE = -1
    ZERO = 0
    POSITIVE = 1

    @classmethod
    def from_value(cls, value: Any) -> Sign:
        if value > 0:
            return cls.POSITIVE
        if value < 0:
            return cls.NEGATIVE
        return cls.ZERO


def kind_of(value: Any) -> Optional[NumericHierarchy]:
    """Hierarchy level of a value, or None for foreign values."""
    return NumericHierarchy.for_numeric_type(value)


class Numeric(ABC):
    """
    Base class for every value in the numeric tower.

    Subclasses must implement the full contract; partial implementations are
    not permitted. Binary operations use widen-and-retry dispatch (see
    numtower.numerics.dispatch) whenever operand kinds differ.
    """

    # Hierarchy level; None marks values outside the tower
    kind = None

    @abstractmethod
    def is_exact(self) -> bool:
        """True if no rounding occurred in producing this value."""

    @property
    @abstractmethod
    def math_context(self) -> MathContext:
        """Precision/rounding governing arithmetic on this value."""

    @abstractmethod
    def is_coercible_to(self, numtype: Any) -> bool:
        """
        Semantic coercibility check.

        Args:
            numtype: A NumericHierarchy member, value class, or kind ABC

        Returns:
            True if this value can be represented losslessly in that kind
        """

    @abstractmethod
    def coerce_to(self, numtype: Any) -> Numeric:
        """
        Convert to another kind.

        Raises:
            CoercionError: If the target kind cannot represent this value
        """

    @abstractmethod
    def magnitude(self) -> Numeric:
        """Absolute value (modulus for complex values)."""

    @abstractmethod
    def negate(self) -> Numeric:
        """Additive inverse."""

    @abstractmethod
    def inverse(self) -> Numeric:
        """Multiplicative inverse."""

    @abstractmethod
    def sqrt(self) -> Numeric:
        """Principal square root."""

    @abstractmethod
    def add(self, addend: Numeric) -> Numeric:
        pass

    @abstractmethod
    def subtract(self, subtrahend: Numeric) -> Numeric:
        pass

    @abstractmethod
    def multiply(self, multiplier: Numeric) -> Numeric:
        pass

    @abstractmethod
    def divide(self, divisor: Numeric) -> Numeric:
        pass

    # Conversion helpers

    @classmethod
    def from_python(cls, value: Any) -> Numeric:
        """
        Convert a Python value to a Numeric.

        Args:
            value: int, fractions.Fraction, Decimal, float, complex, str or Numeric

        Returns:
            Appropriate Numeric instance
        """
        # Import here to avoid circular imports
        from .complex import ComplexRectImpl
        from .integer import IntegerImpl
        from .rational import RationalImpl
        from .real import RealImpl

        if isinstance(value, Numeric):
            return value
        elif isinstance(value, bool):
            return IntegerImpl(int(value))
        elif isinstance(value, int):
            return IntegerImpl(value)
        elif isinstance(value, Fraction):
            return RationalImpl(value.numerator, value.denominator)
        elif isinstance(value, Decimal):
            return RealImpl(value)
        elif isinstance(value, float):
            # repr() gives the shortest string that round-trips the float
            return RealImpl(repr(value), exact=False)
        elif isinstance(value, complex):
            return ComplexRectImpl(
                RealImpl(repr(value.real), exact=False),
                RealImpl(repr(value.imag), exact=False),
            )
        elif isinstance(value, str):
            from .parsing import parse
            return parse(value)
        raise TypeError(f"Cannot convert {type(value).__name__} to Numeric")

    # Operator overloading (Python magic methods)

    def __add__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else self.add(other)

    def __radd__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else other.add(self)

    def __sub__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else self.subtract(other)

    def __rsub__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else other.subtract(self)

    def __mul__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else self.multiply(other)

    def __rmul__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else other.multiply(self)

    def __truediv__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else self.divide(other)

    def __rtruediv__(self, other: Any) -> Numeric:
        other = _operand(other)
        return NotImplemented if other is None else other.divide(self)

    def __neg__(self) -> Numeric:
        return self.negate()

    def __pos__(self) -> Numeric:
        return self

    def __abs__(self) -> Numeric:
        return self.magnitude()


def _operand(value: Any) -> Optional[Numeric]:
    if isinstance(value, Numeric):
        return value
    if isinstance(value, (int, Fraction, Decimal, float, complex)):
        return Numeric.from_python(value)
    return None


# Capability traits

class PrecisionAware(ABC):
    """Values whose MathContext can be replaced (returning a new value)."""

    @abstractmethod
    def with_math_context(self, mctx: MathContext) -> Numeric:
        pass


class Streamable(ABC):
    """Values that can yield their digits."""

    @abstractmethod
    def stream(self, radix: int = 10) -> Iterator[str]:
        """Digits in base `radix`, least significant first."""


def apply_math_context(value: Numeric, mctx: MathContext) -> Numeric:
    """Apply `mctx` to values that carry one; others pass through unchanged."""
    if isinstance(value, PrecisionAware):
        return value.with_math_context(mctx)
    return value


# Ordering

class OrderedNumeric(Numeric):
    """
    Real-line values, totally ordered against each other.

    Subclasses provide as_fraction(), the exact rational value used for
    comparisons across kinds.
    """

    @abstractmethod
    def as_fraction(self) -> Fraction:
        """Exact rational value of this number as represented."""

    @abstractmethod
    def sign(self) -> Sign:
        pass

    def compare_to(self, other: Any) -> int:
        """Negative, zero or positive as self is less than, equal to, or greater than other."""
        operand = _operand(other)
        if operand is None:
            raise TypeError(f"Cannot compare {type(self).__name__} with {type(other).__name__}")
        other = operand
        if not isinstance(other, OrderedNumeric):
            reverse = getattr(other, "compare_to", None)
            if reverse is None:
                raise TypeError(f"{type(other).__name__} is not ordered")
            return -reverse(self)
        diff = self.as_fraction() - other.as_fraction()
        return (diff > 0) - (diff < 0)

    def __lt__(self, other: Any) -> bool:
        return self.compare_to(other) < 0

    def __le__(self, other: Any) -> bool:
        return self.compare_to(other) <= 0

    def __gt__(self, other: Any) -> bool:
        return self.compare_to(other) > 0

    def __ge__(self, other: Any) -> bool:
        return self.compare_to(other) >= 0


# Kind-specific abstract types

class IntegerType(OrderedNumeric):
    kind = NumericHierarchy.INTEGER

    @abstractmethod
    def as_int(self) -> int:
        """The underlying arbitrary-precision integer."""

    def as_fraction(self) -> Fraction:
        return Fraction(self.as_int())


class RationalType(OrderedNumeric):
    kind = NumericHierarchy.RATIONAL

    @abstractmethod
    def numerator(self) -> IntegerType:
        pass

    @abstractmethod
    def denominator(self) -> IntegerType:
        pass

    @abstractmethod
    def as_decimal(self) -> Decimal:
        """Decimal value under this rational's MathContext."""

    @abstractmethod
    def reduce(self) -> RationalType:
        pass

    def as_fraction(self) -> Fraction:
        return Fraction(self.numerator().as_int(), self.denominator().as_int())


class RealType(OrderedNumeric):
    kind = NumericHierarchy.REAL

    @abstractmethod
    def as_decimal(self) -> Decimal:
        pass

    @abstractmethod
    def is_irrational(self) -> bool:
        pass

    def as_fraction(self) -> Fraction:
        return Fraction(self.as_decimal())

    def floor(self) -> IntegerType:
        from .integer import IntegerImpl
        return IntegerImpl(self.as_fraction().__floor__())

    def ceil(self) -> IntegerType:
        from .integer import IntegerImpl
        return IntegerImpl(self.as_fraction().__ceil__())


class ComplexType(Numeric):
    kind = NumericHierarchy.COMPLEX

    @abstractmethod
    def real(self) -> RealType:
        pass

    @abstractmethod
    def imaginary(self) -> RealType:
        pass

    @abstractmethod
    def argument(self) -> RealType:
        """Angle in radians."""

    @abstractmethod
    def conjugate(self) -> ComplexType:
        pass

    @abstractmethod
    def nth_roots(self, n: Any) -> list[ComplexType]:
        """All n distinct nth roots, ordered by root of unity index."""
