"""
Complex values in rectangular and polar form.

ComplexRectImpl stores (real, imaginary) and ComplexPolarImpl stores
(modulus, argument). Both expose the full complex capability. Angles are
radians, and the trigonometric functions are evaluated with mpmath at the
value's precision.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Callable, Optional

import mpmath
from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..core.config import settings
from ..core.errors import CoercionError, DivisionByZeroError
from .context import MathContext, infer_math_context, strip_trailing_zeros
from .dispatch import dispatch_binary
from .real import RealImpl
from .value import ComplexType, IntegerType, Numeric, NumericHierarchy, PrecisionAware, RealType, Sign

# Extra digits carried through mpmath evaluations before rounding back
TRANSCENDENTAL_GUARD_DIGITS = 5


def evaluate(function: Callable[..., Any], mctx: MathContext, *args: Decimal) -> Decimal:
    """
    Evaluate an mpmath function on Decimal arguments at the precision of `mctx`.

    Args:
        function: An mpmath function such as mpmath.cos or mpmath.atan2
        mctx: Bounded context supplying precision and rounding
        *args: Decimal arguments

    Returns:
        The result rounded to `mctx`
    """
    mctx.require_bounded(getattr(function, "__name__", "Transcendental function"))
    digits = mctx.precision + TRANSCENDENTAL_GUARD_DIGITS
    with mpmath.workdps(digits):
        result = function(*(mpmath.mpf(str(arg)) for arg in args))
        text = mpmath.nstr(result, digits, strip_zeros=False)
    return mctx.round(Decimal(text))


def as_real(value: Numeric, mctx: MathContext) -> RealImpl:
    """Coerce a tower value to RealImpl under `mctx`."""
    real = value.coerce_to(NumericHierarchy.REAL)
    if isinstance(real, RealImpl):
        return real.with_math_context(mctx)
    return RealImpl(real.as_decimal(), exact=real.is_exact(), irrational=real.is_irrational(), mctx=mctx)


def _to_real(value: Any) -> RealType:
    if isinstance(value, RealType):
        return value
    return Numeric.from_python(value).coerce_to(NumericHierarchy.REAL)


def _context_for(*components: Numeric) -> MathContext:
    mctx = infer_math_context(*components)
    return MathContext.default() if mctx.is_unlimited else mctx


def _is_zero(value: RealType) -> bool:
    return value.sign() == Sign.ZERO


class ComplexRectImpl(BaseModel, ComplexType, PrecisionAware):
    """
    Complex number in rectangular form.

    Examples:
        >>> ComplexRectImpl(RealImpl("1.5"), RealImpl("-2"))
        >>> ComplexRectImpl(0, 1)
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    re: RealType = Field(description="Real component")
    im: RealType = Field(description="Imaginary component")
    exact: bool = Field(default=True, description="False if rounding occurred")
    mctx: MathContext = Field(default_factory=MathContext.default, description="Precision and rounding")

    def __init__(
        self,
        real: RealType | Any,
        imaginary: RealType | Any,
        exact: Optional[bool] = None,
        mctx: Optional[MathContext] = None,
        **kwargs,
    ):
        real, imaginary = _to_real(real), _to_real(imaginary)
        # a rounded component makes the whole value inexact
        exact = (exact is None or exact) and real.is_exact() and imaginary.is_exact()
        if mctx is None:
            mctx = _context_for(real, imaginary)
        super().__init__(re=real, im=imaginary, exact=exact, mctx=mctx, **kwargs)

    # Contract

    def is_exact(self) -> bool:
        return self.exact

    @property
    def math_context(self) -> MathContext:
        return self.mctx

    def with_math_context(self, mctx: MathContext) -> ComplexRectImpl:
        return ComplexRectImpl(as_real(self.re, mctx), as_real(self.im, mctx), exact=self.exact, mctx=mctx)

    def real(self) -> RealType:
        return self.re

    def imaginary(self) -> RealType:
        return self.im

    def magnitude(self) -> RealType:
        square = self.re.multiply(self.re).add(self.im.multiply(self.im))
        return as_real(as_real(square, self.mctx).sqrt(), self.mctx)

    def argument(self) -> RealType:
        """
        Angle of this value in (-pi, pi].

        Values on the axes get exact angles (or pi-based ones); zero is
        assigned an argument of 0.
        """
        from .constants import Pi

        if _is_zero(self.re):
            sign = self.im.sign()
            if sign == Sign.ZERO:
                # indeterminate, so we pick 0
                return RealImpl(Decimal(0), mctx=self.mctx)
            half_pi = Pi.get_instance(self.mctx).as_real().divide(RealImpl(Decimal(2), mctx=self.mctx))
            return half_pi if sign == Sign.POSITIVE else half_pi.negate()
        if _is_zero(self.im):
            if self.re.sign() == Sign.POSITIVE:
                return RealImpl(Decimal(0), mctx=self.mctx)
            return Pi.get_instance(self.mctx).as_real()

        value = evaluate(mpmath.atan2, self.mctx, self.im.as_decimal(), self.re.as_decimal())
        return RealImpl(value, exact=False, irrational=True, mctx=self.mctx)

    def conjugate(self) -> ComplexRectImpl:
        return ComplexRectImpl(self.re, self.im.negate(), exact=self.exact, mctx=self.mctx)

    def negate(self) -> ComplexRectImpl:
        return ComplexRectImpl(self.re.negate(), self.im.negate(), exact=self.exact, mctx=self.mctx)

    def is_coercible_to(self, numtype: Any) -> bool:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.COMPLEX:
            return True
        if kind is None or not _is_zero(self.im):
            return False
        return self.re.is_coercible_to(kind)

    def coerce_to(self, numtype: Any) -> Numeric:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.COMPLEX:
            return self
        if kind is not None and _is_zero(self.im):
            return self.re.coerce_to(kind)
        raise CoercionError("Imaginary part must be 0", self, numtype)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, ComplexType):
            return ComplexRectImpl(
                self.re.add(addend.real()),
                self.im.add(addend.imaginary()),
                exact=self.exact and addend.is_exact(),
            )
        return dispatch_binary(self, addend, "add")

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, ComplexType):
            return ComplexRectImpl(
                self.re.subtract(subtrahend.real()),
                self.im.subtract(subtrahend.imaginary()),
                exact=self.exact and subtrahend.is_exact(),
            )
        return dispatch_binary(self, subtrahend, "subtract")

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, ComplexType):
            other_re, other_im = multiplier.real(), multiplier.imaginary()
            real = self.re.multiply(other_re).subtract(self.im.multiply(other_im))
            imaginary = self.re.multiply(other_im).add(self.im.multiply(other_re))
            return ComplexRectImpl(
                as_real(real, self.mctx),
                as_real(imaginary, self.mctx),
                exact=self.exact and multiplier.is_exact(),
            )
        return dispatch_binary(self, multiplier, "multiply")

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, ComplexType):
            conjugate = divisor.conjugate()
            scale = as_real(divisor.multiply(conjugate).coerce_to(NumericHierarchy.REAL), self.mctx)
            if _is_zero(scale):
                raise DivisionByZeroError("Cannot divide a complex value by zero")
            numerator = self.multiply(conjugate)
            return ComplexRectImpl(
                as_real(numerator.real().divide(scale), self.mctx),
                as_real(numerator.imaginary().divide(scale), self.mctx),
                exact=self.exact and divisor.is_exact() and scale.is_exact(),
            )
        return dispatch_binary(self, divisor, "divide")

    def inverse(self) -> Numeric:
        scale = as_real(self.re.multiply(self.re).add(self.im.multiply(self.im)), self.mctx)
        if _is_zero(scale):
            raise DivisionByZeroError("Cannot invert a complex zero")
        return ComplexRectImpl(
            as_real(self.re.divide(scale), self.mctx),
            as_real(self.im.negate().divide(scale), self.mctx),
            exact=self.exact,
        )

    def sqrt(self) -> ComplexRectImpl:
        """Principal square root from the half-angle identities."""
        two = RealImpl(Decimal(2), mctx=self.mctx)
        modulus = self.magnitude()
        root_re = as_real(as_real(self.re.add(modulus).divide(two), self.mctx).sqrt(), self.mctx)
        root_im = as_real(as_real(self.re.negate().add(modulus).divide(two), self.mctx).sqrt(), self.mctx)
        if self.im.sign() == Sign.NEGATIVE:
            root_im = root_im.negate()
        return ComplexRectImpl(root_re, root_im, exact=self.exact and root_re.exact and root_im.exact, mctx=self.mctx)

    def nth_roots(self, n: IntegerType | int) -> list[ComplexType]:
        return self.to_polar().nth_roots(n)

    def to_polar(self) -> ComplexPolarImpl:
        return ComplexPolarImpl(self.magnitude(), self.argument(), exact=self.exact, mctx=self.mctx)

    def to_rect(self) -> ComplexRectImpl:
        return self

    # Python protocol

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ComplexRectImpl):
            return self.exact == other.exact and self.re == other.re and self.im == other.im
        if isinstance(other, ComplexType):
            return complex_close(self, other)
        return False

    def __hash__(self) -> int:
        # equality across representations is approximate, so no component can be hashed
        return hash("complex")

    def __complex__(self) -> complex:
        return complex(float(self.re.as_decimal()), float(self.im.as_decimal()))

    def __str__(self) -> str:
        if self.im.sign() == Sign.NEGATIVE:
            return f"{self.re} - {self.im.negate()}i"
        return f"{self.re} + {self.im}i"

    def __repr__(self) -> str:
        return f"ComplexRectImpl({self.re!r}, {self.im!r})"


class ComplexPolarImpl(BaseModel, ComplexType, PrecisionAware):
    """
    Complex number in polar form.

    Examples:
        >>> ComplexPolarImpl(RealImpl("2"), RealImpl("0.5"))
        >>> ComplexPolarImpl(RealImpl("1"), Pi.get_instance(MathContext(20)).as_real())
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    modulus: RealType = Field(description="Distance from the origin, never negative")
    arg: RealType = Field(description="Angle in radians")
    exact: bool = Field(default=True, description="False if rounding occurred")
    mctx: MathContext = Field(default_factory=MathContext.default, description="Precision and rounding")

    def __init__(
        self,
        modulus: RealType | Any,
        argument: RealType | Any,
        exact: Optional[bool] = None,
        mctx: Optional[MathContext] = None,
        **kwargs,
    ):
        modulus, argument = _to_real(modulus), _to_real(argument)
        exact = (exact is None or exact) and modulus.is_exact() and argument.is_exact()
        if mctx is None:
            mctx = _context_for(modulus, argument)
        super().__init__(modulus=modulus, arg=argument, exact=exact, mctx=mctx, **kwargs)

    @model_validator(mode="after")
    def check_modulus(self) -> ComplexPolarImpl:
        if self.modulus.sign() == Sign.NEGATIVE:
            raise ValueError("Complex modulus should be positive")
        return self

    # Contract

    def is_exact(self) -> bool:
        return self.exact

    @property
    def math_context(self) -> MathContext:
        return self.mctx

    def with_math_context(self, mctx: MathContext) -> ComplexPolarImpl:
        return ComplexPolarImpl(as_real(self.modulus, mctx), as_real(self.arg, mctx), exact=self.exact, mctx=mctx)

    def magnitude(self) -> RealType:
        return self.modulus

    def argument(self) -> RealType:
        return self.arg

    def normalize_argument(self) -> RealType:
        """The argument reduced into (-pi, pi]."""
        from .constants import Pi

        pi = Pi.get_instance(self.mctx).as_real()
        two_pi = pi.multiply(RealImpl(Decimal(2), mctx=self.mctx))
        angle = as_real(self.arg, self.mctx)
        if angle.compare_to(pi) <= 0 and angle.compare_to(pi.negate()) > 0:
            # already in the range (-pi, pi]
            return self.arg
        while angle.compare_to(pi) > 0:
            angle = angle.subtract(two_pi)
        while angle.compare_to(pi.negate()) <= 0:
            angle = angle.add(two_pi)
        return angle

    def _on_real_axis(self) -> Optional[Sign]:
        """POSITIVE for argument 0, NEGATIVE for argument pi, None otherwise."""
        from .constants import Pi

        angle = self.normalize_argument().as_decimal()
        if angle.is_zero():
            return Sign.POSITIVE
        if angle == Pi.get_instance(self.mctx).as_decimal():
            return Sign.NEGATIVE
        return None

    def real(self) -> RealType:
        axis = self._on_real_axis()
        if axis == Sign.POSITIVE:
            return as_real(self.modulus, self.mctx)
        if axis == Sign.NEGATIVE:
            return as_real(self.modulus.negate(), self.mctx)
        cosine = evaluate(mpmath.cos, self.mctx, self.arg.as_decimal())
        value = self.mctx.decimal_context().multiply(self.modulus.as_decimal(), cosine)
        return RealImpl(strip_trailing_zeros(value), exact=False, mctx=self.mctx)

    def imaginary(self) -> RealType:
        if self._on_real_axis() is not None:
            return RealImpl(Decimal(0), mctx=self.mctx)
        sine = evaluate(mpmath.sin, self.mctx, self.arg.as_decimal())
        value = self.mctx.decimal_context().multiply(self.modulus.as_decimal(), sine)
        return RealImpl(strip_trailing_zeros(value), exact=False, mctx=self.mctx)

    def conjugate(self) -> ComplexPolarImpl:
        return ComplexPolarImpl(self.modulus, self.arg.negate(), exact=self.exact, mctx=self.mctx)

    def negate(self) -> ComplexPolarImpl:
        from .constants import Pi

        rotated = as_real(self.arg.add(Pi.get_instance(self.mctx).as_real()), self.mctx)
        return ComplexPolarImpl(self.modulus, rotated, exact=False, mctx=self.mctx).normalized()

    def is_coercible_to(self, numtype: Any) -> bool:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.COMPLEX:
            return True
        if kind is None or self._on_real_axis() is None:
            return False
        return self.real().is_coercible_to(kind)

    def coerce_to(self, numtype: Any) -> Numeric:
        kind = NumericHierarchy.for_numeric_type(numtype)
        if kind == NumericHierarchy.COMPLEX:
            return self
        if kind is not None and self._on_real_axis() is not None:
            return self.real().coerce_to(kind)
        raise CoercionError("Argument must be 0 or pi", self, numtype)

    def add(self, addend: Numeric) -> Numeric:
        if isinstance(addend, ComplexType):
            return self.to_rect().add(addend)
        return dispatch_binary(self, addend, "add")

    def subtract(self, subtrahend: Numeric) -> Numeric:
        if isinstance(subtrahend, ComplexType):
            return self.to_rect().subtract(subtrahend)
        return dispatch_binary(self, subtrahend, "subtract")

    def multiply(self, multiplier: Numeric) -> Numeric:
        if isinstance(multiplier, ComplexType):
            return ComplexPolarImpl(
                as_real(self.modulus.multiply(multiplier.magnitude()), self.mctx),
                as_real(self.arg.add(multiplier.argument()), self.mctx),
                exact=self.exact and multiplier.is_exact(),
                mctx=self.mctx,
            )
        return dispatch_binary(self, multiplier, "multiply")

    def divide(self, divisor: Numeric) -> Numeric:
        if isinstance(divisor, ComplexType):
            modulus = divisor.magnitude()
            if _is_zero(modulus):
                raise DivisionByZeroError("Cannot divide a complex value by zero")
            return ComplexPolarImpl(
                as_real(self.modulus.divide(modulus), self.mctx),
                as_real(self.arg.subtract(divisor.argument()), self.mctx),
                exact=self.exact and divisor.is_exact(),
                mctx=self.mctx,
            )
        return dispatch_binary(self, divisor, "divide")

    def inverse(self) -> Numeric:
        if _is_zero(self.modulus):
            raise DivisionByZeroError("Cannot invert a complex zero")
        return ComplexPolarImpl(
            as_real(self.modulus.inverse(), self.mctx), self.arg.negate(), exact=self.exact, mctx=self.mctx
        )

    def sqrt(self) -> ComplexPolarImpl:
        half_angle = as_real(self.arg.divide(RealImpl(Decimal(2), mctx=self.mctx)), self.mctx)
        return ComplexPolarImpl(as_real(self.modulus.sqrt(), self.mctx), half_angle, exact=self.exact, mctx=self.mctx)

    def nth_roots(self, n: IntegerType | int) -> list[ComplexType]:
        """
        All n distinct nth roots.

        The principal root (modulus^(1/n), argument/n) is rotated by each
        nth root of unity, so the list is ordered k = 0..n-1.
        """
        from ..util.math_utils import nth_root, roots_of_unity

        degree = n.as_int() if isinstance(n, IntegerType) else int(n)
        if degree < 1:
            raise ValueError(f"Root degree must be positive, got {degree}")

        if degree == 2:
            principal = self.sqrt()
        else:
            angle = as_real(self.arg.divide(RealImpl(Decimal(degree), mctx=self.mctx)), self.mctx)
            principal = ComplexPolarImpl(nth_root(self.modulus, degree, self.mctx), angle, exact=self.exact, mctx=self.mctx)
        return [principal.multiply(root) for root in roots_of_unity(degree, self.mctx)]

    def normalized(self) -> ComplexPolarImpl:
        return ComplexPolarImpl(self.modulus, self.normalize_argument(), exact=self.exact, mctx=self.mctx)

    def to_rect(self) -> ComplexRectImpl:
        return ComplexRectImpl(self.real(), self.imaginary(), exact=False, mctx=self.mctx)

    def to_polar(self) -> ComplexPolarImpl:
        return self

    # Python protocol

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, ComplexType):
            return complex_close(self, other)
        return False

    def __hash__(self) -> int:
        return hash("complex")

    def __complex__(self) -> complex:
        return complex(self.to_rect())

    def __str__(self) -> str:
        # angle notation
        return f"{self.modulus} ∠{self.arg}"

    def __repr__(self) -> str:
        return f"ComplexPolarImpl({self.modulus!r}, {self.arg!r})"


def complex_close(left: ComplexType, right: ComplexType) -> bool:
    """
    Equality across representations.

    Both sides are converted to rectangular form and compared component by
    component within 10^-(p - guard), scaled by the larger modulus, where p
    is the smaller of the two precisions.
    """
    mctx = _context_for(left, right)
    guard = settings.COMPLEX_EQUALITY_GUARD_DIGITS
    ctx = mctx.with_guard_digits(guard).decimal_context()
    tolerance = ctx.multiply(
        Decimal(1).scaleb(-max(mctx.precision - guard, 1), ctx),
        max(Decimal(1), left.magnitude().as_decimal(), right.magnitude().as_decimal()),
    )
    for mine, theirs in ((left.real(), right.real()), (left.imaginary(), right.imaginary())):
        difference = ctx.subtract(mine.as_decimal(), theirs.as_decimal()).copy_abs()
        if difference > tolerance:
            return False
    return True
