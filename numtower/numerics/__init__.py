"""
numerics - the numeric tower

Exact and inexact number kinds with:
- Widen-and-retry coercion between kinds
- Explicit exactness and irrationality tracking
- Per-value precision and rounding (MathContext)
- Per-precision singleton constants

Layering: integer -> rational -> real -> complex, then the constants, which
depend on all of them.
"""

from .context import (
    DECIMAL32,
    DECIMAL64,
    DECIMAL128,
    UNLIMITED,
    DivisionByZeroPolicy,
    MathContext,
    RoundingMode,
)
from .value import (
    ComplexType,
    IntegerType,
    Numeric,
    NumericHierarchy,
    OrderedNumeric,
    PrecisionAware,
    RationalType,
    RealType,
    Sign,
    Streamable,
    apply_math_context,
)
from .dispatch import WIDENING_TABLE, dispatch_binary
from .integer import IntegerImpl
from .rational import RationalImpl
from .real import RealImpl
from .complex import ComplexPolarImpl, ComplexRectImpl
from .repeating import RepeatingDecimal
from .parsing import parse
from .constants import (
    ConstantRegistry,
    Euler,
    ImaginaryUnit,
    NegInfinity,
    NegZero,
    One,
    Pi,
    PosInfinity,
    Zero,
    get_registry,
    reset_registry,
)

__all__ = [
    "MathContext",
    "RoundingMode",
    "DivisionByZeroPolicy",
    "UNLIMITED",
    "DECIMAL32",
    "DECIMAL64",
    "DECIMAL128",
    "Numeric",
    "NumericHierarchy",
    "OrderedNumeric",
    "PrecisionAware",
    "Streamable",
    "apply_math_context",
    "Sign",
    "IntegerType",
    "RationalType",
    "RealType",
    "ComplexType",
    "WIDENING_TABLE",
    "dispatch_binary",
    "IntegerImpl",
    "RationalImpl",
    "RealImpl",
    "ComplexRectImpl",
    "ComplexPolarImpl",
    "RepeatingDecimal",
    "parse",
    "ConstantRegistry",
    "get_registry",
    "reset_registry",
    "Zero",
    "NegZero",
    "One",
    "PosInfinity",
    "NegInfinity",
    "Pi",
    "Euler",
    "ImaginaryUnit",
]
