"""
Library exceptions.

Every failure raised by the numeric tower derives from NumericError, and the
arithmetic ones also derive from the matching builtin so callers that already
catch ZeroDivisionError or ArithmeticError keep working.
"""

from typing import Any, Dict, Optional


class NumericError(Exception):
    """Base exception for numeric tower errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class CoercionError(NumericError):
    """Raised when a value cannot be represented losslessly in the target kind"""

    def __init__(self, message: str, source: Any, target: Any):
        self.source = source
        self.target = target
        super().__init__(
            message=f"{message} (from {_kind_name(source)} to {_kind_name(target)})",
            details={"source": _kind_name(source), "target": _kind_name(target)},
        )


class UnsupportedOperationError(NumericError):
    """Raised when two operands share no coercible kind"""

    def __init__(self, operation: str, left: Any, right: Any):
        super().__init__(
            message=f"Operation '{operation}' unsupported between "
                    f"{type(left).__name__} and {type(right).__name__}",
            details={
                "operation": operation,
                "left": type(left).__name__,
                "right": type(right).__name__,
            },
        )


class DivisionByZeroError(NumericError, ZeroDivisionError):
    """Raised on division by zero under the 'throw' policy"""

    def __init__(self, message: str = "Cannot divide by zero"):
        super().__init__(message=message)


class NonTerminatingDecimalError(NumericError, ArithmeticError):
    """Raised when an unlimited-precision division has no exact decimal result"""

    def __init__(self, dividend: Any, divisor: Any):
        super().__init__(
            message=f"Non-terminating decimal expansion of {dividend}/{divisor}; "
                    f"no exact representable decimal result",
            details={"dividend": str(dividend), "divisor": str(divisor)},
        )


class PrecisionError(NumericError, ValueError):
    """Raised when an algorithm needs a bounded precision and got unlimited"""

    def __init__(self, algorithm: str):
        super().__init__(
            message=f"{algorithm} requires a MathContext with a bounded precision",
            details={"algorithm": algorithm},
        )


class NotCoprimeError(NumericError, ArithmeticError):
    """Raised when a multiplicative order is requested for non-coprime arguments"""

    def __init__(self, base: int, modulus: int, gcd: int):
        super().__init__(
            message=f"Multiplicative order only exists for relatively prime arguments: "
                    f"gcd({base}, {modulus}) = {gcd}",
            details={"base": base, "modulus": modulus, "gcd": gcd},
        )


def _kind_name(kind: Any) -> str:
    if kind is None:
        return "unknown"
    name = getattr(kind, "name", None)
    if isinstance(name, str):
        return name
    if isinstance(kind, type):
        return kind.__name__
    return type(kind).__name__
