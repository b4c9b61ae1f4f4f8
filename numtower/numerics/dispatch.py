"""
Widen-and-retry dispatch for mixed-kind binary operations.

Every concrete kind handles its own kind directly and hands anything else to
dispatch_binary(), which looks up the common kind in WIDENING_TABLE, coerces
the narrower operand up and retries the operation on the widened pair.
"""

from __future__ import annotations

from typing import Any, Dict, Tuple

from ..core.errors import CoercionError, UnsupportedOperationError
from ..core.logging import get_logger
from .value import Numeric, NumericHierarchy, kind_of

logger = get_logger(__name__)


# (left kind, right kind) -> kind both operands are widened to
WIDENING_TABLE: Dict[Tuple[NumericHierarchy, NumericHierarchy], NumericHierarchy] = {
    (left, right): max(left, right)
    for left in NumericHierarchy
    for right in NumericHierarchy
}

# Operations where swapping the operands leaves the result unchanged
COMMUTATIVE_OPERATIONS = frozenset({"add", "multiply"})


def target_kind(left: Numeric, right: Numeric) -> NumericHierarchy | None:
    """Common kind for two operands, or None if either is outside the tower."""
    left_kind, right_kind = kind_of(left), kind_of(right)
    if left_kind is None or right_kind is None:
        return None
    return WIDENING_TABLE[(left_kind, right_kind)]


def dispatch_binary(left: Numeric, right: Numeric, operation: str) -> Numeric:
    """
    Perform `operation` on two operands of possibly different kinds.

    Args:
        left: Receiver of the operation
        right: Argument of the operation
        operation: Name of the contract method ("add", "subtract", "multiply", "divide")

    Returns:
        Result of the operation on the widened operands

    Raises:
        UnsupportedOperationError: If the operands share no coercible kind
    """
    kind = target_kind(left, right)
    if kind is None:
        return _dispatch_foreign(left, right, operation)

    try:
        widened_left = left.coerce_to(kind)
        widened_right = right.coerce_to(kind)
    except CoercionError as e:
        logger.warning(f"Coercion failed during {operation}: {e.message}")
        raise UnsupportedOperationError(operation, left, right) from e

    if widened_left is left and widened_right is right:
        # Nothing changed; retrying would recurse forever
        raise UnsupportedOperationError(operation, left, right)

    return getattr(widened_left, operation)(widened_right)


def _dispatch_foreign(left: Numeric, right: Numeric, operation: str) -> Numeric:
    """Handle an operand that is not part of the tower (e.g. an infinity)."""
    try:
        converted = left.coerce_to(type(right))
    except CoercionError as e:
        logger.debug(f"Cannot coerce {type(left).__name__} to {type(right).__name__}: {e.message}")
    else:
        if converted is not left:
            return getattr(converted, operation)(right)

    # Foreign values know how to combine with tower values; ask them
    if operation in COMMUTATIVE_OPERATIONS and kind_of(right) is None:
        return getattr(right, operation)(left)
    if operation == "subtract" and kind_of(right) is None:
        return right.negate().add(left)
    if operation == "divide" and kind_of(right) is None:
        inverse = right.inverse()
        if kind_of(inverse) is not None:
            return left.multiply(inverse)

    logger.warning(f"No common kind for {operation} between "
                   f"{type(left).__name__} and {type(right).__name__}")
    raise UnsupportedOperationError(operation, left, right)
