"""
Rationals rendered as repeating decimals.

A RepeatingDecimal is a RationalImpl that knows where the periodic part of
its decimal expansion starts and how long the period is, and renders the
repeating digits with an overline.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import PrivateAttr

from ..core.logging import get_logger
from ..util.text_effects import overline
from .context import MathContext
from .rational import RationalImpl
from .value import IntegerType, RationalType

logger = get_logger(__name__)

HORIZONTAL_ELLIPSIS = "…"


def _remove_factors(n: int, factor: int) -> tuple[int, int]:
    """Divide out every power of `factor` from n, returning (rest, exponent)."""
    exponent = 0
    while n > 1 and n % factor == 0:
        n //= factor
        exponent += 1
    return n, exponent


class RepeatingDecimal(RationalImpl):
    """
    Rational value with its decimal period characterized.

    For a reduced p/q, the factors 2^a and 5^b are stripped from q. If
    nothing remains the expansion is finite. Otherwise the period is the
    multiplicative order of 10 modulo what remains, starting max(a, b)
    digits after the decimal point.

    Examples:
        >>> str(RepeatingDecimal(1, 3, mctx=MathContext(10)))
        '0.3̅3̅3̅3̅3̅3̅3̅3̅3̅3̅'
        >>> RepeatingDecimal(1, 6).cycle_start()
        1
        >>> RepeatingDecimal(1, 7).cycle_length()
        6
    """

    _cycle_start: Optional[int] = PrivateAttr(default=None)
    _cycle_length: int = PrivateAttr(default=0)

    def __init__(
        self,
        numerator: int | str | IntegerType | RationalType,
        denominator: int | IntegerType | None = None,
        exact: bool = True,
        mctx: Optional[MathContext] = None,
        **kwargs,
    ):
        if isinstance(numerator, RationalType):
            source = numerator
            numerator, denominator = source.numerator(), source.denominator()
            exact = exact and source.is_exact()
            mctx = mctx or source.math_context
        super().__init__(numerator, denominator, exact=exact, mctx=mctx, **kwargs)
        self._characterize()

    def _characterize(self) -> None:
        from ..util.math_utils import multiplicative_order

        reduced = self.reduce()
        stripped, alpha = _remove_factors(reduced.den, 2)
        stripped, beta = _remove_factors(stripped, 5)
        if stripped == 1:
            # only 2s and 5s in the denominator, so the expansion terminates
            self._cycle_start = None
            self._cycle_length = 0
            logger.debug(f"{self.num}/{self.den} has a finite decimal expansion")
        else:
            self._cycle_start = max(alpha, beta)
            self._cycle_length = multiplicative_order(10, stripped)
            logger.debug(
                f"{self.num}/{self.den} repeats from position {self._cycle_start} "
                f"with period {self._cycle_length}"
            )

    def cycle_start(self) -> Optional[int]:
        """Digits after the decimal point before the period begins, or None if finite."""
        return self._cycle_start

    def cycle_length(self) -> Optional[int]:
        """Length of the period, or None if the expansion is finite."""
        return self._cycle_length or None

    def is_finite(self) -> bool:
        return self._cycle_start is None

    def fractional_digits(self, count: int) -> List[int]:
        """The first `count` digits after the decimal point, by long division."""
        remainder = abs(self.num) % self.den
        digits = []
        for _ in range(count):
            remainder *= 10
            digit, remainder = divmod(remainder, self.den)
            digits.append(digit)
        return digits

    def _budget(self, integer_part: int) -> int:
        """Fractional digits that fit within the context's precision."""
        precision = self.mctx.precision
        if self.mctx.is_unlimited:
            # the whole expansion, or one full period
            if self.is_finite():
                return _finite_length(self)
            return self._cycle_start + self._cycle_length
        if integer_part == 0:
            return precision
        return max(precision - len(str(integer_part)), 0)

    def __str__(self) -> str:
        integer_part = abs(self.num) // self.den
        sign = "-" if self.num < 0 else ""
        head = f"{sign}{integer_part}"
        if self.num % self.den == 0:
            return head

        budget = self._budget(integer_part)
        if self.is_finite():
            total = _finite_length(self)
            shown = min(total, budget)
            text = "".join(str(d) for d in self.fractional_digits(shown))
            suffix = HORIZONTAL_ELLIPSIS if shown < total else ""
            return f"{head}.{text}{suffix}" if text else f"{head}{suffix}"

        start, length = self._cycle_start, self._cycle_length
        digits = "".join(str(d) for d in self.fractional_digits(min(budget, start + length)))
        if budget <= start:
            # the period does not begin within the budget
            return f"{head}.{digits}{HORIZONTAL_ELLIPSIS}" if digits else f"{head}{HORIZONTAL_ELLIPSIS}"

        parts = [digits[:start]]
        cycle = digits[start:]
        remaining = budget - start
        while remaining >= length:
            parts.append(overline(cycle))
            remaining -= length
        if remaining > 0:
            parts.append(overline(cycle[:remaining]))
            parts.append(HORIZONTAL_ELLIPSIS)
        return f"{head}.{''.join(parts)}"

    def __repr__(self) -> str:
        return f"RepeatingDecimal({self.num}, {self.den})"


def _finite_length(value: RepeatingDecimal) -> int:
    """Number of fractional digits in a terminating expansion."""
    reduced = value.reduce()
    rest, alpha = _remove_factors(reduced.den, 2)
    _, beta = _remove_factors(rest, 5)
    return max(alpha, beta)
