"""
Text input for numeric values.

parse() accepts the canonical forms:
- integers: "42", "-17", "+3"
- fractions: "22/7", "-1/3"
- decimals: "3.14159", "-0.5", "1.5e-10"
"""

from __future__ import annotations

import re
from typing import Optional

from .context import MathContext
from .integer import IntegerImpl
from .rational import RationalImpl
from .real import RealImpl
from .value import Numeric

INTEGER_PATTERN = re.compile(r"[+-]?\d+")
RATIONAL_PATTERN = re.compile(r"([+-]?\d+)\s*/\s*([+-]?\d+)")
DECIMAL_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")


def parse(text: str, mctx: Optional[MathContext] = None) -> Numeric:
    """
    Parse a number from text.

    Args:
        text: Integer, fraction or decimal literal (surrounding whitespace is ignored)
        mctx: Context for rational and real results (default from settings)

    Returns:
        IntegerImpl, RationalImpl or RealImpl depending on the literal's form

    Raises:
        ValueError: If the text is not a recognized numeric literal, or a
            fraction has a zero denominator
    """
    stripped = text.strip()
    if INTEGER_PATTERN.fullmatch(stripped):
        return IntegerImpl(int(stripped))

    match = RATIONAL_PATTERN.fullmatch(stripped)
    if match:
        return RationalImpl(int(match.group(1)), int(match.group(2)), mctx=mctx)

    if DECIMAL_PATTERN.fullmatch(stripped):
        return RealImpl(stripped, mctx=mctx)

    raise ValueError(f"Not a numeric literal: {text!r}")
