"""
Unicode text effects for rendering numbers.

Superscripts and subscripts for exponents and indices, and a combining
overline for repeating decimal digits. Display only; nothing here is parsed
back.
"""

from __future__ import annotations

# U+0305 COMBINING OVERLINE
COMBINING_OVERLINE = "̅"

SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"
SUBSCRIPT_DIGITS = "₀₁₂₃₄₅₆₇₈₉"

SUPERSCRIPT_SYMBOLS = {
    "-": "⁻",
    "+": "⁺",
    "(": "⁽",
    ")": "⁾",
    "i": "ⁱ",
    "n": "ⁿ",
    "=": "⁼",
}

SUBSCRIPT_SYMBOLS = {
    "-": "₋",
    "+": "₊",
    "(": "₍",
    ")": "₎",
    "=": "₌",
    "a": "ₐ",
    "e": "ₑ",
    "o": "ₒ",
    "x": "ₓ",
    "k": "ₖ",
    "n": "ₙ",
    "p": "ₚ",
    "t": "ₜ",
}


def overline(text: str) -> str:
    """Put a combining overline over every character of `text`."""
    return "".join(c + COMBINING_OVERLINE for c in text)


def _convert(source: str, digits: str, symbols: dict[str, str]) -> str:
    converted = []
    for c in source:
        if "0" <= c <= "9":
            converted.append(digits[int(c)])
        elif c in symbols:
            converted.append(symbols[c])
        # characters without a raised/lowered form are dropped
    return "".join(converted)


def numeric_superscript(n: int) -> str:
    """
    Render an integer in superscript digits.

    Examples:
        >>> numeric_superscript(23)
        '²³'
        >>> numeric_superscript(-4)
        '⁻⁴'
    """
    return _convert(str(n), SUPERSCRIPT_DIGITS, SUPERSCRIPT_SYMBOLS)


def numeric_subscript(n: int) -> str:
    """Render an integer in subscript digits."""
    return _convert(str(n), SUBSCRIPT_DIGITS, SUBSCRIPT_SYMBOLS)


def convert_to_superscript(source: str) -> str:
    """Superscript form of `source`, dropping characters that have none."""
    return _convert(source, SUPERSCRIPT_DIGITS, SUPERSCRIPT_SYMBOLS)


def convert_to_subscript(source: str) -> str:
    """Subscript form of `source`, dropping characters that have none."""
    return _convert(source, SUBSCRIPT_DIGITS, SUBSCRIPT_SYMBOLS)
