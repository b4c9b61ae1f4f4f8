"""numtower - an arbitrary-precision numeric tower.

Main namespace package:
- numtower.numerics: Integer, Rational, Real and Complex kinds and constants
- numtower.util: Iterative/transcendental engines and text rendering
- numtower.core: Settings, logging and exceptions
"""

from .numerics import parse

__version__ = "0.1.0"

__all__ = ["parse"]
