"""
Overflow-checked 16-bit arithmetic.

Every operator used by the closure works on unsigned 16-bit words. A result
that leaves the word (overflow, negative difference, shift past the top bit)
is reported as None and the caller drops the candidate.
"""

import math
from typing import Optional

WORD_BITS = 16
WORD_MAX = (1 << WORD_BITS) - 1

# Largest operands for which the unary operators are attempted
FACTORIAL_MAX = 8
DOUBLE_FACTORIAL_MAX = 12


def _word(n: int) -> Optional[int]:
    return n if 0 <= n <= WORD_MAX else None


def checked_add(a: int, b: int) -> Optional[int]:
    return _word(a + b)


def checked_sub(a: int, b: int) -> Optional[int]:
    return _word(a - b)


def checked_mul(a: int, b: int) -> Optional[int]:
    return _word(a * b)


def checked_pow(base: int, exp: int) -> Optional[int]:
    """
    base ** exp, or None when it leaves the word.

    Bases 0 and 1 are closed under any exponent (0 ** 0 == 1). For base >= 2
    an exponent of WORD_BITS or more always overflows, so the power is never
    materialized.
    """
    if base < 2:
        return 1 if exp == 0 else base
    if exp >= WORD_BITS:
        return None
    return _word(base ** exp)


def checked_shl(a: int, shift: int) -> Optional[int]:
    return _word(a << shift)


def bit_width(n: int) -> int:
    """Number of significant bits (16 minus the leading zeros of a word)."""
    return n.bit_length()


def factorial(n: int) -> int:
    return math.factorial(n)


def double_factorial(n: int) -> int:
    """Product of n, n-2, ... down to 1 or 2 (empty product for 0)."""
    return math.prod(range(n, 0, -2))


def is_perfect_square(n: int) -> Optional[int]:
    """Exact integer square root of n, or None when n is not a square."""
    root = math.isqrt(n)
    if root * root == n:
        return root
    return None


__all__ = [
    "WORD_BITS",
    "WORD_MAX",
    "FACTORIAL_MAX",
    "DOUBLE_FACTORIAL_MAX",
    "checked_add",
    "checked_sub",
    "checked_mul",
    "checked_pow",
    "checked_shl",
    "bit_width",
    "factorial",
    "double_factorial",
    "is_perfect_square",
]
