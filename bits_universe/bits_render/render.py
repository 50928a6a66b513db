"""
Reconstruction of textual expressions from proofs.

Precedence policy (minimal parenthesization, lowest precedence on top):
- '+' wraps neither operand
- '-' wraps its right operand
- '*', '/', '^' wrap both operands
- unary operators always wrap their operand: x!, x!!, sx
- shifted '*' / '/' wrap both operands and splice a binary point into the
  right operand's text, `shift` places from its end

A wrapped operand is parenthesized unless it is a bare literal.

Examples:
    BinaryOp(PLUS, 3@0,2, 2@1,1)          -> "11+10"
    UnaryOp(FACTORIAL, 6@1,2)             -> "110!"
    BinaryOp(TIMES_SHIFT, 8@3,1, 5@1,2, 2) -> "1000*1.01"
"""

from typing import Callable, Dict, Tuple

from bits_core.types import CostKey, InvariantViolation
from bits_fixedpoint.proofs import (
    DIV,
    DIV_SHIFT,
    DOUBLE_FACTORIAL,
    EXP,
    FACTORIAL,
    INTEGER_SQRT,
    MINUS,
    PLUS,
    TIMES,
    TIMES_SHIFT,
    BinaryOp,
    Literal,
    Proof,
    UnaryOp,
)
from bits_fixedpoint.table import Table

# kind -> (symbol, wrap left, wrap right)
INFIX: Dict[str, Tuple[str, bool, bool]] = {
    PLUS: ("+", False, False),
    MINUS: ("-", False, True),
    TIMES: ("*", True, True),
    DIV: ("/", True, True),
    EXP: ("^", True, True),
}

SHIFTED: Dict[str, str] = {
    TIMES_SHIFT: "*",
    DIV_SHIFT: "/",
}

UNARY_FORMATS: Dict[str, str] = {
    FACTORIAL: "{}!",
    DOUBLE_FACTORIAL: "{}!!",
    INTEGER_SQRT: "s{}",
}


def splice_point(digits: str, shift: int) -> str:
    """
    Insert a binary point `shift` places from the right of digits.

    Examples:
        >>> splice_point("101", 2)
        '1.01'
        >>> splice_point("11", 4)
        '.0011'
    """
    if len(digits) > shift:
        return f"{digits[:-shift]}.{digits[-shift:]}"
    return "." + "0" * (shift - len(digits)) + digits


def _render_with(proof: Proof, operand: Callable[[CostKey, bool], str], wrap: bool) -> str:
    # Shared structure of the full and top-level renderings
    if isinstance(proof, Literal):
        return format(proof.raw, "b")

    if isinstance(proof, UnaryOp):
        text = UNARY_FORMATS[proof.kind].format(operand(proof.operand, True))
    elif isinstance(proof, BinaryOp) and proof.kind in INFIX:
        symbol, wrap_left, wrap_right = INFIX[proof.kind]
        text = operand(proof.left, wrap_left) + symbol + operand(proof.right, wrap_right)
    elif isinstance(proof, BinaryOp) and proof.kind in SHIFTED:
        left = operand(proof.left, True)
        right = operand(proof.right, True)
        text = left + SHIFTED[proof.kind] + splice_point(right, proof.shift)
    else:
        raise InvariantViolation(f"Cannot render {proof!r}")

    if wrap:
        return f"({text})"
    return text


def render(proof: Proof, table: Table, wrap: bool = False) -> str:
    """
    Full expression for a proof, resolving operands through the table.

    Args:
        proof: Proof to render (never DOMINATED)
        table: Completed table holding every operand key
        wrap: Whether the enclosing operator needs this parenthesized

    Raises:
        InvariantViolation: proof is a tombstone, or an operand key is
            missing or dominated without a retired derivation
    """
    def operand(key: CostKey, operand_wrap: bool) -> str:
        return render(table.resolve(key), table, operand_wrap)

    return _render_with(proof, operand, wrap)


def render_key(key: CostKey, table: Table, wrap: bool = False) -> str:
    return render(table.resolve(key), table, wrap)


def render_top(proof: Proof) -> str:
    """
    Top-level operator only, operands shown as their decimal key values.

    The literal operand of a shifted operator keeps its binary digits so the
    point can be spliced. Used as a short per-derivation descriptor.

    Examples:
        BinaryOp(TIMES, 24@1,2, 30@1,2)        -> "24*30"
        UnaryOp(FACTORIAL, 6@1,2)              -> "6!"
        BinaryOp(DIV_SHIFT, 12@2,2, 3@0,2, 1)  -> "12/1.1"
    """
    if isinstance(proof, BinaryOp) and proof.kind in SHIFTED:
        digits = format(proof.right.value, "b")
        return f"{proof.left.value}{SHIFTED[proof.kind]}{splice_point(digits, proof.shift)}"

    return _render_with(proof, lambda key, _wrap: str(key.value), False)


__all__ = [
    "INFIX",
    "SHIFTED",
    "UNARY_FORMATS",
    "splice_point",
    "render",
    "render_key",
    "render_top",
]
