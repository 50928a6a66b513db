"""
Proof values: how a table entry was derived.

Each entry of the table maps a CostKey to a Proof:
1. LITERAL: a direct one-byte bit pattern
2. Unary operators (FACTORIAL, DOUBLE_FACTORIAL, INTEGER_SQRT) on one key
3. Binary operators (PLUS, MINUS, TIMES, DIV, EXP) on two keys
4. Shifted binary operators (TIMES_SHIFT, DIV_SHIFT) carrying a shift amount
5. DOMINATED: tombstone for a key superseded by a cheaper derivation

Operands are stored as CostKeys, never as nested proofs. The table resolves
them, so the derivation graph is an arena of back-references.

All proofs are immutable (frozen dataclasses) and hashable.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Tuple

from bits_core.types import CostKey


# =============================================================================
# Operator kinds
# =============================================================================


LITERAL = "LITERAL"
DOMINATED_KIND = "DOMINATED"

FACTORIAL = "FACTORIAL"
DOUBLE_FACTORIAL = "DOUBLE_FACTORIAL"
INTEGER_SQRT = "INTEGER_SQRT"

PLUS = "PLUS"
MINUS = "MINUS"
TIMES = "TIMES"
DIV = "DIV"
EXP = "EXP"
TIMES_SHIFT = "TIMES_SHIFT"
DIV_SHIFT = "DIV_SHIFT"

UNARY_KINDS = frozenset({FACTORIAL, DOUBLE_FACTORIAL, INTEGER_SQRT})
SHIFT_KINDS = frozenset({TIMES_SHIFT, DIV_SHIFT})
BINARY_KINDS = frozenset({PLUS, MINUS, TIMES, DIV, EXP}) | SHIFT_KINDS

# Shift amounts tried by the shifted operators
SHIFTS = range(1, 8)


# =============================================================================
# Base Proof Class
# =============================================================================


@dataclass(frozen=True)
class Proof(ABC):
    """
    Base proof class.

    Subclasses describe one derivation step and expose the keys they
    depend on, so consumers can walk the derivation graph through the table.
    """

    kind: str

    @abstractmethod
    def operands(self) -> Tuple[CostKey, ...]:
        """Keys this derivation reads (empty for literals and tombstones)."""
        pass

    @abstractmethod
    def to_json(self) -> Any:
        """JSON-serializable form (used for fingerprints and receipts)."""
        pass


def _key_json(key: CostKey) -> list:
    return [key.value, key.zero_cost, key.one_cost]


# =============================================================================
# Literals
# =============================================================================


@dataclass(frozen=True)
class Literal(Proof):
    """A one-byte literal written directly in binary."""

    kind: str = field(default=LITERAL, init=False)
    raw: int

    def __post_init__(self):
        if not 0 <= self.raw <= 0xFF:
            raise ValueError(f"Literal must fit in one byte, got {self.raw}")

    def operands(self) -> Tuple[CostKey, ...]:
        return ()

    def to_json(self) -> Any:
        return [self.kind, self.raw]


# =============================================================================
# Operators
# =============================================================================


@dataclass(frozen=True)
class UnaryOp(Proof):
    """
    Unary operator applied to one prior key.

    The result carries the operand's cost unchanged.
    """

    operand: CostKey

    def __post_init__(self):
        if self.kind not in UNARY_KINDS:
            raise ValueError(f"Unknown unary operator: {self.kind}")

    def operands(self) -> Tuple[CostKey, ...]:
        return (self.operand,)

    def to_json(self) -> Any:
        return [self.kind, _key_json(self.operand)]


@dataclass(frozen=True)
class BinaryOp(Proof):
    """
    Binary operator applied to two prior keys.

    Cost is the sum of the operand costs; the shifted operators add the extra
    zero cost of the point splice (computed by the closure, not stored here).

    shift: 1..7 for TIMES_SHIFT / DIV_SHIFT, 0 for every other kind
    """

    left: CostKey
    right: CostKey
    shift: int = 0

    def __post_init__(self):
        if self.kind not in BINARY_KINDS:
            raise ValueError(f"Unknown binary operator: {self.kind}")
        if self.kind in SHIFT_KINDS:
            if self.shift not in SHIFTS:
                raise ValueError(
                    f"{self.kind} needs a shift in 1..7, got {self.shift}"
                )
        elif self.shift != 0:
            raise ValueError(f"{self.kind} does not take a shift")

    @property
    def is_shifted(self) -> bool:
        return self.kind in SHIFT_KINDS

    def operands(self) -> Tuple[CostKey, ...]:
        return (self.left, self.right)

    def to_json(self) -> Any:
        data = [self.kind, _key_json(self.left), _key_json(self.right)]
        if self.is_shifted:
            data.append(self.shift)
        return data


# =============================================================================
# Tombstone
# =============================================================================


@dataclass(frozen=True)
class Dominated(Proof):
    """
    Tombstone for a key superseded by a cheaper-or-equal derivation.

    Never used as an operand and never rendered.
    """

    kind: str = field(default=DOMINATED_KIND, init=False)

    def operands(self) -> Tuple[CostKey, ...]:
        return ()

    def to_json(self) -> Any:
        return [self.kind]


DOMINATED = Dominated()


def is_live(proof: Proof) -> bool:
    return not isinstance(proof, Dominated)


# =============================================================================
# Exports
# =============================================================================


__all__ = [
    "LITERAL",
    "DOMINATED_KIND",
    "FACTORIAL",
    "DOUBLE_FACTORIAL",
    "INTEGER_SQRT",
    "PLUS",
    "MINUS",
    "TIMES",
    "DIV",
    "EXP",
    "TIMES_SHIFT",
    "DIV_SHIFT",
    "UNARY_KINDS",
    "BINARY_KINDS",
    "SHIFT_KINDS",
    "SHIFTS",
    "Proof",
    "Literal",
    "UnaryOp",
    "BinaryOp",
    "Dominated",
    "DOMINATED",
    "is_live",
]
