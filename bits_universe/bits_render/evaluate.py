"""
Evaluator for rendered expressions.

Grammar (what render() emits):
    expr : expr '+' expr | expr '-' expr
         | expr '*' expr | expr '/' expr
         | expr '^' expr            (right associative)
         | 's' expr                 (exact integer square root)
         | expr '!' | expr '!!'     (factorial, double factorial)
         | '(' expr ')'
         | NUMBER                   (binary digits, optional binary point)

A literal with a point, like 1.01 or .0011, is the rational digits / 2**k
where k counts the digits after the point. That reading makes the shifted
operators ordinary '*' and '/' on rationals, so every expression evaluates
exactly with Fraction arithmetic.
"""

import math
from fractions import Fraction

from sly import Lexer, Parser

# Guard against runaway powers on hand-written input
MAX_EXPONENT = 4096


class ExpressionError(ValueError):
    """Rendered expression is malformed or undefined."""


def parse_literal(text: str) -> Fraction:
    """
    Value of a binary literal.

    Examples:
        >>> parse_literal("110")
        Fraction(6, 1)
        >>> parse_literal("1.01")
        Fraction(5, 4)
    """
    whole, _, frac = text.partition(".")
    return Fraction(int(whole + frac, 2), 2 ** len(frac))


def _natural(x: Fraction, op: str) -> int:
    if x.denominator != 1 or x < 0:
        raise ExpressionError(f"{op} needs a natural number, got {x}")
    return int(x)


def _power(base: Fraction, exp: Fraction) -> Fraction:
    n = _natural(exp, "exponent")
    if base not in (0, 1) and n > MAX_EXPONENT:
        raise ExpressionError(f"exponent {n} is too large")
    return base ** n


def _sqrt(x: Fraction) -> Fraction:
    n = _natural(x, "s")
    root = math.isqrt(n)
    if root * root != n:
        raise ExpressionError(f"s{n} is not exact")
    return Fraction(root)


def _double_factorial(x: Fraction) -> Fraction:
    return Fraction(math.prod(range(_natural(x, "!!"), 0, -2)))


class RenderedLexer(Lexer):
    tokens = {NUMBER, SQRT, DBANG, BANG}
    literals = {'+', '-', '*', '/', '^', '(', ')'}
    ignore = ' \t'

    DBANG = r"!!"
    BANG = r"!"
    SQRT = r"s"

    @_(r'[01]*\.[01]+|[01]+')
    def NUMBER(self, t):
        t.value = parse_literal(t.value)
        return t

    def error(self, t):
        raise ExpressionError(f"Illegal character '{t.value[0]}' at index {t.index}")


class RenderedParser(Parser):
    tokens = RenderedLexer.tokens
    start = 'expr'

    precedence = (
        ('left', '+', '-'),
        ('left', '*', '/'),
        ('right', '^'),
        ('right', 'SQRT'),
        ('left', 'BANG', 'DBANG'),
    )

    @_('expr "+" expr')
    def expr(self, p):
        return p.expr0 + p.expr1

    @_('expr "-" expr')
    def expr(self, p):
        return p.expr0 - p.expr1

    @_('expr "*" expr')
    def expr(self, p):
        return p.expr0 * p.expr1

    @_('expr "/" expr')
    def expr(self, p):
        if p.expr1 == 0:
            raise ExpressionError("division by zero")
        return p.expr0 / p.expr1

    @_('expr "^" expr')
    def expr(self, p):
        return _power(p.expr0, p.expr1)

    @_('SQRT expr')
    def expr(self, p):
        return _sqrt(p.expr)

    @_('expr BANG')
    def expr(self, p):
        return Fraction(math.factorial(_natural(p.expr, "!")))

    @_('expr DBANG')
    def expr(self, p):
        return _double_factorial(p.expr)

    @_('"(" expr ")"')
    def expr(self, p):
        return p.expr

    @_('NUMBER')
    def expr(self, p):
        return p.NUMBER

    def error(self, p):
        if p:
            raise ExpressionError(f"Unexpected token {p.value!r} at index {p.index}")
        raise ExpressionError("Unexpected end of expression")


def evaluate(text: str) -> Fraction:
    """Exact value of a rendered expression."""
    return RenderedParser().parse(RenderedLexer().tokenize(text))


def evaluate_int(text: str) -> int:
    """Value of a rendered expression, which must be an integer."""
    value = evaluate(text)
    if value.denominator != 1:
        raise ExpressionError(f"{text} evaluates to non-integer {value}")
    return int(value)


__all__ = [
    "ExpressionError",
    "parse_literal",
    "evaluate",
    "evaluate_int",
    "RenderedLexer",
    "RenderedParser",
]
