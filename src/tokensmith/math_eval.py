"""Arithmetic evaluation of dimension-like token values.

Expressions combine numbers carrying an optional unit suffix (``8px``,
``1.5rem``, ``50%``, ``2``) with ``+ - * /`` and parentheses. Whitespace
separated operands without an operator between them are independent parts
(``8px {space}*2`` -> ``8px 16px``).
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

from tokensmith.errors import MalformedExpressionError, UnitMismatchError

_EXPR_TOKEN_RE = re.compile(
    r"""
    ((?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)([A-Za-z%]+)?  # NUMBER, UNIT
    |(\+)                                               # PLUS
    |(-)                                                # MINUS
    |(\*)                                               # STAR
    |(/)                                                # SLASH
    |(\()                                               # LPAREN
    |(\))                                               # RPAREN
    |(\s+)                                              # WHITESPACE (skip)
    """,
    re.VERBOSE,
)

_BINARY_KINDS = frozenset({"PLUS", "MINUS", "STAR", "SLASH"})
_OPERAND_END_KINDS = frozenset({"NUMBER", "RPAREN"})
_KIND_BY_GROUP = {3: "PLUS", 4: "MINUS", 5: "STAR", 6: "SLASH", 7: "LPAREN", 8: "RPAREN"}

DECIMAL_PLACES = 4


@dataclass(frozen=True)
class Quantity:
    value: float
    unit: str = ""

    def __str__(self) -> str:
        return f"{format_number(self.value)}{self.unit}"


class _Token:
    __slots__ = ("kind", "value", "spaced")

    def __init__(self, kind: str, value: object = None, spaced: bool = False):
        self.kind = kind
        self.value = value
        self.spaced = spaced


def tokenize(expr: str) -> list[_Token] | None:
    """Tokenize ``expr``; None if it contains anything but numbers and operators."""
    tokens: list[_Token] = []
    pos = 0
    spaced = False
    while pos < len(expr):
        m = _EXPR_TOKEN_RE.match(expr, pos)
        if m is None:
            return None
        pos = m.end()
        if m.group(9) is not None:
            spaced = True
            continue
        if m.group(1) is not None:
            quantity = Quantity(float(m.group(1)), m.group(2) or "")
            tokens.append(_Token("NUMBER", quantity, spaced))
        else:
            kind = next(k for g, k in _KIND_BY_GROUP.items() if m.group(g) is not None)
            tokens.append(_Token(kind, spaced=spaced))
        spaced = False
    tokens.append(_Token("EOF"))
    return tokens


def _is_signed_part(tokens: list[_Token], i: int) -> bool:
    """A spaced ``-`` glued to the next operand, as in ``0 4px -2px``."""
    tok = tokens[i]
    if tok.kind != "MINUS" or not tok.spaced:
        return False
    nxt = tokens[i + 1]
    return nxt.kind in ("NUMBER", "LPAREN") and not nxt.spaced


class _ExprParser:
    """Recursive descent parser over unit-carrying quantities."""

    def __init__(self, tokens: list[_Token], source: str):
        self.tokens = tokens
        self.pos = 0
        self.source = source

    def _peek(self) -> _Token:
        return self.tokens[self.pos]

    def _advance(self) -> _Token:
        tok = self.tokens[self.pos]
        self.pos += 1
        return tok

    def _malformed(self, reason: str) -> MalformedExpressionError:
        return MalformedExpressionError(f"{reason} in expression {self.source!r}")

    def parse(self) -> list[Quantity]:
        parts = [self._additive()]
        while self._peek().kind in ("NUMBER", "LPAREN") or self._starts_signed_part():
            parts.append(self._additive())
        if self._peek().kind != "EOF":
            raise self._malformed(f"unexpected token {self._peek().kind}")
        return parts

    def _starts_signed_part(self) -> bool:
        return _is_signed_part(self.tokens, self.pos)

    def _additive(self) -> Quantity:
        left = self._multiplicative()
        while self._peek().kind in ("PLUS", "MINUS") and not self._starts_signed_part():
            op = self._advance()
            right = self._multiplicative()
            left = self._add(left, right, op.kind == "MINUS")
        return left

    def _multiplicative(self) -> Quantity:
        left = self._unary()
        while self._peek().kind in ("STAR", "SLASH"):
            op = self._advance()
            right = self._unary()
            if op.kind == "STAR":
                left = self._multiply(left, right)
            else:
                left = self._divide(left, right)
        return left

    def _unary(self) -> Quantity:
        if self._peek().kind == "MINUS":
            self._advance()
            operand = self._unary()
            return Quantity(-operand.value, operand.unit)
        if self._peek().kind == "PLUS":
            self._advance()
            return self._unary()
        return self._atom()

    def _atom(self) -> Quantity:
        tok = self._peek()
        if tok.kind == "NUMBER":
            self._advance()
            return tok.value
        if tok.kind == "LPAREN":
            self._advance()
            result = self._additive()
            if self._advance().kind != "RPAREN":
                raise self._malformed("missing ')'")
            return result
        raise self._malformed(f"unexpected token {tok.kind}")

    def _add(self, left: Quantity, right: Quantity, subtract: bool) -> Quantity:
        if left.unit and right.unit and left.unit != right.unit:
            op = "subtract" if subtract else "add"
            raise UnitMismatchError(
                f"Cannot {op} {left} and {right} in expression {self.source!r}"
            )
        value = left.value - right.value if subtract else left.value + right.value
        return Quantity(value, left.unit or right.unit)

    def _multiply(self, left: Quantity, right: Quantity) -> Quantity:
        if left.unit and right.unit:
            raise UnitMismatchError(
                f"Cannot multiply {left} by {right} in expression {self.source!r}"
            )
        return Quantity(left.value * right.value, left.unit or right.unit)

    def _divide(self, left: Quantity, right: Quantity) -> Quantity:
        if right.value == 0.0:
            raise self._malformed("division by zero")
        if not right.unit:
            unit = left.unit
        elif left.unit == right.unit:
            unit = ""
        else:
            raise UnitMismatchError(
                f"Cannot divide {left} by {right} in expression {self.source!r}"
            )
        return Quantity(left.value / right.value, unit)


def format_number(value: float) -> str:
    """Round to DECIMAL_PLACES, strip trailing zeros, canonicalize -0 -> 0."""
    if not math.isfinite(value):
        raise MalformedExpressionError(f"expression produced non-finite result: {value}")
    rounded = round(value, DECIMAL_PLACES)
    if rounded == 0.0:
        rounded = 0.0
    text = f"{rounded:.{DECIMAL_PLACES}f}".rstrip("0").rstrip(".")
    return text


def _as_number(value: float) -> int | float:
    text = format_number(value)
    return int(text) if "." not in text else float(text)


def is_expression(text: str) -> bool:
    """True if ``text`` is made only of quantities and has a binary operator.

    Signs and parentheses alone (``-8``, ``(8px)``, ``0 4px -2px``) are literals.
    """
    tokens = tokenize(text)
    if tokens is None:
        return False
    for i in range(1, len(tokens)):
        if tokens[i].kind not in _BINARY_KINDS:
            continue
        if tokens[i - 1].kind in _OPERAND_END_KINDS and not _is_signed_part(tokens, i):
            return True
    return False


def evaluate_expression(text: str) -> int | float | str:
    """Evaluate an expression string.

    A single unitless result is returned as a number; anything carrying a
    unit, or several whitespace separated parts, is returned as a string.

    Raises:
        UnitMismatchError: On incompatible operand units.
        MalformedExpressionError: On syntax errors or division by zero.
    """
    tokens = tokenize(text)
    if tokens is None:
        raise MalformedExpressionError(f"unexpected character in expression {text!r}")
    parts = _ExprParser(tokens, text).parse()
    if len(parts) == 1 and not parts[0].unit:
        return _as_number(parts[0].value)
    return " ".join(str(part) for part in parts)


def evaluate_value(value: object) -> object:
    """Evaluate ``value`` if it is an expression string; return anything else as-is."""
    if isinstance(value, str) and is_expression(value):
        return evaluate_expression(value)
    return value
