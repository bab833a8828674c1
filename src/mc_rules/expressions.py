"""Tiny integer comparison language used by item, block and tag matchers.

Accepted forms, tried in this order: ``>=N``, ``>N``, ``<=N``, ``<>N``,
``<N``, ``=N``, ``!=N``, ``A-B`` (inclusive range) and a bare ``N``.
"""

from __future__ import annotations

import operator
import re
from dataclasses import dataclass
from typing import Any, Callable

from mc_rules.errors import InvalidExpressionError

_PREFIX_OPERATORS: tuple[tuple[str, Callable[[int, int], bool]], ...] = (
    (">=", operator.ge),
    (">", operator.gt),
    ("<=", operator.le),
    ("<>", operator.ne),
    ("<", operator.lt),
    ("=", operator.eq),
    ("!=", operator.ne),
)


@dataclass(frozen=True, slots=True)
class Comparison:
    """``value <op> amount`` for a fixed operator and amount."""

    op: Callable[[int, int], bool]
    amount: int

    def __call__(self, value: int) -> bool:
        return self.op(value, self.amount)


@dataclass(frozen=True, slots=True)
class Between:
    low: int
    high: int

    def __call__(self, value: int) -> bool:
        return self.low <= value <= self.high


IntPredicate = Callable[[int], bool]

_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_int(text: str, expression: str) -> int:
    digits = text.strip()
    if not _INTEGER.fullmatch(digits):
        raise InvalidExpressionError(f"Bad expression '{expression}'!", subject=expression)
    return int(digits)


def parse_expression(expression: str) -> IntPredicate:
    """Compile ``expression`` into an integer predicate."""
    text = expression.strip()
    for prefix, op in _PREFIX_OPERATORS:
        if text.startswith(prefix):
            return Comparison(op, _parse_int(text[len(prefix):], expression))

    # A leading sign belongs to the number, not to the range separator.
    separator = text.find("-", 1)
    if separator > 0:
        low = _parse_int(text[:separator], expression)
        high = _parse_int(text[separator + 1:], expression)
        return Between(low, high)

    return Comparison(operator.eq, _parse_int(text, expression))


def expression_from_json(value: Any) -> IntPredicate:
    """Compile a decoded JSON value: a number means equality, a string is parsed."""
    if isinstance(value, bool):
        raise InvalidExpressionError(f"Bad expression '{value}'!", subject=str(value))
    if isinstance(value, int):
        return Comparison(operator.eq, value)
    if isinstance(value, float):
        return Comparison(operator.eq, int(value))
    if isinstance(value, str):
        return parse_expression(value)
    raise InvalidExpressionError(f"Bad expression '{value}'!", subject=repr(value))
