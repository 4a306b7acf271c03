"""
Operator Binding

Turns a raw token forest (operands interleaved with bare operator markers)
into a single tree according to an OperatorPriority.

NOT is always a prefix operator binding tighter than any binary operator.
Adjacent operands with no marker between them are joined with the
priority's implicit operator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from news_query.core.types import MalformedTreeError
from news_query.models.expression import OperatorPriority
from news_query.models.token import OperatorKind, Token


@dataclass(frozen=True)
class Binding:
    """Binding powers of the binary operators plus the implicit join."""

    powers: dict = field(default_factory=dict)
    implicit: OperatorKind = OperatorKind.OR


BINDINGS: dict[OperatorPriority, Binding] = {
    OperatorPriority.BOOLEAN: Binding(
        powers={OperatorKind.AND: 2, OperatorKind.OR: 1},
        implicit=OperatorKind.OR,
    ),
    OperatorPriority.LEFT_TO_RIGHT: Binding(
        powers={OperatorKind.AND: 1, OperatorKind.OR: 1},
        implicit=OperatorKind.AND,
    ),
}


def has_markers(forest: Sequence[Token]) -> bool:
    return any(token.is_marker for token in forest)


def combine(kind: OperatorKind, left: Token, right: Token) -> Token:
    """Join two operands, merging either side that already has the same kind."""
    children: list[Token] = []
    for side in (left, right):
        if side.is_operator and side.operator == kind and side.children:
            children.extend(side.children)
        else:
            children.append(side)
    return Token.operator_node(kind, children)


def _with_implicit_operators(forest: Sequence[Token], implicit: OperatorKind) -> list[Token]:
    """Insert the implicit marker wherever an operand follows an operand."""
    stream: list[Token] = []
    previous_ends_operand = False
    for token in forest:
        starts_operand = not token.is_marker or token.operator == OperatorKind.NOT
        if starts_operand and previous_ends_operand:
            stream.append(Token.marker(implicit))
        stream.append(token)
        previous_ends_operand = not token.is_marker
    return stream


class _Parser:
    """Precedence climbing over a marker stream."""

    def __init__(self, stream: list[Token], binding: Binding) -> None:
        self._stream = stream
        self._binding = binding
        self._pos = 0

    def parse(self) -> Token:
        root = self._expression(min_power=0)
        if self._pos != len(self._stream):
            token = self._stream[self._pos]
            raise MalformedTreeError(
                "Unexpected token after expression",
                token_id=token.id,
                context={"position": self._pos},
            )
        return root

    def _expression(self, min_power: int) -> Token:
        left = self._unary()
        while self._pos < len(self._stream):
            token = self._stream[self._pos]
            if not token.is_marker or token.operator == OperatorKind.NOT:
                break
            power = self._binding.powers[token.operator]
            if power < min_power:
                break
            self._pos += 1
            # power + 1 keeps equal-power operators left associative
            right = self._expression(power + 1)
            left = combine(token.operator, left, right)
        return left

    def _unary(self) -> Token:
        negations = 0
        while self._pos < len(self._stream) and self._is_not(self._stream[self._pos]):
            negations += 1
            self._pos += 1

        if self._pos >= len(self._stream):
            raise MalformedTreeError(
                "Expression ends where an operand is expected",
                context={"position": self._pos},
            )
        operand = self._stream[self._pos]
        if operand.is_marker:
            raise MalformedTreeError(
                f"{operand.operator.value} marker where an operand is expected",
                token_id=operand.id,
                context={"position": self._pos},
            )
        self._pos += 1

        for _ in range(negations):
            operand = Token.operator_node(OperatorKind.NOT, (operand,))
        return operand

    @staticmethod
    def _is_not(token: Token) -> bool:
        return token.is_marker and token.operator == OperatorKind.NOT


def bind(forest: Sequence[Token], priority: OperatorPriority) -> Token:
    """
    Bind a non-empty forest into one tree.

    Raises:
        MalformedTreeError: On leading or trailing binary markers, two binary
            markers in a row, or a NOT with no operand.
    """
    if not forest:
        raise MalformedTreeError("Cannot bind an empty forest")
    binding = BINDINGS[OperatorPriority(priority)]
    stream = _with_implicit_operators(forest, binding.implicit)
    return _Parser(stream, binding).parse()
