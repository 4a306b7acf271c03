"""
Operator Normalizer

Canonicalizes a raw token forest into one well-formed tree.

The SMART strategy:
1. Returns a single valid token unchanged and an empty forest as EMPTY
2. Joins several top-level tokens with OR (markers bind with BOOLEAN priority)
3. Flattens nested AND/OR of the same kind
4. Collapses duplicate leaves anywhere in the combined tree, first seen wins
5. Collapses an AND/OR left with a single operand into that operand,
   and drops an operator left with none
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from news_query.compiler.compiler import TokenInput, as_forest
from news_query.compiler.precedence import bind, has_markers
from news_query.config import settings
from news_query.core.types import TreeLimits
from news_query.models.expression import OperatorPriority, OperatorStrategy
from news_query.models.token import EMPTY, OperatorKind, Token

logger = logging.getLogger(__name__)


class OperatorNormalizer:
    """Builds one tree out of a token forest according to an OperatorStrategy."""

    def __init__(self, limits: Optional[TreeLimits] = None) -> None:
        self._limits = limits or settings.limits

    def normalize(
        self,
        tokens: TokenInput,
        strategy: OperatorStrategy = OperatorStrategy.SMART,
    ) -> Token:
        """
        Normalize a forest into a single token.

        Raises:
            MalformedTreeError: If an input subtree violates arity invariants
                or the markers in the forest cannot be bound.
            OversizeTreeError: If the input exceeds the configured tree limits.
        """
        strategy = OperatorStrategy(strategy)
        forest = as_forest(tokens)
        self._limits.check(forest)

        if not forest:
            return EMPTY
        if len(forest) == 1:
            forest[0].validate()
            return forest[0]

        operands = [token for token in forest if not token.is_empty]
        if not operands:
            return EMPTY
        for operand in operands:
            if not operand.is_marker:
                operand.validate()

        root = self._join(operands)
        self._limits.check((root,))

        if strategy == OperatorStrategy.SMART:
            root = _canonicalize(root, set()) or EMPTY

        logger.debug(
            "Normalized %d top-level token(s) into %s",
            len(forest),
            root.id,
            extra={"strategy": strategy.value},
        )
        return root

    @staticmethod
    def _join(operands: Sequence[Token]) -> Token:
        if has_markers(operands):
            return bind(operands, OperatorPriority.BOOLEAN)
        if len(operands) == 1:
            return operands[0]
        return Token.operator_node(OperatorKind.OR, operands)


def _canonicalize(token: Token, seen: set[str]) -> Optional[Token]:
    """
    Rebuild a tree in pre-order, dropping every leaf whose id was seen before.

    Returns None when nothing of the subtree survives.
    """
    if token.is_operator:
        children: list[Token] = []
        for child in token.children:
            rebuilt = _canonicalize(child, seen)
            if rebuilt is not None:
                children.append(rebuilt)
        if not children:
            return None
        if token.operator == OperatorKind.NOT:
            return Token.operator_node(OperatorKind.NOT, children)

        flat: list[Token] = []
        for child in children:
            if child.is_operator and child.operator == token.operator:
                flat.extend(child.children)
            else:
                flat.append(child)

        if len(flat) == 1:
            return flat[0]
        return Token.operator_node(token.operator, flat)

    if token.children:
        held: list[Token] = []
        for child in token.children:
            rebuilt = _canonicalize(child, seen)
            if rebuilt is not None:
                held.append(rebuilt)
        return Token(
            id=token.id,
            label=token.label,
            category=token.category,
            children=tuple(held),
        )

    if token.id in seen:
        return None
    seen.add(token.id)
    return token
