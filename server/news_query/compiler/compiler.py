"""
Expression Compiler

The single choke point every caller routes a token forest through before
searching or building a filter. Produces one authoritative boolean tree
whose operator binding follows the requested OperatorPriority.

Compilation:
1. Drops Empty tokens from the forest and binds bare operator markers
2. Validates every subtree strictly (malformed input is rejected, never repaired)
3. Checks every category against the configured closed set
4. Flattens nested AND/OR of the same kind

Compiling an already compiled tree returns an equal tree.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

from news_query.compiler.precedence import bind
from news_query.config import CategoryConfig, settings
from news_query.core.types import TreeLimits
from news_query.models.expression import CompiledExpression, OperatorPriority
from news_query.models.token import EMPTY, OperatorKind, Token, check_node_arity

logger = logging.getLogger(__name__)

TokenInput = Union[Token, Sequence[Token]]


def as_forest(tokens: TokenInput) -> tuple[Token, ...]:
    """Accept a single token or a sequence of tokens."""
    if isinstance(tokens, Token):
        return (tokens,)
    return tuple(tokens or ())


class ExpressionCompiler:
    """
    Compiles token forests into a canonical boolean tree.

    Stateless apart from its configuration, so a single instance can be
    shared across concurrent requests.
    """

    def __init__(
        self,
        limits: Optional[TreeLimits] = None,
        categories: Optional[CategoryConfig] = None,
    ) -> None:
        self._limits = limits or settings.limits
        self._categories = categories or settings.categories

    def compile(
        self,
        tokens: TokenInput,
        priority: OperatorPriority = OperatorPriority.BOOLEAN,
    ) -> Token:
        """
        Compile a forest (or a single token) into one root token.

        Raises:
            MalformedTreeError: If any subtree violates arity invariants.
            UnknownCategoryError: If a token category is outside the closed set.
            OversizeTreeError: If the input exceeds the configured tree limits.
        """
        forest = as_forest(tokens)
        node_count = self._limits.check(forest)

        operands = tuple(token for token in forest if not token.is_empty)
        if not operands:
            return EMPTY

        # Reject before binding so a malformed operand is never merged away
        for operand in operands:
            if not operand.is_marker:
                operand.validate()

        if len(operands) == 1 and not operands[0].is_marker:
            root = operands[0]
        else:
            root = bind(operands, priority)
            # Binding can nest NOT chains deeper than any single input tree
            self._limits.check((root,))

        compiled = self._compile_node(root)
        logger.debug(
            "Compiled %d token(s) into %s",
            node_count,
            compiled.id,
            extra={"priority": OperatorPriority(priority).value, "nodes": node_count},
        )
        return compiled

    def compile_expression(
        self,
        tokens: TokenInput,
        priority: OperatorPriority = OperatorPriority.BOOLEAN,
    ) -> CompiledExpression:
        """Compile and keep the priority alongside the root."""
        priority = OperatorPriority(priority)
        return CompiledExpression(root=self.compile(tokens, priority), priority=priority)

    def _compile_node(self, token: Token) -> Token:
        self._categories.require(token.category, token_id=token.id)
        check_node_arity(token)

        if token.is_operator:
            children = []
            for child in token.children:
                children.append(self._compile_node(child))
            if token.operator == OperatorKind.NOT:
                return Token.operator_node(OperatorKind.NOT, children)
            return Token.operator_node(token.operator, _flatten(token.operator, children))

        if token.children:
            # Grouping node (portfolio): keep the node, compile what it holds
            held = []
            for child in token.children:
                held.append(self._compile_node(child))
            return Token(
                id=token.id,
                label=token.label,
                category=token.category,
                children=tuple(held),
            )

        return token


def _flatten(kind: OperatorKind, children: Sequence[Token]) -> list[Token]:
    """Lift the operands of same-kind children into the parent."""
    flat: list[Token] = []
    for child in children:
        if child.is_operator and child.operator == kind:
            flat.extend(child.children)
        else:
            flat.append(child)
    return flat
