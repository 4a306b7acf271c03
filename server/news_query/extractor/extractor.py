"""
Entity Extractor

Collects the tokens of one target category from a compiled tree.

A single depth-first visitor consults DESCENT_POLICY for every node that is
not of the target category. Results are deduplicated by id (first occurrence
wins), sorted by label and capped at ``max_entities``.
"""
from __future__ import annotations

import logging
from typing import Optional, Union

from news_query.config import CategoryConfig, ExtractorConfig, settings
from news_query.core.types import TreeLimits
from news_query.extractor.policy import DESCENT_POLICY, Descent
from news_query.models.token import Category, Token

logger = logging.getLogger(__name__)


class EntityExtractor:
    """Extracts entity tokens of a given category from a tree."""

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        limits: Optional[TreeLimits] = None,
        categories: Optional[CategoryConfig] = None,
    ) -> None:
        self._config = config or settings.extractor
        self._limits = limits or settings.limits
        self._categories = categories or settings.categories

    def extract(
        self,
        target: Union[Category, str],
        root: Optional[Token],
    ) -> list[Token]:
        """
        Collect tokens of ``target`` category, sorted by label.

        Instrument nodes are never descended into and are only collected
        when they are the target. Degenerate input (None, Empty, a token
        without category or children) yields an empty list.

        Raises:
            UnknownCategoryError: If the target or a visited token category
                is outside the configured closed set.
            OversizeTreeError: If the tree exceeds the configured limits.
        """
        target = self._categories.require(Category.parse(target))
        if root is None:
            return []
        self._limits.check((root,))

        collected = self._visit(target, root)

        unique: dict[str, Token] = {}
        for token in collected:
            unique.setdefault(token.id, token)
        result = sorted(unique.values(), key=lambda t: t.label)

        limit = self._config.max_entities
        if len(result) > limit:
            logger.warning(
                f"Truncating {len(result)} {target.value} tokens to {limit}",
                extra={"root_id": root.id, "dropped": len(result) - limit},
            )
            result = result[:limit]

        return result

    def _visit(self, target: Category, root: Token) -> list[Token]:
        collected: list[Token] = []
        stack = [root]
        while stack:
            token = stack.pop()
            if token.category is None:
                continue
            category = self._categories.require(token.category, token_id=token.id)

            if category == target:
                collected.append(token)
                continue

            policy = DESCENT_POLICY[category]
            if policy == Descent.DESCEND:
                stack.extend(reversed(token.children))

        return collected
