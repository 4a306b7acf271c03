"""
Info Entity Selector

Picks the organisation and language tokens an info request is built from.
Organisations are extracted from the compiled query (portfolios are
expanded, instruments are not); languages are taken from the top level of
the forest only.
"""
from __future__ import annotations

import logging
from typing import Optional

from news_query.compiler.compiler import ExpressionCompiler, TokenInput, as_forest
from news_query.extractor.extractor import EntityExtractor
from news_query.models.expression import OperatorPriority, OperatorStrategy
from news_query.models.token import Category, Token
from news_query.normalizer.normalizer import OperatorNormalizer

logger = logging.getLogger(__name__)


class InfoEntitySelector:
    def __init__(
        self,
        compiler: Optional[ExpressionCompiler] = None,
        normalizer: Optional[OperatorNormalizer] = None,
        extractor: Optional[EntityExtractor] = None,
    ) -> None:
        self._compiler = compiler or ExpressionCompiler()
        self._normalizer = normalizer or OperatorNormalizer()
        self._extractor = extractor or EntityExtractor()

    def public_organisations(self, tokens: TokenInput) -> list[Token]:
        compiled = self._compiler.compile(tokens, OperatorPriority.BOOLEAN)
        return self._extractor.extract(Category.ORGANISATION, compiled)

    @staticmethod
    def languages(tokens: TokenInput) -> list[Token]:
        """Language tokens from the top level of the forest (not recursive)."""
        return [token for token in as_forest(tokens) if token.category == Category.LANGUAGE]

    def organisation_and_language_query(self, tokens: TokenInput) -> Token:
        """
        Normalized query over the public organisations and the languages.

        Organisations come first; a language sharing an organisation's id
        is not repeated.
        """
        union: dict[str, Token] = {}
        for token in self.public_organisations(tokens) + self.languages(tokens):
            union.setdefault(token.id, token)

        logger.debug(
            "Selected %d organisation/language token(s)",
            len(union),
        )
        return self._normalizer.normalize(list(union.values()), OperatorStrategy.SMART)
