"""
Descent Policy

Per-category rule consulted by the entity extractor's visitor.
Adding a category means adding one entry here (and a test for it).
"""
from __future__ import annotations

from enum import Enum

from news_query.models.token import Category


class Descent(str, Enum):
    """What the visitor does with a node that is not of the target category."""

    DESCEND = "descend"  # visit the children
    OPAQUE = "opaque"  # never look inside
    LEAF = "leaf"  # contributes nothing


DESCENT_POLICY: dict[Category, Descent] = {
    Category.OPERATOR: Descent.DESCEND,
    Category.PORTFOLIO: Descent.DESCEND,
    Category.INSTRUMENT: Descent.OPAQUE,
    Category.ORGANISATION: Descent.LEAF,
    Category.LANGUAGE: Descent.LEAF,
    Category.TOPIC: Descent.LEAF,
    Category.KEYWORD: Descent.LEAF,
    Category.EMPTY: Descent.LEAF,
}
