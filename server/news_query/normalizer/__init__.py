"""
Operator Normalizer

Canonicalizes raw token forests into one well-formed tree.

Usage:
    from news_query.normalizer import OperatorNormalizer

    normalizer = OperatorNormalizer()
    root = normalizer.normalize(tokens, OperatorStrategy.SMART)
"""
from .normalizer import OperatorNormalizer

__all__ = [
    "OperatorNormalizer",
]
