"""
News Query Core Utilities

Exception hierarchy and the tree size guard shared by every stage.
"""
from news_query.core.types import (
    EncodingError,
    MalformedTreeError,
    NewsQueryError,
    OversizeTreeError,
    TreeLimits,
    UnknownCategoryError,
    UnknownDestinationError,
    ValidationError,
)

__all__ = [
    "EncodingError",
    "MalformedTreeError",
    "NewsQueryError",
    "OversizeTreeError",
    "TreeLimits",
    "UnknownCategoryError",
    "UnknownDestinationError",
    "ValidationError",
]
