"""
News Query Data Models

Frozen dataclasses and enums following the service's model conventions.
"""
from news_query.models.expression import (
    CompiledExpression,
    FilterFragment,
    FilterMode,
    OperatorPriority,
    OperatorStrategy,
    SearchIn,
)
from news_query.models.token import (
    EMPTY,
    LEAF_CATEGORIES,
    Category,
    OperatorKind,
    Token,
)

__all__ = [
    "EMPTY",
    "LEAF_CATEGORIES",
    "Category",
    "CompiledExpression",
    "FilterFragment",
    "FilterMode",
    "OperatorKind",
    "OperatorPriority",
    "OperatorStrategy",
    "SearchIn",
    "Token",
]
