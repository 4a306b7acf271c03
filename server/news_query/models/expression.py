"""
Expression Models

Compilation settings and the outputs handed to downstream retrieval services.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from news_query.models.token import Token


class OperatorPriority(str, Enum):
    """Binding order applied by the compiler."""

    BOOLEAN = "Boolean"  # NOT > AND > OR, implicit OR
    LEFT_TO_RIGHT = "LeftToRight"  # NOT > AND = OR, implicit AND


class OperatorStrategy(str, Enum):
    """Normalization strategy."""

    SMART = "Smart"
    SIMPLE = "Simple"


class SearchIn(str, Enum):
    """Part of the story a filter is matched against."""

    HEADLINE_ONLY = "HeadlineOnly"
    FULL_TEXT = "FullText"


class FilterMode(str, Enum):
    """Provider match mode."""

    NORMAL = "Normal"
    LITERAL = "Literal"


@dataclass(frozen=True)
class CompiledExpression:
    """Compiled root token together with the priority used to structure it."""

    root: Token
    priority: OperatorPriority


@dataclass(frozen=True)
class FilterFragment:
    """
    Serialized filter ready to be embedded in a retrieval request.

    ``markup`` goes inside the request's Filter element and ``destination``
    into its destination attribute.
    """

    markup: str
    destination: str
    filter_name: str
    search_in: SearchIn
    mode: FilterMode

    def __post_init__(self) -> None:
        if not self.markup:
            raise ValueError("markup must be non-empty string")
