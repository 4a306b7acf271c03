"""
news_query.serializer — wire formats on both sides of the pipeline.

Public API:
    FilterSerializer         — compiled tree -> filter markup + destination
    build_destination_value  — repository ids -> destination code
    escape_attribute         — markup attribute escaping
    token_from_dict          — upstream dict -> Token
    tokens_from_json         — upstream JSON forest -> list[Token]
    token_to_dict            — Token -> dict
"""
from .destination import build_destination_value
from .filter import FilterSerializer, escape_attribute
from .tokens import token_from_dict, token_to_dict, tokens_from_json

__all__ = [
    "FilterSerializer",
    "build_destination_value",
    "escape_attribute",
    "token_from_dict",
    "token_to_dict",
    "tokens_from_json",
]
