"""
Token Forest Codec

Converts between the plain dicts/JSON produced by the query-authoring UI
and Token trees. Field names use camelCase to match the UI payload:

  {
    "id": "ORG-4295905573",
    "label": "Apple Inc",
    "category": "Organisation",
    "operatorKind": null,
    "children": []
  }

Operator entries may omit ``id``; it is then derived from the structure.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from news_query.config import settings
from news_query.core.types import MalformedTreeError, OversizeTreeError, TreeLimits, ValidationError
from news_query.models.token import Category, OperatorKind, Token


def token_from_dict(raw: Any, limits: Optional[TreeLimits] = None) -> Token:
    """
    Decode one token tree.

    Raises:
        ValidationError: If the payload shape is wrong.
        UnknownCategoryError: If a category string is not recognized.
        MalformedTreeError: If the operator/category pairing is invalid.
        OversizeTreeError: If the decoded tree exceeds the limits.
    """
    limits = limits or settings.limits
    token = _decode(raw, depth=1, max_depth=limits.max_depth)
    limits.check((token,))
    return token


def tokens_from_json(text: str | bytes, limits: Optional[TreeLimits] = None) -> list[Token]:
    """
    Decode a JSON forest (a list of tokens, or a single token object).

    Raises:
        ValidationError: If the text is not valid JSON or not a forest.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid token JSON: {e}", field="forest") from e

    if isinstance(payload, dict):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValidationError(
            f"Expected list of tokens, got {type(payload).__name__}",
            field="forest",
            value=payload,
        )

    limits = limits or settings.limits
    forest = [_decode(item, depth=1, max_depth=limits.max_depth) for item in payload]
    limits.check(forest)
    return forest


def token_to_dict(token: Token) -> dict[str, Any]:
    """Encode a token tree as a JSON-serializable dict."""
    return {
        "id": token.id,
        "label": token.label,
        "category": getattr(token.category, "value", token.category),
        "operatorKind": token.operator.value if token.operator else None,
        "children": [token_to_dict(child) for child in token.children],
    }


def _decode(raw: Any, depth: int, max_depth: int) -> Token:
    if not isinstance(raw, dict):
        raise ValidationError(
            f"Expected dict, got {type(raw).__name__}",
            field="token",
            value=raw,
        )
    if depth > max_depth:
        # Stop before recursing further; TreeLimits reports the same bound
        raise OversizeTreeError(f"Tree exceeds depth {max_depth}", limit=max_depth)

    operator_value = raw.get("operatorKind", raw.get("operator"))
    category_value = raw.get("category")
    if category_value is None and operator_value is not None:
        category = Category.OPERATOR
    elif category_value is None:
        category = None
    else:
        category = Category.parse(category_value)

    children_raw = raw.get("children") or []
    if not isinstance(children_raw, list):
        raise ValidationError(
            "children must be a list",
            field="children",
            value=children_raw,
        )
    children = []
    for child in children_raw:
        children.append(_decode(child, depth + 1, max_depth))

    token_id = raw.get("id")
    if category == Category.OPERATOR:
        if operator_value is None:
            raise MalformedTreeError("Operator token is missing its operator kind", token_id=token_id)
        kind = OperatorKind.parse(operator_value)
        if not token_id:
            if children:
                return Token.operator_node(kind, children)
            return Token.marker(kind)
        return Token(
            id=str(token_id),
            label=str(raw.get("label") or kind.value),
            category=category,
            operator=kind,
            children=children,
        )

    if operator_value is not None:
        raise MalformedTreeError(
            "Only Operator tokens may carry an operator kind",
            token_id=token_id,
            context={"category": getattr(category, "value", category)},
        )

    if not token_id or not isinstance(token_id, (str, int)):
        raise ValidationError(
            "Missing required field: id",
            field="id",
            value=token_id,
        )
    return Token(
        id=str(token_id),
        label=str(raw.get("label") or token_id),
        category=category,
        children=children,
    )
