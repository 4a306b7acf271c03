"""
Token Model

The expression tree node shared by every pipeline stage.
Tokens are frozen dataclasses; every transformation builds new nodes.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Sequence, Union

from news_query.core.types import MalformedTreeError, UnknownCategoryError


class Category(str, Enum):
    """Closed set of token categories."""

    ORGANISATION = "Organisation"
    INSTRUMENT = "Instrument"
    LANGUAGE = "Language"
    PORTFOLIO = "Portfolio"
    OPERATOR = "Operator"
    TOPIC = "Topic"
    KEYWORD = "Keyword"
    EMPTY = "Empty"

    @classmethod
    def parse(cls, value: Union[str, "Category"]) -> "Category":
        """Convert a wire string to Category, raising on anything unrecognized."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            v = value.strip().lower()
            for member in cls:
                if member.value.lower() == v:
                    return member
        raise UnknownCategoryError(value)


class OperatorKind(str, Enum):
    """Boolean operator carried by Operator tokens."""

    AND = "AND"
    OR = "OR"
    NOT = "NOT"

    @classmethod
    def parse(cls, value: Union[str, "OperatorKind"]) -> "OperatorKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as e:
            raise MalformedTreeError(
                f"Unknown operator kind: {value!r}",
            ) from e


# Categories that may never carry children
LEAF_CATEGORIES = frozenset({
    Category.ORGANISATION,
    Category.INSTRUMENT,
    Category.LANGUAGE,
    Category.TOPIC,
    Category.KEYWORD,
    Category.EMPTY,
})


@dataclass(frozen=True)
class Token:
    """
    Node of the query expression tree.

    Equality is structural: category, operator, id and children recursively.
    The label is display-only and does not take part in comparisons; a
    missing label is stored as an empty string.

    An Operator token without children is a bare operator marker. Markers
    are legal only as elements of a raw forest (an infix stream such as
    ``A AND B OR NOT C``); ``validate()`` rejects them inside a tree.
    """

    id: str
    label: str = field(compare=False)
    category: Optional[Category]
    operator: Optional[OperatorKind] = None
    children: tuple[Token, ...] = ()

    def __post_init__(self) -> None:
        """Coerce collections and check the category/operator pairing."""
        if not self.id or not isinstance(self.id, str):
            raise MalformedTreeError("id must be non-empty string", token_id=self.id)

        if not isinstance(self.label, str):
            object.__setattr__(self, "label", "" if self.label is None else str(self.label))

        if isinstance(self.category, str) and not isinstance(self.category, Category):
            # Unrecognized strings are kept so traversal can report them
            try:
                object.__setattr__(self, "category", Category.parse(self.category))
            except UnknownCategoryError:
                pass

        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

        if self.category == Category.OPERATOR:
            if self.operator is None:
                raise MalformedTreeError(
                    "Operator token is missing its operator kind",
                    token_id=self.id,
                )
            if not isinstance(self.operator, OperatorKind):
                object.__setattr__(self, "operator", OperatorKind.parse(self.operator))
        elif self.operator is not None:
            raise MalformedTreeError(
                "Only Operator tokens may carry an operator kind",
                token_id=self.id,
                context={"category": self.category},
            )

    # ── Constructors ─────────────────────────────────────────────────────────

    @classmethod
    def leaf(cls, id: str, label: str, category: Union[Category, str]) -> Token:
        return cls(id=id, label=label, category=category)

    @classmethod
    def operator_node(cls, kind: OperatorKind, children: Sequence[Token]) -> Token:
        """
        Build an operator node with an id derived from its kind and children.

        Rebuilding the same structure always yields an equal node.
        """
        kind = OperatorKind.parse(kind)
        children = tuple(children)
        node_id = f"{kind.value}({','.join(c.id for c in children)})"
        return cls(
            id=node_id,
            label=kind.value,
            category=Category.OPERATOR,
            operator=kind,
            children=children,
        )

    @classmethod
    def marker(cls, kind: OperatorKind) -> Token:
        """Build a bare operator marker for use in a raw forest."""
        kind = OperatorKind.parse(kind)
        return cls(id=kind.value, label=kind.value, category=Category.OPERATOR, operator=kind)

    # ── Predicates ───────────────────────────────────────────────────────────

    @property
    def is_operator(self) -> bool:
        return self.category == Category.OPERATOR

    @property
    def is_marker(self) -> bool:
        return self.category == Category.OPERATOR and not self.children

    @property
    def is_empty(self) -> bool:
        return self.category == Category.EMPTY

    # ── Traversal ────────────────────────────────────────────────────────────

    def walk(self) -> Iterator[Token]:
        """Yield every node of the tree in pre-order, without recursion."""
        stack = [self]
        while stack:
            token = stack.pop()
            yield token
            stack.extend(reversed(token.children))

    def validate(self) -> None:
        """
        Check arity and leaf invariants over the whole tree.

        Raises:
            MalformedTreeError: On a bare marker inside the tree, NOT without
                exactly one child, AND/OR with fewer than two children, a
                leaf category with children, or a nested Empty token.
        """
        for token in self.walk():
            check_node_arity(token)
            if token is not self and token.is_empty:
                raise MalformedTreeError(
                    "Empty token may only appear as a root",
                    token_id=token.id,
                )

    def __repr__(self) -> str:
        if self.is_operator:
            inner = ", ".join(repr(c) for c in self.children)
            return f"{self.operator.value}({inner})"
        name = self.category.value if isinstance(self.category, Category) else self.category
        if self.children:
            inner = ", ".join(repr(c) for c in self.children)
            return f"{name}({self.id}: {inner})"
        return f"{name}({self.id})"


def check_node_arity(token: Token) -> None:
    """Check a single node (not its descendants) against the arity rules."""
    if token.is_operator:
        count = len(token.children)
        if count == 0:
            raise MalformedTreeError(
                f"Bare {token.operator.value} marker inside a tree",
                token_id=token.id,
            )
        if token.operator == OperatorKind.NOT and count != 1:
            raise MalformedTreeError(
                f"NOT requires exactly 1 child, got {count}",
                token_id=token.id,
            )
        if token.operator in (OperatorKind.AND, OperatorKind.OR) and count < 2:
            raise MalformedTreeError(
                f"{token.operator.value} requires at least 2 children, got {count}",
                token_id=token.id,
            )
    elif token.category in LEAF_CATEGORIES and token.children:
        raise MalformedTreeError(
            f"{token.category.value} token cannot have children",
            token_id=token.id,
        )


EMPTY = Token(id="__empty__", label="", category=Category.EMPTY)
