"""
Core Type Definitions and Exceptions

Typed failures for the query compilation pipeline plus the tree size guard.
Failures carry a context dict so the calling adapter can decide how to
present them; nothing in the pipeline downgrades them to empty results.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from news_query.models.token import Token


class NewsQueryError(Exception):
    """Base exception for all query pipeline errors."""

    def __init__(
        self,
        message: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} [{ctx_str}]"
        return self.message


class ValidationError(NewsQueryError):
    """Raised when upstream token data is structurally invalid."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = repr(value)[:100]  # Truncate long values
        super().__init__(message, ctx)
        self.field = field
        self.value = value


class MalformedTreeError(NewsQueryError):
    """Raised when an operator node violates arity rules or a leaf has children."""

    def __init__(
        self,
        message: str,
        token_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        if token_id is not None:
            ctx["token_id"] = token_id
        super().__init__(message, ctx)
        self.token_id = token_id


class UnknownCategoryError(NewsQueryError):
    """Raised when a token carries a category outside the configured set."""

    def __init__(
        self,
        category: Any,
        token_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["category"] = category
        if token_id is not None:
            ctx["token_id"] = token_id
        super().__init__("Unknown token category", ctx)
        self.category = category
        self.token_id = token_id


class OversizeTreeError(NewsQueryError):
    """Raised when a tree exceeds the configured node count or depth."""

    def __init__(
        self,
        message: str,
        limit: int,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["limit"] = limit
        super().__init__(message, ctx)
        self.limit = limit


class UnknownDestinationError(NewsQueryError):
    """Raised when a repository identifier has no destination code."""

    def __init__(
        self,
        repository: str,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        ctx["repository"] = repository
        super().__init__("No destination code for repository", ctx)
        self.repository = repository


class EncodingError(NewsQueryError):
    """Raised when filter content cannot be carried by the markup."""

    def __init__(
        self,
        message: str,
        value: Any = None,
        context: Optional[dict[str, Any]] = None,
    ) -> None:
        ctx = context or {}
        if value is not None:
            ctx["value"] = repr(value)[:100]
        super().__init__(message, ctx)
        self.value = value


@dataclass(frozen=True)
class TreeLimits:
    """Upper bounds on tree size, checked before any recursive stage runs."""

    max_nodes: int = 10_000
    max_depth: int = 200

    def check(self, roots: Iterable[Token]) -> int:
        """
        Count nodes across a forest without recursion.

        Returns the total node count.

        Raises:
            OversizeTreeError: If the node count or nesting depth exceeds
                the configured limits.
        """
        count = 0
        stack = [(root, 1) for root in roots]
        while stack:
            token, depth = stack.pop()
            count += 1
            if count > self.max_nodes:
                raise OversizeTreeError(
                    f"Tree exceeds {self.max_nodes} nodes",
                    limit=self.max_nodes,
                )
            if depth > self.max_depth:
                raise OversizeTreeError(
                    f"Tree exceeds depth {self.max_depth}",
                    limit=self.max_depth,
                    context={"token_id": token.id},
                )
            stack.extend((child, depth + 1) for child in token.children)
        return count
