"""
News Query Configuration

Centralized configuration for the query compilation pipeline.
All environment variables MUST be defined here. No os.getenv() calls allowed elsewhere.

Components receive their section as a constructor argument and fall back to
the module-level ``settings``, so tests can pass fixtures directly.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from news_query.core.types import TreeLimits, UnknownCategoryError
from news_query.models.token import Category


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _optional_env(name: str, default: str = "") -> str:
    """Get an optional environment variable with a default."""
    return os.environ.get(name, default)


def _optional_env_int(name: str, default: int, maximum: Optional[int] = None) -> int:
    """Get an optional positive integer environment variable with a default."""
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ConfigurationError(f"Invalid integer value for {name}: {value}")
    if parsed <= 0:
        raise ConfigurationError(f"{name} must be positive, got {parsed}")
    if maximum is not None and parsed > maximum:
        raise ConfigurationError(f"{name} must be at most {maximum}, got {parsed}")
    return parsed


def _optional_env_list(name: str) -> list[str]:
    """Get a comma separated environment variable as a list of stripped items."""
    value = os.environ.get(name, "")
    return [item.strip() for item in value.split(",") if item.strip()]


def _optional_env_mapping(name: str, default: dict[str, str]) -> dict[str, str]:
    """
    Get a ``key=value,key=value`` environment variable as a dict.

    Order of the entries is preserved.
    """
    items = _optional_env_list(name)
    if not items:
        return dict(default)
    mapping: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip() or not value.strip():
            raise ConfigurationError(f"Invalid entry for {name}: {item!r} (expected key=value)")
        mapping[key.strip()] = value.strip()
    return mapping


# Tree stages recurse once per level; stays well under the interpreter's recursion limit
MAX_DEPTH_CEILING = 400

DEFAULT_DESTINATIONS = {
    "NewsWire": "NEWSWIRE",
    "WebNews": "WEBNEWS",
    "Research": "RESEARCH",
    "Filings": "FILINGS",
}


@dataclass(frozen=True)
class CategoryConfig:
    """Closed set of token categories accepted by the pipeline."""
    enabled: frozenset = field(default_factory=lambda: frozenset(Category))

    def require(self, category: object, token_id: Optional[str] = None) -> Category:
        """Return the category if it is in the closed set, else raise UnknownCategoryError."""
        if not isinstance(category, Category) or category not in self.enabled:
            raise UnknownCategoryError(
                getattr(category, "value", category),
                token_id=token_id,
            )
        return category


@dataclass(frozen=True)
class ExtractorConfig:
    """Entity extractor configuration."""
    max_entities: int = 100


@dataclass(frozen=True)
class DestinationConfig:
    """Repository identifier to wire destination code lookup."""
    table: dict = field(default_factory=lambda: dict(DEFAULT_DESTINATIONS))
    separator: str = " "


@dataclass(frozen=True)
class FilterConfig:
    """Filter markup configuration."""
    namespace_prefix: str = ""  # e.g. "req" renders <req:Filter>
    default_filter_name: str = "filter"


@dataclass(frozen=True)
class Settings:
    """Root configuration container."""
    limits: TreeLimits
    categories: CategoryConfig
    extractor: ExtractorConfig
    destinations: DestinationConfig
    filter: FilterConfig


def _load_categories() -> CategoryConfig:
    names = _optional_env_list("NEWS_QUERY_CATEGORIES")
    if not names:
        return CategoryConfig()
    try:
        enabled = {Category.parse(name) for name in names}
    except UnknownCategoryError as e:
        raise ConfigurationError(f"Invalid value in NEWS_QUERY_CATEGORIES: {e}") from e
    # Structural categories are always needed by the pipeline itself
    enabled |= {Category.OPERATOR, Category.EMPTY}
    return CategoryConfig(enabled=frozenset(enabled))


def _load_settings() -> Settings:
    """Load all settings from environment variables."""
    limits = TreeLimits(
        max_nodes=_optional_env_int("NEWS_QUERY_MAX_NODES", 10_000),
        max_depth=_optional_env_int("NEWS_QUERY_MAX_DEPTH", 200, maximum=MAX_DEPTH_CEILING),
    )

    extractor = ExtractorConfig(
        max_entities=_optional_env_int("NEWS_QUERY_MAX_ENTITIES", 100),
    )

    destinations = DestinationConfig(
        table=_optional_env_mapping("NEWS_QUERY_DESTINATIONS", DEFAULT_DESTINATIONS),
        separator=_optional_env("NEWS_QUERY_DESTINATION_SEPARATOR", " "),
    )

    filter_config = FilterConfig(
        namespace_prefix=_optional_env("NEWS_QUERY_NAMESPACE_PREFIX", ""),
        default_filter_name=_optional_env("NEWS_QUERY_FILTER_NAME", "filter"),
    )

    return Settings(
        limits=limits,
        categories=_load_categories(),
        extractor=extractor,
        destinations=destinations,
        filter=filter_config,
    )


settings = _load_settings()
