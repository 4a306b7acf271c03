"""
Filter Serializer

Renders a compiled tree as the filter markup embedded in retrieval and
alert requests, and pairs it with the destination value.

Markup shape:
  <Filter name="filter" searchIn="HeadlineOnly" mode="Normal">
    <Operator kind="OR">
      <Token category="Organisation" id="..." label="..."/>
      <Token category="Portfolio" id="..." label="...">...</Token>
    </Operator>
  </Filter>

Every attribute value is escaped; element names may carry a configured
namespace prefix (e.g. "req" renders <req:Filter>).
"""
from __future__ import annotations

import logging
import re
from typing import Optional, Sequence, Union
from xml.sax.saxutils import escape

from news_query.compiler.compiler import ExpressionCompiler, TokenInput
from news_query.config import ConfigurationError, DestinationConfig, FilterConfig, settings
from news_query.core.types import EncodingError
from news_query.models.expression import FilterFragment, FilterMode, OperatorPriority, SearchIn
from news_query.models.token import Token
from news_query.serializer.destination import build_destination_value

logger = logging.getLogger(__name__)

# Characters XML 1.0 cannot carry, even escaped
INVALID_XML_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")

NCNAME_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9._-]*$")

ATTRIBUTE_ENTITIES = {'"': "&quot;", "'": "&apos;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}


def escape_attribute(value: object) -> str:
    """
    Escape a value for use inside a double-quoted attribute.

    Raises:
        EncodingError: If the value holds characters XML cannot represent.
    """
    text = value.value if hasattr(value, "value") else str(value)
    match = INVALID_XML_CHARS.search(text)
    if match:
        raise EncodingError(
            f"Character U+{ord(match.group()):04X} cannot be encoded in filter markup",
            value=text,
        )
    return escape(text, ATTRIBUTE_ENTITIES)


class FilterSerializer:
    """Builds filter markup and destination values for retrieval requests."""

    def __init__(
        self,
        config: Optional[FilterConfig] = None,
        destinations: Optional[DestinationConfig] = None,
        compiler: Optional[ExpressionCompiler] = None,
    ) -> None:
        self._config = config or settings.filter
        self._destinations = destinations or settings.destinations
        self._compiler = compiler or ExpressionCompiler()

        prefix = self._config.namespace_prefix
        if prefix and not NCNAME_PATTERN.match(prefix):
            raise ConfigurationError(f"Invalid namespace prefix for filter markup: {prefix!r}")
        self._prefix = f"{prefix}:" if prefix else ""

    def build_destination_value(self, repository_ids: Sequence[str]) -> str:
        return build_destination_value(repository_ids, self._destinations)

    def compile_filter(
        self,
        tokens: TokenInput,
        filter_name: Optional[str] = None,
        search_in: Union[SearchIn, str] = SearchIn.HEADLINE_ONLY,
        mode: Union[FilterMode, str] = FilterMode.NORMAL,
    ) -> str:
        """
        Compile the tokens and render them as filter markup.

        Raises:
            MalformedTreeError, UnknownCategoryError, OversizeTreeError:
                Propagated from compilation.
            EncodingError: If a label or id cannot be represented in XML.
        """
        root = self._compiler.compile(tokens, OperatorPriority.BOOLEAN)
        attributes = self._attributes(
            name=filter_name or self._config.default_filter_name,
            searchIn=SearchIn(search_in),
            mode=FilterMode(mode),
        )

        element = self._element("Filter")
        if root.is_empty:
            return f"<{element}{attributes}/>"

        parts: list[str] = [f"<{element}{attributes}>"]
        self._render(root, parts)
        parts.append(f"</{element}>")
        markup = "".join(parts)

        logger.debug(
            "Rendered filter for %s",
            root.id,
            extra={"filter_name": filter_name, "length": len(markup)},
        )
        return markup

    def build_fragment(
        self,
        tokens: TokenInput,
        repository_ids: Sequence[str],
        filter_name: Optional[str] = None,
        search_in: Union[SearchIn, str] = SearchIn.HEADLINE_ONLY,
        mode: Union[FilterMode, str] = FilterMode.NORMAL,
    ) -> FilterFragment:
        """Markup plus destination, as embedded together in a request."""
        name = filter_name or self._config.default_filter_name
        return FilterFragment(
            markup=self.compile_filter(tokens, name, search_in, mode),
            destination=self.build_destination_value(repository_ids),
            filter_name=name,
            search_in=SearchIn(search_in),
            mode=FilterMode(mode),
        )

    def _render(self, token: Token, parts: list[str]) -> None:
        if token.is_operator:
            element = self._element("Operator")
            parts.append(f"<{element}{self._attributes(kind=token.operator)}>")
        else:
            element = self._element("Token")
            attributes = self._attributes(
                category=token.category,
                id=token.id,
                label=token.label,
            )
            if not token.children:
                parts.append(f"<{element}{attributes}/>")
                return
            parts.append(f"<{element}{attributes}>")

        for child in token.children:
            self._render(child, parts)
        parts.append(f"</{element}>")

    def _element(self, name: str) -> str:
        return f"{self._prefix}{name}"

    @staticmethod
    def _attributes(**values: object) -> str:
        return "".join(f' {key}="{escape_attribute(value)}"' for key, value in values.items())
