"""
Destination Value Builder

Maps logical repository identifiers (e.g. "NewsWire") to the wire-level
destination code the retrieval provider expects.
"""
from __future__ import annotations

from typing import Optional, Sequence

from news_query.config import DestinationConfig, settings
from news_query.core.types import UnknownDestinationError


def build_destination_value(
    repository_ids: Sequence[str],
    config: Optional[DestinationConfig] = None,
) -> str:
    """
    Join the destination codes of the given repositories.

    Input order and duplicates are preserved; an empty input yields "".

    Raises:
        UnknownDestinationError: If a repository has no entry in the table.
    """
    config = config or settings.destinations
    if isinstance(repository_ids, str):
        repository_ids = [repository_ids]

    codes: list[str] = []
    for repository in repository_ids:
        code = config.table.get(repository) if isinstance(repository, str) else None
        if code is None:
            raise UnknownDestinationError(
                repository,
                context={"known": ",".join(config.table)},
            )
        codes.append(code)

    return config.separator.join(codes)
