"""Domain layer - pure value objects with no infrastructure dependencies.

Contains the request, page and reindex report models shared by the
service layer and the adapters. Value objects are immutable pydantic models.
"""

from search_bridge.domain.search import (
    PageResult,
    ReindexOutcome,
    ReindexReport,
    SearchParams,
    SelectResponse,
    SelectResultSet,
)


__all__ = [
    "PageResult",
    "ReindexOutcome",
    "ReindexReport",
    "SearchParams",
    "SelectResponse",
    "SelectResultSet",
]
