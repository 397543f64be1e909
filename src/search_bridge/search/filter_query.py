"""Conjunctive scoping clauses (``fq``) for index selects."""

from __future__ import annotations

from collections.abc import Mapping
import logging

from search_bridge.search.fields import BUILTIN_SEARCH_TYPES, DATA_BAG_ITEM, FILTER_PARAM_MAP


logger = logging.getLogger(__name__)


class FilterQuery:
    """Accumulates required ``+field:value`` clauses.

    Semantic keys (``database``, ``type``, ``data_bag``) are translated through
    ``FILTER_PARAM_MAP``; keys outside that table are dropped. Setting the same
    key twice keeps the latest value.
    """

    def __init__(self) -> None:
        self._clauses: dict[str, str] = {}

    def filter_by(self, filters: Mapping[str, str]) -> FilterQuery:
        for key, value in filters.items():
            field = FILTER_PARAM_MAP.get(key)
            if field is None:
                logger.debug("Ignoring unknown filter key %r", key)
                continue
            self._clauses[field] = value
        return self

    def filter_by_database(self, database: str) -> FilterQuery:
        return self.filter_by({"database": database})

    def filter_by_type(self, kind: str) -> FilterQuery:
        """Scope to a builtin kind, or to the items of the data bag named ``kind``."""
        if kind in BUILTIN_SEARCH_TYPES:
            return self.filter_by({"type": kind})
        return self.filter_by({"type": DATA_BAG_ITEM, "data_bag": kind})

    @property
    def clauses(self) -> dict[str, str]:
        return dict(self._clauses)

    def render(self) -> str:
        return " ".join(f"+{field}:{value}" for field, value in self._clauses.items())

    def __str__(self) -> str:
        return self.render()

    def __bool__(self) -> bool:
        return bool(self._clauses)


def build_filter(filters: Mapping[str, str]) -> str:
    """Render ``filters`` as a space-joined conjunction of required clauses."""
    return FilterQuery().filter_by(filters).render()
