"""Service layer - use-case orchestration over the index and document store.

- SearchService: scoped, translated search with hydration
- IndexMaintainer: full index rebuild for a partition
"""

from .index_maintainer import REINDEX_KINDS, IndexMaintainer
from .search_service import SearchService, build_select_params, order_by_ids


__all__ = [
    "REINDEX_KINDS",
    "IndexMaintainer",
    "SearchService",
    "build_select_params",
    "order_by_ids",
]
