"""Search orchestration layer.

Combines filter building, query translation, the index select and hydration
from the document store into one paginated result.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from typing import Any

from search_bridge.adapters.document_store import DOCUMENT_ID_KEY, AbstractDocumentStore
from search_bridge.adapters.index_transport import AbstractIndexTransport
from search_bridge.domain.search import PageResult, SearchParams
from search_bridge.errors import IndexTransportError, SearchBridgeError, UnknownSearchKindError
from search_bridge.observability.context import bind_partition
from search_bridge.observability.metrics import SEARCH_LATENCY, SEARCH_REQUESTS, track_latency
from search_bridge.observability.tracing import create_span
from search_bridge.search.fields import BUILTIN_SEARCH_TYPES, DEFAULT_PARAMS, ID_KEY, MATCH_ALL
from search_bridge.search.filter_query import FilterQuery
from search_bridge.search.query_transformer import transform_search_query


logger = logging.getLogger(__name__)


def build_select_params(search_params: SearchParams, filter_query: FilterQuery, query: str) -> dict[str, Any]:
    """Index select parameters: defaults for anything the caller left unset."""
    options: dict[str, Any] = dict(DEFAULT_PARAMS)
    options.update(search_params.paging())
    options["fq"] = filter_query.render()
    options["q"] = query
    return options


def order_by_ids(objects: Sequence[dict[str, Any]], ids: Sequence[str]) -> list[dict[str, Any]]:
    """Arrange store documents in index result order.

    Ids the store did not return are dropped, and so are documents without
    an id, so the page never holds more objects than the index returned.
    """
    by_id: dict[str, dict[str, Any]] = {}
    unkeyed: list[dict[str, Any]] = []
    for obj in objects:
        doc_id = obj.get(DOCUMENT_ID_KEY)
        if doc_id is None:
            unkeyed.append(obj)
        else:
            by_id.setdefault(str(doc_id), obj)

    ordered = [by_id[doc_id] for doc_id in ids if doc_id in by_id]
    missing = len(ids) - len(ordered)
    if missing:
        logger.warning("%d of %d indexed ids were not returned by the document store", missing, len(ids))
    if unkeyed:
        logger.warning("Dropping %d document store results without %s", len(unkeyed), DOCUMENT_ID_KEY)
    return ordered


class SearchService:
    """High-level search orchestration service.

    Each call makes exactly one index select and, when the page is not empty,
    exactly one bulk fetch from the document store. Nothing is cached or
    retried here.
    """

    def __init__(
        self,
        index: AbstractIndexTransport,
        store: AbstractDocumentStore,
        *,
        default_rows: int = 20,
    ) -> None:
        self.index = index
        self.store = store
        self.default_rows = default_rows

    @property
    def database(self) -> str:
        return self.store.database

    def build_filter(self, search_params: SearchParams) -> FilterQuery:
        filter_query = FilterQuery().filter_by_database(self.database)
        if search_params.type:
            filter_query.filter_by_type(search_params.type)
        return filter_query

    async def search(self, params: SearchParams | Mapping[str, Any]) -> PageResult:
        """Search the current partition and hydrate the page from the store.

        Args:
            params: ``start``, ``rows``, ``sort``, ``q`` and ``type``; any
                other key is ignored.

        Returns:
            PageResult with hydrated objects, start offset and total hits
        """
        search_params = params if isinstance(params, SearchParams) else SearchParams.from_mapping(params)
        filter_query = self.build_filter(search_params)
        query = transform_search_query(MATCH_ALL if search_params.q is None else search_params.q)
        select_params = build_select_params(search_params, filter_query, query)

        bind_partition(self.database, kind=search_params.type)
        kind = search_params.type or "any"
        with track_latency(SEARCH_LATENCY, kind=kind):
            try:
                page = await self.execute_query(select_params)
            except SearchBridgeError:
                SEARCH_REQUESTS.labels(kind=kind, status="error").inc()
                raise
        SEARCH_REQUESTS.labels(kind=kind, status="ok").inc()
        return page

    async def execute_query(self, select_params: Mapping[str, Any]) -> PageResult:
        """Run a prepared select and hydrate the hits; callers page for themselves."""
        with create_span("index.select"):
            results = await self.index.select(select_params)

        docs = results.response.docs
        logger.debug(
            "Bulk loading from %s: %d of %d matching documents",
            self.database,
            len(docs),
            results.response.num_found,
        )

        objects: list[dict[str, Any]] = []
        if docs:
            ids = [self._document_id(doc) for doc in docs]
            with create_span("store.bulk_get", attributes={"search.ids": len(ids)}):
                fetched = await self.store.bulk_get(ids)
            objects = order_by_ids(fetched, ids)
            logger.debug("Bulk get returned %d objects", len(objects))

        return PageResult(
            objects=objects,
            start=results.response.start,
            total=results.response.num_found,
            response_header=results.response_header,
        )

    @staticmethod
    def _document_id(doc: Mapping[str, Any]) -> str:
        doc_id = doc.get(ID_KEY)
        if doc_id is None:
            raise IndexTransportError(f"Index returned a document without {ID_KEY}")
        return str(doc_id)

    async def valid_indexes(self) -> list[str]:
        """Every searchable kind: data bag names followed by the builtin kinds."""
        bag_names = await self.store.list_bag_names()
        return [*bag_names, *BUILTIN_SEARCH_TYPES]

    async def list_indexes(self, base_url: str) -> dict[str, str]:
        base = base_url.rstrip("/")
        return {kind: f"{base}/search/{kind}" for kind in await self.valid_indexes()}

    async def search_index(self, kind: str, params: Mapping[str, Any] | None = None) -> PageResult:
        """Search one kind, rejecting kinds that are neither builtin nor an existing data bag."""
        # Bag names come from the store; this lookup runs before any index call.
        if kind not in BUILTIN_SEARCH_TYPES and kind not in await self.store.list_bag_names():
            raise UnknownSearchKindError(kind)

        search_params = SearchParams.from_mapping({**(params or {}), "type": kind})
        if search_params.rows is None:
            search_params = search_params.model_copy(update={"rows": self.default_rows})
        return await self.search(search_params)
