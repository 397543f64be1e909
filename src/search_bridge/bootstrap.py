"""Wire settings into transports and services."""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass

from search_bridge.adapters.document_store import AbstractDocumentStore, CouchDocumentStore
from search_bridge.adapters.index_transport import AbstractIndexTransport, SolrHttpTransport
from search_bridge.config import Settings
from search_bridge.service_layer.index_maintainer import REINDEX_KINDS, IndexMaintainer
from search_bridge.service_layer.search_service import SearchService


@dataclass(slots=True)
class Services:
    search: SearchService
    maintainer: IndexMaintainer


def build_transports(settings: Settings) -> tuple[AbstractIndexTransport, AbstractDocumentStore]:
    index = SolrHttpTransport(settings.solr_url, timeout=float(settings.http_timeout))
    store = CouchDocumentStore(settings.couchdb_url, settings.couchdb_database, timeout=float(settings.http_timeout))
    return index, store


@asynccontextmanager
async def build_services(
    settings: Settings,
    *,
    index: AbstractIndexTransport | None = None,
    store: AbstractDocumentStore | None = None,
    reindex_kinds: Sequence[str] = REINDEX_KINDS,
) -> AsyncIterator[Services]:
    """Yield services bound to HTTP transports (or the ones given), closing them on exit."""
    if index is None or store is None:
        default_index, default_store = build_transports(settings)
        index = index or default_index
        store = store or default_store

    async with index, store:
        yield Services(
            search=SearchService(index, store, default_rows=settings.search_default_rows),
            maintainer=IndexMaintainer(index, store, kinds=reindex_kinds),
        )
