"""Full index rebuild from the document store.

A rebuild wipes the partition from the index, then walks the configured
kinds and resubmits every live object. A kind the store reports as not found
is recorded as ``failed`` and the walk continues; any other error aborts the
rebuild and propagates.

Callers must serialize rebuilds per partition: a delete from one rebuild
can race with the indexing pass of another.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import logging
from typing import Any

from search_bridge.adapters.document_store import DOCUMENT_ID_KEY, AbstractDocumentStore
from search_bridge.adapters.index_transport import AbstractIndexTransport
from search_bridge.domain.search import ReindexReport
from search_bridge.errors import DocumentNotFoundError
from search_bridge.observability.context import bind_partition
from search_bridge.observability.metrics import INDEXED_OBJECTS, REINDEX_OUTCOMES
from search_bridge.observability.tracing import create_span
from search_bridge.search.document_flattener import build_index_fields
from search_bridge.search.fields import DATA_BAG, DATA_BAG_ITEM
from search_bridge.search.update_xml import add_document_xml, commit_xml, delete_database_xml


logger = logging.getLogger(__name__)

# Environments are searchable but not part of the rebuild walk; pass
# ``kinds=`` to include them.
REINDEX_KINDS: tuple[str, ...] = ("client", "node", "role")


def data_bag_item_body(document: Mapping[str, Any], bag_name: str) -> dict[str, Any]:
    """Indexable view of a stored data bag item: its raw data plus type and bag name."""
    raw_data = document.get("raw_data")
    body = dict(raw_data) if isinstance(raw_data, Mapping) else dict(document)
    body["chef_type"] = DATA_BAG_ITEM
    body["data_bag"] = bag_name
    return body


class IndexMaintainer:
    """Rebuilds the index for a partition from the document store."""

    def __init__(
        self,
        index: AbstractIndexTransport,
        store: AbstractDocumentStore,
        *,
        kinds: Sequence[str] = REINDEX_KINDS,
    ) -> None:
        self.index = index
        self.store = store
        self.kinds = tuple(kinds)

    async def commit(self) -> None:
        await self.index.update(commit_xml())

    async def delete_database(self, database: str) -> None:
        """Delete every index entry of ``database`` and make the deletion visible."""
        await self.index.update(delete_database_xml(database))
        await self.commit()

    async def add_to_index(
        self,
        kind: str,
        document: Mapping[str, Any],
        *,
        data_bag: str | None = None,
        database: str | None = None,
    ) -> None:
        doc_id = document.get(DOCUMENT_ID_KEY)
        if doc_id is None:
            raise ValueError(f"Cannot index a {kind} object without {DOCUMENT_ID_KEY}")
        body = data_bag_item_body(document, data_bag) if data_bag is not None else document
        fields = build_index_fields(str(doc_id), database or self.store.database, kind, body, data_bag=data_bag)
        await self.index.update(add_document_xml(fields))
        INDEXED_OBJECTS.labels(kind=kind).inc()

    async def reindex_all(self, kind: str, database: str | None = None) -> bool:
        """Resubmit every object of ``kind``; False when the store has none to list."""
        try:
            items = await self.store.list_all(kind)
            logger.info("Reloading %d %s objects into the indexer", len(items), kind)
            for item in items:
                await self.add_to_index(kind, item, database=database)
        except DocumentNotFoundError:
            logger.warning(
                "Could not load %s objects from the document store for re-indexing "
                "(this is ok if you don't have any of these)",
                kind,
            )
            return False
        except Exception:
            logger.critical("Error while loading %s objects back into the index", kind, exc_info=True)
            raise
        return True

    async def reindex_data_bags(self, database: str | None = None) -> None:
        """Resubmit every data bag and each of its items."""
        try:
            bags = await self.store.list_all(DATA_BAG)
            logger.info("Reloading %d %s objects into the indexer", len(bags), DATA_BAG)
            for bag in bags:
                name = bag.get("name")
                if not name:
                    logger.warning("Skipping data bag without a name: %s", bag.get(DOCUMENT_ID_KEY))
                    continue
                await self.add_to_index(DATA_BAG, bag, database=database)
                for item in await self.store.list_items_in_bag(name):
                    await self.add_to_index(DATA_BAG_ITEM, item, data_bag=name, database=database)
        except Exception:
            logger.critical("Error while loading %s objects back into the index", DATA_BAG, exc_info=True)
            raise

    async def rebuild_index(self, database: str | None = None) -> ReindexReport:
        """Wipe ``database`` (default: the store's) from the index and repopulate it.

        Returns:
            ReindexReport with one entry per configured kind plus ``data_bag``
        """
        database = database or self.store.database
        bind_partition(database)
        await self.delete_database(database)

        report = ReindexReport()
        for kind in self.kinds:
            with create_span("reindex.kind", attributes={"reindex.kind": kind}):
                succeeded = await self.reindex_all(kind, database)
            report.record(kind, succeeded)
            REINDEX_OUTCOMES.labels(kind=kind, outcome=report[kind].value).inc()

        with create_span("reindex.kind", attributes={"reindex.kind": DATA_BAG}):
            await self.reindex_data_bags(database)
        report.record(DATA_BAG, True)
        REINDEX_OUTCOMES.labels(kind=DATA_BAG, outcome=report[DATA_BAG].value).inc()

        logger.info("Rebuilt index for %s: %s", database, report.to_dict())
        return report
