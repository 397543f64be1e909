"""Document store abstractions and implementations.

The store is the system of record: search hydrates index hits from it by
primary key, and a rebuild walks it kind by kind. Objects are plain JSON
documents; the store's ``_id`` is the index's primary key.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
import json
import logging
from typing import Any
from urllib.parse import quote

import httpx

from search_bridge.errors import DocumentNotFoundError, DocumentStoreError
from search_bridge.observability.tracing import client_span
from search_bridge.search.fields import DATA_BAG


logger = logging.getLogger(__name__)

DOCUMENT_ID_KEY = "_id"

# Object kind -> CouchDB design document holding its views
DESIGN_DOCUMENTS: dict[str, str] = {
    "client": "clients",
    "node": "nodes",
    "role": "roles",
    "environment": "environments",
    DATA_BAG: "data_bags",
}


class AbstractDocumentStore(ABC):
    """Request/response boundary to the document store."""

    @property
    @abstractmethod
    def database(self) -> str:
        """Name of the partition this store reads from."""
        raise NotImplementedError

    @abstractmethod
    async def bulk_get(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        """Fetch documents by id in one round-trip; order is the store's choice."""
        raise NotImplementedError

    @abstractmethod
    async def list_all(self, kind: str) -> list[dict[str, Any]]:
        """List every live document of ``kind``."""
        raise NotImplementedError

    @abstractmethod
    async def list_bag_names(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    async def list_items_in_bag(self, name: str) -> list[dict[str, Any]]:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Optional hook for releasing connections."""

        return

    async def __aenter__(self) -> AbstractDocumentStore:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class CouchDocumentStore(AbstractDocumentStore):
    """Document store backed by CouchDB views and ``_all_docs``."""

    def __init__(
        self,
        base_url: str,
        database: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._database = database
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @property
    def database(self) -> str:
        return self._database

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=min(self._timeout, 10.0)))
        return self._client

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{quote(self._database, safe='')}{path}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = self._url(path)
        try:
            with client_span("couchdb", method, url):
                response = await self._get_client().request(method, url, params=params, json=payload)
        except httpx.HTTPError as exc:
            raise DocumentStoreError(f"Failed to reach document store at {url}: {exc}") from exc

        if response.status_code == httpx.codes.NOT_FOUND:
            raise DocumentNotFoundError(f"Not Found: {method} {url}")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise DocumentStoreError(f"HTTP {response.status_code} for {method} {url}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise DocumentStoreError(f"Document store returned invalid JSON for {method} {url}") from exc
        if not isinstance(body, dict):
            raise DocumentStoreError(f"Unexpected document store payload for {method} {url}")
        return body

    @staticmethod
    def _rows(body: dict[str, Any]) -> list[dict[str, Any]]:
        rows = body.get("rows")
        if not isinstance(rows, list):
            raise DocumentStoreError("Document store response is missing 'rows'")
        return [row for row in rows if isinstance(row, dict)]

    async def _view(self, design: str, view: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        body = await self._request("GET", f"/_design/{design}/_view/{view}", params=params)
        return self._rows(body)

    async def bulk_get(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        if not ids:
            return []
        body = await self._request(
            "POST",
            "/_all_docs",
            params={"include_docs": "true"},
            payload={"keys": list(ids)},
        )
        # Rows for deleted or unknown ids carry "error" and no doc
        return [row["doc"] for row in self._rows(body) if isinstance(row.get("doc"), dict)]

    async def list_all(self, kind: str) -> list[dict[str, Any]]:
        design = DESIGN_DOCUMENTS.get(kind, f"{kind}s")
        rows = await self._view(design, "all")
        return [row["value"] for row in rows if isinstance(row.get("value"), dict)]

    async def list_bag_names(self) -> list[str]:
        rows = await self._view(DESIGN_DOCUMENTS[DATA_BAG], "all_id")
        return [str(row["key"]) for row in rows if row.get("key") is not None]

    async def list_items_in_bag(self, name: str) -> list[dict[str, Any]]:
        key = json.dumps(name)
        rows = await self._view(
            DESIGN_DOCUMENTS[DATA_BAG],
            "entries",
            params={"include_docs": "true", "startkey": key, "endkey": key},
        )
        return [row["doc"] for row in rows if isinstance(row.get("doc"), dict)]

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class FakeDocumentStore(AbstractDocumentStore):
    """In-memory document store for tests.

    ``errors`` maps an operation key (a kind name, ``"bulk_get"``,
    ``"bag_names"`` or ``"bag:<name>"``) to the exception it should raise.
    ``bulk_get`` answers in storage order, not request order.
    """

    def __init__(self, database: str = "chef") -> None:
        self._database = database
        self.documents: dict[str, list[dict[str, Any]]] = {}
        self.bags: dict[str, list[dict[str, Any]]] = {}
        self.errors: dict[str, Exception] = {}
        self.bulk_get_calls: list[list[str]] = []
        self.list_calls: list[str] = []

    @property
    def database(self) -> str:
        return self._database

    def add(self, kind: str, document: dict[str, Any]) -> None:
        self.documents.setdefault(kind, []).append(document)

    def add_bag(self, name: str, items: Sequence[dict[str, Any]] = ()) -> None:
        self.bags[name] = list(items)
        self.add(DATA_BAG, {DOCUMENT_ID_KEY: f"data_bag_{name}", "name": name, "chef_type": DATA_BAG})

    def _raise_for(self, key: str) -> None:
        error = self.errors.get(key)
        if error is not None:
            raise error

    def _all_documents(self) -> list[dict[str, Any]]:
        stored = [doc for docs in self.documents.values() for doc in docs]
        stored.extend(item for items in self.bags.values() for item in items)
        return stored

    async def bulk_get(self, ids: Sequence[str]) -> list[dict[str, Any]]:
        self.bulk_get_calls.append(list(ids))
        self._raise_for("bulk_get")
        wanted = set(ids)
        return [doc for doc in self._all_documents() if doc.get(DOCUMENT_ID_KEY) in wanted]

    async def list_all(self, kind: str) -> list[dict[str, Any]]:
        self.list_calls.append(kind)
        self._raise_for(kind)
        return list(self.documents.get(kind, []))

    async def list_bag_names(self) -> list[str]:
        self._raise_for("bag_names")
        return list(self.bags)

    async def list_items_in_bag(self, name: str) -> list[dict[str, Any]]:
        self._raise_for(f"bag:{name}")
        if name not in self.bags:
            raise DocumentNotFoundError(f"Not Found: data bag {name}")
        return list(self.bags[name])
