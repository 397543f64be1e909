"""Search index transport abstractions and implementations.

The index is reached through two request handlers: ``select`` for queries
(JSON responses) and ``update`` for XML update bodies (add, delete-by-query,
commit). Query text handed to ``select`` must already be index-native.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
import logging
from typing import Any

import httpx
from pydantic import ValidationError

from search_bridge.domain.search import SelectResponse
from search_bridge.errors import IndexTransportError
from search_bridge.observability.tracing import client_span


logger = logging.getLogger(__name__)

SELECT_PATH = "/solr/select"
UPDATE_PATH = "/solr/update"
XML_CONTENT_TYPE = "text/xml; charset=utf-8"


def parse_select_response(payload: Any) -> SelectResponse:
    try:
        return SelectResponse.model_validate(payload)
    except ValidationError as exc:
        raise IndexTransportError(f"Malformed index select response: {exc}") from exc


class AbstractIndexTransport(ABC):
    """Request/response boundary to the search index."""

    @abstractmethod
    async def select(self, params: Mapping[str, Any]) -> SelectResponse:
        """Run a select with ``q``, ``fq``, ``sort``, ``start``, ``rows``, ``wt`` and ``indent``."""
        raise NotImplementedError

    @abstractmethod
    async def update(self, xml_body: str) -> None:
        """Post an XML update body (add, delete-by-query, commit)."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Optional hook for releasing connections."""

        return

    async def __aenter__(self) -> AbstractIndexTransport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class SolrHttpTransport(AbstractIndexTransport):
    """Index transport speaking the Solr HTTP API through httpx."""

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self._timeout, connect=min(self._timeout, 10.0)))
        return self._client

    async def select(self, params: Mapping[str, Any]) -> SelectResponse:
        url = f"{self.base_url}{SELECT_PATH}"
        with client_span("solr", "GET", url):
            try:
                response = await self._get_client().get(url, params=dict(params))
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise IndexTransportError(f"Index select failed for {url}: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise IndexTransportError(f"Index select returned invalid JSON from {url}") from exc
        return parse_select_response(payload)

    async def update(self, xml_body: str) -> None:
        url = f"{self.base_url}{UPDATE_PATH}"
        with client_span("solr", "POST", url):
            try:
                response = await self._get_client().post(
                    url,
                    content=xml_body.encode("utf-8"),
                    headers={"Content-Type": XML_CONTENT_TYPE},
                )
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise IndexTransportError(f"Index update failed for {url}: {exc}") from exc

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None


class FakeIndexTransport(AbstractIndexTransport):
    """In-memory index transport recording every request (for tests)."""

    def __init__(self, response: SelectResponse | Mapping[str, Any] | None = None) -> None:
        if response is None:
            response = {"responseHeader": {}, "response": {"docs": [], "start": 0, "numFound": 0}}
        self.response = response if isinstance(response, SelectResponse) else parse_select_response(response)
        self.select_calls: list[dict[str, Any]] = []
        self.updates: list[str] = []
        self.select_error: Exception | None = None
        self.update_error: Exception | None = None

    async def select(self, params: Mapping[str, Any]) -> SelectResponse:
        self.select_calls.append(dict(params))
        if self.select_error is not None:
            raise self.select_error
        return self.response

    async def update(self, xml_body: str) -> None:
        self.updates.append(xml_body)
        if self.update_error is not None:
            raise self.update_error
