"""Exceptions raised by the search bridge."""

from __future__ import annotations


class SearchBridgeError(Exception):
    """Base class for every error raised by this package."""


class TransportError(SearchBridgeError):
    """An external collaborator was unreachable or answered with something unusable."""


class IndexTransportError(TransportError):
    """The search index failed a select or update request."""


class DocumentStoreError(TransportError):
    """The document store failed a request."""


class DocumentNotFoundError(DocumentStoreError):
    """The document store reported 404 for a listing or lookup."""


class UnknownSearchKindError(SearchBridgeError):
    """Search was requested for a kind that is neither builtin nor an existing data bag."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"I don't know how to search for {kind} data objects.")
