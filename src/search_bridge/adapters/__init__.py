"""Adapters layer - transports to the external index and document store.

Each port has an abstract base, an HTTP implementation and an in-memory
fake used by the service-layer tests.
"""

from .document_store import (
    AbstractDocumentStore,
    CouchDocumentStore,
    FakeDocumentStore,
)
from .index_transport import (
    AbstractIndexTransport,
    FakeIndexTransport,
    SolrHttpTransport,
)


__all__ = [
    "AbstractDocumentStore",
    "AbstractIndexTransport",
    "CouchDocumentStore",
    "FakeDocumentStore",
    "FakeIndexTransport",
    "SolrHttpTransport",
]
