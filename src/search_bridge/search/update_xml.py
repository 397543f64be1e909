"""Request bodies for the index update handler."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from xml.sax.saxutils import escape, quoteattr

from search_bridge.search.fields import DATABASE_KEY


START_XML = '<?xml version="1.0" encoding="UTF-8"?>\n'
START_DELETE_BY_QUERY = "<delete><query>"
END_DELETE_BY_QUERY = "</query></delete>\n"
COMMIT = "<commit/>\n"


def commit_xml() -> str:
    return f"{START_XML}{COMMIT}"


def delete_by_query_xml(query: str) -> str:
    return f"{START_XML}{START_DELETE_BY_QUERY}{escape(query)}{END_DELETE_BY_QUERY}"


def delete_database_xml(database: str) -> str:
    """Delete every document whose partition field equals ``database``."""
    return delete_by_query_xml(f"{DATABASE_KEY}:{database}")


def add_document_xml(fields: Mapping[str, str | Iterable[str]]) -> str:
    """Render a single ``<add><doc>``; iterable values become repeated fields."""
    parts: list[str] = []
    for name, value in fields.items():
        values = [value] if isinstance(value, str) else list(value)
        for item in values:
            parts.append(f"<field name={quoteattr(name)}>{escape(item)}</field>")
    return f"{START_XML}<add><doc>{''.join(parts)}</doc></add>\n"
