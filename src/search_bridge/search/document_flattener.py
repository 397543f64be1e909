"""Flatten store documents into the index's single ``content`` field.

A document such as ``{"name": "web", "run_list": ["a", "b"],
"attrs": {"port": 80}}`` becomes the tokens ``name__=__web``,
``run_list__=__a``, ``run_list__=__b``, ``attrs_port__=__80`` and
``port__=__80``: nested keys are joined with ``_`` and the leaf key is
emitted on its own as well, so both ``attrs_port:80`` and ``port:80`` match.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from search_bridge.search.fields import (
    CONTENT_FIELD,
    DATA_BAG_KEY,
    DATABASE_KEY,
    ID_KEY,
    TYPE_KEY,
    mangle,
)


def _render_value(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _add(fields: dict[str, list[str]], key: str, value: Any) -> None:
    rendered = _render_value(value)
    if rendered is None:
        return
    bucket = fields.setdefault(key, [])
    if rendered not in bucket:
        bucket.append(rendered)


def _walk(value: Any, path: str, leaf: str, fields: dict[str, list[str]]) -> None:
    if isinstance(value, Mapping):
        for key, nested in value.items():
            key = str(key)
            _walk(nested, f"{path}_{key}", key, fields)
        return
    if isinstance(value, (list, tuple, set)):
        for item in value:
            _walk(item, path, leaf, fields)
        return
    _add(fields, path, value)
    if leaf != path:
        _add(fields, leaf, value)


def flatten(document: Mapping[str, Any]) -> dict[str, list[str]]:
    """Return logical field -> values; store metadata keys (``_id``, ``_rev``) are skipped."""
    fields: dict[str, list[str]] = {}
    for key, value in document.items():
        key = str(key)
        if key.startswith("_"):
            continue
        _walk(value, key, key, fields)
    return fields


def content_tokens(document: Mapping[str, Any]) -> list[str]:
    return [mangle(field, value) for field, values in flatten(document).items() for value in values]


def build_index_fields(
    document_id: str,
    database: str,
    kind: str,
    document: Mapping[str, Any],
    *,
    data_bag: str | None = None,
) -> dict[str, str]:
    """Physical fields for one index document."""
    fields = {
        ID_KEY: document_id,
        DATABASE_KEY: database,
        TYPE_KEY: kind,
    }
    if data_bag is not None:
        fields[DATA_BAG_KEY] = data_bag
    fields[CONTENT_FIELD] = " ".join(content_tokens(document))
    return fields
