"""Field names and request defaults shared by query translation and indexing.

Every object is stored under a single physical index field (``content``).
The logical field name travels inside the value, joined to it by
``FIELD_VALUE_SEPARATOR``; the handful of ``X_CHEF_*_CHEF_X`` fields carry
identity and scoping and are never mangled.
"""

from __future__ import annotations


ID_KEY = "X_CHEF_id_CHEF_X"
DATABASE_KEY = "X_CHEF_database_CHEF_X"
TYPE_KEY = "X_CHEF_type_CHEF_X"
DATA_BAG_KEY = "data_bag"

CONTENT_FIELD = "content"
FIELD_VALUE_SEPARATOR = "__=__"

# Escape text understood by the index query parser; sorts after every
# indexable value, so it stands in for an open upper range bound.
RANGE_MAX_SENTINEL = "\\ufff0"

MATCH_ALL = "*:*"

BUILTIN_SEARCH_TYPES: tuple[str, ...] = ("role", "node", "client", "environment")
DATA_BAG = "data_bag"
DATA_BAG_ITEM = "data_bag_item"

VALID_PARAMS: tuple[str, ...] = ("start", "rows", "sort", "q", "type")

DEFAULT_PARAMS: dict[str, str | int] = {
    "start": 0,
    "rows": 1000,
    "sort": f"{ID_KEY} asc",
    "wt": "json",
    "indent": "off",
}

# Semantic filter name -> physical index field
FILTER_PARAM_MAP: dict[str, str] = {
    "database": DATABASE_KEY,
    "type": TYPE_KEY,
    "data_bag": DATA_BAG_KEY,
}


def mangle(field: str, value: str) -> str:
    """Fold a logical field name into its value (``field__=__value``)."""
    return f"{field}{FIELD_VALUE_SEPARATOR}{value}"
