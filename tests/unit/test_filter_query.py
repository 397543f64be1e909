"""Unit tests for filter clause construction."""

from __future__ import annotations

import pytest

from search_bridge.search.fields import DEFAULT_PARAMS, ID_KEY, mangle
from search_bridge.search.filter_query import FilterQuery, build_filter


pytestmark = pytest.mark.unit


def test_database_and_builtin_type() -> None:
    filter_query = FilterQuery().filter_by_database("chef").filter_by_type("node")

    assert filter_query.render() == "+X_CHEF_database_CHEF_X:chef +X_CHEF_type_CHEF_X:node"


def test_data_bag_kind_scopes_to_items_of_that_bag() -> None:
    filter_query = FilterQuery().filter_by_database("chef").filter_by_type("users")

    assert filter_query.render() == (
        "+X_CHEF_database_CHEF_X:chef +X_CHEF_type_CHEF_X:data_bag_item +data_bag:users"
    )


@pytest.mark.parametrize("kind", ["role", "node", "client", "environment"])
def test_every_builtin_kind_yields_one_type_clause(kind: str) -> None:
    clauses = FilterQuery().filter_by_type(kind).clauses

    assert clauses == {"X_CHEF_type_CHEF_X": kind}


def test_unknown_keys_are_dropped() -> None:
    assert build_filter({"database": "chef", "colour": "blue"}) == "+X_CHEF_database_CHEF_X:chef"


def test_later_value_replaces_earlier_one() -> None:
    filter_query = FilterQuery().filter_by({"database": "one"}).filter_by({"database": "two"})

    assert str(filter_query) == "+X_CHEF_database_CHEF_X:two"


def test_empty_filter_is_falsy_and_renders_empty() -> None:
    filter_query = FilterQuery()

    assert not filter_query
    assert filter_query.render() == ""


def test_clauses_returns_a_copy() -> None:
    filter_query = FilterQuery().filter_by_database("chef")
    filter_query.clauses["data_bag"] = "x"

    assert filter_query.clauses == {"X_CHEF_database_CHEF_X": "chef"}


def test_default_select_params() -> None:
    assert DEFAULT_PARAMS == {
        "start": 0,
        "rows": 1000,
        "sort": f"{ID_KEY} asc",
        "wt": "json",
        "indent": "off",
    }


def test_mangle_joins_field_and_value() -> None:
    assert mangle("name", "web") == "name__=__web"
