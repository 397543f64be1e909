"""Unit tests for document flattening and index field construction."""

from __future__ import annotations

import pytest

from search_bridge.search.document_flattener import build_index_fields, content_tokens, flatten


pytestmark = pytest.mark.unit


def test_flatten_nested_lists_and_leaf_keys() -> None:
    document = {"name": "web", "run_list": ["a", "b"], "attrs": {"port": 80}}

    assert flatten(document) == {
        "name": ["web"],
        "run_list": ["a", "b"],
        "attrs_port": ["80"],
        "port": ["80"],
    }


def test_flatten_skips_store_metadata_and_nulls() -> None:
    document = {"_id": "abc", "_rev": "1-x", "name": "web", "description": None}

    assert flatten(document) == {"name": ["web"]}


def test_flatten_renders_booleans_lowercase_and_dedupes() -> None:
    document = {"enabled": True, "tags": ["x", "x", "y"], "deep": {"tags": ["x"]}}

    fields = flatten(document)

    assert fields["enabled"] == ["true"]
    assert fields["tags"] == ["x", "y"]
    assert fields["deep_tags"] == ["x"]


def test_flatten_deeply_nested_mapping() -> None:
    assert flatten({"a": {"b": {"c": 1}}}) == {"a_b_c": ["1"], "c": ["1"]}


def test_content_tokens_are_mangled() -> None:
    assert content_tokens({"name": "web", "attrs": {"port": 80}}) == [
        "name__=__web",
        "attrs_port__=__80",
        "port__=__80",
    ]


def test_build_index_fields_for_builtin_kind() -> None:
    fields = build_index_fields("abc", "chef", "node", {"_id": "abc", "name": "web"})

    assert fields == {
        "X_CHEF_id_CHEF_X": "abc",
        "X_CHEF_database_CHEF_X": "chef",
        "X_CHEF_type_CHEF_X": "node",
        "content": "name__=__web",
    }


def test_build_index_fields_for_data_bag_item() -> None:
    fields = build_index_fields("i1", "chef", "data_bag_item", {"id": "alice"}, data_bag="users")

    assert fields["data_bag"] == "users"
    assert fields["content"] == "id__=__alice"
