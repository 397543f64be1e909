"""Unit tests for the SearchService orchestrator."""

from __future__ import annotations

import pytest

from search_bridge.adapters.document_store import FakeDocumentStore
from search_bridge.adapters.index_transport import FakeIndexTransport
from search_bridge.domain.search import SearchParams
from search_bridge.errors import DocumentStoreError, IndexTransportError, UnknownSearchKindError
from search_bridge.search.filter_query import FilterQuery
from search_bridge.service_layer.search_service import SearchService, build_select_params, order_by_ids


def _select_payload(ids: list[str], *, start: int = 0, num_found: int | None = None) -> dict:
    return {
        "responseHeader": {"status": 0, "QTime": 1},
        "response": {
            "docs": [{"X_CHEF_id_CHEF_X": doc_id} for doc_id in ids],
            "start": start,
            "numFound": len(ids) if num_found is None else num_found,
        },
    }


def _node(doc_id: str, name: str) -> dict:
    return {"_id": doc_id, "name": name, "chef_type": "node"}


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_result_skips_document_store(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    service = SearchService(index, store)

    page = await service.search({"type": "node", "q": "name:web"})

    assert page.objects == []
    assert page.total == 0
    assert page.start == 0
    assert store.bulk_get_calls == []
    assert len(index.select_calls) == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_hits_are_loaded_with_one_bulk_get(store: FakeDocumentStore) -> None:
    for doc_id, name in (("n1", "web1"), ("n2", "web2"), ("n3", "db")):
        store.add("node", _node(doc_id, name))
    index = FakeIndexTransport(_select_payload(["n2", "n1"], start=5, num_found=12))
    service = SearchService(index, store)

    page = await service.search({"type": "node", "q": "name:web*", "start": 5})

    assert store.bulk_get_calls == [["n2", "n1"]]
    assert [obj["_id"] for obj in page.objects] == ["n2", "n1"]
    assert page.start == 5
    assert page.total == 12


@pytest.mark.unit
@pytest.mark.asyncio
async def test_select_params_carry_defaults_filter_and_transformed_query(
    store: FakeDocumentStore, index: FakeIndexTransport
) -> None:
    service = SearchService(index, store)

    await service.search({"type": "role", "q": "name:base", "rows": 5, "bogus": "x"})

    assert index.select_calls == [
        {
            "start": 0,
            "rows": 5,
            "sort": "X_CHEF_id_CHEF_X asc",
            "wt": "json",
            "indent": "off",
            "fq": "+X_CHEF_database_CHEF_X:chef +X_CHEF_type_CHEF_X:role",
            "q": "content:name__=__base",
        }
    ]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_missing_query_matches_everything_in_partition(
    store: FakeDocumentStore, index: FakeIndexTransport
) -> None:
    service = SearchService(index, store)

    await service.search({})

    params = index.select_calls[0]
    assert params["q"] == "*:*"
    assert params["fq"] == "+X_CHEF_database_CHEF_X:chef"
    assert params["rows"] == 1000


@pytest.mark.unit
@pytest.mark.asyncio
async def test_empty_query_is_sent_as_is(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    service = SearchService(index, store)

    await service.search({"q": ""})

    assert index.select_calls[0]["q"] == ""


@pytest.mark.unit
@pytest.mark.asyncio
async def test_data_bag_search_filters_on_bag(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    store.add_bag("users", [{"_id": "u1", "id": "alice"}])
    service = SearchService(index, store)

    await service.search(SearchParams(type="users"))

    assert index.select_calls[0]["fq"] == (
        "+X_CHEF_database_CHEF_X:chef +X_CHEF_type_CHEF_X:data_bag_item +data_bag:users"
    )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_ids_missing_from_store_are_dropped(store: FakeDocumentStore) -> None:
    store.add("node", _node("n1", "web1"))
    index = FakeIndexTransport(_select_payload(["gone", "n1"]))
    service = SearchService(index, store)

    page = await service.search({"type": "node"})

    assert [obj["_id"] for obj in page.objects] == ["n1"]
    assert page.total == 2


@pytest.mark.unit
@pytest.mark.asyncio
async def test_index_error_propagates_without_store_call(
    store: FakeDocumentStore, index: FakeIndexTransport
) -> None:
    index.select_error = IndexTransportError("index down")
    service = SearchService(index, store)

    with pytest.raises(IndexTransportError):
        await service.search({"type": "node"})
    assert store.bulk_get_calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_store_error_propagates(store: FakeDocumentStore) -> None:
    store.errors["bulk_get"] = DocumentStoreError("store down")
    service = SearchService(FakeIndexTransport(_select_payload(["n1"])), store)

    with pytest.raises(DocumentStoreError):
        await service.search({"type": "node"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_hit_without_primary_key_is_a_transport_error(store: FakeDocumentStore) -> None:
    payload = {"response": {"docs": [{"other": "x"}], "start": 0, "numFound": 1}}
    service = SearchService(FakeIndexTransport(payload), store)

    with pytest.raises(IndexTransportError):
        await service.search({"type": "node"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_valid_indexes_lists_bags_then_builtins(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    store.add_bag("users")
    store.add_bag("secrets")
    service = SearchService(index, store)

    assert await service.valid_indexes() == ["users", "secrets", "role", "node", "client", "environment"]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_indexes_renders_search_urls(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    store.add_bag("users")
    service = SearchService(index, store)

    indexes = await service.list_indexes("http://chef.test:4000/")

    assert indexes["users"] == "http://chef.test:4000/search/users"
    assert indexes["node"] == "http://chef.test:4000/search/node"
    assert len(indexes) == 5


@pytest.mark.unit
@pytest.mark.asyncio
async def test_search_index_rejects_unknown_kind(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    service = SearchService(index, store)

    with pytest.raises(UnknownSearchKindError, match="I don't know how to search for widgets data objects."):
        await service.search_index("widgets")
    assert index.select_calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_kind_check_reads_bag_names_before_any_index_call(
    store: FakeDocumentStore, index: FakeIndexTransport
) -> None:
    store.errors["bag_names"] = DocumentStoreError("store down")
    service = SearchService(index, store)

    with pytest.raises(DocumentStoreError):
        await service.search_index("widgets")
    assert index.select_calls == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_search_index_applies_default_rows(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    service = SearchService(index, store, default_rows=7)

    await service.search_index("node", {"q": "name:web", "type": "role"})

    params = index.select_calls[0]
    assert params["rows"] == 7
    assert params["fq"] == "+X_CHEF_database_CHEF_X:chef +X_CHEF_type_CHEF_X:node"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_search_index_keeps_caller_rows(store: FakeDocumentStore, index: FakeIndexTransport) -> None:
    store.add_bag("users")
    service = SearchService(index, store, default_rows=7)

    await service.search_index("users", {"rows": 3})

    assert index.select_calls[0]["rows"] == 3


@pytest.mark.unit
def test_build_select_params_prefers_caller_values() -> None:
    params = build_select_params(
        SearchParams(start=10, sort="name asc"),
        FilterQuery().filter_by_database("chef"),
        "content:a__=__b",
    )

    assert params["start"] == 10
    assert params["rows"] == 1000
    assert params["sort"] == "name asc"
    assert params["q"] == "content:a__=__b"


@pytest.mark.unit
def test_order_by_ids_follows_index_order() -> None:
    objects = [{"_id": "a"}, {"_id": "b"}, {"_id": "c"}]

    assert order_by_ids(objects, ["c", "a", "b"]) == [{"_id": "c"}, {"_id": "a"}, {"_id": "b"}]


@pytest.mark.unit
def test_order_by_ids_drops_documents_without_id() -> None:
    objects = [{"name": "orphan"}, {"_id": "b"}, {"_id": "a"}]

    ordered = order_by_ids(objects, ["a", "b"])

    assert ordered == [{"_id": "a"}, {"_id": "b"}]
    assert len(ordered) <= 2


@pytest.mark.unit
def test_search_params_whitelist() -> None:
    params = SearchParams.from_mapping({"q": "x", "rows": 2, "fq": "evil", "wt": "xml"})

    assert params.model_dump(exclude_none=True) == {"q": "x", "rows": 2}
