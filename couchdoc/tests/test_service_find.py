"""Tests for DocumentService.find against a recording store."""

from __future__ import annotations

import pytest

from couchdoc.consistency import ConsistencyLevel, ScanConsistency
from couchdoc.errors import BadRequest, MalformedFilter, UnsupportedOperator
from couchdoc.models.page import Page
from couchdoc.store import StoreError

pytestmark = pytest.mark.asyncio


async def test_find_element(service, store):
    """Test a simple find and the read-only statement it sends."""
    store.add_response([{"foo": "bar"}])

    result = await service.find({"query": {"foo": "bar"}})

    assert result == [{"foo": "bar"}]
    sent = store.queries[0]
    assert sent["statement"] == "SELECT `testbucket`.* FROM `testbucket` WHERE _type = $1 AND foo = $2"
    assert sent["parameters"] == ["users", "bar"]
    assert sent["readonly"] is True


async def test_find_without_params_is_bad_request(service):
    """Test that find() with no params is rejected."""
    with pytest.raises(BadRequest):
        await service.find()


async def test_find_without_query_is_bad_request(service):
    """Test that find({}) with no query is rejected."""
    with pytest.raises(BadRequest):
        await service.find({})


async def test_find_with_non_mapping_params_is_bad_request(service, store):
    """Test that params which are not a mapping are rejected."""
    with pytest.raises(BadRequest):
        await service.find(["query"])

    assert store.queries == []


async def test_find_with_non_mapping_query_is_bad_request(service):
    """Test that a query which is not a mapping is rejected."""
    with pytest.raises(BadRequest):
        await service.find({"query": ["foo"]})


async def test_find_without_pagination_returns_bare_list(service, store):
    """Test that an unpaginated service returns a plain list."""
    store.add_response([{"foo": "bar"}, {"foo": "bar"}], result_count=2)

    result = await service.find({"query": {"foo": "bar"}})

    assert isinstance(result, list)
    assert len(result) == 2


async def test_find_paginates(paginated_service, store):
    """Test that a paginated service wraps rows in a Page."""
    results = [{"foo": "bar"}]
    store.add_response(results, result_count=1)

    page = await paginated_service.find({"query": {"foo": "bar", "$limit": 10}})

    assert page == Page(total=1, limit=10, skip=0, data=results)


async def test_find_clamps_limit_before_execution(paginated_service, store):
    """Test that the clamped limit is what the store receives."""
    store.add_response([{"foo": "bar"}], result_count=1)

    page = await paginated_service.find({"query": {"foo": "bar", "$limit": 10000}})

    assert page.limit == 50
    sent = store.queries[0]
    assert sent["statement"].endswith("LIMIT $3")
    assert sent["parameters"] == ["users", "bar", 50]


async def test_find_clamps_digit_string_limit(paginated_service, store):
    """Test that a digit-string $limit is clamped and bound as an int."""
    store.add_response([{"foo": "bar"}], result_count=1)

    page = await paginated_service.find({"query": {"$limit": "60"}})

    assert page.limit == 50
    limit = store.queries[0]["parameters"][-1]
    assert limit == 50
    assert isinstance(limit, int)


async def test_find_rejects_non_ascii_digit_limit(paginated_service, store):
    """Test that superscript digits in $limit or $skip are malformed."""
    with pytest.raises(MalformedFilter):
        await paginated_service.find({"query": {"$limit": "²"}})

    with pytest.raises(MalformedFilter):
        await paginated_service.find({"query": {"$skip": "¹"}})

    assert store.queries == []


async def test_find_applies_default_limit_and_skip(paginated_service, store):
    """Test the default limit and the echoed skip."""
    store.add_response([], result_count=42)

    page = await paginated_service.find({"query": {"$skip": 20}})

    assert page.total == 42
    assert page.limit == 10
    assert page.skip == 20
    assert store.queries[0]["statement"].endswith("LIMIT $2 OFFSET $3")
    assert store.queries[0]["parameters"] == ["users", 10, 20]


async def test_find_paginate_override_disables_envelope(paginated_service, store):
    """Test that paginate=False returns bare rows without a LIMIT."""
    store.add_response([{"foo": "bar"}])

    result = await paginated_service.find({"query": {"foo": "bar"}, "paginate": False})

    assert result == [{"foo": "bar"}]
    assert "LIMIT" not in store.queries[0]["statement"]


async def test_find_paginate_override_enables_envelope(service, store):
    """Test that a per-call paginate policy replaces the service's."""
    store.add_response([{"foo": "bar"}], result_count=7)

    page = await service.find({"query": {"$limit": 99}, "paginate": {"default": 5, "max": 20}})

    assert page.limit == 20
    assert page.total == 7


async def test_find_returns_only_selected_keys(service, store):
    """Test that $select projects every row to the chosen fields."""
    row = {"foo": "bar", "bar": "foo"}
    store.add_response([dict(row) for _ in range(10)])

    result = await service.find({"query": {"$select": ["foo"], "foo": "bar"}})

    assert len(result) == 10
    assert all(r == {"foo": "bar"} for r in result)
    assert "bar = " not in store.queries[0]["statement"]


async def test_find_select_omits_missing_fields(service, store):
    """Test that selected fields absent from a row are not defaulted."""
    store.add_response([{"foo": "bar"}, {"foo": "baz", "extra": 1}])

    result = await service.find({"query": {"$select": ["foo", "extra"]}})

    assert result == [{"foo": "bar"}, {"foo": "baz", "extra": 1}]


async def test_find_empty_select_returns_full_rows(service, store):
    """Test that an empty $select leaves rows untouched."""
    store.add_response([{"foo": "bar", "bar": "foo"}])

    result = await service.find({"query": {"$select": []}})

    assert result == [{"foo": "bar", "bar": "foo"}]


@pytest.mark.parametrize(
    ("level", "native"),
    [
        (ConsistencyLevel.NOT_BOUNDED, ScanConsistency.NOT_BOUNDED),
        (ConsistencyLevel.REQUEST_PLUS, ScanConsistency.REQUEST_PLUS),
        (ConsistencyLevel.STATEMENT_PLUS, ScanConsistency.STATEMENT_PLUS),
    ],
)
async def test_find_passes_consistency(service, store, level, native):
    """Test that $consistency reaches the store as its native value."""
    store.add_response([{"foo": "bar"}])

    result = await service.find({"query": {"foo": "bar", "$consistency": level}})

    assert result
    assert store.queries[0]["consistency"] is native
    assert "consistency" not in store.queries[0]["statement"].lower()


async def test_find_without_consistency_uses_store_default(service, store):
    """Test that omitting $consistency sends None."""
    store.add_response([{"foo": "bar"}])

    await service.find({"query": {"foo": "bar"}})

    assert store.queries[0]["consistency"] is None


async def test_find_does_not_mutate_caller_query(paginated_service, store):
    """Test that find works on a copy of the caller's query."""
    store.add_response([])
    query = {"foo": "bar", "$limit": 10000, "$consistency": ConsistencyLevel.REQUEST_PLUS, "$select": ["foo"]}
    original = dict(query)

    await paginated_service.find({"query": query})

    assert query == original


async def test_find_rejects_unsupported_operator(service, store):
    """Test that an unknown operator fails before any query is sent."""
    with pytest.raises(UnsupportedOperator):
        await service.find({"query": {"name": {"$like": "a%"}}})

    assert store.queries == []


async def test_find_rejects_malformed_or(service):
    """Test that a non-list $or is rejected."""
    with pytest.raises(MalformedFilter):
        await service.find({"query": {"$or": {"name": "ada"}}})


async def test_find_propagates_store_errors(service):
    """Test that store failures reach the caller unchanged."""
    # no canned response queued
    with pytest.raises(StoreError, match="No data in queue"):
        await service.find({"query": {"foo": "bar"}})
