"""Tests for the QueryParser facade."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from query_filtering import (
    AndFilter,
    OrFilter,
    Pagination,
    QueryOptions,
    QueryParser,
    QueryValidationError,
    SortDirection,
    SortField,
)
from query_filtering.registry import FieldConfigRegistry


class MultiDict:
    """Minimal framework-style multi-valued mapping."""

    def __init__(self, pairs: list[tuple[str, str]]) -> None:
        self._pairs = pairs

    def multi_items(self) -> list[tuple[str, str]]:
        return list(self._pairs)


def test_full_query(parser: QueryParser) -> None:
    parsed = parser.parse(
        "status=active&price=gt:5,lt:10&sort=-price&page=2&page_size=10"
    )
    assert parsed.to_mongo_filter() == {
        "status": "active",
        "price": {"$gt": 5, "$lt": 10},
    }
    assert parsed.sort == [SortField("price", SortDirection.DESC)]
    assert parsed.pagination == Pagination(page=2, page_size=10, skip=10)
    assert parsed.search is None
    assert parsed.raw_params["page"] == ["2"]


def test_empty_request_uses_defaults(parser: QueryParser) -> None:
    parsed = parser.parse(None)
    assert parsed.filters == AndFilter()
    assert parsed.to_mongo_filter() == {}
    assert parsed.sort == [SortField("created_at", SortDirection.DESC)]
    assert parsed.pagination == Pagination(page=1, page_size=20, skip=0)


def test_search_combines_with_filters(parser: QueryParser) -> None:
    parsed = parser.parse("q=acme&status=active")
    assert parsed.search == "acme"
    assert isinstance(parsed.filters.predicates[0], OrFilter)
    assert parsed.to_mongo_filter() == {
        "$or": [
            {"name": {"$regex": "acme", "$options": "i"}},
            {"status": "acme"},
        ],
        "status": "active",
    }


def test_search_takes_precedence_over_q(parser: QueryParser) -> None:
    assert parser.parse("search=first&q=second").search == "first"
    assert parser.parse("search=&q=second").search == "second"


def test_blank_search_adds_nothing(parser: QueryParser) -> None:
    parsed = parser.parse("search=%20&status=a")
    assert parsed.to_mongo_filter() == {"status": "a"}


def test_query_options(parser: QueryParser) -> None:
    options = parser.parse("price=gte:3&sort=name,-price&page=3&page_size=5")
    assert options.to_query_options() == QueryOptions(
        filter={"price": {"$gte": 3}},
        sort=[("name", 1), ("price", -1)],
        skip=10,
        limit=5,
    )


def test_page_bounds_follow_entity_config(
    make_registry: Callable[..., FieldConfigRegistry],
) -> None:
    parser = QueryParser(make_registry(default_page_size=10, max_page_size=25))
    assert parser.parse("").pagination.page_size == 10
    assert parser.parse("page=0&page_size=999").pagination == Pagination(1, 25, 0)


@pytest.mark.parametrize(
    "params",
    [
        "status=a&status=b",
        [("status", "a"), ("status", "b")],
        {"status": ["a", "b"]},
        MultiDict([("status", "a"), ("status", "b")]),
    ],
)
def test_accepts_every_parameter_shape(parser: QueryParser, params: object) -> None:
    parsed = parser.parse(params)  # type: ignore[arg-type]
    assert parsed.raw_params == {"status": ["a", "b"]}
    assert parsed.to_mongo_filter() == {"status": "b"}


def test_non_string_values_are_stringified(parser: QueryParser) -> None:
    parsed = parser.parse({"price": 5, "page": 2, "active": None})
    assert parsed.raw_params == {"price": ["5"], "page": ["2"]}
    assert parsed.to_mongo_filter() == {"price": 5}


def test_first_invalid_parameter_aborts_the_parse(parser: QueryParser) -> None:
    with pytest.raises(QueryValidationError) as exc_info:
        parser.parse("page=2&bogus=1&price=abc")
    assert exc_info.value.field == "bogus"


def test_invalid_sort_aborts_the_parse(parser: QueryParser) -> None:
    with pytest.raises(QueryValidationError) as exc_info:
        parser.parse("sort=internal_notes")
    assert exc_info.value.field == "sort"


def test_parsed_query_matches_documents_in_memory(parser: QueryParser) -> None:
    parsed = parser.parse("status=in:active,paused&price=lte:10&tags=red")
    assert parsed.filters.is_satisfied_by(
        {"status": "active", "price": 8, "tags": ["red", "blue"]}
    )
    assert not parsed.filters.is_satisfied_by(
        {"status": "active", "price": 12, "tags": ["red"]}
    )


def test_registry_is_exposed(
    parser: QueryParser, registry: FieldConfigRegistry
) -> None:
    assert parser.registry is registry
