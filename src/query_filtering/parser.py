"""QueryParser: one entry point from request parameters to a ParsedQuery."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, NamedTuple

from .compiler import FilterCompiler
from .pagination import Pagination, PaginationCalculator
from .params import QueryParamsInput, first_value, normalise_params
from .predicates import AndFilter
from .search import SearchCompiler
from .sorting import SortCompiler, SortField

if TYPE_CHECKING:
    from .registry import FieldConfigRegistry

logger = logging.getLogger(__name__)


class QueryOptions(NamedTuple):
    """Backend-ready filter document, sort, skip and limit."""

    filter: dict[str, Any]
    sort: list[tuple[str, int]]
    skip: int
    limit: int


class ParsedQuery(NamedTuple):
    """
    Result of parsing one request's query parameters.

    Attributes:
        filters: Search predicate (if any) AND the field filters.
        sort: Ordered (storage field, direction) pairs.
        pagination: Normalised page, page size and skip.
        search: The search term, if one was supplied.
        raw_params: The normalised multi-valued input parameters.
    """

    filters: AndFilter
    sort: list[SortField]
    pagination: Pagination
    search: str | None
    raw_params: Mapping[str, list[Any]]

    def to_mongo_filter(self) -> dict[str, Any]:
        return self.filters.to_mongo()

    def to_query_options(self) -> QueryOptions:
        return QueryOptions(
            filter=self.to_mongo_filter(),
            sort=[(f.field, f.direction.mongo) for f in self.sort],
            skip=self.pagination.skip,
            limit=self.pagination.limit,
        )


class QueryParser:
    """
    Compose filter, search, sort and pagination parsing for one entity.

    Usage::

        registry = FieldConfigRegistry("project", {...}, schema=Project)
        parser = QueryParser(registry)
        parsed = parser.parse("status=active&price=gt:5,lt:10&sort=-created_at")
        collection.find(parsed.to_mongo_filter())

    The first invalid parameter aborts the parse with
    :class:`~query_filtering.exceptions.QueryValidationError`.
    """

    def __init__(
        self,
        registry: FieldConfigRegistry,
        *,
        filter_compiler: FilterCompiler | None = None,
        search_compiler: SearchCompiler | None = None,
        sort_compiler: SortCompiler | None = None,
        pagination: PaginationCalculator | None = None,
    ) -> None:
        self._registry = registry
        self._filters = filter_compiler or FilterCompiler(registry)
        self._search = search_compiler or SearchCompiler()
        self._sort = sort_compiler or SortCompiler(registry)
        self._pagination = pagination or PaginationCalculator(
            default_page_size=registry.config.default_page_size,
            max_page_size=registry.config.max_page_size,
        )

    @property
    def registry(self) -> FieldConfigRegistry:
        return self._registry

    def parse(self, params: QueryParamsInput | None) -> ParsedQuery:
        normalised = normalise_params(params)
        field_filters = self._filters.compile(normalised)

        search = first_value(normalised, "search", "q")
        if search is not None:
            search = str(search)
        search_predicate = self._search.build(
            search, self._registry.config.search_fields
        )
        filters = (
            AndFilter(search_predicate, *field_filters)
            if search_predicate is not None
            else field_filters
        )

        sort_raw = first_value(normalised, "sort")
        sort = self._sort.compile(str(sort_raw) if sort_raw is not None else None)
        pagination = self._pagination.calculate(
            first_value(normalised, "page"), first_value(normalised, "page_size")
        )
        logger.debug(
            "Parsed %s query: %d filter(s), search=%r, sort=%s, page=%d/%d",
            self._registry.entity,
            len(field_filters),
            search,
            [(f.field, f.direction.value) for f in sort],
            pagination.page,
            pagination.page_size,
        )
        return ParsedQuery(
            filters=filters,
            sort=sort,
            pagination=pagination,
            search=search,
            raw_params=normalised,
        )
