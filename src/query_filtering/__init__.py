"""Request query parsing: typed filters, search, sort, pagination and JSON Patch."""

from __future__ import annotations

from .coercion import ValueCoercer, coerce_value
from .compiler import FilterCompiler
from .config import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    DEFAULT_SORT,
    MAX_PAGE_SIZE,
    RESERVED_PARAMS,
    QueryParserConfig,
)
from .exceptions import (
    ConfigurationError,
    QueryFilteringError,
    QueryValidationError,
    RequestValidationError,
)
from .fields import (
    BASE_FILTERABLE_FIELDS,
    OPTIONAL_BASE_FILTERABLE_FIELDS,
    FieldConfig,
    FieldType,
    SearchFields,
)
from .operators import FilterOperator
from .pagination import Pagination, PaginationCalculator
from .params import normalise_params
from .parser import ParsedQuery, QueryOptions, QueryParser
from .patch import PatchOperation, PatchTranslator, is_patch_document, to_partial_update
from .predicates import AndFilter, FieldFilter, FilterPredicate, OrFilter, RawFilter
from .query_string import QueryStringBuilder, params_from_body
from .registry import FieldConfigRegistry
from .search import SearchCompiler
from .sorting import SortCompiler, SortDirection, SortField
from .syntax import OperatorExpression, OperatorGrammar
from .validation import PatchValidator

__all__ = [
    # Facade
    "QueryParser",
    "ParsedQuery",
    "QueryOptions",
    # Configuration
    "FieldConfig",
    "FieldType",
    "SearchFields",
    "FieldConfigRegistry",
    "QueryParserConfig",
    "BASE_FILTERABLE_FIELDS",
    "OPTIONAL_BASE_FILTERABLE_FIELDS",
    "DEFAULT_PAGE",
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_SORT",
    "MAX_PAGE_SIZE",
    "RESERVED_PARAMS",
    # Components
    "ValueCoercer",
    "coerce_value",
    "FilterOperator",
    "OperatorExpression",
    "OperatorGrammar",
    "FilterCompiler",
    "SearchCompiler",
    "SortCompiler",
    "SortDirection",
    "SortField",
    "Pagination",
    "PaginationCalculator",
    "normalise_params",
    # Predicate tree
    "FilterPredicate",
    "FieldFilter",
    "AndFilter",
    "OrFilter",
    "RawFilter",
    # Patch
    "PatchOperation",
    "PatchTranslator",
    "PatchValidator",
    "is_patch_document",
    "to_partial_update",
    # Query strings
    "QueryStringBuilder",
    "params_from_body",
    # Exceptions
    "QueryFilteringError",
    "RequestValidationError",
    "QueryValidationError",
    "ConfigurationError",
]
