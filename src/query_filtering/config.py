"""Parser-wide defaults and the per-resource ``QueryParserConfig``."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .fields import SearchFields

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
DEFAULT_SORT = "-created_at"

# Parameter names that are never treated as field filters
RESERVED_PARAMS: frozenset[str] = frozenset(
    {"search", "q", "sort", "page", "page_size", "filters"}
)


class QueryParserConfig(BaseModel):
    """
    Result-shaping and search behaviour for one resource.

    Attributes:
        search_fields: Fields matched by ``search``/``q``; ``None`` disables search.
        default_sort: Sort applied when the request carries no ``sort``.
        default_page_size: Page size when ``page_size`` is absent or unusable.
        max_page_size: Upper clamp for ``page_size``.
        allow_packed_operators: Accept several comma-packed operator
            expressions in one value (``price=gt:5,lt:10``). When disabled,
            multiple conditions need repeated keys (``price=gt:5&price=lt:10``).
    """

    model_config = ConfigDict(frozen=True)

    search_fields: SearchFields | None = None
    default_sort: str = DEFAULT_SORT
    default_page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    max_page_size: int = Field(default=MAX_PAGE_SIZE, ge=1)
    allow_packed_operators: bool = True

    @model_validator(mode="after")
    def _check_page_sizes(self) -> QueryParserConfig:
        if self.default_page_size > self.max_page_size:
            raise ValueError(
                f"default_page_size ({self.default_page_size}) exceeds "
                f"max_page_size ({self.max_page_size})"
            )
        return self
