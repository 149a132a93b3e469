"""SortCompiler: ``sort=-created_at,name`` -> ordered (storage field, direction)."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, NamedTuple

from .exceptions import QueryValidationError, suggest

if TYPE_CHECKING:
    from .registry import FieldConfigRegistry

SORT_PARAM = "sort"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"

    @property
    def mongo(self) -> int:
        return -1 if self is SortDirection.DESC else 1


class SortField(NamedTuple):
    field: str
    direction: SortDirection


class SortCompiler:
    """
    Parse comma-separated sort directives against the field registry.

    ``-name`` sorts descending, ``name`` or ``+name`` ascending. Names go
    through the same registry as filters and map to storage names; a
    repeated field keeps its first position and takes the last direction.
    """

    def __init__(self, registry: FieldConfigRegistry) -> None:
        self._registry = registry

    def compile(self, raw: str | None) -> list[SortField]:
        """Return the ordering for *raw*, or the configured default if empty."""
        if raw is None or not raw.strip():
            raw = self._registry.config.default_sort

        order: dict[str, SortDirection] = {}
        for part in raw.split(","):
            item = part.strip()
            if not item:
                continue
            direction = SortDirection.ASC
            if item[0] in "+-":
                direction = SortDirection.DESC if item[0] == "-" else SortDirection.ASC
                item = item[1:].strip()
            storage = self._registry.sort_storage_field(item)
            if storage is None:
                raise self._unsupported(item, raw)
            order[storage] = direction
        return [SortField(name, direction) for name, direction in order.items()]

    def _unsupported(self, name: str, raw: str) -> QueryValidationError:
        sortable = self._registry.sortable_names
        suggestions = suggest(name, sortable)
        message = (
            f"Unsupported sort field '{name}'. "
            f"Sortable fields are: {', '.join(sortable)}"
        )
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        return QueryValidationError(
            message,
            field=SORT_PARAM,
            value=raw,
            expected_type=f"sort field ({', '.join(sortable)})",
            suggestions=suggestions,
        )
