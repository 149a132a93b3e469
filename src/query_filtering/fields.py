"""Per-field filter declarations: storage name, value type, operator allowlist."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .operators import FilterOperator, resolve_operator

# Document-store bookkeeping keys that never need a filter declaration
IMPLICIT_SCHEMA_FIELDS: frozenset[str] = frozenset({"_id", "__v"})


class FieldType(str, Enum):
    """Value types a filterable field can declare."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    ARRAY = "array"
    ID = "id"


class FieldConfig(BaseModel):
    """
    Declaration of one filterable field.

    Attributes:
        field: Storage field name (dot-notation for nested documents).
        type: Value type used to coerce raw parameter strings.
        operators: Operators a client may apply to this field.
        allow_multiple: Accept comma-separated value lists.
        validate_values: Coerce and validate raw values (alias ``validate``).
            When ``False`` the raw string is used verbatim.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    field: str
    type: FieldType = FieldType.STRING
    operators: frozenset[FilterOperator] = Field(
        default_factory=lambda: frozenset({FilterOperator.EQ})
    )
    allow_multiple: bool = False
    validate_values: bool = Field(default=True, alias="validate")

    @field_validator("operators", mode="before")
    @classmethod
    def _resolve_aliases(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, list | tuple | set | frozenset):
            resolved = []
            for item in value:
                if isinstance(item, str) and not isinstance(item, FilterOperator):
                    op = resolve_operator(item)
                    if op is None:
                        raise ValueError(f"Unknown filter operator: {item!r}")
                    resolved.append(op)
                else:
                    resolved.append(item)
            if not resolved:
                raise ValueError("At least one operator must be allowed")
            return frozenset(resolved)
        return value

    @property
    def storage_field(self) -> str:
        """Name of the field in stored documents (``id`` maps to ``_id``)."""
        return "_id" if self.field == "id" else self.field

    def allows(self, op: FilterOperator) -> bool:
        return op in self.operators


class SearchFields(BaseModel):
    """Fields that the free-text ``search``/``q`` parameter is matched against."""

    model_config = ConfigDict(frozen=True)

    text_fields: tuple[str, ...] = ()
    exact_fields: tuple[str, ...] = ()
    custom_search: Callable[[str], Any] | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.text_fields or self.exact_fields or self.custom_search)


_DATE_OPERATORS = frozenset(
    {
        FilterOperator.EQ,
        FilterOperator.GT,
        FilterOperator.GE,
        FilterOperator.LT,
        FilterOperator.LE,
    }
)
_MEMBERSHIP_OPERATORS = frozenset(
    {FilterOperator.EQ, FilterOperator.IN, FilterOperator.NOT_IN}
)

# Audit fields shared by every entity schema
BASE_FILTERABLE_FIELDS: MappingProxyType[str, FieldConfig] = MappingProxyType(
    {
        "created_at": FieldConfig(
            field="created_at", type=FieldType.DATE, operators=_DATE_OPERATORS
        ),
        "updated_at": FieldConfig(
            field="updated_at", type=FieldType.DATE, operators=_DATE_OPERATORS
        ),
        "is_deleted": FieldConfig(
            field="is_deleted",
            type=FieldType.BOOLEAN,
            operators=frozenset({FilterOperator.EQ}),
            validate_values=True,
        ),
    }
)

# Usually excluded, opt in where a resource exposes its authors
OPTIONAL_BASE_FILTERABLE_FIELDS: MappingProxyType[str, FieldConfig] = (
    MappingProxyType(
        {
            "created_by": FieldConfig(
                field="created_by",
                operators=_MEMBERSHIP_OPERATORS,
                allow_multiple=True,
                validate_values=False,
            ),
            "updated_by": FieldConfig(
                field="updated_by",
                operators=_MEMBERSHIP_OPERATORS,
                allow_multiple=True,
                validate_values=False,
            ),
        }
    )
)
