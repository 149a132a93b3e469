"""Filter operator vocabulary, input aliases and their Mongo equivalents."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType


class FilterOperator(str, Enum):
    """Operators a client may use in ``operator:value`` expressions."""

    EQ = "eq"
    NE = "neq"
    GT = "gt"
    GE = "gte"
    LT = "lt"
    LE = "lte"
    IN = "in"
    NOT_IN = "nin"
    CONTAINS = "contains"
    STARTS_WITH = "starts"
    ENDS_WITH = "ends"


# Alternative spellings accepted on input; always normalised to the canonical member
_OP_ALIASES: dict[str, FilterOperator] = {
    "ne": FilterOperator.NE,
    "not_in": FilterOperator.NOT_IN,
    "startswith": FilterOperator.STARTS_WITH,
    "starts_with": FilterOperator.STARTS_WITH,
    "endswith": FilterOperator.ENDS_WITH,
    "ends_with": FilterOperator.ENDS_WITH,
}

OPERATOR_TOKENS: MappingProxyType[str, FilterOperator] = MappingProxyType(
    {**{op.value: op for op in FilterOperator}, **_OP_ALIASES}
)

SET_OPERATORS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.IN, FilterOperator.NOT_IN}
)
STRING_OPERATORS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.CONTAINS, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH}
)
RANGE_OPERATORS: frozenset[FilterOperator] = frozenset(
    {FilterOperator.GT, FilterOperator.GE, FilterOperator.LT, FilterOperator.LE}
)

# Comparison operators with a one-to-one Mongo query operator
MONGO_OPERATORS: MappingProxyType[FilterOperator, str] = MappingProxyType(
    {
        FilterOperator.EQ: "$eq",
        FilterOperator.NE: "$ne",
        FilterOperator.GT: "$gt",
        FilterOperator.GE: "$gte",
        FilterOperator.LT: "$lt",
        FilterOperator.LE: "$lte",
        FilterOperator.IN: "$in",
        FilterOperator.NOT_IN: "$nin",
    }
)


def resolve_operator(token: str) -> FilterOperator | None:
    """Return the operator named by *token* (case-insensitive) or ``None``."""
    return OPERATOR_TOKENS.get(token.strip().lower())


def describe_operators(
    operators: frozenset[FilterOperator] | set[FilterOperator],
) -> str:
    """Render an operator set the way error messages list it."""
    order = list(FilterOperator)
    return ", ".join(op.value for op in sorted(operators, key=order.index))
