"""
Predicate tree produced by the compilers.

Leaves are :class:`FieldFilter` nodes (one storage field, one or more
operator conditions); :class:`AndFilter` and :class:`OrFilter` combine
them. Every node renders to:

- ``to_dict()``: a backend-neutral AST (``{"op", "attr", "val"}`` leaves,
  ``{"op": "and"|"or", "conditions": [...]}`` composites),
- ``to_mongo()``: a MongoDB filter document,
- ``is_satisfied_by(doc)``: in-memory evaluation against a mapping.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from .operators import MONGO_OPERATORS, SET_OPERATORS, FilterOperator


class FilterPredicate(ABC):
    """Base class for predicate tree nodes with logic operator support."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]: ...

    @abstractmethod
    def to_mongo(self) -> dict[str, Any]: ...

    @abstractmethod
    def is_satisfied_by(self, candidate: Any) -> bool: ...

    def __and__(self, other: FilterPredicate) -> AndFilter:
        return AndFilter(self, other)

    def __or__(self, other: FilterPredicate) -> OrFilter:
        return OrFilter(self, other)


class FieldFilter(FilterPredicate):
    """
    All conditions on one storage field, combined with AND.

    ``FieldFilter("price", {GT: 5, LT: 10})`` is a single range condition
    rendering to ``{"price": {"$gt": 5, "$lt": 10}}``.
    """

    def __init__(self, field: str, conditions: Mapping[FilterOperator, Any]) -> None:
        if not conditions:
            raise ValueError(f"FieldFilter for {field!r} needs at least one condition")
        self.field = field
        normalised = {
            FilterOperator(op): _normalise(FilterOperator(op), val)
            for op, val in conditions.items()
        }
        self.conditions: Mapping[FilterOperator, Any] = MappingProxyType(normalised)

    def to_dict(self) -> dict[str, Any]:
        leaves = [
            {"op": op.value, "attr": self.field, "val": val}
            for op, val in self.conditions.items()
        ]
        if len(leaves) == 1:
            return leaves[0]
        return {"op": "and", "conditions": leaves}

    def to_mongo(self) -> dict[str, Any]:
        if list(self.conditions) == [FilterOperator.EQ]:
            return {self.field: self.conditions[FilterOperator.EQ]}
        fragments = [_mongo_fragment(op, val) for op, val in self.conditions.items()]
        merged: dict[str, Any] = {}
        for fragment in fragments:
            if merged.keys() & fragment.keys():
                # Two regex conditions cannot share one operator document
                return {"$and": [{self.field: f} for f in fragments]}
            merged.update(fragment)
        return {self.field: merged}

    def is_satisfied_by(self, candidate: Any) -> bool:
        actual = resolve_field(candidate, self.field)
        return all(
            _MEMORY_EVALUATORS[op](actual, val) for op, val in self.conditions.items()
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldFilter):
            return NotImplemented
        return self.field == other.field and dict(self.conditions) == dict(
            other.conditions
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        conds = ", ".join(f"{op.value}={val!r}" for op, val in self.conditions.items())
        return f"FieldFilter({self.field!r}, {conds})"


class _CompositeFilter(FilterPredicate):
    _op = ""

    def __init__(self, *predicates: FilterPredicate) -> None:
        self.predicates: tuple[FilterPredicate, ...] = predicates

    @property
    def is_empty(self) -> bool:
        return not self.predicates

    def __iter__(self) -> Any:
        return iter(self.predicates)

    def __len__(self) -> int:
        return len(self.predicates)

    def to_dict(self) -> dict[str, Any]:
        return {
            "op": self._op,
            "conditions": [p.to_dict() for p in self.predicates],
        }

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.predicates == other.predicates  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(map(repr, self.predicates))})"


class AndFilter(_CompositeFilter):
    """Logical AND; an empty AND matches every document."""

    _op = "and"

    def to_mongo(self) -> dict[str, Any]:
        documents = [p.to_mongo() for p in self.predicates]
        merged: dict[str, Any] = {}
        for doc in documents:
            if merged.keys() & doc.keys():
                return {"$and": [d for d in documents if d]}
            merged.update(doc)
        return merged

    def is_satisfied_by(self, candidate: Any) -> bool:
        return all(p.is_satisfied_by(candidate) for p in self.predicates)


class OrFilter(_CompositeFilter):
    """Logical OR; an empty OR imposes no restriction."""

    _op = "or"

    def to_mongo(self) -> dict[str, Any]:
        if not self.predicates:
            return {}
        return {"$or": [p.to_mongo() for p in self.predicates]}

    def is_satisfied_by(self, candidate: Any) -> bool:
        if not self.predicates:
            return True
        return any(p.is_satisfied_by(candidate) for p in self.predicates)


class RawFilter(FilterPredicate):
    """An opaque, backend-native filter document (from a custom search hook)."""

    def __init__(self, document: Mapping[str, Any]) -> None:
        self.document = dict(document)

    def to_dict(self) -> dict[str, Any]:
        return {"op": "raw", "val": dict(self.document)}

    def to_mongo(self) -> dict[str, Any]:
        return dict(self.document)

    def is_satisfied_by(self, candidate: Any) -> bool:
        raise TypeError("Raw backend filters cannot be evaluated in memory")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RawFilter):
            return NotImplemented
        return self.document == other.document

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"RawFilter({self.document!r})"


# -- field resolution --------------------------------------------------------


def resolve_field(obj: Any, path: str) -> Any:
    """
    Resolve a dot-separated path on a mapping or object.

    Lists are traversed implicitly: ``items.name`` on a list of items
    returns the list of names.
    """
    parts = path.split(".")
    for index, part in enumerate(parts):
        if obj is None:
            return None
        if isinstance(obj, list | tuple):
            rest = ".".join(parts[index:])
            return [resolve_field(item, rest) for item in obj]
        obj = obj.get(part) if isinstance(obj, Mapping) else getattr(obj, part, None)
    return obj


# -- rendering ---------------------------------------------------------------


def _normalise(op: FilterOperator, val: Any) -> Any:
    if op in SET_OPERATORS:
        return list(val) if isinstance(val, list | tuple | set | frozenset) else [val]
    return val


def regex_pattern(op: FilterOperator, val: Any) -> str:
    """Escaped, anchored-as-needed regex for a string operator."""
    literal = re.escape(str(val))
    if op == FilterOperator.STARTS_WITH:
        return f"^{literal}"
    if op == FilterOperator.ENDS_WITH:
        return f"{literal}$"
    return literal


def _mongo_fragment(op: FilterOperator, val: Any) -> dict[str, Any]:
    mongo_op = MONGO_OPERATORS.get(op)
    if mongo_op is not None:
        return {mongo_op: val}
    return {"$regex": regex_pattern(op, val), "$options": "i"}


# -- in-memory evaluation ----------------------------------------------------


def _candidates(actual: Any) -> list[Any]:
    # Array fields match when any element matches, as in the document store
    if isinstance(actual, list | tuple):
        return [actual, *actual]
    return [actual]


def _eq(actual: Any, expected: Any) -> bool:
    return any(c == expected for c in _candidates(actual))


def _in(actual: Any, expected: list[Any]) -> bool:
    return any(c in expected for c in _candidates(actual))


def _compare(fn: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def evaluate(actual: Any, expected: Any) -> bool:
        for candidate in _candidates(actual):
            if candidate is None or isinstance(candidate, list | tuple):
                continue
            try:
                if fn(candidate, expected):
                    return True
            except TypeError:
                continue
        return False

    return evaluate


def _regex(op: FilterOperator) -> Callable[[Any, Any], bool]:
    def evaluate(actual: Any, expected: Any) -> bool:
        pattern = re.compile(regex_pattern(op, expected), re.IGNORECASE)
        return any(
            isinstance(c, str) and pattern.search(c) is not None
            for c in _candidates(actual)
        )

    return evaluate


_MEMORY_EVALUATORS: dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.EQ: _eq,
    FilterOperator.NE: lambda actual, expected: not _eq(actual, expected),
    FilterOperator.GT: _compare(lambda a, b: a > b),
    FilterOperator.GE: _compare(lambda a, b: a >= b),
    FilterOperator.LT: _compare(lambda a, b: a < b),
    FilterOperator.LE: _compare(lambda a, b: a <= b),
    FilterOperator.IN: _in,
    FilterOperator.NOT_IN: lambda actual, expected: not _in(actual, expected),
    FilterOperator.CONTAINS: _regex(FilterOperator.CONTAINS),
    FilterOperator.STARTS_WITH: _regex(FilterOperator.STARTS_WITH),
    FilterOperator.ENDS_WITH: _regex(FilterOperator.ENDS_WITH),
}
