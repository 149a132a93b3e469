"""QueryStringBuilder and POST-body conversion to query parameters."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

from .compiler import FILTERS_PARAM

if TYPE_CHECKING:
    from .parser import ParsedQuery

_PAGINATION_PARAMS = ("page", "page_size")


class QueryStringBuilder:
    """Build query strings from a ParsedQuery (e.g. for pagination links)."""

    def build(self, parsed: ParsedQuery, *, page: int | None = None) -> str:
        """Re-encode the request parameters with normalised pagination."""
        pairs: list[tuple[str, Any]] = []
        for key, values in parsed.raw_params.items():
            if key in _PAGINATION_PARAMS:
                continue
            for value in values:
                encoded = json.dumps(value) if isinstance(value, Mapping) else value
                pairs.append((key, encoded))
        pairs.append(("page", page if page is not None else parsed.pagination.page))
        pairs.append(("page_size", parsed.pagination.page_size))
        return urlencode(pairs)

    def next_page(self, parsed: ParsedQuery, total: int) -> str | None:
        if not parsed.pagination.has_next(total):
            return None
        return self.build(parsed, page=parsed.pagination.page + 1)

    def previous_page(self, parsed: ParsedQuery) -> str | None:
        if parsed.pagination.page <= 1:
            return None
        return self.build(parsed, page=parsed.pagination.page - 1)


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _operand(value: Any) -> str:
    if isinstance(value, list | tuple):
        return ",".join(_scalar(v) for v in value)
    return _scalar(value)


def _field_params(out: dict[str, list[str]], name: str, value: Any) -> None:
    if isinstance(value, Mapping):
        # {"gt": 5, "lt": 10} -> repeated keys, one condition each
        for op, operand in value.items():
            if operand is not None:
                out.setdefault(name, []).append(f"{op}:{_operand(operand)}")
    else:
        out.setdefault(name, []).append(_operand(value))


def params_from_body(body: Mapping[str, Any]) -> dict[str, list[str]]:
    """
    Convert a POST-body query object to the parameter map the parser takes.

    ``{"filters": {"status": "active", "price": {"gt": 5}}, "page": 2}``
    becomes ``{"status": ["active"], "price": ["gt:5"], "page": ["2"]}``.
    Lists become comma-separated values; ``None`` entries are skipped.
    """
    out: dict[str, list[str]] = {}
    for key, value in body.items():
        if value is None:
            continue
        if key == FILTERS_PARAM and isinstance(value, Mapping):
            for name, field_value in value.items():
                if field_value is not None:
                    _field_params(out, name, field_value)
        else:
            _field_params(out, key, value)
    return out
