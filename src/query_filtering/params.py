"""Normalise the many shapes of "query parameters" to one multi-valued map."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Union
from urllib.parse import parse_qsl

QueryParamsInput = Union[str, Mapping[str, Any], Iterable[tuple[str, Any]]]


def normalise_params(params: QueryParamsInput | None) -> dict[str, list[Any]]:
    """
    Return ``{name: [values...]}`` preserving first-seen key order.

    Accepts a raw query string (``"a=1&a=2"``), a mapping whose values are
    strings or sequences of strings, framework multi-dicts (anything with
    ``multi_items()`` or ``getlist()``), or an iterable of ``(name, value)``
    pairs. A decoded mapping under ``filters`` is kept as-is; ``None``
    values are dropped.
    """
    if params is None:
        return {}
    if isinstance(params, str):
        pairs: Iterable[tuple[str, Any]] = parse_qsl(
            params.lstrip("?"), keep_blank_values=True
        )
    elif hasattr(params, "multi_items"):
        pairs = params.multi_items()  # type: ignore[union-attr]
    elif hasattr(params, "getlist"):
        getlist = params.getlist  # type: ignore[union-attr]
        pairs = [(key, value) for key in params for value in getlist(key)]
    elif isinstance(params, Mapping):
        pairs = _mapping_pairs(params)
    else:
        pairs = params

    result: dict[str, list[Any]] = {}
    for key, value in pairs:
        if value is None:
            continue
        if not isinstance(value, str | Mapping):
            value = str(value)
        result.setdefault(str(key), []).append(value)
    return result


def _mapping_pairs(params: Mapping[str, Any]) -> list[tuple[str, Any]]:
    pairs: list[tuple[str, Any]] = []
    for key, value in params.items():
        if isinstance(value, list | tuple):
            pairs.extend((key, item) for item in value)
        else:
            pairs.append((key, value))
    return pairs


def first_value(params: Mapping[str, list[Any]], *names: str) -> Any | None:
    """First non-empty value among *names*, in the given order."""
    for name in names:
        for value in params.get(name, ()):
            if value != "":
                return value
    return None
