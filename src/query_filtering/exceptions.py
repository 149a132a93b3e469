"""
Query-filtering exception hierarchy.

All request-facing errors inherit from ``RequestValidationError`` and
serialise to a field-keyed list of messages via ``to_dict()``.
"""

from __future__ import annotations

from difflib import get_close_matches
from typing import Any


class QueryFilteringError(Exception):
    """Root exception for the query-filtering package."""


class ConfigurationError(QueryFilteringError):
    """Raised at startup when a filter configuration is incomplete or invalid."""


class RequestValidationError(QueryFilteringError):
    """Raised when client input fails validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": "VALIDATION_ERROR",
            "errors": {key: list(msgs) for key, msgs in self.errors.items()},
        }


class QueryValidationError(RequestValidationError):
    """
    A single client-supplied parameter failed validation.

    Always attributable to exactly one ``field``/``value`` pair.
    ``expected_type`` describes what would have been accepted (a type
    name, ``supported_field`` or an operator set) and is suitable for a
    user-facing message.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str,
        value: str,
        expected_type: str,
        suggestions: list[str] | None = None,
    ) -> None:
        self.message = message
        self.field = field
        self.value = value
        self.expected_type = expected_type
        self.suggestions = list(suggestions or [])
        super().__init__({field: [message]})
        # str(err) is the message, not the error map
        self.args = (message,)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error": "QUERY_VALIDATION_ERROR",
            "message": self.message,
            "field": self.field,
            "value": self.value,
            "expected_type": self.expected_type,
            "errors": {self.field: [self.message]},
        }
        if self.suggestions:
            data["suggestions"] = list(self.suggestions)
        return data


def suggest(name: str, candidates: list[str]) -> list[str]:
    """Close matches of *name* among *candidates*, best first."""
    return get_close_matches(name, candidates, n=3, cutoff=0.6)
