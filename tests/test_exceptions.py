"""Tests for the exception hierarchy and its serialised form."""

from __future__ import annotations

from query_filtering import (
    ConfigurationError,
    QueryFilteringError,
    QueryValidationError,
    RequestValidationError,
)
from query_filtering.exceptions import suggest


def test_hierarchy() -> None:
    assert issubclass(QueryValidationError, RequestValidationError)
    assert issubclass(RequestValidationError, QueryFilteringError)
    assert issubclass(ConfigurationError, QueryFilteringError)
    assert not issubclass(ConfigurationError, RequestValidationError)


def test_query_validation_error() -> None:
    err = QueryValidationError(
        "Invalid number format for field 'price': 'x'",
        field="price",
        value="x",
        expected_type="number",
    )
    assert str(err) == "Invalid number format for field 'price': 'x'"
    assert err.errors == {"price": ["Invalid number format for field 'price': 'x'"]}
    assert err.to_dict() == {
        "error": "QUERY_VALIDATION_ERROR",
        "message": "Invalid number format for field 'price': 'x'",
        "field": "price",
        "value": "x",
        "expected_type": "number",
        "errors": {"price": ["Invalid number format for field 'price': 'x'"]},
    }


def test_suggestions_are_serialised_when_present() -> None:
    err = QueryValidationError(
        "Unsupported query parameter: 'stauts'",
        field="stauts",
        value="a",
        expected_type="supported_field",
        suggestions=["status"],
    )
    assert err.to_dict()["suggestions"] == ["status"]


def test_request_validation_error_shapes() -> None:
    assert RequestValidationError("bad").errors == {"__root__": ["bad"]}
    assert RequestValidationError().errors == {}
    err = RequestValidationError({"age": ["too low"]})
    assert err.to_dict() == {
        "error": "VALIDATION_ERROR",
        "errors": {"age": ["too low"]},
    }


def test_suggest() -> None:
    assert suggest("stauts", ["status", "price", "name"]) == ["status"]
    assert suggest("zzz", ["status", "price"]) == []
