"""Shared fixtures: a ``Project`` entity schema and its filter registry."""

from __future__ import annotations

import datetime
from collections.abc import Callable

import pytest
from pydantic import BaseModel

from query_filtering import (
    BASE_FILTERABLE_FIELDS,
    FieldConfigRegistry,
    QueryParser,
    QueryParserConfig,
    SearchFields,
)


class Company(BaseModel):
    name: str
    country: str | None = None


class Project(BaseModel):
    id: str
    name: str
    status: str
    price: float
    active: bool = True
    tags: list[str] = []
    owner_id: str
    company: Company | None = None
    internal_notes: str | None = None
    created_at: datetime.datetime
    updated_at: datetime.datetime
    is_deleted: bool = False


PROJECT_FIELDS = {
    "id": {"field": "id", "type": "id", "operators": ["eq", "in"]},
    "name": {
        "field": "name",
        "type": "string",
        "operators": ["contains", "starts", "ends"],
    },
    "status": {
        "field": "status",
        "type": "string",
        "operators": ["eq", "neq", "in", "nin"],
        "allow_multiple": True,
    },
    "price": {
        "field": "price",
        "type": "number",
        "operators": ["eq", "gt", "gte", "lt", "lte"],
    },
    "active": {"field": "active", "type": "boolean", "operators": ["eq"]},
    "tags": {
        "field": "tags",
        "type": "array",
        "operators": ["eq", "in", "nin"],
        "allow_multiple": True,
    },
    "owner_id": {
        "field": "owner_id",
        "type": "id",
        "operators": ["eq", "in"],
        "allow_multiple": True,
    },
    "company.name": {
        "field": "company.name",
        "type": "string",
        "operators": ["eq", "contains"],
    },
    **BASE_FILTERABLE_FIELDS,
}

PROJECT_SEARCH = SearchFields(text_fields=("name",), exact_fields=("status",))


def build_registry(**config: object) -> FieldConfigRegistry:
    return FieldConfigRegistry(
        "project",
        PROJECT_FIELDS,
        excluded=("internal_notes",),
        schema=Project,
        config=QueryParserConfig(search_fields=PROJECT_SEARCH, **config),
    )


@pytest.fixture
def registry() -> FieldConfigRegistry:
    """Filter registry for the ``Project`` entity."""
    return build_registry()


@pytest.fixture
def parser(registry: FieldConfigRegistry) -> QueryParser:
    return QueryParser(registry)


@pytest.fixture
def make_registry() -> Callable[..., FieldConfigRegistry]:
    """Build a ``Project`` registry with overridden ``QueryParserConfig`` values."""
    return build_registry
