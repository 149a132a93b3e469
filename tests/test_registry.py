"""Tests for FieldConfig, QueryParserConfig and FieldConfigRegistry."""

from __future__ import annotations

import pytest
from pydantic import BaseModel, ValidationError

from query_filtering import (
    ConfigurationError,
    FieldConfig,
    FieldConfigRegistry,
    FieldType,
    FilterOperator,
    QueryParserConfig,
)


class Widget(BaseModel):
    name: str
    size: int
    secret: str


class TestFieldConfig:
    def test_defaults(self) -> None:
        cfg = FieldConfig(field="name")
        assert cfg.type is FieldType.STRING
        assert cfg.operators == frozenset({FilterOperator.EQ})
        assert cfg.allow_multiple is False
        assert cfg.validate_values is True

    def test_operator_aliases_are_normalised(self) -> None:
        cfg = FieldConfig(field="status", operators=["ne", "not_in", "eq"])
        assert cfg.operators == {
            FilterOperator.NE,
            FilterOperator.NOT_IN,
            FilterOperator.EQ,
        }

    def test_unknown_operator_is_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Unknown filter operator"):
            FieldConfig(field="status", operators=["like"])

    def test_empty_operator_set_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldConfig(field="status", operators=[])

    def test_validate_alias(self) -> None:
        assert FieldConfig.model_validate(
            {"field": "x", "validate": False}
        ).validate_values is False

    def test_id_is_stored_as_underscore_id(self) -> None:
        assert FieldConfig(field="id", type="id").storage_field == "_id"
        assert FieldConfig(field="owner_id", type="id").storage_field == "owner_id"

    def test_is_immutable(self) -> None:
        cfg = FieldConfig(field="name")
        with pytest.raises(ValidationError):
            cfg.field = "other"  # type: ignore[misc]


class TestQueryParserConfig:
    def test_defaults(self) -> None:
        config = QueryParserConfig()
        assert config.default_sort == "-created_at"
        assert config.default_page_size == 20
        assert config.max_page_size == 100
        assert config.allow_packed_operators is True

    def test_default_page_size_must_fit_max(self) -> None:
        with pytest.raises(ValidationError, match="exceeds max_page_size"):
            QueryParserConfig(default_page_size=50, max_page_size=10)


def _widget_registry(**kwargs: object) -> FieldConfigRegistry:
    options: dict[str, object] = {
        "excluded": ("secret",),
        "schema": Widget,
        "config": QueryParserConfig(default_sort="name"),
    }
    options.update(kwargs)
    return FieldConfigRegistry(
        "widget",
        {
            "name": FieldConfig(field="name"),
            "size": {"field": "size", "type": "number"},
        },
        **options,  # type: ignore[arg-type]
    )


class TestRegistry:
    def test_lookup(self, registry: FieldConfigRegistry) -> None:
        assert "price" in registry
        assert "internal_notes" not in registry
        assert registry.get("price") is not None
        assert registry.get("nope") is None
        assert registry.excluded == {"internal_notes"}
        assert registry.field_names == sorted(registry.fields)

    def test_reserved_names_are_allowed_params(
        self, registry: FieldConfigRegistry
    ) -> None:
        for name in ("search", "q", "sort", "page", "page_size", "filters"):
            assert registry.is_allowed_param(name)
        assert not registry.is_allowed_param("internal_notes")

    def test_dict_configs_are_validated(self) -> None:
        registry = _widget_registry()
        assert registry.get("size") == FieldConfig(field="size", type="number")

    def test_schema_as_name_list(self) -> None:
        registry = _widget_registry(schema=["name", "size", "secret"])
        assert len(registry) == 2

    def test_uncovered_schema_field_fails_construction(self) -> None:
        with pytest.raises(ConfigurationError, match="secret"):
            _widget_registry(excluded=())

    def test_every_uncovered_field_is_named(self) -> None:
        with pytest.raises(ConfigurationError, match="colour, secret"):
            _widget_registry(excluded=(), schema=["name", "size", "secret", "colour"])

    def test_excluded_field_must_exist_in_schema(self) -> None:
        with pytest.raises(ConfigurationError, match="not in schema: ghost"):
            _widget_registry(excluded=("secret", "ghost"))

    def test_field_cannot_be_filterable_and_excluded(self) -> None:
        with pytest.raises(ConfigurationError, match="both filterable and excluded"):
            _widget_registry(excluded=("secret", "size"))

    def test_reserved_name_cannot_be_a_field(self) -> None:
        with pytest.raises(ConfigurationError, match="reserved"):
            FieldConfigRegistry(
                "widget",
                {"page": {"field": "page"}},
                config=QueryParserConfig(default_sort="page"),
            )

    def test_invalid_field_config_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError, match="invalid filter config"):
            FieldConfigRegistry(
                "widget",
                {"size": {"field": "size", "type": "money"}},
                config=QueryParserConfig(default_sort="size"),
            )

    def test_default_sort_must_be_sortable(self) -> None:
        with pytest.raises(ConfigurationError, match="default sort field"):
            _widget_registry(config=QueryParserConfig())

    def test_sort_only_fields(self) -> None:
        registry = _widget_registry(
            config=QueryParserConfig(default_sort="-score"), sortable=("score",)
        )
        assert registry.sort_storage_field("score") == "score"
        assert "score" not in registry
        assert registry.sortable_names == ["name", "score", "size"]

    def test_nested_keys_cover_their_parent_document(
        self, registry: FieldConfigRegistry
    ) -> None:
        # "company" is covered by the "company.name" filter
        assert registry.get("company.name") is not None

    def test_registry_is_read_only(self, registry: FieldConfigRegistry) -> None:
        with pytest.raises(AttributeError):
            registry._fields = {}
        with pytest.raises(TypeError):
            registry.fields["price"] = FieldConfig(field="price")  # type: ignore[index]

    def test_construction_is_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("INFO", logger="query_filtering.registry"):
            _widget_registry()
        assert "Filter registry for widget" in caplog.text
