"""
FieldConfigRegistry: the immutable per-entity filter allowlist.

Built once at process start. Construction fails fast with
:class:`ConfigurationError` when the entity schema has a field that is
neither filterable nor explicitly excluded, so a forgotten field is a
startup failure rather than a silently unfilterable parameter.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .config import RESERVED_PARAMS, QueryParserConfig
from .exceptions import ConfigurationError
from .fields import IMPLICIT_SCHEMA_FIELDS, FieldConfig

logger = logging.getLogger(__name__)


def schema_field_names(schema: type[BaseModel] | Iterable[str]) -> frozenset[str]:
    """Return the stored field names of a pydantic model class or a name list."""
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return frozenset(
            info.alias or name for name, info in schema.model_fields.items()
        )
    if isinstance(schema, str):
        raise TypeError("schema must be a model class or an iterable of names")
    return frozenset(schema)


class FieldConfigRegistry:
    """
    Filterable, excluded and sortable fields of one entity type.

    Args:
        entity: Entity name used in log and error messages.
        fields: Public parameter name -> :class:`FieldConfig` (or its dict form).
        excluded: Schema fields deliberately not filterable.
        schema: Pydantic model class or field-name list to check coverage against.
        sortable: Extra public names usable in ``sort`` but not as filters.
        config: Result-shaping configuration for the entity.
    """

    _frozen = False

    def __init__(
        self,
        entity: str,
        fields: Mapping[str, FieldConfig | Mapping[str, Any]],
        *,
        excluded: Iterable[str] = (),
        schema: type[BaseModel] | Iterable[str] | None = None,
        sortable: Iterable[str] = (),
        config: QueryParserConfig | None = None,
    ) -> None:
        self._entity = entity
        built = {
            name: self._build_field(entity, name, cfg) for name, cfg in fields.items()
        }
        self._fields: Mapping[str, FieldConfig] = MappingProxyType(built)
        self._excluded = frozenset(excluded)
        self._sortable = frozenset(sortable)
        self._config = config or QueryParserConfig()

        reserved = RESERVED_PARAMS & self._fields.keys()
        if reserved:
            raise ConfigurationError(
                f"{entity}: reserved parameter names cannot be filter fields: "
                f"{', '.join(sorted(reserved))}"
            )
        overlap = self._excluded & self._fields.keys()
        if overlap:
            raise ConfigurationError(
                f"{entity}: fields both filterable and excluded: "
                f"{', '.join(sorted(overlap))}"
            )
        if schema is not None:
            self._check_completeness(schema_field_names(schema))
        for name in self._config.default_sort.split(","):
            name = name.strip().lstrip("+-")
            if name and self.sort_storage_field(name) is None:
                raise ConfigurationError(
                    f"{entity}: default sort field {name!r} is not filterable "
                    "or sortable"
                )

        self._frozen = True
        logger.info(
            "Filter registry for %s: %d filterable, %d excluded, %d sort-only",
            entity,
            len(self._fields),
            len(self._excluded),
            len(self._sortable),
        )

    def __setattr__(self, name: str, value: Any) -> None:
        if self._frozen:
            raise AttributeError(f"{type(self).__name__} is immutable")
        super().__setattr__(name, value)

    @staticmethod
    def _build_field(
        entity: str, name: str, cfg: FieldConfig | Mapping[str, Any]
    ) -> FieldConfig:
        if isinstance(cfg, FieldConfig):
            return cfg
        try:
            return FieldConfig.model_validate(cfg)
        except PydanticValidationError as exc:
            raise ConfigurationError(
                f"{entity}: invalid filter config for {name!r}: {exc}"
            ) from exc

    def _check_completeness(self, schema_fields: frozenset[str]) -> None:
        covered = set(self._fields) | self._excluded | IMPLICIT_SCHEMA_FIELDS
        # Nested filter keys ("company.name") cover their parent document
        covered |= {name.split(".", 1)[0] for name in self._fields}
        covered |= {cfg.field.split(".", 1)[0] for cfg in self._fields.values()}

        missing = schema_fields - covered
        if missing:
            raise ConfigurationError(
                f"{self._entity}: schema fields neither filterable nor excluded: "
                f"{', '.join(sorted(missing))}"
            )
        unknown = self._excluded - schema_fields
        if unknown:
            raise ConfigurationError(
                f"{self._entity}: excluded fields not in schema: "
                f"{', '.join(sorted(unknown))}"
            )

    # -- look-up -------------------------------------------------------------

    @property
    def entity(self) -> str:
        return self._entity

    @property
    def config(self) -> QueryParserConfig:
        return self._config

    @property
    def fields(self) -> Mapping[str, FieldConfig]:
        return self._fields

    @property
    def excluded(self) -> frozenset[str]:
        return self._excluded

    @property
    def field_names(self) -> list[str]:
        """Sorted public names of the filterable fields."""
        return sorted(self._fields)

    def get(self, name: str) -> FieldConfig | None:
        return self._fields.get(name)

    def is_allowed_param(self, name: str) -> bool:
        return name in RESERVED_PARAMS or name in self._fields

    def sort_storage_field(self, name: str) -> str | None:
        """Storage name for a public sort field, or ``None`` if not sortable."""
        cfg = self._fields.get(name)
        if cfg is not None:
            return cfg.storage_field
        if name in self._sortable:
            return "_id" if name == "id" else name
        return None

    @property
    def sortable_names(self) -> list[str]:
        return sorted(self._fields.keys() | self._sortable)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldConfigRegistry({self._entity!r}, fields={self.field_names})"
