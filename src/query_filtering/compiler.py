"""
FilterCompiler: request parameters -> predicate tree.

The compiler is the injection-safety boundary of the package: parameter
names must be registered fields or reserved names, operators must be in
the field's allowlist, and values are coerced to typed literals. Nothing
a client sends becomes query syntax outside :class:`FilterOperator`.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from .coercion import ValueCoercer
from .exceptions import QueryValidationError, suggest
from .fields import FieldType
from .operators import FilterOperator, describe_operators, resolve_operator
from .params import QueryParamsInput, normalise_params
from .predicates import AndFilter, FieldFilter
from .syntax import OperatorGrammar

if TYPE_CHECKING:
    from .fields import FieldConfig
    from .registry import FieldConfigRegistry

logger = logging.getLogger(__name__)

FILTERS_PARAM = "filters"

# Storage field -> operator -> coerced operand
_FieldConditions = dict[str, dict[FilterOperator, Any]]


class FilterCompiler:
    """Compile allowlisted filter parameters into an :class:`AndFilter`."""

    def __init__(
        self,
        registry: FieldConfigRegistry,
        *,
        coercer: ValueCoercer | None = None,
        grammar: OperatorGrammar | None = None,
    ) -> None:
        self._registry = registry
        self._coercer = coercer or ValueCoercer()
        self._grammar = grammar or OperatorGrammar(
            allow_packed=registry.config.allow_packed_operators
        )

    # -- public API ----------------------------------------------------------

    def validate_params(self, params: Mapping[str, list[Any]]) -> None:
        """Raise for the first parameter that is neither reserved nor registered."""
        for name, values in params.items():
            if not self._registry.is_allowed_param(name):
                raise self._unsupported_field(
                    "Unsupported query parameter", name, values[0] if values else ""
                )

    def compile(self, params: QueryParamsInput | Mapping[str, list[Any]]) -> AndFilter:
        """
        Return one :class:`FieldFilter` per storage field, combined with AND.

        The structured ``filters`` parameter is applied first, then direct
        parameters in the order they appear; a later equality on a field
        replaces everything before it.
        """
        normalised = normalise_params(params)
        self.validate_params(normalised)

        state: _FieldConditions = {}
        for raw in normalised.get(FILTERS_PARAM, ()):
            self._apply_structured(state, raw)

        for name, values in normalised.items():
            cfg = self._registry.get(name)
            if cfg is None:
                continue
            for raw in values:
                text = _text(raw)
                for expr in self._grammar.parse(text):
                    self._check_operator(name, cfg, expr.operator, text, expr.explicit)
                    value = self._coercer.coerce(expr.value, cfg, name)
                    self._fold(state, cfg, expr.operator, value)

        tree = AndFilter(
            *(FieldFilter(storage, conditions) for storage, conditions in state.items())
        )
        logger.debug(
            "Compiled %d field filter(s) for %s", len(tree), self._registry.entity
        )
        return tree

    # -- structured ``filters`` ------------------------------------------------

    def _apply_structured(self, state: _FieldConditions, raw: Any) -> None:
        data = raw
        if isinstance(raw, str):
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, RecursionError) as exc:
                reason = getattr(exc, "msg", "nesting too deep")
                raise QueryValidationError(
                    f"Invalid JSON in '{FILTERS_PARAM}' parameter: {reason}",
                    field=FILTERS_PARAM,
                    value=raw,
                    expected_type="json_object",
                ) from exc
        if not isinstance(data, Mapping):
            raise QueryValidationError(
                f"'{FILTERS_PARAM}' must be a JSON object of field filters",
                field=FILTERS_PARAM,
                value=str(raw),
                expected_type="json_object",
            )

        for name, value in data.items():
            if value is None:
                continue
            cfg = self._registry.get(name)
            if cfg is None:
                raise self._unsupported_field(
                    "Unsupported field in filters JSON", name, _text(value)
                )
            if isinstance(value, Mapping):
                for token, operand in value.items():
                    if operand is None:
                        continue
                    op = resolve_operator(str(token))
                    if op is None:
                        raise self._operator_error(
                            name, cfg, str(token), _text(operand)
                        )
                    self._check_operator(name, cfg, op, _text(operand), True)
                    coerced = self._coerce_operand(operand, cfg, name)
                    self._fold(state, cfg, op, coerced)
            else:
                self._check_operator(name, cfg, FilterOperator.EQ, _text(value), False)
                coerced = self._coerce_operand(value, cfg, name)
                self._fold(state, cfg, FilterOperator.EQ, coerced)

    def _coerce_operand(self, operand: Any, cfg: FieldConfig, name: str) -> Any:
        if isinstance(operand, list | tuple):
            return [self._coercer.coerce_single(_text(v), cfg, name) for v in operand]
        if isinstance(operand, Mapping):
            raise QueryValidationError(
                f"Nested objects are not valid filter values for field '{name}'",
                field=name,
                value=_text(operand),
                expected_type=cfg.type.value,
            )
        return self._coercer.coerce(_text(operand), cfg, name)

    # -- folding -------------------------------------------------------------

    @staticmethod
    def _fold(
        state: _FieldConditions,
        cfg: FieldConfig,
        op: FilterOperator,
        value: Any,
    ) -> None:
        storage = cfg.storage_field
        if op == FilterOperator.EQ:
            # Equality replaces everything before it on the field
            if isinstance(value, list):
                state[storage] = {FilterOperator.IN: value}
            elif cfg.type == FieldType.BOOLEAN and value is False:
                # Documents without the field count as false
                state[storage] = {FilterOperator.IN: [False, None]}
            else:
                state[storage] = {FilterOperator.EQ: value}
            return

        if op == FilterOperator.NE and isinstance(value, list):
            op = FilterOperator.NOT_IN
        state.setdefault(storage, {})[op] = value

    # -- errors --------------------------------------------------------------

    def _check_operator(
        self,
        name: str,
        cfg: FieldConfig,
        op: FilterOperator,
        raw: str,
        explicit: bool,
    ) -> None:
        if cfg.allows(op):
            return
        supported = describe_operators(cfg.operators)
        if explicit:
            raise self._operator_error(name, cfg, op.value, raw)
        raise QueryValidationError(
            f"Field '{name}' does not support simple equality filtering. "
            f"Use explicit operators: {supported}",
            field=name,
            value=raw,
            expected_type=f"operator ({supported})",
        )

    @staticmethod
    def _operator_error(
        name: str, cfg: FieldConfig, token: str, raw: str
    ) -> QueryValidationError:
        supported = describe_operators(cfg.operators)
        return QueryValidationError(
            f"Unsupported operator '{token}' for field '{name}'. "
            f"Supported operators: {supported}",
            field=name,
            value=raw,
            expected_type=f"operator ({supported})",
        )

    def _unsupported_field(
        self, prefix: str, name: str, value: Any
    ) -> QueryValidationError:
        available = self._registry.field_names
        suggestions = suggest(name, available)
        message = f"{prefix}: '{name}'. Supported fields are: {', '.join(available)}"
        if suggestions:
            message += f". Did you mean: {', '.join(suggestions)}?"
        return QueryValidationError(
            message,
            field=name,
            value=_text(value),
            expected_type="supported_field",
            suggestions=suggestions,
        )


def _text(value: Any) -> str:
    """Render a decoded JSON scalar as the string a query parameter would carry."""
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str)
