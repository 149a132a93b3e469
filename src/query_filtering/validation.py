"""PatchValidator: validate a PATCH body against a pydantic model, partially."""

from __future__ import annotations

import inspect
from collections.abc import Mapping
from typing import Annotated, Any, get_args

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic.fields import FieldInfo

from .exceptions import RequestValidationError
from .patch import PatchTranslator, to_partial_update


def _nested_model(annotation: Any) -> type[BaseModel] | None:
    candidates = [annotation, *get_args(annotation)]
    for candidate in candidates:
        if inspect.isclass(candidate) and issubclass(candidate, BaseModel):
            return candidate
    return None


class PatchValidator:
    """
    Turn a PATCH body into a validated partial update.

    JSON Patch documents are translated first; any other body is taken as
    a literal partial-update object. Only the keys present are validated
    (nested models recursively), ``None`` marks a removal and is refused
    for required fields. Failures raise :class:`RequestValidationError`
    with ``{"dotted.path": [messages]}``.
    """

    def __init__(
        self,
        model: type[BaseModel],
        *,
        translator: PatchTranslator | None = None,
    ) -> None:
        self._model = model
        self._translator = translator or PatchTranslator()
        self._adapters: dict[tuple[type[BaseModel], str], TypeAdapter[Any]] = {}

    def validate(self, body: Any) -> dict[str, Any]:
        update = to_partial_update(body, self._translator)
        if not isinstance(update, Mapping):
            raise RequestValidationError(
                {"__root__": ["Expected a JSON object or a JSON Patch array"]}
            )
        errors: dict[str, list[str]] = {}
        result = self._validate_partial(self._model, update, "", errors)
        if errors:
            raise RequestValidationError(errors)
        return result

    def _validate_partial(
        self,
        model: type[BaseModel],
        data: Mapping[str, Any],
        prefix: str,
        errors: dict[str, list[str]],
    ) -> dict[str, Any]:
        declared = {
            info.alias or name: (name, info)
            for name, info in model.model_fields.items()
        }
        extra = model.model_config.get("extra")
        out: dict[str, Any] = {}
        for key, value in data.items():
            loc = f"{prefix}{key}"
            entry = declared.get(key)
            if entry is None:
                if extra == "forbid":
                    errors.setdefault(loc, []).append("Extra inputs are not permitted")
                elif extra == "allow":
                    out[key] = value
                continue
            name, info = entry
            if value is None:
                if info.is_required():
                    errors.setdefault(loc, []).append("Field required")
                else:
                    out[key] = None
                continue
            nested = _nested_model(info.annotation)
            if nested is not None and isinstance(value, Mapping):
                out[key] = self._validate_partial(nested, value, f"{loc}.", errors)
                continue
            try:
                out[key] = self._adapter(model, name, info).validate_python(value)
            except PydanticValidationError as exc:
                for error in exc.errors():
                    sub = ".".join(str(p) for p in error.get("loc", ()))
                    errors.setdefault(f"{loc}.{sub}" if sub else loc, []).append(
                        error.get("msg", "validation error")
                    )
        return out

    def _adapter(
        self, model: type[BaseModel], name: str, info: FieldInfo
    ) -> TypeAdapter[Any]:
        key = (model, name)
        adapter = self._adapters.get(key)
        if adapter is None:
            field_type = (
                Annotated[(info.annotation, *info.metadata)]
                if info.metadata
                else info.annotation
            )
            adapter = TypeAdapter(field_type)
            self._adapters[key] = adapter
        return adapter
