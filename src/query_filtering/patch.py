"""
JSON Patch (RFC 6902) -> nested partial-update object.

``add`` and ``replace`` write their value at the path, creating
intermediate objects; ``remove`` writes an explicit ``None`` (a path that
is not mentioned means "leave unchanged"). ``move``, ``copy`` and
``test`` need the stored document and are accepted without effect.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable, Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import QueryValidationError

logger = logging.getLogger(__name__)

PatchOp = Literal["add", "remove", "replace", "move", "copy", "test"]
_OPS = "add, remove, replace, move, copy, test"
_INERT_OPS = frozenset({"move", "copy", "test"})
_VALUE_OPS = frozenset({"add", "replace"})


class PatchOperation(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    op: PatchOp
    path: str
    value: Any = None
    from_: str | None = Field(default=None, alias="from")


def is_patch_document(body: Any) -> bool:
    """True for a non-empty list whose every element has string ``op`` and ``path``."""
    return (
        isinstance(body, list)
        and len(body) > 0
        and all(
            isinstance(item, Mapping)
            and isinstance(item.get("op"), str)
            and isinstance(item.get("path"), str)
            for item in body
        )
    )


def split_path(path: str) -> list[str]:
    """Split a slash-delimited path, decoding ``~1`` and ``~0`` escapes."""
    return [
        part.replace("~1", "/").replace("~0", "~")
        for part in path.split("/")
        if part
    ]


class PatchTranslator:
    """Translate patch operations into one partial-update mapping."""

    def translate(
        self, operations: Iterable[PatchOperation | Mapping[str, Any]]
    ) -> dict[str, Any]:
        update: dict[str, Any] = {}
        for index, raw in enumerate(operations):
            operation = self._operation(raw, index)
            if operation.op in _INERT_OPS:
                logger.warning(
                    "JSON Patch '%s' on %s ignored: it needs the stored document",
                    operation.op,
                    operation.path,
                )
                continue
            if operation.op in _VALUE_OPS and "value" not in operation.model_fields_set:
                # A missing value must not turn into the removal sentinel
                raise QueryValidationError(
                    f"JSON Patch '{operation.op}' at index {index} requires a value",
                    field=operation.path,
                    value=operation.op,
                    expected_type="patch value",
                )
            parts = split_path(operation.path)
            if not parts:
                raise QueryValidationError(
                    f"JSON Patch '{operation.op}' path must name a field",
                    field=operation.path,
                    value=operation.path,
                    expected_type="json_pointer",
                )
            value = None if operation.op == "remove" else copy.deepcopy(operation.value)
            self._write(update, parts, value)
        return update

    @staticmethod
    def _operation(
        raw: PatchOperation | Mapping[str, Any], index: int
    ) -> PatchOperation:
        if isinstance(raw, PatchOperation):
            return raw
        try:
            return PatchOperation.model_validate(raw)
        except PydanticValidationError as exc:
            path = raw.get("path") if isinstance(raw, Mapping) else None
            op = raw.get("op") if isinstance(raw, Mapping) else None
            raise QueryValidationError(
                f"Invalid JSON Patch operation at index {index}: "
                f"expected op in ({_OPS}) and a string path",
                field=path if isinstance(path, str) else f"[{index}]",
                value=str(op),
                expected_type=f"patch operation ({_OPS})",
            ) from exc

    @staticmethod
    def _write(target: dict[str, Any], parts: list[str], value: Any) -> None:
        current = target
        for part in parts[:-1]:
            child = current.get(part)
            if not isinstance(child, dict):
                child = {}
                current[part] = child
            current = child
        current[parts[-1]] = value


def to_partial_update(body: Any, translator: PatchTranslator | None = None) -> Any:
    """
    Return the partial update a PATCH body describes.

    Patch documents are translated; anything else is returned unchanged
    to be validated as a literal update object.
    """
    if is_patch_document(body):
        return (translator or PatchTranslator()).translate(body)
    return body
