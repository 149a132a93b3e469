"""
Type-aware conversion of raw parameter strings to typed values.

Every failure raises :class:`QueryValidationError` carrying the public
field name, the raw value and an expected-type description.
"""

from __future__ import annotations

import datetime
import math
import re
from typing import TYPE_CHECKING, Any

from bson import ObjectId

from .exceptions import QueryValidationError
from .fields import FieldType

if TYPE_CHECKING:
    from .fields import FieldConfig

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")
# Plain decimal literals only: no digit separators, no non-ASCII digits
_INTEGER_RE = re.compile(r"^[+-]?[0-9]+$")
_DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$")


def _coerce_number(raw: str, field: str) -> int | float:
    text = raw.strip()
    value: int | float
    if _INTEGER_RE.match(text):
        try:
            value = int(text)
        except ValueError:
            # Beyond the interpreter's integer string limit
            value = float(text)
    elif _DECIMAL_RE.match(text):
        value = float(text)
    else:
        value = math.nan
    if isinstance(value, float) and not math.isfinite(value):
        raise QueryValidationError(
            f"Invalid number format for field '{field}': '{raw}'. "
            "Expected a valid number (e.g., 123, 45.67, -89)",
            field=field,
            value=raw,
            expected_type=FieldType.NUMBER.value,
        )
    return value


def _coerce_boolean(raw: str, field: str) -> bool:
    lowered = raw.lower()
    if lowered not in ("true", "false"):
        raise QueryValidationError(
            f"Invalid boolean format for field '{field}': '{raw}'. "
            "Expected 'true' or 'false'",
            field=field,
            value=raw,
            expected_type=FieldType.BOOLEAN.value,
        )
    return lowered == "true"


def _coerce_date(raw: str, field: str) -> datetime.datetime:
    try:
        result = datetime.datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        # Naive values are read as UTC, aware values normalised to UTC
        if result.tzinfo is None:
            return result.replace(tzinfo=datetime.timezone.utc)
        return result.astimezone(datetime.timezone.utc)
    except (OverflowError, ValueError) as exc:
        raise QueryValidationError(
            f"Invalid date format for field '{field}': '{raw}'. "
            "Expected ISO date format (e.g., '2024-01-15', '2024-01-15T10:30:00Z')",
            field=field,
            value=raw,
            expected_type=FieldType.DATE.value,
        ) from exc


def _coerce_id(raw: str, field: str) -> ObjectId:
    if not _OBJECT_ID_RE.match(raw) or not ObjectId.is_valid(raw):
        raise QueryValidationError(
            f"Invalid id format for field '{field}': '{raw}'. "
            "Expected 24-character hex string (e.g., '507f1f77bcf86cd799439011')",
            field=field,
            value=raw,
            expected_type=FieldType.ID.value,
        )
    return ObjectId(raw)


_COERCERS = {
    FieldType.NUMBER: _coerce_number,
    FieldType.BOOLEAN: _coerce_boolean,
    FieldType.DATE: _coerce_date,
    FieldType.ID: _coerce_id,
}


def coerce_value(raw: str, value_type: FieldType | str, field: str) -> Any:
    """
    Convert a single raw string to the native value for *value_type*.

    ``string`` and ``array`` values pass through unchanged.

    Raises:
        QueryValidationError: If *raw* is not a valid *value_type* literal.
    """
    coercer = _COERCERS.get(FieldType(value_type))
    if coercer is None:
        return raw
    return coercer(raw, field)


class ValueCoercer:
    """Applies a field declaration's type and multiplicity to raw values."""

    def coerce(self, raw: str, config: FieldConfig, field: str) -> Any:
        """
        Coerce *raw* for the public *field* declared by *config*.

        Multi-valued fields split on commas; each element is coerced
        independently and a list is returned.
        """
        if config.allow_multiple and "," in raw:
            return [
                self.coerce_single(part.strip(), config, field)
                for part in raw.split(",")
            ]
        return self.coerce_single(raw, config, field)

    def coerce_single(self, raw: str, config: FieldConfig, field: str) -> Any:
        if not config.validate_values:
            return raw
        return coerce_value(raw, config.type, field)
