"""
Configuration of the cast primitive (pydantic) for every field type.

Each non-embedded field is cast with a ``TypeAdapter`` built from the annotation
returned by ``cast_annotation``. Coercion follows pydantic's lax mode (``"12"``
becomes ``12`` for an integer field) with a few guards so that booleans and
numbers are not silently reinterpreted across kinds. Floats must be finite
and binary values valid UTF-8, so every cast value has a JSON form.

Records store arrays as tuples, see ``record_annotation``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Annotated, Any, Callable, Dict, List, Literal, Optional, Tuple

from pydantic import AfterValidator, BeforeValidator, FiniteFloat

from .errors import SchemaDefinitionError
from .field_types import ArrayType, EntityType, EnumType, FieldType, ScalarKind, ScalarType


def _reject_bool(value: Any) -> Any:
    if isinstance(value, bool):
        raise ValueError("booleans are not accepted as numbers")
    return value


def _reject_non_bool_number(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        raise ValueError("numbers are not accepted as booleans")
    return value


def _reject_number(value: Any) -> Any:
    if isinstance(value, (int, float, Decimal)):
        raise ValueError("numbers are not accepted as dates or times")
    return value


def _truncate_usec(value: Any) -> Any:
    return value.replace(microsecond=0)


def _strip_tz(value: Any) -> Any:
    return value.replace(tzinfo=None)


def _require_utf8(value: bytes) -> bytes:
    # records serialize binary fields as UTF-8 text
    try:
        value.decode("utf-8")
    except UnicodeDecodeError:
        raise ValueError("binary values must be valid UTF-8") from None
    return value


def _to_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


SCALAR_CAST_TYPES: Dict[ScalarKind, Any] = {
    ScalarKind.BINARY: Annotated[bytes, AfterValidator(_require_utf8)],
    ScalarKind.BINARY_ID: str,
    ScalarKind.BOOLEAN: Annotated[bool, BeforeValidator(_reject_non_bool_number)],
    ScalarKind.FLOAT: Annotated[FiniteFloat, BeforeValidator(_reject_bool)],
    ScalarKind.ID: Annotated[int, BeforeValidator(_reject_bool)],
    ScalarKind.INTEGER: Annotated[int, BeforeValidator(_reject_bool)],
    ScalarKind.STRING: str,
    ScalarKind.MAP: dict,
    ScalarKind.DECIMAL: Annotated[Decimal, BeforeValidator(_reject_bool)],
    ScalarKind.DATE: Annotated[date, BeforeValidator(_reject_number)],
    ScalarKind.TIME: Annotated[time, BeforeValidator(_reject_number), AfterValidator(_strip_tz), AfterValidator(_truncate_usec)],
    ScalarKind.TIME_USEC: Annotated[time, BeforeValidator(_reject_number), AfterValidator(_strip_tz)],
    ScalarKind.NAIVE_DATETIME: Annotated[datetime, BeforeValidator(_reject_number), AfterValidator(_strip_tz), AfterValidator(_truncate_usec)],
    ScalarKind.NAIVE_DATETIME_USEC: Annotated[datetime, BeforeValidator(_reject_number), AfterValidator(_strip_tz)],
    ScalarKind.UTC_DATETIME: Annotated[datetime, BeforeValidator(_reject_number), AfterValidator(_to_utc), AfterValidator(_truncate_usec)],
    ScalarKind.UTC_DATETIME_USEC: Annotated[datetime, BeforeValidator(_reject_number), AfterValidator(_to_utc)],
}

# Plain Python types held by records
SCALAR_RECORD_TYPES: Dict[ScalarKind, Any] = {
    ScalarKind.BINARY: bytes,
    ScalarKind.BINARY_ID: str,
    ScalarKind.BOOLEAN: bool,
    ScalarKind.FLOAT: float,
    ScalarKind.ID: int,
    ScalarKind.INTEGER: int,
    ScalarKind.STRING: str,
    ScalarKind.MAP: dict,
    ScalarKind.DECIMAL: Decimal,
    ScalarKind.DATE: date,
    ScalarKind.TIME: time,
    ScalarKind.TIME_USEC: time,
    ScalarKind.NAIVE_DATETIME: datetime,
    ScalarKind.NAIVE_DATETIME_USEC: datetime,
    ScalarKind.UTC_DATETIME: datetime,
    ScalarKind.UTC_DATETIME_USEC: datetime,
}


def _enum_normalizer(enum_type: EnumType) -> Callable[[Any], Any]:
    lookup = enum_type.tag_lookup

    def normalize(value: Any) -> Any:
        if isinstance(value, PyEnum):
            value = value.value
        if isinstance(value, bool):
            raise ValueError("booleans are not enum values")
        if lookup and isinstance(value, str) and value in lookup:
            return lookup[value]
        return value

    return normalize


def enum_literal(enum_type: EnumType) -> Any:
    return Literal[enum_type.json_values]


def enum_cast_type(enum_type: EnumType) -> Any:
    return Annotated[enum_literal(enum_type), BeforeValidator(_enum_normalizer(enum_type))]


def cast_annotation(field_type: FieldType) -> Any:
    """Annotation used to cast a non-embedded field."""
    if isinstance(field_type, ScalarType):
        return SCALAR_CAST_TYPES[field_type.kind]
    if isinstance(field_type, EnumType):
        return enum_cast_type(field_type)
    if isinstance(field_type, ArrayType) and not isinstance(field_type.inner, EntityType):
        return List[cast_annotation(field_type.inner)]
    raise SchemaDefinitionError(f"Embedded type {field_type.label} is not cast directly")


def record_annotation(field_type: FieldType) -> Any:
    """Annotation of the field on the typed record model."""
    if isinstance(field_type, ScalarType):
        return SCALAR_RECORD_TYPES[field_type.kind]
    if isinstance(field_type, EnumType):
        return enum_literal(field_type)
    if isinstance(field_type, EntityType):
        return field_type.schema.structural_validator.record_model
    if isinstance(field_type, ArrayType):
        return Tuple[record_annotation(field_type.inner), ...]
    raise SchemaDefinitionError(f"Unsupported field type: {field_type!r}")


def blank_to_none(value: Any) -> Optional[Any]:
    """Blank strings count as absent values."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def to_record_value(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value
