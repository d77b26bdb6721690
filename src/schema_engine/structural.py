"""
Structural validation: cast untyped input into a typed record.

Non-embedded fields (scalars, enums, arrays of those) are cast one by one with a
pydantic ``TypeAdapter``; required ones must be present and non-blank after the
cast. Embedded fields (entities and arrays of entities) are handed to the
referenced schema's own validator, recursively. Every field is checked; errors
are collected into a report keyed by field name, in table order:

```python
{
    "title": [FieldError("can't be blank", {"validation": "required"})],
    "author": {"email": [FieldError("is invalid", {"type": "string", ...})]},
    "comments": [{}, {"body": [FieldError("can't be blank", ...)]}],
}
```

Numeric bounds, lengths, patterns etc. are not checked here, only by the
JSON Schema path.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, create_model

from .casting import blank_to_none, cast_annotation, record_annotation, to_record_value
from .classifier import is_embedded, is_required
from .engine_logging import create_logger, log_exception
from .errors import (
    INVALID_MESSAGE,
    ROOT_ERROR_KEY,
    FieldError,
    StructuralReport,
    cast_error,
    required_error,
)
from .field_types import ArrayType, EntityType
from .properties import Property, PropertyTable

logger = create_logger(__name__)


def build_record_model(name: str, table: PropertyTable) -> Type[BaseModel]:
    """Create the frozen record class for a property table."""
    fields: Dict[str, Any] = {}
    for field_name, prop in table.items():
        annotation = record_annotation(prop.type)
        if isinstance(prop.type, ArrayType) and is_embedded(prop.type):
            fields[field_name] = (annotation, ())
        elif is_required(prop):
            fields[field_name] = (annotation, ...)
        else:
            fields[field_name] = (Optional[annotation], None)
    return create_model(name, __config__=ConfigDict(frozen=True), __module__=__name__, **fields)


def as_mapping(value: Any) -> Optional[Mapping[str, Any]]:
    """Normalize a mapping or a record (any pydantic model) to a field mapping."""
    if isinstance(value, Mapping):
        return value
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    return None


def _describe(exc: ValidationError) -> str:
    details = []
    for error in exc.errors():
        loc = ".".join(str(part) for part in error.get("loc", ()))
        details.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    return "; ".join(details)


class StructuralValidator:
    """Casts input for one schema; holds the cast adapters and the record model."""

    def __init__(self, schema: Any) -> None:
        self._schema = schema
        self._table: PropertyTable = schema.table
        self._casters: Dict[str, TypeAdapter] = {
            name: TypeAdapter(Optional[cast_annotation(prop.type)])
            for name, prop in self._table.items()
            if not is_embedded(prop.type)
        }
        self.record_model: Type[BaseModel] = build_record_model(schema.name, self._table)
        logger.debug(
            f"Configured structural validator for '{schema.name}': "
            f"{len(self._casters)} cast fields, {len(self._table) - len(self._casters)} embedded fields"
        )

    def blank(self) -> BaseModel:
        """A record with every field unset (None, or () for embedded collections)."""
        values = {
            name: () if isinstance(prop.type, ArrayType) and is_embedded(prop.type) else None
            for name, prop in self._table.items()
        }
        return self.record_model.model_construct(**values)

    def validate(self, value: Any) -> Tuple[Optional[BaseModel], Optional[StructuralReport]]:
        """Return ``(record, None)`` on success, ``(None, report)`` otherwise."""
        data = as_mapping(value)
        if data is None:
            return None, {ROOT_ERROR_KEY: [cast_error("map")]}

        values: Dict[str, Any] = {}
        errors: Dict[str, Any] = {}
        self._cast_non_embeds(data, values, errors)
        self._cast_embeds(data, values, errors)
        self._apply_custom_validators(values, errors)

        if errors:
            return None, {name: errors[name] for name in self._table if name in errors}
        return self.record_model.model_construct(**values), None

    # ----------------------------- Helpers ------------------------------------

    def _cast_non_embeds(self, data: Mapping[str, Any], values: Dict[str, Any], errors: Dict[str, Any]) -> None:
        for name, caster in self._casters.items():
            prop = self._table[name]
            raw = blank_to_none(data.get(name))
            try:
                cast = caster.validate_python(raw)
            except ValidationError as e:
                errors[name] = [cast_error(prop.type.label, _describe(e))]
                continue
            if cast is None and is_required(prop):
                errors[name] = [required_error()]
                continue
            values[name] = to_record_value(cast)

    def _cast_embeds(self, data: Mapping[str, Any], values: Dict[str, Any], errors: Dict[str, Any]) -> None:
        for name, prop in self._table.items():
            if not is_embedded(prop.type):
                continue
            raw = data.get(name)
            if isinstance(prop.type, EntityType):
                outcome = self._cast_one(prop, raw)
            else:
                outcome = self._cast_many(prop, raw)
            if isinstance(outcome, _Failure):
                errors[name] = outcome.report
            else:
                values[name] = outcome

    def _cast_one(self, prop: Property, raw: Any) -> Any:
        if raw is None:
            return _Failure([required_error()]) if is_required(prop) else None
        if as_mapping(raw) is None:
            return _Failure([cast_error(prop.type.label)])
        record, report = prop.type.schema.structural_validator.validate(raw)
        if report:
            return _Failure(report)
        return record

    def _cast_many(self, prop: Property, raw: Any) -> Any:
        if raw is None or (isinstance(raw, (list, tuple)) and not raw):
            return _Failure([required_error()]) if is_required(prop) else ()
        if not isinstance(raw, (list, tuple)) or any(as_mapping(item) is None for item in raw):
            return _Failure([cast_error(prop.type.label)])
        child = prop.type.inner.schema.structural_validator
        results = [child.validate(item) for item in raw]
        if any(report for _, report in results):
            return _Failure([report or {} for _, report in results])
        return tuple(record for record, _ in results)

    def _apply_custom_validators(self, values: Dict[str, Any], errors: Dict[str, Any]) -> None:
        """Run registered per-field validators on successfully cast, non-null values."""
        for name, validator in self._schema.validators.items():
            if name in errors or values.get(name) is None:
                continue
            prop = self._table[name]
            try:
                is_valid, message = validator(self._schema, values[name], prop)
            except Exception as e:
                log_exception(logger, f"Validator error for {self._schema.name}.{name}", e)
                errors[name] = [FieldError(f"Validator exception: {e}", {"validation": "custom"})]
                continue
            if not is_valid:
                errors[name] = [FieldError(message or INVALID_MESSAGE, {"validation": "custom"})]


class _Failure:
    __slots__ = ("report",)

    def __init__(self, report: Any) -> None:
        self.report = report
