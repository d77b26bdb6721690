"""
JSON Schema generation from a property table.

Design highlights:
- One document per schema, built from the same table as the structural validator.
- Referenced entities are inlined (no ``$ref``), so a document is self-contained.
- Optional fields are wrapped as ``{"anyOf": [<base>, {"type": "null"}]}``;
  required fields use the base schema as is and are listed in ``required``.
- Per-field constraint options are merged into the base schema with their
  camelCase JSON Schema names (``min_length`` -> ``minLength``). Recognized
  options that do not apply to the field type are dropped; unrecognized options
  pass through verbatim.
- Uses a builder registry keyed by field type class.

Example document for ``{"title": ("string", {"required": True}), "likes": "integer"}``:

```json
{
  "type": "object",
  "properties": {
    "title": {"type": "string"},
    "likes": {"anyOf": [{"type": "integer"}, {"type": "null"}]}
  },
  "required": ["title"],
  "title": "Post",
  "x-struct": "Post"
}
```
"""

from __future__ import annotations

import copy
from datetime import datetime, time
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple, Type

import jsonschema
from jsonschema import (
    Draft6Validator,
    Draft7Validator,
    Draft201909Validator,
    Draft202012Validator,
)

from .classifier import is_required, required_fields
from .engine_logging import create_logger
from .errors import JsonSchemaViolation, SchemaDefinitionError
from .field_types import (
    NUMERIC_KINDS,
    OBJECT_KINDS,
    STRING_SERIALIZED_KINDS,
    ArrayType,
    EntityType,
    EnumType,
    FieldType,
    ScalarKind,
    ScalarType,
)
from .properties import (
    ARRAY_OPTIONS,
    NUMERIC_OPTIONS,
    OBJECT_OPTIONS,
    RECOGNIZED_OPTIONS,
    STRING_OPTIONS,
    Property,
    PropertyTable,
)

logger = create_logger(__name__)

VALIDATORS_BY_DRAFT: Dict[str, Type[Any]] = {
    "2020-12": Draft202012Validator,
    "2019-09": Draft201909Validator,
    "7": Draft7Validator,
    "6": Draft6Validator,
}

NULL_SCHEMA: Dict[str, Any] = {"type": "null"}

SCALAR_BASE_SCHEMAS: Dict[ScalarKind, Dict[str, Any]] = {
    ScalarKind.BINARY: {"type": "string"},
    ScalarKind.BINARY_ID: {"type": "string"},
    ScalarKind.BOOLEAN: {"type": "boolean"},
    ScalarKind.FLOAT: {"type": "number"},
    ScalarKind.ID: {"type": "integer"},
    ScalarKind.INTEGER: {"type": "integer"},
    ScalarKind.STRING: {"type": "string"},
    ScalarKind.MAP: {"type": "object"},
    ScalarKind.DECIMAL: {"type": "string"},
    ScalarKind.DATE: {"type": "string", "format": "date"},
    ScalarKind.TIME: {"type": "string", "format": "time"},
    ScalarKind.TIME_USEC: {"type": "string", "format": "time"},
    ScalarKind.NAIVE_DATETIME: {"type": "string", "format": "date-time"},
    ScalarKind.NAIVE_DATETIME_USEC: {"type": "string", "format": "date-time"},
    ScalarKind.UTC_DATETIME: {"type": "string", "format": "date-time"},
    ScalarKind.UTC_DATETIME_USEC: {"type": "string", "format": "date-time"},
}


def camelize(key: str) -> str:
    """``exclusive_minimum`` -> ``exclusiveMinimum``."""
    head, *rest = key.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def applicable_options(field_type: FieldType) -> Tuple[str, ...]:
    if isinstance(field_type, ScalarType):
        if field_type.kind in NUMERIC_KINDS:
            return NUMERIC_OPTIONS
        if field_type.kind in STRING_SERIALIZED_KINDS:
            return STRING_OPTIONS
        if field_type.kind in OBJECT_KINDS:
            return OBJECT_OPTIONS
        return ()
    if isinstance(field_type, EntityType):
        return OBJECT_OPTIONS
    if isinstance(field_type, ArrayType):
        return ARRAY_OPTIONS
    return ()


def option_keywords(prop: Property) -> Dict[str, Any]:
    """JSON Schema keywords contributed by a property's options."""
    allowed = applicable_options(prop.type)
    keywords: Dict[str, Any] = {}
    for key, value in prop.constraint_options().items():
        if key in RECOGNIZED_OPTIONS and key not in allowed:
            logger.debug(f"Ignoring option '{key}' on field '{prop.name}' of type {prop.type.label}")
            continue
        keywords[camelize(key)] = copy.deepcopy(value)
    return keywords


# Function registry for schema builders, one per field type class
_type_schema_builders: Dict[type, Callable[[Any], Dict[str, Any]]] = {}


def _register_type_schema_builder(field_type_cls: type):
    """Decorator to register a base-schema builder for a field type class."""
    def decorator(func: Callable):
        _type_schema_builders[field_type_cls] = func
        return func
    return decorator


def _get_type_schema_builder(field_type_cls: type) -> Optional[Callable]:
    return _type_schema_builders.get(field_type_cls)


def base_schema(field_type: FieldType) -> Dict[str, Any]:
    builder = _get_type_schema_builder(type(field_type))
    if not builder:
        raise SchemaDefinitionError(f"No schema builder found for field type {field_type!r}")
    return builder(field_type)


@_register_type_schema_builder(ScalarType)
def _scalar_schema_builder(field_type: ScalarType) -> Dict[str, Any]:
    return dict(SCALAR_BASE_SCHEMAS[field_type.kind])


@_register_type_schema_builder(EnumType)
def _enum_schema_builder(field_type: EnumType) -> Dict[str, Any]:
    if field_type.is_integer_backed:
        return {"type": "integer", "enum": list(field_type.integers)}
    return {"type": "string", "enum": [str(tag) for tag in field_type.tags]}


@_register_type_schema_builder(EntityType)
def _entity_schema_builder(field_type: EntityType) -> Dict[str, Any]:
    return field_type.schema.json_schema_document()


@_register_type_schema_builder(ArrayType)
def _array_schema_builder(field_type: ArrayType) -> Dict[str, Any]:
    return {"type": "array", "items": base_schema(field_type.inner)}


def field_schema(prop: Property) -> Dict[str, Any]:
    """Full schema of one field: base schema, option keywords and the nullable wrapper."""
    schema = base_schema(prop.type)
    schema.update(option_keywords(prop))
    if is_required(prop):
        return schema
    return {"anyOf": [schema, dict(NULL_SCHEMA)]}


def build_document(name: str, table: PropertyTable) -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {str(field_name): field_schema(prop) for field_name, prop in table.items()},
        "required": [str(field_name) for field_name in required_fields(table)],
        "title": name,
        "x-struct": name,
    }


def _with_offset(text: str) -> str:
    return text[:-1] + "+00:00" if text[-1:] in ("Z", "z") else text


def _is_iso_datetime(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    if len(instance) < 11 or instance[10] not in "Tt ":
        raise ValueError(f"{instance!r} has no time part")
    datetime.fromisoformat(_with_offset(instance))
    return True


def _is_iso_time(instance: Any) -> bool:
    if not isinstance(instance, str):
        return True
    time.fromisoformat(_with_offset(instance))
    return True


def build_format_checker() -> jsonschema.FormatChecker:
    """Format checker whose ``date-time`` and ``time`` also accept ISO 8601 without an offset.

    Naive date/time kinds serialize without an offset, which RFC 3339 rejects.
    """
    checker = jsonschema.FormatChecker()
    checker.checks("date-time", raises=ValueError)(_is_iso_datetime)
    checker.checks("time", raises=ValueError)(_is_iso_time)
    return checker


def resolve_schema(document: Dict[str, Any], draft: str = "2020-12", check_formats: bool = False) -> Any:
    """Check a document against its dialect's meta-schema and return a reusable validator."""
    validator_cls = VALIDATORS_BY_DRAFT.get(draft)
    if validator_cls is None:
        raise SchemaDefinitionError(f"Unsupported JSON Schema draft '{draft}'")
    try:
        validator_cls.check_schema(document)
    except jsonschema.exceptions.SchemaError as e:
        raise SchemaDefinitionError(f"Generated schema '{document.get('title')}' is not valid: {e.message}") from e
    format_checker = build_format_checker() if check_formats else None
    return validator_cls(document, format_checker=format_checker)


# ----------------------------- Violations ------------------------------------

def json_pointer(path: Iterable[Any]) -> str:
    """``["items", 0, "x"]`` -> ``#/items/0/x``."""
    parts = [str(part).replace("~", "~0").replace("/", "~1") for part in path]
    return "#" + "".join(f"/{part}" for part in parts)


def _is_nullable_union(value: Any) -> bool:
    return isinstance(value, list) and len(value) == 2 and value[1] == NULL_SCHEMA


def _expand(error: jsonschema.exceptions.ValidationError) -> Iterator[jsonschema.exceptions.ValidationError]:
    """Replace a failed nullable union by the failures of its non-null branch."""
    if error.validator == "anyOf" and _is_nullable_union(error.validator_value) and error.context:
        branch = [sub for sub in error.context if sub.relative_schema_path and sub.relative_schema_path[0] == 0]
        if branch:
            for sub in branch:
                yield from _expand(sub)
            return
    yield error


def collect_violations(validator: Any, tree: Any) -> List[JsonSchemaViolation]:
    violations = []
    for error in validator.iter_errors(tree):
        for leaf in _expand(error):
            violations.append(JsonSchemaViolation(leaf.message, json_pointer(leaf.absolute_path)))
    return violations
