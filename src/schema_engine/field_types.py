"""
Type vocabulary for property tables.

A field type is one of four closed variants:

- ``ScalarType``: a primitive kind (see ``ScalarKind``)
- ``EntityType``: a reference to another schema, embedded as a nested record
- ``ArrayType``: a homogeneous collection of scalars, entities or enums
- ``EnumType``: a closed set of string tags, optionally backed by integers

Declarations can be written compactly and parsed with ``parse_type_spec``:

```python
parse_type_spec("integer")                      # ScalarType(ScalarKind.INTEGER)
parse_type_spec({"array": "string"})            # ArrayType(ScalarType(STRING))
parse_type_spec({"enum": ["draft", "live"]})    # string-backed enum
parse_type_spec({"enum": {"low": 1, "high": 2}})  # integer-backed enum
parse_type_spec({"object": comment_schema})     # EntityType(comment_schema)
```
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from .errors import SchemaDefinitionError


class ScalarKind(PyEnum):
    BINARY = "binary"
    BINARY_ID = "binary_id"
    BOOLEAN = "boolean"
    FLOAT = "float"
    ID = "id"
    INTEGER = "integer"
    STRING = "string"
    MAP = "map"
    DECIMAL = "decimal"
    DATE = "date"
    TIME = "time"
    TIME_USEC = "time_usec"
    NAIVE_DATETIME = "naive_datetime"
    NAIVE_DATETIME_USEC = "naive_datetime_usec"
    UTC_DATETIME = "utc_datetime"
    UTC_DATETIME_USEC = "utc_datetime_usec"


SCALAR_KIND_ALIASES: Dict[str, ScalarKind] = {
    "text": ScalarKind.STRING,
}

NUMERIC_KINDS = frozenset({ScalarKind.INTEGER, ScalarKind.ID, ScalarKind.FLOAT})

TEMPORAL_KINDS = frozenset({
    ScalarKind.DATE,
    ScalarKind.TIME,
    ScalarKind.TIME_USEC,
    ScalarKind.NAIVE_DATETIME,
    ScalarKind.NAIVE_DATETIME_USEC,
    ScalarKind.UTC_DATETIME,
    ScalarKind.UTC_DATETIME_USEC,
})

# Kinds whose JSON form is a string
STRING_SERIALIZED_KINDS = frozenset({
    ScalarKind.BINARY,
    ScalarKind.BINARY_ID,
    ScalarKind.STRING,
    ScalarKind.DECIMAL,
}) | TEMPORAL_KINDS

OBJECT_KINDS = frozenset({ScalarKind.MAP})


def scalar_kind(value: Union[str, ScalarKind]) -> ScalarKind:
    """Resolve a kind name (or alias) to a ``ScalarKind``. Raises SchemaDefinitionError if unknown."""
    if isinstance(value, ScalarKind):
        return value
    if isinstance(value, str):
        if value in SCALAR_KIND_ALIASES:
            return SCALAR_KIND_ALIASES[value]
        try:
            return ScalarKind(value)
        except ValueError:
            pass
    raise SchemaDefinitionError(f"Unknown scalar kind: {value!r}")


def is_scalar_kind_name(value: Any) -> bool:
    if isinstance(value, ScalarKind):
        return True
    if not isinstance(value, str):
        return False
    return value in SCALAR_KIND_ALIASES or value in ScalarKind._value2member_map_


@dataclass(frozen=True)
class ScalarType:
    kind: ScalarKind

    @property
    def label(self) -> str:
        return self.kind.value


@dataclass(frozen=True, eq=False)
class EntityType:
    """Reference to another schema. The referencing table reads the schema's
    validator and document but never owns it."""
    schema: Any

    @property
    def label(self) -> str:
        return f"object<{self.schema.name}>"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EntityType) and other.schema is self.schema

    def __hash__(self) -> int:
        return id(self.schema)


@dataclass(frozen=True)
class EnumType:
    tags: Tuple[str, ...]
    integers: Optional[Tuple[int, ...]] = None

    def __post_init__(self) -> None:
        if not self.tags:
            raise SchemaDefinitionError("Enum must declare at least one value")
        if len(set(self.tags)) != len(self.tags):
            raise SchemaDefinitionError(f"Enum tags must be unique: {list(self.tags)}")
        for tag in self.tags:
            if not isinstance(tag, str):
                raise SchemaDefinitionError(f"Enum tags must be strings, got {tag!r}")
        if self.integers is not None:
            if len(self.integers) != len(self.tags):
                raise SchemaDefinitionError("Enum integers must align with its tags")
            for value in self.integers:
                if isinstance(value, bool) or not isinstance(value, int):
                    raise SchemaDefinitionError(f"Enum integer values must be int, got {value!r}")
            if len(set(self.integers)) != len(self.integers):
                raise SchemaDefinitionError(f"Enum integer values must be unique: {list(self.integers)}")

    @classmethod
    def from_values(cls, values: Any) -> "EnumType":
        """Build an enum from a tag sequence, a ``{tag: int}`` mapping or an ``enum.Enum`` class."""
        if isinstance(values, type) and issubclass(values, PyEnum):
            members = list(values)
            if members and all(isinstance(m.value, int) and not isinstance(m.value, bool) for m in members):
                return cls(tuple(m.name for m in members), tuple(m.value for m in members))
            return cls(tuple(str(m.value) for m in members))
        if isinstance(values, Mapping):
            return cls(tuple(values.keys()), tuple(values.values()))
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            raise SchemaDefinitionError(f"Enum values must be a sequence of tags or a tag-to-integer mapping, got {values!r}")
        return cls(tuple(values))

    @property
    def is_integer_backed(self) -> bool:
        return self.integers is not None

    @property
    def json_values(self) -> Tuple[Any, ...]:
        """The values as they appear in serialized records."""
        return self.integers if self.integers is not None else self.tags

    @property
    def tag_lookup(self) -> Dict[str, int]:
        if self.integers is None:
            return {}
        return dict(zip(self.tags, self.integers))

    @property
    def label(self) -> str:
        return "enum"


@dataclass(frozen=True)
class ArrayType:
    inner: Union[ScalarType, EntityType, EnumType]

    def __post_init__(self) -> None:
        if not isinstance(self.inner, (ScalarType, EntityType, EnumType)):
            raise SchemaDefinitionError(f"Array items must be a scalar, an entity or an enum, got {self.inner!r}")

    @property
    def label(self) -> str:
        return f"array<{self.inner.label}>"


FieldType = Union[ScalarType, EntityType, ArrayType, EnumType]

FIELD_TYPE_CLASSES = (ScalarType, EntityType, ArrayType, EnumType)

SchemaResolver = Callable[[str], Any]


def _is_schema(value: Any) -> bool:
    return hasattr(value, "table") and hasattr(value, "structural_validator") and hasattr(value, "name")


def _resolve_entity(ref: Any, resolve_schema: Optional[SchemaResolver]) -> EntityType:
    if _is_schema(ref):
        return EntityType(ref)
    if isinstance(ref, str):
        if resolve_schema is None:
            raise SchemaDefinitionError(f"Cannot resolve schema reference {ref!r} without a registry")
        return EntityType(resolve_schema(ref))
    raise SchemaDefinitionError(f"Invalid schema reference: {ref!r}")


def _parse_array_inner(inner: Any, resolve_schema: Optional[SchemaResolver]) -> Union[ScalarType, EntityType, EnumType]:
    if isinstance(inner, (ScalarType, EntityType, EnumType)):
        return inner
    if is_scalar_kind_name(inner):
        return ScalarType(scalar_kind(inner))
    if isinstance(inner, str) or _is_schema(inner):
        # anything that is not a scalar kind names an embedded entity
        return _resolve_entity(inner, resolve_schema)
    parsed = parse_type_spec(inner, resolve_schema)
    if isinstance(parsed, ArrayType):
        raise SchemaDefinitionError("Nested arrays are not supported")
    return parsed


def parse_type_spec(spec: Any, resolve_schema: Optional[SchemaResolver] = None) -> FieldType:
    """Parse a compact type declaration into a FieldType."""
    if isinstance(spec, FIELD_TYPE_CLASSES):
        return spec
    if is_scalar_kind_name(spec):
        return ScalarType(scalar_kind(spec))
    if _is_schema(spec):
        return EntityType(spec)
    if isinstance(spec, Mapping):
        if len(spec) != 1:
            raise SchemaDefinitionError(f"Compound type declarations must have exactly one key, got {dict(spec)!r}")
        (constructor, argument), = spec.items()
        if constructor == "object":
            return _resolve_entity(argument, resolve_schema)
        if constructor == "array":
            return ArrayType(_parse_array_inner(argument, resolve_schema))
        if constructor == "enum":
            return EnumType.from_values(argument)
        raise SchemaDefinitionError(f"Unknown type constructor: {constructor!r}")
    raise SchemaDefinitionError(f"Invalid type declaration: {spec!r}")
