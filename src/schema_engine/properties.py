"""
Property tables: the single source of truth for a schema.

A table is an ordered, immutable mapping ``field name -> Property``. Both the
structural validator and the JSON Schema generator are derived from it.

Declarations map a field name to either a bare type spec or a
``(type_spec, options)`` pair:

```python
PropertyTable.from_declaration({
    "title": ("string", {"required": True, "max_length": 120}),
    "description": "string",
    "likes": ("integer", {"required": True, "minimum": 0}),
})
```
"""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Number
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

from pydantic import BaseModel

from .errors import SchemaDefinitionError
from .field_types import FieldType, SchemaResolver, parse_type_spec

NUMERIC_OPTIONS = ("minimum", "maximum", "exclusive_minimum", "exclusive_maximum", "multiple_of")
STRING_OPTIONS = ("min_length", "max_length", "pattern", "format")
ARRAY_OPTIONS = ("min_items", "max_items", "unique_items")
OBJECT_OPTIONS = ("additional_properties", "property_names", "min_properties", "max_properties")

RECOGNIZED_OPTIONS = frozenset(("required",) + NUMERIC_OPTIONS + STRING_OPTIONS + ARRAY_OPTIONS + OBJECT_OPTIONS)

_COUNT_OPTIONS = frozenset({"min_length", "max_length", "min_items", "max_items", "min_properties", "max_properties"})
_RESERVED_PREFIXES = ("_", "model_")


def _check_option(field_name: str, key: str, value: Any) -> None:
    if key in ("required", "unique_items"):
        if not isinstance(value, bool):
            raise SchemaDefinitionError(f"Option '{key}' of field '{field_name}' must be a bool, got {value!r}")
    elif key in NUMERIC_OPTIONS:
        if isinstance(value, bool) or not isinstance(value, Number):
            raise SchemaDefinitionError(f"Option '{key}' of field '{field_name}' must be a number, got {value!r}")
        if key == "multiple_of" and value <= 0:
            raise SchemaDefinitionError(f"Option 'multiple_of' of field '{field_name}' must be positive")
    elif key in _COUNT_OPTIONS:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise SchemaDefinitionError(f"Option '{key}' of field '{field_name}' must be a non-negative integer, got {value!r}")
    elif key in ("pattern", "format"):
        if not isinstance(value, str):
            raise SchemaDefinitionError(f"Option '{key}' of field '{field_name}' must be a string, got {value!r}")


@dataclass(frozen=True)
class Property:
    name: str
    type: FieldType
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SchemaDefinitionError(f"Field names must be non-empty strings, got {self.name!r}")
        if self.name.startswith(_RESERVED_PREFIXES):
            raise SchemaDefinitionError(f"Field name '{self.name}' uses a reserved prefix {_RESERVED_PREFIXES}")
        if hasattr(BaseModel, self.name):
            # records are pydantic models; the name would shadow a model attribute
            raise SchemaDefinitionError(f"Field name '{self.name}' is reserved by the record model")
        if not isinstance(self.options, Mapping):
            raise SchemaDefinitionError(f"Options of field '{self.name}' must be a mapping, got {self.options!r}")
        for key, value in self.options.items():
            if not isinstance(key, str):
                raise SchemaDefinitionError(f"Option keys of field '{self.name}' must be strings, got {key!r}")
            _check_option(self.name, key, value)
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))

    def constraint_options(self) -> Dict[str, Any]:
        """Options other than ``required``, in declaration order."""
        return {k: v for k, v in self.options.items() if k != "required"}


class PropertyTable(Mapping[str, Property]):
    """Immutable ordered mapping from field name to Property."""

    def __init__(self, properties: Iterable[Property] = ()) -> None:
        entries: Dict[str, Property] = {}
        for prop in properties:
            if not isinstance(prop, Property):
                raise SchemaDefinitionError(f"Expected a Property, got {prop!r}")
            if prop.name in entries:
                raise SchemaDefinitionError(f"Duplicate field name: '{prop.name}'")
            entries[prop.name] = prop
        self.__entries = entries

    @classmethod
    def from_declaration(cls, declaration: Mapping[str, Any], resolve_schema: Optional[SchemaResolver] = None) -> "PropertyTable":
        if isinstance(declaration, PropertyTable):
            return declaration
        if not isinstance(declaration, Mapping):
            raise SchemaDefinitionError(f"A schema declaration must be a mapping, got {type(declaration).__name__}")
        properties = []
        for name, entry in declaration.items():
            type_spec, options = _split_entry(entry)
            properties.append(Property(name, parse_type_spec(type_spec, resolve_schema), options))
        return cls(properties)

    def __getitem__(self, name: str) -> Property:
        return self.__entries[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.__entries)

    def __len__(self) -> int:
        return len(self.__entries)

    def __repr__(self) -> str:
        return f"PropertyTable({list(self.__entries.values())!r})"

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.__entries)


def _split_entry(entry: Any) -> Tuple[Any, Mapping[str, Any]]:
    if isinstance(entry, (tuple, list)):
        if len(entry) != 2:
            raise SchemaDefinitionError(f"Field declarations must be a type or a (type, options) pair, got {entry!r}")
        type_spec, options = entry
        return type_spec, options if options is not None else {}
    return entry, {}
