"""
Declarative schema engine.

One property table per schema drives two derivations: a structural validator
that casts untyped input into a typed record (pydantic), and a JSON Schema
document used to validate serialized input against constraints (jsonschema).
"""

from .config import EngineConfig, default_config
from .engine import SchemaEngine
from .errors import (
    CodecError,
    FieldError,
    JsonSchemaViolation,
    ParseError,
    SchemaDefinitionError,
)
from .field_types import ArrayType, EntityType, EnumType, ScalarKind, ScalarType, parse_type_spec
from .properties import Property, PropertyTable
from .results import Err, ErrorKind, Ok
from .schema import Schema

__all__ = [
    "ArrayType",
    "CodecError",
    "EngineConfig",
    "EntityType",
    "EnumType",
    "Err",
    "ErrorKind",
    "FieldError",
    "JsonSchemaViolation",
    "Ok",
    "ParseError",
    "Property",
    "PropertyTable",
    "ScalarKind",
    "ScalarType",
    "Schema",
    "SchemaDefinitionError",
    "SchemaEngine",
    "default_config",
    "parse_type_spec",
]
