"""Exceptions and error-report values shared by the structural and JSON Schema paths."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, NamedTuple, Union

# Key used in a structural report when the input itself is not a mapping
ROOT_ERROR_KEY = "__root__"

REQUIRED_MESSAGE = "can't be blank"
INVALID_MESSAGE = "is invalid"


class SchemaDefinitionError(ValueError):
    """A property table, type declaration or generated document is malformed."""


class CodecError(ValueError):
    """A value could not be serialized to a JSON value tree."""


class FieldError(NamedTuple):
    message: str
    context: Mapping[str, Any]


class JsonSchemaViolation(NamedTuple):
    message: str
    path: str


# field name -> [FieldError, ...] | nested report | [nested report, ...]
StructuralReport = Dict[str, Any]
ErrorReport = Union[StructuralReport, List[JsonSchemaViolation]]


def required_error() -> FieldError:
    return FieldError(REQUIRED_MESSAGE, {"validation": "required"})


def cast_error(type_label: str, reason: str = "") -> FieldError:
    context: Dict[str, Any] = {"type": type_label, "validation": "cast"}
    if reason:
        context["reason"] = reason
    return FieldError(INVALID_MESSAGE, context)


class ParseError(ValueError):
    """Raised by ``Err.unwrap()``; carries the error report."""

    def __init__(self, errors: Any) -> None:
        super().__init__(f"Validation failed: {errors!r}")
        self.errors = errors
