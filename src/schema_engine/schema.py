"""
Schema: one property table and the two validators derived from it.

### Usage:
```python
comment = Schema("Comment", {
    "body": ("string", {"required": True, "min_length": 1}),
})
post = Schema("Post", {
    "title": ("string", {"required": True}),
    "description": "string",
    "likes": ("integer", {"required": True, "minimum": 0}),
    "status": {"enum": ["draft", "published"]},
    "comments": {"array": comment},
})

post.parse({"title": "Hello", "likes": 3})              # Ok(Post(title='Hello', ...))
post.parse({"title": "Hello", "likes": -1})             # Ok(...), bounds are JSON-Schema only
post.parse({"title": "Hello", "likes": -1}, validate_json=True)
# Err([JsonSchemaViolation('-1 is less than the minimum of 0', '#/likes')])
post.parse_many([{"title": "a", "likes": 1}, {}])       # Err([{'title': [...], 'likes': [...]}])
post.json_schema_document()                             # {"type": "object", "properties": {...}, ...}
```

Notes:
- The property table, record model and JSON Schema document are built once at
  construction and never change afterwards; a schema can be shared between
  threads and embedded by any number of other schemas.
- Structural validation and JSON Schema validation are deliberately decoupled:
  a value may cast cleanly yet violate ``minimum``, ``pattern``, ``min_items``...
- Custom validators are part of the definition. ``with_validator`` returns a new
  schema and leaves the original (and every schema embedding it) unchanged.
- Validator signature: ``(schema, value, prop) -> (is_valid: bool, error: str)``
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type

from pydantic import BaseModel

from . import classifier
from .codec import to_json_tree
from .config import EngineConfig, default_config
from .engine_logging import create_logger
from .errors import CodecError, JsonSchemaViolation, SchemaDefinitionError
from .field_types import SchemaResolver
from .json_schema import build_document, collect_violations, resolve_schema
from .properties import Property, PropertyTable
from .results import Err, ErrorKind, Ok
from .structural import StructuralValidator

logger = create_logger(__name__)

FieldValidator = Callable[[Any, Any, Property], Tuple[bool, str]]


class Schema:
    """A named schema with its structural validator and JSON Schema document."""

    def __init__(
        self,
        name: str,
        properties: Any,
        *,
        config: Optional[EngineConfig] = None,
        validators: Optional[Dict[str, FieldValidator]] = None,
        schema_lookup: Optional[SchemaResolver] = None,
    ) -> None:
        """
        Define a schema.

        Args:
            name: Identifier used as the document title and for diagnostics.
            properties: A PropertyTable or a declaration mapping (see ``PropertyTable.from_declaration``).
            config: Engine configuration; defaults to the environment-derived config.
            validators: Optional per-field custom validators, see ``with_validator``.
            schema_lookup: Resolves entity references given by name (used by SchemaEngine).
        """
        if not isinstance(name, str) or not name:
            raise SchemaDefinitionError(f"Schema name must be a non-empty string, got {name!r}")
        self.name = name
        self.config = config or default_config()
        self.table = PropertyTable.from_declaration(properties, schema_lookup)
        for field_name, validator_func in (validators or {}).items():
            self._check_validator(field_name, validator_func)
        self.validators: Mapping[str, FieldValidator] = MappingProxyType(dict(validators or {}))

        self.structural_validator = StructuralValidator(self)
        self.__document = build_document(name, self.table)
        self.__compiled = resolve_schema(self.__document, self.config.json_schema_draft, self.config.check_formats)
        logger.debug(f"Defined schema '{name}' with fields {classifier.all_fields(self.table)}")

    def __repr__(self) -> str:
        return f"Schema({self.name!r}, fields={list(self.table.names)!r})"

    # ----------------------------- Public API ---------------------------------

    def with_validator(self, field_name: str, validator_func: FieldValidator) -> "Schema":
        """A copy of this schema with a custom validator for one field.

        The validator runs during structural validation on values that were cast
        successfully and are not null. It returns ``(True, "")`` when the value is
        acceptable and ``(False, message)`` otherwise. This schema is not changed.

        Example:
            def even(schema, value, prop):
                return (value % 2 == 0, "must be even")

            strict_post = post.with_validator("likes", even)
        """
        self._check_validator(field_name, validator_func)
        logger.debug(f"Adding validator for '{self.name}.{field_name}'")
        return Schema(
            self.name,
            self.table,
            config=self.config,
            validators={**self.validators, field_name: validator_func},
        )

    @property
    def record_model(self) -> Type[BaseModel]:
        return self.structural_validator.record_model

    def new(self) -> BaseModel:
        """A blank record: every field null, embedded collections empty."""
        return self.structural_validator.blank()

    def parse(self, value: Any, *, validate_json: bool = False) -> Any:
        """Cast ``value`` into a record.

        Returns:
            Ok(record), or Err(report). With ``validate_json`` the value is first
            checked against the JSON Schema document and the violations are
            returned (kind JSON_SCHEMA) without casting.
        """
        if validate_json:
            checked = self.validate_json(value)
            if not checked.is_ok:
                return checked
        record, report = self.structural_validator.validate(value)
        if report is not None:
            logger.debug(f"Structural validation of '{self.name}' failed for fields {list(report)}")
            return Err(report, ErrorKind.STRUCTURAL)
        return Ok(record)

    def parse_many(self, values: Iterable[Any], *, validate_json: bool = False, max_workers: Optional[int] = None) -> Any:
        """Parse every value; fail as a whole if any element fails.

        Returns:
            Ok([record, ...]) in input order, or Err([report, ...]) with one report
            per failing element, in input order.
        """
        if isinstance(values, (Mapping, str, bytes)):
            raise TypeError(f"parse_many expects a sequence of values, got {type(values).__name__}")
        inputs = list(values)
        workers = max_workers if max_workers is not None else self.config.parse_many_workers
        if workers > 1 and len(inputs) > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(lambda v: self.parse(v, validate_json=validate_json), inputs))
        else:
            results = [self.parse(v, validate_json=validate_json) for v in inputs]

        errors = [result.errors for result in results if not result.is_ok]
        if errors:
            logger.debug(f"parse_many on '{self.name}': {len(errors)} of {len(inputs)} inputs failed")
            return Err(errors, ErrorKind.BATCH)
        return Ok([result.value for result in results])

    def validate_json(self, value: Any) -> Any:
        """Check the JSON form of ``value`` against the generated document.

        Returns:
            Ok(value) or Err([JsonSchemaViolation(message, pointer), ...]).
        """
        try:
            tree = to_json_tree(value)
        except CodecError as e:
            return Err([JsonSchemaViolation(str(e), "#")], ErrorKind.JSON_SCHEMA)
        violations = collect_violations(self.__compiled, tree)
        if violations:
            return Err(violations, ErrorKind.JSON_SCHEMA)
        return Ok(value)

    def json_schema(self) -> Any:
        """The compiled JSON Schema validator; ``.schema`` holds the document."""
        return self.__compiled

    def json_schema_document(self) -> Dict[str, Any]:
        return copy.deepcopy(self.__document)

    def dump(self, record: Any) -> Any:
        """JSON value tree of a record (or any mapping)."""
        return to_json_tree(record)

    def _check_validator(self, field_name: str, validator_func: Any) -> None:
        if field_name not in self.table:
            raise SchemaDefinitionError(f"Schema '{self.name}' has no field '{field_name}'")
        if not callable(validator_func):
            raise SchemaDefinitionError(f"Validator for '{field_name}' must be callable")

    # ----------------------------- Classification -----------------------------

    def properties(self) -> PropertyTable:
        return self.table

    def all_fields(self) -> List[str]:
        return classifier.all_fields(self.table)

    def optional_fields(self) -> List[str]:
        return classifier.optional_fields(self.table)

    def required_fields(self) -> List[str]:
        return classifier.required_fields(self.table)

    def all_non_embeds(self) -> List[str]:
        return classifier.all_non_embeds(self.table)

    def required_non_embeds(self) -> List[str]:
        return classifier.required_non_embeds(self.table)
