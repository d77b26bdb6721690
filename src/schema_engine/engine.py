"""
SchemaEngine: a named registry of schemas.

Schemas defined through an engine may reference each other by name. A
reference resolves only against schemas already in the registry, so every
definition order is acyclic:

```python
engine = SchemaEngine()
engine.define("Comment", {"body": ("string", {"required": True})})
engine.define("Post", {
    "title": ("string", {"required": True}),
    "comments": {"array": "Comment"},
    "pinned": {"object": "Comment"},
})
engine.parse("Post", {"title": "Hello", "comments": [{"body": "first"}]})
```
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .config import EngineConfig, default_config
from .engine_logging import create_logger
from .errors import SchemaDefinitionError
from .schema import FieldValidator, Schema

logger = create_logger(__name__)


class SchemaEngine:
    """Registry of schemas sharing one configuration."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or default_config()
        # Schema registry: name -> Schema
        self.__schemas: Dict[str, Schema] = {}

    # ----------------------------- Public API ---------------------------------

    def define(self, name: str, declaration: Any, validators: Optional[Dict[str, FieldValidator]] = None) -> Schema:
        """Build a schema from a declaration and register it.

        Entity references given as strings are looked up in this engine.

        Returns:
            The registered Schema.
        """
        schema = Schema(
            name,
            declaration,
            config=self.config,
            validators=validators,
            schema_lookup=self._lookup,
        )
        return self.register(schema)

    def register(self, schema: Schema) -> Schema:
        """Register (or re-register) a schema under its name.

        Re-registration replaces the previous entry with info logging. Schemas
        that embedded the previous definition keep referencing it.
        """
        if not isinstance(schema, Schema):
            raise TypeError(f"Expected a Schema, got {type(schema).__name__}")
        if schema.name in self.__schemas:
            logger.info("Re-registering schema %s; replacing previous definition", schema.name)
        elif len(self.__schemas) >= self.config.max_schemas:
            raise ValueError(f"Maximum number of schemas reached: {self.config.max_schemas}")
        self.__schemas[schema.name] = schema
        logger.debug(f"Registered schema '{schema.name}'")
        return schema

    def get_schema(self, name: str) -> Schema:
        if not isinstance(name, str):
            raise ValueError(f"Schema name must be str, got {type(name)}")
        if name not in self.__schemas:
            raise ValueError(f"Unknown schema: {name}")
        return self.__schemas[name]

    def unregister(self, name: str) -> None:
        """Unregister a schema by name. Unknown names are ignored."""
        self.__schemas.pop(name, None)

    def list_schemas(self) -> List[str]:
        """List registered schema names in registration order."""
        return list(self.__schemas.keys())

    def clear(self) -> None:
        """Clear all registered schemas."""
        self.__schemas.clear()

    def parse(self, name: str, value: Any, *, validate_json: bool = False) -> Any:
        return self.get_schema(name).parse(value, validate_json=validate_json)

    def parse_many(self, name: str, values: Iterable[Any], *, validate_json: bool = False, max_workers: Optional[int] = None) -> Any:
        return self.get_schema(name).parse_many(values, validate_json=validate_json, max_workers=max_workers)

    def json_schema_document(self, name: str) -> Dict[str, Any]:
        return self.get_schema(name).json_schema_document()

    # ----------------------------- Helpers ------------------------------------

    def _lookup(self, name: str) -> Schema:
        schema = self.__schemas.get(name)
        if schema is None:
            raise SchemaDefinitionError(f"Unknown schema '{name}'; define it before referencing it")
        return schema
