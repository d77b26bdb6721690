"""Pure partitioning of a property table into required/optional and embedded/non-embedded fields."""

from __future__ import annotations

from typing import List, NamedTuple

from .field_types import ArrayType, EntityType, FieldType
from .properties import Property, PropertyTable


class FieldClassification(NamedTuple):
    all_fields: List[str]
    non_embedded: List[str]
    required: List[str]
    required_non_embedded: List[str]


def is_embedded(field_type: FieldType) -> bool:
    """Entities and arrays of entities are validated recursively; everything else is cast directly."""
    if isinstance(field_type, EntityType):
        return True
    if isinstance(field_type, ArrayType):
        return isinstance(field_type.inner, EntityType)
    return False


def is_required(prop: Property) -> bool:
    # Single predicate shared by the structural validator and the JSON Schema generator
    return prop.options.get("required", False) is True


def all_fields(table: PropertyTable) -> List[str]:
    return list(table.names)


def optional_fields(table: PropertyTable) -> List[str]:
    return [name for name, prop in table.items() if not is_required(prop)]


def required_fields(table: PropertyTable) -> List[str]:
    return [name for name, prop in table.items() if is_required(prop)]


def all_non_embeds(table: PropertyTable) -> List[str]:
    return [name for name, prop in table.items() if not is_embedded(prop.type)]


def embedded_fields(table: PropertyTable) -> List[str]:
    return [name for name, prop in table.items() if is_embedded(prop.type)]


def required_non_embeds(table: PropertyTable) -> List[str]:
    return [name for name, prop in table.items() if not is_embedded(prop.type) and is_required(prop)]


def classify(table: PropertyTable) -> FieldClassification:
    return FieldClassification(
        all_fields=all_fields(table),
        non_embedded=all_non_embeds(table),
        required=required_fields(table),
        required_non_embedded=required_non_embeds(table),
    )
