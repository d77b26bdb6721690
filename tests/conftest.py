"""Shared schemas and inputs for the test suite."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from schema_engine import EngineConfig, Schema


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def post_schema(config):
    return Schema("Post", {
        "title": ("string", {"required": True}),
        "description": "string",
        "likes": ("integer", {"required": True, "minimum": 0}),
    }, config=config)


@pytest.fixture
def dummy_schema(config):
    """Every field type, all required."""
    return Schema("Dummy", {
        "binary": ("binary", {"required": True}),
        "binary_id": ("binary_id", {"required": True}),
        "boolean": ("boolean", {"required": True}),
        "float": ("float", {"required": True}),
        "id": ("id", {"required": True}),
        "integer": ("integer", {"required": True}),
        "string": ("string", {"required": True}),
        "map": ("map", {"required": True}),
        "decimal": ("decimal", {"required": True}),
        "date": ("date", {"required": True}),
        "time": ("time", {"required": True}),
        "time_usec": ("time_usec", {"required": True}),
        "naive_datetime": ("naive_datetime", {"required": True}),
        "naive_datetime_usec": ("naive_datetime_usec", {"required": True}),
        "utc_datetime": ("utc_datetime", {"required": True}),
        "utc_datetime_usec": ("utc_datetime_usec", {"required": True}),
        "array_integer": ({"array": "integer"}, {"required": True}),
        "array_string": ({"array": "string"}, {"required": True}),
        "enum_abc": ({"enum": ["a", "b", "c"]}, {"required": True}),
        "enum_123": ({"enum": {"a": 1, "b": 2, "c": 3}}, {"required": True}),
        "array_enum_abc": ({"array": {"enum": ["a", "b", "c"]}}, {"required": True}),
        "array_enum_123": ({"array": {"enum": {"a": 1, "b": 2, "c": 3}}}, {"required": True}),
    }, config=config)


@pytest.fixture
def valid_dummy_map():
    now = datetime.now(timezone.utc)
    return {
        "binary": "xyz",
        "binary_id": "1",
        "boolean": True,
        "float": 1.0,
        "id": 1,
        "integer": 1,
        "string": "abc",
        "map": {"a": 1},
        "decimal": Decimal(1),
        "date": date.today(),
        "time": now.time(),
        "time_usec": now.time(),
        "naive_datetime": now.replace(tzinfo=None),
        "naive_datetime_usec": now.replace(tzinfo=None),
        "utc_datetime": now,
        "utc_datetime_usec": now,
        "array_integer": [1, 2, 3],
        "array_string": ["ABC", "DEF"],
        "enum_abc": "b",
        "enum_123": 1,
        "array_enum_abc": ["a", "b", "c"],
        "array_enum_123": [1, 2, 3],
    }


@pytest.fixture
def optional_dummy_schema(config):
    return Schema("OptionalDummy", {
        "required": ("integer", {"required": True}),
        "optional": ("integer", {"required": False}),
    }, config=config)


@pytest.fixture
def point_schema(config):
    return Schema("PointDummy", {
        "x": ("integer", {"required": True}),
        "y": "integer",
    }, config=config)


@pytest.fixture
def keyword_schema(config):
    return Schema("KeywordDummy", {
        "int_min": ("integer", {"minimum": 0}),
        "int_exc_min": ("integer", {"exclusive_minimum": 0}),
        "int_max": ("integer", {"maximum": 0}),
        "int_exc_max": ("integer", {"exclusive_maximum": 0}),
        "str_min": ("string", {"min_length": 1}),
        "str_max": ("string", {"max_length": 1}),
        "phone": ("string", {"pattern": r"^(\([0-9]{3}\))?[0-9]{3}-[0-9]{4}$"}),
        "email": ("string", {"format": "email"}),
        "arr_min": ({"array": "integer"}, {"min_items": 1}),
        "arr_max": ({"array": "integer"}, {"max_items": 1}),
        "arr_unique": ({"array": "integer"}, {"unique_items": True}),
    }, config=config)


@pytest.fixture
def child_schema(config):
    return Schema("ChildDummy", {
        "x": ("integer", {"required": True}),
        "y": ("integer", {"required": True}),
        "z": ("integer", {"required": True}),
    }, config=config)


@pytest.fixture
def parent_schema(config, child_schema):
    return Schema("ParentDummy", {
        "scalar": ("string", {"required": True}),
        "embed_one": ({"object": child_schema}, {"required": True}),
        "embed_many": ({"array": child_schema}, {"required": True}),
    }, config=config)


@pytest.fixture
def optional_parent_schema(config, child_schema):
    return Schema("OptionalParent", {
        "scalar": "string",
        "embed_one": {"object": child_schema},
        "embed_many": {"array": child_schema},
    }, config=config)


@pytest.fixture
def valid_parent_map():
    return {
        "scalar": "root",
        "embed_one": {"x": 1, "y": 2, "z": 3},
        "embed_many": [{"x": 1, "y": 1, "z": 1}, {"x": 2, "y": 2, "z": 2}],
    }
