"""JSON codec used to turn records and raw mappings into plain JSON value trees."""

from __future__ import annotations

import json
from typing import Any

from pydantic_core import PydanticSerializationError, to_json

from .errors import CodecError


def encode(value: Any) -> str:
    """Serialize records, mappings, Decimals, dates, bytes, tuples and enums to JSON text."""
    try:
        return to_json(value).decode("utf-8")
    except (PydanticSerializationError, UnicodeDecodeError) as e:
        raise CodecError(f"Value is not JSON serializable: {e}") from e


def decode(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON: {e}") from e


def to_json_tree(value: Any) -> Any:
    """Canonical JSON value tree (dicts, lists, str, int, float, bool, None) of ``value``."""
    return decode(encode(value))
