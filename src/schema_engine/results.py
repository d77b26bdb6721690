from __future__ import annotations

from dataclasses import dataclass
from enum import Enum as PyEnum
from typing import Any

from .errors import ParseError


class ErrorKind(PyEnum):
    STRUCTURAL = "structural"
    JSON_SCHEMA = "json_schema"
    BATCH = "batch"


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value


@dataclass(frozen=True)
class Err:
    errors: Any
    kind: ErrorKind = ErrorKind.STRUCTURAL

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ParseError(self.errors)
