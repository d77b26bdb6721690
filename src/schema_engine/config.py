"""
Engine configuration, read from the environment (and a ``.env`` file if present).

Variables:
    LOGGER_LEVEL                       default log level (INFO)
    LOGGER_LEVEL.<logger name>         per-module override
    SCHEMA_ENGINE_JSON_SCHEMA_DRAFT    JSON Schema dialect of generated documents (2020-12)
    SCHEMA_ENGINE_CHECK_FORMATS        enforce "format" keywords during JSON validation (false)
    SCHEMA_ENGINE_PARSE_MANY_WORKERS   worker threads used by parse_many (1 = sequential)
    SCHEMA_ENGINE_MAX_SCHEMAS          schemas allowed per engine registry (1000)
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Read the log level from the environment variable, defaulting to 'INFO'
LOGGER_LEVEL = os.getenv('LOGGER_LEVEL', 'INFO').upper()

SUPPORTED_DRAFTS = ("2020-12", "2019-09", "7", "6")

DEFAULT_JSON_SCHEMA_DRAFT = "2020-12"
DEFAULT_CHECK_FORMATS = False
DEFAULT_PARSE_MANY_WORKERS = 1
DEFAULT_MAX_SCHEMAS = 1000

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def _env_positive_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < 1:
        raise ValueError(f"{name} must be at least 1, got {value}")
    return value


@dataclass(frozen=True)
class EngineConfig:
    json_schema_draft: str = DEFAULT_JSON_SCHEMA_DRAFT
    check_formats: bool = DEFAULT_CHECK_FORMATS
    parse_many_workers: int = DEFAULT_PARSE_MANY_WORKERS
    max_schemas: int = DEFAULT_MAX_SCHEMAS

    def __post_init__(self) -> None:
        if self.json_schema_draft not in SUPPORTED_DRAFTS:
            raise ValueError(f"Unsupported JSON Schema draft '{self.json_schema_draft}', expected one of {SUPPORTED_DRAFTS}")
        if self.parse_many_workers < 1:
            raise ValueError("parse_many_workers must be at least 1")
        if self.max_schemas < 1:
            raise ValueError("max_schemas must be at least 1")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        draft = os.getenv("SCHEMA_ENGINE_JSON_SCHEMA_DRAFT", "").strip() or DEFAULT_JSON_SCHEMA_DRAFT
        return cls(
            json_schema_draft=draft,
            check_formats=_env_bool("SCHEMA_ENGINE_CHECK_FORMATS", DEFAULT_CHECK_FORMATS),
            parse_many_workers=_env_positive_int("SCHEMA_ENGINE_PARSE_MANY_WORKERS", DEFAULT_PARSE_MANY_WORKERS),
            max_schemas=_env_positive_int("SCHEMA_ENGINE_MAX_SCHEMAS", DEFAULT_MAX_SCHEMAS),
        )


_default_config: Optional[EngineConfig] = None


def default_config() -> EngineConfig:
    """Config built from the environment on first use."""
    global _default_config
    if _default_config is None:
        _default_config = EngineConfig.from_env()
    return _default_config
