# vacancy_rag/core/config.py
"""
YAML settings file loading.

Schemas live in vacancy_rag.config.schema; this module only knows how to
read YAML and validate it against a schema.

Usage:
    from vacancy_rag.core.config import load_yaml, validate_config

    data = load_yaml("vacancy_rag.yaml")
    settings = validate_config(data, AppSettings)
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Type, TypeVar, Union

import yaml

from vacancy_rag.logging.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# Errors
# =============================================================================


class ConfigError(Exception):
    """Base error for configuration issues."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        if path:
            message = f"{message} (file: {path})"
        super().__init__(message)


class ConfigNotFoundError(ConfigError):
    """Raised when a config file doesn't exist."""

    pass


class ConfigParseError(ConfigError):
    """Raised when YAML parsing fails."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when config doesn't match schema."""

    pass


# =============================================================================
# Loading
# =============================================================================


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a YAML file and return it as a dictionary.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary of config data (empty dict for an empty file)

    Raises:
        ConfigNotFoundError: If file doesn't exist
        ConfigParseError: If YAML is invalid or the root is not a mapping
    """
    p = Path(path)

    if not p.exists():
        raise ConfigNotFoundError("Config file not found", path=p)

    if p.is_dir():
        raise ConfigError("Config path is a directory, not a file", path=p)

    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Invalid YAML syntax: {e}", path=p) from e

    if not isinstance(data, dict):
        raise ConfigParseError("Config root must be a mapping (dict)", path=p)

    logger.debug(f"Loaded settings from {p}")
    return data


def validate_config(data: Dict[str, Any], schema: Type[T], path: Path | None = None) -> T:
    """
    Validate config data against a Pydantic schema.

    Raises:
        ConfigValidationError: If the data doesn't match the schema
    """
    try:
        return schema.model_validate(data)  # type: ignore[attr-defined]
    except Exception as e:
        raise ConfigValidationError(f"Config validation failed: {e}", path=path) from e


__all__ = [
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
    "load_yaml",
    "validate_config",
]
