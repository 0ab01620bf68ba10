"""Configuration loading and validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from json_schema_tools.errors import ConfigError, ConfigNotFoundError

__all__ = ["Config", "LintPolicy", "CombineSettings", "DEFAULT_ALLOWED_KEYWORDS"]

DEFAULT_ALLOWED_KEYWORDS: frozenset[str] = frozenset(
    {
        "$schema",
        "$id",
        "$ref",
        "$defs",
        "definitions",
        "$comment",
        "title",
        "description",
        "examples",
        "default",
        "type",
        "enum",
        "const",
        "allOf",
        "oneOf",
        "anyOf",
        "properties",
        "required",
        "additionalProperties",
        "items",
        "pattern",
        "format",
        "minimum",
        "maximum",
        "minLength",
        "maxLength",
        "minItems",
        "maxItems",
    }
)


class LintPolicy(BaseModel):
    """Which keywords are supported and which optional lint rules run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    allowed_keywords: frozenset[str] = DEFAULT_ALLOWED_KEYWORDS
    allow_extension_keywords: bool = True
    check_key_order: bool = False
    check_required_order: bool = False
    warn_unrestricted_objects: bool = False
    warn_optional_properties: bool = False

    @field_validator("allowed_keywords", mode="before")
    @classmethod
    def _extend_defaults(cls, value: Any) -> Any:
        # "+keyword" entries extend the default allowlist instead of replacing it
        if isinstance(value, (list, tuple, set, frozenset)) and any(
            isinstance(v, str) and v.startswith("+") for v in value
        ):
            extra = {v[1:] if v.startswith("+") else v for v in value}
            return DEFAULT_ALLOWED_KEYWORDS | extra
        return value

    def allows(self, keyword: str) -> bool:
        if keyword in self.allowed_keywords:
            return True
        return self.allow_extension_keywords and keyword.startswith("x-")


class CombineSettings(BaseModel):
    """Options for building merged schemas."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    defs_key: str = "$defs"
    prefixes: dict[str, str] = Field(default_factory=dict)

    @field_validator("defs_key")
    @classmethod
    def _known_defs_key(cls, value: str) -> str:
        if value not in ("$defs", "definitions"):
            raise ValueError("defs_key must be '$defs' or 'definitions'")
        return value


class Config:
    """Configuration accessor with dot-path key support."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}

    @classmethod
    def load(cls, path: str | Path) -> Config:
        """Read a YAML configuration file."""
        file_path = Path(path)
        if not file_path.exists():
            raise ConfigNotFoundError(config_path=str(file_path))
        try:
            data = yaml.safe_load(file_path.read_text())
        except yaml.YAMLError as e:
            raise ConfigError(message=f"Invalid YAML in {file_path}: {e}", cause=e) from e
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(
                message=f"Config file {file_path} must be a YAML mapping, got {type(data).__name__}"
            )
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dot-path key."""
        parts = key.split(".")
        current: Any = self._data
        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current

    def _section(self, key: str, model: type[BaseModel]) -> Any:
        section = self.get(key, {})
        if not isinstance(section, dict):
            raise ConfigError(message=f"Config section '{key}' must be a mapping")
        try:
            return model.model_validate(section)
        except ValidationError as e:
            raise ConfigError(message=f"Invalid '{key}' configuration: {e}", cause=e) from e

    def lint_policy(self) -> LintPolicy:
        return self._section("lint", LintPolicy)

    def combine_settings(self) -> CombineSettings:
        return self._section("combine", CombineSettings)
