"""Configuration classes for lossless XML/JSON conversion.

This module provides configuration objects for the tree builder and the tree
writer, plus the immutable top-level configuration used by the API and CLI.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional

DEFAULT_ALWAYS_ARRAY = frozenset({"col", "row", "table"})
DEFAULT_DECLARATION = 'version="1.0" encoding="UTF-8"'
DEFAULT_ORDERED_CHILDREN = {"summary": "msi/summary"}

_COMPONENTS = ("reader", "writer")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class ReaderConfig:
    """Configuration for building the intermediate tree from XML."""

    always_array: FrozenSet[str] = DEFAULT_ALWAYS_ARRAY
    strip_text: bool = True
    capture_cdata: bool = True

    def __post_init__(self) -> None:
        """Validate reader configuration."""
        if isinstance(self.always_array, str):
            raise ValueError("always_array must be a collection of names")
        self.always_array = frozenset(self.always_array)
        for name in self.always_array:
            if not isinstance(name, str) or not name:
                raise ValueError("always_array entries must be non-empty strings")
            if ":" in name:
                raise ValueError("always_array entries must be local names")


@dataclass
class WriterConfig:
    """Configuration for serializing documents."""

    minify: bool = False
    indent: str = "\t"
    json_indent: int = 2
    preserve_child_order: bool = False
    ordered_children: Dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_ORDERED_CHILDREN)
    )
    default_declaration: str = DEFAULT_DECLARATION

    def __post_init__(self) -> None:
        """Validate writer configuration."""
        if not isinstance(self.indent, str) or self.indent.strip(" \t"):
            raise ValueError("indent must be a string of spaces or tabs")
        if not isinstance(self.json_indent, int) or isinstance(self.json_indent, bool):
            raise ValueError("json_indent must be an integer")
        if self.json_indent < 0:
            raise ValueError("json_indent must be >= 0")
        if not isinstance(self.default_declaration, str):
            raise ValueError("default_declaration must be a string")
        if not self.default_declaration.startswith("version="):
            raise ValueError("default_declaration must start with version=")
        if not isinstance(self.ordered_children, dict):
            raise ValueError("ordered_children must map element names to paths")
        for name, path in self.ordered_children.items():
            if not isinstance(name, str) or not isinstance(path, str):
                raise ValueError("ordered_children entries must be strings")
            if not name or not path:
                raise ValueError("ordered_children entries must be non-empty")


@dataclass(frozen=True)
class ConversionConfig:
    """Complete configuration for one conversion.

    Immutable, so one instance can be shared by any number of conversions.
    """

    reader: ReaderConfig = field(default_factory=ReaderConfig)
    writer: WriterConfig = field(default_factory=WriterConfig)
    debug: bool = False
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete configuration."""
        try:
            self.reader.__post_init__()
            self.writer.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ConversionConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Configuration fields to override; component fields use
                ``component__field`` notation

        Returns:
            New ConversionConfig instance with overrides applied

        Example:
            >>> config = ConversionConfig()
            >>> minified = config.override(writer__minify=True)
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for key, value in nested_overrides.items():
            if key in _COMPONENTS:
                try:
                    new_fields[key] = replace(getattr(self, key), **value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            else:
                new_fields[key] = value

        try:
            return replace(self, **new_fields)
        except TypeError as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (set, frozenset)):
                return sorted(obj)
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            if isinstance(obj, dict):
                return {key: _dataclass_to_dict(value) for key, value in obj.items()}
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversionConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files do not
        silently fall back to defaults.
        """
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration must be a JSON object")

        def _build(target_class: type, values: Any, prefix: str) -> Any:
            if not isinstance(values, dict):
                raise ConfigValidationError(
                    f"Configuration section '{prefix}' must be an object",
                    field_name=prefix,
                )
            known = target_class.__dataclass_fields__
            unknown = sorted(set(values) - set(known))
            if unknown:
                raise ConfigValidationError(
                    f"Unknown configuration keys in '{prefix}': {', '.join(unknown)}",
                    field_name=prefix,
                    suggestions=sorted(known),
                )
            try:
                return target_class(**values)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=prefix) from e

        fields: Dict[str, Any] = {}
        for key, value in data.items():
            if key == "reader":
                fields[key] = _build(ReaderConfig, value, key)
            elif key == "writer":
                fields[key] = _build(WriterConfig, value, key)
            elif key in cls.__dataclass_fields__:
                fields[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}",
                    field_name=key,
                    suggestions=sorted(cls.__dataclass_fields__),
                )
        return cls(**fields)

    @classmethod
    def from_json(cls, json_str: str) -> "ConversionConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_file(cls, config_path: Path) -> "ConversionConfig":
        """Load configuration from a JSON file."""
        with Path(config_path).open(encoding="utf-8") as f:
            return cls.from_json(f.read())

    # Preset factory methods
    @classmethod
    def minified(cls) -> "ConversionConfig":
        """Create configuration preset producing compact output without indentation."""
        return cls(writer=WriterConfig(minify=True), name="minified")

    @classmethod
    def order_preserving(cls) -> "ConversionConfig":
        """Create configuration preset that restores recorded child order everywhere."""
        return cls(
            writer=WriterConfig(preserve_child_order=True),
            name="order_preserving",
        )
