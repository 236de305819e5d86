"""Configuration source and namespace projection.

A ``ConfigSource`` wraps a nested configuration document and answers typed
lookups addressed by dotted keys (``"storage.src.type"``). Missing keys
resolve to the zero value of the requested type so initializers can apply
their own defaults.
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .exceptions import ConfigurationError, ConfigurationProjectionError

_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off", ""}


def _merge_into(tree: Dict[str, Any], key: str, value: Any, origin: str) -> None:
    parts = [part for part in str(key).split(".") if part]
    if not parts:
        raise ConfigurationError(f"Empty configuration key under '{origin}'")

    node = tree
    for index, part in enumerate(parts[:-1]):
        child = node.setdefault(part, {})
        if not isinstance(child, dict):
            prefix = ".".join(parts[: index + 1])
            raise ConfigurationError(
                f"Configuration key '{prefix}' is both a value and a section"
            )
        node = child

    leaf = parts[-1]
    if isinstance(value, Mapping):
        child = node.setdefault(leaf, {})
        if not isinstance(child, dict):
            raise ConfigurationError(
                f"Configuration key '{'.'.join(parts)}' is both a value and a section"
            )
        for sub_key, sub_value in value.items():
            _merge_into(child, sub_key, sub_value, ".".join(parts))
    else:
        if isinstance(node.get(leaf), dict):
            raise ConfigurationError(
                f"Configuration key '{'.'.join(parts)}' is both a value and a section"
            )
        node[leaf] = value


def normalize(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Expand dotted keys into a nested tree."""
    tree: Dict[str, Any] = {}
    for key, value in data.items():
        _merge_into(tree, key, value, "<root>")
    return tree


def _coerce_scalar(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ConfigSource:
    """Read-only view over a configuration document."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data = normalize(data or {})

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ConfigSource":
        return cls(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ConfigSource":
        """Load a JSON or YAML configuration file."""
        path = Path(path)
        suffix = path.suffix.lower()
        if suffix not in (".json", ".yaml", ".yml"):
            raise ConfigurationError(f"Unsupported configuration file type: {path}")

        try:
            with path.open("r", encoding="utf-8") as handle:
                if suffix == ".json":
                    document = json.load(handle)
                else:
                    document = yaml.safe_load(handle)
        except OSError as exc:
            raise ConfigurationError(f"Cannot read configuration file {path}: {exc}") from exc
        except (UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"Malformed configuration file {path}: {exc}") from exc

        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ConfigurationError(f"Configuration root in {path} must be a mapping")
        return cls(document)

    def get(self, key: str) -> Any:
        """Return the raw value at ``key`` or None."""
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    def has(self, key: str) -> bool:
        return self.get(key) is not None

    def get_string(self, key: str) -> str:
        value = self.get(key)
        if isinstance(value, (dict, list)):
            raise ConfigurationError(f"Configuration key '{key}' is not a scalar")
        return _coerce_scalar(value)

    def get_int(self, key: str) -> int:
        value = self.get(key)
        if value is None:
            return 0
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                return 0
            try:
                return int(stripped)
            except ValueError:
                pass
        raise ConfigurationError(f"Configuration key '{key}' is not an integer: {value!r}")

    def get_bool(self, key: str) -> bool:
        value = self.get(key)
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
        raise ConfigurationError(f"Configuration key '{key}' is not a boolean: {value!r}")

    def get_mapping(self, key: str) -> Dict[str, Any]:
        value = self.get(key)
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ConfigurationError(f"Configuration key '{key}' is not a section")
        return copy.deepcopy(value)

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"ConfigSource(sections={sorted(self._data)})"


def project_config_map(source: ConfigSource, namespace: str) -> Dict[str, str]:
    """
    Flatten the section at ``namespace`` into a string-keyed string map.

    Args:
        source: Configuration source to read from
        namespace: Dotted key of the section, e.g. "storage.src"

    Returns:
        Mapping of sub-key to string value; empty if the section is absent

    Raises:
        ConfigurationProjectionError: If the section is a scalar or holds
            a nested section or list
    """
    section = source.get(namespace)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigurationProjectionError(namespace, reason="value is not a section")

    projected: Dict[str, str] = {}
    for key, value in section.items():
        if isinstance(value, (dict, list, tuple, set)):
            raise ConfigurationProjectionError(
                namespace, key, reason=f"{type(value).__name__} is not a scalar"
            )
        projected[key] = _coerce_scalar(value)
    return projected
