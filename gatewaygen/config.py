"""Configuration loading for gatewaygen (.gatewaygen.yml and plugin parameters)."""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .descriptor.registry import Registry
from .planning.alias import DEFAULT_REGISTER_SUFFIX, DEFAULT_SHIM_IMPORT_ALIAS

CONFIG_FILENAME = ".gatewaygen.yml"

_BOOL_KEYS = ("separate_package", "standalone", "omit_package_doc")
_STR_KEYS = ("register_func_suffix", "shim_import_alias", "output_dir", "templates_dir")


class ConfigError(RuntimeError):
    """Raised when configuration cannot be parsed."""


@dataclass
class GeneratorConfig:
    """Generation-mode flags and naming options for one run."""

    separate_package: bool = False
    standalone: bool = False
    omit_package_doc: bool = False
    register_func_suffix: str = DEFAULT_REGISTER_SUFFIX
    shim_import_alias: str = DEFAULT_SHIM_IMPORT_ALIAS
    output_dir: Optional[str] = None
    templates_dir: Optional[str] = None

    def apply(self, registry: Registry) -> Registry:
        """Push the mode flags into ``registry`` and return it."""
        registry.set_separate_package(self.separate_package)
        registry.set_standalone(self.standalone)
        registry.set_omit_package_doc(self.omit_package_doc)
        return registry

    def merged(self, overrides: Dict[str, Any]) -> "GeneratorConfig":
        """Return a copy with ``overrides`` applied; ``None`` values are ignored."""
        known = {item.name for item in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return replace(self, **{key: value for key, value in overrides.items() if value is not None})


def parse_parameter(text: str | None) -> Dict[str, Any]:
    """Parse a protoc plugin parameter such as ``separate_package=true,standalone``."""
    result: Dict[str, Any] = {}
    if not text:
        return result
    for raw in text.split(","):
        item = raw.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        key = key.strip()
        value = value.strip() if sep else "true"
        if key in _BOOL_KEYS:
            parsed = _as_bool(value)
            if parsed is None:
                raise ConfigError(f"Invalid boolean for {key}: {value!r}")
            result[key] = parsed
        elif key in _STR_KEYS:
            if not value:
                raise ConfigError(f"Missing value for {key}")
            result[key] = value
        else:
            raise ConfigError(f"Unknown parameter: {key}")
    return result


def load_config(config_path: Path) -> GeneratorConfig:
    """Load configuration from a file or a directory containing one."""
    config_file = _resolve_config_path(config_path)
    if not config_file.exists():
        return GeneratorConfig()

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    overrides: Dict[str, Any] = {}
    for key in _BOOL_KEYS:
        if key in data:
            parsed = _as_bool(data[key])
            if parsed is None:
                raise ConfigError(f"Invalid boolean for {key}: {data[key]!r}")
            overrides[key] = parsed
    for key in _STR_KEYS:
        if key in data:
            overrides[key] = _as_str(data[key])

    unknown = sorted(set(data) - set(_BOOL_KEYS) - set(_STR_KEYS))
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    templates_dir = overrides.get("templates_dir")
    if templates_dir:
        overrides["templates_dir"] = str(config_file.parent / templates_dir)
    return GeneratorConfig().merged(overrides)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = ["CONFIG_FILENAME", "ConfigError", "GeneratorConfig", "load_config", "parse_parameter"]
