"""Configuration loading for forge libraries (forge.config.yml)."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import yaml

CONFIG_FILENAMES = ("forge.config.yml", "forge.config.yaml", "forge.config.json")
DEFAULT_CATEGORIES = ("ui", "forms", "layout", "navigation")
INVALID_POLICIES = ("abort", "exclude")


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed or is invalid."""


class ConfigNotFoundError(ConfigError):
    """Raised when a command runs outside an initialised library."""


@dataclass
class ForgeConfig:
    """Settings persisted once per component library."""

    root: Path
    name: str
    description: Optional[str] = None
    author: Optional[str] = None
    license: str = "MIT"
    repository: Optional[str] = None
    homepage: Optional[str] = None
    version: str = "1.0.0"
    components_dir: str = "src/components"
    output_dir: str = "public"
    registry_url: Optional[str] = None
    token_required: bool = False
    typescript: bool = True
    tailwind: bool = True
    default_category: str = "ui"
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    strict: bool = False
    on_invalid: str = "abort"
    config_path: Optional[Path] = None

    @property
    def components_path(self) -> Path:
        return (self.root / self.components_dir).resolve()

    @property
    def output_path(self) -> Path:
        return (self.root / self.output_dir).resolve()

    def to_dict(self) -> Dict[str, Any]:
        """Return the persisted (camelCase) form, omitting unset optionals."""
        data: Dict[str, Any] = {}
        for key, attr in _KEY_TO_ATTR.items():
            value = getattr(self, attr)
            if value is None:
                continue
            data[key] = list(value) if isinstance(value, list) else value
        return data


# camelCase key on disk -> (attribute, kind)
_SCHEMA: Dict[str, tuple[str, str]] = {
    "name": ("name", "str"),
    "description": ("description", "str?"),
    "author": ("author", "str?"),
    "license": ("license", "str"),
    "repository": ("repository", "str?"),
    "homepage": ("homepage", "str?"),
    "version": ("version", "str"),
    "componentsDir": ("components_dir", "str"),
    "outputDir": ("output_dir", "str"),
    "registryUrl": ("registry_url", "str?"),
    "tokenRequired": ("token_required", "bool"),
    "typescript": ("typescript", "bool"),
    "tailwind": ("tailwind", "bool"),
    "defaultCategory": ("default_category", "str"),
    "categories": ("categories", "list"),
    "strict": ("strict", "bool"),
    "onInvalid": ("on_invalid", "str"),
}
_KEY_TO_ATTR = {key: attr for key, (attr, _) in _SCHEMA.items()}
_ATTR_TO_KEY = {attr: key for key, attr in _KEY_TO_ATTR.items()}


def find_config_file(root: Path) -> Optional[Path]:
    """Return the first config file present in ``root``."""
    for filename in CONFIG_FILENAMES:
        candidate = root / filename
        if candidate.is_file():
            return candidate
    return None


def load_config(root: Path) -> ForgeConfig:
    """Load and validate the library configuration stored under ``root``."""
    root = root.expanduser().resolve()
    config_file = find_config_file(root)
    if config_file is None:
        raise ConfigNotFoundError(
            f"No {CONFIG_FILENAMES[0]} found in {root}. Run \"forge init\" first."
        )

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{config_file.name} must contain a mapping at the root")

    config = config_from_mapping(root, data)
    config.config_path = config_file
    return config


def config_from_mapping(root: Path, data: Mapping[str, Any]) -> ForgeConfig:
    """Build a ``ForgeConfig`` from camelCase keys, collecting every type error."""
    values: Dict[str, Any] = {}
    errors: List[str] = []

    for key, (attr, kind) in _SCHEMA.items():
        if key not in data or data[key] is None:
            continue
        raw = data[key]
        coerced = _coerce(raw, kind)
        if coerced is _INVALID:
            errors.append(f"{key}: expected {_KIND_LABELS[kind]}, got {type(raw).__name__}")
            continue
        values[attr] = coerced

    if "name" not in values or not values["name"].strip():
        errors.append("name: required")
    policy = values.get("on_invalid")
    if policy is not None and policy not in INVALID_POLICIES:
        errors.append(f"onInvalid: must be one of {', '.join(INVALID_POLICIES)}")

    if errors:
        raise ConfigError("Invalid configuration: " + "; ".join(errors))

    return ForgeConfig(root=root, **values)


def save_config(config: ForgeConfig, path: Path | None = None) -> Path:
    """Persist ``config``; JSON files stay JSON, everything else is YAML."""
    target = path or config.config_path or (config.root / CONFIG_FILENAMES[0])
    data = config.to_dict()
    if target.suffix == ".json":
        text = json.dumps(data, indent=2) + "\n"
    else:
        text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    config.config_path = target
    return target


def update_config(config: ForgeConfig, updates: Mapping[str, Any]) -> ForgeConfig:
    """Apply camelCase ``updates``, re-validate, and save the result."""
    unknown = [key for key in updates if key not in _SCHEMA]
    if unknown:
        raise ConfigError(f"Unknown configuration key: {', '.join(sorted(unknown))}")
    merged = config.to_dict()
    merged.update(updates)
    updated = config_from_mapping(config.root, merged)
    save_config(updated, config.config_path)
    return updated


def get_config_value(config: ForgeConfig, key: str) -> Any:
    """Look up a persisted key (camelCase) or attribute name."""
    attr = _KEY_TO_ATTR.get(key) or (key if key in _ATTR_TO_KEY else None)
    if attr is None:
        raise KeyError(key)
    return getattr(config, attr)


def parse_config_value(raw: str) -> Any:
    """Interpret a ``--set`` value as JSON, falling back to the raw string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def config_keys() -> Sequence[str]:
    return tuple(_SCHEMA)


def _read_config(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded if loaded is not None else {}


_INVALID = object()
_KIND_LABELS = {
    "str": "string",
    "str?": "string",
    "bool": "boolean",
    "list": "list of strings",
}


def _coerce(value: Any, kind: str) -> Any:
    if kind in {"str", "str?"}:
        return _as_str(value)
    if kind == "bool":
        return _as_bool(value)
    if kind == "list":
        return _as_str_list(value)
    raise ValueError(kind)


def _as_str(value: Any) -> Any:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return _INVALID


def _as_bool(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return _INVALID


def _as_str_list(value: Any) -> Any:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, str) for item in value):
            return list(value)
    return _INVALID


__all__ = [
    "CONFIG_FILENAMES",
    "ConfigError",
    "ConfigNotFoundError",
    "ForgeConfig",
    "config_from_mapping",
    "config_keys",
    "find_config_file",
    "get_config_value",
    "load_config",
    "parse_config_value",
    "save_config",
    "update_config",
]
