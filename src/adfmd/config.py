"""Configuration helpers for the converter."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_FILE = "adfmd.yaml"

# Environment variables may be given bare (``MAX_DEPTH``) or prefixed
# (``ADFMD_MAX_DEPTH``); the prefixed form wins.
ENV_PREFIXES = ("ADFMD_", "")

# Deeper ceilings would exhaust the interpreter stack before the renderer truncates.
MAX_DEPTH_LIMIT = 200


@dataclass(frozen=True)
class ConverterSettings:
    """Tunables for :class:`adfmd.converter.DocumentConverter`."""

    max_depth: int = 10
    use_external_renderer: bool = False
    external_renderer: str = "adf2md"
    external_timeout: float = 5.0
    empty_placeholder: str = "No description"


SETTING_TYPES: Dict[str, type] = {
    "max_depth": int,
    "use_external_renderer": bool,
    "external_renderer": str,
    "external_timeout": float,
    "empty_placeholder": str,
}


def load_yaml_defaults(path: str | Path | None) -> dict:
    """Load YAML configuration defaults from ``path``.

    If the file is missing, an empty dictionary is returned.

    Parameters
    ----------
    path:
        Path to the YAML file. ``None`` is treated as a missing file.

    Returns
    -------
    dict
        Parsed YAML data or ``{}`` if the file does not exist.
    """

    if not path:
        return {}

    yaml_path = Path(path)
    if not yaml_path.exists():
        return {}

    with yaml_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}

    if not isinstance(data, dict):
        raise ConfigError(
            f"Expected top-level mapping in configuration file '{yaml_path}',"
            f" but received {type(data).__name__}.",
            context={"path": str(yaml_path)},
        )

    return data


def _coerce_bool(value: str) -> bool:
    truthy = {"1", "true", "yes", "on", "y", "t"}
    falsy = {"0", "false", "no", "off", "n", "f"}
    lowered = value.strip().lower()
    if lowered in truthy:
        return True
    if lowered in falsy:
        return False
    raise ConfigError(f"Unable to interpret boolean value from '{value}'.")


def coerce_value(key: str, value: Any) -> Any:
    """Coerce ``value`` to the declared type of setting ``key``."""

    expected = SETTING_TYPES.get(key)
    if expected is None:
        return value
    if expected is bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            return _coerce_bool(value)
        raise ConfigError(f"Setting '{key}' must be a boolean, got {value!r}.", context={"key": key})
    if isinstance(value, bool):
        raise ConfigError(f"Setting '{key}' must not be a boolean.", context={"key": key})
    if isinstance(value, expected):
        return value
    if expected is float and isinstance(value, int):
        return float(value)
    if isinstance(value, str) and expected in (int, float):
        try:
            return expected(value.strip())
        except ValueError as exc:
            raise ConfigError(
                f"Setting '{key}' must be a number, got '{value}'.", context={"key": key}
            ) from exc
    raise ConfigError(
        f"Setting '{key}' must be of type {expected.__name__}, got {type(value).__name__}.",
        context={"key": key},
    )


def load_env_overrides(keys: Iterable[str], env: Mapping[str, str] | None = None) -> dict:
    """Return environment overrides for ``keys``.

    Lookups use the upper-cased key with an optional ``ADFMD_`` prefix.
    Values are coerced to the type of the matching setting.
    """

    source = os.environ if env is None else env
    overrides: Dict[str, Any] = {}
    for key in keys:
        env_value = None
        for prefix in ENV_PREFIXES:
            env_key = f"{prefix}{key.upper()}"
            if env_key in source:
                env_value = source[env_key]
                break
        if env_value is None:
            continue
        overrides[key] = coerce_value(key, env_value)

    return overrides


def merge_configs(*dicts: Mapping[str, Any] | None) -> dict:
    """Merge dictionaries honoring precedence from left to right."""

    merged: Dict[str, Any] = {}
    for cfg in reversed(dicts):
        if not cfg:
            continue
        merged.update(cfg)
    return merged


def build_settings(
    overrides: Mapping[str, Any] | None = None,
    *,
    config_path: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ConverterSettings:
    """Build converter settings from overrides, environment, and YAML.

    Precedence is ``overrides`` > environment > YAML file > defaults. Without
    an explicit ``config_path`` an ``adfmd.yaml`` in the working directory is
    used when present. Unknown keys are ignored.
    """

    if config_path is not None:
        yaml_path = Path(config_path)
        if not yaml_path.exists():
            raise ConfigError(
                f"Configuration file '{yaml_path}' was not found.",
                context={"path": str(yaml_path)},
            )
    else:
        yaml_path = Path(DEFAULT_CONFIG_FILE)

    known = set(SETTING_TYPES)
    yaml_defaults = {
        key: coerce_value(key, value)
        for key, value in load_yaml_defaults(yaml_path).items()
        if key in known
    }
    env_overrides = load_env_overrides(sorted(known), env)
    explicit = {
        key: coerce_value(key, value)
        for key, value in (overrides or {}).items()
        if key in known and value is not None
    }

    merged = merge_configs(explicit, env_overrides, yaml_defaults)
    settings = ConverterSettings(
        **{item.name: merged[item.name] for item in fields(ConverterSettings) if item.name in merged}
    )

    if not 0 <= settings.max_depth <= MAX_DEPTH_LIMIT:
        raise ConfigError(
            f"max_depth must be between 0 and {MAX_DEPTH_LIMIT}.",
            context={"max_depth": settings.max_depth},
        )
    if settings.external_timeout <= 0:
        raise ConfigError(
            "external_timeout must be positive.",
            context={"external_timeout": settings.external_timeout},
        )
    return settings


__all__ = [
    "ConverterSettings",
    "build_settings",
    "coerce_value",
    "load_env_overrides",
    "load_yaml_defaults",
    "merge_configs",
]
