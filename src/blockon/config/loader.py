"""Config loading entry points for blockon."""

from __future__ import annotations

import json
import os
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import ValidationError

from .models import BlockOnConfig, RetryConfig

DEFAULT_CONFIG_PATH = Path(__file__).resolve().with_name("blockon.default.yaml")

ENV_INTERVAL_MS = "BLOCKON_INTERVAL_MS"
ENV_TRACK_CALLER = "BLOCKON_TRACK_CALLER"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def load_config(
    path: Path | None = None,
    *,
    overrides: Mapping[str, Any] | None = None,
) -> BlockOnConfig:
    """Load the blockon configuration applying optional overrides."""

    default_data = _expect_mapping(_read_structured_file(DEFAULT_CONFIG_PATH), DEFAULT_CONFIG_PATH)

    if path:
        config_data = _expect_mapping(_read_structured_file(path), path)
    else:
        config_data = {}

    merged: dict[str, Any] = _deep_merge(default_data, config_data)

    if overrides:
        merged = _deep_merge(merged, _expand_override_keys(overrides))

    merged = _deep_merge(merged, {"retry": _env_retry_overrides()})

    try:
        return BlockOnConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def retry_config_from_env() -> RetryConfig:
    """Return executor defaults with environment overrides applied.

    Used when an executor call receives no explicit config, so no file is read.
    """

    try:
        return RetryConfig.model_validate(_env_retry_overrides())
    except ValidationError as exc:
        raise ConfigError(f"Invalid retry settings in environment: {exc}") from exc


def dump_example_config(dest: Path) -> None:
    """Write the default configuration to ``dest``."""

    dest.parent.mkdir(parents=True, exist_ok=True)

    merged = _read_structured_file(DEFAULT_CONFIG_PATH)
    if dest.suffix.lower() == ".toml":
        raise ConfigError("TOML export is not supported yet; use a YAML destination.")
    if dest.suffix.lower() in {".json"}:
        dest.write_text(json.dumps(merged, indent=2), encoding="utf-8")
        return
    dest.write_text(
        yaml.safe_dump(merged, sort_keys=False),
        encoding="utf-8",
    )


def _env_retry_overrides() -> dict[str, Any]:
    result: dict[str, Any] = {}

    interval = os.getenv(ENV_INTERVAL_MS, "").strip()
    if interval:
        try:
            result["interval_ms"] = int(interval)
        except ValueError as exc:
            raise ConfigError(f"{ENV_INTERVAL_MS} must be an integer, got {interval!r}.") from exc

    track = os.getenv(ENV_TRACK_CALLER, "").strip().lower()
    if track in _TRUTHY:
        result["track_caller"] = True
    elif track in _FALSY:
        result["track_caller"] = False
    elif track:
        raise ConfigError(f"{ENV_TRACK_CALLER} must be a boolean flag, got {track!r}.")

    return result


def _expect_mapping(payload: Any, source: Path) -> dict[str, Any]:
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise ConfigError(f"Expected mapping data in {source}, got {type(payload)!r}.")
    return dict(payload)


def _read_structured_file(path: Path) -> Any:
    """Return the parsed contents of a YAML/TOML/JSON file."""

    if not path.exists():
        raise ConfigError(f"Config file {path} does not exist.")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    try:
        if suffix in {".yaml", ".yml"}:
            return yaml.safe_load(text) or {}
        if suffix == ".toml":
            return tomllib.loads(text)
        if suffix == ".json":
            return json.loads(text)
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not parse {path}: {exc}") from exc

    raise ConfigError(f"Unsupported config format for {path}")


def _deep_merge(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge two mappings returning a new dictionary."""

    result: dict[str, Any] = {key: value for key, value in base.items()}
    for key, value in extra.items():
        if (
            key in result
            and isinstance(result[key], Mapping)
            and isinstance(value, Mapping)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_override_keys(overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Support dotted-notation overrides like ``retry.interval_ms``."""

    result: dict[str, Any] = {}
    for key, value in overrides.items():
        converted = _expand_single_override(key, value)
        result = _deep_merge(result, converted)
    return result


def _expand_single_override(key: Any, value: Any) -> dict[str, Any]:
    if isinstance(key, str) and "." in key:
        parts = key.split(".")
        cursor: dict[str, Any] = {}
        root = cursor
        for segment in parts[:-1]:
            next_cursor: dict[str, Any] = {}
            cursor[segment] = next_cursor
            cursor = next_cursor
        cursor[parts[-1]] = value
        return root
    return {key: value}


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "dump_example_config",
    "load_config",
    "retry_config_from_env",
]
