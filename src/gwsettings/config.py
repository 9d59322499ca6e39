"""Configuration loader for the gwsettings tool itself.

The gateway settings are read from plain environment variables (see
:mod:`gwsettings.reader`). This module covers the knobs of the engine: where
secret files are mounted, which fallback files hold OpenVPN credentials and
how verbose logging should be. Values are layered as follows:

1. Built-in defaults.
2. ``/etc/gwsettings/config.yml`` (or an override path).
3. Environment variables prefixed with ``GWSETTINGS_``.
4. Explicit overrides supplied programmatically (reserved for CLI flags).

Environment keys use double underscores to express nesting, e.g.::

    export GWSETTINGS_SECRETS_DIR=/var/run/secrets
    export GWSETTINGS_FILES__CLIENT_KEY=/config/client.key

Values are coerced via PyYAML's ``safe_load`` so that booleans and numbers are
parsed naturally.
"""
from __future__ import annotations

import os
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import cast

import yaml

ENV_PREFIX = "GWSETTINGS_"
CONFIG_ENV_VAR = f"{ENV_PREFIX}CONFIG_FILE"
RESERVED_ENV_KEYS = {CONFIG_ENV_VAR}


class ConfigError(RuntimeError):
    """Raised when configuration parsing fails."""


@dataclass(frozen=True)
class CredentialFilesConfig:
    """Fallback files holding OpenVPN client credentials."""

    client_key: Path = Path("/gluetun/client.key")
    client_cert: Path = Path("/gluetun/client.crt")

    def to_dict(self) -> dict[str, object]:
        """Return a serialisable representation."""
        return {"client_key": str(self.client_key), "client_cert": str(self.client_cert)}


@dataclass(frozen=True)
class AppConfig:
    """Resolved configuration values for gwsettings."""

    config_file: Path
    secrets_dir: Path
    secret_file_suffix: str
    log_level: str
    files: CredentialFilesConfig

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-serialisable representation of the config."""
        return {
            "config_file": str(self.config_file),
            "secrets_dir": str(self.secrets_dir),
            "secret_file_suffix": self.secret_file_suffix,
            "log_level": self.log_level,
            "files": self.files.to_dict(),
        }


DEFAULTS: dict[str, object] = {
    "config_file": "/etc/gwsettings/config.yml",
    "secrets_dir": "/run/secrets",
    "secret_file_suffix": "_SECRETFILE",
    "log_level": "info",
    "files": {
        "client_key": "/gluetun/client.key",
        "client_cert": "/gluetun/client.crt",
    },
}

ALLOWED_TOP_LEVEL_KEYS = set(DEFAULTS.keys())
ALLOWED_FILES_KEYS = {"client_key", "client_cert"}
ALLOWED_LOG_LEVELS = {"debug", "info", "warning", "error"}


def load_config(
    config_file: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
    overrides: Mapping[str, object] | None = None,
) -> AppConfig:
    """Load and merge configuration sources into an :class:`AppConfig`."""
    merged: dict[str, object] = _deep_copy(DEFAULTS)
    resolved_env = dict(os.environ if env is None else env)

    config_default = _expect_str(merged["config_file"], "config_file")
    config_path = _determine_config_path(config_default, config_file, resolved_env)

    file_values = _load_yaml_file(config_path)
    if file_values:
        _deep_merge(merged, file_values)

    env_values = _build_env_overrides(resolved_env)
    if env_values:
        _deep_merge(merged, env_values)

    if overrides:
        _deep_merge(merged, dict(overrides))

    merged["config_file"] = str(config_path)

    _validate_structure(merged)

    return _build_app_config(merged)


def _determine_config_path(
    default_path: str,
    cli_override: str | os.PathLike[str] | None,
    env: Mapping[str, str],
) -> Path:
    if cli_override:
        return Path(cli_override)
    if CONFIG_ENV_VAR in env:
        return Path(env[CONFIG_ENV_VAR])
    return Path(default_path)


def _load_yaml_file(path: Path) -> dict[str, object]:
    if not path.exists():
        return {}
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:  # pragma: no cover - PyYAML owns detailed error
        raise ConfigError(f"Failed to parse config file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level.")
    return _as_dict(data, f"file:{path}")


def _validate_structure(raw: Mapping[str, object]) -> None:
    unknown_keys = set(raw.keys()) - ALLOWED_TOP_LEVEL_KEYS
    if unknown_keys:
        joined = ", ".join(sorted(unknown_keys))
        raise ConfigError(f"Unknown configuration keys: {joined}.")

    log_level = raw.get("log_level")
    if log_level is not None and str(log_level).lower() not in ALLOWED_LOG_LEVELS:
        allowed = ", ".join(sorted(ALLOWED_LOG_LEVELS))
        raise ConfigError(f"Unsupported log level '{log_level}'. Allowed: {allowed}.")

    suffix = raw.get("secret_file_suffix")
    if suffix is not None and (not isinstance(suffix, str) or not suffix.strip()):
        raise ConfigError("secret_file_suffix must be a non-empty string.")

    files_map = _as_dict(raw.get("files"), "files")
    unknown = set(files_map.keys()) - ALLOWED_FILES_KEYS
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ConfigError(f"Unknown files configuration keys: {joined}.")


def _build_app_config(raw: Mapping[str, object]) -> AppConfig:
    files_mapping = _as_dict(raw.get("files"), "files")
    defaults = CredentialFilesConfig()
    files = CredentialFilesConfig(
        client_key=_to_path(files_mapping.get("client_key", defaults.client_key)),
        client_cert=_to_path(files_mapping.get("client_cert", defaults.client_cert)),
    )
    return AppConfig(
        config_file=_to_path(raw.get("config_file")),
        secrets_dir=_to_path(raw.get("secrets_dir")),
        secret_file_suffix=str(raw.get("secret_file_suffix", "_SECRETFILE")).strip(),
        log_level=str(raw.get("log_level", "info")).lower(),
        files=files,
    )


def _build_env_overrides(env: Mapping[str, str]) -> dict[str, object]:
    overrides: dict[str, object] = {}
    for key, value in env.items():
        if key in RESERVED_ENV_KEYS:
            continue
        if not key.startswith(ENV_PREFIX):
            continue
        suffix = key[len(ENV_PREFIX) :]
        path_segments = [segment.lower() for segment in suffix.split("__") if segment]
        if not path_segments:
            continue
        _assign_nested(overrides, path_segments, _coerce_value(value))
    return overrides


def _assign_nested(tree: MutableMapping[str, object], path: list[str], value: object) -> None:
    current: MutableMapping[str, object] = tree
    for segment in path[:-1]:
        existing = current.get(segment)
        if existing is None:
            new_child: MutableMapping[str, object] = {}
            current[segment] = new_child
            current = new_child
            continue
        if isinstance(existing, MutableMapping):
            current = cast(MutableMapping[str, object], existing)
            continue
        raise ConfigError(
            "Environment overrides conflict with existing scalar value at "
            f"{'.'.join(path)}"
        )
    current[path[-1]] = value


def _deep_merge(target: MutableMapping[str, object], overrides: Mapping[str, object]) -> None:
    for key, value in overrides.items():
        existing = target.get(key)
        if isinstance(existing, MutableMapping) and isinstance(value, Mapping):
            _deep_merge(existing, _as_dict(value, f"merge.{key}"))
            continue
        target[key] = value


def _deep_copy(source: Mapping[str, object]) -> dict[str, object]:
    result: dict[str, object] = {}
    for key, value in source.items():
        if isinstance(value, Mapping):
            result[key] = _deep_copy(_as_dict(value, f"copy.{key}"))
        else:
            result[key] = value
    return result


def _coerce_value(raw: str) -> object:
    raw = raw.strip()
    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError:  # pragma: no cover - treat as string if parsing fails
        return raw
    return parsed


def _to_path(value: object) -> Path:
    if value is None:
        raise ConfigError("Expected a filesystem path, received None.")
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise ConfigError(f"Cannot convert value {value!r} to Path.")


def _expect_str(value: object, key: str) -> str:
    if isinstance(value, str):
        return value
    raise ConfigError(f"Expected {key} to resolve to a string. Got {value!r}.")


def _as_dict(value: object | None, label: str) -> dict[str, object]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigError(f"Expected {label} to be a mapping. Got {type(value).__name__}.")
    result: dict[str, object] = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise ConfigError(f"Mapping {label} must use string keys. Got {key!r}.")
        result[key] = item
    return result


__all__ = [
    "AppConfig",
    "ConfigError",
    "CredentialFilesConfig",
    "load_config",
]
