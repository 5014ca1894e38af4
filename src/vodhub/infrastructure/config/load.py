"""Assemble an :class:`AppConfig` from vodhub's configuration layers.

Layers are applied in order, each one overriding the last:
built-in defaults, ``config.yaml``, ``VODHUB_*`` variables (with an
optional ``.env`` file feeding them) and finally ``vodhub`` CLI flags.
"""

from __future__ import annotations

from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from .defaults import DEFAULT_CONFIG
from .schema import AppConfig, EnvOverrides

_SECTION_KEYS: set[str] = {"http", "logging", "cache", "search", "providers"}


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Fold `override` into `base` in place; nested sections merge, anything else is replaced.

    A YAML `providers.sources` list therefore replaces the default list whole.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, Mapping)
        ):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _normalize_layer(data: Mapping[str, Any]) -> dict[str, Any]:
    """Turn one layer into the nested shape `AppConfig` validates.

    YAML files use the nested `http`, `logging`, `cache`, `search` and
    `providers` sections. Environment variables and CLI flags arrive flat
    (`search_max_pages`, `log_format`, `providers_file`, ...) and are
    moved into their section here.
    """
    out: dict[str, Any] = {}

    # Pass through already sectioned blocks
    for section in _SECTION_KEYS:
        if section in data and isinstance(data[section], Mapping):
            out[section] = dict(data[section])

    # General
    if "app_name" in data:
        out["app_name"] = data["app_name"]
    if "environment" in data:
        out["environment"] = data["environment"]

    # Flat -> section mappings
    flat_map: dict[str, tuple[str, str]] = {
        "http_search_timeout_seconds": ("http", "search_timeout_seconds"),
        "http_detail_timeout_seconds": ("http", "detail_timeout_seconds"),
        "http_user_agent": ("http", "user_agent"),
        "log_level": ("logging", "level"),
        "log_format": ("logging", "format"),
        "cache_backend": ("cache", "backend"),
        "cache_dir": ("cache", "dir"),
        "cache_ttl_seconds": ("cache", "ttl_seconds"),
        "search_max_pages": ("search", "max_pages"),
        "search_fluid": ("search", "fluid_search"),
        "providers_file": ("providers", "file"),
    }

    for flat_key, (section, section_key) in flat_map.items():
        if flat_key in data:
            out.setdefault(section, {})
            out[section][section_key] = data[flat_key]

    return out


def _read_yaml_config(config_path: Path) -> dict[str, Any]:
    raw = config_path.read_text(encoding="utf-8")
    parsed = yaml.safe_load(raw)
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ValueError(
            f"Config YAML must be a mapping, got: {type(parsed)!r}")
    return parsed


def load_config(
    *,
    config_path: Path | None = None,
    dotenv_path: Path | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """Build the effective vodhub configuration.

    `config_path` and `dotenv_path` are optional, but when given they must
    exist. Nothing is written: the cache directory is created later by the
    diskcache backend, not here.
    """
    cli_overrides = cli_overrides or {}

    # .env values only fill VODHUB_* variables not already set.
    if dotenv_path is not None:
        if not dotenv_path.exists():
            raise FileNotFoundError(dotenv_path)
        load_dotenv(dotenv_path, override=False)

    base = _normalize_layer(deepcopy(DEFAULT_CONFIG))

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(config_path)
        yaml_layer = _normalize_layer(_read_yaml_config(config_path))
        _deep_merge(base, yaml_layer)

    env_layer_flat = EnvOverrides().to_update_dict()
    env_layer = _normalize_layer(env_layer_flat)
    _deep_merge(base, env_layer)

    cli_layer = _normalize_layer(cli_overrides)
    _deep_merge(base, cli_layer)

    return AppConfig.model_validate(base)
