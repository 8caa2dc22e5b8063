# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/config/loader.py

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from clusterboot.errors import ConfigError
from clusterboot.utils.yaml_strict import safe_load_unique
from .models import ServerConfig

log = logging.getLogger("clusterboot")

CONFIG_ENV = "CLUSTERBOOT_CONFIG"


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Recursively merge *override* into *base* (mutates base).
    Only overwrites when the override value is non-empty.
    """
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            _deep_merge(base[key], value)
        else:
            if value not in (None, ""):
                base[key] = value
    return base


def _find_config_file(path: Optional[Union[str, Path]]) -> Optional[Path]:
    """
    Locate the settings file:

    1. explicit path (must exist)
    2. CLUSTERBOOT_CONFIG environment variable
    3. none: defaults plus CLI flags only
    """
    if path:
        p = Path(path)
        if not p.is_file():
            raise ConfigError(f"config file {p} does not exist")
        return p

    env = os.environ.get(CONFIG_ENV)
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("%s=%s does not exist, skipping", CONFIG_ENV, env)

    return None


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    raw = path.read_text()
    expanded = os.path.expandvars(raw)
    try:
        data = safe_load_unique(expanded) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"config file {path} is not valid YAML: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")
    return data


def load_config(
    path: Optional[Union[str, Path]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ServerConfig:
    """
    Build the effective ServerConfig.

    Values come from the settings file (if any) with command-line overrides
    merged on top; unset (None/empty) overrides leave the file value alone.
    """
    data: Dict[str, Any] = {}

    config_path = _find_config_file(path)
    if config_path:
        log.debug("Loading settings from %s", config_path)
        data = _load_yaml(config_path)

    _deep_merge(data, overrides or {})

    try:
        return ServerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid settings: {e}") from e
