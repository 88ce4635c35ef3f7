# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/metaldata/config/loader.py

import logging
import os
from pathlib import Path

import yaml

from .models import Settings

log = logging.getLogger("metaldata")


def _deep_merge(settings: dict, local: dict) -> dict:
    """
    Lay the local settings over the shared ones, in place.

    Nested mappings merge key by key. A blank local value (null or "")
    leaves the shared setting alone, so a local file can list a key
    without overriding it.
    """
    for key, value in local.items():
        current = settings.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            _deep_merge(current, value)
        elif value not in (None, ""):
            settings[key] = value
    return settings


def _find_overrides_file(config_path: Path) -> Path | None:
    """
    Locate the local overrides file using this priority:

    1. METALDATA_OVERRIDES environment variable (explicit override)
    2. <stem>.local.yaml in the same directory as the settings file
    """
    env = os.environ.get("METALDATA_OVERRIDES")
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("METALDATA_OVERRIDES=%s does not exist, skipping", env)
        return None

    p = config_path.with_name(f"{config_path.stem}.local.yaml")
    if p.is_file():
        return p

    return None


def _load_yaml(path: Path) -> dict:
    """Read one settings file; ${VAR} references resolve from the environment."""
    data = yaml.safe_load(os.path.expandvars(path.read_text(encoding="utf-8")))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: settings must be a mapping, got {type(data).__name__}")
    return data


def load_settings(path: str | Path | None = None) -> Settings:
    """
    Load and validate metaldata settings.

    Without a path the defaults are returned. Otherwise the YAML file is
    read (``${ENV_VAR}`` placeholders are expanded), an optional
    ``<stem>.local.yaml`` next to it (or the file named by
    ``METALDATA_OVERRIDES``) is deep-merged on top, and the result is
    validated by pydantic.
    """
    if path is None:
        return Settings()

    path = Path(path)
    data = _load_yaml(path)

    overrides_path = _find_overrides_file(path)
    if overrides_path:
        log.debug("Merging overrides from %s", overrides_path)
        _deep_merge(data, _load_yaml(overrides_path))

    return Settings.model_validate(data)
