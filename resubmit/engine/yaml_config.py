"""YAML configuration loader.

Example YAML:
    client:
      base_url: http://127.0.0.1:8080
      request_timeout_seconds: 45
      log_level: DEBUG
      preferences_path: ~/.resubmit/preferences.json

Values start from :meth:`ClientConfig.from_env` and the ``client`` section
overrides them.
"""
from __future__ import annotations

import logging
from dataclasses import fields
from pathlib import Path

import yaml

from .config import ClientConfig

logger = logging.getLogger(__name__)

_FLOAT_FIELDS = {"request_timeout_seconds"}
_NULLABLE_FIELDS = {"preferences_path"}


def load_yaml_config(path: str | Path) -> ClientConfig:
    """Load and parse a YAML config file into a :class:`ClientConfig`."""
    path = Path(path)
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.error(
            "load_yaml_config: config file not found at %s (absolute path: %s)",
            path, path.absolute(),
        )
        raise
    except yaml.YAMLError as exc:
        logger.error("load_yaml_config: YAML parse error in %s: %s", path, exc)
        raise

    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    config = ClientConfig.from_env()
    section = raw.get("client") or {}
    if not isinstance(section, dict):
        raise ValueError(f"{path}: 'client' section must be a mapping")

    known = {f.name for f in fields(ClientConfig)}
    for key, value in section.items():
        if key not in known:
            logger.warning("load_yaml_config: ignoring unknown client key %r", key)
            continue
        if value is None:
            if key not in _NULLABLE_FIELDS:
                logger.warning("load_yaml_config: ignoring empty client key %r", key)
                continue
        elif key in _FLOAT_FIELDS:
            value = float(value)
        else:
            value = str(value)
        setattr(config, key, value)

    logger.info(
        "Parsed YAML config %s: base_url=%s timeout=%s",
        path.name, config.base_url, config.request_timeout_seconds,
    )
    return config
