"""
Configuration holder: reads named storage entries from storage.<env>.json.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from cryptstore.domain.models import StorageConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = "./server"
DEFAULT_ENV = "development"


class ConfigError(RuntimeError):
    """Storage configuration is missing, unreadable or invalid."""


def config_file_path(config_dir: Optional[str] = None, env: Optional[str] = None) -> Path:
    """Return the environment-suffixed configuration file path."""
    base = config_dir or os.getenv("CRYPTSTORE_CONFIG_DIR", DEFAULT_CONFIG_DIR)
    environment = env or os.getenv("CRYPTSTORE_ENV", DEFAULT_ENV)
    return Path(base) / f"storage.{environment}.json"


def _read_entries(path: Path) -> Dict[str, Any]:
    try:
        entries = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigError(f"Configuration file not found: {path}") from exc
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Cannot read configuration file {path}: {exc}") from exc
    if not isinstance(entries, dict):
        raise ConfigError(f"Configuration file {path} must contain a JSON object")
    return entries


def load_storage_config(
    name: str, config_dir: Optional[str] = None, env: Optional[str] = None
) -> StorageConfig:
    """Resolve the entry ``name`` from the configuration file."""
    path = config_file_path(config_dir, env)
    entry = _read_entries(path).get(name)
    if entry is None:
        raise ConfigError(f"No storage configuration named {name!r} in {path}")
    env_key = os.getenv("CRYPTSTORE_SYS_KEY")
    if env_key and isinstance(entry, dict):
        entry = {**entry, "sysKey": env_key}
    try:
        return StorageConfig.model_validate(entry)
    except ValidationError as exc:
        raise ConfigError(f"Invalid storage configuration {name!r}: {exc}") from exc
