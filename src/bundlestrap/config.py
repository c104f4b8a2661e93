"""Configuration loading for bundlestrap.

Values are layered, later layers winning: model defaults, a JSON config
file, ``BUNDLESTRAP_*`` environment variables, then explicit overrides
(usually CLI flags).
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from bundlestrap.errors import ConfigError
from bundlestrap.models import BootstrapConfig

log = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".bundlestrap"
CONFIG_FILE = CONFIG_DIR / "config.json"
CONFIG_ENV_VAR = "BUNDLESTRAP_CONFIG"

ENV_OVERRIDES = {
    "BUNDLESTRAP_URL": "download_url",
    "BUNDLESTRAP_STAGING_ROOT": "staging_root",
    "BUNDLESTRAP_SETTINGS": "local_settings",
    "BUNDLESTRAP_ENTRY_POINT": "entry_point",
}


def resolve_config_path(path: Path | None = None) -> Path | None:
    """Return the config file to read, or None when there is none."""
    if path is not None:
        return path
    env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()
    if env_path:
        return Path(env_path).expanduser()
    if CONFIG_FILE.is_file():
        return CONFIG_FILE
    return None


def read_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON config file into a plain dict."""
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Unable to read config file {path}: {e}") from e
    if not isinstance(payload, dict):
        raise ConfigError(f"Config file {path} must contain a JSON object")
    log.debug("loaded %d keys from %s", len(payload), path)
    return payload


def env_overrides() -> dict[str, str]:
    values: dict[str, str] = {}
    for env_key, field in ENV_OVERRIDES.items():
        value = os.environ.get(env_key, "").strip()
        if value:
            values[field] = value
    return values


def load_config(path: Path | None = None, **overrides: Any) -> BootstrapConfig:
    """Build the immutable run configuration.

    ``overrides`` with a value of None are ignored so CLI flags that were not
    given do not mask lower layers.
    """
    values: dict[str, Any] = {}
    config_path = resolve_config_path(path)
    if config_path is not None:
        values.update(read_config_file(config_path))
    values.update(env_overrides())
    values.update({key: value for key, value in overrides.items() if value is not None})

    if "download_url" not in values:
        raise ConfigError(
            "No download URL configured. Pass --url, set BUNDLESTRAP_URL, "
            "or add download_url to the config file."
        )
    try:
        config = BootstrapConfig(**values)
    except ValidationError as e:
        raise ConfigError(str(e)) from e
    log.debug("config=%s", config.model_dump_json())
    return config
