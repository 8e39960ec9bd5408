"""
Configuration and settings resolution.

Settings live in a single global YAML file; there is no per-project state.

Resolution order for the API token:
  1. Explicit value (``--token`` on the command line)
  2. CMSAUDIT_TOKEN environment variable
  3. Global config file (~/.config/cmsaudit/config.yaml) api.token key
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

DEFAULT_BASE_URL = "https://api.example-cms.com/v2/"
DEFAULT_MAX_RETRIES = 3
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 4

TOKEN_ENV_VAR = "CMSAUDIT_TOKEN"


@dataclass(frozen=True)
class Settings:
    """Resolved settings for one invocation."""

    token: str
    base_url: str = DEFAULT_BASE_URL
    max_retries: int = DEFAULT_MAX_RETRIES
    timeout: float = DEFAULT_TIMEOUT
    max_workers: int = DEFAULT_MAX_WORKERS
    preview: bool = False


def get_global_config_path() -> Path:
    """Return the path to the global cmsaudit config file.

    Respects XDG_CONFIG_HOME if set, otherwise defaults to
    ~/.config/cmsaudit/config.yaml.

    Returns:
        Path to global config file (may not exist).
    """
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_config_home:
        base = Path(xdg_config_home)
    else:
        base = Path.home() / ".config"
    return base / "cmsaudit" / "config.yaml"


def load_global_config() -> dict[str, Any]:
    """Load the global configuration.

    Returns:
        Configuration dict, or empty dict if file is missing or invalid.
    """
    config_path = get_global_config_path()
    if not config_path.is_file():
        return {}
    try:
        text = config_path.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
        if isinstance(data, dict):
            return data
        return {}
    except (OSError, yaml.YAMLError):
        return {}


def save_global_config(config: dict[str, Any]) -> Path:
    """Write the global configuration as YAML.

    Returns:
        Path the config was written to.
    """
    config_path = get_global_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.dump(config, default_flow_style=False, sort_keys=False),
        encoding="utf-8",
    )
    return config_path


def lookup(config: dict[str, Any], key: str, default: Any = None) -> Any:
    """Look up a dotted key (``api.base_url``) in a nested config dict."""
    current: Any = config
    for part in key.split("."):
        if isinstance(current, dict) and part in current:
            current = current[part]
        else:
            return default
    return current


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def load_settings(
    token: str | None = None,
    preview: bool | None = None,
    config: dict[str, Any] | None = None,
) -> Settings:
    """Resolve settings from explicit values, environment and config file.

    Args:
        token: Explicit API token (wins over env and config)
        preview: Explicit preview flag (wins over config)
        config: Pre-loaded config dict (loads the global file if omitted)

    Returns:
        Settings with every field populated. ``token`` may be empty; the
        aggregator reports that as a validation error.
    """
    if config is None:
        config = load_global_config()

    resolved_token = (
        token
        or os.environ.get(TOKEN_ENV_VAR)
        or lookup(config, "api.token")
        or ""
    )

    base_url = str(lookup(config, "api.base_url") or DEFAULT_BASE_URL)
    if not base_url.endswith("/"):
        base_url += "/"

    if preview is None:
        preview = bool(lookup(config, "scan.preview", False))

    return Settings(
        token=str(resolved_token).strip(),
        base_url=base_url,
        max_retries=max(1, _as_int(lookup(config, "api.max_retries"), DEFAULT_MAX_RETRIES)),
        timeout=_as_float(lookup(config, "api.timeout"), DEFAULT_TIMEOUT),
        max_workers=max(1, _as_int(lookup(config, "scan.max_workers"), DEFAULT_MAX_WORKERS)),
        preview=preview,
    )
