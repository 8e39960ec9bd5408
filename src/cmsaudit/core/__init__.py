"""Core utilities for cmsaudit."""

from cmsaudit.core.config import (
    Settings,
    get_global_config_path,
    load_global_config,
    load_settings,
    save_global_config,
)

__all__ = [
    "Settings",
    "get_global_config_path",
    "load_global_config",
    "load_settings",
    "save_global_config",
]
