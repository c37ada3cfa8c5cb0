"""Centralized configuration for finsync."""

from finsync_config.settings import (
    Settings,
    clear_settings_cache,
    get_config_dir,
    get_settings,
)

__all__ = ["Settings", "clear_settings_cache", "get_config_dir", "get_settings"]
