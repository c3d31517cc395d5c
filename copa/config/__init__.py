"""Configuration module for copa"""

from copa.config.global_ignore import load_global_excludes, split_patterns
from copa.config.settings import (
    Settings,
    clear_settings_cache,
    get_settings,
    override_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "clear_settings_cache",
    "override_settings",
    "load_global_excludes",
    "split_patterns",
]
