"""
Configuration module for rimecfg.

Uses pydantic-settings for environment variable and settings file loading.
"""

from rimecfg.config.settings import Settings
from rimecfg.config.sources import (
    ConfigFileError,
    YamlSettingsSource,
    get_user_config_dir,
    get_user_config_path,
)

__all__ = [
    "ConfigFileError",
    "Settings",
    "YamlSettingsSource",
    "get_user_config_dir",
    "get_user_config_path",
]
