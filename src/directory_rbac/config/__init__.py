"""Config – 12-factor settings and loaders."""

from directory_rbac.config.settings import (
    DotenvSettingsLoader,
    EnvSettingsLoader,
    ResolverSettings,
    Settings,
    SettingsLoader,
)
from directory_rbac.config.validation import (
    ConfigError,
    InvalidSettingValueError,
    MissingRequiredSettingError,
)

__all__ = [
    "ConfigError",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "ResolverSettings",
    "Settings",
    "SettingsLoader",
]
