"""Config settings – 12-factor env-based configuration."""
from directory_rbac.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader
from directory_rbac.config.settings.resolver import (
    DEFAULT_CACHE_TTL_MILLIS,
    DEFAULT_ROLE,
    ResolverSettings,
    Settings,
)

__all__ = [
    "DEFAULT_CACHE_TTL_MILLIS",
    "DEFAULT_ROLE",
    "DotenvSettingsLoader",
    "EnvSettingsLoader",
    "ResolverSettings",
    "Settings",
    "SettingsLoader",
]
