"""Config settings – Settings base class and ResolverSettings."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from directory_rbac.config.validation import InvalidSettingValueError

DEFAULT_CACHE_TTL_MILLIS = 60 * 60 * 1000
DEFAULT_ROLE = "REQUESTER"


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings."""

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


@dataclasses.dataclass
class ResolverSettings(Settings):
    """Tunables for :class:`~directory_rbac.rbac.resolver.Resolver`.

    Read from ``RBAC_*`` environment variables by
    :class:`~directory_rbac.config.settings.loaders.EnvSettingsLoader`.
    ``default_role`` is canonicalised to upper case on construction.
    """

    _prefix: ClassVar[str] = "RBAC"

    cache_ttl_millis: int = DEFAULT_CACHE_TTL_MILLIS
    default_role: str = DEFAULT_ROLE
    enable_overrides: bool = True
    roles_permissions_path: str | None = None

    def _validate(self) -> None:
        if isinstance(self.cache_ttl_millis, bool) or not isinstance(self.cache_ttl_millis, int):
            raise InvalidSettingValueError(
                "cache_ttl_millis", self.cache_ttl_millis, "must be an integer number of milliseconds"
            )
        if self.cache_ttl_millis < 0:
            raise InvalidSettingValueError("cache_ttl_millis", self.cache_ttl_millis, "must be >= 0")
        if not isinstance(self.default_role, str) or not self.default_role.strip():
            raise InvalidSettingValueError("default_role", self.default_role, "must be a non-empty string")
        if not isinstance(self.enable_overrides, bool):
            raise InvalidSettingValueError("enable_overrides", self.enable_overrides, "must be a boolean")
        self.default_role = self.default_role.strip().upper()

    @property
    def cache_ttl_seconds(self) -> float:
        return self.cache_ttl_millis / 1000


__all__ = ["DEFAULT_CACHE_TTL_MILLIS", "DEFAULT_ROLE", "ResolverSettings", "Settings"]
