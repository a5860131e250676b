"""Resolver — orchestrates catalog, group mapping, overrides and caching.

Construct one :class:`Resolver` per process and pass it to callers
explicitly; there is no module-level instance.

Resolution pipeline::

    cache check → validate identity → map groups/attributes
      → merge override → default-role fallback → aggregate permissions
      → cache write

The whole pipeline, and every override mutation, runs under a single
re-entrant lock.  Resolution is CPU-bound and short, so a coarse lock keeps
cache reads, writes and invalidations for a principal strictly ordered.
"""

from __future__ import annotations

import dataclasses
import threading
from collections.abc import Iterable, Mapping
from datetime import timedelta
from typing import Any

from directory_rbac.config.settings import ResolverSettings
from directory_rbac.config.validation import MissingRequiredSettingError
from directory_rbac.kernel.errors import ConfigError, InvalidIdentityError, PrincipalId
from directory_rbac.kernel.time import Clock, SystemClock
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.checks import has_all_permissions as _has_all
from directory_rbac.rbac.checks import has_any_permission as _has_any
from directory_rbac.rbac.checks import has_permission as _has_one
from directory_rbac.rbac.cache import CacheStats, ResolutionCache
from directory_rbac.rbac.catalog import Catalog, load_catalog
from directory_rbac.rbac.mapping import AttributeMappings, GroupMapper, GroupMappings, MappingTables
from directory_rbac.rbac.models import (
    AssignmentSource,
    IdentityRecord,
    Override,
    PermissionMap,
    ResolutionOrigin,
    ResolutionResult,
    ResolvedRoleAssignment,
    Role,
)
from directory_rbac.rbac.overrides import OverrideTable, apply_override, normalize_override
from directory_rbac.rbac.validation import sanitize_role_name, validate_identity_record

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class RoleNameValidation:
    """Partition of candidate role names into known and unknown."""

    valid: tuple[str, ...]
    invalid: tuple[Any, ...]

    @property
    def all_valid(self) -> bool:
        return not self.invalid


def _coerce_settings(settings: ResolverSettings | Mapping[str, Any] | None) -> ResolverSettings:
    if settings is None:
        return ResolverSettings()
    if isinstance(settings, ResolverSettings):
        return settings
    if isinstance(settings, Mapping):
        try:
            return ResolverSettings(**settings)
        except TypeError as exc:
            raise ConfigError(0, {"reason": "Unknown resolver setting", "error": str(exc)}, cause=exc) from exc
    raise ConfigError(0, {"reason": "Resolver settings must be an object", "type": type(settings).__name__})


class Resolver:
    """Derives roles and permissions for principals from directory identity records.

    Args:
        catalog: A :class:`Catalog`, a role-definition document, or a path to
            a JSON role-definition file.
        group_mappings: Group DN → role name.
        attribute_mappings: Attribute name → {attribute value → role name}.
        settings: :class:`ResolverSettings` or a mapping of its fields.
        clock: Time source for cache and override expiry.

    Raises:
        ConfigError: If any construction input is absent or malformed, or
            the default role is not defined in the catalog.
    """

    def __init__(
        self,
        catalog: Catalog | Mapping[str, Any] | str,
        group_mappings: GroupMappings,
        attribute_mappings: AttributeMappings,
        settings: ResolverSettings | Mapping[str, Any] | None = None,
        *,
        clock: Clock | None = None,
    ) -> None:
        self._settings = _coerce_settings(settings)
        self._clock = clock or SystemClock()
        self._catalog = load_catalog(catalog)
        if self._settings.default_role not in self._catalog:
            raise ConfigError(
                0,
                {"reason": "Default role is not defined in the role catalog", "default_role": self._settings.default_role},
            )
        self._mapper = GroupMapper(group_mappings, attribute_mappings, self._catalog.all_role_names())
        self._cache = ResolutionCache(self._clock)
        self._overrides = OverrideTable()
        self._ttl = timedelta(milliseconds=self._settings.cache_ttl_millis)
        self._lock = threading.RLock()
        _log.info(
            "rbac.resolver_initialized",
            role_count=len(self._catalog),
            default_role=self._settings.default_role,
            cache_ttl_millis=self._settings.cache_ttl_millis,
            overrides_enabled=self._settings.enable_overrides,
        )

    @classmethod
    def from_settings(
        cls,
        settings: ResolverSettings,
        tables: MappingTables,
        *,
        clock: Clock | None = None,
    ) -> "Resolver":
        """Build a resolver whose catalog lives at ``settings.roles_permissions_path``."""
        if not settings.roles_permissions_path:
            raise MissingRequiredSettingError("RBAC_ROLES_PERMISSIONS_PATH")
        return cls(
            settings.roles_permissions_path,
            tables.groups,
            tables.attributes,
            settings,
            clock=clock,
        )

    @property
    def settings(self) -> ResolverSettings:
        return self._settings

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    @property
    def mapper(self) -> GroupMapper:
        return self._mapper

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(
        self,
        principal_id: PrincipalId,
        identity: IdentityRecord | Mapping[str, Any],
        *,
        skip_cache: bool = False,
        include_raw_identity: bool = False,
    ) -> ResolutionResult:
        """Resolve roles and permissions for *principal_id*.

        Returns a cached result (tagged ``CACHED``) while it is unexpired,
        unless *skip_cache* is set.  Otherwise resolves from *identity*,
        stores the result and returns it tagged ``FRESH``.  With
        *include_raw_identity* the validated record is attached to the
        returned result and a per-source breakdown is logged.

        Raises:
            InvalidIdentityError: If *identity* is absent or structurally invalid.
        """
        with self._lock:
            if not skip_cache:
                cached = self._cache.get(principal_id)
                if cached is not None:
                    _log.debug("rbac.cache_hit", principal_id=principal_id)
                    return dataclasses.replace(cached, origin=ResolutionOrigin.CACHED)

            try:
                record = validate_identity_record(identity, principal_id)
            except InvalidIdentityError as exc:
                _log.error("rbac.identity_invalid", **exc.to_dict())
                raise

            assignments = self._mapper.resolve_all(record, principal_id)
            now = self._clock.now()
            expires_at = now + self._ttl

            if self._settings.enable_overrides:
                override = self._overrides.take_active(principal_id, now)
                if override is not None:
                    assignments = self._merge_override(principal_id, assignments, override)
                    if override.expires_at is not None and override.expires_at < expires_at:
                        expires_at = override.expires_at

            if not assignments:
                default_role = self._settings.default_role
                _log.warning("rbac.default_role_assigned", principal_id=principal_id, role=default_role)
                assignments = [ResolvedRoleAssignment(default_role, AssignmentSource.DEFAULT, "default_role")]

            roles = tuple(a.role for a in assignments)
            result = ResolutionResult(
                principal_id=principal_id,
                roles=roles,
                permissions=self._catalog.aggregate(roles),
                resolved_at=now,
                expires_at=expires_at,
                origin=ResolutionOrigin.FRESH,
                assignments=tuple(assignments),
            )
            if self._ttl > timedelta(0):
                self._cache.put(principal_id, result)

            if include_raw_identity:
                self._mapper.log_resolution(record, assignments, principal_id)
                result = dataclasses.replace(result, identity=record)
            return result

    def _merge_override(
        self,
        principal_id: PrincipalId,
        assignments: list[ResolvedRoleAssignment],
        override: Override,
    ) -> list[ResolvedRoleAssignment]:
        base = {a.role: a for a in assignments}
        evidence = "override:complete_replacement" if override.replaces else "override:roles_to_add"
        merged: list[ResolvedRoleAssignment] = []
        for role in apply_override(list(base), override):
            if role not in self._catalog:
                _log.warning(
                    "rbac.override_role_unknown",
                    principal_id=principal_id,
                    role=sanitize_role_name(role),
                )
                continue
            existing = None if override.replaces else base.get(role)
            merged.append(existing or ResolvedRoleAssignment(role, AssignmentSource.OVERRIDE, evidence))
        _log.info(
            "rbac.override_applied",
            principal_id=principal_id,
            replaced=override.replaces,
            roles=[a.role for a in merged],
        )
        return merged

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def set_override(self, override: Override | Mapping[str, Any]) -> Override:
        """Install an override and invalidate the principal's cached result.

        Raises:
            InvalidIdentityError: If the override or one of its role lists is malformed.
        """
        normalized = normalize_override(override)
        with self._lock:
            self._overrides.set(normalized)
            self._cache.invalidate(normalized.principal_id)
        _log.info("rbac.override_set", principal_id=normalized.principal_id)
        return normalized

    def remove_override(self, principal_id: PrincipalId) -> bool:
        with self._lock:
            removed = self._overrides.remove(principal_id) is not None
            self._cache.invalidate(principal_id)
        _log.info("rbac.override_removed", principal_id=principal_id, existed=removed)
        return removed

    def get_override(self, principal_id: PrincipalId) -> Override | None:
        return self._overrides.get(principal_id)

    def invalidate(self, principal_id: PrincipalId) -> bool:
        with self._lock:
            removed = self._cache.invalidate(principal_id)
        _log.info("rbac.cache_invalidated", principal_id=principal_id)
        return removed

    def clear_cache(self) -> int:
        with self._lock:
            removed = self._cache.clear()
        _log.info("rbac.cache_cleared", removed=removed)
        return removed

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_role(self, role_name: str) -> Role | None:
        return self._catalog.get(role_name)

    def all_role_names(self) -> list[str]:
        return self._catalog.all_role_names()

    def all_roles(self) -> list[Role]:
        return self._catalog.all_roles()

    def role_permission_keys(self, role_name: str) -> list[str]:
        return self._catalog.role_permission_keys(role_name)

    def granted_permission_keys(self, role_name: str) -> list[str]:
        return self._catalog.granted_permissions(role_name)

    def validate_role_names(self, role_names: Iterable[Any]) -> RoleNameValidation:
        valid: list[str] = []
        invalid: list[Any] = []
        for name in role_names:
            if isinstance(name, str) and name in self._catalog:
                valid.append(name.strip().upper())
            else:
                invalid.append(name)
        return RoleNameValidation(valid=tuple(valid), invalid=tuple(invalid))

    @staticmethod
    def has_permission(permissions: PermissionMap, required: str) -> bool:
        return _has_one(permissions, required)

    @staticmethod
    def has_all_permissions(permissions: PermissionMap, required: Iterable[str]) -> bool:
        return _has_all(permissions, required)

    @staticmethod
    def has_any_permission(permissions: PermissionMap, required: Iterable[str]) -> bool:
        return _has_any(permissions, required)


__all__ = ["Resolver", "RoleNameValidation"]
