"""RBAC catalog — the static role → permission map.

Loaded once from a role-definition document shaped like::

    {
        "roles": {
            "PROCUREMENT_OFFICER": {
                "description": "Processes purchase requests",
                "permissions": {"request:read_all": true, "admin:manage_users": false}
            }
        }
    }

A malformed role entry is skipped with a warning; only an unreadable or
unparsable source, or one without a ``roles`` object, is a
:class:`~directory_rbac.kernel.errors.ConfigError`.  The catalog is
read-only after construction and safe to share across threads.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from directory_rbac.kernel.errors import ConfigError
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.models import Role

_log = get_logger(__name__)

CatalogSource = Mapping[str, Any] | str | os.PathLike[str]


class Catalog:
    """Immutable collection of :class:`Role` objects keyed by canonical name."""

    def __init__(self, roles: Iterable[Role] = ()) -> None:
        self._roles: dict[str, Role] = {}
        for role in roles:
            self._roles.setdefault(role.name, role)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_document(cls, document: Any) -> "Catalog":
        if not isinstance(document, Mapping):
            raise ConfigError(0, {"reason": "Role catalog must be an object", "type": type(document).__name__})
        raw_roles = document.get("roles")
        if not isinstance(raw_roles, Mapping):
            raise ConfigError(0, {"reason": "Configuration missing roles object"})

        roles: dict[str, Role] = {}
        for raw_name, entry in raw_roles.items():
            role = _parse_role(raw_name, entry)
            if role is None:
                continue
            if role.name in roles:
                _log.warning("rbac.catalog_duplicate_role", role=role.name)
                continue
            roles[role.name] = role

        catalog = cls(roles.values())
        _log.info("rbac.catalog_loaded", role_count=len(catalog))
        return catalog

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "Catalog":
        config_path = Path(path)
        try:
            content = config_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError(
                0, {"reason": "Configuration file not readable", "path": str(config_path)}, cause=exc
            ) from exc
        try:
            document = json.loads(content)
        except json.JSONDecodeError as exc:
            raise ConfigError(
                0,
                {"reason": "Configuration file is not valid JSON", "path": str(config_path), "error": str(exc)},
                cause=exc,
            ) from exc
        return cls.from_document(document)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, role_name: str) -> Role | None:
        if not isinstance(role_name, str):
            return None
        return self._roles.get(role_name.strip().upper())

    def all_role_names(self) -> list[str]:
        return list(self._roles)

    def all_roles(self) -> list[Role]:
        return list(self._roles.values())

    def role_permission_keys(self, role_name: str) -> list[str]:
        """Every permission key the role declares, granted or not."""
        role = self.get(role_name)
        return list(role.permissions) if role else []

    def granted_permissions(self, role_name: str) -> list[str]:
        """Permission keys whose flag is ``True`` for *role_name*."""
        role = self.get(role_name)
        return role.granted_permissions if role else []

    def aggregate(self, role_names: Iterable[str]) -> dict[str, bool]:
        """OR-aggregate permissions across *role_names*.

        Every key declared by any listed role appears in the result; its value
        is ``True`` iff at least one role grants it.  Unknown roles contribute
        nothing.
        """
        aggregated: dict[str, bool] = {}
        for name in role_names:
            role = self.get(name)
            if role is None:
                continue
            for key, granted in role.permissions.items():
                aggregated[key] = aggregated.get(key, False) or granted is True
        return aggregated

    def __contains__(self, role_name: object) -> bool:
        return isinstance(role_name, str) and role_name.strip().upper() in self._roles

    def __len__(self) -> int:
        return len(self._roles)

    def __repr__(self) -> str:
        return f"Catalog(roles={self.all_role_names()!r})"


def _parse_role(raw_name: Any, entry: Any) -> Role | None:
    if not isinstance(raw_name, str) or not raw_name.strip():
        _log.warning("rbac.catalog_role_name_invalid", role=repr(raw_name))
        return None
    name = raw_name.strip().upper()
    if not isinstance(entry, Mapping):
        _log.warning("rbac.catalog_role_invalid", role=name, reason="role entry is not an object")
        return None
    raw_permissions = entry.get("permissions")
    if not isinstance(raw_permissions, Mapping):
        _log.warning("rbac.catalog_role_invalid", role=name, reason="missing or invalid permissions object")
        return None

    permissions: dict[str, bool] = {}
    for key, flag in raw_permissions.items():
        if not isinstance(flag, bool):
            _log.warning(
                "rbac.catalog_permission_invalid",
                role=name,
                permission=key,
                value_type=type(flag).__name__,
            )
            continue
        permissions[str(key)] = flag

    description = entry.get("description")
    return Role(
        name=name,
        description=description if isinstance(description, str) else "",
        permissions=permissions,
    )


def load_catalog(source: Any) -> Catalog:
    """Build a :class:`Catalog` from a catalog, a document mapping, or a JSON file path."""
    if isinstance(source, Catalog):
        return source
    if isinstance(source, Mapping):
        return Catalog.from_document(source)
    if isinstance(source, (str, os.PathLike)):
        return Catalog.from_file(source)
    raise ConfigError(0, {"reason": "Unsupported role catalog source", "type": type(source).__name__})


__all__ = ["Catalog", "CatalogSource", "load_catalog"]
