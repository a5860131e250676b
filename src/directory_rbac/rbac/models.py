"""RBAC value objects — roles, identity records, overrides and results."""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterable, Mapping
from datetime import datetime
from types import MappingProxyType
from typing import Any

from directory_rbac.kernel.errors import PrincipalId

PermissionMap = Mapping[str, bool]

_DN_KEYS = ("dn", "distinguishedname", "distinguished_name")
_CN_KEYS = ("cn", "commonname", "common_name")
_MEMBER_OF_KEYS = ("memberof", "member_of")


def principal_key(principal_id: PrincipalId) -> str:
    """Canonical table key for a principal; ``15`` and ``"15"`` are the same principal."""
    return str(principal_id).strip()


def membership_entries(member_of: Any) -> tuple[Any, ...]:
    """Raw ``memberOf`` value as a tuple of entries.

    ``None`` is no entries; a string (or any other non-iterable, or a
    mapping) is a single entry; every other iterable is expanded.
    """
    if member_of is None:
        return ()
    if isinstance(member_of, (str, bytes, Mapping)) or not isinstance(member_of, Iterable):
        return (member_of,)
    return tuple(member_of)


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclasses.dataclass(frozen=True)
class Role:
    """A catalog role: canonical upper-case name plus its permission flags."""

    name: str
    description: str = ""
    permissions: PermissionMap = dataclasses.field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "permissions", _freeze(self.permissions))

    def grants(self, permission: str) -> bool:
        return self.permissions.get(permission) is True

    @property
    def granted_permissions(self) -> list[str]:
        return [key for key, granted in self.permissions.items() if granted is True]


@dataclasses.dataclass(frozen=True)
class IdentityRecord:
    """An already-fetched directory entry for one principal.

    ``attributes`` keys are lower-cased on construction; directory attribute
    names are case-insensitive.
    """

    distinguished_name: str
    common_name: str
    member_of: tuple[Any, ...] = ()
    attributes: Mapping[str, str] = dataclasses.field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        object.__setattr__(self, "member_of", membership_entries(self.member_of))
        object.__setattr__(
            self,
            "attributes",
            MappingProxyType({str(k).lower(): v for k, v in (self.attributes or {}).items()}),
        )

    def attribute(self, name: str) -> Any:
        """Return the raw value of attribute *name* (case-insensitive), or ``None``."""
        return self.attributes.get(name.lower())

    @classmethod
    def from_directory(cls, entry: Mapping[str, Any]) -> "IdentityRecord":
        """Build a record from a raw directory entry.

        Recognises ``dn``/``distinguishedName``, ``cn``/``commonName`` and
        ``memberOf`` in any letter case; every other key becomes an attribute.
        Single-element list values other than ``memberOf`` are unwrapped.
        """
        dn: Any = None
        cn: Any = None
        member_of: Any = None
        attributes: dict[str, Any] = {}
        for raw_key, value in entry.items():
            key = str(raw_key).lower()
            if key in _MEMBER_OF_KEYS:
                member_of = value
                continue
            if isinstance(value, (list, tuple)) and len(value) == 1:
                value = value[0]
            if key in _DN_KEYS:
                dn = value
            elif key in _CN_KEYS:
                cn = value
            else:
                attributes[key] = value
        return cls(distinguished_name=dn, common_name=cn, member_of=member_of, attributes=attributes)


class AssignmentSource(str, enum.Enum):
    GROUP = "GROUP"
    ATTRIBUTE = "ATTRIBUTE"
    OVERRIDE = "OVERRIDE"
    DEFAULT = "DEFAULT"


@dataclasses.dataclass(frozen=True)
class ResolvedRoleAssignment:
    """One contributing mapping: which role, from where, and why."""

    role: str
    source: AssignmentSource
    evidence: str = ""


@dataclasses.dataclass(frozen=True)
class Override:
    """Administrative adjustment to a principal's directory-derived roles.

    A non-empty ``complete_replacement`` wins outright; otherwise
    ``roles_to_add`` is applied before ``roles_to_remove``.
    """

    principal_id: PrincipalId
    roles_to_add: tuple[str, ...] = ()
    roles_to_remove: tuple[str, ...] = ()
    complete_replacement: tuple[str, ...] = ()
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now > self.expires_at

    @property
    def replaces(self) -> bool:
        return bool(self.complete_replacement)


class ResolutionOrigin(str, enum.Enum):
    FRESH = "FRESH"
    CACHED = "CACHED"


@dataclasses.dataclass(frozen=True)
class ResolutionResult:
    """Roles and aggregated permissions resolved for one principal."""

    principal_id: PrincipalId
    roles: tuple[str, ...]
    permissions: PermissionMap
    resolved_at: datetime
    expires_at: datetime
    origin: ResolutionOrigin = ResolutionOrigin.FRESH
    assignments: tuple[ResolvedRoleAssignment, ...] = ()
    identity: IdentityRecord | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", tuple(self.roles))
        object.__setattr__(self, "permissions", _freeze(self.permissions))

    def has_role(self, role: str) -> bool:
        return role.strip().upper() in self.roles

    def granted_permissions(self) -> list[str]:
        return sorted(key for key, granted in self.permissions.items() if granted is True)

    def assignments_from(self, source: AssignmentSource) -> list[ResolvedRoleAssignment]:
        return [a for a in self.assignments if a.source is source]


@dataclasses.dataclass(frozen=True)
class CacheEntry:
    result: ResolutionResult
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at


__all__ = [
    "AssignmentSource",
    "CacheEntry",
    "IdentityRecord",
    "Override",
    "PermissionMap",
    "ResolutionOrigin",
    "ResolutionResult",
    "ResolvedRoleAssignment",
    "Role",
    "membership_entries",
    "principal_key",
]
