"""Role resolution errors — the engine's error taxonomy.

Every error carries the offending principal identifier (``0`` for
construction-time failures) and a structured ``detail`` map.  Only
:class:`InvalidIdentityError` and :class:`ConfigError` are ever raised out of
:class:`~directory_rbac.rbac.resolver.Resolver`; the remaining kinds are
produced as tagged values and logged where they occur.
"""

from __future__ import annotations

import enum
from typing import Any, ClassVar

from directory_rbac.kernel.errors.application import ApplicationError

PrincipalId = int | str


class ResolutionErrorKind(str, enum.Enum):
    MALFORMED_DN = "MALFORMED_DN"
    MISSING_MEMBERSHIP_DATA = "MISSING_MEMBERSHIP_DATA"
    UNMAPPED_GROUP = "UNMAPPED_GROUP"
    UNMAPPED_ATTRIBUTE = "UNMAPPED_ATTRIBUTE"
    INVALID_IDENTITY = "INVALID_IDENTITY"
    DATABASE_ERROR = "DATABASE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    CACHE_ERROR = "CACHE_ERROR"


class RoleResolutionError(ApplicationError):
    """Base class for every role resolution failure.

    Args:
        principal_id: Principal the failure relates to (``0`` when unset).
        detail: Structured diagnostic context.
        message: Optional override for the generated message.
    """

    kind: ClassVar[ResolutionErrorKind]
    default_code = "role_resolution_error"

    def __init__(
        self,
        principal_id: PrincipalId = 0,
        detail: dict[str, Any] | None = None,
        *,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(
            message or f"Role resolution error [{self.kind.value}] for principal {principal_id}",
            detail=detail,
            cause=cause,
        )
        self.principal_id = principal_id

    def to_dict(self) -> dict[str, Any]:
        payload = super().to_dict()
        payload["kind"] = self.kind.value
        payload["principal_id"] = self.principal_id
        return payload


class MalformedDNError(RoleResolutionError):
    kind = ResolutionErrorKind.MALFORMED_DN
    default_code = "malformed_dn"


class MissingMembershipDataError(RoleResolutionError):
    """A non-empty membership list in which every entry was unusable."""

    kind = ResolutionErrorKind.MISSING_MEMBERSHIP_DATA
    default_code = "missing_membership_data"


class UnmappedGroupError(RoleResolutionError):
    """A group DN maps to a role the catalog does not define."""

    kind = ResolutionErrorKind.UNMAPPED_GROUP
    default_code = "unmapped_group"


class UnmappedAttributeError(RoleResolutionError):
    """An attribute value maps to a role the catalog does not define."""

    kind = ResolutionErrorKind.UNMAPPED_ATTRIBUTE
    default_code = "unmapped_attribute"


class InvalidIdentityError(RoleResolutionError):
    """The identity record (or an override role list) is structurally invalid."""

    kind = ResolutionErrorKind.INVALID_IDENTITY
    default_code = "invalid_identity"


class DatabaseError(RoleResolutionError):
    """Reserved for a persistence collaborator storing overrides."""

    kind = ResolutionErrorKind.DATABASE_ERROR
    default_code = "database_error"


class ConfigError(RoleResolutionError):
    """Configuration is absent, unreadable or malformed."""

    kind = ResolutionErrorKind.CONFIG_ERROR
    default_code = "config_error"


class CacheError(RoleResolutionError):
    kind = ResolutionErrorKind.CACHE_ERROR
    default_code = "cache_error"


__all__ = [
    "CacheError",
    "ConfigError",
    "DatabaseError",
    "InvalidIdentityError",
    "MalformedDNError",
    "MissingMembershipDataError",
    "PrincipalId",
    "ResolutionErrorKind",
    "RoleResolutionError",
    "UnmappedAttributeError",
    "UnmappedGroupError",
]
