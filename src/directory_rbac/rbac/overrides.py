"""In-memory administrative override table.

Overrides are not persisted; a caller that stores them elsewhere is expected
to re-apply them after a restart.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from directory_rbac.kernel.errors import InvalidIdentityError, PrincipalId
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.models import Override, principal_key
from directory_rbac.rbac.validation import validate_role_set

_log = get_logger(__name__)

OVERRIDE_FIELDS = frozenset(
    {"principal_id", "roles_to_add", "roles_to_remove", "complete_replacement", "expires_at"}
)


def normalize_override(override: Override | Mapping[str, Any]) -> Override:
    """Validate an override and canonicalise its role lists.

    Accepts an :class:`Override` or a mapping with the same field names.
    Raises :class:`InvalidIdentityError` for a missing principal, a key
    outside :data:`OVERRIDE_FIELDS`, or a role list that is not a list.
    """
    if isinstance(override, Mapping):
        fields = dict(override)
        unknown = sorted(str(key) for key in fields if key not in OVERRIDE_FIELDS)
        if unknown:
            raise InvalidIdentityError(
                fields.get("principal_id") or 0,
                {"reason": "Override has unknown fields", "unknown_fields": unknown},
            )
    elif isinstance(override, Override):
        fields = {
            "principal_id": override.principal_id,
            "roles_to_add": override.roles_to_add,
            "roles_to_remove": override.roles_to_remove,
            "complete_replacement": override.complete_replacement,
            "expires_at": override.expires_at,
        }
    else:
        raise InvalidIdentityError(0, {"reason": "Override must be an object", "actual_type": type(override).__name__})

    principal_id = fields.get("principal_id")
    if principal_id is None or principal_key(principal_id) == "":
        raise InvalidIdentityError(0, {"reason": "Override missing principal_id"})

    expires_at = fields.get("expires_at")
    if expires_at is not None:
        if not isinstance(expires_at, datetime):
            raise InvalidIdentityError(
                principal_id, {"reason": "Override expires_at must be a datetime", "actual_type": type(expires_at).__name__}
            )
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)

    return Override(
        principal_id=principal_id,
        roles_to_add=tuple(validate_role_set(fields.get("roles_to_add") or [], principal_id)),
        roles_to_remove=tuple(validate_role_set(fields.get("roles_to_remove") or [], principal_id)),
        complete_replacement=tuple(validate_role_set(fields.get("complete_replacement") or [], principal_id)),
        expires_at=expires_at,
    )


def apply_override(base_roles: Iterable[str], override: Override) -> list[str]:
    """Merge *override* into *base_roles*.

    A non-empty ``complete_replacement`` discards the base set entirely.
    Otherwise additions are unioned in first, then removals are applied.
    Role names are expected to be canonical already.
    """
    if override.replaces:
        return list(dict.fromkeys(override.complete_replacement))
    roles = dict.fromkeys((*base_roles, *override.roles_to_add))
    removed = set(override.roles_to_remove)
    return [role for role in roles if role not in removed]


class OverrideTable:
    """Thread-safe principal → :class:`Override` store."""

    def __init__(self) -> None:
        self._overrides: dict[str, Override] = {}
        self._lock = threading.Lock()

    def set(self, override: Override) -> None:
        with self._lock:
            self._overrides[principal_key(override.principal_id)] = override

    def get(self, principal_id: PrincipalId) -> Override | None:
        with self._lock:
            return self._overrides.get(principal_key(principal_id))

    def remove(self, principal_id: PrincipalId) -> Override | None:
        with self._lock:
            return self._overrides.pop(principal_key(principal_id), None)

    def take_active(self, principal_id: PrincipalId, now: datetime) -> Override | None:
        """Return the unexpired override for *principal_id*.

        An expired override is deleted here and ``None`` is returned; it is
        never applied on the call that discovers the expiry.
        """
        key = principal_key(principal_id)
        with self._lock:
            override = self._overrides.get(key)
            if override is None:
                return None
            if override.is_expired(now):
                del self._overrides[key]
                _log.info(
                    "rbac.override_expired",
                    principal_id=principal_id,
                    expired_at=override.expires_at.isoformat() if override.expires_at else None,
                )
                return None
            return override

    def clear(self) -> None:
        with self._lock:
            self._overrides.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._overrides)


__all__ = ["OVERRIDE_FIELDS", "OverrideTable", "apply_override", "normalize_override"]
