"""Pure permission lookups against an already-resolved permission map.

No I/O and no cache interaction.  A key counts as granted only when its
value is exactly ``True``; absent keys and ``False`` are both denials.

An empty requirement follows :func:`all` and :func:`any`: "all of nothing"
is allowed, "at least one of nothing" is denied.  The ``has_*`` helpers,
:func:`check_permissions` and ``require_permissions`` agree on this.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable

from directory_rbac.rbac.models import PermissionMap


def has_permission(permissions: PermissionMap, required: str) -> bool:
    return permissions.get(required) is True


def has_all_permissions(permissions: PermissionMap, required: Iterable[str]) -> bool:
    return all(has_permission(permissions, key) for key in required)


def has_any_permission(permissions: PermissionMap, required: Iterable[str]) -> bool:
    return any(has_permission(permissions, key) for key in required)


@dataclasses.dataclass(frozen=True)
class PermissionCheck:
    """Outcome of :func:`check_permissions`, with the keys that were missing."""

    allowed: bool
    required: tuple[str, ...]
    missing: tuple[str, ...] = ()
    require_all: bool = True

    @property
    def reason(self) -> str | None:
        if self.allowed:
            return None
        if self.require_all:
            return f"Required permissions: {', '.join(self.required)}"
        return f"At least one of these permissions required: {', '.join(self.required)}"

    def __bool__(self) -> bool:
        return self.allowed


def check_permissions(
    permissions: PermissionMap,
    required: Iterable[str],
    *,
    require_all: bool = True,
) -> PermissionCheck:
    """Evaluate *required* against *permissions*.

    With ``require_all=False`` one granted key is enough.  An empty
    requirement is allowed with ``require_all=True`` and denied otherwise.
    """
    required = tuple(required)
    missing = tuple(key for key in required if not has_permission(permissions, key))
    if require_all:
        allowed = not missing
    else:
        allowed = len(missing) < len(required)
    return PermissionCheck(allowed=allowed, required=required, missing=missing, require_all=require_all)


__all__ = [
    "PermissionCheck",
    "check_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
]
