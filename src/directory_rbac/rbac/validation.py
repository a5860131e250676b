"""Validation and parsing of untrusted directory data.

Pure functions; the only side effect is advisory logging.  Soft failures are
returned as :class:`~directory_rbac.kernel.types.Err` values by the
``check_*`` functions; the matching ``validate_*`` functions unwrap them and
raise for callers that want a hard stop.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from directory_rbac.kernel.errors import (
    InvalidIdentityError,
    MalformedDNError,
    MissingMembershipDataError,
    PrincipalId,
)
from directory_rbac.kernel.types import Err, Ok, Result
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.models import IdentityRecord, membership_entries

_log = get_logger(__name__)

# Loose structural check: one or more ``key=value`` segments separated by
# ``,`` or ``;`` with 1-3 letter keys.  Not full RFC 4514 grammar.
_DN_PATTERN = re.compile(r"^[A-Za-z]{1,3}\s*=[^,;]+(?:[,;]\s*[A-Za-z]{1,3}\s*=[^,;]+)*$")
_DN_SEPARATOR = re.compile(r"[,;]")
_UNSAFE_ROLE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def validate_identity_record(record: Any, principal_id: PrincipalId) -> IdentityRecord:
    """Return *record* as an :class:`IdentityRecord` or raise :class:`InvalidIdentityError`.

    Accepts an ``IdentityRecord`` or a raw directory mapping.  The record must
    carry a non-empty distinguished name and common name.
    """
    if record is None:
        raise InvalidIdentityError(principal_id, {"reason": "Identity record is missing"})
    if isinstance(record, Mapping):
        record = IdentityRecord.from_directory(record)
    elif not isinstance(record, IdentityRecord):
        raise InvalidIdentityError(
            principal_id,
            {"reason": "Identity record must be a mapping", "actual_type": type(record).__name__},
        )

    dn = record.distinguished_name
    if not isinstance(dn, str) or not dn.strip():
        raise InvalidIdentityError(
            principal_id, {"reason": "Identity record missing or invalid distinguished name", "dn": dn}
        )
    cn = record.common_name
    if not isinstance(cn, str) or not cn.strip():
        raise InvalidIdentityError(
            principal_id, {"reason": "Identity record missing or invalid common name", "cn": cn}
        )
    return record


def check_distinguished_name(dn: Any, principal_id: PrincipalId) -> Result[str, MalformedDNError]:
    if not isinstance(dn, str) or not dn.strip():
        return Err(MalformedDNError(principal_id, {"reason": "DN is empty or not a string"}))
    candidate = dn.strip()
    if "=" not in candidate:
        return Err(MalformedDNError(principal_id, {"reason": "DN contains no key=value pair", "dn": dn}))
    if not _DN_PATTERN.match(candidate):
        return Err(
            MalformedDNError(principal_id, {"reason": "DN does not match expected format pattern", "dn": dn})
        )
    return Ok(candidate)


def validate_distinguished_name(dn: Any, principal_id: PrincipalId) -> str:
    """Return the stripped DN or raise :class:`MalformedDNError`."""
    return check_distinguished_name(dn, principal_id).unwrap()


def parse_distinguished_name(dn: str) -> dict[str, str]:
    """Split *dn* into a ``{key: value}`` dict with lower-cased keys.

    Example: ``cn=admin,ou=users,dc=company,dc=com`` ->
    ``{"cn": "admin", "ou": "users", "dc": "com"}`` (last write wins).
    Diagnostic only; never used for trust decisions.
    """
    components: dict[str, str] = {}
    if not isinstance(dn, str):
        return components
    for part in dn.split(","):
        key, sep, value = part.partition("=")
        key, value = key.strip(), value.strip()
        if sep and key and value:
            components[key.lower()] = value
    return components


def normalize_distinguished_name(dn: str) -> str:
    """Canonical lookup form: segments trimmed, lower-cased, comma-joined."""
    segments = []
    for part in _DN_SEPARATOR.split(dn):
        key, sep, value = part.partition("=")
        if not sep:
            segments.append(part.strip().lower())
            continue
        segments.append(f"{key.strip().lower()}={value.strip().lower()}")
    return ",".join(segments)


def check_membership(
    member_of: Any, principal_id: PrincipalId
) -> Result[tuple[str, ...], MissingMembershipDataError]:
    """Filter a raw ``memberOf`` value down to structurally valid group DNs.

    Accepts ``None``, a single DN string, or any iterable of entries
    (list, tuple, set, generator).  ``None`` or an empty value means "no
    groups" and is ``Ok(())``.  A non-empty input in which every entry was
    discarded is an ``Err``.
    """
    if member_of is None or member_of == "":
        return Ok(())
    entries = membership_entries(member_of)

    valid: list[str] = []
    for entry in entries:
        if not isinstance(entry, str):
            _log.warning(
                "rbac.membership_entry_not_string",
                principal_id=principal_id,
                entry_type=type(entry).__name__,
            )
            continue
        checked = check_distinguished_name(entry, principal_id)
        if checked.is_err():
            _log.warning("rbac.membership_entry_malformed", **checked.error.to_dict())
            continue
        valid.append(checked.unwrap())

    if entries and not valid:
        return Err(
            MissingMembershipDataError(
                principal_id,
                {"reason": "No valid groups found in memberOf", "original_count": len(entries)},
            )
        )
    return Ok(tuple(valid))


def validate_membership(member_of: Any, principal_id: PrincipalId) -> list[str]:
    """Return the valid group DNs or raise :class:`MissingMembershipDataError`."""
    return list(check_membership(member_of, principal_id).unwrap())


def validate_attribute_value(value: Any, attribute_name: str, principal_id: PrincipalId) -> str | None:
    """Return the trimmed attribute value, or ``None`` when it is unusable.

    Attributes are optional, so absence is never an error.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        _log.warning(
            "rbac.attribute_not_string",
            principal_id=principal_id,
            attribute=attribute_name,
            value_type=type(value).__name__,
        )
        return None
    trimmed = value.strip()
    return trimmed or None


def validate_role_set(roles: Any, principal_id: PrincipalId) -> list[str]:
    """Trim and upper-case a candidate role list, dropping unusable entries.

    Raises :class:`InvalidIdentityError` if *roles* is not a list or tuple.
    """
    if not isinstance(roles, (list, tuple)):
        raise InvalidIdentityError(
            principal_id, {"reason": "Role set is not a list", "actual_type": type(roles).__name__}
        )
    valid: list[str] = []
    for role in roles:
        if not isinstance(role, str):
            _log.warning("rbac.role_not_string", principal_id=principal_id, role_type=type(role).__name__)
            continue
        if not role.strip():
            _log.warning("rbac.role_empty", principal_id=principal_id)
            continue
        valid.append(role.strip().upper())
    return valid


def sanitize_role_name(role_name: Any) -> str:
    """Make *role_name* safe to embed in log lines."""
    if not isinstance(role_name, str):
        return ""
    return _UNSAFE_ROLE_CHARS.sub("_", role_name.strip()[:100])


__all__ = [
    "check_distinguished_name",
    "check_membership",
    "normalize_distinguished_name",
    "parse_distinguished_name",
    "sanitize_role_name",
    "validate_attribute_value",
    "validate_distinguished_name",
    "validate_identity_record",
    "validate_membership",
    "validate_role_set",
]
