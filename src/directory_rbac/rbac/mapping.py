"""Directory group / attribute → internal role mapping.

Directory data is untrusted and partially malformed records are expected, so
nothing here raises for a single bad entry: unusable groups, unusable
attribute values and mappings that point at roles the catalog does not know
are logged and dropped.
"""

from __future__ import annotations

import dataclasses
import json
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType
from typing import Any

from directory_rbac.kernel.errors import ConfigError, PrincipalId, UnmappedAttributeError, UnmappedGroupError
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.models import AssignmentSource, IdentityRecord, ResolvedRoleAssignment
from directory_rbac.rbac.validation import (
    check_distinguished_name,
    check_membership,
    normalize_distinguished_name,
    validate_attribute_value,
)

_log = get_logger(__name__)

GroupMappings = Mapping[str, str]
AttributeMappings = Mapping[str, Mapping[str, str]]


@dataclasses.dataclass(frozen=True)
class MappingTables:
    """The two static lookup tables driving :class:`GroupMapper`.

    JSON form::

        {"groups": {"cn=auditors,ou=roles,dc=company,dc=com": "AUDITOR"},
         "attributes": {"title": {"Auditor": "AUDITOR"}}}
    """

    groups: GroupMappings = dataclasses.field(default_factory=dict)
    attributes: AttributeMappings = dataclasses.field(default_factory=dict)

    @classmethod
    def from_document(cls, document: Any) -> "MappingTables":
        if not isinstance(document, Mapping):
            raise ConfigError(0, {"reason": "Mapping document must be an object"})
        groups = document.get("groups", {})
        attributes = document.get("attributes", {})
        if not isinstance(groups, Mapping):
            raise ConfigError(0, {"reason": "groups mapping must be an object"})
        if not isinstance(attributes, Mapping):
            raise ConfigError(0, {"reason": "attributes mapping must be an object"})
        return cls(groups=dict(groups), attributes=dict(attributes))

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "MappingTables":
        mapping_path = Path(path)
        try:
            document = json.loads(mapping_path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigError(
                0, {"reason": "Mapping file not readable", "path": str(mapping_path)}, cause=exc
            ) from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(
                0, {"reason": "Mapping file is not valid JSON", "path": str(mapping_path)}, cause=exc
            ) from exc
        return cls.from_document(document)


class GroupMapper:
    """Maps directory groups and attributes to catalog role names.

    Group DN keys are normalised (trimmed, lower-cased) and role names
    upper-cased once here, so lookups never re-normalise the tables.
    """

    def __init__(
        self,
        group_mappings: GroupMappings,
        attribute_mappings: AttributeMappings,
        known_roles: Iterable[str],
    ) -> None:
        if not isinstance(group_mappings, Mapping):
            raise ConfigError(
                0,
                {"reason": "group mappings must be an object", "provided": type(group_mappings).__name__},
            )
        if not isinstance(attribute_mappings, Mapping):
            raise ConfigError(
                0,
                {"reason": "attribute mappings must be an object", "provided": type(attribute_mappings).__name__},
            )
        self._known_roles = frozenset(role.strip().upper() for role in known_roles)
        self._groups = MappingProxyType(_normalise_group_table(group_mappings))
        self._attributes = MappingProxyType(_normalise_attribute_table(attribute_mappings))

    @property
    def known_roles(self) -> frozenset[str]:
        return self._known_roles

    def resolve_from_groups(
        self, identity: IdentityRecord, principal_id: PrincipalId = 0
    ) -> list[ResolvedRoleAssignment]:
        """Roles granted by the identity's group memberships."""
        membership = check_membership(identity.member_of, principal_id)
        if membership.is_err():
            _log.warning("rbac.membership_unusable", **membership.error.to_dict())
            return []

        assignments: list[ResolvedRoleAssignment] = []
        for group_dn in membership.unwrap():
            role = self._groups.get(normalize_distinguished_name(group_dn))
            if role is None:
                _log.debug("rbac.group_unmapped", principal_id=principal_id, group=group_dn)
                continue
            if role not in self._known_roles:
                issue = UnmappedGroupError(
                    principal_id, {"reason": "Mapped role is not a known role", "group": group_dn, "role": role}
                )
                _log.warning("rbac.group_role_unknown", **issue.to_dict())
                continue
            assignments.append(ResolvedRoleAssignment(role, AssignmentSource.GROUP, group_dn))
        return assignments

    def resolve_from_attributes(
        self, identity: IdentityRecord, principal_id: PrincipalId = 0
    ) -> list[ResolvedRoleAssignment]:
        """Roles granted by configured attribute values (e.g. job title)."""
        assignments: list[ResolvedRoleAssignment] = []
        for attribute_name, value_table in self._attributes.items():
            value = validate_attribute_value(identity.attribute(attribute_name), attribute_name, principal_id)
            if value is None:
                continue
            evidence = f"{attribute_name}={value}"
            role = value_table.get(value)
            if role is None:
                _log.debug("rbac.attribute_unmapped", principal_id=principal_id, attribute=evidence)
                continue
            if role not in self._known_roles:
                issue = UnmappedAttributeError(
                    principal_id,
                    {"reason": "Mapped role is not a known role", "attribute": evidence, "role": role},
                )
                _log.warning("rbac.attribute_role_unknown", **issue.to_dict())
                continue
            assignments.append(ResolvedRoleAssignment(role, AssignmentSource.ATTRIBUTE, evidence))
        return assignments

    def resolve_all(self, identity: IdentityRecord, principal_id: PrincipalId = 0) -> list[ResolvedRoleAssignment]:
        """Groups first, then attributes; the first assignment seen per role wins."""
        unique: dict[str, ResolvedRoleAssignment] = {}
        for assignment in (
            *self.resolve_from_groups(identity, principal_id),
            *self.resolve_from_attributes(identity, principal_id),
        ):
            unique.setdefault(assignment.role, assignment)
        return list(unique.values())

    def log_resolution(
        self,
        identity: IdentityRecord,
        assignments: Iterable[ResolvedRoleAssignment],
        principal_id: PrincipalId,
    ) -> None:
        """Emit a per-source breakdown of a resolution for diagnostics."""
        assignments = list(assignments)
        _log.info(
            "rbac.resolution_breakdown",
            principal_id=principal_id,
            common_name=identity.common_name,
            attributes=dict(identity.attributes),
            group_roles=[a.role for a in assignments if a.source is AssignmentSource.GROUP],
            attribute_roles=[a.role for a in assignments if a.source is AssignmentSource.ATTRIBUTE],
            roles=[a.role for a in assignments],
        )


def _normalise_group_table(group_mappings: GroupMappings) -> dict[str, str]:
    table: dict[str, str] = {}
    for group_dn, role in group_mappings.items():
        if not isinstance(role, str) or not role.strip():
            _log.warning("rbac.group_mapping_invalid", group=repr(group_dn), reason="role is not a string")
            continue
        if check_distinguished_name(group_dn, 0).is_err():
            _log.warning("rbac.group_mapping_invalid", group=repr(group_dn), reason="group DN is malformed")
            continue
        table[normalize_distinguished_name(group_dn)] = role.strip().upper()
    return table


def _normalise_attribute_table(attribute_mappings: AttributeMappings) -> dict[str, dict[str, str]]:
    table: dict[str, dict[str, str]] = {}
    for attribute_name, values in attribute_mappings.items():
        if not isinstance(attribute_name, str) or not isinstance(values, Mapping):
            _log.warning("rbac.attribute_mapping_invalid", attribute=repr(attribute_name))
            continue
        value_table: dict[str, str] = {}
        for value, role in values.items():
            if not isinstance(value, str) or not isinstance(role, str) or not role.strip():
                _log.warning("rbac.attribute_mapping_invalid", attribute=attribute_name, value=repr(value))
                continue
            value_table[value.strip()] = role.strip().upper()
        table.setdefault(attribute_name.strip().lower(), {}).update(value_table)
    return table


__all__ = ["AttributeMappings", "GroupMapper", "GroupMappings", "MappingTables"]
