"""Shared fixtures: role catalog, mapping tables, directory identities, clock."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pytest

from directory_rbac.kernel.time import FrozenClock
from directory_rbac.rbac import IdentityRecord, ResolutionContext, Resolver

FIXTURES = Path(__file__).parent / "fixtures"
CATALOG_PATH = FIXTURES / "roles-permissions.json"

GROUP_MAPPINGS: dict[str, str] = {
    "cn=procurement-officers,ou=roles,dc=company,dc=com": "PROCUREMENT_OFFICER",
    "cn=procurement-managers,ou=roles,dc=company,dc=com": "PROCUREMENT_MANAGER",
    "cn=finance-officers,ou=roles,dc=company,dc=com": "FINANCE_OFFICER",
    "cn=department-heads,ou=roles,dc=company,dc=com": "DEPARTMENT_HEAD",
    "cn=executive-directors,ou=roles,dc=company,dc=com": "EXECUTIVE_DIRECTOR",
    # SENIOR_DIRECTOR is deliberately absent from the catalog.
    "cn=senior-directors,ou=roles,dc=company,dc=com": "SENIOR_DIRECTOR",
    "cn=auditors,ou=roles,dc=company,dc=com": "AUDITOR",
}

ATTRIBUTE_MAPPINGS: dict[str, dict[str, str]] = {
    "title": {
        "Procurement Officer": "PROCUREMENT_OFFICER",
        "Procurement Manager": "PROCUREMENT_MANAGER",
        "Finance Officer": "FINANCE_OFFICER",
        "Department Head": "DEPARTMENT_HEAD",
        "Executive Director": "EXECUTIVE_DIRECTOR",
        "Senior Director": "SENIOR_DIRECTOR",
        "Auditor": "AUDITOR",
    },
}

PROCUREMENT_OFFICERS = "cn=procurement-officers,ou=roles,dc=company,dc=com"
ALL_STAFF = "cn=all-staff,ou=roles,dc=company,dc=com"
DEPARTMENT_HEADS = "cn=department-heads,ou=roles,dc=company,dc=com"
FINANCE_OFFICERS = "cn=finance-officers,ou=roles,dc=company,dc=com"
AUDITORS = "cn=auditors,ou=roles,dc=company,dc=com"
SENIOR_DIRECTORS = "cn=senior-directors,ou=roles,dc=company,dc=com"


def make_identity(
    cn: str = "john.doe",
    *,
    member_of: Any = (),
    **attributes: Any,
) -> IdentityRecord:
    return IdentityRecord(
        distinguished_name=f"cn={cn},ou=staff,dc=company,dc=com",
        common_name=cn,
        member_of=member_of,
        attributes=attributes,
    )


@pytest.fixture
def catalog_document() -> dict[str, Any]:
    return json.loads(CATALOG_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def resolver(catalog_document: dict[str, Any], clock: FrozenClock) -> Resolver:
    return Resolver(
        catalog_document,
        GROUP_MAPPINGS,
        ATTRIBUTE_MAPPINGS,
        {"cache_ttl_millis": 60_000, "default_role": "REQUESTER", "enable_overrides": True},
        clock=clock,
    )


@pytest.fixture
def procurement_officer() -> IdentityRecord:
    return make_identity(
        "john.doe",
        member_of=[PROCUREMENT_OFFICERS, ALL_STAFF],
        title="Procurement Officer",
        mail="john.doe@company.com",
    )


@pytest.fixture
def department_head() -> IdentityRecord:
    return make_identity("jane.smith", member_of=[DEPARTMENT_HEADS, ALL_STAFF], title="Department Head")


@pytest.fixture
def no_groups() -> IdentityRecord:
    return make_identity("alice.brown", title="New Employee")


@pytest.fixture(autouse=True)
def _clear_resolution_context():
    ResolutionContext.clear()
    yield
    ResolutionContext.clear()
