"""RBAC – directory-driven role and permission resolution."""
from directory_rbac.rbac.cache import CacheStats, ResolutionCache
from directory_rbac.rbac.catalog import Catalog, load_catalog
from directory_rbac.rbac.checks import (
    PermissionCheck,
    check_permissions,
    has_all_permissions,
    has_any_permission,
    has_permission,
)
from directory_rbac.rbac.context import ResolutionContext, require_permissions
from directory_rbac.rbac.mapping import GroupMapper, MappingTables
from directory_rbac.rbac.models import (
    AssignmentSource,
    CacheEntry,
    IdentityRecord,
    Override,
    ResolutionOrigin,
    ResolutionResult,
    ResolvedRoleAssignment,
    Role,
)
from directory_rbac.rbac.overrides import OverrideTable
from directory_rbac.rbac.resolver import Resolver, RoleNameValidation

__all__ = [
    "AssignmentSource",
    "CacheEntry",
    "CacheStats",
    "Catalog",
    "GroupMapper",
    "IdentityRecord",
    "MappingTables",
    "Override",
    "OverrideTable",
    "PermissionCheck",
    "ResolutionCache",
    "ResolutionContext",
    "ResolutionOrigin",
    "ResolutionResult",
    "ResolvedRoleAssignment",
    "Resolver",
    "Role",
    "RoleNameValidation",
    "check_permissions",
    "has_all_permissions",
    "has_any_permission",
    "has_permission",
    "load_catalog",
    "require_permissions",
]
