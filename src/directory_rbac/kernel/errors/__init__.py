"""Kernel error hierarchy — public re-export surface.

Hierarchy::

    BaseError
    └── ApplicationError               (application.py)
        ├── UnauthorizedError
        ├── ForbiddenError
        └── RoleResolutionError        (resolution.py)
            ├── MalformedDNError
            ├── MissingMembershipDataError
            ├── UnmappedGroupError
            ├── UnmappedAttributeError
            ├── InvalidIdentityError
            ├── DatabaseError
            ├── ConfigError
            └── CacheError
"""

from directory_rbac.kernel.errors.application import (
    ApplicationError,
    ForbiddenError,
    UnauthorizedError,
)
from directory_rbac.kernel.errors.base import BaseError
from directory_rbac.kernel.errors.resolution import (
    CacheError,
    ConfigError,
    DatabaseError,
    InvalidIdentityError,
    MalformedDNError,
    MissingMembershipDataError,
    PrincipalId,
    ResolutionErrorKind,
    RoleResolutionError,
    UnmappedAttributeError,
    UnmappedGroupError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "CacheError",
    "ConfigError",
    "DatabaseError",
    "ForbiddenError",
    "InvalidIdentityError",
    "MalformedDNError",
    "MissingMembershipDataError",
    "PrincipalId",
    "ResolutionErrorKind",
    "RoleResolutionError",
    "UnauthorizedError",
    "UnmappedAttributeError",
    "UnmappedGroupError",
]
