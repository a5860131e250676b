"""Kernel – framework-agnostic building blocks (errors, result values, time)."""

from directory_rbac.kernel.errors import (
    ApplicationError,
    BaseError,
    ConfigError,
    ForbiddenError,
    InvalidIdentityError,
    RoleResolutionError,
    UnauthorizedError,
)

__all__ = [
    "ApplicationError",
    "BaseError",
    "ConfigError",
    "ForbiddenError",
    "InvalidIdentityError",
    "RoleResolutionError",
    "UnauthorizedError",
]
