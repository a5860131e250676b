"""Errors raised at the boundary where callers enforce resolved permissions."""

from __future__ import annotations

from typing import Any

from directory_rbac.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    default_code = "application_error"


class UnauthorizedError(ApplicationError):
    """A permission check ran with no resolution in context."""

    default_code = "unauthorized"


class ForbiddenError(ApplicationError):
    """The resolved principal lacks required permissions.

    ``permissions`` holds the keys the guarded call asked for; which of
    them were missing is in ``detail["missing"]``.
    """

    default_code = "forbidden"

    def __init__(
        self,
        message: str = "Access denied",
        *,
        permissions: tuple[str, ...] = (),
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.permissions = tuple(permissions)


__all__ = ["ApplicationError", "ForbiddenError", "UnauthorizedError"]
