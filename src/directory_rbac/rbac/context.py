"""Current-resolution context and the ``@require_permissions`` decorator.

Service code resolves a principal once per request, stores the result with
:meth:`ResolutionContext.set_current`, and guards callables with
:func:`require_permissions`.  The context is a :mod:`contextvars` variable,
so each thread and asyncio task sees its own value.
"""

from __future__ import annotations

import contextvars
import functools
import inspect
from typing import Any, Callable, TypeVar

from directory_rbac.kernel.errors import ForbiddenError, UnauthorizedError
from directory_rbac.observability.logging import get_logger
from directory_rbac.rbac.checks import check_permissions
from directory_rbac.rbac.models import ResolutionResult

F = TypeVar("F", bound=Callable[..., Any])

_log = get_logger(__name__)

_VAR: contextvars.ContextVar[ResolutionResult | None] = contextvars.ContextVar(
    "_resolution_context", default=None
)


class ResolutionContext:
    """Store and retrieve the current :class:`ResolutionResult`."""

    @staticmethod
    def get_current() -> ResolutionResult | None:
        return _VAR.get()

    @staticmethod
    def set_current(result: ResolutionResult) -> contextvars.Token[ResolutionResult | None]:
        """Set the current result and return a reset token."""
        return _VAR.set(result)

    @staticmethod
    def reset(token: contextvars.Token[ResolutionResult | None]) -> None:
        _VAR.reset(token)

    @staticmethod
    def clear() -> None:
        _VAR.set(None)

    @staticmethod
    def require() -> ResolutionResult:
        """Return the current result or raise :class:`UnauthorizedError`."""
        result = _VAR.get()
        if result is None:
            raise UnauthorizedError("No resolved principal in context")
        return result


def _enforce(required: tuple[str, ...], any_of: bool) -> None:
    result = ResolutionContext.require()
    check = check_permissions(result.permissions, required, require_all=not any_of)
    if not check.allowed:
        _log.debug(
            "rbac.permission_denied",
            principal_id=result.principal_id,
            required=list(required),
            missing=list(check.missing),
        )
        raise ForbiddenError(
            check.reason or "forbidden",
            permissions=required,
            detail={"principal_id": result.principal_id, "missing": list(check.missing)},
        )


def require_permissions(*permissions: str, any_of: bool = False) -> Callable[[F], F]:
    """Decorator enforcing *permissions* on the current resolution.

    By default every key must be granted; ``any_of=True`` accepts one.
    Works on both async and sync callables.  Raises
    :class:`UnauthorizedError` when nothing has been resolved in context and
    :class:`ForbiddenError` when the check fails.

    Example::

        @require_permissions("request:approve")
        async def approve(request_id: int) -> None:
            ...
    """
    required = tuple(permissions)

    def decorator(fn: F) -> F:
        if inspect.iscoroutinefunction(fn):

            @functools.wraps(fn)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                _enforce(required, any_of)
                return await fn(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(fn)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            _enforce(required, any_of)
            return fn(*args, **kwargs)

        return sync_wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["ResolutionContext", "require_permissions"]
