"""Unit tests for ResolutionContext and @require_permissions."""

from __future__ import annotations

import asyncio

import pytest

from directory_rbac.kernel.errors import ForbiddenError, UnauthorizedError
from directory_rbac.kernel.time import FrozenClock
from directory_rbac.rbac import ResolutionContext, ResolutionResult, require_permissions


def _result(clock: FrozenClock, **permissions: bool) -> ResolutionResult:
    return ResolutionResult(
        principal_id=1,
        roles=("PROCUREMENT_OFFICER",),
        permissions={key.replace("__", ":"): value for key, value in permissions.items()},
        resolved_at=clock.now(),
        expires_at=clock.now(),
    )


# ---------------------------------------------------------------------------
# ResolutionContext
# ---------------------------------------------------------------------------


class TestResolutionContext:
    def test_empty_by_default(self) -> None:
        assert ResolutionContext.get_current() is None

    def test_set_and_reset(self, clock: FrozenClock) -> None:
        result = _result(clock)
        token = ResolutionContext.set_current(result)
        assert ResolutionContext.get_current() is result
        ResolutionContext.reset(token)
        assert ResolutionContext.get_current() is None

    def test_require_without_context(self) -> None:
        with pytest.raises(UnauthorizedError):
            ResolutionContext.require()

    def test_isolated_per_task(self, clock: FrozenClock) -> None:
        seen: list[ResolutionResult | None] = []

        async def child() -> None:
            seen.append(ResolutionContext.get_current())

        async def main() -> None:
            ResolutionContext.set_current(_result(clock))
            await asyncio.create_task(child())

        asyncio.run(main())
        assert seen[0] is not None
        # asyncio.run executes in a copied context.
        assert ResolutionContext.get_current() is None


# ---------------------------------------------------------------------------
# @require_permissions
# ---------------------------------------------------------------------------


class TestRequirePermissions:
    def test_sync_allowed(self, clock: FrozenClock) -> None:
        @require_permissions("request:approve")
        def approve(request_id: int) -> str:
            return f"approved {request_id}"

        ResolutionContext.set_current(_result(clock, request__approve=True))
        assert approve(9) == "approved 9"

    def test_sync_forbidden(self, clock: FrozenClock) -> None:
        @require_permissions("request:approve", "admin:manage_users")
        def approve() -> None: ...

        ResolutionContext.set_current(_result(clock, request__approve=True, admin__manage_users=False))
        with pytest.raises(ForbiddenError) as info:
            approve()
        assert info.value.detail["missing"] == ["admin:manage_users"]
        assert info.value.permissions == ("request:approve", "admin:manage_users")

    def test_sync_without_context(self) -> None:
        @require_permissions("request:approve")
        def approve() -> None: ...

        with pytest.raises(UnauthorizedError):
            approve()

    def test_any_of(self, clock: FrozenClock) -> None:
        @require_permissions("payment:read", "request:approve", any_of=True)
        def view() -> bool:
            return True

        ResolutionContext.set_current(_result(clock, request__approve=True))
        assert view() is True

    def test_async_allowed(self, clock: FrozenClock) -> None:
        @require_permissions("request:read_all")
        async def list_requests() -> list[int]:
            return [1, 2]

        async def main() -> list[int]:
            ResolutionContext.set_current(_result(clock, request__read_all=True))
            return await list_requests()

        assert asyncio.run(main()) == [1, 2]

    def test_async_forbidden(self, clock: FrozenClock) -> None:
        @require_permissions("payment:read")
        async def pay() -> None: ...

        async def main() -> None:
            ResolutionContext.set_current(_result(clock, payment__read=False))
            await pay()

        with pytest.raises(ForbiddenError):
            asyncio.run(main())

    def test_any_of_without_keys_denied(self, clock: FrozenClock) -> None:
        @require_permissions(any_of=True)
        def view() -> None: ...

        ResolutionContext.set_current(_result(clock, request__approve=True))
        with pytest.raises(ForbiddenError):
            view()

    def test_all_of_without_keys_allowed(self, clock: FrozenClock) -> None:
        @require_permissions()
        def view() -> bool:
            return True

        ResolutionContext.set_current(_result(clock))
        assert view() is True

    def test_preserves_metadata(self) -> None:
        @require_permissions("x")
        def documented() -> None:
            """Docs."""

        assert documented.__name__ == "documented"
        assert documented.__doc__ == "Docs."
