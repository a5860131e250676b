"""Root of the directory-rbac error hierarchy.

Errors double as structured log context: the resolver and the mapper log
soft failures with ``**error.to_dict()``, so everything in ``detail`` must
survive ``json.dumps(default=str)``.
"""

from __future__ import annotations

import json
from typing import Any


class BaseError(Exception):
    """Base class for every error raised or logged by this package.

    Args:
        message: Human-readable description; also the exception argument.
        code: Stable slug callers can branch on (defaults to ``default_code``).
        detail: Diagnostic key/values, copied on construction.  A ``reason``
            entry is surfaced as :attr:`reason`.
        cause: Underlying exception, chained as ``__cause__``.
    """

    default_code: str = "base_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    @property
    def reason(self) -> str | None:
        """Short diagnostic from ``detail["reason"]``, if one was given."""
        return self.detail.get("reason")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message, "detail": self.detail}
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        if self.reason:
            return f"{type(self).__name__}(code={self.code!r}, reason={self.reason!r})"
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"


__all__ = ["BaseError"]
