"""Result envelope returned by every session operation.

INVARIANT: SessionController methods never raise for a rejected intent;
they return a ServiceResult with ``ok=False`` and a coded ServiceError.
Commands, the shell, and renderers only ever look at this type.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Why an intent was rejected.

    ``code`` is one of the stable identifiers (``INVALID_CONNECTION``,
    ``IMPORT_ERROR``, ``NOT_FOUND``, ``UNKNOWN_KIND``, ``INVALID_POSITION``,
    ``BUSY``, ``EXPORT_ERROR``); ``detail`` carries the offending ids.
    """

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one intent or query.

    Attributes:
        ok: False only when the intent was rejected; no-ops are ``ok``.
        op: Operation name, used to pick a renderer (``"connect"``).
        data: Payload; mutations include ``changed``.
        warnings: Non-fatal notes (skipped persistence, plugin failures).
        error: Set when ``ok`` is False.
        meta: History depth and transaction id, when relevant.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls, op: str, code: str, message: str, detail: dict[str, Any] | None = None
    ) -> ServiceResult:
        """Build a rejected result carrying a coded error."""
        return cls(
            ok=False,
            op=op,
            error=ServiceError(code=code, message=message, detail=detail or {}),
        )

    def with_warnings(self, extra: list[str]) -> ServiceResult:
        """Return a copy with *extra* appended to ``warnings``."""
        if not extra:
            return self
        return self.model_copy(update={"warnings": [*self.warnings, *extra]})
