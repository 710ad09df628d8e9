"""ServiceResult and ServiceError — the contract between services and the CLI.

INVARIANT: All BrowseService methods return ServiceResult; expected failures
(validation, transport, not-found) are reported in ``error`` rather than
raised.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from realmctl.domain.errors import RealmError


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, exc: RealmError, **detail: Any) -> ServiceError:
        """Build an error payload from a realmctl exception, keeping its code."""
        status_code = getattr(exc, "status_code", None)
        if status_code is not None:
            detail.setdefault("status_code", status_code)
        return cls(code=exc.code, message=str(exc), detail=detail)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"create_chamber"``).
        data: Operation-specific payload.
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
        meta: Optional metadata (cache state, timing, etc.).
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None
