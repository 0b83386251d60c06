"""ServiceResult and ServiceError — the universal service contract.

INVARIANT: Public service methods return ServiceResult; domain errors are
converted at the service boundary, never leaked to the CLI as exceptions.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class ServiceError(BaseModel):
    """Structured error payload within a ServiceResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Universal return type for all service operations.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (``"order"`` or ``"exec"``).
        data: Operation-specific payload (also filled on partial failure).
        warnings: Non-fatal issues encountered during the operation.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None

    @property
    def exit_code(self) -> int:
        """Process exit code: 0 on success, the failing status if known, else 1."""
        if self.ok:
            return 0
        if self.error is not None:
            status = self.error.detail.get("exit_status")
            if isinstance(status, int) and status > 0:
                return status
        return 1
