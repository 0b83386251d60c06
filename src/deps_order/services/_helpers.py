"""Shared service-layer helper functions."""

from __future__ import annotations

from typing import Any

from deps_order.domain.errors import DepsOrderError
from deps_order.services.result import ServiceError, ServiceResult


def error_result(op: str, exc: DepsOrderError, **data: Any) -> ServiceResult:
    """Wrap a domain error into a failed ServiceResult."""
    return ServiceResult(
        ok=False,
        op=op,
        data=data,
        error=ServiceError(code=exc.code, message=str(exc), detail=exc.detail()),
    )
