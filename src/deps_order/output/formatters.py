"""Output mode dispatch.

The CLI renders ServiceResult for humans (plain listing lines or Rich
tables) or machines (--json). The formatter layer adapts ServiceResult
to the requested output mode.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from deps_order.output.renderers import render_result

if TYPE_CHECKING:
    from deps_order.config.models import PrintStyle
    from deps_order.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    """How a ServiceResult should be presented."""

    json_output: bool = False
    style: PrintStyle = "normal"


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display."""
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    return render_result(result, style=settings.style)
