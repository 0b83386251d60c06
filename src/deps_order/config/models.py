"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, deps-order.toml only contains
overrides. Every section is optional.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

PrintStyle = Literal["short", "normal", "verbose"]


class ScopeConfig(BaseModel):
    """[scope] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    workspace_only: bool = False
    include_dev: bool = False


class RunConfig(BaseModel):
    """[run] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    exec: str | None = None
    wait: int = Field(default=0, ge=0)
    keep_going: bool = False


class OutputConfig(BaseModel):
    """[output] section."""

    model_config = {"frozen": True, "extra": "forbid"}

    print: PrintStyle = "normal"
