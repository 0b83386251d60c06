"""Error taxonomy for graph building, ordering, and command execution.

Every error carries a stable ``code`` so the service layer can turn it
into a :class:`~deps_order.services.result.ServiceError` without
string matching.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from deps_order.domain.packages import PackageId


class DepsOrderError(Exception):
    """Base class for all fatal deps-order errors."""

    code = "ERROR"

    def detail(self) -> dict[str, Any]:
        """Structured payload describing the offending node or flag."""
        return {}


class DanglingDependency(DepsOrderError):
    """A dependency identity has no corresponding package record."""

    code = "DANGLING_DEPENDENCY"

    def __init__(self, dependency: PackageId, dependent: PackageId) -> None:
        self.dependency = dependency
        self.dependent = dependent
        super().__init__(
            f"Package '{dependent}' depends on '{dependency}', which is not in the listing"
        )

    def detail(self) -> dict[str, Any]:
        return {"dependency": str(self.dependency), "dependent": str(self.dependent)}


class CycleDetected(DepsOrderError):
    """The dependency graph is not a DAG."""

    code = "CYCLE_DETECTED"

    def __init__(self, nodes: Iterable[PackageId]) -> None:
        self.nodes = tuple(nodes)
        names = ", ".join(str(n) for n in self.nodes)
        super().__init__(f"Dependency cycle detected involving: {names}")

    def detail(self) -> dict[str, Any]:
        return {"cycle": [str(n) for n in self.nodes]}


class CommandExecutionFailed(DepsOrderError):
    """A per-package command exited with a non-zero status."""

    code = "COMMAND_FAILED"

    def __init__(self, package: PackageId, exit_status: int, command: str = "") -> None:
        self.package = package
        self.exit_status = exit_status
        self.command = command
        super().__init__(f"Command for '{package}' exited with status {exit_status}")

    def detail(self) -> dict[str, Any]:
        return {
            "package": str(self.package),
            "exit_status": self.exit_status,
            "command": self.command,
        }


class InvalidConfiguration(DepsOrderError):
    """A configuration value (flag, env var, or config file) is malformed."""

    code = "INVALID_CONFIG"


class MetadataError(DepsOrderError):
    """The package listing could not be obtained or understood."""

    code = "METADATA_ERROR"
