"""Package identities and the value types flowing through the pipeline.

A package is identified by its ``(name, version)`` pair. Records are the
raw input handed to the graph builder; nodes are what the graph owns once
duplicates have been collapsed. Edges refer to nodes by identity only.

INVARIANT: ``PackageId`` ordering is lexicographic by name, then version.
Every tie-break in the orderer relies on it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, order=True)
class PackageId:
    """Identity of a package: opaque name and version strings."""

    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass(frozen=True)
class PackageRecord:
    """One entry of a raw package listing, as produced by a metadata source."""

    id: PackageId
    is_workspace_member: bool = False
    source_path: Path | None = None
    dependencies: tuple[PackageId, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PackageNode:
    """A package owned by a :class:`DependencyGraph`."""

    id: PackageId
    is_workspace_member: bool = False
    source_path: Path | None = None  # directory holding the package manifest

    @property
    def name(self) -> str:
        return self.id.name

    @property
    def version(self) -> str:
        return self.id.version

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "version": self.version,
            "workspace_member": self.is_workspace_member,
            "path": str(self.source_path) if self.source_path else None,
        }


@dataclass(frozen=True)
class DependencyEdge:
    """``dependent`` requires ``dependency`` to be available first."""

    dependent: PackageId
    dependency: PackageId
