"""Shared pytest fixtures and test helpers for deps-order tests."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from deps_order.domain.packages import PackageId, PackageRecord

REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore logger state after each test (the CLI reconfigures logging)."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    deps = logging.getLogger("deps_order")
    deps_level = deps.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    deps.setLevel(deps_level)


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep developer env vars and config files out of the tests."""
    for name in list(os.environ):
        if name.upper().startswith("DEPS_ORDER_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def record(
    name: str,
    version: str = "0.1.0",
    *deps: PackageId,
    member: bool = False,
    path: Path | None = None,
) -> PackageRecord:
    """Build a PackageRecord with positional dependency ids."""
    return PackageRecord(
        id=PackageId(name, version),
        is_workspace_member=member,
        source_path=path,
        dependencies=tuple(deps),
    )


def pkg_id(name: str, version: str = "0.1.0", *, member: bool = False) -> str:
    """Cargo package id string for *name*."""
    if member:
        return f"path+file:///ws/{name}#{version}"
    return f"{REGISTRY}#{name}@{version}"


def cargo_metadata(root: Path, packages: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Build a minimal ``cargo metadata`` document.

    *packages* maps a package name to options: ``version`` (default
    ``0.1.0``), ``member`` (bool), ``deps`` and ``dev_deps`` (names).
    Package directories are created under *root* so commands can run there.
    """
    ids: dict[str, str] = {}
    entries: list[dict[str, Any]] = []
    for name, opts in packages.items():
        version = opts.get("version", "0.1.0")
        member = opts.get("member", False)
        ids[name] = pkg_id(name, version, member=member)
        pkg_dir = root / name if member else root / "registry" / f"{name}-{version}"
        pkg_dir.mkdir(parents=True, exist_ok=True)
        entries.append(
            {
                "id": ids[name],
                "name": name,
                "version": version,
                "manifest_path": str(pkg_dir / "Cargo.toml"),
                "dependencies": [],
            }
        )

    nodes = []
    for name, opts in packages.items():
        deps = [
            {"name": d, "pkg": ids[d], "dep_kinds": [{"kind": None, "target": None}]}
            for d in opts.get("deps", [])
        ]
        deps += [
            {"name": d, "pkg": ids[d], "dep_kinds": [{"kind": "dev", "target": None}]}
            for d in opts.get("dev_deps", [])
        ]
        nodes.append({"id": ids[name], "deps": deps})

    return {
        "packages": entries,
        "workspace_members": [ids[n] for n, o in packages.items() if o.get("member")],
        "resolve": {"nodes": nodes, "root": None},
        "version": 1,
    }


@pytest.fixture
def write_metadata(tmp_path: Path) -> Callable[[dict[str, dict[str, Any]]], Path]:
    """Write a ``cargo metadata`` document to a file and return its path."""

    def _write(packages: dict[str, dict[str, Any]]) -> Path:
        path = tmp_path / "metadata.json"
        path.write_text(json.dumps(cargo_metadata(tmp_path, packages)), encoding="utf-8")
        return path

    return _write


# app -> lib -> ext, with ext outside the workspace
WORKSPACE: dict[str, dict[str, Any]] = {
    "app": {"member": True, "deps": ["lib"]},
    "lib": {"member": True, "version": "0.2.0", "deps": ["ext"]},
    "ext": {"version": "1.0.3"},
}
