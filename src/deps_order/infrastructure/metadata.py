"""Cargo metadata source — the package listing consumed by the graph builder.

Reads the JSON document produced by ``cargo metadata --format-version 1``,
either by running Cargo or from a saved file, and converts it into
:class:`PackageRecord` values. Only three parts of the document matter:

- ``packages[]``: ``id``, ``name``, ``version``, ``manifest_path``
- ``workspace_members[]``: package ids of the local workspace
- ``resolve.nodes[]``: ``id`` plus ``deps[]`` (``pkg``, ``dep_kinds[].kind``)

Dependencies declared only under ``[dev-dependencies]`` are dropped unless
requested, along with any package that is no longer reachable from a
workspace member afterwards.
"""

from __future__ import annotations

import json
import logging
import os
import subprocess
from collections import deque
from collections.abc import Callable
from pathlib import Path
from typing import Any

from deps_order.domain.errors import MetadataError
from deps_order.domain.packages import PackageId, PackageRecord

logger = logging.getLogger(__name__)

CARGO_ENV_VAR = "CARGO"

type MetadataSource = Callable[[], list[PackageRecord]]


def run_cargo_metadata(manifest_path: Path | None = None) -> dict[str, Any]:
    """Run ``cargo metadata`` and return the parsed document.

    Honors the ``CARGO`` env var Cargo sets when it runs a subcommand.
    """
    cargo = os.environ.get(CARGO_ENV_VAR, "cargo")
    cmd = [cargo, "metadata", "--format-version", "1"]
    if manifest_path is not None:
        cmd += ["--manifest-path", str(manifest_path)]

    logger.debug("Running %s", " ".join(cmd))
    try:
        proc = subprocess.run(cmd, capture_output=True, text=True, check=False)
    except OSError as exc:
        msg = f"Failed to run '{cargo} metadata': {exc}"
        raise MetadataError(msg) from exc

    if proc.returncode != 0:
        stderr = proc.stderr.strip() or "no output"
        msg = f"'{cargo} metadata' exited with status {proc.returncode}: {stderr}"
        raise MetadataError(msg)
    return _parse_json(proc.stdout, origin="cargo metadata")


def read_metadata_file(path: Path) -> dict[str, Any]:
    """Read a saved ``cargo metadata`` JSON document."""
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read metadata file {path}: {exc}"
        raise MetadataError(msg) from exc
    return _parse_json(raw, origin=str(path))


def _parse_json(raw: str, *, origin: str) -> dict[str, Any]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        msg = f"Invalid JSON from {origin}: {exc}"
        raise MetadataError(msg) from exc
    if not isinstance(data, dict):
        msg = f"Invalid metadata from {origin}: expected a JSON object"
        raise MetadataError(msg)
    return data


def _is_dev_only(dep: dict[str, Any]) -> bool:
    """True when every declared kind of *dep* is ``dev``.

    Older Cargo releases omit ``dep_kinds``; those edges count as normal.
    """
    kinds = dep.get("dep_kinds") or []
    return bool(kinds) and all(k.get("kind") == "dev" for k in kinds)


def records_from_metadata(
    metadata: dict[str, Any],
    *,
    include_dev: bool = False,
) -> list[PackageRecord]:
    """Convert a ``cargo metadata`` document into package records.

    Raises:
        MetadataError: Required keys are missing, or the resolve graph
            refers to a package id absent from ``packages``.
    """
    try:
        packages: dict[str, dict[str, Any]] = {pkg["id"]: pkg for pkg in metadata["packages"]}
        identities = {
            pkg_id: PackageId(str(pkg["name"]), str(pkg["version"]))
            for pkg_id, pkg in packages.items()
        }
    except (KeyError, TypeError) as exc:
        msg = f"Malformed cargo metadata: missing package field {exc}"
        raise MetadataError(msg) from exc

    members = set(metadata.get("workspace_members") or [])
    requires: dict[str, list[str]] = {pkg_id: [] for pkg_id in packages}

    resolve = metadata.get("resolve") or {}
    for node in resolve.get("nodes") or []:
        node_id = node.get("id")
        if node_id not in packages:
            msg = f"Resolve graph refers to unknown package id '{node_id}'"
            raise MetadataError(msg)
        for dep in node.get("deps") or []:
            dep_id = dep.get("pkg")
            if dep_id not in packages:
                msg = f"Package '{identities[node_id]}' depends on unknown package id '{dep_id}'"
                raise MetadataError(msg)
            if not include_dev and _is_dev_only(dep):
                continue
            requires[node_id].append(dep_id)

    keep = set(packages) if include_dev or not members else _reachable(members, requires)
    dropped = len(packages) - len(keep)
    if dropped:
        logger.debug("Dropped %d dev-only packages", dropped)

    records: list[PackageRecord] = []
    for pkg_id, pkg in packages.items():
        if pkg_id not in keep:
            continue
        manifest = pkg.get("manifest_path")
        records.append(
            PackageRecord(
                id=identities[pkg_id],
                is_workspace_member=pkg_id in members,
                source_path=Path(manifest).parent if manifest else None,
                dependencies=tuple(identities[d] for d in requires[pkg_id]),
            )
        )
    return records


def _reachable(roots: set[str], requires: dict[str, list[str]]) -> set[str]:
    """Package ids reachable from *roots* (inclusive) along *requires*."""
    seen = {r for r in roots if r in requires}
    queue = deque(seen)
    while queue:
        current = queue.popleft()
        for dep in requires[current]:
            if dep not in seen:
                seen.add(dep)
                queue.append(dep)
    return seen


def load_records(
    *,
    manifest_path: Path | None = None,
    metadata_file: Path | None = None,
    include_dev: bool = False,
) -> list[PackageRecord]:
    """Fetch metadata (from *metadata_file* or Cargo) and convert it to records."""
    if metadata_file is not None:
        metadata = read_metadata_file(metadata_file)
    else:
        metadata = run_cargo_metadata(manifest_path)
    records = records_from_metadata(metadata, include_dev=include_dev)
    logger.debug("Loaded %d package records", len(records))
    return records
