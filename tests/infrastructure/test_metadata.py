"""Tests for the cargo metadata source."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any

import pytest

from deps_order.domain.errors import MetadataError
from deps_order.domain.packages import PackageId
from deps_order.infrastructure import metadata as md
from deps_order.infrastructure.metadata import (
    load_records,
    read_metadata_file,
    records_from_metadata,
    run_cargo_metadata,
)
from tests.conftest import WORKSPACE, cargo_metadata


def _by_name(records: list[Any]) -> dict[str, Any]:
    return {r.id.name: r for r in records}


class TestRecordsFromMetadata:
    def test_workspace(self, tmp_path: Path) -> None:
        records = _by_name(records_from_metadata(cargo_metadata(tmp_path, WORKSPACE)))
        assert set(records) == {"app", "lib", "ext"}
        assert records["app"].is_workspace_member is True
        assert records["ext"].is_workspace_member is False
        assert records["app"].dependencies == (PackageId("lib", "0.2.0"),)
        assert records["lib"].dependencies == (PackageId("ext", "1.0.3"),)
        assert records["app"].source_path == tmp_path / "app"

    def test_dev_only_dependency_dropped(self, tmp_path: Path) -> None:
        doc = cargo_metadata(
            tmp_path,
            {
                "app": {"member": True, "deps": ["lib"], "dev_deps": ["testkit"]},
                "lib": {},
                "testkit": {"deps": ["lib"]},
            },
        )
        records = _by_name(records_from_metadata(doc))
        assert set(records) == {"app", "lib"}
        assert records["app"].dependencies == (PackageId("lib", "0.1.0"),)

    def test_dev_dependency_on_member_keeps_member(self, tmp_path: Path) -> None:
        doc = cargo_metadata(
            tmp_path,
            {"app": {"member": True, "dev_deps": ["util"]}, "util": {"member": True}},
        )
        records = _by_name(records_from_metadata(doc))
        assert set(records) == {"app", "util"}
        assert records["app"].dependencies == ()

    def test_include_dev(self, tmp_path: Path) -> None:
        doc = cargo_metadata(
            tmp_path,
            {"app": {"member": True, "dev_deps": ["testkit"]}, "testkit": {}},
        )
        records = _by_name(records_from_metadata(doc, include_dev=True))
        assert records["app"].dependencies == (PackageId("testkit", "0.1.0"),)

    def test_normal_and_dev_kind_is_kept(self, tmp_path: Path) -> None:
        doc = cargo_metadata(tmp_path, {"app": {"member": True, "deps": ["lib"]}, "lib": {}})
        doc["resolve"]["nodes"][0]["deps"][0]["dep_kinds"] = [
            {"kind": "dev", "target": None},
            {"kind": None, "target": None},
        ]
        records = _by_name(records_from_metadata(doc))
        assert records["app"].dependencies == (PackageId("lib", "0.1.0"),)

    def test_missing_dep_kinds_counts_as_normal(self, tmp_path: Path) -> None:
        doc = cargo_metadata(tmp_path, {"app": {"member": True, "deps": ["lib"]}, "lib": {}})
        del doc["resolve"]["nodes"][0]["deps"][0]["dep_kinds"]
        records = _by_name(records_from_metadata(doc))
        assert records["app"].dependencies == (PackageId("lib", "0.1.0"),)

    def test_no_resolve_section(self, tmp_path: Path) -> None:
        doc = cargo_metadata(tmp_path, WORKSPACE)
        doc["resolve"] = None
        records = records_from_metadata(doc)
        assert all(r.dependencies == () for r in records)

    def test_unknown_dependency_id(self, tmp_path: Path) -> None:
        doc = cargo_metadata(tmp_path, {"app": {"member": True}})
        doc["resolve"]["nodes"][0]["deps"].append({"name": "ghost", "pkg": "ghost 0.0.1"})
        with pytest.raises(MetadataError, match="ghost 0.0.1"):
            records_from_metadata(doc)

    def test_unknown_resolve_node(self, tmp_path: Path) -> None:
        doc = cargo_metadata(tmp_path, {"app": {"member": True}})
        doc["resolve"]["nodes"].append({"id": "ghost 0.0.1", "deps": []})
        with pytest.raises(MetadataError, match="unknown package id"):
            records_from_metadata(doc)

    def test_missing_packages_key(self) -> None:
        with pytest.raises(MetadataError, match="Malformed"):
            records_from_metadata({"workspace_members": []})


class TestReadMetadataFile:
    def test_reads_document(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"packages": []}))
        assert read_metadata_file(path) == {"packages": []}

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text("{not json")
        with pytest.raises(MetadataError, match="Invalid JSON"):
            read_metadata_file(path)

    def test_not_an_object(self, tmp_path: Path) -> None:
        path = tmp_path / "m.json"
        path.write_text("[]")
        with pytest.raises(MetadataError, match="expected a JSON object"):
            read_metadata_file(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(MetadataError, match="Cannot read"):
            read_metadata_file(tmp_path / "absent.json")


class TestRunCargoMetadata:
    def test_builds_command(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout='{"packages": []}', stderr="")

        monkeypatch.delenv("CARGO", raising=False)
        monkeypatch.setattr(md.subprocess, "run", fake_run)
        manifest = tmp_path / "Cargo.toml"
        assert run_cargo_metadata(manifest) == {"packages": []}
        assert calls == [
            ["cargo", "metadata", "--format-version", "1", "--manifest-path", str(manifest)]
        ]

    def test_honors_cargo_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls: list[list[str]] = []

        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, stdout="{}", stderr="")

        monkeypatch.setenv("CARGO", "/opt/rust/bin/cargo")
        monkeypatch.setattr(md.subprocess, "run", fake_run)
        run_cargo_metadata()
        assert calls[0][0] == "/opt/rust/bin/cargo"

    def test_nonzero_exit(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
            return subprocess.CompletedProcess(
                cmd, 101, stdout="", stderr="error: could not find `Cargo.toml`\n"
            )

        monkeypatch.setattr(md.subprocess, "run", fake_run)
        with pytest.raises(MetadataError, match="status 101.*Cargo.toml"):
            run_cargo_metadata()

    def test_cargo_missing(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CARGO", str(tmp_path / "no-such-cargo"))
        with pytest.raises(MetadataError, match="Failed to run"):
            run_cargo_metadata()


def test_load_records_from_file(tmp_path: Path) -> None:
    path = tmp_path / "metadata.json"
    path.write_text(json.dumps(cargo_metadata(tmp_path, WORKSPACE)))
    records = load_records(metadata_file=path)
    assert {r.id.name for r in records} == {"app", "lib", "ext"}
