"""Tests for the Pydantic data models — immutability, aliases, derived values."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from cratevault.models import (
    CrateVersion,
    IndexEntry,
    Manifest,
    PopulateFailure,
    PopulateReport,
)


class TestCrateVersion:
    def test_frozen(self):
        cv = CrateVersion(name="serde", version="1.0.0", path=Path("/v/se/rd/serde/1.0.0/Cargo.toml"))
        with pytest.raises(ValidationError):
            cv.name = "other"

    def test_root_is_manifest_parent(self):
        cv = CrateVersion(name="a", version="1", path=Path("/v/1/a/1/Cargo.toml"))
        assert cv.root == Path("/v/1/a/1")


class TestManifest:
    def test_exposes_name_and_version(self):
        manifest = Manifest.model_validate(
            {"package": {"name": "x", "version": "0.1.0", "edition": "2021"}, "lib": {}}
        )
        assert (manifest.name, manifest.version) == ("x", "0.1.0")

    def test_requires_package(self):
        with pytest.raises(ValidationError):
            Manifest.model_validate({"workspace": {}})


class TestIndexEntry:
    def test_vers_alias(self):
        entry = IndexEntry.model_validate({"name": "x", "vers": "1.2.3"})
        assert entry.version == "1.2.3"
        assert entry.yanked is False

    def test_unknown_fields_ignored(self):
        entry = IndexEntry.model_validate({"name": "x", "vers": "1", "links": "z", "v": 2})
        assert entry.name == "x"

    @pytest.mark.parametrize(
        "version", ["1.0.0", "0.1.0-alpha.1", "1.0.0+build.5", "1.0.0-rc.1+sha.abc"]
    )
    def test_semver_versions_accepted(self, version: str):
        assert IndexEntry.model_validate({"name": "x", "vers": version}).version == version

    @pytest.mark.parametrize("version", ["../fox/1.0.0", "1/2", "..", "1..0", "1.0.", "a\\b"])
    def test_path_like_versions_rejected(self, version: str):
        with pytest.raises(ValidationError):
            IndexEntry.model_validate({"name": "x", "vers": version})

    @pytest.mark.parametrize("name", ["../x", "a.b", "", "x/y"])
    def test_path_like_names_rejected(self, name: str):
        with pytest.raises(ValidationError):
            IndexEntry.model_validate({"name": name, "vers": "1.0.0"})


class TestPopulateReport:
    def test_ok_and_total(self):
        report = PopulateReport(populated=[Path("/a")])
        assert report.ok
        report.failures.append(
            PopulateFailure(name="b", version="1", error_type="TransportError", message="boom")
        )
        assert not report.ok
        assert report.total == 2
