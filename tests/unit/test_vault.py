"""Tests for the Vault facade — path resolution and enumeration."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from cratevault.core.addressing import InvalidName, InvalidVersion
from cratevault.core.scanner import ManifestParseError, ScanError
from cratevault.core.vault import STAGING_PREFIX, Vault
from cratevault.models.crates import CrateVersion


class TestResolve:
    def test_resolve_joins_root(self, vault: Vault, vault_root: Path):
        assert vault.resolve("serde", "1.0.188") == vault_root / "se" / "rd" / "serde" / "1.0.188"
        assert vault.resolve("cc", "1.0.0") == vault_root / "2" / "cc" / "1.0.0"

    def test_resolve_does_no_io(self, tmp_path: Path):
        vault = Vault(tmp_path / "does-not-exist")
        assert vault.resolve("a", "1") == tmp_path / "does-not-exist" / "1" / "a" / "1"
        assert not (tmp_path / "does-not-exist").exists()

    def test_resolve_validates(self, vault: Vault):
        with pytest.raises(InvalidName):
            vault.resolve("", "1.0.0")
        with pytest.raises(InvalidVersion):
            vault.resolve("serde", "")


class TestEnumerate:
    def test_enumerates_materialized_crates(
        self, vault: Vault, make_manifest: Callable[..., Path]
    ):
        serde = make_manifest(
            vault.resolve("serde", "1.0.0"), name="serde", version="1.0.0"
        )
        make_manifest(
            vault.resolve("serde", "1.0.0") / "serde_derive_internals",
            name="serde_derive_internals",
        )
        libc = make_manifest(vault.resolve("libc", "0.2.1"), name="libc", version="0.2.1")

        found = sorted(vault.enumerate(), key=lambda cv: cv.name)
        assert found == [
            CrateVersion(name="libc", version="0.2.1", path=libc),
            CrateVersion(name="serde", version="1.0.0", path=serde),
        ]

    def test_identity_comes_from_manifest_not_path(
        self, vault: Vault, make_manifest: Callable[..., Path]
    ):
        make_manifest(vault.resolve("abcd", "1.0.0"), name="renamed", version="9.9.9")
        (found,) = list(vault.enumerate())
        assert (found.name, found.version) == ("renamed", "9.9.9")

    def test_staging_directories_skipped(
        self, vault: Vault, vault_root: Path, make_manifest: Callable[..., Path]
    ):
        make_manifest(vault_root / f"{STAGING_PREFIX}xyz" / "foo-1.0.0")
        assert list(vault.enumerate()) == []

    def test_staging_prefix_only_skipped_at_root(
        self, vault: Vault, vault_root: Path, make_manifest: Callable[..., Path]
    ):
        make_manifest(vault_root / f"{STAGING_PREFIX}xyz" / "foo-1.0.0")
        kept = make_manifest(
            vault.resolve("foo", f"{STAGING_PREFIX}1"), name="foo", version=f"{STAGING_PREFIX}1"
        )
        (found,) = list(vault.enumerate())
        assert found.path == kept

    def test_errors_are_yielded(self, vault: Vault, make_manifest: Callable[..., Path]):
        make_manifest(vault.resolve("bad", "1.0.0"), content="not toml [")
        (item,) = list(vault.enumerate())
        assert isinstance(item, ManifestParseError)

    def test_strict_raises(self, vault: Vault, make_manifest: Callable[..., Path]):
        make_manifest(vault.resolve("bad", "1.0.0"), content="not toml [")
        with pytest.raises(ScanError):
            list(vault.enumerate(strict=True))

    def test_no_caching_between_calls(
        self, vault: Vault, make_manifest: Callable[..., Path]
    ):
        assert list(vault.enumerate()) == []
        make_manifest(vault.resolve("rand", "0.8.5"), name="rand", version="0.8.5")
        assert [cv.name for cv in vault.enumerate()] == ["rand"]
