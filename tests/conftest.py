"""Shared test fixtures for cratevault."""

from __future__ import annotations

import io
import json
import tarfile
from collections.abc import Callable
from pathlib import Path
from typing import BinaryIO

import pytest

from cratevault.core.addressing import shard
from cratevault.core.corpus import Corpus
from cratevault.core.vault import Vault
from cratevault.transport import TarGzExtractor, TransportError


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def manifest_text(name: str = "foo", version: str = "0.0.0") -> str:
    return f'[package]\nname = "{name}"\nversion = "{version}"\n'


def build_crate_archive(
    name: str,
    version: str,
    files: dict[str, str] | None = None,
    *,
    prefix: str | None = None,
) -> bytes:
    """Build a ``.crate`` (gzipped tar) with everything under ``{name}-{version}/``."""
    files = files if files is not None else {"Cargo.toml": manifest_text(name, version)}
    top = prefix if prefix is not None else f"{name}-{version}"

    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as archive:
        for relative, content in files.items():
            data = content.encode("utf-8")
            info = tarfile.TarInfo(name=f"{top}/{relative}" if top else relative)
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeFetcher:
    """In-memory fetcher: serves prepared archives and records every call."""

    def __init__(self, archives: dict[tuple[str, str], bytes] | None = None) -> None:
        self.archives = dict(archives or {})
        self.calls: list[tuple[str, str]] = []
        self.fail_with: Exception | None = None

    def add(self, name: str, version: str, files: dict[str, str] | None = None) -> None:
        self.archives[(name, version)] = build_crate_archive(name, version, files)

    def fetch(self, name: str, version: str) -> BinaryIO:
        self.calls.append((name, version))
        if self.fail_with is not None:
            raise self.fail_with
        try:
            return io.BytesIO(self.archives[(name, version)])
        except KeyError:
            raise TransportError(f"no archive for {name} {version}") from None


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def vault_root(tmp_path: Path) -> Path:
    """Provide an empty vault root directory."""
    root = tmp_path / "vault"
    root.mkdir()
    return root


@pytest.fixture
def vault(vault_root: Path) -> Vault:
    return Vault(vault_root)


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def corpus(vault_root: Path, fetcher: FakeFetcher) -> Corpus:
    """Provide a Corpus wired to the fake fetcher and the real tar extractor."""
    return Corpus(vault_root, fetcher, TarGzExtractor())


@pytest.fixture
def make_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a Cargo manifest under a directory relative to a base."""

    def _factory(
        relative: str | Path,
        *,
        base: Path | None = None,
        name: str = "foo",
        version: str = "0.0.0",
        filename: str = "Cargo.toml",
        content: str | None = None,
    ) -> Path:
        directory = (base or tmp_path) / relative
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename
        path.write_text(content if content is not None else manifest_text(name, version))
        return path

    return _factory


@pytest.fixture
def make_index(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a crates.io-layout index from ``{name: [lines]}``."""
    def _factory(crates: dict[str, list[dict]], root: Path | None = None) -> Path:
        index_root = root or tmp_path / "index"
        index_root.mkdir(parents=True, exist_ok=True)
        (index_root / "config.json").write_text('{"dl": "https://static.crates.io/crates"}')
        for name, entries in crates.items():
            path = index_root / shard(name)
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("".join(json.dumps(entry) + "\n" for entry in entries))
        return index_root

    return _factory


@pytest.fixture
def crate_archive() -> Callable[..., bytes]:
    """Provide the ``.crate`` archive builder."""
    return build_crate_archive
