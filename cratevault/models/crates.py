"""Crate identity models recovered from materialized package trees."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict


class CrateVersion(BaseModel):
    """One materialized crate tree, as declared by its own manifest.

    ``path`` is the location of the top-level ``Cargo.toml`` that was
    read; the crate tree is its parent directory.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    path: Path

    @property
    def root(self) -> Path:
        """Directory holding the manifest."""
        return self.path.parent


class ManifestPackage(BaseModel):
    """The ``[package]`` table of a Cargo manifest (only what we read)."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    version: str


class Manifest(BaseModel):
    """Transient parsed view of a Cargo manifest."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    package: ManifestPackage

    @property
    def name(self) -> str:
        return self.package.name

    @property
    def version(self) -> str:
        return self.package.version
