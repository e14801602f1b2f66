"""Deterministic shard addressing for crate names and versions.

Layout (relative to a store root), for name ``n`` and version ``v``::

    len(n) == 1  ->  1/{n}/{v}
    len(n) == 2  ->  2/{n}/{v}
    len(n) == 3  ->  3/{n[0]}/{n}/{v}
    len(n) >= 4  ->  {n[0:2]}/{n[2:4]}/{n}/{v}

This is the crates.io index convention.  It bounds per-directory fan-out
without any case folding or character-set normalization.  Both functions
are pure: no I/O, no state.
"""

from __future__ import annotations

from pathlib import PurePosixPath

from cratevault.errors import CrateVaultError


class AddressError(CrateVaultError, ValueError):
    """Raised when a name or version cannot be turned into a store address."""


class InvalidName(AddressError):
    """Raised for an empty crate name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"invalid crate name: {name!r}")
        self.name = name


class InvalidVersion(AddressError):
    """Raised for an empty crate version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"invalid crate version: {version!r}")
        self.version = version


def shard(name: str) -> PurePosixPath:
    """Return the sharded directory for *name*, ending in the name itself."""
    if not name:
        raise InvalidName(name)

    if len(name) == 1:
        prefix = PurePosixPath("1")
    elif len(name) == 2:
        prefix = PurePosixPath("2")
    elif len(name) == 3:
        prefix = PurePosixPath("3", name[0])
    else:
        prefix = PurePosixPath(name[0:2], name[2:4])

    return prefix / name


def target(name: str, version: str) -> PurePosixPath:
    """Return the full artifact path for *name* at *version*."""
    path = shard(name)
    if not version:
        raise InvalidVersion(version)
    return path / version
