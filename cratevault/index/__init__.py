"""Read access to a local checkout of a crates.io-layout registry index."""

from cratevault.index.registry import (
    CrateNotFound,
    IndexIOError,
    IndexParseError,
    RegistryIndex,
    RegistryIndexError,
)

__all__ = [
    "CrateNotFound",
    "IndexIOError",
    "IndexParseError",
    "RegistryIndex",
    "RegistryIndexError",
]
