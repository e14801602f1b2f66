"""Vault — the on-disk store of materialized crate versions.

Storage layout: {root}/{shard(name)}/{version}/  (see ``addressing``)

The vault itself holds no state beyond its root.  Lookups are pure path
arithmetic; enumeration re-crawls the tree on every call.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

from cratevault.core import addressing
from cratevault.core.scanner import ManifestScanner, ScanError, ScanResult

# Private staging directories created by ``Corpus`` under the vault root.
STAGING_PREFIX = ".staging-"


class Vault:
    """Deterministically addressed store of crate trees.

    Parameters
    ----------
    root:
        Root directory of the store.  It is not created here; see
        ``Corpus`` for the component that writes into a vault.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str, version: str) -> Path:
        """Return the directory where *name* at *version* lives (or would live).

        Raises ``InvalidName`` / ``InvalidVersion`` for empty inputs.
        """
        return self._root / addressing.target(name, version)

    def enumerate(self, *, strict: bool = False) -> Iterator[ScanResult]:
        """Lazily yield every top-level crate version in the vault.

        In-flight staging directories are skipped.  Per-entry failures are
        yielded as ``ScanError`` values alongside the successes.  With
        ``strict=True`` the first failure is raised instead.
        """
        for item in ManifestScanner(self._root, exclude=(STAGING_PREFIX,)).scan():
            if strict and isinstance(item, ScanError):
                raise item
            yield item

    def __repr__(self) -> str:
        return f"Vault({str(self._root)!r})"
