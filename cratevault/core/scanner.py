"""Top-level manifest discovery over a tree of materialized crates.

A crate tarball can carry nested manifests (examples, vendored
dependencies, test fixtures).  Only the *first* manifest met on any path
from the scan root identifies a crate; everything beneath it belongs to
that crate.

The walk is a single depth-first pass driven by an explicit stack.  Each
directory's entries are ordered manifests-first, so the directory is
claimed before any of its subdirectories is considered, and claimed
directories (and anything beneath them) are never descended into.

Errors are values, not exceptions: a walk, read or parse failure is
yielded in place of the entry it concerns and the walk carries on.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Iterator
from pathlib import Path

from pydantic import ValidationError

from cratevault.errors import CrateVaultError
from cratevault.models.crates import CrateVersion, Manifest

logger = logging.getLogger(__name__)

MANIFEST_NAMES: tuple[str, ...] = ("Cargo.toml", "cargo.toml")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class ScanError(CrateVaultError):
    """A per-entry failure reported inside a scan sequence."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"{message}: {path}")
        self.path = path


class WalkError(ScanError):
    """A directory could not be listed or an entry could not be inspected."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(path, f"walking vault directories ({cause.strerror or cause})")
        self.__cause__ = cause


class ManifestReadError(ScanError):
    """A manifest could not be opened or decoded."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(path, f"reading manifest ({cause})")
        self.__cause__ = cause


class ManifestParseError(ScanError):
    """A manifest is not valid TOML or lacks ``package.name``/``package.version``."""

    def __init__(self, path: Path, cause: Exception) -> None:
        super().__init__(path, "parsing manifest")
        self.__cause__ = cause


ScanResult = CrateVersion | ScanError


# ---------------------------------------------------------------------------
# Claimed prefixes
# ---------------------------------------------------------------------------

class ClaimedPrefixes:
    """Directories known to hold a top-level manifest during one scan."""

    def __init__(self) -> None:
        self._claimed: set[Path] = set()

    def claim(self, directory: Path) -> None:
        self._claimed.add(directory)

    def covers(self, path: Path) -> bool:
        """True if *path* or any of its ancestors has been claimed."""
        if path in self._claimed:
            return True
        return any(parent in self._claimed for parent in path.parents)

    def __len__(self) -> int:
        return len(self._claimed)


# ---------------------------------------------------------------------------
# Walk
# ---------------------------------------------------------------------------

def is_manifest(entry: os.DirEntry) -> bool:
    """Match ``Cargo.toml`` / ``cargo.toml`` regular files, nothing else."""
    if entry.name not in MANIFEST_NAMES:
        return False
    return entry.is_file(follow_symlinks=False)


def _list_directory(directory: Path) -> list[os.DirEntry]:
    with os.scandir(directory) as it:
        entries = list(it)
    manifests = {id(entry) for entry in entries if is_manifest(entry)}
    return sorted(entries, key=lambda entry: (id(entry) not in manifests, entry.name))


def top_level_manifests(
    root: Path, *, exclude: tuple[str, ...] = ()
) -> Iterator[Path | WalkError]:
    """Yield the path of every top-level manifest under *root*.

    Direct children of *root* whose name starts with one of the *exclude*
    prefixes are never entered; deeper directories are not filtered.

    Directory listing failures are yielded as ``WalkError`` values.  At
    most one manifest is reported per directory; ``Cargo.toml`` wins over
    ``cargo.toml`` when both are present.
    """
    root = Path(root)
    claimed = ClaimedPrefixes()
    stack: list[Path] = [root]

    while stack:
        directory = stack.pop()
        if claimed.covers(directory):
            continue

        try:
            entries = _list_directory(directory)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", directory, exc)
            yield WalkError(directory, exc)
            continue

        subdirectories: list[Path] = []
        for entry in entries:
            path = Path(entry.path)
            try:
                if is_manifest(entry):
                    if claimed.covers(directory):
                        logger.debug("Skipping second manifest %s", path)
                        continue
                    claimed.claim(directory)
                    yield path
                elif entry.is_dir(follow_symlinks=False):
                    if directory == root and entry.name.startswith(exclude):
                        continue
                    subdirectories.append(path)
            except OSError as exc:
                yield WalkError(path, exc)

        if claimed.covers(directory):
            continue

        # Reverse so the lexically first subdirectory is popped first.
        stack.extend(reversed(subdirectories))


def read_manifest(path: Path) -> Manifest:
    """Read and parse a single manifest file.

    Raises ``ManifestReadError`` or ``ManifestParseError``.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(path, exc) from exc

    try:
        return Manifest.model_validate(tomllib.loads(text))
    except (tomllib.TOMLDecodeError, ValidationError) as exc:
        raise ManifestParseError(path, exc) from exc


# ---------------------------------------------------------------------------
# Scanner
# ---------------------------------------------------------------------------

class ManifestScanner:
    """Produces the crate versions materialized beneath a root directory.

    Parameters
    ----------
    root:
        Directory to crawl.  Every call to :meth:`scan` starts over from
        here; nothing is cached between scans.
    exclude:
        Name prefixes of root-level directories that are never descended
        into.
    """

    def __init__(self, root: Path, *, exclude: tuple[str, ...] = ()) -> None:
        self._root = Path(root)
        self._exclude = tuple(exclude)

    @property
    def root(self) -> Path:
        return self._root

    def scan(self) -> Iterator[ScanResult]:
        """Lazily yield a ``CrateVersion`` or ``ScanError`` per top-level manifest."""
        found = 0
        failed = 0
        for item in top_level_manifests(self._root, exclude=self._exclude):
            if isinstance(item, ScanError):
                failed += 1
                yield item
                continue

            try:
                manifest = read_manifest(item)
            except ScanError as exc:
                logger.warning("%s", exc)
                failed += 1
                yield exc
                continue

            found += 1
            yield CrateVersion(name=manifest.name, version=manifest.version, path=item)

        logger.info(
            "Scanned %s: %d crate versions, %d errors", self._root, found, failed
        )

    def __iter__(self) -> Iterator[ScanResult]:
        return self.scan()
